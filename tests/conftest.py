import pathlib
import sys

import pytest
from pydantic import SecretStr

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from blinda.config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path: pathlib.Path) -> Settings:
    """Settings with fake credentials and fast polling, isolated from `.env`."""

    return Settings(
        _env_file=None,
        elevenlabs_api_key=SecretStr("el-key"),
        hyperbrowser_api_key=SecretStr("hb-key"),
        openrouter_api_key=SecretStr("or-key"),
        browser_poll_interval=0.001,
        browser_timeout=5,
        logging_settings_path=tmp_path / "logging_settings.conf",
        log_dir=tmp_path / "logs",
    )
