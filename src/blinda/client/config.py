from __future__ import annotations

import argparse
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .audio import DEFAULT_PLAYER_COMMAND
from .session_store import DEFAULT_SESSION_FILE


@dataclass(frozen=True)
class ClientConfig:
    server_url: str = "http://localhost:8000"
    session_file: Path = DEFAULT_SESSION_FILE
    input_device: int | str | None = None
    sample_rate: int = 16_000
    channels: int = 1
    player_command: tuple[str, ...] = field(default=DEFAULT_PLAYER_COMMAND)
    request_timeout: float = 300.0
    log_level: str = "WARNING"

    @classmethod
    def from_env_and_args(cls, argv: Optional[Sequence[str]] = None) -> ClientConfig:
        parser = argparse.ArgumentParser(
            description="Blinda - browse the web with your voice",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Keys (type then press Enter):
  <Enter>   start / stop recording
  s         stop speaking
  n         forget the browser session
  q         quit

Environment Variables:
  BLINDA_SERVER, BLINDA_SESSION_FILE, BLINDA_INPUT_DEVICE, BLINDA_SAMPLE_RATE,
  BLINDA_PLAYER, BLINDA_TIMEOUT, BLINDA_LOG_LEVEL
""",
        )
        parser.add_argument("--server", "-s", default=None, help="Backend server URL")
        parser.add_argument("--session-file", default=None)
        parser.add_argument("--input-device", default=None)
        parser.add_argument("--sample-rate", type=int, default=None)
        parser.add_argument("--channels", type=int, default=None)
        parser.add_argument("--player", default=None, help="Audio player command line")
        parser.add_argument("--timeout", type=float, default=None)
        parser.add_argument("--log-level", default=None)
        args = parser.parse_args(argv)

        def _resolve(env_key: str, arg_val, default, coerce: type = str):
            if arg_val is not None:
                return arg_val
            env = os.environ.get(env_key)
            if env is not None:
                try:
                    return coerce(env)
                except (ValueError, TypeError) as exc:
                    raise ValueError(f"invalid value for {env_key}: {env!r}") from exc
            return default

        def _resolve_device(env_key: str, arg_val):
            raw = arg_val if arg_val is not None else os.environ.get(env_key)
            if raw is None:
                return None
            try:
                return int(raw)
            except ValueError:
                return raw

        player = _resolve("BLINDA_PLAYER", args.player, None)
        return cls(
            server_url=_resolve("BLINDA_SERVER", args.server, cls.server_url),
            session_file=Path(
                _resolve("BLINDA_SESSION_FILE", args.session_file, DEFAULT_SESSION_FILE)
            ),
            input_device=_resolve_device("BLINDA_INPUT_DEVICE", args.input_device),
            sample_rate=_resolve("BLINDA_SAMPLE_RATE", args.sample_rate, cls.sample_rate, int),
            channels=_resolve("BLINDA_CHANNELS", args.channels, cls.channels, int),
            player_command=tuple(shlex.split(player)) if player else DEFAULT_PLAYER_COMMAND,
            request_timeout=_resolve(
                "BLINDA_TIMEOUT", args.timeout, cls.request_timeout, float
            ),
            log_level=_resolve("BLINDA_LOG_LEVEL", args.log_level, cls.log_level).upper(),
        )
