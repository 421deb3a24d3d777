import pytest

from blinda.tasks import NAVIGATE_PREFIX, canonicalize_url, derive_task


@pytest.mark.parametrize(
    "text",
    [
        "click the login button",
        "scroll down",
        "example.com",
        "localhost:3000",
        "mailto:someone@example.com",
        "open https://example.com please",
        "   ",
        "what is on this page?",
    ],
)
def test_non_url_text_is_used_verbatim(text: str) -> None:
    assert derive_task(text) == text


def test_absolute_url_becomes_navigation_task() -> None:
    assert derive_task("https://example.com") == "Navigate to https://example.com/"


@pytest.mark.parametrize(
    "raw, canonical",
    [
        ("https://example.com", "https://example.com/"),
        ("HTTPS://Example.COM/Path?q=1", "https://example.com/Path?q=1"),
        ("http://example.com:80/a", "http://example.com/a"),
        ("  https://news.ycombinator.com/  ", "https://news.ycombinator.com/"),
    ],
)
def test_canonicalization(raw: str, canonical: str) -> None:
    assert canonicalize_url(raw) == canonical
    assert derive_task(raw) == NAVIGATE_PREFIX + canonical


@pytest.mark.parametrize(
    "raw",
    ["https://example.com", "HTTP://WWW.Example.org/docs/", "https://example.com/a b"],
)
def test_canonicalization_is_idempotent(raw: str) -> None:
    canonical = canonicalize_url(raw)
    if canonical is None:
        assert derive_task(raw) == raw
        return
    assert canonicalize_url(canonical) == canonical
    assert derive_task(canonical) == derive_task(raw)
