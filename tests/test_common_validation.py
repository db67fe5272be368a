"""Tests for shared validation helpers."""

import pytest

from cstream_ingest.common.validation import (
    is_valid_record_id,
    is_valid_url,
    require_positive,
)


def test_require_positive_accepts_positive_int() -> None:
    assert require_positive(5, name="value") == 5


@pytest.mark.parametrize("bad", [0, -1, -100])
def test_require_positive_rejects_non_positive_int(bad: int) -> None:
    with pytest.raises(ValueError, match="value must be positive"):
        require_positive(bad, name="value")


@pytest.mark.parametrize("bad_type", [1.5, "1", None, object(), True])
def test_require_positive_enforces_int_type(bad_type: object) -> None:
    with pytest.raises(TypeError, match="value must be an int"):
        require_positive(bad_type, name="value")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "url",
    [
        "https://sibnet.ru/v/1",
        "http://localhost:8080/embed?id=3",
        "https://video.sibnet.ru/shell.php?videoid=4881",
        "ftp://files.example.com/ep1.mp4",
    ],
)
def test_is_valid_url_accepts_absolute_urls(url: str) -> None:
    assert is_valid_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "",
        None,
        "sibnet.ru/v/1",
        "/relative/path",
        "https://",
        "mailto:someone@example.com",
        "https://exa mple.com/1",
        "https://example.com:99999/",
        "https://[::1/",
        42,
    ],
)
def test_is_valid_url_rejects_malformed_values(url: object) -> None:
    assert not is_valid_url(url)


def test_is_valid_record_id() -> None:
    assert is_valid_record_id("3f2b8c1e-9a4d-4c1b-8f6e-0a1b2c3d4e5f")
    assert is_valid_record_id("3F2B8C1E-9A4D-4C1B-8F6E-0A1B2C3D4E5F")
    assert not is_valid_record_id("3f2b8c1e-9a4d-4c1b-8f6e-0a1b2c3d4e5")
    assert not is_valid_record_id("3f2b8c1e-9a4d-4c1b-8f6e-0a1b2c3d4e5f\n")
    assert not is_valid_record_id("42")
    assert not is_valid_record_id(None)
