import pytest

from urlshortener.core.errors import ValidationError
from urlshortener.core.url_rules import build_short_url, validate_original_url
from urlshortener.schemas.links import ShortenRequest


@pytest.mark.parametrize(
    "bad_url",
    [
        "example.com",
        "ftp://example.com",
        "ftp://x",
        "file:///etc/passwd",
        "javascript:alert(1)",
        "://missing.scheme",
        "http://",
        "not a url",
    ],
)
def test_rejects_non_http_https_urls(bad_url: str):
    with pytest.raises(ValidationError) as exc_info:
        validate_original_url(bad_url)
    assert "http://" in exc_info.value.message


@pytest.mark.parametrize("missing", [None, ""])
def test_rejects_missing_url(missing):
    with pytest.raises(ValidationError) as exc_info:
        validate_original_url(missing)
    assert exc_info.value.message == "originalUrl is required"


@pytest.mark.parametrize(
    "good_url",
    [
        "http://example.com",
        "https://example.com/path?q=1",
        "http://localhost:5000/x",
        "https://Example.COM",
    ],
)
def test_accepts_http_https_urls_unchanged(good_url: str):
    assert validate_original_url(good_url) == good_url


def test_shorten_request_reads_camel_case_field():
    req = ShortenRequest.model_validate({"originalUrl": "https://example.com"})
    assert req.original_url == "https://example.com"


def test_shorten_request_url_is_optional():
    assert ShortenRequest.model_validate({}).original_url is None


@pytest.mark.parametrize("base", ["http://sho.rt", "http://sho.rt/", "http://sho.rt//"])
def test_build_short_url_strips_trailing_slashes(base: str):
    assert build_short_url(base, "AbC1234") == "http://sho.rt/AbC1234"


def test_accepts_url_longer_than_2083_chars():
    url = "https://example.com/?q=" + "a" * 2100
    assert validate_original_url(url) == url


@pytest.mark.parametrize(
    "padded_url",
    [
        "  https://example.com/x ",
        " https://example.com/x",
        "https://example.com/x ",
        "https://example.com/x\n",
        "\thttps://example.com/x",
        "https://exa\tmple.com/x",
        "https://example.com/a\nb",
        "https://example.com/\x00",
        "https://example.com/\x7f",
    ],
)
def test_rejects_surrounding_whitespace_and_control_chars(padded_url: str):
    with pytest.raises(ValidationError):
        validate_original_url(padded_url)
