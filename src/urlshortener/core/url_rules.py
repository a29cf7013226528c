from __future__ import annotations
from typing import Annotated, Optional

from pydantic import AnyUrl, TypeAdapter, UrlConstraints
from pydantic import ValidationError as PydanticValidationError

from urlshortener.core.errors import ValidationError

# AnyUrl rather than HttpUrl: HttpUrl caps length at 2083 characters
_HTTP_URL = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)

INVALID_URL_MESSAGE = "Invalid URL. Use http:// or https:// scheme."


def _has_control_chars(value: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in value)


def validate_original_url(value: Optional[str]) -> str:
    """
    Returns the URL exactly as submitted if it is an absolute http(s) URL.

    The pydantic type is only used as the checker; its normalised form
    (trailing slash, lowercased host) is discarded so dedup stays an exact
    match. The URL parser silently drops surrounding whitespace and
    tabs/newlines, so those are rejected up front; otherwise the stored
    string would not be the URL that was validated.
    """
    if not value:
        raise ValidationError("originalUrl is required")

    if value != value.strip() or _has_control_chars(value):
        raise ValidationError(INVALID_URL_MESSAGE)

    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError:
        raise ValidationError(INVALID_URL_MESSAGE) from None

    return value


def build_short_url(base_url: str, short_code: str) -> str:
    return f"{base_url.rstrip('/')}/{short_code}"
