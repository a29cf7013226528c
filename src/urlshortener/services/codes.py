import secrets
import string

BASE62_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
DEFAULT_CODE_LENGTH = 7


def generate_short_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Random base62 code. Not unique on its own; see services.links.shorten_url."""
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))
