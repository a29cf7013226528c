import re

import pytest

from urlshortener.services.codes import BASE62_ALPHABET, generate_short_code

_BASE62_RE = re.compile(r"^[0-9a-zA-Z]+$")


def test_alphabet_is_case_sensitive_base62():
    assert len(BASE62_ALPHABET) == 62
    assert len(set(BASE62_ALPHABET)) == 62


def test_short_code_has_only_base62_chars():
    code = generate_short_code()
    assert _BASE62_RE.fullmatch(code)
    assert set(code).issubset(set(BASE62_ALPHABET))


def test_short_code_default_length_is_seven():
    assert len(generate_short_code()) == 7


def test_short_code_length():
    assert len(generate_short_code(6)) == 6
    assert len(generate_short_code(8)) == 8


def test_short_codes_vary():
    codes = {generate_short_code() for _ in range(200)}
    assert len(codes) > 190


@pytest.mark.parametrize("bad_length", [0, -1])
def test_short_code_rejects_non_positive_length(bad_length: int):
    with pytest.raises(ValueError):
        generate_short_code(bad_length)
