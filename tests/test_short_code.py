"""Tests for the short code generator."""

from shortlink.core.validators import sanitize_short_code
from shortlink.services.short_code import (
    ALPHABET,
    MAX_LENGTH,
    MAX_NUMBER,
    MIN_LENGTH,
    MIN_NUMBER,
    ShortCodeGenerator,
)


def test_generated_codes_match_short_code_format(generator):
    for _ in range(200):
        code = generator.generate()
        assert MIN_LENGTH <= len(code) <= MAX_LENGTH
        assert all(char in ALPHABET for char in code)
        assert sanitize_short_code(code) == code


def test_encode_is_deterministic_per_salt():
    first = ShortCodeGenerator("salt-a")
    second = ShortCodeGenerator("salt-a")
    other = ShortCodeGenerator("salt-b")

    assert first.encode(123456) == second.encode(123456)
    assert first.encode(123456) != other.encode(123456)


def test_encode_pads_small_numbers():
    assert len(ShortCodeGenerator().encode(MIN_NUMBER)) >= MIN_LENGTH


def test_encode_never_exceeds_max_length():
    generator = ShortCodeGenerator()
    assert len(generator.encode(MAX_NUMBER)) <= MAX_LENGTH


def test_codes_are_not_sequential(generator):
    codes = {generator.generate() for _ in range(100)}
    # random draws from ~10^8 numbers; a repeat here would be astronomically unlikely
    assert len(codes) == 100
