import pytest

from flashcards_app.utils.text import hash_source_text, validate_source_text


@pytest.mark.parametrize("length", [1000, 1001, 5000, 9999, 10000])
def test_lengths_within_bounds_are_valid(length):
    result = validate_source_text("a" * length)
    assert result.is_valid is True
    assert result.error is None


def test_too_short_names_the_minimum():
    result = validate_source_text("a" * 999)
    assert result.is_valid is False
    assert result.error == "Text must be at least 1000 characters (current: 999)"


def test_too_long_names_the_maximum():
    result = validate_source_text("a" * 10001)
    assert result.is_valid is False
    assert result.error == "Text must be no more than 10000 characters (current: 10001)"


def test_empty_text_is_too_short():
    assert "at least 1000" in validate_source_text("").error


def test_hash_is_sha256_hex():
    assert hash_source_text("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert hash_source_text("abc") != hash_source_text("abd")
