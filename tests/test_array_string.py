import pytest

from inlet.array_string import ARRAY_STRING_SIZE, ArrayString


def test_array_string_debug():
    a = ArrayString("Hello, World!")
    assert repr(a) == '"Hello, World!"'


def test_array_string_inner():
    a = ArrayString("Hello, World!")
    expected = bytearray(128)
    expected[:13] = bytes([72, 101, 108, 108, 111, 44, 32, 87, 111, 114, 108, 100, 33])
    assert bytes(a) == bytes(expected)


def test_array_string_fails_to_convert_long_string():
    with pytest.raises(ValueError):
        ArrayString(
            "This is a very long string that will cause the conversion method to panic "
            "as it is exactly one character too long for the method."
        )


def test_exactly_full_string_is_accepted():
    a = ArrayString("x" * ARRAY_STRING_SIZE)
    assert str(a) == "x" * 128
    assert len(bytes(a)) == 128


def test_length_counts_encoded_bytes():
    assert str(ArrayString("\u00e9" * 64)) == "\u00c3\u00a9" * 64
    with pytest.raises(ValueError):
        ArrayString("\u00e9" * 65)


def test_bytes_become_characters_one_by_one():
    assert str(ArrayString("\u00e9")) == "\u00c3\u00a9"


def test_empty():
    empty = ArrayString.empty()
    assert empty.is_empty()
    assert bytes(empty) == bytes(128)
    assert str(empty) == ""
    assert repr(empty) == '""'
    assert not ArrayString("a").is_empty()


def test_from_bytes_round_trip():
    original = ArrayString("consumer1")
    assert ArrayString.from_bytes(bytes(original)) == original
    assert ArrayString.from_bytes(b"consumer1") == original


def test_from_bytes_too_long():
    with pytest.raises(ValueError):
        ArrayString.from_bytes(bytes(129))


def test_str_stops_at_first_nul():
    value = ArrayString.from_bytes(b"abc\0def")
    assert str(value) == "abc"


def test_equality_and_hash():
    assert ArrayString("topic") == ArrayString("topic")
    assert not ArrayString("topic") == ArrayString("other")
    assert hash(ArrayString("topic")) == hash(ArrayString("topic"))
    assert len({ArrayString("a"), ArrayString("a"), ArrayString("b")}) == 2


def test_requires_str():
    with pytest.raises(TypeError):
        ArrayString(b"bytes")