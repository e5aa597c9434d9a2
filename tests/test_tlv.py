import pytest

from asnber.tlv import (
    DecodeError,
    NeedMoreData,
    TagClass,
    fetch_length,
    fetch_tag,
    is_constructed,
    make_tag,
    serialize_length,
    serialize_tag,
    skip_length,
    tag_class,
    tag_string,
    tag_value,
)


@pytest.mark.parametrize("klass", list(TagClass))
@pytest.mark.parametrize("number", [0, 5, 30, 31, 1000])
def test_make_tag_round_trip(klass, number):
    tag = make_tag(klass, number)
    assert tag_class(tag) == klass
    assert tag_value(tag) == number


def test_make_tag_rejects_negative():
    with pytest.raises(ValueError):
        make_tag(TagClass.CONTEXT, -1)


def test_tag_string_forms():
    assert tag_string(make_tag(TagClass.UNIVERSAL, 16)) == "[UNIVERSAL 16]"
    assert tag_string(make_tag(TagClass.CONTEXT, 5)) == "[5]"
    assert tag_string(make_tag(TagClass.PRIVATE, 0)) == "[PRIVATE 0]"
    assert tag_string(make_tag(TagClass.APPLICATION, 7)) == "[APPLICATION 7]"


@pytest.mark.parametrize("klass", list(TagClass))
@pytest.mark.parametrize("number", [0, 30, 31, 127, 128, 16383, 16384, 2**20])
def test_tag_serialize_fetch_round_trip(klass, number):
    tag = make_tag(klass, number)
    encoded = serialize_tag(tag)
    assert fetch_tag(encoded + b"\x05\x00") == (tag, len(encoded))


def test_low_tag_numbers_take_one_octet():
    assert len(serialize_tag(make_tag(TagClass.CONTEXT, 30))) == 1
    assert len(serialize_tag(make_tag(TagClass.CONTEXT, 31))) > 1


def test_fetch_tag_empty_wants_more():
    with pytest.raises(NeedMoreData):
        fetch_tag(b"")


def test_fetch_tag_truncated_wants_more():
    encoded = serialize_tag(make_tag(TagClass.APPLICATION, 2**20))
    with pytest.raises(NeedMoreData):
        fetch_tag(encoded[:-1])


def test_fetch_tag_overflow_fails():
    with pytest.raises(DecodeError):
        fetch_tag(b"\x1f" + b"\xff" * 5 + b"\x01")


def test_is_constructed():
    constructed = bytearray(serialize_tag(make_tag(TagClass.UNIVERSAL, 16)))
    constructed[0] |= 0x20
    assert is_constructed(constructed[0]) is True
    assert is_constructed(serialize_tag(make_tag(TagClass.UNIVERSAL, 4))[0]) is False


@pytest.mark.parametrize("length", [0, 1, 127, 128, 255, 256, 65535, 2**32])
def test_length_round_trip(length):
    encoded = serialize_length(length)
    assert fetch_length(False, encoded + b"\x00") == (length, len(encoded))


def test_short_lengths_take_one_octet():
    assert len(serialize_length(127)) == 1
    assert len(serialize_length(128)) > 1


def test_indefinite_length_for_constructed():
    assert fetch_length(True, b"\x80") == (None, 1)


def test_reserved_length_octet_fails():
    with pytest.raises(DecodeError):
        fetch_length(False, b"\xff")


def test_fetch_length_empty_wants_more():
    with pytest.raises(NeedMoreData):
        fetch_length(False, b"")


def test_fetch_length_truncated_wants_more():
    encoded = serialize_length(65535)
    with pytest.raises(NeedMoreData):
        fetch_length(False, encoded[:-1])


def test_fetch_length_overflow_fails():
    with pytest.raises(DecodeError):
        fetch_length(False, b"\x89" + b"\xff" * 9)


def test_serialize_length_rejects_negative():
    with pytest.raises(ValueError):
        serialize_length(-1)


def _primitive(payload):
    return serialize_tag(make_tag(TagClass.UNIVERSAL, 4)) + serialize_length(len(payload)) + payload


def test_skip_definite_length():
    value = serialize_length(3) + b"abc"
    assert skip_length(False, value + b"tail") == len(value)


def test_skip_definite_length_truncated():
    value = serialize_length(3) + b"abc"
    with pytest.raises(NeedMoreData):
        skip_length(False, value[:-1])


def test_skip_indefinite_length():
    value = b"\x80" + _primitive(b"hi") + _primitive(b"there") + b"\x00\x00"
    assert skip_length(True, value + b"junk") == len(value)


def test_skip_nested_indefinite_length():
    inner_tag = bytearray(serialize_tag(make_tag(TagClass.UNIVERSAL, 16)))
    inner_tag[0] |= 0x20
    inner = bytes(inner_tag) + b"\x80" + _primitive(b"x") + b"\x00\x00"
    value = b"\x80" + inner + b"\x00\x00"
    assert skip_length(True, value) == len(value)


def test_skip_indefinite_without_terminator_wants_more():
    with pytest.raises(NeedMoreData):
        skip_length(True, b"\x80" + _primitive(b"hi"))


def test_skip_respects_max_depth():
    value = b"\x80" + _primitive(b"hi") + b"\x00\x00"
    assert skip_length(True, value, max_depth=1) == len(value)
    with pytest.raises(DecodeError):
        skip_length(True, value, max_depth=0)