"""Tag and length fields of BER tag-length-value encodings."""

from __future__ import annotations

import enum

_TAG_BITS = 32
_LENGTH_BITS = 64


class TagClass(enum.IntEnum):
    """The class of a BER tag, as stored in its two least significant bits."""

    UNIVERSAL = 0
    APPLICATION = 1
    CONTEXT = 2
    PRIVATE = 3


_CLASS_PREFIX = {
    TagClass.UNIVERSAL: "UNIVERSAL ",
    TagClass.APPLICATION: "APPLICATION ",
    TagClass.CONTEXT: "",
    TagClass.PRIVATE: "PRIVATE ",
}


class DecodeError(ValueError):
    """The encoding is malformed or does not match the expected type."""


class NeedMoreData(Exception):
    """The buffer ends before the encoding does."""


def make_tag(tag_class, value):
    """Combine a tag class and a tag number into one tag value."""
    if value < 0:
        raise ValueError("tag number must not be negative")
    return (value << 2) | TagClass(tag_class)


def tag_class(tag):
    """Return the class of a combined tag."""
    return TagClass(tag & 0x3)


def tag_value(tag):
    """Return the number of a combined tag."""
    return tag >> 2


def is_constructed(first_octet):
    """Tell whether the identifier octet marks a constructed encoding."""
    return bool(first_octet & 0x20)


def tag_string(tag):
    """Render a tag in its canonical form, such as ``[PRIVATE 0]``."""
    return f"[{_CLASS_PREFIX[tag_class(tag)]}{tag_value(tag)}]"


def fetch_tag(data):
    """Read the T of a TLV from the start of ``data``.

    Returns ``(tag, octets_used)``.
    """
    if not data:
        raise NeedMoreData("tag expected")
    first = data[0]
    tclass = first >> 6
    if first & 0x1F != 0x1F:
        return ((first & 0x1F) << 2) | tclass, 1

    value = 0
    for consumed, octet in enumerate(data[1:], start=2):
        value = (value << 7) | (octet & 0x7F)
        if not octet & 0x80:
            return (value << 2) | tclass, consumed
        if value >> (_TAG_BITS - 9):
            raise DecodeError("tag number too large")
    raise NeedMoreData("truncated tag")


def fetch_length(constructed, data):
    """Read the L of a TLV from the start of ``data``.

    Returns ``(length, octets_used)``; the length is None for the
    indefinite form, which only constructed encodings may use.
    """
    if not data:
        raise NeedMoreData("length expected")
    first = data[0]
    if not first & 0x80:
        return first, 1
    if constructed and first == 0x80:
        return None, 1
    if first == 0xFF:
        raise DecodeError("reserved length octet")

    count = first & 0x7F
    length = 0
    for octet in data[1:1 + count]:
        if length >> (_LENGTH_BITS - 9):
            raise DecodeError("length value too large")
        length = (length << 8) | octet
    if len(data) < count + 1:
        raise NeedMoreData("truncated length")
    return length, count + 1


def skip_length(constructed, data, max_depth=None):
    """Return the number of octets taken by the L and V starting at ``data``.

    Indefinite lengths are followed through their nested values up to the
    end-of-contents octets. ``max_depth`` bounds the nesting of inner
    values; None leaves it unbounded.
    """
    if max_depth is not None and max_depth < 0:
        raise DecodeError("values nested too deeply")
    view = memoryview(data)
    length, header = fetch_length(constructed, view)
    if length is not None:
        total = header + length
        if total > len(view):
            raise NeedMoreData("value truncated")
        return total

    deeper = None if max_depth is None else max_depth - 1
    skip = header
    while True:
        rest = view[skip:]
        _, tag_len = fetch_tag(rest)
        inner = skip_length(is_constructed(rest[0]), rest[tag_len:], deeper)
        skip += tag_len + inner
        if rest[0] == 0 and rest[1] == 0:
            return skip


def serialize_tag(tag):
    """Encode a combined tag as BER identifier octets."""
    number = tag_value(tag)
    first = tag_class(tag) << 6
    if number <= 30:
        return bytes([first | number])
    groups = []
    while True:
        groups.append(number & 0x7F)
        number >>= 7
        if not number:
            break
    groups.reverse()
    return bytes([first | 0x1F, *(group | 0x80 for group in groups[:-1]), groups[-1]])


def serialize_length(length):
    """Encode a definite length in DER form."""
    if length < 0:
        raise ValueError("length must not be negative")
    if length <= 127:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    if len(body) >= 127:
        raise ValueError("length too large to encode")
    return bytes([0x80 | len(body)]) + body