"""Type descriptions, tag checking and the top-level BER decoder."""

from __future__ import annotations

import abc
from dataclasses import dataclass, replace
from typing import Any, Callable

from asnber.tlv import (
    DecodeError,
    fetch_length,
    fetch_tag,
    is_constructed,
    serialize_length,
    serialize_tag,
    tag_string,
)

IMPLICIT = -1
UNTAGGED = 0
EXPLICIT = 1

DEFAULT_MAX_DEPTH = 100


class ConstraintError(ValueError):
    """A value violates the constraints of its type."""


class EncodeError(ValueError):
    """A value cannot be encoded."""


@dataclass(frozen=True)
class CodecContext:
    """Options shared by a decoding run, bounding the nesting depth."""

    max_depth: int = DEFAULT_MAX_DEPTH
    depth: int = 0

    def nested(self):
        """Return the context for one level deeper."""
        if self.depth >= self.max_depth:
            raise DecodeError("maximum nesting depth exceeded")
        return replace(self, depth=self.depth + 1)


@dataclass(frozen=True)
class TagCheck:
    """Outcome of matching the tags of a type against an encoding.

    ``length`` is the length of the innermost value, or None when the
    chain uses indefinite lengths; ``terminators`` then counts the
    end-of-contents markers that are expected after the value.
    """

    consumed: int
    length: int | None
    terminators: int
    constructed: bool


class AsnType(abc.ABC):
    """Description of an ASN.1 type with its outer tags."""

    def __init__(self, name, *, tags=(), xml_tag=None, members=(), constraint=None):
        self.name = name
        self.tags = tuple(tags)
        self.xml_tag = name if xml_tag is None else xml_tag
        self.members = tuple(members)
        self.constraint = constraint

    @abc.abstractmethod
    def decode_ber(self, data, tag_mode=UNTAGGED, ctx=None):
        """Decode a value from ``data``; return ``(value, consumed)``."""

    @abc.abstractmethod
    def encode_der(self, value, tag_mode=UNTAGGED, tag=None):
        """Encode ``value`` in DER and return the octets."""

    def outmost_tag(self, value=None, tag_mode=UNTAGGED, tag=None):
        """Return the outermost tag the encoding of ``value`` would carry."""
        if tag_mode:
            return tag
        if self.tags:
            return self.tags[0]
        return None

    def check_constraints(self, value):
        """Raise ConstraintError if ``value`` is not acceptable."""
        if value is None:
            raise ConstraintError(f"{self.name}: value not given")
        if self.constraint is not None:
            self.constraint(value)

    def compare(self, a, b):
        """Order two values: negative, zero or positive."""
        return (a > b) - (a < b)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


@dataclass(frozen=True)
class Member:
    """A component of a constructed type.

    ``tag`` is None for an untagged member whose tag is not fixed;
    ``optional`` counts this and the following optional components;
    ``default`` is None when the member has no DEFAULT value.
    """

    name: str
    asn_type: AsnType
    tag: int | None = None
    tag_mode: int = UNTAGGED
    optional: int = 0
    default: Any = None
    any_type: bool = False
    constraint: Callable[[Any], None] | None = None


def check_tags(asn_type, data, tag_mode=UNTAGGED, last_tag_form=None, ctx=None):
    """Check that ``data`` opens with the chain of tags ``asn_type`` expects.

    ``tag_mode`` is IMPLICIT, UNTAGGED or EXPLICIT; with a tag mode the
    outermost tag is not checked here, the caller having matched it.
    ``last_tag_form`` requires the innermost TLV to be primitive (False)
    or constructed (True); None accepts either.
    """
    ctx = ctx or CodecContext()
    if ctx.depth > ctx.max_depth:
        raise DecodeError("maximum nesting depth exceeded")

    view = memoryview(data)
    tags = asn_type.tags
    start = -1 if tag_mode == EXPLICIT else 0
    pos = 0
    end = len(view)
    length = None
    terminators = 0
    constructed = False
    limit = None

    if tag_mode == UNTAGGED and start == len(tags):
        # An untagged open type: its outer tag is not known in advance.
        _, tag_len = fetch_tag(view)
        constructed = is_constructed(view[0])
        length, len_len = fetch_length(constructed, view[tag_len:])
        pos = tag_len + len_len
        if length is None:
            terminators = 1
    elif start >= len(tags):
        raise ValueError(f"{asn_type.name} has no tags to check")

    for tagno in range(start, len(tags)):
        window = view[pos:end]
        tag, tag_len = fetch_tag(window)
        constructed = is_constructed(window[0])

        if not (tag_mode != UNTAGGED and tagno == start) and tag != tags[tagno]:
            raise DecodeError(
                f"{asn_type.name}: expected {tag_string(tags[tagno])}, "
                f"got {tag_string(tag)}"
            )

        if tagno < len(tags) - 1:
            if not constructed:
                raise DecodeError(f"{asn_type.name}: outer tag must be constructed")
        elif last_tag_form is not None and last_tag_form != constructed:
            raise DecodeError(f"{asn_type.name}: unexpected encoding form")

        length, len_len = fetch_length(constructed, window[tag_len:])
        header = tag_len + len_len

        if length is None:
            if limit is not None:
                raise DecodeError("indefinite length in a chain of definite lengths")
            terminators += 1
            pos += header
            continue
        if terminators:
            raise DecodeError("definite length in a chain of indefinite lengths")

        if limit is None:
            limit = length + header
        elif limit != length + header:
            raise DecodeError("inner length does not match the outer length")

        pos += header
        limit -= header
        end = min(end, pos + limit)

    return TagCheck(
        consumed=pos,
        length=None if terminators else length,
        terminators=terminators,
        constructed=constructed,
    )


def encode_tags(asn_type, payload_length, tag_mode=UNTAGGED, constructed=False, tag=None):
    """Return the DER tag and length octets that precede a value.

    ``constructed`` gives the form of the innermost TLV; outer ones are
    always constructed.
    """
    if payload_length < 0:
        raise EncodeError("payload length must not be negative")
    tags = list(asn_type.tags)
    if tag_mode != UNTAGGED:
        if tag is None:
            raise EncodeError(f"{asn_type.name}: tag mode given without a tag")
        if tag_mode == IMPLICIT:
            if not tags:
                raise EncodeError(f"{asn_type.name}: cannot be tagged implicitly")
            tags[0] = tag
        else:
            tags.insert(0, tag)

    header = b""
    inner = payload_length
    last = len(tags) - 1
    for index in range(last, -1, -1):
        encoded = bytearray(serialize_tag(tags[index]))
        if constructed or index < last:
            encoded[0] |= 0x20
        encoded += serialize_length(inner)
        header = bytes(encoded) + header
        inner += len(encoded)
    return header


def ber_decode(asn_type, data, ctx=None):
    """Decode BER, CER or DER ``data`` as ``asn_type``; return ``(value, consumed)``."""
    return asn_type.decode_ber(data, UNTAGGED, ctx or CodecContext())