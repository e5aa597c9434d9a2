"""The SEQUENCE type: an ordered series of named components."""

from __future__ import annotations

import contextlib

from asnber.choice import Choice
from asnber.decoder import (
    UNTAGGED,
    AsnType,
    CodecContext,
    ConstraintError,
    EncodeError,
    check_tags,
    encode_tags,
)
from asnber.sequence_tags import TagMap
from asnber.tlv import (
    DecodeError,
    NeedMoreData,
    TagClass,
    fetch_tag,
    is_constructed,
    make_tag,
    skip_length,
    tag_string,
)

SEQUENCE_TAG = make_tag(TagClass.UNIVERSAL, 16)

# Beyond this many candidates the tag table is searched instead.
_LINEAR_SEARCH_SPAN = 8


def _member_tags(member):
    """Every tag an encoding of ``member`` may open with."""
    if member.tag is not None:
        return [member.tag]
    inner = member.asn_type
    if inner.tags:
        return [inner.tags[0]]
    if isinstance(inner, Choice):
        return [tag for alternative in inner.members for tag in _member_tags(alternative)]
    return []


def _effective_tag(member):
    """The single tag of ``member``, or None when it is not fixed."""
    if member.tag is not None:
        return member.tag
    if member.asn_type.tags:
        return member.asn_type.tags[0]
    return None


class _Frame:
    """Position inside the buffer and octets left in the enclosing TLV."""

    def __init__(self, data, pos, left):
        self.data = data
        self.pos = pos
        # Negative: the number of end-of-contents markers still expected.
        self.left = left

    def window(self):
        rest = self.data[self.pos:]
        return rest if self.left < 0 else rest[: self.left]

    def size_violation(self):
        return 0 <= self.left <= len(self.data) - self.pos

    def advance(self, count):
        self.pos += count
        if self.left >= 0:
            self.left -= count


@contextlib.contextmanager
def _framed(frame, name):
    """Turn a shortage of data into an error when the frame is all there."""
    try:
        yield
    except NeedMoreData as exc:
        if frame.size_violation():
            raise DecodeError(f"{name}: value runs past its enclosing length") from exc
        raise


def _opens_end_of_contents(frame, window):
    """Tell whether ``window`` starts with the two end-of-contents octets."""
    if frame.left >= 0 or window[0] != 0:
        return False
    if len(window) < 2:
        raise NeedMoreData("truncated end-of-contents")
    return window[1] == 0


class Sequence(AsnType):
    """An ASN.1 SEQUENCE of the given members.

    Values are mappings from member names to member values; a member
    that is missing or None is absent. ``first_extension`` is the index
    of the first extension addition, or None when the type is not
    extensible.
    """

    def __init__(self, name, members, *, tags=None, xml_tag=None,
                 first_extension=None, constraint=None):
        super().__init__(
            name,
            tags=(SEQUENCE_TAG,) if tags is None else tags,
            xml_tag=xml_tag,
            members=members,
            constraint=constraint,
        )
        if first_extension is not None and not 0 <= first_extension <= len(self.members):
            raise ValueError(f"{name}: first extension out of range")
        self.first_extension = first_extension
        self.tag_map = TagMap(
            (tag, index)
            for index, member in enumerate(self.members)
            for tag in _member_tags(member)
        )

    def _in_extensions(self, index):
        return self.first_extension is not None and self.first_extension <= index

    def _locate(self, tag, edx):
        """Find the member at or after ``edx`` that the tag belongs to."""
        members = self.members
        optional = members[edx].optional
        end = edx + optional + 1
        use_map = False
        if end > len(members):
            end = len(members)
        elif end - edx > _LINEAR_SEARCH_SPAN:
            end = edx + _LINEAR_SEARCH_SPAN
            use_map = True
        for index in range(edx, end):
            candidate = members[index]
            expected = _effective_tag(candidate)
            if candidate.any_type or (expected is not None and expected == tag):
                return index
            if expected is None:
                use_map = True
                break
        if use_map:
            return self.tag_map.find(tag, edx, edx + optional)
        return None

    def decode_ber(self, data, tag_mode=UNTAGGED, ctx=None):
        """Decode a SEQUENCE from ``data``; return ``(dict, consumed)``.

        Unknown components are skipped where the type is extensible.
        """
        ctx = ctx or CodecContext()
        view = memoryview(data)
        check = check_tags(self, view, tag_mode, True, ctx)
        left = check.length if check.length is not None else -check.terminators
        frame = _Frame(view, check.consumed, left)
        members = self.members
        count = len(members)
        result = {}

        edx = 0
        while edx < count:
            member = members[edx]
            at_end = edx + member.optional == count or self._in_extensions(edx)
            if frame.left == 0 and at_end:
                return result, frame.pos

            window = frame.window()
            with _framed(frame, self.name):
                tag, tag_len = fetch_tag(window)
                terminator = _opens_end_of_contents(frame, window)
            if terminator and at_end:
                break

            found = self._locate(tag, edx)
            if found is None:
                last = edx + member.optional
                if not self._in_extensions(last):
                    raise DecodeError(
                        f"{self.name}: unexpected tag {tag_string(tag)} "
                        f"where {member.name} was expected"
                    )
                with _framed(frame, self.name):
                    skip = skip_length(is_constructed(window[0]), window[tag_len:],
                                       ctx.max_depth - ctx.depth)
                frame.advance(tag_len + skip)
                edx = last
                continue

            member = members[found]
            with _framed(frame, self.name):
                member_value, used = member.asn_type.decode_ber(
                    frame.window(), member.tag_mode, ctx.nested()
                )
            frame.advance(used)
            result[member.name] = member_value
            edx = found + 1

        terminated = False
        while frame.left != 0:
            window = frame.window()
            with _framed(frame, self.name):
                tag, tag_len = fetch_tag(window)
                terminator = _opens_end_of_contents(frame, window)
            if terminator:
                frame.advance(2)
                frame.left += 1
                terminated = True
                continue
            if terminated or not self._in_extensions(count):
                raise DecodeError(
                    f"{self.name}: unexpected continuation {tag_string(tag)}"
                )
            with _framed(frame, self.name):
                skip = skip_length(is_constructed(window[0]), window[tag_len:],
                                   ctx.max_depth - ctx.depth)
            frame.advance(tag_len + skip)
        return result, frame.pos

    def encode_der(self, value, tag_mode=UNTAGGED, tag=None):
        """Encode a SEQUENCE value in DER, leaving out members equal to their DEFAULT."""
        if value is None:
            raise EncodeError(f"{self.name}: value not given")
        body = bytearray()
        for member in self.members:
            item = value.get(member.name)
            if item is None:
                if member.optional or member.default is not None:
                    continue
                raise EncodeError(f"{self.name}: mandatory element {member.name} absent")
            if member.default is not None and item == member.default:
                continue
            body += member.asn_type.encode_der(item, member.tag_mode, member.tag)
        return encode_tags(self, len(body), tag_mode, True, tag) + bytes(body)

    def check_constraints(self, value):
        """Raise ConstraintError unless every present member is valid."""
        if value is None:
            raise ConstraintError(f"{self.name}: value not given")
        for member in self.members:
            item = value.get(member.name)
            if item is None:
                if member.optional or member.default is not None:
                    continue
                raise ConstraintError(
                    f"{self.name}: mandatory element {member.name} absent"
                )
            if member.constraint is not None:
                member.constraint(item)
            else:
                member.asn_type.check_constraints(item)
        if self.constraint is not None:
            self.constraint(value)

    def compare(self, a, b):
        """Order two SEQUENCE values member by member.

        An absent member sorts first, unless the other side holds its
        DEFAULT value, in which case the two are taken as equal.
        """
        for member in self.members:
            a_item = a.get(member.name)
            b_item = b.get(member.name)
            if a_item is None:
                if b_item is None:
                    continue
                if member.default is not None and b_item == member.default:
                    continue
                return -1
            if b_item is None:
                if member.default is not None and a_item == member.default:
                    continue
                return 1
            result = member.asn_type.compare(a_item, b_item)
            if result:
                return result
        return 0