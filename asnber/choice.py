"""The CHOICE type: exactly one of several alternatives is present."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import Any

from asnber.decoder import (
    EXPLICIT,
    UNTAGGED,
    AsnType,
    CodecContext,
    ConstraintError,
    EncodeError,
    check_tags,
    encode_tags,
)
from asnber.tlv import (
    DecodeError,
    NeedMoreData,
    fetch_tag,
    is_constructed,
    skip_length,
    tag_string,
)


@dataclass
class ChoiceValue:
    """A CHOICE value.

    ``present`` is the 1-based index of the selected alternative, 0 when
    nothing is selected; ``value`` is that alternative's value, None
    when it is absent.
    """

    present: int = 0
    value: Any = None


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


class Choice(AsnType):
    """An ASN.1 CHOICE over the given members.

    ``ext_start`` is the index of the first extension alternative, or
    None when the CHOICE is not extensible.
    """

    def __init__(self, name, members, *, tags=(), xml_tag=None, ext_start=None,
                 constraint=None):
        super().__init__(name, tags=tags, xml_tag=xml_tag, members=members,
                         constraint=constraint)
        self.ext_start = ext_start
        self._tag_map = {}
        for index, member in enumerate(self.members):
            for tag in self._member_tags(member):
                if tag in self._tag_map:
                    raise ValueError(
                        f"{name}: tag {tag_string(tag)} used by more than one alternative"
                    )
                self._tag_map[tag] = index

    @staticmethod
    def _member_tags(member):
        if member.tag is not None:
            return [member.tag]
        inner = member.asn_type
        if inner.tags:
            return [inner.tags[0]]
        if isinstance(inner, Choice):
            return list(inner._tag_map)
        return []

    def _selected(self, value):
        """Return the selected member and its value, or (None, None)."""
        if value is None or not 0 < value.present <= len(self.members):
            return None, None
        return self.members[value.present - 1], value.value

    def decode_ber(self, data, tag_mode=UNTAGGED, ctx=None):
        """Decode a CHOICE from ``data``; return ``(ChoiceValue, consumed)``.

        An unknown alternative of an extensible CHOICE is skipped and
        yields a value with nothing selected.
        """
        ctx = ctx or CodecContext()
        view = memoryview(data)
        tagged = bool(tag_mode or self.tags)
        if tagged:
            check = check_tags(self, view, tag_mode, None, ctx)
            left = check.length if check.length is not None else -check.terminators
            frame = _Frame(view, check.consumed, left)
        else:
            frame = _Frame(view, 0, -1)

        window = frame.window()
        with _framed(frame, self.name):
            tag, tag_len = fetch_tag(window)

        index = self._tag_map.get(tag)
        if index is None:
            if self.ext_start is None:
                raise DecodeError(
                    f"unexpected tag {tag_string(tag)} in non-extensible CHOICE {self.name}"
                )
            with _framed(frame, self.name):
                skip = skip_length(is_constructed(window[0]), window[tag_len:],
                                   ctx.max_depth - ctx.depth)
            frame.advance(tag_len + skip)
            return ChoiceValue(), frame.pos

        member = self.members[index]
        with _framed(frame, self.name):
            member_value, used = member.asn_type.decode_ber(
                frame.window(), member.tag_mode, ctx.nested()
            )
        frame.advance(used)
        result = ChoiceValue(index + 1, member_value)

        if frame.left > 0:
            raise DecodeError(f"{self.name}: alternative does not fill the CHOICE")
        if frame.left == -1 and not tagged:
            return result, frame.pos

        while frame.left < 0:
            window = frame.window()
            with _framed(frame, self.name):
                fetch_tag(window)
                if window[0] == 0 and len(window) < 2:
                    raise NeedMoreData("truncated end-of-contents")
            if window[0] != 0 or window[1] != 0:
                raise DecodeError(f"{self.name}: unexpected continuation")
            frame.advance(2)
            frame.left += 1
        return result, frame.pos

    def encode_der(self, value, tag_mode=UNTAGGED, tag=None):
        """Encode the selected alternative, with the CHOICE's own tags if any."""
        if value is None:
            raise EncodeError(f"{self.name}: value not given")
        if not 0 < value.present <= len(self.members):
            if value.present == 0 and not self.members:
                return b""
            raise EncodeError(f"{self.name}: no alternative selected")
        member = self.members[value.present - 1]
        if value.value is None:
            if member.optional:
                return b""
            raise EncodeError(f"{self.name}: alternative {member.name} absent")

        body = member.asn_type.encode_der(value.value, member.tag_mode, member.tag)
        if tag_mode == EXPLICIT or self.tags:
            return encode_tags(self, len(body), tag_mode, True, tag) + body
        return body

    def outmost_tag(self, value=None, tag_mode=UNTAGGED, tag=None):
        """Return the outermost tag of the encoding; None if nothing is selected."""
        if tag_mode:
            return tag
        if self.tags:
            return self.tags[0]
        member, member_value = self._selected(value)
        if member is None:
            return None
        return member.asn_type.outmost_tag(member_value, member.tag_mode, member.tag)

    def check_constraints(self, value):
        """Raise ConstraintError unless the selected alternative is valid."""
        if value is None:
            raise ConstraintError(f"{self.name}: value not given")
        member, member_value = self._selected(value)
        if member is None:
            raise ConstraintError(f"{self.name}: no CHOICE element given")
        if member_value is None:
            if member.optional:
                return
            raise ConstraintError(
                f"{self.name}: mandatory CHOICE element {member.name} absent"
            )
        if member.constraint is not None:
            member.constraint(member_value)
        else:
            member.asn_type.check_constraints(member_value)

    def compare(self, a, b):
        """Order two CHOICE values: by alternative first, then by value."""
        a_member, a_value = self._selected(a)
        b_member, b_value = self._selected(b)
        if a_value is not None and b_value is not None:
            if a.present == b.present:
                return a_member.asn_type.compare(a_value, b_value)
            return -1 if a.present < b.present else 1
        if a_value is None:
            return -1
        return 1

    def presence(self, value):
        """Return the 1-based index of the selected alternative, 0 if none."""
        if value is None:
            return 0
        return value.present

    def set_presence(self, value, present):
        """Select another alternative, clearing the previous one's value."""
        if value is None:
            raise ValueError(f"{self.name}: value not given")
        if not 0 <= present <= len(self.members):
            raise ValueError(f"{self.name}: no alternative {present}")
        if present == value.present:
            return
        value.value = None
        value.present = present