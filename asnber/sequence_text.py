"""XML (XER) encoding and text rendering of SEQUENCE values."""

from __future__ import annotations

from xml.sax.saxutils import escape

from asnber.choice import Choice
from asnber.choice_text import encode_xer as choice_to_xer
from asnber.choice_text import format_value as format_choice
from asnber.decoder import EncodeError
from asnber.sequence import Sequence
from asnber.sequence_of import SequenceOf

_INDENT = "    "


def _text_indent(level):
    return "\n" + _INDENT * max(level, 0)


def _member_xer(asn_type, value, indent, canonical):
    """Encode one member's value with the encoder its type provides."""
    if isinstance(asn_type, Sequence):
        return sequence_to_xer(asn_type, value, indent, canonical)
    if isinstance(asn_type, SequenceOf):
        from asnber.sequence_of_text import sequence_of_to_xer

        return sequence_of_to_xer(asn_type, value, indent, canonical)
    if isinstance(asn_type, Choice):
        return choice_to_xer(asn_type, value, indent, canonical)
    encoder = getattr(asn_type, "encode_xer", None)
    if callable(encoder):
        return encoder(value, indent, canonical)
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return escape(str(value))
    raise EncodeError(f"{asn_type.name}: no XML encoding for {type(value).__name__}")


def sequence_to_xer(asn_type, value, indent=1, canonical=False):
    """Encode a SEQUENCE value as XER and return the text.

    Each present member is wrapped in an element named after it; an
    absent member with a DEFAULT is written with its default value.
    Unless ``canonical`` is set, every member starts on a new line
    indented to level ``indent``.
    """
    if value is None:
        raise EncodeError(f"{asn_type.name}: value not given")
    parts = []
    for member in asn_type.members:
        item = value.get(member.name)
        if item is None:
            if member.default is not None:
                item = member.default
            elif member.optional:
                continue
            else:
                raise EncodeError(
                    f"{asn_type.name}: mandatory element {member.name} absent"
                )
        if not canonical:
            parts.append(_text_indent(indent))
        parts.append(f"<{member.name}>")
        parts.append(_member_xer(member.asn_type, item, indent + 1, canonical))
        parts.append(f"</{member.name}>")
    if not canonical:
        parts.append(_text_indent(indent - 1))
    return "".join(parts)


def _member_text(asn_type, value, indent):
    if value is None:
        return "<absent>"
    if isinstance(asn_type, Sequence):
        return format_sequence(asn_type, value, indent)
    if isinstance(asn_type, Choice):
        return format_choice(asn_type, value, indent)
    formatter = getattr(asn_type, "format_value", None)
    if callable(formatter):
        return formatter(value, indent)
    return str(value)


def format_sequence(asn_type, value, indent=1):
    """Render a SEQUENCE value as ``Name ::= {`` followed by one member per line.

    Absent optional members are left out; an absent mandatory member
    is shown as ``<absent>``.
    """
    if value is None:
        return "<absent>"
    parts = [f"{asn_type.name} ::= {{"]
    for member in asn_type.members:
        item = value.get(member.name)
        if item is None and (member.optional or member.default is not None):
            continue
        parts.append(_text_indent(indent))
        parts.append(f"{member.name}: ")
        parts.append(_member_text(member.asn_type, item, indent + 1))
    parts.append(_text_indent(indent - 1))
    parts.append("}")
    return "".join(parts)