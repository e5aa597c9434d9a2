"""XML (XER) encoding and text rendering of CHOICE values."""

from __future__ import annotations

from xml.sax.saxutils import escape

from asnber.choice import Choice
from asnber.decoder import EncodeError

_INDENT = "    "


def _text_indent(level):
    return "\n" + _INDENT * max(level, 0)


def _member_xer(asn_type, value, indent, canonical):
    """Encode one member's value with the encoder its type provides."""
    if isinstance(asn_type, Choice):
        return encode_xer(asn_type, value, indent, canonical)
    encoder = getattr(asn_type, "encode_xer", None)
    if callable(encoder):
        return encoder(value, indent, canonical)
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return escape(str(value))
    raise EncodeError(f"{asn_type.name}: no XML encoding for {type(value).__name__}")


def encode_xer(asn_type, value, indent=1, canonical=False):
    """Encode a CHOICE value as XER and return the text.

    The selected alternative is wrapped in an element named after it.
    Unless ``canonical`` is set, line breaks and indentation at level
    ``indent`` surround it.
    """
    if value is None:
        raise EncodeError(f"{asn_type.name}: value not given")
    if not 0 < value.present <= len(asn_type.members):
        raise EncodeError(f"{asn_type.name}: no alternative selected")
    member = asn_type.members[value.present - 1]
    if value.value is None:
        raise EncodeError(f"{asn_type.name}: alternative {member.name} absent")

    parts = []
    if not canonical:
        parts.append(_text_indent(indent))
    parts.append(f"<{member.name}>")
    parts.append(_member_xer(member.asn_type, value.value, indent + 1, canonical))
    parts.append(f"</{member.name}>")
    if not canonical:
        parts.append(_text_indent(indent - 1))
    return "".join(parts)


def _member_text(asn_type, value, indent):
    if isinstance(asn_type, Choice):
        return format_value(asn_type, value, indent)
    formatter = getattr(asn_type, "format_value", None)
    if callable(formatter):
        return formatter(value, indent)
    return str(value)


def format_value(asn_type, value, indent=0):
    """Render a CHOICE value as text: the selected alternative, or ``<absent>``."""
    if value is None or not 0 < value.present <= len(asn_type.members):
        return "<absent>"
    member = asn_type.members[value.present - 1]
    if value.value is None:
        return "<absent>"
    return _member_text(member.asn_type, value.value, indent)