"""XML (XER) encoding of SEQUENCE OF values."""

from __future__ import annotations

from xml.sax.saxutils import escape

from asnber.choice import Choice
from asnber.choice_text import encode_xer as choice_to_xer
from asnber.decoder import EncodeError
from asnber.sequence import Sequence
from asnber.sequence_of import SequenceOf
from asnber.sequence_text import sequence_to_xer

_INDENT = "    "


def _text_indent(level):
    return "\n" + _INDENT * max(level, 0)


def _element_xer(asn_type, value, indent, canonical):
    """Encode one list element with the encoder its type provides."""
    if isinstance(asn_type, SequenceOf):
        return sequence_of_to_xer(asn_type, value, indent, canonical)
    if isinstance(asn_type, Sequence):
        return sequence_to_xer(asn_type, value, indent, canonical)
    if isinstance(asn_type, Choice):
        return choice_to_xer(asn_type, value, indent, canonical)
    encoder = getattr(asn_type, "encode_xer", None)
    if callable(encoder):
        return encoder(value, indent, canonical)
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return escape(str(value))
    raise EncodeError(f"{asn_type.name}: no XML encoding for {type(value).__name__}")


def sequence_of_to_xer(asn_type, value, indent=1, canonical=False):
    """Encode a SEQUENCE OF value as XER and return the text.

    Each element is wrapped in an element named after the member, or
    after the member type's XML tag when the member has no name. For an
    XML value list the elements are written bare, and an element whose
    encoding is empty becomes ``<tag/>``. None entries are left out.
    """
    if value is None:
        raise EncodeError(f"{asn_type.name}: value not given")
    member = asn_type.member
    value_list = asn_type.as_xml_value_list
    if value_list:
        wrapper = None
    else:
        wrapper = member.name or member.asn_type.xml_tag

    parts = []
    for item in value:
        if item is None:
            continue
        if wrapper is not None:
            if not canonical:
                parts.append(_text_indent(indent))
            parts.append(f"<{wrapper}>")
        encoded = _element_xer(member.asn_type, item, indent + 1, canonical)
        parts.append(encoded)
        if not encoded and value_list:
            if not canonical:
                parts.append(_text_indent(indent + 1))
            parts.append(f"<{member.asn_type.xml_tag}/>")
        if wrapper is not None:
            parts.append(f"</{wrapper}>")
    if not canonical:
        parts.append(_text_indent(indent - 1))
    return "".join(parts)