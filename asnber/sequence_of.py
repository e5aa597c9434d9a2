"""The SEQUENCE OF type: an ordered list of values of one type."""

from __future__ import annotations

from asnber.decoder import UNTAGGED, EncodeError, encode_tags
from asnber.sequence import SEQUENCE_TAG


class SequenceOf:
    """An ASN.1 SEQUENCE OF ``member``.

    Values are iterables of member values; None entries are left out of
    encodings. ``as_xml_value_list`` marks lists whose XML form holds
    bare values instead of wrapped elements.
    """

    def __init__(self, name, member, *, tags=None, xml_tag=None,
                 as_xml_value_list=False, constraint=None):
        self.name = name
        self.member = member
        self.members = (member,)
        self.tags = (SEQUENCE_TAG,) if tags is None else tuple(tags)
        self.xml_tag = name if xml_tag is None else xml_tag
        self.as_xml_value_list = as_xml_value_list
        self.constraint = constraint

    def encode_der(self, value, tag_mode=UNTAGGED, tag=None):
        """Encode the list in DER and return the octets."""
        if value is None:
            raise EncodeError(f"{self.name}: value not given")
        element = self.member
        body = b"".join(
            element.asn_type.encode_der(item, UNTAGGED, element.tag)
            for item in value
            if item is not None
        )
        return encode_tags(self, len(body), tag_mode, True, tag) + body

    def compare(self, a, b):
        """Order two lists element by element; a shorter prefix sorts first."""
        if a is None:
            return -1
        if b is None:
            return 1
        a_items = list(a)
        b_items = list(b)
        for a_item, b_item in zip(a_items, b_items):
            result = self.member.asn_type.compare(a_item, b_item)
            if result:
                return result
        return (len(a_items) > len(b_items)) - (len(a_items) < len(b_items))

    def __repr__(self):
        return f"SequenceOf({self.name!r})"