import pytest

from asnber.choice import Choice, ChoiceValue
from asnber.choice_text import encode_xer, format_value
from asnber.decoder import AsnType, EncodeError, Member
from asnber.tlv import TagClass, make_tag


class Plain(AsnType):
    def decode_ber(self, data, tag_mode=0, ctx=None):
        raise NotImplementedError

    def encode_der(self, value, tag_mode=0, tag=None):
        return bytes(str(value), "ascii")


class Custom(Plain):
    def encode_xer(self, value, indent, canonical):
        return "<custom/>"

    def format_value(self, value, indent):
        return f"custom:{value}"


def ctx_tag(number):
    return make_tag(TagClass.CONTEXT, number)


@pytest.fixture
def simple():
    return Choice(
        "Simple",
        [
            Member("num", Plain("INTEGER"), tag=ctx_tag(0)),
            Member("text", Plain("UTF8String"), tag=ctx_tag(1)),
            Member("odd", Plain("REAL"), tag=ctx_tag(2)),
            Member("special", Custom("Special"), tag=ctx_tag(3)),
        ],
    )


def test_canonical_encoding(simple):
    assert encode_xer(simple, ChoiceValue(1, 5), 1, True) == "<num>5</num>"


def test_indented_encoding(simple):
    assert encode_xer(simple, ChoiceValue(1, 5), 1, False) == "\n    <num>5</num>\n"


def test_indented_contains_canonical(simple):
    value = ChoiceValue(2, "hello")
    canonical = encode_xer(simple, value, 2, True)
    pretty = encode_xer(simple, value, 2, False)
    assert pretty.strip() == canonical


def test_text_is_escaped(simple):
    result = encode_xer(simple, ChoiceValue(2, "a<b&c"), 1, True)
    assert result == "<text>a&lt;b&amp;c</text>"


def test_type_encoder_is_used(simple):
    assert encode_xer(simple, ChoiceValue(4, 1), 1, True) == "<special><custom/></special>"


def test_nested_choice(simple):
    outer = Choice("Outer", [Member("inner", simple, tag=ctx_tag(7))])
    inner_value = ChoiceValue(1, 9)
    result = encode_xer(outer, ChoiceValue(1, inner_value), 1, True)
    assert result == "<inner>" + encode_xer(simple, inner_value, 2, True) + "</inner>"


@pytest.mark.parametrize("value", [None, ChoiceValue(0, 5), ChoiceValue(9, 5)])
def test_encode_without_selection_fails(simple, value):
    with pytest.raises(EncodeError):
        encode_xer(simple, value, 1, True)


def test_encode_absent_member_fails(simple):
    with pytest.raises(EncodeError):
        encode_xer(simple, ChoiceValue(1, None), 1, True)


def test_encode_unsupported_value_fails(simple):
    with pytest.raises(EncodeError):
        encode_xer(simple, ChoiceValue(3, 1.5), 1, True)


@pytest.mark.parametrize(
    "value", [None, ChoiceValue(0, 5), ChoiceValue(9, 5), ChoiceValue(1, None)]
)
def test_format_absent(simple, value):
    assert format_value(simple, value, 0) == "<absent>"


def test_format_selected(simple):
    assert format_value(simple, ChoiceValue(2, "hello"), 0) == "hello"


def test_format_uses_type_formatter(simple):
    assert format_value(simple, ChoiceValue(4, 3), 0) == "custom:3"


def test_format_nested(simple):
    outer = Choice("Outer", [Member("inner", simple, tag=ctx_tag(7))])
    inner_value = ChoiceValue(1, 42)
    assert format_value(outer, ChoiceValue(1, inner_value), 0) == format_value(
        simple, inner_value, 0
    )