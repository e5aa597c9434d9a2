# asnber

A small pure-Python library for working with ASN.1 Basic Encoding Rules
(BER) and Distinguished Encoding Rules (DER).

It provides:

- **Tag and length primitives** (`asnber.tlv`): `fetch_tag`, `fetch_length`,
  `skip_length`, `serialize_tag`, `serialize_length`, `make_tag`,
  `tag_class`, `tag_value`, `is_constructed` and `tag_string`, plus the
  `TagClass` enumeration. Malformed input raises `DecodeError`; input that
  stops short raises `NeedMoreData`.
- **Type descriptions and tag checking** (`asnber.decoder`): `AsnType` and
  `Member` describe a type and its components, `CodecContext` limits
  nesting depth, `check_tags` checks a chain of outer tags against a type,
  `encode_tags` writes them, and `ber_decode` decodes a whole value.
- **Constructed types**: `Choice` (`asnber.choice`), `Sequence`
  (`asnber.sequence`) and `SequenceOf` (`asnber.sequence_of`), each able to
  decode BER, encode DER, check constraints and compare values.
- **Text output**: XER (XML) encoding and readable printing in
  `asnber.choice_text`, `asnber.sequence_text` and
  `asnber.sequence_of_text`.

## Installation

```
pip install .
```

## A first look

```python
from asnber.tlv import TagClass, make_tag, serialize_tag, serialize_length, fetch_tag, tag_string

tag = make_tag(TagClass.CONTEXT, 5)
encoded = serialize_tag(tag) + serialize_length(3) + b"abc"

length, decoded = fetch_tag(encoded)
print(length, tag_string(decoded))   # 1 [5]
```

Lengths of 128 and above use the long definite form:

```python
from asnber.tlv import serialize_length, fetch_length

serialize_length(300)                          # b'\x82\x01\x2c'
fetch_length(False, b"\x82\x01\x2c")           # (3, 300)
fetch_length(True, b"\x80")                    # (1, -1): indefinite length
```

## Running the tests

```
pip install .[test]
pytest
```