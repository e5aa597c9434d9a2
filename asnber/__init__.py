"""BER/DER tag-length-value handling and constructed ASN.1 type codecs."""

__version__ = "0.1.0"

__all__ = [
    "tlv",
    "decoder",
    "choice",
    "choice_text",
    "sequence_tags",
    "sequence",
    "sequence_of",
    "sequence_text",
    "sequence_of_text",
]