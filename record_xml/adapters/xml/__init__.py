"""XML codec adapter for records."""

from record_xml.adapters.xml.record_codec import (
    XmlRecordCodec,
    decode_document,
    decode_main_fields,
    decode_setup,
    encode_document,
    encode_main_fields,
)

__all__ = [
    "XmlRecordCodec",
    "decode_document",
    "decode_main_fields",
    "decode_setup",
    "encode_document",
    "encode_main_fields",
]
