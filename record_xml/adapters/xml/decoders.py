"""Decoder Registry.

A fixed set of typed strategies, each turning one XML element into one typed
value. Decoders come in two shapes:

    - UnaryDecoder: the element's own text carries the value
    - KeyedDecoder: the value sits in a nested "value" child, and the key in a
      nested "name" child that the dispatch bridge decodes separately

Every decoder declares the type of the value it produces; keyed decoders also
declare the type of their key. A decoder returns None when the element holds
no usable value, and the caller skips the field.
"""

import binascii
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from record_xml.adapters.xml.byte_safety import element_value, extract_bytes, extract_text
from record_xml.adapters.xml.names import ENCODING_ATTRIBUTE, VALUE
from record_xml.domain.record import ChannelFactory, InMemoryChannelFactory

logger = logging.getLogger(__name__)

_HEX_LITERAL = re.compile(r"^([+-]?)(?:0[xX]|#)([0-9a-fA-F]+)$")
_OCTAL_LITERAL = re.compile(r"^([+-]?)0([0-7]+)$")
_DECIMAL_LITERAL = re.compile(r"^([+-]?)([1-9][0-9]*|0)$")


def decode_integer_literal(text: str) -> Optional[int]:
    """Parse a decimal, hex (0x, 0X, #) or octal (leading 0) integer literal.

    Returns:
        Optional[int]: The parsed value, or None if text is not a literal
    """
    text = text.strip()
    for pattern, base in ((_HEX_LITERAL, 16), (_OCTAL_LITERAL, 8), (_DECIMAL_LITERAL, 10)):
        match = pattern.match(text)
        if match:
            sign, digits = match.groups()
            value = int(digits, base)
            return -value if sign == "-" else value
    return None


class ElementDecoder(ABC):
    """Strategy that decodes one XML element into one typed value."""

    key_type: Optional[type] = None
    value_type: type = object

    @abstractmethod
    def decode(self, element: Any) -> Any:
        """Decode element, returning None when it holds no usable value."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UnaryDecoder(ElementDecoder):
    """Decoder whose value is the element's own text."""

    key_type = None


class KeyedDecoder(ElementDecoder):
    """Decoder for name/value pairs; the value is read from the "value" child."""

    key_type = str

    def decode(self, element: Any) -> Any:
        value_element = element.find(VALUE)
        if value_element is None:
            logger.debug(f"Keyed element <{element.tag}> has no <{VALUE}> child")
            return None
        return self.decode_value(value_element)

    @abstractmethod
    def decode_value(self, value_element: Any) -> Any:
        pass


def _framed_bytes(element: Any) -> Optional[bytes]:
    try:
        return extract_bytes(element.get(ENCODING_ATTRIBUTE), element_value(element))
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Malformed Base64 content in <{element.tag}>: {e}")
        return None


def _framed_text(element: Any) -> Optional[str]:
    try:
        return extract_text(element.get(ENCODING_ATTRIBUTE), element_value(element))
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Malformed Base64 content in <{element.tag}>: {e}")
        return None


class BooleanDecoder(UnaryDecoder):
    """True only for the literal "true" (any case); anything else is False."""

    value_type = bool

    def decode(self, element: Any) -> bool:
        return element_value(element).strip().lower() == "true"


class IntegerDecoder(UnaryDecoder):
    value_type = int

    def decode(self, element: Any) -> Optional[int]:
        value = decode_integer_literal(element_value(element))
        if value is None:
            logger.debug(f"Ignoring malformed integer in <{element.tag}>")
        return value


class BytesDecoder(UnaryDecoder):
    value_type = bytes

    def decode(self, element: Any) -> Optional[bytes]:
        return _framed_bytes(element)


class StringDecoder(UnaryDecoder):
    value_type = str

    def decode(self, element: Any) -> Optional[str]:
        return _framed_text(element)


class ChannelFactoryDecoder(UnaryDecoder):
    """Wraps the element's bytes in an in-memory channel factory."""

    value_type = ChannelFactory

    def decode(self, element: Any) -> Optional[ChannelFactory]:
        data = _framed_bytes(element)
        return None if data is None else InMemoryChannelFactory(data)


class StringBytesDecoder(KeyedDecoder):
    """Keyed decoder for alternate views (str key, bytes value)."""

    value_type = bytes

    def decode_value(self, value_element: Any) -> Optional[bytes]:
        return _framed_bytes(value_element)


class StringObjectDecoder(KeyedDecoder):
    """Keyed decoder for parameters (str key, value decoded as text)."""

    value_type = object

    def decode_value(self, value_element: Any) -> Optional[str]:
        return _framed_text(value_element)


BOOLEAN_DECODER = BooleanDecoder()
INTEGER_DECODER = IntegerDecoder()
BYTES_DECODER = BytesDecoder()
STRING_DECODER = StringDecoder()
CHANNEL_FACTORY_DECODER = ChannelFactoryDecoder()
STRING_BYTES_DECODER = StringBytesDecoder()
STRING_OBJECT_DECODER = StringObjectDecoder()
