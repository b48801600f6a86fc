"""Byte-Safety Encoder.

Decides, per byte sequence, whether the bytes can be embedded in an XML
document as literal text or must be Base64-framed, and reverses that framing
on read.

Framing Rules:
    - Safe bytes are {9..13} and [32, 255]; they are written as Latin-1 text
    - Anything else is Base64-encoded, 76 characters per line, newline
      separated, with a leading and trailing newline, and the element is
      tagged encoding="base64"
    - VT (11) and FF (12) are safe bytes that XML 1.0 cannot carry even as
      character references; text containing them is Base64-framed as well
    - Text-bearing elements carry xml:space="preserve"
"""

import base64
import logging
import re
from typing import Any, Optional, Union

from lxml import etree

from record_xml.adapters.xml.names import (
    BASE64_ENCODING,
    ENCODING_ATTRIBUTE,
    PRESERVE,
    XML_SPACE_ATTRIBUTE,
)

logger = logging.getLogger(__name__)

# Max width of a Base64 line
BASE64_LINE_WIDTH = 76

# Line separator for normalized XML
BASE64_NEW_LINE = "\n"

_SAFE_BYTES = bytes(range(9, 14)) + bytes(range(32, 256))

_XML_INCOMPATIBLE = re.compile("[\x0b\x0c]")


def is_safe(data: bytes) -> bool:
    """Return True when every byte is an allowed control (9-13) or >= 32."""
    return not data.translate(None, _SAFE_BYTES)


def base64_frame(data: bytes) -> str:
    """Base64-encode data into newline-separated lines wrapped in newlines."""
    encoded = base64.b64encode(data).decode("ascii")
    lines = [encoded[i:i + BASE64_LINE_WIDTH] for i in range(0, len(encoded), BASE64_LINE_WIDTH)]
    return BASE64_NEW_LINE + BASE64_NEW_LINE.join(lines) + BASE64_NEW_LINE


def protected_element(name: str, value: Union[bytes, str]) -> etree._Element:
    """Create an element holding value, Base64-framed if it is not safe as text.

    Parameters:
        name: Element name
        value: Bytes to embed; strings are embedded as their UTF-8 bytes

    Returns:
        etree._Element: The new element
    """
    data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    element = etree.Element(name)

    text = data.decode("latin-1") if is_safe(data) else None
    if text is None or _XML_INCOMPATIBLE.search(text):
        element.set(ENCODING_ATTRIBUTE, BASE64_ENCODING)
        element.text = base64_frame(data)
    else:
        element.text = text

    return element


def preserve(element: etree._Element) -> etree._Element:
    """Mark element as whitespace-significant."""
    element.set(XML_SPACE_ATTRIBUTE, PRESERVE)
    return element


def simple_element(name: str, value: Any) -> etree._Element:
    """Create an element holding a primitive value as plain text."""
    element = etree.Element(name)
    if isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)
    return element


def element_value(element: Any) -> str:
    """Return the concatenated text content of element and its descendants."""
    return "".join(element.itertext())


def is_base64(encoding: Optional[str]) -> bool:
    return encoding is not None and encoding.lower() == BASE64_ENCODING


def extract_bytes(encoding: Optional[str], text: str) -> bytes:
    """Return the bytes an element's text represents.

    Parameters:
        encoding: Value of the element's encoding attribute, if any
        text: Element text

    Returns:
        bytes: Base64-decoded bytes when encoding is base64, otherwise the
            bytes of the literal text (Latin-1, or UTF-8 for text outside
            the Latin-1 range)

    Raises:
        binascii.Error: If Base64 content is malformed
    """
    if is_base64(encoding):
        return base64.b64decode(text.replace(BASE64_NEW_LINE, ""))

    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        return text.encode("utf-8")


def extract_text(encoding: Optional[str], text: str) -> str:
    """Return the UTF-8 string an element's text represents.

    Literal text that is not a Latin-1 rendering of UTF-8 bytes (for example
    a hand-written fixture) is returned unchanged.

    Raises:
        binascii.Error: If Base64 content is malformed
    """
    data = extract_bytes(encoding, text)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        if is_base64(encoding):
            logger.debug("Base64 content is not valid UTF-8, replacing undecodable bytes")
            return data.decode("utf-8", errors="replace")
        return text
