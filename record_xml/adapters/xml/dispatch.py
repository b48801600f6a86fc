"""Dynamic Dispatch Bridge.

Applies a decoded value to a record by capability name, so the field schema
table stays the single source of truth for traversal order. Unary decoders
call ``capability(value)``; keyed decoders first decode the element's "name"
child as the key and call ``capability(key, value)``.

A capability that cannot be found or refuses the value (wrong type, failed
validation) is logged as a warning and the field is skipped; decoding of the
rest of the document carries on.
"""

import logging
from typing import Any

from record_xml.adapters.xml.decoders import STRING_DECODER, ElementDecoder, KeyedDecoder
from record_xml.adapters.xml.names import NAME

logger = logging.getLogger(__name__)


def apply_value(
    record: Any,
    capability: str,
    decoder: ElementDecoder,
    value: Any,
    element: Any
) -> bool:
    """Apply a decoded value to record through the named capability.

    Parameters:
        record: Target record
        capability: Name of the record method to invoke
        decoder: Decoder that produced value (selects unary or keyed form)
        value: Decoded value
        element: Source element (keyed capabilities read their key from it)

    Returns:
        bool: True if the value was applied, False if the field was skipped
    """
    try:
        method = getattr(record, capability)
        if isinstance(decoder, KeyedDecoder):
            name_element = element.find(NAME)
            if name_element is None:
                raise ValueError(f"<{element.tag}> has no <{NAME}> child")
            method(STRING_DECODER.decode(name_element), value)
        else:
            method(value)
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Unable to call record method {capability}! {type(e).__name__}: {e}")
        return False
    return True


def decode_and_apply(element: Any, record: Any, capability: str, decoder: ElementDecoder) -> bool:
    """Decode element and apply the result; absent elements and values are skipped.

    Returns:
        bool: True if a value was applied
    """
    if element is None:
        return False

    value = decoder.decode(element)
    if value is None:
        return False

    return apply_value(record, capability, decoder, value, element)
