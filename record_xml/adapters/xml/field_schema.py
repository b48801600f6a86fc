"""Field Schema Table.

The ordered, fixed list of record fields that make up one record element. The
codec walks this table in both directions, so the order here is the element
order of every encoded record and the application order on decode.

Each descriptor binds:
    - element_name: XML element name
    - capability: Record method that applies a decoded value
    - decoder: Strategy that turns the element into a value
    - cardinality: SINGLE, REPEATED (one element per form) or KEYED_MULTI
      (one name/value element per entry)
    - accessor: Record attribute read on encode
    - prepare: Optional transform applied to the value before encoding
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from record_xml.adapters.xml import names
from record_xml.adapters.xml.decoders import (
    BOOLEAN_DECODER,
    BYTES_DECODER,
    CHANNEL_FACTORY_DECODER,
    INTEGER_DECODER,
    STRING_BYTES_DECODER,
    STRING_DECODER,
    STRING_OBJECT_DECODER,
    ElementDecoder,
)
from record_xml.domain.record import Record


class Cardinality(str, Enum):
    """How many elements a field contributes to a record element."""
    SINGLE = "single"
    REPEATED = "repeated"
    KEYED_MULTI = "keyed_multi"


def strip_error_terminator(processing_error: Optional[str]) -> Optional[str]:
    """Drop the terminator appended to the last processing error entry."""
    if processing_error is None:
        return None
    return processing_error[:-1]


@dataclass(frozen=True)
class FieldDescriptor:
    """Binding of one XML element name to a record field."""

    element_name: str
    capability: str
    decoder: ElementDecoder
    cardinality: Cardinality
    accessor: str
    prepare: Optional[Callable[[Any], Any]] = None

    @property
    def is_primitive(self) -> bool:
        return self.element_name in PRIMITIVE_DEFAULTS

    @property
    def default(self) -> Any:
        return PRIMITIVE_DEFAULTS.get(self.element_name)

    def read(self, record: Record) -> Any:
        """Read this field's current value from record, ready for encoding."""
        value = getattr(record, self.accessor)
        return self.prepare(value) if self.prepare is not None else value


FIELD_SCHEMA: tuple[FieldDescriptor, ...] = (
    FieldDescriptor(names.DATA, names.SET_CHANNEL_FACTORY, CHANNEL_FACTORY_DECODER, Cardinality.SINGLE, "channel_factory"),
    FieldDescriptor(names.BIRTH_ORDER, names.SET_BIRTH_ORDER, INTEGER_DECODER, Cardinality.SINGLE, "birth_order"),
    FieldDescriptor(names.BROKEN, names.SET_BROKEN, STRING_DECODER, Cardinality.SINGLE, "broken"),
    FieldDescriptor(names.CLASSIFICATION, names.SET_CLASSIFICATION, STRING_DECODER, Cardinality.SINGLE, "classification"),
    FieldDescriptor(names.CURRENT_FORM, names.PUSH_CURRENT_FORM, STRING_DECODER, Cardinality.REPEATED, "all_current_forms"),
    FieldDescriptor(names.FILENAME, names.SET_FILENAME, STRING_DECODER, Cardinality.SINGLE, "filename"),
    FieldDescriptor(names.FONT_ENCODING, names.SET_FONT_ENCODING, STRING_DECODER, Cardinality.SINGLE, "font_encoding"),
    FieldDescriptor(names.FOOTER, names.SET_FOOTER, BYTES_DECODER, Cardinality.SINGLE, "footer"),
    FieldDescriptor(names.HEADER, names.SET_HEADER, BYTES_DECODER, Cardinality.SINGLE, "header"),
    FieldDescriptor(names.HEADER_ENCODING, names.SET_HEADER_ENCODING, STRING_DECODER, Cardinality.SINGLE, "header_encoding"),
    FieldDescriptor(names.ID, names.SET_ID, STRING_DECODER, Cardinality.SINGLE, "id"),
    FieldDescriptor(names.NUM_CHILDREN, names.SET_NUM_CHILDREN, INTEGER_DECODER, Cardinality.SINGLE, "num_children"),
    FieldDescriptor(names.NUM_SIBLINGS, names.SET_NUM_SIBLINGS, INTEGER_DECODER, Cardinality.SINGLE, "num_siblings"),
    FieldDescriptor(names.OUTPUTABLE, names.SET_OUTPUTABLE, BOOLEAN_DECODER, Cardinality.SINGLE, "outputable"),
    FieldDescriptor(names.PRIORITY, names.SET_PRIORITY, INTEGER_DECODER, Cardinality.SINGLE, "priority"),
    FieldDescriptor(
        names.PROCESSING_ERROR, names.ADD_PROCESSING_ERROR, STRING_DECODER, Cardinality.SINGLE, "processing_error",
        prepare=strip_error_terminator
    ),
    FieldDescriptor(names.TRANSACTION_ID, names.SET_TRANSACTION_ID, STRING_DECODER, Cardinality.SINGLE, "transaction_id"),
    FieldDescriptor(names.WORK_BUNDLE_ID, names.SET_WORK_BUNDLE_ID, STRING_DECODER, Cardinality.SINGLE, "work_bundle_id"),
    FieldDescriptor(names.META, names.APPEND_PARAMETER, STRING_OBJECT_DECODER, Cardinality.KEYED_MULTI, "parameters"),
    FieldDescriptor(names.VIEW, names.ADD_ALTERNATE_VIEW, STRING_BYTES_DECODER, Cardinality.KEYED_MULTI, "alternate_views"),
)


def _capture_primitive_defaults() -> dict[str, Any]:
    probe = Record()
    return {
        names.BIRTH_ORDER: probe.birth_order,
        names.NUM_CHILDREN: probe.num_children,
        names.NUM_SIBLINGS: probe.num_siblings,
        names.OUTPUTABLE: probe.outputable,
        names.PRIORITY: probe.priority,
    }


# Defaults of the primitive fields, taken from a freshly-constructed record
PRIMITIVE_DEFAULTS: dict[str, Any] = _capture_primitive_defaults()

FIELDS_BY_NAME: dict[str, FieldDescriptor] = {field.element_name: field for field in FIELD_SCHEMA}
