"""Record XML Codec.

This adapter implements the RecordCodecPort contract for XML documents. It
converts records to and from the fixture document layout used for golden-file
comparisons:

    <result>
      <setup>...initial record...</setup>
      <answers>
        ...primary record...
        <extract1>...</extract1>   (extracted records, 1-indexed)
        <att1>...</att1>           (child records, 1-indexed)
      </answers>
    </result>

Error Handling:
    - Malformed values (e.g. a non-numeric birthOrder) are treated as absent
    - Schema mismatches are logged as warnings and the field is skipped
    - Payloads that cannot be materialized are logged as errors and omitted
    - None of these invalidate the rest of the document

Architecture:
    - Implements RecordCodecPort (Hexagonal Architecture)
    - Field traversal is driven entirely by FIELD_SCHEMA
    - Decoding works on any ElementTree-compatible tree (defusedxml or lxml);
      encoding builds lxml trees
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from lxml import etree

from record_xml.adapters.xml.byte_safety import preserve, protected_element, simple_element
from record_xml.adapters.xml.dispatch import decode_and_apply
from record_xml.adapters.xml.field_schema import FIELD_SCHEMA, Cardinality, FieldDescriptor
from record_xml.adapters.xml.names import (
    ANSWERS,
    ATTACHMENT_PREFIX,
    EXTRACT_PREFIX,
    NAME,
    RESULT,
    SETUP,
    VALUE,
)
from record_xml.domain.ports import PayloadReadError, RecordCodecPort
from record_xml.domain.record import MAX_BYTE_ARRAY_SIZE, ChannelFactory, Record, get_bytes_from_channel
from record_xml.infrastructure.config_manager import CodecConfig
from record_xml.infrastructure.xml_parser import SecureXMLParser, render_document

logger = logging.getLogger(__name__)


# ============================================================================
# Decoding
# ============================================================================

def decode_main_fields(element: Any, record: Record) -> Record:
    """Apply every schema field found in element to record.

    Extracted records and children are not handled here.

    Parameters:
        element: Record element (setup, answers, extractN or attN)
        record: Record the decoded values are applied to

    Returns:
        Record: The record that was passed in
    """
    for field in FIELD_SCHEMA:
        if field.cardinality is Cardinality.SINGLE:
            decode_and_apply(element.find(field.element_name), record, field.capability, field.decoder)
        else:
            for child in element.findall(field.element_name):
                decode_and_apply(child, record, field.capability, field.decoder)

    return record


def _root_of(document: Any) -> Any:
    return document.getroot() if hasattr(document, "getroot") else document


def decode_document(document: Any) -> tuple[Record, list[Record]]:
    """Decode the answers section of a document.

    Parameters:
        document: Parsed document (ElementTree, lxml tree or root element)

    Returns:
        tuple: (primary record with its extracted records, list of child records)
    """
    if document is None:
        raise ValueError("document is required")

    root = _root_of(document)
    primary = Record()
    children: list[Record] = []

    answers = root.find(ANSWERS)
    if answers is None:
        logger.warning(f"Document <{root.tag}> has no <{ANSWERS}> element")
        return primary, children

    decode_main_fields(answers, primary)

    for answer_child in answers:
        child_name = answer_child.tag
        if not isinstance(child_name, str):
            continue

        if child_name.startswith(EXTRACT_PREFIX):
            primary.add_extracted_record(decode_main_fields(answer_child, Record()))
        elif child_name.startswith(ATTACHMENT_PREFIX):
            children.append(decode_main_fields(answer_child, Record()))

    return primary, children


def decode_setup(document: Any) -> Optional[Record]:
    """Decode the setup (initial) record of a document, None if absent."""
    if document is None:
        raise ValueError("document is required")

    setup = _root_of(document).find(SETUP)
    if setup is None:
        return None
    return decode_main_fields(setup, Record())


# ============================================================================
# Encoding
# ============================================================================

def _encode_single(element: etree._Element, field: FieldDescriptor, value: Any, max_payload_size: int) -> None:
    if value is None:
        return

    if field.is_primitive:
        if value != field.default:
            element.append(simple_element(field.element_name, value))
        return

    if isinstance(value, ChannelFactory):
        try:
            value = get_bytes_from_channel(value, max_payload_size)
        except PayloadReadError as e:
            logger.error(f"Could not get bytes from channel for <{field.element_name}>: {e}", exc_info=True)
            return

    element.append(preserve(protected_element(field.element_name, value)))


def _encode_repeated(element: etree._Element, field: FieldDescriptor, values: Any) -> None:
    # Each form goes in at the same position, so the top of the stack ends up last
    position = len(element)
    for value in values:
        element.insert(position, preserve(protected_element(field.element_name, value)))


def _encode_keyed(element: etree._Element, field: FieldDescriptor, entries: Any) -> None:
    for key, values in entries.items():
        items = [values] if isinstance(values, (bytes, bytearray)) else values
        for item in items:
            keyed_element = etree.SubElement(element, field.element_name)
            keyed_element.append(preserve(protected_element(NAME, key)))
            if not isinstance(item, (bytes, bytearray)):
                item = str(item)
            keyed_element.append(preserve(protected_element(VALUE, item)))


def encode_main_fields(record: Record, element: etree._Element, max_payload_size: int = MAX_BYTE_ARRAY_SIZE) -> None:
    """Append an element for every non-default field of record to element.

    Extracted records and children are not handled here.

    Parameters:
        record: Source record (read only)
        element: Element the field elements are appended to
        max_payload_size: Largest payload that will be materialized
    """
    for field in FIELD_SCHEMA:
        value = field.read(record)
        if field.cardinality is Cardinality.SINGLE:
            _encode_single(element, field, value, max_payload_size)
        elif field.cardinality is Cardinality.REPEATED:
            _encode_repeated(element, field, value)
        else:
            _encode_keyed(element, field, value)


def build_document(
    primary: Record,
    children: list[Record],
    initial: Record,
    max_payload_size: int = MAX_BYTE_ARRAY_SIZE
) -> etree._Element:
    """Build the document tree for a primary record, its children and the setup record.

    Returns:
        etree._Element: The root element
    """
    if primary is None:
        raise ValueError("primary record is required")
    if children is None:
        raise ValueError("children list is required")
    if initial is None:
        raise ValueError("initial record is required")

    root = etree.Element(RESULT)

    setup_element = etree.SubElement(root, SETUP)
    encode_main_fields(initial, setup_element, max_payload_size)

    answers_element = etree.SubElement(root, ANSWERS)
    encode_main_fields(primary, answers_element, max_payload_size)

    for index, extracted_record in enumerate(primary.extracted_records, start=1):
        extract_element = etree.SubElement(answers_element, f"{EXTRACT_PREFIX}{index}")
        encode_main_fields(extracted_record, extract_element, max_payload_size)

    for index, child in enumerate(children, start=1):
        child_element = etree.SubElement(answers_element, f"{ATTACHMENT_PREFIX}{index}")
        encode_main_fields(child, child_element, max_payload_size)

    return root


def encode_document(
    primary: Record,
    children: list[Record],
    initial: Record,
    config: Optional[CodecConfig] = None
) -> str:
    """Encode a primary record, its children and the setup record as XML text.

    Parameters:
        primary: Record for the answers section (its extracted records included)
        children: Child records, emitted as att1..attN
        initial: Record for the setup section
        config: Rendering and payload limits (defaults to CodecConfig())

    Returns:
        str: The rendered document
    """
    config = config or CodecConfig()
    root = build_document(primary, children, initial, config.max_payload_size)
    return render_document(root, pretty_print=config.pretty_print, xml_declaration=config.xml_declaration)


# ============================================================================
# Adapter
# ============================================================================

class XmlRecordCodec(RecordCodecPort):
    """XML codec adapter with secure parsing and configurable rendering.

    Example Usage:
        ```python
        codec = XmlRecordCodec()
        xml_text = codec.to_xml(primary, children, initial)
        decoded, decoded_children = codec.from_xml(xml_text)
        ```
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        """Initialize the codec.

        Parameters:
            config: Codec configuration (defaults to the application settings)
        """
        if config is None:
            from record_xml.infrastructure.settings import settings
            config = settings.codec_config

        self.config = config
        self.parser = SecureXMLParser(
            max_depth=config.max_depth,
            max_document_size=config.max_document_size
        )

    def parse(self, text: Union[str, bytes]) -> Any:
        """Parse document text into a root element."""
        return self.parser.parse(text)

    def from_xml(self, text: Union[str, bytes]) -> tuple[Record, list[Record]]:
        return decode_document(self.parser.parse(text))

    def setup_from_xml(self, text: Union[str, bytes]) -> Optional[Record]:
        return decode_setup(self.parser.parse(text))

    def to_xml(self, primary: Record, children: list[Record], initial: Record) -> str:
        return encode_document(primary, children, initial, self.config)

    def read_file(self, path: Union[str, Path]) -> tuple[Record, list[Record]]:
        """Decode a document file into the primary record and its children."""
        return decode_document(self.parser.parse_file(path))

    def write_file(
        self,
        path: Union[str, Path],
        primary: Record,
        children: list[Record],
        initial: Record
    ) -> Path:
        """Encode records into a document file, creating parent directories.

        Returns:
            Path: The written file
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_xml(primary, children, initial), encoding="utf-8")
        logger.info(f"Wrote record document to {target}")
        return target
