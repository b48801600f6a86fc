"""Secure XML Parsing and Rendering.

Documents are parsed with defusedxml and rendered with lxml. The codec only
uses the ElementTree API both libraries share (tag, get, find, findall,
itertext), so parsed trees and built trees are interchangeable.

Security Impact:
    - DTDs, entity declarations and external references are rejected
    - Element nesting depth and document size are bounded
    - Fails fast on malformed XML
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET
from defusedxml.ElementTree import ParseError as SafeParseError
from lxml import etree

from record_xml.domain.ports import DocumentParseError, SecurityError

logger = logging.getLogger(__name__)


class SecureXMLParser:
    """Secure XML parser with depth and size limits.

    Example Usage:
        ```python
        parser = SecureXMLParser(max_depth=100)
        root = parser.parse_file("fixtures/sample.xml")
        ```
    """

    def __init__(self, max_depth: int = 100, max_document_size: Optional[int] = None):
        """Initialize parser with security limits.

        Parameters:
            max_depth: Maximum XML nesting depth (root is depth 0)
            max_document_size: Maximum document size in bytes (None = no limit)
        """
        self.max_depth = max_depth
        self.max_document_size = max_document_size

    def parse(self, source: Union[str, bytes], source_name: Optional[str] = None) -> Any:
        """Parse a serialized document and return its root element.

        Parameters:
            source: Document text or bytes
            source_name: Name used in error messages (e.g. a file path)

        Returns:
            The root element

        Raises:
            SecurityError: If the document violates a security limit
            DocumentParseError: If the document is not well-formed
        """
        data = source.encode("utf-8") if isinstance(source, str) else source

        if self.max_document_size is not None and len(data) > self.max_document_size:
            raise SecurityError(
                f"XML document size exceeds limit: {len(data):,} > {self.max_document_size:,} bytes"
            )

        try:
            root = SafeET.fromstring(data, forbid_dtd=True)
        except DefusedXmlException as e:
            raise SecurityError(f"Forbidden XML construct in {source_name or 'document'}: {e}") from e
        except SafeParseError as e:
            raise DocumentParseError(
                f"Failed to parse XML {source_name or 'document'}: {str(e)}",
                source=source_name
            ) from e

        self._check_depth(root)
        return root

    def parse_file(self, path: Union[str, Path]) -> Any:
        """Parse a document file and return its root element.

        Raises:
            DocumentParseError: If the file does not exist or is not well-formed
            SecurityError: If the document violates a security limit
        """
        source_path = Path(path)
        if not source_path.exists():
            raise DocumentParseError(f"XML source not found: {path}", source=str(path))

        if self.max_document_size is not None:
            file_size = source_path.stat().st_size
            if file_size > self.max_document_size:
                raise SecurityError(
                    f"XML file size exceeds limit: {file_size:,} > {self.max_document_size:,} bytes"
                )

        return self.parse(source_path.read_bytes(), source_name=str(path))

    def _check_depth(self, root: Any) -> None:
        """Raise SecurityError if any element is nested deeper than max_depth."""
        pending = [(root, 0)]
        while pending:
            element, depth = pending.pop()
            if depth > self.max_depth:
                raise SecurityError(
                    f"XML depth limit exceeded: {depth} > {self.max_depth}. "
                    "This may indicate a malicious XML file."
                )
            pending.extend((child, depth + 1) for child in element)


def render_document(root: etree._Element, pretty_print: bool = True, xml_declaration: bool = True) -> str:
    """Render an lxml element tree to text.

    Parameters:
        root: Root element
        pretty_print: Indent nested elements
        xml_declaration: Prefix the UTF-8 XML declaration

    Returns:
        str: The rendered document
    """
    if xml_declaration:
        rendered = etree.tostring(root, pretty_print=pretty_print, xml_declaration=True, encoding="UTF-8")
        return rendered.decode("utf-8")
    return etree.tostring(root, pretty_print=pretty_print, encoding="unicode")
