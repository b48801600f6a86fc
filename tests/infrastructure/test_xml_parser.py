"""Test suite for secure XML parsing and rendering.

Security Impact:
    - Verifies DTDs and entity declarations are rejected
    - Confirms depth and size limits are enforced
"""

import pytest
from lxml import etree

from record_xml.domain.ports import DocumentParseError, SecurityError
from record_xml.infrastructure.xml_parser import SecureXMLParser, render_document


class TestSecureXMLParser:
    """Test SecureXMLParser."""

    def test_parse_text_and_bytes(self):
        """Test that both text and bytes are accepted."""
        parser = SecureXMLParser()

        assert parser.parse("<result/>").tag == "result"
        assert parser.parse(b"<result/>").tag == "result"

    def test_dtd_forbidden(self):
        """Test that documents with a DTD are rejected."""
        parser = SecureXMLParser()
        document = '<!DOCTYPE result [<!ENTITY boom "x">]><result>&boom;</result>'

        with pytest.raises(SecurityError):
            parser.parse(document)

    def test_malformed_document(self):
        """Test that malformed XML raises DocumentParseError."""
        parser = SecureXMLParser()

        with pytest.raises(DocumentParseError) as exc_info:
            parser.parse("<result><answers></result>", source_name="broken.xml")

        assert exc_info.value.source == "broken.xml"

    def test_depth_limit(self):
        """Test that deeply nested documents are rejected."""
        parser = SecureXMLParser(max_depth=5)
        document = "<a>" * 7 + "</a>" * 7

        with pytest.raises(SecurityError, match="depth limit exceeded"):
            parser.parse(document)

    def test_depth_within_limit(self):
        """Test that nesting up to the limit is accepted."""
        parser = SecureXMLParser(max_depth=5)
        document = "<a>" * 6 + "</a>" * 6

        assert parser.parse(document).tag == "a"

    def test_size_limit(self):
        """Test that oversized documents are rejected before parsing."""
        parser = SecureXMLParser(max_document_size=16)

        with pytest.raises(SecurityError, match="size exceeds limit"):
            parser.parse("<result>" + "x" * 32 + "</result>")

    def test_parse_file(self, tmp_path):
        """Test parsing a document from disk."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<result><answers/></result>")

        root = SecureXMLParser().parse_file(path)

        assert root.find("answers") is not None

    def test_parse_missing_file(self, tmp_path):
        """Test that a missing file raises DocumentParseError."""
        with pytest.raises(DocumentParseError, match="not found"):
            SecureXMLParser().parse_file(tmp_path / "missing.xml")

    def test_parse_file_size_limit(self, tmp_path):
        """Test that oversized files are rejected from their size on disk."""
        path = tmp_path / "big.xml"
        path.write_bytes(b"<result>" + b"x" * 64 + b"</result>")

        with pytest.raises(SecurityError):
            SecureXMLParser(max_document_size=32).parse_file(path)


class TestRenderDocument:
    """Test render_document."""

    def test_with_declaration(self):
        """Test that the UTF-8 declaration is emitted by default."""
        rendered = render_document(etree.Element("result"))

        assert rendered.startswith("<?xml version='1.0' encoding='UTF-8'?>")
        assert "<result/>" in rendered

    def test_without_declaration(self):
        """Test rendering without a declaration or indentation."""
        root = etree.Element("result")
        etree.SubElement(root, "answers")

        assert render_document(root, pretty_print=False, xml_declaration=False) == "<result><answers/></result>"
