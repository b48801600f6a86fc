"""Test suite for the recordxml command line interface."""

import logging

import pytest
from typer.testing import CliRunner

from record_xml.adapters.xml.record_codec import XmlRecordCodec
from record_xml.cli import app
from record_xml.domain.record import Record
from record_xml.infrastructure.config_manager import CodecConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the handler changes made by the CLI logging setup."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def document(tmp_path):
    """Write a small document with one extracted record and two children."""
    primary = Record()
    primary.set_id("primary-1")
    primary.set_classification("INBOUND")
    primary.append_parameter("AUTHOR", "jdoe")
    primary.add_extracted_record(Record(id="extracted-1"))
    initial = Record()
    initial.set_current_form("UNKNOWN")

    path = tmp_path / "doc.xml"
    XmlRecordCodec(CodecConfig()).write_file(path, primary, [Record(id="c1"), Record(id="c2")], initial)
    return path


class TestInspectCommand:
    """Test the inspect command."""

    def test_inspect(self, document):
        """Test that the records in a document are listed."""
        result = runner.invoke(app, ["inspect", str(document)])

        assert result.exit_code == 0
        assert "primary-1" in result.stdout
        assert "extracted-1" in result.stdout
        assert "AUTHOR" in result.stdout
        assert "1 extracted record(s), 2 child record(s)" in result.stdout

    def test_inspect_malformed(self, tmp_path):
        """Test that malformed documents exit with an error."""
        path = tmp_path / "bad.xml"
        path.write_text("<result><answers>")

        result = runner.invoke(app, ["inspect", str(path)])

        assert result.exit_code == 1


class TestNormalizeCommand:
    """Test the normalize command."""

    def test_normalize_to_stdout(self, tmp_path):
        """Test that hand-written documents are rewritten in canonical form."""
        path = tmp_path / "hand.xml"
        path.write_text(
            "<result><answers><priority> 7 </priority><id>x</id>"
            "<outputable>true</outputable></answers></result>"
        )

        result = runner.invoke(app, ["normalize", str(path)])

        assert result.exit_code == 0
        decoded, _ = XmlRecordCodec(CodecConfig()).from_xml(result.stdout.encode("utf-8"))
        assert decoded.priority == 7
        assert decoded.id == "x"
        assert "<outputable>" not in result.stdout

    def test_normalize_to_file(self, document, tmp_path):
        """Test that normalized output can be written to a file."""
        output = tmp_path / "out" / "normalized.xml"

        result = runner.invoke(app, ["normalize", str(document), "--output", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == document.read_text(encoding="utf-8")


class TestVerifyCommand:
    """Test the verify command."""

    def test_verify_success(self, document):
        """Test that canonical documents verify."""
        result = runner.invoke(app, ["verify", str(document)])

        assert result.exit_code == 0

    def test_verify_failure(self, document, tmp_path):
        """Test that any failing document fails the command."""
        bad = tmp_path / "bad.xml"
        bad.write_text("<result>")

        result = runner.invoke(app, ["verify", str(document), str(bad)])

        assert result.exit_code == 1
        assert "1 of 2 document(s) failed" in result.stdout
