"""Test suite for the Record model and payload channels."""

import io

import pytest
from pydantic import ValidationError

from record_xml.domain.ports import PayloadReadError
from record_xml.domain.record import (
    ChannelFactory,
    FileChannelFactory,
    InMemoryChannelFactory,
    Record,
    get_bytes_from_channel,
)


class GrowingChannelFactory(ChannelFactory):
    """Reports a small size but yields more bytes than reported."""

    def create(self):
        return io.BytesIO(b"x" * 32)

    def size(self) -> int:
        return 4


class TestRecordDefaults:
    """Test constructor defaults."""

    def test_defaults(self):
        """Test the primitive and collection defaults."""
        record = Record()

        assert record.priority == 100
        assert record.outputable is True
        assert record.birth_order == 0
        assert record.num_children == 0
        assert record.num_siblings == 0
        assert record.current_forms == []
        assert record.parameters == {}
        assert record.alternate_views == {}
        assert record.extracted_records == []
        assert record.channel_factory is None
        assert record.data is None
        assert not record.is_broken

    def test_fresh_records_are_equal(self):
        """Test that two fresh records compare equal."""
        assert Record() == Record()


class TestRecordSetters:
    """Test setters and validation."""

    def test_set_broken(self):
        """Test that a broken reason marks the record broken."""
        record = Record()
        record.set_broken("bad header")

        assert record.is_broken
        assert record.broken == "bad header"

    def test_invalid_assignment_raises(self):
        """Test that assignments are validated."""
        record = Record()

        with pytest.raises(ValidationError):
            record.set_priority("high")

    def test_processing_errors_accumulate(self):
        """Test that each processing error is newline-terminated."""
        record = Record()
        record.add_processing_error("one")
        record.add_processing_error("two")

        assert record.processing_error == "one\ntwo\n"

    def test_processing_error_requires_str(self):
        """Test that non-string processing errors are rejected."""
        with pytest.raises(TypeError):
            Record().add_processing_error(5)


class TestFormStack:
    """Test the current form stack."""

    def test_push_puts_form_on_top(self):
        """Test that push_current_form inserts at the top."""
        record = Record()
        record.push_current_form("A")
        record.push_current_form("B")

        assert record.current_form == "B"
        assert record.all_current_forms == ["B", "A"]

    def test_set_replaces_top(self):
        """Test that set_current_form replaces only the top form."""
        record = Record()
        record.set_current_form("A")
        record.push_current_form("B")
        record.set_current_form("C")

        assert record.all_current_forms == ["C", "A"]

    def test_all_current_forms_is_a_copy(self):
        """Test that callers cannot mutate the stack through the accessor."""
        record = Record()
        record.push_current_form("A")
        record.all_current_forms.append("B")

        assert record.all_current_forms == ["A"]

    def test_push_requires_str(self):
        """Test that non-string forms are rejected."""
        with pytest.raises(TypeError):
            Record().push_current_form(1)


class TestParameters:
    """Test the multi-valued parameter map."""

    def test_append_keeps_values(self):
        """Test that append_parameter accumulates values."""
        record = Record()
        record.append_parameter("K", "a")
        record.append_parameter("K", "b")

        assert record.get_parameter("K") == ["a", "b"]

    def test_put_replaces_values(self):
        """Test that put_parameter replaces earlier values."""
        record = Record()
        record.append_parameter("K", "a")
        record.put_parameter("K", "b")

        assert record.get_parameter("K") == ["b"]

    def test_put_expands_iterables(self):
        """Test that iterables store each item while strings stay whole."""
        record = Record()
        record.put_parameter("LIST", ("x", "y"))
        record.put_parameter("TEXT", "xy")

        assert record.get_parameter("LIST") == ["x", "y"]
        assert record.get_parameter("TEXT") == ["xy"]

    def test_set_parameters_copies(self):
        """Test that set_parameters copies the given map."""
        source = {"K": ["a"]}
        record = Record()
        record.set_parameters(source)
        source["K"].append("b")

        assert record.get_parameter("K") == ["a"]

    def test_missing_parameter(self):
        """Test that a missing key returns None."""
        assert Record().get_parameter("NOPE") is None

    def test_key_must_be_str(self):
        """Test that non-string keys are rejected."""
        with pytest.raises(TypeError):
            Record().append_parameter(1, "a")


class TestAlternateViewsAndExtracted:
    """Test alternate views and extracted records."""

    def test_add_and_remove_view(self):
        """Test that None removes an alternate view."""
        record = Record()
        record.add_alternate_view("TEXT", b"body")
        assert record.alternate_views == {"TEXT": b"body"}

        record.add_alternate_view("TEXT", None)
        assert record.alternate_views == {}

    def test_view_requires_bytes(self):
        """Test that non-bytes view data is rejected."""
        with pytest.raises(TypeError):
            Record().add_alternate_view("TEXT", "body")

    def test_extracted_records(self):
        """Test that only records can be extracted records."""
        record = Record()
        record.add_extracted_record(Record())

        assert len(record.extracted_records) == 1
        with pytest.raises(TypeError):
            record.add_extracted_record("not a record")


class TestChannels:
    """Test payload channel factories and materialization."""

    def test_set_data(self):
        """Test that set_data wraps bytes in an in-memory factory."""
        record = Record()
        record.set_data(b"abc")

        assert record.channel_factory == InMemoryChannelFactory(b"abc")
        assert record.data == b"abc"

        record.set_data(None)
        assert record.channel_factory is None

    def test_file_channel_factory(self, tmp_path):
        """Test that file-backed payloads are read lazily."""
        payload = tmp_path / "payload.bin"
        payload.write_bytes(b"\x00file\xff")
        factory = FileChannelFactory(payload)

        assert factory.size() == 6
        assert get_bytes_from_channel(factory) == b"\x00file\xff"

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises PayloadReadError."""
        with pytest.raises(PayloadReadError):
            get_bytes_from_channel(FileChannelFactory(tmp_path / "missing.bin"))

    def test_size_limit(self):
        """Test that payloads above the limit are refused."""
        with pytest.raises(PayloadReadError) as exc_info:
            get_bytes_from_channel(InMemoryChannelFactory(b"x" * 10), max_size=5)

        assert exc_info.value.size == 10
        assert exc_info.value.max_size == 5

    def test_channel_longer_than_reported(self):
        """Test that the limit also applies to the bytes actually read."""
        with pytest.raises(PayloadReadError):
            get_bytes_from_channel(GrowingChannelFactory(), max_size=8)

    def test_payload_read_error_is_os_error(self):
        """Test that PayloadReadError can be handled as an OSError."""
        assert issubclass(PayloadReadError, OSError)
