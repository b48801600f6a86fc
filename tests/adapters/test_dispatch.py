"""Test suite for the dynamic dispatch bridge."""

import logging

from lxml import etree

from record_xml.adapters.xml.decoders import (
    CHANNEL_FACTORY_DECODER,
    INTEGER_DECODER,
    STRING_BYTES_DECODER,
    STRING_DECODER,
    STRING_OBJECT_DECODER,
)
from record_xml.adapters.xml.dispatch import apply_value, decode_and_apply
from record_xml.domain.record import InMemoryChannelFactory, Record

DISPATCH_LOGGER = "record_xml.adapters.xml.dispatch"


class TestApplyValue:
    """Test invoking record capabilities by name."""

    def test_unary_capability(self):
        """Test that unary capabilities receive the value."""
        record = Record()

        applied = apply_value(record, "set_priority", INTEGER_DECODER, 5, etree.Element("priority"))

        assert applied is True
        assert record.priority == 5

    def test_keyed_capability(self):
        """Test that keyed capabilities receive the decoded name as key."""
        record = Record()
        view = etree.fromstring("<view><name>TEXT</name><value>body</value></view>")

        applied = apply_value(record, "add_alternate_view", STRING_BYTES_DECODER, b"body", view)

        assert applied is True
        assert record.alternate_views == {"TEXT": b"body"}

    def test_missing_capability(self, caplog):
        """Test that an unknown capability is logged and skipped."""
        record = Record()

        with caplog.at_level(logging.WARNING, logger=DISPATCH_LOGGER):
            applied = apply_value(record, "set_colour", STRING_DECODER, "red", etree.Element("colour"))

        assert applied is False
        assert "Unable to call record method set_colour!" in caplog.text

    def test_type_mismatch(self, caplog):
        """Test that a value of the wrong type is logged and skipped."""
        record = Record()

        with caplog.at_level(logging.WARNING, logger=DISPATCH_LOGGER):
            applied = apply_value(
                record, "set_birth_order", CHANNEL_FACTORY_DECODER,
                InMemoryChannelFactory(b"x"), etree.Element("birthOrder")
            )

        assert applied is False
        assert record.birth_order == 0
        assert "set_birth_order" in caplog.text

    def test_rejected_form(self, caplog):
        """Test that a capability raising TypeError is logged and skipped."""
        record = Record()

        with caplog.at_level(logging.WARNING, logger=DISPATCH_LOGGER):
            applied = apply_value(record, "push_current_form", INTEGER_DECODER, 3, etree.Element("currentForm"))

        assert applied is False
        assert record.all_current_forms == []

    def test_keyed_without_name(self, caplog):
        """Test that a keyed element with no name child is skipped."""
        record = Record()
        meta = etree.fromstring("<meta><value>v</value></meta>")

        with caplog.at_level(logging.WARNING, logger=DISPATCH_LOGGER):
            applied = apply_value(record, "append_parameter", STRING_OBJECT_DECODER, "v", meta)

        assert applied is False
        assert record.parameters == {}
        assert "has no <name> child" in caplog.text


class TestDecodeAndApply:
    """Test decoding followed by dispatch."""

    def test_absent_element(self):
        """Test that a missing element is skipped."""
        record = Record()

        assert decode_and_apply(None, record, "set_id", STRING_DECODER) is False
        assert record.id is None

    def test_absent_value(self):
        """Test that an element without a usable value is skipped."""
        record = Record()
        malformed = etree.fromstring("<numChildren>many</numChildren>")

        assert decode_and_apply(malformed, record, "set_num_children", INTEGER_DECODER) is False
        assert record.num_children == 0

    def test_repeated_keys_append(self):
        """Test that repeated meta elements accumulate under one key."""
        record = Record()
        for value in ("one", "two"):
            meta = etree.fromstring(f"<meta><name>K</name><value>{value}</value></meta>")
            decode_and_apply(meta, record, "append_parameter", STRING_OBJECT_DECODER)

        assert record.parameters == {"K": ["one", "two"]}
