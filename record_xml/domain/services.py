"""Domain Services.

Record construction and verification helpers that sit on top of the ports:

    - create_standard_initial_record builds the typical setup record for a
      payload, pre-populated with fingerprints from a HashingPort
    - compare_records / verify_round_trip check that a document survives a
      decode/encode/decode cycle unchanged
"""

import logging
from typing import Any, Optional, Union

from record_xml.domain.ports import CodecError, HashingPort, RecordCodecPort, Result
from record_xml.domain.record import ChannelFactory, Record

logger = logging.getLogger(__name__)

_COMPARED_FIELDS = tuple(name for name in Record.model_fields if name not in ("channel_factory", "extracted_records"))


def create_standard_initial_record(
    channel_factory: ChannelFactory,
    classification: str,
    form_and_file_type: str,
    hasher: HashingPort
) -> Record:
    """Set up a typical initial record for a payload.

    The payload is hashed on a temporary record and only the resulting
    parameters are carried over, so the returned record has no payload.

    Parameters:
        channel_factory: Payload to fingerprint
        classification: Initial classification string
        form_and_file_type: Initial current form and file type
        hasher: Fingerprinting collaborator

    Returns:
        Record: The initial record
    """
    record = Record()
    hashed = Record()

    hashed.set_channel_factory(channel_factory)
    hasher.hash(hashed)
    record.set_parameters(hashed.parameters)

    record.set_current_form(form_and_file_type)
    record.set_file_type(form_and_file_type)
    record.set_classification(classification)

    return record


def _payload(record: Record) -> Any:
    if record.channel_factory is None:
        return None
    try:
        return record.data
    except OSError as e:
        return f"<unreadable: {e}>"


def compare_records(expected: Record, actual: Record, path: str = "record") -> list[str]:
    """List the fields that differ between two records, recursing into extracted records.

    Payloads are compared by content rather than by channel factory.

    Returns:
        list[str]: One "path.field" entry per difference
    """
    differences = []

    for name in _COMPARED_FIELDS:
        if getattr(expected, name) != getattr(actual, name):
            differences.append(f"{path}.{name}")

    if _payload(expected) != _payload(actual):
        differences.append(f"{path}.data")

    if len(expected.extracted_records) != len(actual.extracted_records):
        differences.append(f"{path}.extracted_records")
    else:
        for index, (left, right) in enumerate(zip(expected.extracted_records, actual.extracted_records), start=1):
            differences.extend(compare_records(left, right, f"{path}/extract{index}"))

    return differences


def verify_round_trip(codec: RecordCodecPort, text: Union[str, bytes]) -> Result[str]:
    """Check that a document decodes, re-encodes and decodes to the same records.

    Parameters:
        codec: Codec used for every step
        text: Serialized document

    Returns:
        Result[str]: Success carrying the re-encoded document, or a failure whose
            details list the differing fields
    """
    try:
        primary, children = codec.from_xml(text)
        initial: Optional[Record] = codec.setup_from_xml(text) or Record()

        rendered = codec.to_xml(primary, children, initial)

        round_primary, round_children = codec.from_xml(rendered)
        round_initial = codec.setup_from_xml(rendered) or Record()
    except CodecError as e:
        logger.warning(f"Round trip failed: {e}")
        return Result.failure_result(e)

    differences = compare_records(initial, round_initial, "setup")
    differences.extend(compare_records(primary, round_primary, "answers"))

    if len(children) != len(round_children):
        differences.append("answers.children")
    else:
        for index, (left, right) in enumerate(zip(children, round_children), start=1):
            differences.extend(compare_records(left, right, f"answers/att{index}"))

    if differences:
        return Result.failure_result(
            f"Round trip changed {len(differences)} field(s)",
            error_type="RoundTripMismatch",
            error_details={"differences": differences}
        )

    return Result.success_result(rendered)
