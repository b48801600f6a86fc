"""Record Model and Payload Channels.

This module defines the Record, the unit of document-processing state that the
codec serializes, together with the channel factories that back its payload.

Architecture:
    - Pure domain model with no XML dependencies
    - Validated on assignment via Pydantic V2, so a setter handed a value of
      the wrong type raises instead of corrupting the record
    - Payload bytes live behind a ChannelFactory and are only materialized
      on demand, bounded by a maximum size
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from record_xml.domain.ports import PayloadReadError

# Largest payload that will be materialized into memory
MAX_BYTE_ARRAY_SIZE = 2**31 - 1 - 8

DEFAULT_PRIORITY = 100


class ChannelFactory(ABC):
    """Source of fresh readable channels over a payload."""

    @abstractmethod
    def create(self) -> BinaryIO:
        """Open a new binary channel positioned at the start of the payload."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Return the payload size in bytes."""
        pass


@dataclass(frozen=True)
class InMemoryChannelFactory(ChannelFactory):
    """Channel factory over bytes held in memory."""

    data: bytes = b""

    def create(self) -> BinaryIO:
        return io.BytesIO(self.data)

    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class FileChannelFactory(ChannelFactory):
    """Channel factory that reads the payload lazily from a file."""

    path: Path

    def create(self) -> BinaryIO:
        return open(self.path, "rb")

    def size(self) -> int:
        return Path(self.path).stat().st_size


def get_bytes_from_channel(factory: ChannelFactory, max_size: int = MAX_BYTE_ARRAY_SIZE) -> bytes:
    """Materialize the full payload of a channel factory.

    Parameters:
        factory: Channel factory to read from
        max_size: Largest payload accepted, in bytes

    Returns:
        bytes: The payload

    Raises:
        PayloadReadError: If the channel cannot be read or the payload exceeds max_size
    """
    try:
        size = factory.size()
    except OSError as e:
        raise PayloadReadError(f"Could not determine payload size: {e}", max_size=max_size) from e

    if size > max_size:
        raise PayloadReadError(
            f"Payload size {size:,} exceeds limit of {max_size:,} bytes",
            size=size,
            max_size=max_size
        )

    try:
        with factory.create() as channel:
            data = channel.read()
    except OSError as e:
        raise PayloadReadError(f"Could not read payload: {e}", size=size, max_size=max_size) from e

    # The channel may have grown since size() was taken
    if len(data) > max_size:
        raise PayloadReadError(
            f"Payload exceeds limit of {max_size:,} bytes",
            size=len(data),
            max_size=max_size
        )
    return data


class Record(BaseModel):
    """A document-processing unit: payload, metadata and extracted content.

    Every primitive field has a constructor default; the XML codec relies on
    those defaults to decide which fields are worth emitting.

    Parameters:
        id: Unique identifier assigned by the producing system
        transaction_id: Transaction identifier
        work_bundle_id: Work-bundle identifier
        classification: Classification string
        current_forms: Form stack, index 0 is the top (current) form
        file_type: File type label (not serialized)
        filename: File name
        font_encoding: Text encoding hint for the payload
        header: Header bytes
        footer: Footer bytes
        header_encoding: Text encoding of the header
        broken: Reason the record is broken, None when it is not
        birth_order: Position among siblings
        num_children: Number of child records
        num_siblings: Number of sibling records
        priority: Processing priority
        outputable: Whether the record may be output
        processing_error: Accumulated processing errors, one per line
        channel_factory: Lazily-materialized payload source
        parameters: Multi-valued metadata map
        alternate_views: Named alternate renderings of the payload
        extracted_records: Records extracted from this one
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    id: Optional[str] = Field(None, description="Unique identifier")
    transaction_id: Optional[str] = Field(None, description="Transaction identifier")
    work_bundle_id: Optional[str] = Field(None, description="Work-bundle identifier")
    classification: Optional[str] = Field(None, description="Classification string")
    current_forms: list[str] = Field(default_factory=list, description="Form stack, top first")
    file_type: Optional[str] = Field(None, description="File type label")
    filename: Optional[str] = Field(None, description="File name")
    font_encoding: Optional[str] = Field(None, description="Payload text encoding hint")
    header: Optional[bytes] = Field(None, description="Header bytes")
    footer: Optional[bytes] = Field(None, description="Footer bytes")
    header_encoding: Optional[str] = Field(None, description="Header text encoding")
    broken: Optional[str] = Field(None, description="Reason the record is broken")
    birth_order: int = Field(default=0, description="Position among siblings")
    num_children: int = Field(default=0, description="Number of child records")
    num_siblings: int = Field(default=0, description="Number of sibling records")
    priority: int = Field(default=DEFAULT_PRIORITY, description="Processing priority")
    outputable: bool = Field(default=True, description="Whether the record may be output")
    processing_error: Optional[str] = Field(None, description="Accumulated processing errors")
    channel_factory: Optional[ChannelFactory] = Field(None, description="Payload source")
    parameters: dict[str, list[Any]] = Field(default_factory=dict, description="Multi-valued metadata")
    alternate_views: dict[str, bytes] = Field(default_factory=dict, description="Named alternate views")
    extracted_records: list["Record"] = Field(default_factory=list, description="Extracted records")

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def set_channel_factory(self, channel_factory: Optional[ChannelFactory]) -> None:
        self.channel_factory = channel_factory

    def set_data(self, data: Optional[bytes]) -> None:
        """Replace the payload with in-memory bytes (None clears it)."""
        self.channel_factory = None if data is None else InMemoryChannelFactory(bytes(data))

    @property
    def data(self) -> Optional[bytes]:
        """Payload bytes, materialized from the channel factory.

        Raises:
            PayloadReadError: If the payload cannot be read
        """
        if self.channel_factory is None:
            return None
        return get_bytes_from_channel(self.channel_factory, MAX_BYTE_ARRAY_SIZE)

    # ------------------------------------------------------------------
    # Simple setters
    # ------------------------------------------------------------------

    def set_id(self, value: Optional[str]) -> None:
        self.id = value

    def set_transaction_id(self, value: Optional[str]) -> None:
        self.transaction_id = value

    def set_work_bundle_id(self, value: Optional[str]) -> None:
        self.work_bundle_id = value

    def set_classification(self, value: Optional[str]) -> None:
        self.classification = value

    def set_file_type(self, value: Optional[str]) -> None:
        self.file_type = value

    def set_filename(self, value: Optional[str]) -> None:
        self.filename = value

    def set_font_encoding(self, value: Optional[str]) -> None:
        self.font_encoding = value

    def set_header(self, value: Optional[bytes]) -> None:
        self.header = value

    def set_footer(self, value: Optional[bytes]) -> None:
        self.footer = value

    def set_header_encoding(self, value: Optional[str]) -> None:
        self.header_encoding = value

    def set_broken(self, value: Optional[str]) -> None:
        self.broken = value

    @property
    def is_broken(self) -> bool:
        return self.broken is not None

    def set_birth_order(self, value: int) -> None:
        self.birth_order = value

    def set_num_children(self, value: int) -> None:
        self.num_children = value

    def set_num_siblings(self, value: int) -> None:
        self.num_siblings = value

    def set_priority(self, value: int) -> None:
        self.priority = value

    def set_outputable(self, value: bool) -> None:
        self.outputable = value

    def add_processing_error(self, error: str) -> None:
        """Append an error line; every entry is newline-terminated."""
        if not isinstance(error, str):
            raise TypeError(f"processing error must be str, got {type(error).__name__}")
        self.processing_error = (self.processing_error or "") + error + "\n"

    # ------------------------------------------------------------------
    # Form stack
    # ------------------------------------------------------------------

    def push_current_form(self, form: str) -> None:
        """Push a form onto the top of the form stack."""
        if not isinstance(form, str):
            raise TypeError(f"form must be str, got {type(form).__name__}")
        self.current_forms.insert(0, form)

    def set_current_form(self, form: str) -> None:
        """Replace the top of the form stack, pushing when the stack is empty."""
        if not isinstance(form, str):
            raise TypeError(f"form must be str, got {type(form).__name__}")
        if self.current_forms:
            self.current_forms[0] = form
        else:
            self.current_forms.append(form)

    @property
    def current_form(self) -> Optional[str]:
        return self.current_forms[0] if self.current_forms else None

    @property
    def all_current_forms(self) -> list[str]:
        return list(self.current_forms)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def append_parameter(self, key: str, value: Any) -> None:
        """Add a value to the end of the collection stored under key."""
        if not isinstance(key, str):
            raise TypeError(f"parameter key must be str, got {type(key).__name__}")
        self.parameters.setdefault(key, []).append(value)

    def put_parameter(self, key: str, value: Any) -> None:
        """Replace the values stored under key.

        A non-string iterable value stores each of its items; anything else
        is stored as a single value.
        """
        if not isinstance(key, str):
            raise TypeError(f"parameter key must be str, got {type(key).__name__}")
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray)):
            self.parameters[key] = list(value)
        else:
            self.parameters[key] = [value]

    def set_parameters(self, parameters: Mapping[str, Iterable[Any]]) -> None:
        """Replace the whole parameter map with a copy of parameters."""
        self.parameters = {key: list(values) for key, values in parameters.items()}

    def get_parameter(self, key: str) -> Optional[list[Any]]:
        values = self.parameters.get(key)
        return list(values) if values is not None else None

    # ------------------------------------------------------------------
    # Alternate views and extracted records
    # ------------------------------------------------------------------

    def add_alternate_view(self, name: str, data: Optional[bytes]) -> None:
        """Store an alternate view under name; None removes it."""
        if not isinstance(name, str):
            raise TypeError(f"view name must be str, got {type(name).__name__}")
        if data is None:
            self.alternate_views.pop(name, None)
            return
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"view data must be bytes, got {type(data).__name__}")
        self.alternate_views[name] = bytes(data)

    def add_extracted_record(self, record: "Record") -> None:
        if not isinstance(record, Record):
            raise TypeError(f"extracted record must be a Record, got {type(record).__name__}")
        self.extracted_records.append(record)


Record.model_rebuild()
