"""Domain Ports - Abstract Contracts for Record Serialization.

This module defines the Port interfaces (abstract contracts) that Adapters must
implement, the Result type used to report outcomes without exceptions, and the
exception hierarchy shared by every layer.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - The XML codec adapter implements RecordCodecPort
    - Hashing/fingerprinting is an external collaborator behind HashingPort
    - Domain Core is isolated from the XML library in use
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Optional, TypeVar, Union

if TYPE_CHECKING:
    from record_xml.domain.record import Record

# Type variable for Result generic
T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error information (only present if success=False)
        error_type: Type of error (RoundTripMismatch, DocumentParseError, etc.)
        error_details: Additional error context (differing fields, source, etc.)

    Example:
        ```python
        result = verify_round_trip(xml_text)
        if result.is_success():
            write(result.value)
        else:
            report(result.error, result.error_details)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (e.g., "RoundTripMismatch")
            error_details: Additional context (fields, source, etc.)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class CodecError(Exception):
    """Base exception for all record serialization errors.

    Field-level problems (malformed values, schema mismatches) are never
    raised; they are logged and the field is skipped. This hierarchy covers
    the failures that happen around the codec: unreadable documents, security
    limit violations and payloads that cannot be materialized.
    """
    pass


class DocumentParseError(CodecError):
    """Raised when an XML document cannot be parsed.

    Attributes:
        source: The source identifier that failed to parse
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class SecurityError(CodecError):
    """Security violation in XML parsing (depth or size limit exceeded)."""
    pass


class PayloadReadError(CodecError, OSError):
    """Raised when a payload cannot be materialized from its channel factory.

    Attributes:
        size: Reported payload size in bytes, if known
        max_size: The byte limit that applied to the read
    """

    def __init__(self, message: str, size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.size = size
        self.max_size = max_size


# ============================================================================
# Ports
# ============================================================================

class HashingPort(ABC):
    """Abstract contract for the hashing/fingerprinting collaborator.

    Implementations read the record's payload and store the resulting
    fingerprints in the record's parameter map.
    """

    @abstractmethod
    def hash(self, record: 'Record') -> None:
        """Compute fingerprints of the record payload and store them as parameters.

        Parameters:
            record: Record whose payload is hashed and whose parameters are updated
        """
        pass


class RecordCodecPort(ABC):
    """Abstract contract for converting records to and from a document format.

    Key Principles:
        - Decoding never fails on a malformed or missing field; the field is skipped
        - Encoding suppresses fields left at their constructor defaults
        - One document carries a setup record, a primary record, its extracted
          records and the child records produced from it
    """

    @abstractmethod
    def from_xml(self, text: Union[str, bytes]) -> tuple['Record', list['Record']]:
        """Decode a document into the primary record and its child records.

        Parameters:
            text: Serialized document

        Returns:
            tuple: (primary record, list of child records)

        Raises:
            DocumentParseError: If the document is not well-formed
            SecurityError: If the document exceeds parser limits
        """
        pass

    @abstractmethod
    def setup_from_xml(self, text: Union[str, bytes]) -> Optional['Record']:
        """Decode the setup (initial) record of a document.

        Returns:
            Optional[Record]: The setup record, or None if the document has none
        """
        pass

    @abstractmethod
    def to_xml(
        self,
        primary: 'Record',
        children: list['Record'],
        initial: 'Record'
    ) -> str:
        """Encode a primary record, its children and the initial record.

        Parameters:
            primary: The record the answers section is built from
            children: Child records, emitted in order as att1..attN
            initial: The setup record

        Returns:
            str: Serialized document
        """
        pass
