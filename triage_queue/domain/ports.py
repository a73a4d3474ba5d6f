"""Domain Ports - Outcome Types and Persistence Contract.

This module defines the Result type used to communicate outcomes to the front
end, the exception hierarchy for queue errors, and the Port interface that
persistence adapters must implement.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (flat text file) implement PersistencePort
    - Domain Core is isolated from file format specifics
    - Recoverable errors travel as Result objects, never as uncaught exceptions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Optional, Sequence, TypeVar, Union

from triage_queue.domain.patient_record import PatientRecord

# Type variable for Result generic
T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    The front end renders either the value (served record, found record,
    stats matrix, load report) or the named outcome in ``error_type``.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Human-readable error message (only present if success=False)
        error_type: Named outcome (DuplicateId, NotFound, EmptyStore,
                    CorruptHeader, UnopenableFile, InvalidRecord)
        error_details: Additional error context (patient_id, path, ...)

    Example:
        ```python
        result = store.insert(record)
        if result.is_failure():
            console.print(f"{result.error_type}: {result.error}")
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

        When ``error`` is a QueueError its ``outcome`` names the error type
        unless one is given explicitly.

        Parameters:
            error: Error message or exception
            error_type: Named outcome (e.g., "DuplicateId", "CorruptHeader")
            error_details: Additional context (patient_id, path, etc.)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        if error_type is None:
            if isinstance(error, QueueError):
                error_type = error.outcome
            elif isinstance(error, Exception):
                error_type = type(error).__name__
            else:
                error_type = "UnknownError"
        details = error_details
        if details is None and isinstance(error, QueueError):
            details = dict(error.details)

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type,
            error_details=details or {}
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

class QueueError(Exception):
    """Base exception for all patient queue errors.

    Attributes:
        outcome: Name of the outcome reported to the front end
        details: Additional error context
    """

    outcome = "QueueError"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class DuplicateIdError(QueueError):
    """Raised when an insertion reuses an identifier already in the queue."""

    outcome = "DuplicateId"

    def __init__(self, patient_id: int):
        super().__init__(
            f"Patient ID {patient_id} already exists",
            details={"patient_id": patient_id}
        )
        self.patient_id = patient_id


class EmptyStoreError(QueueError):
    """Raised when serve, search or stats is attempted on an empty queue."""

    outcome = "EmptyStore"

    def __init__(self, operation: str):
        super().__init__(f"Queue is empty, cannot {operation}", details={"operation": operation})
        self.operation = operation


class NotFoundError(QueueError):
    """Raised when a search yields no match."""

    outcome = "NotFound"

    def __init__(self, criterion: str, value: Union[int, str]):
        super().__init__(
            f"No patient found for {criterion}={value!r}",
            details={"criterion": criterion, "value": value}
        )
        self.criterion = criterion
        self.value = value


class InvalidRecordError(QueueError):
    """Raised when the front end supplies values the record model rejects."""

    outcome = "InvalidRecord"


class PersistenceError(QueueError):
    """Base exception for persistence failures.

    Attributes:
        path: The file path involved in the failed operation
    """

    outcome = "PersistenceError"

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message, details={"path": str(path) if path is not None else None})
        self.path = path


class UnopenableFileError(PersistenceError):
    """Raised when the data file cannot be opened for reading or writing."""

    outcome = "UnopenableFile"


class CorruptHeaderError(PersistenceError):
    """Raised when the leading record count is missing, unparseable or negative.

    The whole load is aborted and the queue keeps its pre-load contents.
    """

    outcome = "CorruptHeader"


class MalformedRecordLineError(PersistenceError):
    """Raised when one persisted line fails parsing or validation.

    The loader catches this per line, skips the record and counts it.

    Attributes:
        line: The offending line (already stripped of its terminator)
        reason: Why the line was rejected
    """

    outcome = "MalformedRecordLine"

    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed record line: {reason}")
        self.line = line
        self.reason = reason


# ============================================================================
# Persistence Port
# ============================================================================

@dataclass(frozen=True)
class LoadReport:
    """Outcome of a successful load.

    Attributes:
        records: Records that parsed and validated, in file order
        declared: Record count declared in the header line
        skipped: Lines read but rejected as malformed or duplicated
    """
    records: tuple[PatientRecord, ...] = field(default_factory=tuple)
    declared: int = 0
    skipped: int = 0

    @property
    def loaded(self) -> int:
        """Number of records that survived parsing."""
        return len(self.records)


class PersistencePort(ABC):
    """Abstract contract for queue persistence adapters.

    Adapters serialize the queue in its current order and parse it back.
    Failures are returned as Result objects so the service can report them
    without unwinding the interactive session.
    """

    @abstractmethod
    def save(self, records: Sequence[PatientRecord], path: Union[str, Path]) -> Result[int]:
        """Write all records to ``path`` in the given order.

        Parameters:
            records: Records in queue order
            path: Destination file

        Returns:
            Result[int]: Number of records written, or an UnopenableFile failure
        """
        pass

    @abstractmethod
    def load(self, path: Union[str, Path]) -> Result[LoadReport]:
        """Read records from ``path``.

        Parameters:
            path: Source file

        Returns:
            Result[LoadReport]: Surviving records and counts, or an
            UnopenableFile / CorruptHeader failure
        """
        pass

    def can_load(self, path: Union[str, Path]) -> bool:
        """Check if this adapter can read the given path.

        Default implementation only checks that the file exists.
        """
        return Path(path).is_file()
