"""Queue Service - the operations the front end calls.

This module provides the QueueService class which wires a PatientStore to a
PersistencePort and turns every recoverable condition into a Result with a
named outcome (DuplicateId, EmptyStore, NotFound, CorruptHeader,
UnopenableFile, InvalidRecord). The front end only renders what it gets back.

Architecture:
    - Domain service depending on ports only (adapter injected)
    - Owns exactly one PatientStore for the lifetime of the session
    - Synchronous: each call runs to completion before returning
"""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from triage_queue.domain.patient_record import PatientRecord
from triage_queue.domain.ports import (
    EmptyStoreError,
    InvalidRecordError,
    LoadReport,
    NotFoundError,
    PersistencePort,
    Result,
)
from triage_queue.domain.stats import StatsMatrix
from triage_queue.domain.store import PatientStore

logger = logging.getLogger(__name__)


class QueueService:
    """Application-facing facade over the triage queue.

    Example Usage:
        ```python
        service = QueueService(PatientStore(), FlatFileCodec(), Path("patients.txt"))
        service.add_patient(10, "Ahmed Khan", 54, 2, "Chest pain")
        result = service.serve_next()
        if result.is_success():
            print(result.value.name)
        ```
    """

    def __init__(
        self,
        store: PatientStore,
        persistence: PersistencePort,
        data_file: Union[str, Path]
    ):
        """Initialize the service.

        Parameters:
            store: The store this session owns
            persistence: Adapter used for save/load
            data_file: Default file for save/load
        """
        self.store = store
        self.persistence = persistence
        self.data_file = Path(data_file)

    def is_registered(self, patient_id: int) -> bool:
        """Whether ``patient_id`` is already waiting (lets a front end stop early)."""
        return self.store.exists(patient_id)

    def add_patient(
        self,
        patient_id: int,
        name: str,
        age: int,
        priority: int,
        diagnosis: Optional[str] = None
    ) -> Result[PatientRecord]:
        """Create a record stamped with the current time and insert it.

        Returns:
            Result[PatientRecord]: The admitted record, or a DuplicateId /
            InvalidRecord failure
        """
        try:
            record = PatientRecord(
                patient_id=patient_id,
                name=name,
                age=age,
                priority=priority,
                diagnosis=diagnosis,
            )
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            logger.warning(f"Rejected invalid patient record (fields: {', '.join(fields)})")
            return Result.failure_result(
                InvalidRecordError(f"Invalid patient data: {', '.join(fields)}", details={"fields": fields})
            )
        return self.store.insert(record)

    def serve_next(self) -> Result[PatientRecord]:
        """Serve the most urgent patient.

        Returns:
            Result[PatientRecord]: The served record, or an EmptyStore failure
        """
        served = self.store.serve_next()
        if served is None:
            logger.warning("Serve requested on an empty queue")
            return Result.failure_result(EmptyStoreError("serve next patient"))
        return Result.success_result(served)

    def queue(self) -> tuple[PatientRecord, ...]:
        """Current queue in priority order."""
        return self.store.all()

    def search_by_id(self, patient_id: int) -> Result[PatientRecord]:
        """Binary search by identifier; queue order is unchanged afterwards."""
        if self.store.is_empty():
            return Result.failure_result(EmptyStoreError("search"))
        found = self.store.find_by_id(patient_id)
        if found is None:
            logger.warning(f"Patient ID {patient_id} not found")
            return Result.failure_result(NotFoundError("patient_id", patient_id))
        return Result.success_result(found)

    def search_by_name(self, query: str) -> Result[PatientRecord]:
        """Case-insensitive substring search by name, first match in queue order."""
        if self.store.is_empty():
            return Result.failure_result(EmptyStoreError("search"))
        found = self.store.find_by_name(query)
        if found is None:
            logger.warning("Name search returned no match")
            return Result.failure_result(NotFoundError("name", query))
        return Result.success_result(found)

    def stats(self) -> Result[StatsMatrix]:
        """Priority x age bracket counts over the current queue."""
        if self.store.is_empty():
            return Result.failure_result(EmptyStoreError("compute statistics"))
        return Result.success_result(self.store.tabulate())

    def save(self, path: Optional[Union[str, Path]] = None) -> Result[int]:
        """Write the queue, in its current order, to ``path`` or the data file."""
        return self.persistence.save(self.store.all(), path or self.data_file)

    def load(self, path: Optional[Union[str, Path]] = None) -> Result[LoadReport]:
        """Replace the queue with the contents of ``path`` or the data file.

        On failure the queue keeps its pre-load contents.
        """
        result = self.persistence.load(path or self.data_file)
        if result.is_success():
            self.store.replace_all(result.value.records)
        return result
