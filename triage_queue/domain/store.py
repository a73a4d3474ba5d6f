"""Patient Store - the ordered record container behind the triage queue.

The store exclusively owns its records and guarantees priority order at its
public boundary: whenever a public method returns, the records are sorted by
priority with arrival order preserved among equal priorities. Lookup by ID
temporarily borrows identifier order and restores the previous order before
returning.

Architecture:
    - Pure domain logic with no infrastructure dependencies
    - Passed around as an explicit value (no module-level queue state)
    - Capacity is tracked logically over a Python list: it starts at the
      configured size, doubles when full and never shrinks
"""

import logging
from typing import Iterable, Iterator, Optional

from triage_queue.domain.ordering import sort_by_id, sort_by_priority
from triage_queue.domain.patient_record import PatientRecord
from triage_queue.domain.ports import DuplicateIdError, Result
from triage_queue.domain.search import binary_search_by_id, linear_search_by_name
from triage_queue.domain.stats import StatsMatrix, tabulate

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_CAPACITY = 8
MIN_INITIAL_CAPACITY = 8


class PatientStore:
    """Growable, priority-ordered container of PatientRecord objects.

    Example Usage:
        ```python
        store = PatientStore()
        store.insert(PatientRecord(patient_id=10, name="Ana", age=30, priority=3))
        store.insert(PatientRecord(patient_id=11, name="Ben", age=70, priority=1))
        store.serve_next().patient_id  # 11
        ```
    """

    def __init__(self, initial_capacity: int = DEFAULT_INITIAL_CAPACITY):
        """Initialize an empty store.

        Parameters:
            initial_capacity: Starting capacity (at least 8)

        Raises:
            ValueError: If initial_capacity is below the minimum
        """
        if initial_capacity < MIN_INITIAL_CAPACITY:
            raise ValueError(
                f"Initial capacity must be at least {MIN_INITIAL_CAPACITY}, got {initial_capacity}"
            )
        self._records: list[PatientRecord] = []
        self._capacity = initial_capacity

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PatientRecord]:
        return iter(tuple(self._records))

    @property
    def capacity(self) -> int:
        """Currently allocated capacity (always >= number of records)."""
        return self._capacity

    def is_empty(self) -> bool:
        return not self._records

    def _ensure_capacity(self, needed: int) -> None:
        while self._capacity < needed:
            self._capacity *= 2
            logger.debug(f"Queue capacity grown to {self._capacity}")

    # -------- Membership --------

    def exists(self, patient_id: int) -> bool:
        """Full scan for a record with ``patient_id``."""
        for record in self._records:
            if record.patient_id == patient_id:
                return True
        return False

    def insert(self, record: PatientRecord) -> Result[PatientRecord]:
        """Add a record and re-establish priority order.

        Parameters:
            record: Fully built record (arrival_time already stamped)

        Returns:
            Result[PatientRecord]: The inserted record, or a DuplicateId
            failure leaving the store unchanged
        """
        if self.exists(record.patient_id):
            logger.warning(f"Rejected duplicate patient ID {record.patient_id}")
            return Result.failure_result(DuplicateIdError(record.patient_id))

        self._ensure_capacity(len(self._records) + 1)
        self._records.append(record)
        sort_by_priority(self._records)
        logger.info(f"Admitted patient {record.patient_id} with priority {record.priority}")
        return Result.success_result(record)

    def serve_next(self) -> Optional[PatientRecord]:
        """Remove and return the most urgent, earliest-arrived record.

        Returns:
            The served record, or None if the store is empty
        """
        if not self._records:
            return None
        served = self._records.pop(0)
        logger.info(f"Served patient {served.patient_id} (priority {served.priority})")
        return served

    def replace_all(self, records: Iterable[PatientRecord]) -> int:
        """Replace the whole contents, e.g. with records read from disk.

        Records keep their stored fields; they are not re-stamped. Callers
        are responsible for identifier uniqueness.

        Returns:
            Number of records now held
        """
        incoming = list(records)
        self._ensure_capacity(len(incoming))
        self._records = incoming
        sort_by_priority(self._records)
        return len(self._records)

    # -------- Queries --------

    def all(self) -> tuple[PatientRecord, ...]:
        """Read-only snapshot of the records in priority order."""
        return tuple(self._records)

    def peek(self) -> Optional[PatientRecord]:
        """The record ``serve_next`` would return, without removing it."""
        return self._records[0] if self._records else None

    def find_by_id(self, patient_id: int) -> Optional[PatientRecord]:
        """Binary search by identifier.

        Sorts by identifier, searches, then puts the records back in exactly
        the order they had before the call.

        Returns:
            The matching record, or None
        """
        priority_order = list(self._records)
        try:
            sort_by_id(self._records)
            index = binary_search_by_id(self._records, patient_id)
            return self._records[index] if index is not None else None
        finally:
            self._records[:] = priority_order

    def find_by_name(self, query: str) -> Optional[PatientRecord]:
        """First record in priority order whose name contains ``query`` (case-insensitive)."""
        index = linear_search_by_name(self._records, query)
        return self._records[index] if index is not None else None

    def tabulate(self) -> StatsMatrix:
        """Priority x age bracket counts over the current contents."""
        return tabulate(self._records)
