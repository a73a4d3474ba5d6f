"""Search Engine - lookup by identifier and by name."""

from typing import Optional, Sequence

from triage_queue.domain.patient_record import PatientRecord


def binary_search_by_id(records: Sequence[PatientRecord], patient_id: int) -> Optional[int]:
    """Find the index of ``patient_id`` in identifier-ordered records.

    The caller must sort by identifier first (see ``ordering.sort_by_id``).
    Identifiers are unique, so there is at most one match.

    Parameters:
        records: Records in ascending ``patient_id`` order
        patient_id: Identifier to look up

    Returns:
        Index of the matching record, or None if not present
    """
    lo, hi = 0, len(records) - 1
    while lo <= hi:
        mid = lo + (hi - lo) // 2
        current = records[mid].patient_id
        if current == patient_id:
            return mid
        if current < patient_id:
            lo = mid + 1
        else:
            hi = mid - 1
    return None


def linear_search_by_name(records: Sequence[PatientRecord], query: str) -> Optional[int]:
    """Find the first record whose name contains ``query``, ignoring case.

    Works in any order; with the queue in priority order the first hit is
    the most urgent, earliest-arrived match.

    Parameters:
        records: Records in current order
        query: Substring to look for

    Returns:
        Index of the first matching record, or None
    """
    for index, record in enumerate(records):
        if record.matches_name(query):
            return index
    return None
