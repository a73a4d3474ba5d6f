"""Ordering Engine - Priority and Identifier Orders.

The queue needs two total orders over the same records:

    - priority order (priority ascending, arrival order among ties) is what
      the operator sees and what ``serve_next`` consumes;
    - identifier order is the precondition for binary search by ID.

Both sorts work in place on a list and are stable. The queue is small (tens
to low hundreds of records) and every membership change pays a full re-sort.
"""

from typing import MutableSequence, Sequence

from triage_queue.domain.patient_record import PatientRecord


def sort_by_priority(records: MutableSequence[PatientRecord]) -> None:
    """Sort records into serving order in place.

    Adjacent-swap sort that only swaps on a strictly greater priority, so a
    later record never overtakes an earlier one of equal priority.

    Parameters:
        records: Records to reorder (mutated)
    """
    n = len(records)
    for i in range(n - 1):
        swapped = False
        for j in range(n - 1 - i):
            if records[j].priority > records[j + 1].priority:
                records[j], records[j + 1] = records[j + 1], records[j]
                swapped = True
        if not swapped:
            break


def sort_by_id(records: MutableSequence[PatientRecord]) -> None:
    """Sort records by ``patient_id`` in place (merge sort).

    Uses a single auxiliary buffer sized to the current record count.

    Parameters:
        records: Records to reorder (mutated)
    """
    if len(records) <= 1:
        return
    buffer: list = [None] * len(records)
    _merge_sort(records, 0, len(records) - 1, buffer)


def _merge_sort(records: MutableSequence[PatientRecord], lo: int, hi: int, buffer: list) -> None:
    if lo >= hi:
        return
    mid = lo + (hi - lo) // 2
    _merge_sort(records, lo, mid, buffer)
    _merge_sort(records, mid + 1, hi, buffer)
    _merge(records, lo, mid, hi, buffer)


def _merge(records: MutableSequence[PatientRecord], lo: int, mid: int, hi: int, buffer: list) -> None:
    i, j, k = lo, mid + 1, lo
    while i <= mid and j <= hi:
        # <= keeps the left run first on ties
        if records[i].patient_id <= records[j].patient_id:
            buffer[k] = records[i]
            i += 1
        else:
            buffer[k] = records[j]
            j += 1
        k += 1
    while i <= mid:
        buffer[k] = records[i]
        i += 1
        k += 1
    while j <= hi:
        buffer[k] = records[j]
        j += 1
        k += 1
    for idx in range(lo, hi + 1):
        records[idx] = buffer[idx]


def is_priority_ordered(records: Sequence[PatientRecord]) -> bool:
    """Check that priorities never decrease along the sequence."""
    return all(a.priority <= b.priority for a, b in zip(records, records[1:]))


def is_id_ordered(records: Sequence[PatientRecord]) -> bool:
    """Check that identifiers strictly increase along the sequence."""
    return all(a.patient_id < b.patient_id for a, b in zip(records, records[1:]))
