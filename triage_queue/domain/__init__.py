"""Domain layer for Triage-Queue.

This module contains the patient record schema, the ordered store and the
ordering, search and statistics engines. Domain models are pure Python with
no external dependencies beyond Pydantic.
"""

from .patient_record import PatientRecord
from .store import PatientStore
from .stats import StatsMatrix

__all__ = [
    "PatientRecord",
    "PatientStore",
    "StatsMatrix",
]
