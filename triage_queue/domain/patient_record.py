"""Patient Record Schema.

This module defines the canonical PatientRecord held in the triage queue.
A record is built once on the insertion path (which stamps ``arrival_time``)
or rebuilt from the data file with its stored values, and is never modified
afterwards.

Architecture:
    - Pure domain model with zero infrastructure dependencies
    - Records are immutable and validated before use
    - Schema validation prevents malformed records from reaching the queue
"""

import time
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

MIN_PATIENT_ID = 1
MAX_PATIENT_ID = 999999
MIN_AGE = 0
MAX_AGE = 120
MOST_URGENT_PRIORITY = 1
LEAST_URGENT_PRIORITY = 5
MAX_NAME_LENGTH = 49
MAX_DIAGNOSIS_LENGTH = 79
DEFAULT_DIAGNOSIS = "N/A"

# Validation context for records rebuilt from the data file; lifts the
# identifier ceiling that applies to new registrations
FILE_LOAD_CONTEXT = {"from_file": True}

# Characters that would break the line-oriented file layout
FIELD_DELIMITER = "|"
_FORBIDDEN_TEXT = (FIELD_DELIMITER, "\n", "\r")


def _current_epoch_seconds() -> int:
    return int(time.time())


class PatientRecord(BaseModel):
    """A patient waiting in the triage queue.

    Parameters:
        patient_id: External identity, unique within the queue (1..999999)
        name: Display and search key (non-empty, at most 49 characters)
        age: Age in years (0..120)
        priority: Clinical priority, 1 (critical) .. 5 (low)
        diagnosis: Free text, "N/A" when not supplied
        arrival_time: Epoch seconds captured when the record was created
    """

    model_config = ConfigDict(
        frozen=True,  # Immutable records
        str_strip_whitespace=True,
    )

    patient_id: int = Field(..., ge=MIN_PATIENT_ID, description="Patient identifier")
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, description="Patient name")
    age: int = Field(..., ge=MIN_AGE, le=MAX_AGE, description="Age in years")
    priority: int = Field(
        ...,
        ge=MOST_URGENT_PRIORITY,
        le=LEAST_URGENT_PRIORITY,
        description="1 (critical) .. 5 (low)"
    )
    diagnosis: str = Field(
        DEFAULT_DIAGNOSIS,
        max_length=MAX_DIAGNOSIS_LENGTH,
        description="Working diagnosis"
    )
    arrival_time: int = Field(
        default_factory=_current_epoch_seconds,
        description="Arrival timestamp (epoch seconds)"
    )

    @field_validator("patient_id")
    @classmethod
    def enforce_id_ceiling(cls, v: int, info: ValidationInfo) -> int:
        """Cap identifiers at 999999 unless the record comes from the data file."""
        if v > MAX_PATIENT_ID and not (info.context or {}).get("from_file"):
            raise ValueError(f"Patient ID must be at most {MAX_PATIENT_ID}")
        return v

    @field_validator("name", "diagnosis")
    @classmethod
    def reject_delimiters(cls, v: str) -> str:
        """Reject text that cannot be written to the data file unambiguously.

        The data file has no escaping, so a ``|`` or a line break inside a
        text field would corrupt the record on the next load.

        Raises:
            ValueError: If the text contains the field delimiter or a line break
        """
        for forbidden in _FORBIDDEN_TEXT:
            if forbidden in v:
                raise ValueError(f"Text may not contain {forbidden!r}")
        return v

    @field_validator("diagnosis", mode="before")
    @classmethod
    def default_blank_diagnosis(cls, v):
        """Replace a missing or blank diagnosis with the "N/A" sentinel."""
        if v is None:
            return DEFAULT_DIAGNOSIS
        if isinstance(v, str) and not v.strip():
            return DEFAULT_DIAGNOSIS
        return v

    def arrival_display(self) -> str:
        """Render the arrival time the way the queue table shows it."""
        return datetime.fromtimestamp(self.arrival_time).strftime("%a %b %d %H:%M:%S %Y")

    def matches_name(self, query: str) -> bool:
        """Case-insensitive substring match of ``query`` inside the name."""
        return query.lower() in self.name.lower()
