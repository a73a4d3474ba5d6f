"""Flat File Persistence Adapter.

This adapter implements the PersistencePort contract for the queue's
newline-delimited text format:

    <count>
    <id>|<name>|<age>|<priority>|<diagnosis>|<arrival_time>
    ... one line per record, in queue order ...

Loading is lenient: a line that fails to parse or validate is skipped and
counted, it does not abort the load. Only an unreadable file or a bad header
line aborts. Writes are not atomic; a write that fails midway may leave a
truncated file.

Architecture:
    - Implements PersistencePort (Hexagonal Architecture)
    - Per-line parsing is a fold over the input producing (records, skipped)
    - Isolated from domain core - only depends on ports and models
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from triage_queue.domain.patient_record import (
    FIELD_DELIMITER,
    FILE_LOAD_CONTEXT,
    MAX_DIAGNOSIS_LENGTH,
    MAX_NAME_LENGTH,
    PatientRecord,
)
from triage_queue.domain.ports import (
    CorruptHeaderError,
    LoadReport,
    MalformedRecordLineError,
    PersistencePort,
    Result,
    UnopenableFileError,
)

logger = logging.getLogger(__name__)

FIELD_COUNT = 6
ENCODING = "utf-8"


def encode_record(record: PatientRecord) -> str:
    """Render one record as a data line (without the line terminator)."""
    return FIELD_DELIMITER.join((
        str(record.patient_id),
        record.name,
        str(record.age),
        str(record.priority),
        record.diagnosis,
        str(record.arrival_time),
    ))


def decode_line(line: str) -> PatientRecord:
    """Parse one data line back into a record.

    Over-long name and diagnosis text is cut to the field limits, and
    identifiers above the registration ceiling are kept.

    Parameters:
        line: Data line, with or without its line terminator

    Returns:
        The reconstructed record with its stored arrival_time

    Raises:
        MalformedRecordLineError: If the line has fewer than six fields, a
            numeric field does not parse, or a value violates the record
            constraints
    """
    stripped = line.rstrip("\r\n")
    fields = stripped.split(FIELD_DELIMITER, FIELD_COUNT - 1)
    if len(fields) < FIELD_COUNT:
        raise MalformedRecordLineError(stripped, f"expected {FIELD_COUNT} fields, got {len(fields)}")

    raw_id, name, raw_age, raw_priority, diagnosis, raw_arrival = fields
    try:
        patient_id = int(raw_id)
        age = int(raw_age)
        priority = int(raw_priority)
        arrival_time = int(raw_arrival)
    except ValueError as e:
        raise MalformedRecordLineError(stripped, f"non-numeric field: {e}") from e

    try:
        return PatientRecord.model_validate(
            {
                "patient_id": patient_id,
                "name": name.strip()[:MAX_NAME_LENGTH],
                "age": age,
                "priority": priority,
                "diagnosis": diagnosis.strip()[:MAX_DIAGNOSIS_LENGTH],
                "arrival_time": arrival_time,
            },
            context=FILE_LOAD_CONTEXT,
        )
    except PydanticValidationError as e:
        fields_failed = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise MalformedRecordLineError(stripped, f"invalid {fields_failed or 'record'}") from e


def parse_header(line: str) -> int:
    """Parse the leading record count.

    Raises:
        CorruptHeaderError: If the count is missing, not an integer or negative
    """
    text = line.strip()
    if not text:
        raise CorruptHeaderError("Missing record count header")
    try:
        count = int(text)
    except ValueError as e:
        raise CorruptHeaderError(f"Record count is not an integer: {text!r}") from e
    if count < 0:
        raise CorruptHeaderError(f"Record count is negative: {count}")
    return count


@dataclass(frozen=True)
class ParsedRecords:
    """Accumulated result of folding over data lines."""
    records: tuple[PatientRecord, ...] = ()
    skipped: int = 0


def parse_lines(lines: Iterable[str]) -> ParsedRecords:
    """Fold data lines into accepted records and a skipped-line count.

    A line is skipped when it is malformed or repeats an identifier already
    accepted earlier in the file.
    """
    accepted: list[PatientRecord] = []
    seen_ids: set[int] = set()
    skipped = 0

    for line_number, line in enumerate(lines, start=1):
        try:
            record = decode_line(line)
        except MalformedRecordLineError as e:
            skipped += 1
            logger.debug(f"Skipping data line {line_number}: {e.reason}")
            continue
        if record.patient_id in seen_ids:
            skipped += 1
            logger.debug(f"Skipping data line {line_number}: duplicate patient ID {record.patient_id}")
            continue
        seen_ids.add(record.patient_id)
        accepted.append(record)

    return ParsedRecords(records=tuple(accepted), skipped=skipped)


class FlatFileCodec(PersistencePort):
    """Persistence adapter for the pipe-delimited queue file.

    Example Usage:
        ```python
        codec = FlatFileCodec()
        codec.save(store.all(), "patients.txt")
        result = codec.load("patients.txt")
        if result.is_success():
            store.replace_all(result.value.records)
        ```
    """

    def __init__(self, encoding: str = ENCODING):
        self.encoding = encoding

    def save(self, records: Sequence[PatientRecord], path: Union[str, Path]) -> Result[int]:
        """Write the header line and one data line per record.

        Returns:
            Result[int]: Number of records written, or an UnopenableFile failure
        """
        target = Path(path)
        try:
            with open(target, "w", encoding=self.encoding, newline="\n") as f:
                f.write(f"{len(records)}\n")
                for record in records:
                    f.write(encode_record(record) + "\n")
        except OSError as e:
            logger.error(f"Cannot open {target} for writing: {e}")
            return Result.failure_result(
                UnopenableFileError(f"Cannot open file for writing: {target}", path=target)
            )

        logger.info(f"Saved {len(records)} patients to {target}")
        return Result.success_result(len(records))

    def load(self, path: Union[str, Path]) -> Result[LoadReport]:
        """Read the header, then up to ``count`` data lines.

        Malformed lines are skipped; the report's ``loaded`` count may be
        lower than the declared count.

        Returns:
            Result[LoadReport]: Surviving records, or an UnopenableFile /
            CorruptHeader failure
        """
        source = Path(path)
        try:
            with open(source, "r", encoding=self.encoding, newline="") as f:
                try:
                    declared = parse_header(f.readline())
                except CorruptHeaderError as e:
                    logger.error(f"Corrupted file {source}: {e}")
                    return Result.failure_result(
                        CorruptHeaderError(f"Corrupted file: {e}", path=source)
                    )
                lines = []
                for _ in range(declared):
                    line = f.readline()
                    if not line:
                        break
                    lines.append(line)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot open {source} for reading: {e}")
            return Result.failure_result(
                UnopenableFileError(f"No file found or unreadable: {source}", path=source)
            )

        parsed = parse_lines(lines)
        report = LoadReport(records=parsed.records, declared=declared, skipped=parsed.skipped)
        if report.skipped:
            logger.warning(f"Skipped {report.skipped} malformed line(s) while loading {source}")
        logger.info(f"Loaded {report.loaded} patients from {source}")
        return Result.success_result(report)
