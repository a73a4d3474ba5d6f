"""Unit tests for the flat file persistence adapter.

Tests cover:
- Line encoding and decoding
- Header validation
- Lenient per-line recovery
- Save/load round trip
- Unopenable files
"""

import pytest

from triage_queue.adapters.flat_file_codec import (
    FlatFileCodec,
    decode_line,
    encode_record,
    parse_header,
    parse_lines,
)
from triage_queue.domain.ports import CorruptHeaderError, MalformedRecordLineError
from triage_queue.domain.patient_record import PatientRecord
from triage_queue.domain.store import PatientStore


@pytest.fixture
def codec():
    return FlatFileCodec()


@pytest.fixture
def store():
    s = PatientStore()
    s.insert(PatientRecord(patient_id=10, name="Ahmed Khan", age=54, priority=3,
                           diagnosis="Chest pain", arrival_time=1700000100))
    s.insert(PatientRecord(patient_id=11, name="Sara Lee", age=8, priority=1,
                           arrival_time=1700000200))
    s.insert(PatientRecord(patient_id=12, name="Tom Reed", age=67, priority=3,
                           diagnosis="Fall", arrival_time=1700000300))
    return s


class TestLineCodec:
    """Test suite for single-line encoding."""

    def test_encode_record(self):
        record = PatientRecord(patient_id=7, name="Ana Diaz", age=31, priority=2,
                               diagnosis="Migraine", arrival_time=1712345678)
        assert encode_record(record) == "7|Ana Diaz|31|2|Migraine|1712345678"

    def test_decode_line_keeps_arrival_time(self):
        record = decode_line("7|Ana Diaz|31|2|Migraine|1712345678\n")
        assert record.patient_id == 7
        assert record.name == "Ana Diaz"
        assert record.arrival_time == 1712345678

    def test_decode_handles_crlf(self):
        assert decode_line("7|Ana|31|2|N/A|5\r\n").arrival_time == 5

    def test_decode_truncates_long_name(self):
        record = decode_line(f"7|{'N' * 60}|31|2|Migraine|1")
        assert record.name == "N" * 49

    def test_decode_truncates_long_diagnosis(self):
        record = decode_line(f"7|Ana|31|2|{'d' * 90}|1")
        assert record.diagnosis == "d" * 79

    def test_decode_keeps_large_id(self):
        assert decode_line("1000000|Ana|31|2|N/A|1").patient_id == 1000000

    @pytest.mark.parametrize("line", [
        "7|Ana|31|2|Migraine",            # five fields
        "",                               # empty
        "x|Ana|31|2|Migraine|1",          # non-numeric id
        "7|Ana|old|2|Migraine|1",         # non-numeric age
        "7|Ana|31|2|Migraine|soon",       # non-numeric timestamp
        "0|Ana|31|2|Migraine|1",          # id <= 0
        "7|Ana|121|2|Migraine|1",         # age > 120
        "7|Ana|31|6|Migraine|1",          # priority > 5
        "7||31|2|Migraine|1",             # empty name
        "7|Ana|31|2|Migraine|1|extra",    # trailing field folds into timestamp
    ])
    def test_malformed_lines_raise(self, line):
        with pytest.raises(MalformedRecordLineError):
            decode_line(line)


class TestHeader:
    """Test suite for the record count header."""

    def test_valid_header(self):
        assert parse_header("3\n") == 3
        assert parse_header(" 0 \n") == 0

    @pytest.mark.parametrize("line", ["", "\n", "abc\n", "-1\n", "2.5\n"])
    def test_corrupt_header(self, line):
        with pytest.raises(CorruptHeaderError):
            parse_header(line)


class TestParseLines:
    """Test suite for the lenient fold over data lines."""

    def test_counts_skipped_lines(self):
        lines = [
            "1|Ana|30|2|N/A|100",
            "garbage",
            "2|Ben|40|1|N/A|200",
        ]
        parsed = parse_lines(lines)
        assert [r.patient_id for r in parsed.records] == [1, 2]
        assert parsed.skipped == 1

    def test_duplicate_id_skipped(self):
        lines = ["1|Ana|30|2|N/A|100", "1|Ana Again|31|2|N/A|101"]
        parsed = parse_lines(lines)
        assert len(parsed.records) == 1
        assert parsed.records[0].name == "Ana"
        assert parsed.skipped == 1


class TestFlatFileCodec:
    """Test suite for file save/load."""

    def test_save_writes_header_and_lines_in_queue_order(self, codec, store, tmp_path):
        path = tmp_path / "patients.txt"
        result = codec.save(store.all(), path)
        assert result.value == 3
        assert path.read_text(encoding="utf-8") == (
            "3\n"
            "11|Sara Lee|8|1|N/A|1700000200\n"
            "10|Ahmed Khan|54|3|Chest pain|1700000100\n"
            "12|Tom Reed|67|3|Fall|1700000300\n"
        )

    def test_round_trip(self, codec, store, tmp_path):
        """Test that a fresh store loaded from disk equals the original."""
        path = tmp_path / "patients.txt"
        codec.save(store.all(), path)
        report = codec.load(path).value
        fresh = PatientStore()
        fresh.replace_all(report.records)
        assert fresh.all() == store.all()
        assert report.declared == 3
        assert report.loaded == 3
        assert report.skipped == 0

    def test_round_trip_empty_store(self, codec, tmp_path):
        path = tmp_path / "empty.txt"
        codec.save((), path)
        assert path.read_text(encoding="utf-8") == "0\n"
        report = codec.load(path).value
        assert report.loaded == 0

    def test_lenient_load(self, codec, tmp_path):
        """Test that a header of 3 with one bad age loads exactly 2."""
        path = tmp_path / "patients.txt"
        path.write_text(
            "3\n"
            "1|Ana|30|2|N/A|100\n"
            "2|Ben|forty|1|N/A|200\n"
            "3|Cy|50|4|Cough|300\n",
            encoding="utf-8",
        )
        result = codec.load(path)
        assert result.is_success()
        assert result.value.loaded == 2
        assert result.value.declared == 3
        assert result.value.skipped == 1

    def test_load_keeps_legacy_lines(self, codec, tmp_path):
        """Test that over-long text and large ids from older files still load."""
        path = tmp_path / "patients.txt"
        path.write_text(
            "3\n"
            f"1|{'A' * 60}|30|2|N/A|100\n"
            "1000000|Ben|40|1|N/A|200\n"
            f"3|Cy|50|4|{'c' * 90}|300\n",
            encoding="utf-8",
        )
        report = codec.load(path).value
        assert report.loaded == 3
        assert report.skipped == 0
        by_id = {r.patient_id: r for r in report.records}
        assert len(by_id[1].name) == 49
        assert len(by_id[3].diagnosis) == 79
        assert 1000000 in by_id

    def test_reads_at_most_declared_count(self, codec, tmp_path):
        path = tmp_path / "patients.txt"
        path.write_text("1\n1|Ana|30|2|N/A|100\n2|Ben|40|1|N/A|200\n", encoding="utf-8")
        assert codec.load(path).value.loaded == 1

    def test_truncated_file(self, codec, tmp_path):
        path = tmp_path / "patients.txt"
        path.write_text("5\n1|Ana|30|2|N/A|100\n", encoding="utf-8")
        report = codec.load(path).value
        assert report.loaded == 1
        assert report.declared == 5

    @pytest.mark.parametrize("content", ["", "x\n1|Ana|30|2|N/A|100\n", "-2\n"])
    def test_corrupt_header_aborts(self, codec, tmp_path, content):
        path = tmp_path / "patients.txt"
        path.write_text(content, encoding="utf-8")
        result = codec.load(path)
        assert result.is_failure()
        assert result.error_type == "CorruptHeader"
        assert result.error_details["path"] == str(path)

    def test_missing_file(self, codec, tmp_path):
        result = codec.load(tmp_path / "nope.txt")
        assert result.error_type == "UnopenableFile"

    def test_unwritable_path(self, codec, store, tmp_path):
        result = codec.save(store.all(), tmp_path / "no-such-dir" / "patients.txt")
        assert result.error_type == "UnopenableFile"

    def test_can_load(self, codec, tmp_path):
        path = tmp_path / "patients.txt"
        assert not codec.can_load(path)
        path.write_text("0\n", encoding="utf-8")
        assert codec.can_load(path)
