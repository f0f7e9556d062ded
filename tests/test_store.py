"""
tests/test_store.py
RecordStore load and snapshot tests.
"""

import dataclasses
from decimal import Decimal

import pytest

from cdrquery.store import DirectoryNotFound, RecordStore


HEADER = "caller_id,recipient,call_date,end_time,duration,cost,reference,currency,type\n"

SAMPLE_CSV = (
    HEADER
    + "A1,B1,01/01/2024,10:00:00,60,1.50,REF1,USD,Local\n"
    + "A2,B2,bad-date,10:05:00,-120,oops,REF2,GBP,Satellite\n"
)


@pytest.fixture
def tmp_csv_dir(tmp_path):
    (tmp_path / 'cdrs.csv').write_text(SAMPLE_CSV, encoding='utf-8')
    return tmp_path


class TestLoad:

    def test_load_reads_all_records(self, tmp_csv_dir):
        store = RecordStore.load(tmp_csv_dir)
        assert len(store) == 2
        assert store.source_dir == tmp_csv_dir

    def test_accepts_string_path(self, tmp_csv_dir):
        assert len(RecordStore.load(str(tmp_csv_dir))) == 2

    def test_missing_directory_is_fatal(self, tmp_path):
        with pytest.raises(DirectoryNotFound):
            RecordStore.load(tmp_path / 'nowhere')

    def test_file_path_is_not_a_directory(self, tmp_csv_dir):
        with pytest.raises(DirectoryNotFound):
            RecordStore.load(tmp_csv_dir / 'cdrs.csv')

    def test_directory_not_found_is_file_not_found(self):
        assert issubclass(DirectoryNotFound, FileNotFoundError)

    def test_empty_directory_gives_empty_store(self, tmp_path):
        store = RecordStore.load(tmp_path)
        assert len(store) == 0
        assert store.get_all() == ()

    def test_malformed_fields_do_not_fail_load(self, tmp_csv_dir, caplog):
        store = RecordStore.load(tmp_csv_dir)
        bad = store.get_all()[1]
        assert bad.reference == "REF2"
        assert set(bad.faults) == {"call_date", "duration", "cost", "call_type"}
        assert "1 of 2 CDRs carry sentinel values" in caplog.text

    def test_duration_and_cost_never_negative(self, tmp_csv_dir):
        for r in RecordStore.load(tmp_csv_dir):
            assert r.duration >= 0
            assert r.cost >= Decimal("0")


class TestSnapshot:

    def test_get_all_is_tuple(self, tmp_csv_dir):
        assert isinstance(RecordStore.load(tmp_csv_dir).get_all(), tuple)

    def test_get_all_returns_same_snapshot(self, tmp_csv_dir):
        store = RecordStore.load(tmp_csv_dir)
        assert store.get_all() is store.get_all()

    def test_records_are_frozen(self, tmp_csv_dir):
        record = RecordStore.load(tmp_csv_dir).get_all()[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.cost = Decimal("0")

    def test_source_list_changes_do_not_leak(self, tmp_csv_dir):
        records = list(RecordStore.load(tmp_csv_dir))
        store = RecordStore(records)
        records.clear()
        assert len(store) == 2
