"""
tests/test_query.py
CDRQueryEngine tests: lookup, range filters, aggregation, top-N.
Records are built in memory; the end-to-end case goes through a real file.
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from cdrquery.models.record import CallDetailRecord, CallSummary, CallType
from cdrquery.query import CDRQueryEngine
from cdrquery.store import RecordStore


def _make_cdr(
    reference: str,
    caller_id: str = "A1",
    call_date: date = date(2024, 1, 1),
    duration:  float = 60.0,
    cost:      str = "1.00",
) -> CallDetailRecord:
    return CallDetailRecord(
        caller_id = caller_id,
        recipient = "B1",
        call_date = call_date,
        end_time  = time(10, 0, 0),
        duration  = duration,
        cost      = Decimal(cost),
        reference = reference,
        currency  = "GBP",
        call_type = CallType.LOCAL,
    )


@pytest.fixture
def engine():
    records = [
        _make_cdr("R1", "A1", date(2024, 1, 1),  60.0,  "1.50"),
        _make_cdr("R2", "A1", date(2024, 1, 2),  120.0, "3.00"),
        _make_cdr("R3", "A2", date(2024, 1, 2),  30.0,  "9.99"),
        _make_cdr("R4", "A1", date(2024, 1, 3),  45.5,  "3.00"),
        _make_cdr("R5", "A1", date(2024, 1, 5),  10.0,  "0.20"),
        _make_cdr("R2", "A2", date(2024, 1, 6),  999.0, "0.01"),   # duplicate reference
    ]
    return CDRQueryEngine(RecordStore(records))


class TestConstruction:

    def test_none_store_rejected(self):
        with pytest.raises(ValueError):
            CDRQueryEngine(None)

    def test_empty_store_allowed(self):
        engine = CDRQueryEngine(RecordStore([]))
        assert engine.get_by_reference("R1") is None
        assert engine.get_call_count_and_total_duration(date.min, date.max) == CallSummary(0, 0.0)


class TestGetByReference:

    def test_found(self, engine):
        assert engine.get_by_reference("R3").caller_id == "A2"

    def test_absent_returns_none(self, engine):
        assert engine.get_by_reference("NOPE") is None

    def test_duplicate_returns_first_in_load_order(self, engine):
        assert engine.get_by_reference("R2").call_date == date(2024, 1, 2)

    def test_exact_ordinal_match(self, engine):
        assert engine.get_by_reference("r1") is None
        assert engine.get_by_reference("R1 ") is None


class TestDateRange:

    def test_bounds_inclusive(self, engine):
        refs = [r.reference for r in engine.get_cdrs_by_date_range(date(2024, 1, 2), date(2024, 1, 3))]
        assert refs == ["R2", "R3", "R4"]

    def test_single_day_window(self, engine):
        refs = [r.reference for r in engine.get_cdrs_by_date_range(date(2024, 1, 1), date(2024, 1, 1))]
        assert refs == ["R1"]

    def test_inverted_window_is_empty(self, engine):
        assert engine.get_cdrs_by_date_range(date(2024, 1, 5), date(2024, 1, 1)) == []

    def test_datetime_bounds_use_date_part(self, engine):
        refs = [r.reference for r in engine.get_cdrs_by_date_range(
            datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 1, 0, 0))]
        assert refs == ["R1"]


class TestCallCountAndTotalDuration:

    def test_count_and_sum(self, engine):
        summary = engine.get_call_count_and_total_duration(date(2024, 1, 1), date(2024, 1, 3))
        assert summary == CallSummary(count=4, total_duration=255.5)

    def test_count_matches_range_filter(self, engine):
        for start, end in [(date(2024, 1, 1), date(2024, 1, 6)),
                           (date(2024, 1, 4), date(2024, 1, 4)),
                           (date(2024, 1, 2), date(2024, 1, 5))]:
            summary = engine.get_call_count_and_total_duration(start, end)
            assert summary.count == len(engine.get_cdrs_by_date_range(start, end))

    def test_empty_window_is_zero(self, engine):
        summary = engine.get_call_count_and_total_duration(date(2023, 1, 1), date(2023, 12, 31))
        assert summary.count == 0
        assert summary.total_duration == 0.0


class TestCdrsByCallerId:

    def test_filters_caller_and_window(self, engine):
        refs = [r.reference for r in engine.get_cdrs_by_caller_id("A1", date(2024, 1, 2), date(2024, 1, 5))]
        assert refs == ["R2", "R4", "R5"]

    def test_unknown_caller_is_empty(self, engine):
        assert engine.get_cdrs_by_caller_id("ZZ", date(2024, 1, 1), date(2024, 1, 6)) == []


class TestMostExpensiveCalls:

    def test_sorted_by_cost_desc(self, engine):
        result = engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 5), 10)
        costs = [r.cost for r in result]
        assert costs == sorted(costs, reverse=True)

    def test_equal_costs_keep_load_order(self, engine):
        result = engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 5), 2)
        assert [r.reference for r in result] == ["R2", "R4"]

    def test_length_is_min_of_n_and_matches(self, engine):
        assert len(engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 5), 3)) == 3
        assert len(engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 5), 50)) == 4

    @pytest.mark.parametrize("n", [0, -1])
    def test_non_positive_n_is_empty(self, engine, n):
        assert engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 5), n) == []

    def test_no_matches_is_empty(self, engine):
        assert engine.get_most_expensive_calls("A2", date(2024, 1, 3), date(2024, 1, 5), 5) == []


class TestEndToEnd:

    def test_two_line_file(self, tmp_path):
        (tmp_path / 'batch.csv').write_text(
            "caller_id,recipient,call_date,end_time,duration,cost,reference,currency,type\n"
            "A1,B1,01/01/2024,10:00:00,60,1.50,REF1,USD,Local\n"
            "A1,B1,02/01/2024,10:05:00,120,3.00,REF2,USD,International\n",
            encoding='utf-8',
        )
        engine = CDRQueryEngine(RecordStore.load(tmp_path))

        summary = engine.get_call_count_and_total_duration(date(2024, 1, 1), date(2024, 1, 2))
        assert summary == CallSummary(count=2, total_duration=180.0)

        top = engine.get_most_expensive_calls("A1", date(2024, 1, 1), date(2024, 1, 2), 1)
        assert [r.reference for r in top] == ["REF2"]
        assert top[0].call_type is CallType.INTERNATIONAL

    def test_degraded_date_falls_outside_real_windows(self, tmp_path):
        (tmp_path / 'batch.csv').write_text(
            "header\n"
            "A1,B1,not-a-date,10:00:00,60,1.50,REF1,USD,Local\n",
            encoding='utf-8',
        )
        engine = CDRQueryEngine(RecordStore.load(tmp_path))
        assert engine.get_by_reference("REF1").call_date == date.min
        assert engine.get_cdrs_by_date_range(date(2024, 1, 1), date(2024, 12, 31)) == []
        assert engine.get_call_count_and_total_duration(date.min, date.min).count == 1
