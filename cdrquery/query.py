"""
cdrquery/query.py
Query engine over a RecordStore snapshot.

All operations are read-only scans of the same immutable tuple, so the
engine holds no state of its own and is safe to share between threads.

RANGE SEMANTICS:
  Filters compare call_date only (end_time is ignored). Both bounds are
  inclusive. start > end is an empty window, not an error.

ORDERING:
  Results keep snapshot order (file name, then line) unless stated.
  get_most_expensive_calls sorts by cost descending with a stable sort,
  so equal costs stay in snapshot order.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional

from cdrquery.models.record import CallDetailRecord, CallSummary
from cdrquery.store import RecordStore

logger = logging.getLogger(__name__)


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


class CDRQueryEngine:
    """
    The four CDR queries.

    Usage:
        engine = CDRQueryEngine(RecordStore.load(Path("./data")))
        cdr    = engine.get_by_reference("C5DA9724701EEBBA95CA2CC5617BA93E4")
        totals = engine.get_call_count_and_total_duration(date(2016, 8, 1), date(2016, 8, 31))
    """

    def __init__(self, store: RecordStore):
        if store is None:
            raise ValueError("store is required")
        self._store = store

    @property
    def store(self) -> RecordStore:
        return self._store

    # ── LOOKUP ───────────────────────────────────────────────

    def get_by_reference(self, reference: str) -> Optional[CallDetailRecord]:
        """First record whose reference equals `reference` exactly, else None."""
        for record in self._store.get_all():
            if record.reference == reference:
                return record
        return None

    # ── RANGE FILTERS ────────────────────────────────────────

    def get_cdrs_by_date_range(self, start: date, end: date) -> List[CallDetailRecord]:
        start, end = _as_date(start), _as_date(end)
        return [
            r for r in self._store.get_all()
            if start <= r.call_date <= end
        ]

    def get_call_count_and_total_duration(self, start: date, end: date) -> CallSummary:
        records = self.get_cdrs_by_date_range(start, end)
        summary = CallSummary(
            count          = len(records),
            total_duration = float(sum(r.duration for r in records)),
        )
        logger.debug(f"Summary {start}..{end}: {summary}")
        return summary

    def get_cdrs_by_caller_id(
        self,
        caller_id: str,
        start:     date,
        end:       date,
    ) -> List[CallDetailRecord]:
        return [
            r for r in self.get_cdrs_by_date_range(start, end)
            if r.caller_id == caller_id
        ]

    # ── TOP-N ────────────────────────────────────────────────

    def get_most_expensive_calls(
        self,
        caller_id: str,
        start:     date,
        end:       date,
        count:     int,
    ) -> List[CallDetailRecord]:
        """
        Up to `count` of the caller's calls in the window, most expensive
        first. count <= 0 returns an empty list; a count larger than the
        match set returns the whole sorted set.
        """
        if count <= 0:
            return []
        records = self.get_cdrs_by_caller_id(caller_id, start, end)
        # sorted() is stable with reverse=True: ties keep snapshot order
        ranked = sorted(records, key=lambda r: r.cost, reverse=True)
        return ranked[:count]
