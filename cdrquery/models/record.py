"""
cdrquery/models/record.py
Shared dataclass schema. The parser, store, query engine, API and CLI
all use these types. Do not add query logic here, data only.

SENTINELS (value substituted when a column fails to parse):
  call_date  → date.min     (0001-01-01)
  end_time   → time.min     (00:00:00)
  duration   → 0.0
  cost       → Decimal('0')
  call_type  → CallType.NONE
A sentinel is indistinguishable from a genuine zero/earliest value;
check `faults` before trusting one.
"""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import IntEnum
from typing import Tuple


class CallType(IntEnum):
    """Categorical call tag. NONE is the unknown/unparsable sentinel."""
    NONE          = 0
    LOCAL         = 1
    INTERNATIONAL = 2


DATE_SENTINEL     = date.min
TIME_SENTINEL     = time.min
DURATION_SENTINEL = 0.0
COST_SENTINEL     = Decimal('0')


@dataclass(frozen=True)
class CallDetailRecord:
    """One phone call event, as read from a source line."""
    caller_id:   str
    recipient:   str
    call_date:   date
    end_time:    time           # time-of-day only, not combined with call_date
    duration:    float
    cost:        Decimal
    reference:   str            # nominally unique, not enforced
    currency:    str
    call_type:   CallType

    # Provenance, never used for filtering
    faults:      Tuple[str, ...] = field(default_factory=tuple)
    source_file: str             = ''
    line_number: int             = 0

    @property
    def degraded(self) -> bool:
        return bool(self.faults)


@dataclass(frozen=True)
class CallSummary:
    """Aggregate over a date window."""
    count:          int
    total_duration: float
