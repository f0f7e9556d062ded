"""
cdrquery/parsers/cdr_parser.py
Parses comma-delimited call-detail record files (*.csv).

FORMAT:
  line 1  header, always skipped, never validated
  line 2+ caller_id,recipient,call_date,end_time,duration,cost,reference,currency,type
          call_date dd/MM/yyyy, end_time HH:mm:ss

Columns are positional. Split is a plain comma split; quoted or escaped
fields are not supported and will misparse.

FAULT TOLERANCE:
  Each column is parsed on its own. A column that fails to parse takes the
  sentinel from cdrquery.models.record and its name is added to
  record.faults. The record is still kept.
  A line with fewer than 9 columns (blank lines included) cannot be mapped
  positionally, so it is skipped with a warning and the file continues.
"""

import logging
import math
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional, Tuple

from cdrquery.models.record import (
    COST_SENTINEL,
    DATE_SENTINEL,
    DURATION_SENTINEL,
    TIME_SENTINEL,
    CallDetailRecord,
    CallType,
)

logger = logging.getLogger(__name__)

SOURCE_GLOB    = '*.csv'
COLUMN_COUNT   = 9
FILE_ENCODING  = 'utf-8-sig'   # strips a UTF-8 BOM when present
FILE_ERRORS    = 'replace'     # undecodable bytes become U+FFFD, never abort the load

_DATE_RE = re.compile(r'^\d{2}/\d{2}/\d{4}$')
_TIME_RE = re.compile(r'^\d{2}:\d{2}:\d{2}$')

# Exact, case-sensitive names as written in source files
CALL_TYPE_NAMES = {
    'None':          CallType.NONE,
    'Local':         CallType.LOCAL,
    'International': CallType.INTERNATIONAL,
}
VALID_TYPE_CODES = frozenset(int(m) for m in CallType if m is not CallType.NONE)


# ── FIELD PARSERS ────────────────────────────────────────────
# Each returns (value, ok). ok=False means the sentinel was used.

def parse_call_date(text: str) -> Tuple[date, bool]:
    text = text.strip()
    if not _DATE_RE.match(text):
        return DATE_SENTINEL, False
    try:
        return datetime.strptime(text, '%d/%m/%Y').date(), True
    except ValueError:
        return DATE_SENTINEL, False


def parse_end_time(text: str) -> Tuple[time, bool]:
    text = text.strip()
    if not _TIME_RE.match(text):
        return TIME_SENTINEL, False
    try:
        return datetime.strptime(text, '%H:%M:%S').time(), True
    except ValueError:
        return TIME_SENTINEL, False


def parse_duration(text: str) -> Tuple[float, bool]:
    text = text.strip()
    if '_' in text:
        return DURATION_SENTINEL, False
    try:
        value = float(text)
    except ValueError:
        return DURATION_SENTINEL, False
    if not math.isfinite(value) or value < 0:
        return DURATION_SENTINEL, False
    return abs(value), True   # -0.0 → 0.0


def parse_cost(text: str) -> Tuple[Decimal, bool]:
    text = text.strip()
    if '_' in text:
        return COST_SENTINEL, False
    try:
        value = Decimal(text)
    except InvalidOperation:
        return COST_SENTINEL, False
    if not value.is_finite() or value < 0:
        return COST_SENTINEL, False
    return value.copy_abs(), True   # Decimal('-0') → Decimal('0'), scale kept


def parse_call_type(text: str) -> Tuple[CallType, bool]:
    """
    Accepts the exact name ('None', 'Local', 'International') or the
    numeric code of a defined non-zero member. Anything else is NONE.
    An explicit 'None' is a valid value, not a fault.
    """
    text = text.strip()
    if text.isdecimal():
        code = int(text)
        if code in VALID_TYPE_CODES:
            return CallType(code), True
        return CallType.NONE, False
    member = CALL_TYPE_NAMES.get(text)
    if member is None:
        return CallType.NONE, False
    return member, True


# ── LINE / FILE / DIRECTORY ──────────────────────────────────

def parse_cdr_line(
    line:        str,
    source_file: str = '',
    line_number: int = 0,
) -> Optional[CallDetailRecord]:
    """
    Parse one data line. Returns None when the line has fewer than
    COLUMN_COUNT columns; never raises for bad field content.
    """
    values = line.rstrip('\r\n').split(',')
    if len(values) < COLUMN_COUNT:
        return None

    faults: List[str] = []

    call_date, ok = parse_call_date(values[2])
    if not ok:
        faults.append('call_date')
    end_time, ok = parse_end_time(values[3])
    if not ok:
        faults.append('end_time')
    duration, ok = parse_duration(values[4])
    if not ok:
        faults.append('duration')
    cost, ok = parse_cost(values[5])
    if not ok:
        faults.append('cost')
    call_type, ok = parse_call_type(values[8])
    if not ok:
        faults.append('call_type')

    if faults:
        logger.debug(f"{source_file}:{line_number} degraded fields: {', '.join(faults)}")

    return CallDetailRecord(
        caller_id   = values[0],
        recipient   = values[1],
        call_date   = call_date,
        end_time    = end_time,
        duration    = duration,
        cost        = cost,
        reference   = values[6],
        currency    = values[7],
        call_type   = call_type,
        faults      = tuple(faults),
        source_file = source_file,
        line_number = line_number,
    )


def parse_cdr_file(path: Path) -> List[CallDetailRecord]:
    """
    Parse a single CDR file. The first line is a header and is skipped.
    Bytes that are not valid UTF-8 are replaced, so a stray Latin-1
    character only affects the text of its own field.
    OSError propagates: an unreadable source file is a load failure.
    """
    path    = Path(path)
    records: List[CallDetailRecord] = []
    skipped = 0

    with path.open('r', encoding=FILE_ENCODING, errors=FILE_ERRORS) as handle:
        next(handle, None)   # header
        for line_number, line in enumerate(handle, start=2):
            record = parse_cdr_line(line, source_file=path.name, line_number=line_number)
            if record is None:
                skipped += 1
                logger.warning(
                    f"Skipped {path.name}:{line_number}: expected {COLUMN_COUNT} columns"
                )
                continue
            records.append(record)

    degraded = sum(1 for r in records if r.faults)
    logger.info(
        f"Parsed {len(records)} CDRs from {path.name} "
        f"({degraded} degraded, {skipped} skipped)"
    )
    return records


def parse_cdr_directory(directory: Path) -> List[CallDetailRecord]:
    """
    Parse every *.csv file directly inside `directory` (non-recursive).
    Files are taken in name order; records keep (file, line) order.
    """
    all_records: List[CallDetailRecord] = []
    paths = sorted(p for p in Path(directory).glob(SOURCE_GLOB) if p.is_file())

    if not paths:
        logger.warning(f"No {SOURCE_GLOB} files found in {directory}")

    for path in paths:
        all_records.extend(parse_cdr_file(path))

    logger.info(f"Total CDRs loaded: {len(all_records)} from {len(paths)} file(s)")
    return all_records
