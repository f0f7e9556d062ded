"""
cdrquery/report.py
JSON-serializable views of query results, shared by the HTTP API and CLI.

Dates and times are written back in the source file formats
(dd/MM/yyyy, HH:mm:ss). Cost is a string so no precision is lost.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from cdrquery.models.record import CallDetailRecord, CallSummary

TIME_FORMAT = "%H:%M:%S"


def cdr_to_dict(record: CallDetailRecord) -> Dict[str, Any]:
    """Convert a CallDetailRecord to a JSON-serializable dict."""
    return {
        "caller_id":   record.caller_id,
        "recipient":   record.recipient,
        # date.min has a 1-digit year under %Y on some platforms
        "call_date":   f"{record.call_date.day:02d}/{record.call_date.month:02d}/{record.call_date.year:04d}",
        "end_time":    record.end_time.strftime(TIME_FORMAT),
        "duration":    record.duration,
        "cost":        str(record.cost),
        "reference":   record.reference,
        "currency":    record.currency,
        "type":        record.call_type.name,
        "faults":      list(record.faults),
        "source_file": record.source_file,
        "line_number": record.line_number,
    }


def cdrs_to_dict(records: Iterable[CallDetailRecord]) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = [cdr_to_dict(r) for r in records]
    return {"count": len(items), "cdrs": items}


def summary_to_dict(summary: CallSummary) -> Dict[str, Any]:
    return {"count": summary.count, "total_duration": summary.total_duration}


def to_json(payload: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(payload, indent=indent, ensure_ascii=False)
