"""
cdrquery: read-only queries over call detail records loaded from CSV files.
"""

from cdrquery.models.record import CallDetailRecord, CallSummary, CallType
from cdrquery.query import CDRQueryEngine
from cdrquery.store import DirectoryNotFound, RecordStore

__version__ = "1.0.0"

__all__ = [
    "CDRQueryEngine",
    "CallDetailRecord",
    "CallSummary",
    "CallType",
    "DirectoryNotFound",
    "RecordStore",
]
