"""
cdrquery/models: record schema shared by every layer.
"""

from cdrquery.models.record import (
    CallDetailRecord,
    CallSummary,
    CallType,
)

__all__ = [
    "CallDetailRecord",
    "CallSummary",
    "CallType",
]
