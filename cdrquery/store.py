"""
cdrquery/store.py
Record store: one eager load pass over a source directory, then an
immutable snapshot held for the life of the process.

The snapshot is a tuple of frozen dataclasses. Nothing mutates it after
load, so any number of threads may read it without locking.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Tuple

from cdrquery.models.record import CallDetailRecord
from cdrquery.parsers.cdr_parser import parse_cdr_directory

logger = logging.getLogger(__name__)


class DirectoryNotFound(FileNotFoundError):
    """Source directory is missing or is not a directory. Fatal at startup."""


class RecordStore:
    """
    Immutable in-memory CDR table.

    Usage:
        store = RecordStore.load(Path("./data"))
        records = store.get_all()
    """

    def __init__(self, records, source_dir: Path | None = None):
        self._records: Tuple[CallDetailRecord, ...] = tuple(records)
        self.source_dir = source_dir

    @classmethod
    def load(cls, directory) -> "RecordStore":
        """
        Parse every *.csv file in `directory` into a new store.
        Raises DirectoryNotFound when the directory is missing.
        """
        directory = Path(directory)
        if not directory.exists():
            raise DirectoryNotFound(f"CDR source directory does not exist: {directory}")
        if not directory.is_dir():
            raise DirectoryNotFound(f"CDR source path is not a directory: {directory}")

        logger.info(f"Loading CDRs from {directory}")
        try:
            records = parse_cdr_directory(directory)
        except OSError as e:
            logger.error(f"CDR load failed in {directory}: {e}")
            raise

        store = cls(records, source_dir=directory)
        degraded = sum(1 for r in store._records if r.faults)
        if degraded:
            logger.warning(
                f"{degraded} of {len(store)} CDRs carry sentinel values for unparsable fields"
            )
        return store

    def get_all(self) -> Tuple[CallDetailRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CallDetailRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"RecordStore(records={len(self)}, source_dir={self.source_dir!r})"
