"""
Record store contract and an in-process implementation.

The engine only talks to a store through RecordStore. Counter writes are
increments, description and contributor writes are single-value upserts, and
every write of one sample runs inside unit_of_work() so a failure leaves the
record as it was.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, Optional, Protocol

from services.aggregation.errors import StoreError
from services.aggregation.merge_rules import apply_contributor, apply_description, apply_increments
from services.aggregation.models import CounterIncrements, DescriptionCandidate, EntityRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def get(self, key: str) -> Optional[EntityRecord]:
        ...

    def ensure_record(self, key: str, product_name: str, created_at: datetime) -> bool:
        """Create an empty record for key if none exists; return True if created."""
        ...

    def upsert_counters(self, key: str, increments: CounterIncrements) -> None:
        ...

    def upsert_single_value(self, key: str, candidate: DescriptionCandidate) -> bool:
        """Store the description if it wins over the current one; return True if adopted."""
        ...

    def upsert_contributor(self, key: str, contributor_id: str, contributor_name: str) -> None:
        ...

    def scan_all(self, contributor_id: Optional[str] = None) -> Iterator[EntityRecord]:
        ...

    def unit_of_work(self):
        ...


class InMemoryRecordStore:
    """Dictionary-backed store guarded by one re-entrant lock.

    Reads return copies, so callers never observe a record mid-update.
    """

    def __init__(self):
        self._records: Dict[str, EntityRecord] = {}
        self._lock = threading.RLock()
        # Pre-write copies of the records touched by the open unit of work.
        self._journal: Optional[Dict[str, Optional[EntityRecord]]] = None

    def __len__(self) -> int:
        return len(self._records)

    def _remember(self, key: str) -> None:
        if self._journal is not None and key not in self._journal:
            record = self._records.get(key)
            self._journal[key] = copy.deepcopy(record) if record is not None else None

    def _require(self, key: str) -> EntityRecord:
        record = self._records.get(key)
        if record is None:
            raise StoreError(f"Record {key!r} does not exist")
        return record

    def get(self, key: str) -> Optional[EntityRecord]:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def ensure_record(self, key: str, product_name: str, created_at: datetime) -> bool:
        with self._lock:
            if key in self._records:
                return False
            self._remember(key)
            self._records[key] = EntityRecord(key=key, product_name=product_name, created_at=created_at)
            return True

    def upsert_counters(self, key: str, increments: CounterIncrements) -> None:
        with self._lock:
            self._remember(key)
            apply_increments(self._require(key), increments)

    def upsert_single_value(self, key: str, candidate: DescriptionCandidate) -> bool:
        with self._lock:
            self._remember(key)
            return apply_description(self._require(key), candidate)

    def upsert_contributor(self, key: str, contributor_id: str, contributor_name: str) -> None:
        with self._lock:
            self._remember(key)
            apply_contributor(self._require(key), contributor_id, contributor_name)

    def scan_all(self, contributor_id: Optional[str] = None) -> Iterator[EntityRecord]:
        with self._lock:
            snapshot = [
                copy.deepcopy(record)
                for record in self._records.values()
                if contributor_id is None or contributor_id in record.contributors
            ]
        yield from snapshot

    @contextmanager
    def unit_of_work(self):
        with self._lock:
            if self._journal is not None:
                yield self
                return

            self._journal = {}
            try:
                yield self
            except Exception:
                logger.warning(f"Rolling back in-memory unit of work on {sorted(self._journal)}")
                for key, record in self._journal.items():
                    if record is None:
                        self._records.pop(key, None)
                    else:
                        self._records[key] = record
                raise
            finally:
                self._journal = None
