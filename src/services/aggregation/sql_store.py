"""
SQLAlchemy-backed record store.

Counters are written with INSERT ... ON CONFLICT DO UPDATE and
UPDATE ... SET x = x + n, so concurrent writers add instead of overwrite.
The description is replaced through one conditional UPDATE whose WHERE
clause carries the adoption rule, which keeps text, confidence and timestamp
together without a read-modify-write.
"""

import logging
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import CigarRecord, FieldCounter, RecordContributor
from services.aggregation.errors import StoreError
from services.aggregation.fields import DEFAULT_CONFIDENCE, is_array_field, is_scalar_field
from services.aggregation.models import CounterIncrements, DescriptionCandidate, EntityRecord

logger = logging.getLogger(__name__)

records_table = CigarRecord.__table__
counters_table = FieldCounter.__table__
contributors_table = RecordContributor.__table__


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@contextmanager
def _translate_errors(action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Store failure during {action}: {exc}")
        raise StoreError(f"{action} failed: {exc}") from exc


class SqlAlchemyRecordStore:
    def __init__(self, session: Session):
        self.session = session

    def _insert(self, table):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql_insert(table)
        if dialect == "sqlite":
            return sqlite_insert(table)
        raise StoreError(f"Atomic upserts are not supported on {dialect}")

    def get(self, key: str) -> Optional[EntityRecord]:
        with _translate_errors(f"get {key}"):
            row = self.session.execute(
                select(records_table).where(records_table.c.key == key)
            ).mappings().first()
            if row is None:
                return None
            return self._load_records([row])[0]

    def scan_all(self, contributor_id: Optional[str] = None) -> Iterator[EntityRecord]:
        query = select(records_table).order_by(records_table.c.key)
        if contributor_id is not None:
            member_keys = select(contributors_table.c.record_key).where(
                contributors_table.c.contributor_id == contributor_id
            )
            query = query.where(records_table.c.key.in_(member_keys))

        with _translate_errors("scan"):
            rows = self.session.execute(query).mappings().all()
            records = self._load_records(rows) if rows else []
        yield from records

    def _load_records(self, rows) -> List[EntityRecord]:
        keys = [row["key"] for row in rows]

        counters: Dict[str, list] = defaultdict(list)
        counter_rows = self.session.execute(
            select(
                counters_table.c.record_key,
                counters_table.c.field,
                counters_table.c.value,
                counters_table.c["count"],
            ).where(counters_table.c.record_key.in_(keys))
        ).all()
        for record_key, field_name, value, count in counter_rows:
            counters[record_key].append((field_name, value, count))

        contributors: Dict[str, Dict[str, str]] = defaultdict(dict)
        contributor_rows = self.session.execute(
            select(
                contributors_table.c.record_key,
                contributors_table.c.contributor_id,
                contributors_table.c.contributor_name,
            ).where(contributors_table.c.record_key.in_(keys))
        ).all()
        for record_key, contributor_id, contributor_name in contributor_rows:
            contributors[record_key][contributor_id] = contributor_name

        return [self._to_record(row, counters[row["key"]], contributors[row["key"]]) for row in rows]

    @staticmethod
    def _to_record(row, counter_rows: list, contributors: Dict[str, str]) -> EntityRecord:
        record = EntityRecord(
            key=row["key"],
            product_name=row["product_name"],
            rating_sum=row["rating_sum"] or 0.0,
            rating_count=row["rating_count"] or 0,
            confidence_sum=row["confidence_sum"] or 0.0,
            confidence_count=row["confidence_count"] or 0,
            description=row["description"],
            description_confidence=row["description_confidence"],
            description_updated_at=_as_utc(row["description_updated_at"]),
            contributors=dict(contributors),
            total_recognitions=row["total_recognitions"] or 0,
            last_recognized_at=_as_utc(row["last_recognized_at"]),
            created_at=_as_utc(row["created_at"]),
        )
        for field_name, value, count in counter_rows:
            if is_scalar_field(field_name):
                record.scalar_stats.setdefault(field_name, {})[value] = count
            elif is_array_field(field_name):
                record.array_stats.setdefault(field_name, {})[value] = count
            else:
                logger.warning(f"Ignoring counter for unknown field {field_name!r} on {row['key']}")
        return record

    def ensure_record(self, key: str, product_name: str, created_at: datetime) -> bool:
        stmt = self._insert(records_table).values(
            key=key,
            product_name=product_name,
            total_recognitions=0,
            rating_sum=0.0,
            rating_count=0,
            confidence_sum=0.0,
            confidence_count=0,
            created_at=created_at,
            updated_at=created_at,
        ).on_conflict_do_nothing(index_elements=["key"])
        with _translate_errors(f"create {key}"):
            result = self.session.execute(stmt)
        return result.rowcount == 1

    def upsert_counters(self, key: str, increments: CounterIncrements) -> None:
        rows = [
            {"record_key": key, "field": field_name, "value": value, "count": count}
            for field_name, values in increments.field_counts.items()
            for value, count in values.items()
        ]

        with _translate_errors(f"increment counters of {key}"):
            result = self.session.execute(
                update(records_table)
                .where(records_table.c.key == key)
                .values(
                    total_recognitions=records_table.c.total_recognitions + increments.recognitions,
                    rating_sum=records_table.c.rating_sum + increments.rating_sum,
                    rating_count=records_table.c.rating_count + increments.rating_count,
                    confidence_sum=records_table.c.confidence_sum + increments.confidence_sum,
                    confidence_count=records_table.c.confidence_count + increments.confidence_count,
                    last_recognized_at=increments.recognized_at,
                    updated_at=increments.recognized_at,
                )
            )
            if result.rowcount == 0:
                raise StoreError(f"Record {key!r} does not exist")

            if rows:
                stmt = self._insert(counters_table)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["record_key", "field", "value"],
                    set_={"count": counters_table.c["count"] + stmt.excluded["count"]},
                )
                self.session.execute(stmt, rows)

    def upsert_single_value(self, key: str, candidate: DescriptionCandidate) -> bool:
        stored_confidence = func.coalesce(records_table.c.description_confidence, DEFAULT_CONFIDENCE)
        stmt = (
            update(records_table)
            .where(
                records_table.c.key == key,
                or_(
                    records_table.c.description.is_(None),
                    records_table.c.description == "",
                    stored_confidence <= candidate.confidence,
                ),
            )
            .values(
                description=candidate.text,
                description_confidence=candidate.confidence,
                description_updated_at=candidate.updated_at,
            )
        )
        with _translate_errors(f"update description of {key}"):
            result = self.session.execute(stmt)
        return result.rowcount == 1

    def upsert_contributor(self, key: str, contributor_id: str, contributor_name: str) -> None:
        stmt = self._insert(contributors_table).values(
            record_key=key,
            contributor_id=contributor_id,
            contributor_name=contributor_name,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["record_key", "contributor_id"],
            set_={"contributor_name": stmt.excluded.contributor_name},
        )
        with _translate_errors(f"add contributor {contributor_id} to {key}"):
            self.session.execute(stmt)

    @contextmanager
    def unit_of_work(self):
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Commit failed, changes rolled back: {exc}")
            raise StoreError(f"commit failed: {exc}") from exc
        except Exception:
            self.session.rollback()
            raise
