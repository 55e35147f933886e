from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from models import Base
from models.database import apply_sqlite_pragmas, sqlite_connect_args
from services.aggregation import InMemoryRecordStore, SqlAlchemyRecordStore, get_consensus, ingest

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

WORKERS = 4
SAMPLES_PER_WORKER = 24


def _sample(worker: int, index: int) -> dict:
    return {
        "brand": "Cohiba",
        "name": "Siglo II",
        "origin": "Cuba" if index % 2 == 0 else "Nicaragua",
        "flavorProfile": ["Cedar", "Cedar"],
        "rating": 80 if index % 2 == 0 else 90,
        "contributorId": f"u{worker}",
        "contributorName": f"Worker {worker}",
    }


def _run_workers(ingest_batch) -> None:
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(ingest_batch, worker) for worker in range(WORKERS)]
        for future in futures:
            future.result()


def _assert_nothing_lost(store) -> None:
    total = WORKERS * SAMPLES_PER_WORKER
    record = store.get("cohibasigloii")

    assert record.total_recognitions == total
    assert sum(record.scalar_stats["origin"].values()) == total
    assert record.scalar_stats["origin"] == {"Cuba": total // 2, "Nicaragua": total // 2}
    assert record.scalar_stats["brand"] == {"Cohiba": total}
    assert record.array_stats["flavor_profile"] == {"Cedar": 2 * total}
    assert record.rating_count == total
    assert record.rating_sum == pytest.approx(85.0 * total)
    assert len(record.contributors) == WORKERS

    view = get_consensus(store, "cohibasigloii")
    assert view.rating == pytest.approx(85.0)
    assert view.origin_consistency == pytest.approx(50.0)


def test_parallel_ingest_into_memory_store():
    store = InMemoryRecordStore()

    def ingest_batch(worker: int) -> None:
        for index in range(SAMPLES_PER_WORKER):
            ingest(store, _sample(worker, index), now=BASE_TIME + timedelta(seconds=index))

    _run_workers(ingest_batch)

    _assert_nothing_lost(store)
    assert len(store) == 1


def test_parallel_ingest_into_sqlite_file(tmp_path):
    url = f"sqlite:///{tmp_path / 'consensus.db'}"
    engine = create_engine(url, connect_args=sqlite_connect_args(url))

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        apply_sqlite_pragmas(dbapi_connection)

    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False)

    def ingest_batch(worker: int) -> None:
        # One session per writer, as each API request gets its own.
        with session_factory() as session:
            store = SqlAlchemyRecordStore(session)
            for index in range(SAMPLES_PER_WORKER):
                ingest(store, _sample(worker, index), now=BASE_TIME + timedelta(seconds=index))

    try:
        _run_workers(ingest_batch)

        with session_factory() as session:
            _assert_nothing_lost(SqlAlchemyRecordStore(session))
    finally:
        engine.dispose()
