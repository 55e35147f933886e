from .aggregation import (
    InMemoryRecordStore,
    IngestResult,
    SqlAlchemyRecordStore,
    derive_consensus,
    find_by_contributor,
    get_consensus,
    ingest,
)

__all__ = [
    "IngestResult",
    "InMemoryRecordStore",
    "SqlAlchemyRecordStore",
    "derive_consensus",
    "find_by_contributor",
    "get_consensus",
    "ingest",
]
