"""
Consensus aggregation for repeated cigar recognitions.

Samples from independent recognition attempts are merged into one record per
normalized product key; consensus views are derived from that record on read.
"""

from services.aggregation.consensus import derive_consensus, most_frequent_value, top_n_values
from services.aggregation.errors import (
    AggregationError,
    MalformedFieldError,
    SampleValidationError,
    StoreError,
)
from services.aggregation.history import (
    find_by_contributor,
    get_consensus,
    get_consensus_by_name,
    search_keys,
)
from services.aggregation.ingestion import ingest
from services.aggregation.models import (
    CounterIncrements,
    DescriptionCandidate,
    EntityRecord,
    IngestResult,
)
from services.aggregation.normalization import entity_key, normalize_product_name
from services.aggregation.sql_store import SqlAlchemyRecordStore
from services.aggregation.store import InMemoryRecordStore, RecordStore

__all__ = [
    # Records
    "EntityRecord",
    "CounterIncrements",
    "DescriptionCandidate",
    "IngestResult",

    # Errors
    "AggregationError",
    "SampleValidationError",
    "MalformedFieldError",
    "StoreError",

    # Stores
    "RecordStore",
    "InMemoryRecordStore",
    "SqlAlchemyRecordStore",

    # Operations
    "entity_key",
    "normalize_product_name",
    "ingest",
    "derive_consensus",
    "most_frequent_value",
    "top_n_values",
    "get_consensus",
    "get_consensus_by_name",
    "find_by_contributor",
    "search_keys",
]
