"""
Read paths over stored cigar records.

Every path goes through derive_consensus; none of them keeps its own copy of
the extraction logic.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from models.schemas import ConsensusView
from services.aggregation.consensus import derive_consensus
from services.aggregation.normalization import normalize_product_name
from services.aggregation.store import RecordStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def get_consensus(store: RecordStore, key: str) -> Optional[ConsensusView]:
    record = store.get(key)
    if record is None:
        logger.info(f"No record for {key}")
        return None
    logger.info(f"Consensus for {key} built from {record.total_recognitions} recognitions")
    return derive_consensus(record)


def get_consensus_by_name(store: RecordStore, product_name: str) -> Optional[ConsensusView]:
    key = normalize_product_name(product_name)
    if not key:
        return None
    return get_consensus(store, key)


def find_by_contributor(store: RecordStore, contributor_id: str) -> List[Tuple[str, ConsensusView]]:
    """Records a contributor has touched, most recently recognized first.

    Cost grows with the number of stored records for stores without a
    contributor index.
    """
    matches = [(record.key, derive_consensus(record)) for record in store.scan_all(contributor_id=contributor_id)]
    matches.sort(key=lambda item: item[0])
    matches.sort(key=lambda item: item[1].last_recognized_at or _EPOCH, reverse=True)
    logger.info(f"Contributor {contributor_id} has {len(matches)} records")
    return matches


def search_keys(store: RecordStore, term: str, limit: int = 20) -> List[str]:
    needle = normalize_product_name(term)
    if not needle:
        return []
    keys = sorted(record.key for record in store.scan_all() if needle in record.key)
    return keys[:limit]
