"""
Consensus extraction.

derive_consensus is the single read path from an EntityRecord to the view
callers see: most frequent value per scalar field, ranked lists for
multi-valued fields, rating and confidence means and contributors. Ties on
count are broken by ascending value so the result never depends on storage order.
"""

from typing import Dict, List, Optional, Tuple

from models.schemas import ConsensusView, ContributorInfo, ValueFrequency
from services.aggregation.fields import RANKED_FIELDS, TOP_ONE_FIELDS
from services.aggregation.models import EntityRecord


def _ranked(stats: Dict[str, int]) -> List[Tuple[str, int]]:
    return sorted(stats.items(), key=lambda item: (-item[1], item[0]))


def _percentage(count: int, total: int) -> float:
    return (count / total) * 100 if total else 0.0


def most_frequent_value(stats: Optional[Dict[str, int]]) -> Optional[ValueFrequency]:
    if not stats:
        return None
    total = sum(stats.values())
    value, count = _ranked(stats)[0]
    return ValueFrequency(value=value, count=count, percentage=_percentage(count, total))


def top_n_values(stats: Optional[Dict[str, int]], n: int) -> List[ValueFrequency]:
    if not stats or n <= 0:
        return []
    total = sum(stats.values())
    return [
        ValueFrequency(value=value, count=count, percentage=_percentage(count, total))
        for value, count in _ranked(stats)[:n]
    ]


def average_rating(record: EntityRecord) -> Optional[float]:
    if record.rating_count <= 0:
        return None
    return record.rating_sum / record.rating_count


def average_confidence(record: EntityRecord) -> Optional[float]:
    """Mean confidence over every description submitted, adopted or not."""
    if record.confidence_count <= 0:
        return None
    return record.confidence_sum / record.confidence_count


def derive_consensus(record: EntityRecord) -> ConsensusView:
    top = {
        name: most_frequent_value(record.scalar_stats.get(name))
        for name in TOP_ONE_FIELDS
    }
    ranked = {
        list_name: top_n_values(record.stats_for(source_field), size)
        for list_name, (source_field, size) in RANKED_FIELDS.items()
    }
    contributors = [
        ContributorInfo(id=contributor_id, name=name)
        for contributor_id, name in sorted(record.contributors.items())
    ]

    return ConsensusView(
        key=record.key,
        product_name=record.product_name,
        brand=top["brand"].value if top["brand"] else "",
        brand_consistency=top["brand"].percentage if top["brand"] else 0.0,
        origin=top["origin"].value if top["origin"] else "",
        origin_consistency=top["origin"].percentage if top["origin"] else 0.0,
        strength=top["strength"].value if top["strength"] else "",
        strength_consistency=top["strength"].percentage if top["strength"] else 0.0,
        description=record.description or "",
        description_confidence=record.description_confidence,
        avg_confidence=average_confidence(record),
        rating=average_rating(record),
        rating_count=record.rating_count,
        total_recognitions=record.total_recognitions,
        last_recognized_at=record.last_recognized_at,
        contributors=contributors,
        unique_contributors=len(contributors),
        **ranked,
    )
