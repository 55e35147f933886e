"""
Data structures for the aggregation engine.

EntityRecord is the accumulated state of one cigar; CounterIncrements and
DescriptionCandidate describe what a single sample contributes to it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from services.aggregation.errors import MalformedFieldError, SampleValidationError
from services.aggregation.fields import ARRAY_FIELDS, SCALAR_FIELDS


def _empty_stats(fields: Tuple[str, ...]) -> Dict[str, Dict[str, int]]:
    return {name: {} for name in fields}


@dataclass
class EntityRecord:
    """Persistent statistics for one normalized cigar key."""
    key: str
    product_name: str
    scalar_stats: Dict[str, Dict[str, int]] = field(default_factory=lambda: _empty_stats(SCALAR_FIELDS))
    array_stats: Dict[str, Dict[str, int]] = field(default_factory=lambda: _empty_stats(ARRAY_FIELDS))
    rating_sum: float = 0.0
    rating_count: int = 0
    confidence_sum: float = 0.0
    confidence_count: int = 0
    description: Optional[str] = None
    description_confidence: Optional[float] = None
    description_updated_at: Optional[datetime] = None
    contributors: Dict[str, str] = field(default_factory=dict)
    total_recognitions: int = 0
    last_recognized_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def stats_for(self, field_name: str) -> Dict[str, int]:
        if field_name in self.scalar_stats:
            return self.scalar_stats[field_name]
        return self.array_stats.get(field_name, {})


@dataclass
class CounterIncrements:
    """Commutative additions one sample makes to a record."""
    recognized_at: datetime
    field_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    rating_sum: float = 0.0
    rating_count: int = 0
    confidence_sum: float = 0.0
    confidence_count: int = 0
    recognitions: int = 1

    def add(self, field_name: str, value: str) -> None:
        values = self.field_counts.setdefault(field_name, {})
        values[value] = values.get(value, 0) + 1


@dataclass
class DescriptionCandidate:
    text: str
    confidence: float
    updated_at: datetime


@dataclass
class MergePlan:
    """Everything a validated sample will write, computed before touching the store."""
    key: str
    product_name: str
    increments: CounterIncrements
    description: Optional[DescriptionCandidate] = None
    contributor: Optional[Tuple[str, str]] = None
    malformed_fields: List[MalformedFieldError] = field(default_factory=list)


@dataclass
class IngestResult:
    key: Optional[str] = None
    rejection: Optional[SampleValidationError] = None
    created: bool = False
    description_adopted: bool = False
    malformed_fields: List[MalformedFieldError] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.rejection is None
