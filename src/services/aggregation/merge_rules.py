"""
Field merge rules.

A sample is first turned into a MergePlan (pure, no store access). The
plan's counters are commutative increments; the description and contributor
entries are single values whose adoption rules live here too so that every
store applies them the same way.
"""

import math
from datetime import datetime
from typing import Any, List, Optional, Tuple

from models.schemas import RecognitionSample
from services.aggregation.errors import MalformedFieldError
from services.aggregation.fields import (
    ARRAY_FIELDS,
    DEFAULT_CONFIDENCE,
    MAX_VALUE_LENGTH,
    RATING_MAX,
    RATING_MIN,
    SCALAR_FIELDS,
    is_scalar_field,
)
from services.aggregation.models import (
    CounterIncrements,
    DescriptionCandidate,
    EntityRecord,
    MergePlan,
)
from services.aggregation.normalization import entity_key, product_display_name


def clean_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _is_real_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_rating(value: Any) -> Tuple[Optional[float], Optional[MalformedFieldError]]:
    if value is None:
        return None, None
    if not _is_real_number(value):
        return None, MalformedFieldError("rating", f"not a finite number: {value!r}")
    if value < RATING_MIN or value > RATING_MAX:
        return None, MalformedFieldError("rating", f"{value} outside [{RATING_MIN}, {RATING_MAX}]")
    return float(value), None


def parse_confidence(value: Any) -> Tuple[float, Optional[MalformedFieldError]]:
    if value is None:
        return DEFAULT_CONFIDENCE, None
    if not _is_real_number(value) or value < 0 or value > 1:
        return DEFAULT_CONFIDENCE, MalformedFieldError("confidence", f"expected a number in [0, 1], got {value!r}")
    return float(value), None


def _check_length(field_name: str, value: str, malformed: List[MalformedFieldError]) -> bool:
    if len(value) > MAX_VALUE_LENGTH:
        malformed.append(MalformedFieldError(field_name, f"longer than {MAX_VALUE_LENGTH} characters"))
        return False
    return True


def _collect_scalar(
    increments: CounterIncrements, field_name: str, raw: Any, malformed: List[MalformedFieldError]
) -> None:
    value = clean_text(raw)
    if value:
        if _check_length(field_name, value, malformed):
            increments.add(field_name, value)
    elif raw is not None and not isinstance(raw, str):
        malformed.append(MalformedFieldError(field_name, f"expected a string, got {type(raw).__name__}"))


def _collect_array(
    increments: CounterIncrements, field_name: str, raw: Any, malformed: List[MalformedFieldError]
) -> None:
    if raw is None:
        return
    if not isinstance(raw, (list, tuple)):
        malformed.append(MalformedFieldError(field_name, f"expected a list, got {type(raw).__name__}"))
        return
    # Repeated elements within one sample are counted once per occurrence.
    for index, element in enumerate(raw):
        value = clean_text(element)
        if value:
            if _check_length(field_name, value, malformed):
                increments.add(field_name, value)
        elif element is not None and not isinstance(element, str):
            malformed.append(
                MalformedFieldError(field_name, f"element {index} is {type(element).__name__}, not a string")
            )


def build_merge_plan(sample: RecognitionSample, now: datetime) -> MergePlan:
    """Translate a validated sample into the writes it implies."""
    malformed: List[MalformedFieldError] = []
    increments = CounterIncrements(recognized_at=now)

    for field_name in SCALAR_FIELDS:
        _collect_scalar(increments, field_name, getattr(sample, field_name), malformed)

    for field_name in ARRAY_FIELDS:
        _collect_array(increments, field_name, getattr(sample, field_name), malformed)

    rating, rating_error = parse_rating(sample.rating)
    if rating_error:
        malformed.append(rating_error)
    elif rating is not None:
        increments.rating_sum = rating
        increments.rating_count = 1

    description = None
    text = clean_text(sample.description)
    if text:
        confidence, confidence_error = parse_confidence(sample.confidence)
        if confidence_error:
            malformed.append(confidence_error)
        description = DescriptionCandidate(text=text, confidence=confidence, updated_at=now)
        increments.confidence_sum = confidence
        increments.confidence_count = 1

    contributor = None
    contributor_id = clean_text(sample.contributor_id)
    contributor_name = clean_text(sample.contributor_name)
    if contributor_id and contributor_name:
        if _check_length("contributor", contributor_id, malformed) and _check_length(
            "contributor", contributor_name, malformed
        ):
            contributor = (contributor_id, contributor_name)

    brand = clean_text(sample.brand) or ""
    name = clean_text(sample.name) or ""

    return MergePlan(
        key=entity_key(brand, name),
        product_name=product_display_name(brand, name),
        increments=increments,
        description=description,
        contributor=contributor,
        malformed_fields=malformed,
    )


def should_adopt_description(
    current_text: Optional[str],
    current_confidence: Optional[float],
    candidate: DescriptionCandidate,
) -> bool:
    """Adopt when nothing is stored or the candidate is at least as confident.

    Equal confidence resolves to the newer description.
    """
    if not current_text:
        return True
    stored = current_confidence if current_confidence is not None else DEFAULT_CONFIDENCE
    return candidate.confidence >= stored


def apply_increments(record: EntityRecord, increments: CounterIncrements) -> None:
    for field_name, values in increments.field_counts.items():
        stats = record.scalar_stats if is_scalar_field(field_name) else record.array_stats
        counts = stats.setdefault(field_name, {})
        for value, count in values.items():
            counts[value] = counts.get(value, 0) + count

    record.rating_sum += increments.rating_sum
    record.rating_count += increments.rating_count
    record.confidence_sum += increments.confidence_sum
    record.confidence_count += increments.confidence_count
    record.total_recognitions += increments.recognitions
    record.last_recognized_at = increments.recognized_at


def apply_description(record: EntityRecord, candidate: DescriptionCandidate) -> bool:
    if not should_adopt_description(record.description, record.description_confidence, candidate):
        return False
    record.description = candidate.text
    record.description_confidence = candidate.confidence
    record.description_updated_at = candidate.updated_at
    return True


def apply_contributor(record: EntityRecord, contributor_id: str, contributor_name: str) -> None:
    record.contributors[contributor_id] = contributor_name


def seed_record(plan: MergePlan) -> EntityRecord:
    """Baseline record for a key seen for the first time."""
    record = EntityRecord(
        key=plan.key,
        product_name=plan.product_name,
        created_at=plan.increments.recognized_at,
    )
    apply_increments(record, plan.increments)
    if plan.description:
        apply_description(record, plan.description)
    if plan.contributor:
        apply_contributor(record, *plan.contributor)
    return record
