"""
Field catalog for cigar recognition samples.

Names the attributes the aggregation engine counts and how many ranked
entries each consensus list keeps.
"""

from typing import Dict, Tuple

from config import settings

# Single-valued attributes: one counter per observed value.
SCALAR_FIELDS: Tuple[str, ...] = ("brand", "origin", "strength", "wrapper", "binder", "filler")

# Multi-valued attributes: every element of the sample's list is counted.
ARRAY_FIELDS: Tuple[str, ...] = (
    "flavor_profile",
    "foot_taste_notes",
    "body_taste_notes",
    "head_taste_notes",
)

# Scalar fields reported as a single most-likely value with a consistency score.
TOP_ONE_FIELDS: Tuple[str, ...] = ("brand", "origin", "strength")

# Consensus list name -> (source field, list size).
RANKED_FIELDS: Dict[str, Tuple[str, int]] = {
    "wrappers": ("wrapper", settings.top_n_default),
    "binders": ("binder", settings.top_n_default),
    "fillers": ("filler", settings.top_n_default),
    "flavor_profile": ("flavor_profile", settings.top_n_flavor_profile),
    "foot_taste_notes": ("foot_taste_notes", settings.top_n_default),
    "body_taste_notes": ("body_taste_notes", settings.top_n_default),
    "head_taste_notes": ("head_taste_notes", settings.top_n_default),
}

RATING_MIN = settings.rating_min
RATING_MAX = settings.rating_max

DEFAULT_CONFIDENCE = 0.0

# Column widths of cigar_records.key, cigar_records.product_name,
# field_counters.value and the record_contributors columns.
MAX_KEY_LENGTH = 255
MAX_PRODUCT_NAME_LENGTH = 512
MAX_VALUE_LENGTH = 255


def is_scalar_field(field: str) -> bool:
    return field in SCALAR_FIELDS


def is_array_field(field: str) -> bool:
    return field in ARRAY_FIELDS
