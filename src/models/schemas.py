from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecognitionSample(BaseModel):
    """One recognition attempt as submitted by a caller.

    Field types are deliberately loose: a malformed rating or taste note is
    skipped by the merge rules instead of rejecting the whole sample.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    brand: Any = None
    name: Any = None
    origin: Any = None
    strength: Any = None
    wrapper: Any = None
    binder: Any = None
    filler: Any = None
    rating: Any = None
    description: Any = None
    confidence: Any = None
    flavor_profile: Any = Field(default=None, alias="flavorProfile")
    foot_taste_notes: Any = Field(default=None, alias="footTasteNotes")
    body_taste_notes: Any = Field(default=None, alias="bodyTasteNotes")
    head_taste_notes: Any = Field(default=None, alias="headTasteNotes")
    contributor_id: Any = Field(default=None, alias="contributorId")
    contributor_name: Any = Field(default=None, alias="contributorName")


class ValueFrequency(BaseModel):
    value: str
    count: int
    percentage: float


class ContributorInfo(BaseModel):
    id: str
    name: str


class ConsensusView(BaseModel):
    key: str
    product_name: str

    brand: str
    brand_consistency: float
    origin: str
    origin_consistency: float
    strength: str
    strength_consistency: float

    description: str
    description_confidence: Optional[float]
    avg_confidence: Optional[float]

    rating: Optional[float]
    rating_count: int

    wrappers: List[ValueFrequency]
    binders: List[ValueFrequency]
    fillers: List[ValueFrequency]
    flavor_profile: List[ValueFrequency]
    foot_taste_notes: List[ValueFrequency]
    body_taste_notes: List[ValueFrequency]
    head_taste_notes: List[ValueFrequency]

    total_recognitions: int
    last_recognized_at: Optional[datetime]
    contributors: List[ContributorInfo]
    unique_contributors: int


class MalformedFieldResponse(BaseModel):
    field: str
    reason: str


class IngestResponse(BaseModel):
    key: str
    created: bool
    description_adopted: bool
    malformed_fields: List[MalformedFieldResponse]


class ContributorHistoryItem(BaseModel):
    key: str
    consensus: ConsensusView


class SearchResponse(BaseModel):
    query: str
    keys: List[str]
