import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from models import get_db
from models.schemas import (
    ConsensusView,
    ContributorHistoryItem,
    IngestResponse,
    MalformedFieldResponse,
    RecognitionSample,
    SearchResponse,
)
from services.aggregation import (
    SqlAlchemyRecordStore,
    StoreError,
    find_by_contributor,
    get_consensus,
    get_consensus_by_name,
    ingest,
    search_keys,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> SqlAlchemyRecordStore:
    return SqlAlchemyRecordStore(db)


@router.post("/recognitions", response_model=IngestResponse, status_code=201)
async def submit_recognition(
    sample: RecognitionSample,
    store: SqlAlchemyRecordStore = Depends(get_store),
) -> IngestResponse:
    try:
        result = ingest(store, sample)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    if not result.accepted:
        raise HTTPException(status_code=422, detail=result.rejection.reason)

    return IngestResponse(
        key=result.key,
        created=result.created,
        description_adopted=result.description_adopted,
        malformed_fields=[
            MalformedFieldResponse(field=error.field, reason=error.reason)
            for error in result.malformed_fields
        ],
    )


@router.get("/lookup", response_model=ConsensusView)
async def lookup_by_product_name(
    product_name: str = Query(..., min_length=1, description="Brand and name as free text"),
    store: SqlAlchemyRecordStore = Depends(get_store),
) -> ConsensusView:
    consensus = get_consensus_by_name(store, product_name)
    if consensus is None:
        raise HTTPException(status_code=404, detail=f"No recognitions for '{product_name}'")
    return consensus


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    store: SqlAlchemyRecordStore = Depends(get_store),
) -> SearchResponse:
    return SearchResponse(query=q, keys=search_keys(store, q, limit=limit))


@router.get(
    "/contributors/{contributor_id}/history",
    response_model=List[ContributorHistoryItem],
)
async def contributor_history(
    contributor_id: str,
    store: SqlAlchemyRecordStore = Depends(get_store),
) -> List[ContributorHistoryItem]:
    return [
        ContributorHistoryItem(key=key, consensus=consensus)
        for key, consensus in find_by_contributor(store, contributor_id)
    ]


@router.get("/{key}", response_model=ConsensusView)
async def read_consensus(
    key: str,
    store: SqlAlchemyRecordStore = Depends(get_store),
) -> ConsensusView:
    consensus = get_consensus(store, key)
    if consensus is None:
        raise HTTPException(status_code=404, detail=f"Record {key} not found")
    return consensus
