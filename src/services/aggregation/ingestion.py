import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from models.schemas import RecognitionSample
from services.aggregation.errors import SampleValidationError
from services.aggregation.fields import MAX_KEY_LENGTH, MAX_PRODUCT_NAME_LENGTH
from services.aggregation.merge_rules import build_merge_plan, clean_text
from services.aggregation.models import IngestResult
from services.aggregation.store import RecordStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    """Recognition time in UTC. Naive values are taken to be UTC already."""
    if moment is None:
        return utcnow()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def validate_sample(sample: RecognitionSample) -> Optional[SampleValidationError]:
    if not clean_text(sample.brand):
        return SampleValidationError("brand is required")
    if not clean_text(sample.name):
        return SampleValidationError("name is required")
    return None


def ingest(
    store: RecordStore,
    sample: Union[RecognitionSample, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> IngestResult:
    """Merge one recognition sample into its cigar record.

    Rejected samples are reported on the result and leave the store untouched.
    Store failures raise StoreError after the unit of work has rolled back.
    """
    if not isinstance(sample, RecognitionSample):
        sample = RecognitionSample.model_validate(dict(sample))

    rejection = validate_sample(sample)
    if rejection:
        logger.warning(f"Rejected recognition sample: {rejection.reason}")
        return IngestResult(rejection=rejection)

    plan = build_merge_plan(sample, as_utc(now))
    if not plan.key:
        rejection = SampleValidationError(f"'{plan.product_name}' normalizes to an empty key")
    elif len(plan.key) > MAX_KEY_LENGTH or len(plan.product_name) > MAX_PRODUCT_NAME_LENGTH:
        rejection = SampleValidationError(f"product name longer than {MAX_PRODUCT_NAME_LENGTH} characters")
    if rejection:
        logger.warning(f"Rejected recognition sample: {rejection.reason}")
        return IngestResult(rejection=rejection)

    for error in plan.malformed_fields:
        logger.warning(f"Skipping malformed field for {plan.key}: {error}")

    with store.unit_of_work():
        created = store.ensure_record(plan.key, plan.product_name, plan.increments.recognized_at)
        if created:
            logger.info(f"Created record {plan.key} for {plan.product_name}")
        else:
            logger.info(f"Updating statistics of {plan.key}")

        store.upsert_counters(plan.key, plan.increments)

        adopted = False
        if plan.description:
            adopted = store.upsert_single_value(plan.key, plan.description)

        if plan.contributor:
            store.upsert_contributor(plan.key, *plan.contributor)

    return IngestResult(
        key=plan.key,
        created=created,
        description_adopted=adopted,
        malformed_fields=plan.malformed_fields,
    )
