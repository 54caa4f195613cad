"""
Measurement endpoints: sample ingest, latest sample and history.

POST /api/measurements accepts one JSON sample (Bearer auth). Malformed
payloads are rejected with 422; samples that fail validation while
STORE_INVALID_SAMPLES is off are rejected with 400 and the validator
errors. Accepted samples return 201 with the validation result and the
PN-EN 50160 indicators.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pqmonitor.api.deps import ClientIdDep, RedisUrlDep, SampleStoreDep, SettingsDep
from pqmonitor.core.models import (
    MalformedSampleError,
    PowerQualityIndicators,
    Sample,
    ValidationResult,
    parse_sample,
)
from pqmonitor.services.ingestion import submit_sample
from pqmonitor.services.measurements import MAX_HISTORY_LIMIT, get_history, get_latest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/measurements", tags=["measurements"])


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class IngestResponse(BaseModel):
    """Response of the ingest endpoint."""

    measurement: Sample
    validation: ValidationResult
    indicators: PowerQualityIndicators
    stored: bool


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED, response_model=IngestResponse)
async def create_measurement(
    request: Request,
    client_id: ClientIdDep,
    store: SampleStoreDep,
    settings: SettingsDep,
    redis_url: RedisUrlDep,
) -> IngestResponse | JSONResponse:
    """Validate and store one sample.

    Raises:
        HTTPException: 400 if the sample has validation errors and invalid
            samples are not stored.
    """
    body = await request.body()

    try:
        sample = parse_sample(body)
    except MalformedSampleError as exc:
        logger.info("Rejected malformed sample from %s: %s", client_id, exc)
        return JSONResponse(
            status_code=422,
            content={"detail": jsonable_encoder(exc.errors)},
        )

    result = await submit_sample(
        store,
        sample,
        thresholds=settings.thresholds(),
        store_invalid=settings.store_invalid_samples,
        redis_url=redis_url,
        cache_ttl_s=settings.cache_ttl_s,
    )

    if not result.stored:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Sample failed validation and was not stored.",
                "errors": result.validation.errors,
                "warnings": result.validation.warnings,
            },
        )

    return IngestResponse(
        measurement=result.sample,
        validation=result.validation,
        indicators=result.indicators,
        stored=result.stored,
    )


@router.get("/latest", response_model=Sample)
async def latest_measurement(
    store: SampleStoreDep,
    settings: SettingsDep,
    redis_url: RedisUrlDep,
) -> Sample:
    """Return the most recent sample.

    Raises:
        HTTPException: 404 if no sample has been stored yet.
    """
    sample = await get_latest(store, redis_url=redis_url, cache_ttl_s=settings.cache_ttl_s)
    if sample is None:
        raise HTTPException(status_code=404, detail="No measurements found.")
    return sample


@router.get("/history", response_model=list[Sample])
async def measurement_history(
    store: SampleStoreDep,
    from_ts: Annotated[
        int | None, Query(alias="from", description="Start, epoch seconds.")
    ] = None,
    to_ts: Annotated[int | None, Query(alias="to", description="End, epoch seconds.")] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_HISTORY_LIMIT)] = 100,
) -> list[Sample]:
    """Return samples between ``from`` and ``to`` (default: last hour), newest first.

    Raises:
        HTTPException: 400 if a bound is not a representable timestamp or
            ``from`` is after ``to``.
    """
    try:
        start = _from_epoch(from_ts)
        end = _from_epoch(to_ts)
    except (ValueError, OverflowError, OSError):
        raise HTTPException(
            status_code=400, detail="'from' and 'to' must be valid epoch seconds"
        ) from None

    try:
        return await get_history(store, start=start, end=end, limit=limit)
    except (ValueError, OverflowError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None


def _from_epoch(value: int | None) -> datetime | None:
    return datetime.fromtimestamp(value, tz=UTC) if value is not None else None
