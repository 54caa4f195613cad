"""
Ingestion service for single power-quality samples.

Runs the validator and the power-quality evaluator inline, persists the
sample through the sample store according to the configured policy, and
writes each stored sample through to the latest-sample cache.

Storage policy: samples with only warnings are always stored. Samples with
validation errors are stored flagged ``is_valid=false`` when
``store_invalid`` is set, and rejected (not stored) otherwise.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import logging
from dataclasses import dataclass

from pqmonitor.cache.redis_client import cache_latest
from pqmonitor.core.models import PowerQualityIndicators, Sample, ValidationResult
from pqmonitor.core.quality import evaluate
from pqmonitor.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from pqmonitor.core.validator import validate
from pqmonitor.db.stores import SampleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    """Outcome of submitting one sample.

    Attributes:
        sample: The submitted sample.
        validation: Validator findings.
        indicators: PN-EN 50160 indicators of the sample.
        stored: Whether the sample was written to the sample store.
    """

    sample: Sample
    validation: ValidationResult
    indicators: PowerQualityIndicators
    stored: bool


async def submit_sample(
    store: SampleStore,
    sample: Sample,
    *,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    store_invalid: bool = True,
    redis_url: str | None = None,
    cache_ttl_s: int = 5,
) -> IngestResult:
    """Validate, evaluate and persist one sample.

    Args:
        store: Sample store to write to.
        sample: A parsed sample.
        thresholds: Limits for validation and evaluation.
        store_invalid: Persist samples that have validation errors.
        redis_url: When given, a stored sample is also written to the
            latest-sample cache.
        cache_ttl_s: TTL of that cache entry.

    Returns:
        IngestResult: Validation result, indicators and the stored flag.
    """
    validation = validate(sample, thresholds)
    indicators = evaluate(sample, thresholds)

    if validation.warnings:
        logger.info(
            "Sample at %s has %d warning(s): %s",
            sample.timestamp.isoformat(),
            len(validation.warnings),
            "; ".join(validation.warnings),
        )
    if not validation.valid:
        logger.warning(
            "Sample at %s failed validation: %s",
            sample.timestamp.isoformat(),
            "; ".join(validation.errors),
        )
        if not store_invalid:
            return IngestResult(
                sample=sample,
                validation=validation,
                indicators=indicators,
                stored=False,
            )

    await store.save(sample, is_valid=validation.valid, indicators=indicators)
    logger.info(
        "Stored sample at %s (U=%.1f V, I=%.2f A, f=%.2f Hz, valid=%s)",
        sample.timestamp.isoformat(),
        sample.voltage_rms,
        sample.current_rms,
        sample.frequency,
        validation.valid,
    )

    if redis_url:
        await cache_latest(redis_url, sample, cache_ttl_s)

    return IngestResult(
        sample=sample,
        validation=validation,
        indicators=indicators,
        stored=True,
    )
