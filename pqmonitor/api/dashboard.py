"""
Dashboard endpoints built from the latest sample.

All three endpoints return 404 until at least one sample is stored.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from fastapi import APIRouter, HTTPException

from pqmonitor.api.deps import RedisUrlDep, SampleStoreDep, SettingsDep
from pqmonitor.core.models import PowerQualityIndicators, Waveform
from pqmonitor.services.measurements import (
    Dashboard,
    get_dashboard,
    get_latest_indicators,
    get_latest_waveform,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

_NOT_FOUND = "No measurements found."


@router.get("", response_model=Dashboard)
async def dashboard(
    store: SampleStoreDep, settings: SettingsDep, redis_url: RedisUrlDep
) -> Dashboard:
    """Latest sample, its reconstructed waveforms and the last 100 samples."""
    result = await get_dashboard(
        store,
        settings.thresholds(),
        redis_url=redis_url,
        cache_ttl_s=settings.cache_ttl_s,
    )
    if result is None:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return result


@router.get("/power-quality-indicators", response_model=PowerQualityIndicators)
async def power_quality_indicators(
    store: SampleStoreDep, settings: SettingsDep, redis_url: RedisUrlDep
) -> PowerQualityIndicators:
    """PN-EN 50160 indicators of the latest sample."""
    result = await get_latest_indicators(
        store,
        settings.thresholds(),
        redis_url=redis_url,
        cache_ttl_s=settings.cache_ttl_s,
    )
    if result is None:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return result


@router.get("/waveforms", response_model=Waveform)
async def waveforms(
    store: SampleStoreDep, settings: SettingsDep, redis_url: RedisUrlDep
) -> Waveform:
    """Reconstructed voltage and current waveforms of the latest sample."""
    result = await get_latest_waveform(
        store,
        settings.thresholds(),
        redis_url=redis_url,
        cache_ttl_s=settings.cache_ttl_s,
    )
    if result is None:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return result
