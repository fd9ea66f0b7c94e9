"""
Per-plugin API for Prayer Times. Mounted at /api/components/prayer/.
Uses PrayerTimesRecord ORM with Pydantic from_attributes.
"""
import time
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict

from .prayer_set import PRAYER_KEYS, PrayerSet
from .resolver import get_next_prayer, get_time_remaining
from .service import get_latest_prayer_times_record

COMPONENT_NAME = "Prayer Times"


class PrayerTimesRecordResponse(BaseModel):
    """Pydantic view of PrayerTimesRecord for API; serializes from ORM."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    component_name: Optional[str] = None
    zone: Optional[str] = None
    fetched_at: Optional[datetime] = None
    prayer_date: Optional[date] = None
    data: Optional[Dict[str, Any]] = None


class NextPrayerResponse(BaseModel):
    name: str
    key: str
    timestamp: int
    remaining_seconds: int


class AzanStatusResponse(BaseModel):
    state: str
    zone: Optional[str] = None
    triggered_key: Optional[str] = None
    active_key: Optional[str] = None
    next_prayer: Optional[Dict[str, Any]] = None
    enabled: bool = True


def get_router(dashboard_app) -> Optional[APIRouter]:
    """Return router for this plugin; mounted with prefix /api/components/prayer."""
    router = APIRouter(tags=["Prayer Times"])

    def _component():
        component = dashboard_app.get_component(COMPONENT_NAME)
        if component is None:
            raise HTTPException(status_code=404, detail="Prayer Times widget is not enabled")
        return component

    @router.get("/data", response_model=PrayerTimesRecordResponse)
    def get_data() -> PrayerTimesRecordResponse:
        """Return latest prayer times record from DB (ORM serialized via Pydantic)."""
        record = get_latest_prayer_times_record(COMPONENT_NAME)
        if record is None:
            raise HTTPException(status_code=404, detail="No prayer times data available")
        return PrayerTimesRecordResponse.model_validate(record)

    @router.get("/next", response_model=NextPrayerResponse)
    def get_next() -> NextPrayerResponse:
        """Next prayer as published by the running scheduler, else computed from the stored table."""
        now = int(time.time())
        component = dashboard_app.get_component(COMPONENT_NAME)
        next_prayer = component.scheduler.next_prayer if component is not None else None
        if next_prayer is None:
            record = get_latest_prayer_times_record(COMPONENT_NAME)
            if record is None:
                raise HTTPException(status_code=404, detail="No prayer times data available")
            next_prayer = get_next_prayer(PrayerSet.from_dict(record.data), now)
        hours, minutes, seconds = get_time_remaining(next_prayer.timestamp, now)
        return NextPrayerResponse(
            **next_prayer.as_dict(),
            remaining_seconds=hours * 3600 + minutes * 60 + seconds,
        )

    @router.get("/status", response_model=AzanStatusResponse)
    def get_status() -> AzanStatusResponse:
        return AzanStatusResponse(**_component().scheduler.status())

    @router.post("/test-azan/{prayer_key}", response_model=AzanStatusResponse)
    def test_azan(prayer_key: str) -> AzanStatusResponse:
        """Preview the azan and splashscreen for one prayer."""
        if prayer_key not in PRAYER_KEYS:
            raise HTTPException(status_code=404, detail=f"Unknown prayer: {prayer_key}")
        component = _component()
        component.test_azan(prayer_key)
        return AzanStatusResponse(**component.scheduler.status())

    @router.post("/stop", response_model=AzanStatusResponse)
    def stop_azan() -> AzanStatusResponse:
        component = _component()
        component.stop_azan()
        return AzanStatusResponse(**component.scheduler.status())

    return router
