"""
Per-plugin API for the Hijri calendar. Mounted at /api/components/hijri/.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter
from pydantic import BaseModel

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .hijri_calendar import get_hijri_month_data


class HijriMonthResponse(BaseModel):
    month_name: str
    month_name_arabic: str
    year: int
    days: List[Dict[str, Any]]
    first_day_of_week: int
    today: Dict[str, Any]


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Hijri Calendar"])

    @router.get("/data", response_model=HijriMonthResponse)
    def get_data(day: Optional[date] = None) -> HijriMonthResponse:
        """Hijri month for the given Gregorian date (default: today in the configured timezone)."""
        if day is None:
            tz = ZoneInfo(dashboard_app.config.data.get("timezone", DEFAULT_TIMEZONE))
            day = datetime.now(tz).date()
        return HijriMonthResponse(**get_hijri_month_data(day).as_dict())

    return router
