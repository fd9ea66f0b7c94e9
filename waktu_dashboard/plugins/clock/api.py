"""
Per-plugin API for the clock and greeting. Mounted at /api/components/clock/.
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter
from pydantic import BaseModel

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .greeting import get_islamic_greeting


class ClockResponse(BaseModel):
    time: datetime
    timezone: str
    greeting: str
    quote: str


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Clock"])

    @router.get("/data", response_model=ClockResponse)
    def get_data() -> ClockResponse:
        tz_name = dashboard_app.config.data.get("timezone", DEFAULT_TIMEZONE)
        now = datetime.now(ZoneInfo(tz_name))
        greeting, quote = get_islamic_greeting(now.hour)
        return ClockResponse(time=now, timezone=tz_name, greeting=greeting, quote=quote)

    return router
