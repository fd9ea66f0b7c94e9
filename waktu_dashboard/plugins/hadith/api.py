"""
Per-plugin API for the hourly hadith. Mounted at /api/components/hadith/.
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter
from pydantic import BaseModel

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .hadith_service import HadithService

COMPONENT_NAME = "Hadith"


class HadithResponse(BaseModel):
    arabic: str
    malay: str
    source: str
    reference: str


class HourlyHadithResponse(BaseModel):
    hadith: HadithResponse
    hour: int
    index: int
    total: int


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Hadith"])

    @router.get("/data", response_model=HourlyHadithResponse)
    def get_data() -> HourlyHadithResponse:
        """The hadith shown this hour."""
        component = dashboard_app.get_component(COMPONENT_NAME)
        if component is not None:
            return HourlyHadithResponse(**component.get_api_data())
        cache_dir = (dashboard_app.config.data.get("cache") or {}).get("directory")
        tz = ZoneInfo(dashboard_app.config.data.get("timezone", DEFAULT_TIMEZONE))
        result = HadithService(cache_dir).get_hourly_hadith(datetime.now(tz))
        return HourlyHadithResponse(**{**result, "hadith": result["hadith"].as_dict()})

    return router
