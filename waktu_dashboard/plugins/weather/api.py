"""
Weather routes, mounted at /api/components/weather/.

GET /data serves the last saved MET Malaysia forecast, for the widget's
current location unless ?location= names another.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .service import get_forecast_record
from .task import resolve_location
from .weather_backend import get_current_forecast

COMPONENT_NAME = "Weather"


class ForecastResponse(BaseModel):
    location: Optional[str] = None
    fetched_at: datetime
    current: Optional[str] = None
    today: Optional[Dict[str, Any]] = None
    forecasts: List[Dict[str, Any]] = []


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Weather"])

    def default_location() -> str:
        config = dashboard_app.config.get_component_config(COMPONENT_NAME) or {}
        return resolve_location(config, dashboard_app.config.data)

    @router.get("/data", response_model=ForecastResponse)
    def get_data(location: Optional[str] = None) -> ForecastResponse:
        location = location or default_location()
        record = get_forecast_record(COMPONENT_NAME, location)
        if record is None:
            raise HTTPException(status_code=404, detail=f"No forecast saved for {location}")

        today = (record.data or {}).get("today")
        hour = datetime.now(ZoneInfo(dashboard_app.config.data.get("timezone", DEFAULT_TIMEZONE))).hour
        return ForecastResponse(
            location=record.location,
            fetched_at=record.fetched_at,
            current=get_current_forecast(today, hour) if today else None,
            today=today,
            forecasts=(record.data or {}).get("forecasts") or [],
        )

    return router
