"""
Per-plugin API for the Qibla direction. Mounted at /api/components/qibla/.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .qibla_service import calculate_qibla_direction, format_bearing, format_distance

COMPONENT_NAME = "Qibla"


class QiblaResponse(BaseModel):
    lat: float
    lon: float
    bearing: float
    cardinal: str
    distance: float
    bearing_text: str
    distance_text: str


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Qibla"])

    @router.get("/data", response_model=QiblaResponse)
    def get_data(
        lat: Optional[float] = Query(None, ge=-90, le=90),
        lon: Optional[float] = Query(None, ge=-180, le=180),
    ) -> QiblaResponse:
        """Qibla for the given coordinates, or for the widget's configured location."""
        if lat is None or lon is None:
            config = dashboard_app.config.get_component_config(COMPONENT_NAME) or {}
            if config.get("lat") is None or config.get("lon") is None:
                raise HTTPException(status_code=400, detail="lat and lon are required")
            lat, lon = float(config["lat"]), float(config["lon"])
        direction = calculate_qibla_direction(lat, lon)
        return QiblaResponse(
            lat=lat,
            lon=lon,
            **direction.as_dict(),
            bearing_text=format_bearing(direction.bearing),
            distance_text=format_distance(direction.distance),
        )

    return router
