"""
Per-plugin API for zones. Mounted at /api/components/zones/.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .zone_service import ZoneChecker, ZoneLookupError, load_zones

COMPONENT_NAME = "Zones"


class ZoneResponse(BaseModel):
    code: str
    name: str
    state: str


class ZoneListResponse(BaseModel):
    zones: List[ZoneResponse]
    total: int


class ZoneLocateResponse(BaseModel):
    zone: str
    name: Optional[str] = None
    state: Optional[str] = None


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Zones"])

    def _checker() -> ZoneChecker:
        config = dict(dashboard_app.config.get_component_config(COMPONENT_NAME) or {})
        cache_dir = (dashboard_app.config.data.get("cache") or {}).get("directory")
        if cache_dir:
            config.setdefault("cache_dir", cache_dir)
        return ZoneChecker(config)

    @router.get("/data", response_model=ZoneListResponse)
    def get_data() -> ZoneListResponse:
        """Zones shown in the selector: the last known working set, or all zones."""
        component = dashboard_app.get_component(COMPONENT_NAME)
        zones = component.zones if component is not None else load_zones()
        return ZoneListResponse(
            zones=[ZoneResponse(**zone.as_dict()) for zone in zones],
            total=len(load_zones()),
        )

    @router.post("/refresh")
    def refresh():
        """Re-probe every zone in the background."""
        dashboard_app.task_manager.run_task_now(COMPONENT_NAME, force_fetch=True)
        return {"status": "scheduled"}

    @router.get("/locate", response_model=ZoneLocateResponse)
    def locate(lat: float = Query(..., ge=-90, le=90), lon: float = Query(..., ge=-180, le=180)) -> ZoneLocateResponse:
        try:
            code = _checker().get_zone_by_coordinates(lat, lon)
        except ZoneLookupError as e:
            raise HTTPException(status_code=502, detail=str(e))
        zone = next((z for z in load_zones() if z.code == code), None)
        return ZoneLocateResponse(zone=code, name=zone.name if zone else None, state=zone.state if zone else None)

    return router
