"""
Per-plugin API for the verse of the day. Mounted at /api/components/verse/.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from .quran_service import FALLBACK_VERSE, format_verse_reference

COMPONENT_NAME = "Daily Verse"


class VerseResponse(BaseModel):
    verse: Dict[str, Any]
    reference: str
    fallback: bool


def get_router(dashboard_app) -> Optional[APIRouter]:
    router = APIRouter(tags=["Daily Verse"])

    @router.get("/data", response_model=VerseResponse)
    def get_data() -> VerseResponse:
        """The verse the widget is showing; the static verse when the widget is off."""
        component = dashboard_app.get_component(COMPONENT_NAME)
        if component is not None:
            return VerseResponse(**component.get_api_data())
        return VerseResponse(verse=FALLBACK_VERSE, reference=format_verse_reference(FALLBACK_VERSE), fallback=True)

    return router
