"""
Last good forecast per MET Malaysia location, kept for offline fallback.

A zone switch changes the location; a forecast saved for another location is
never offered as the fallback for the current one.
"""
from typing import Any, Dict, Optional

from sqlalchemy import select

from waktu_dashboard.core.db import session_scope
from waktu_dashboard.core.models import utc_now
from waktu_dashboard.plugins.weather.models import WeatherRecord


def _forecast_query(component_name: str, location: Optional[str]):
    query = select(WeatherRecord).where(WeatherRecord.component_name == component_name)
    if location is not None:
        query = query.where(WeatherRecord.location == location)
    return query.order_by(WeatherRecord.fetched_at.desc()).limit(1)


def save_forecast(component_name: str, data: Dict[str, Any]) -> None:
    """Store a fetched forecast, overwriting the previous one for the same location."""
    location = data.get("location")
    with session_scope() as session:
        record = session.execute(_forecast_query(component_name, location)).scalars().first()
        if record is None:
            record = WeatherRecord(component_name=component_name, location=location)
            session.add(record)
        record.data = data
        record.fetched_at = utc_now()


def get_forecast_record(component_name: str, location: Optional[str] = None) -> Optional[WeatherRecord]:
    """Newest saved forecast row; for one location when given, else for any."""
    with session_scope() as session:
        return session.execute(_forecast_query(component_name, location)).scalars().first()


def get_saved_forecast(component_name: str, location: Optional[str] = None) -> Optional[Dict[str, Any]]:
    record = get_forecast_record(component_name, location)
    return record.data if record is not None else None
