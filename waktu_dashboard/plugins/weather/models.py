"""
SQLAlchemy models for weather: one row per component, replaced on each fetch.
"""
from sqlalchemy import Column, String, DateTime, Integer, JSON

from waktu_dashboard.core.db import Base


class WeatherRecord(Base):
    """One fetch of forecast data. data: {"location", "forecasts", "today"}."""
    __tablename__ = "weather_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    component_name = Column(String(255), nullable=False, index=True)
    location = Column(String(255), nullable=True)
    fetched_at = Column(DateTime(timezone=False), nullable=False, index=True)
    data = Column(JSON, nullable=False)
