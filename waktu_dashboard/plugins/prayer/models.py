"""
SQLAlchemy models for prayer times: one row per zone per day per component.
"""
from sqlalchemy import Column, String, Date, DateTime, Integer, JSON

from waktu_dashboard.core.db import Base


class PrayerTimesRecord(Base):
    """One day's prayer times for a zone. data is the PrayerSet as JSON (epoch seconds)."""
    __tablename__ = "prayer_times_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    component_name = Column(String(255), nullable=False, index=True)
    zone = Column(String(16), nullable=False, index=True)
    fetched_at = Column(DateTime(timezone=False), nullable=False, index=True)
    prayer_date = Column(Date, nullable=False, index=True)
    data = Column(JSON, nullable=False)  # {zone, day, hijri, fajr, ..., isha}
