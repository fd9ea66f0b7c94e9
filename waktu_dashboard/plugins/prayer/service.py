"""
Service layer: save and load prayer times from DB.
"""
from datetime import date
from typing import Optional

from sqlalchemy import select, delete

from waktu_dashboard.core.db import session_scope
from waktu_dashboard.core.models import utc_now
from waktu_dashboard.plugins.prayer.models import PrayerTimesRecord
from waktu_dashboard.plugins.prayer.prayer_set import PrayerSet


def save_prayer_times(component_name: str, prayer_date: date, prayer_set: PrayerSet) -> None:
    """Replace this component's prayer times for the zone and date."""
    with session_scope() as session:
        session.execute(
            delete(PrayerTimesRecord).where(
                PrayerTimesRecord.component_name == component_name,
                PrayerTimesRecord.zone == prayer_set.zone,
                PrayerTimesRecord.prayer_date == prayer_date,
            )
        )
        session.add(
            PrayerTimesRecord(
                component_name=component_name,
                zone=prayer_set.zone,
                fetched_at=utc_now(),
                prayer_date=prayer_date,
                data=prayer_set.as_dict(),
            )
        )


def get_latest_prayer_times_record(component_name: str) -> Optional[PrayerTimesRecord]:
    """Return the most recently fetched PrayerTimesRecord for this component (for API serialization)."""
    with session_scope() as session:
        return (
            session.execute(
                select(PrayerTimesRecord)
                .where(PrayerTimesRecord.component_name == component_name)
                .order_by(PrayerTimesRecord.fetched_at.desc())
                .limit(1)
            )
            .scalars().first()
        )


def get_prayer_set_for(component_name: str, zone: str, prayer_date: date) -> Optional[PrayerSet]:
    """Stored PrayerSet for zone on prayer_date; the offline fallback when the provider is down."""
    with session_scope() as session:
        row = (
            session.execute(
                select(PrayerTimesRecord)
                .where(
                    PrayerTimesRecord.component_name == component_name,
                    PrayerTimesRecord.zone == zone,
                    PrayerTimesRecord.prayer_date == prayer_date,
                )
                .order_by(PrayerTimesRecord.fetched_at.desc())
                .limit(1)
            )
            .scalars().first()
        )
    return PrayerSet.from_dict(row.data) if row else None
