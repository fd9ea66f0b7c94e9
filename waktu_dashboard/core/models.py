"""
Core DB models: widget registry and background task schedule (next_run persistence).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON, select

from waktu_dashboard.core.db import Base, session_scope


def utc_now() -> datetime:
    """UTC now as naive datetime for DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Component(Base):
    """Registry of configured widgets and whether each is enabled."""
    __tablename__ = "components"

    name = Column(String(255), primary_key=True)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=False), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=utc_now, onupdate=utc_now, nullable=False)


class TaskSchedule(Base):
    """Per-widget fetch schedule so refresh times survive restarts."""
    __tablename__ = "task_schedules"

    component_name = Column(String(255), primary_key=True)
    schedule_type = Column(String(64), nullable=False)  # daily | interval_seconds
    schedule_config = Column(JSON, nullable=True)  # {"time": "00:05"} or {"interval_seconds": 3600}
    next_run_at = Column(DateTime(timezone=False), nullable=True)  # null = run immediately
    last_run_at = Column(DateTime(timezone=False), nullable=True)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=False), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=utc_now, onupdate=utc_now, nullable=False)


def get_all_task_schedules() -> List[Dict[str, Any]]:
    """Return all TaskSchedule rows as dicts (for the API). Datetimes are naive UTC."""
    with session_scope() as session:
        rows = list(session.execute(select(TaskSchedule)).scalars().all())
    return [
        {
            "component_name": r.component_name,
            "schedule_type": r.schedule_type,
            "schedule_config": r.schedule_config,
            "next_run_at": r.next_run_at,
            "last_run_at": r.last_run_at,
            "last_error": r.last_error,
        }
        for r in rows
    ]


def sync_components_from_config(config_data: Dict[str, Any]) -> None:
    """Upsert the widget registry from config so the DB mirrors the enabled state."""
    components = config_data.get("components") or {}
    with session_scope() as session:
        for name, comp_config in components.items():
            enabled = comp_config.get("enable", True) if isinstance(comp_config, dict) else True
            now = utc_now()
            row = session.execute(select(Component).where(Component.name == name)).scalars().first()
            if row:
                row.enabled = enabled
                row.updated_at = now
            else:
                session.add(Component(name=name, enabled=enabled, created_at=now, updated_at=now))
