"""
Base task type and abstract BaseTask with next_run persistence in DB.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from queue import Queue
from typing import Any, Dict, Optional

from sqlalchemy import select

from waktu_dashboard.core.db import session_scope
from waktu_dashboard.core.models import TaskSchedule, utc_now

logger = logging.getLogger(__name__)


class TaskType:
    """Schedule kind for tasks."""
    DAILY = "daily"
    INTERVAL_SECONDS = "interval_seconds"


def compute_next_run(
    schedule_type: str,
    schedule_config: Optional[Dict[str, Any]],
    last_run: Optional[datetime],
) -> datetime:
    """Compute next run (naive UTC) from schedule_type, schedule_config, and last_run.

    DAILY times ("HH:MM") are UTC wall-clock times.
    """
    if last_run is None:
        last_run = utc_now()

    if schedule_type == TaskType.DAILY and schedule_config:
        hour, minute = parse_hhmm(schedule_config.get("time", "00:00"))
        next_run = last_run.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if next_run <= last_run:
            next_run += timedelta(days=1)
        return next_run

    if schedule_type == TaskType.INTERVAL_SECONDS and schedule_config:
        sec = int(schedule_config.get("interval_seconds", 86400))
        return last_run + timedelta(seconds=sec)

    return last_run + timedelta(days=1)


def parse_hhmm(value: Any) -> tuple:
    parts = str(value).strip().split(":")
    hour = int(parts[0]) if parts and parts[0] else 0
    minute = int(parts[1]) if len(parts) > 1 else 0
    return hour, minute


def interval_schedule(config: Dict[str, Any], default_seconds: int, minimum: int = 60) -> tuple:
    """Build an INTERVAL_SECONDS schedule from config["update_interval"] (seconds)."""
    interval = config.get("update_interval")
    try:
        sec = int(interval) if interval is not None else default_seconds
    except (TypeError, ValueError):
        sec = default_seconds
    return TaskType.INTERVAL_SECONDS, {"interval_seconds": max(minimum, sec)}


def get_next_run_from_db(component_name: str) -> Optional[datetime]:
    """Read next_run_at for a widget. None when there is no row (the task then runs immediately)."""
    try:
        with session_scope() as session:
            row = session.execute(
                select(TaskSchedule).where(TaskSchedule.component_name == component_name)
            ).scalars().first()
            if row and row.next_run_at is not None:
                return row.next_run_at
    except Exception as e:
        logger.debug(f"get_next_run_from_db {component_name}: {e}")
    return None


def upsert_task_schedule(
    component_name: str,
    schedule_type: str,
    schedule_config: Optional[Dict[str, Any]],
    next_run_at: Optional[datetime] = None,
) -> None:
    """Create or update the TaskSchedule row; an existing next_run_at is only replaced when given."""
    with session_scope() as session:
        row = session.execute(
            select(TaskSchedule).where(TaskSchedule.component_name == component_name)
        ).scalars().first()
        now = utc_now()
        if row:
            row.schedule_type = schedule_type
            row.schedule_config = schedule_config
            if next_run_at is not None:
                row.next_run_at = next_run_at
            row.updated_at = now
        else:
            session.add(TaskSchedule(
                component_name=component_name,
                schedule_type=schedule_type,
                schedule_config=schedule_config,
                next_run_at=next_run_at,
                created_at=now,
                updated_at=now,
            ))


def update_after_run(component_name: str, error: Optional[str] = None) -> None:
    """Record a run: last_run_at, last_error and the following next_run_at."""
    with session_scope() as session:
        row = session.execute(
            select(TaskSchedule).where(TaskSchedule.component_name == component_name)
        ).scalars().first()
        if not row:
            return
        now = utc_now()
        row.last_run_at = now
        row.last_error = error
        row.next_run_at = compute_next_run(row.schedule_type, row.schedule_config, now)
        row.updated_at = now


class BaseTask(ABC):
    """
    Abstract base for widget background fetches. Subclasses implement run();
    the base persists the schedule so the next fetch survives restarts.
    """

    def __init__(self, component_name: str, schedule_type: str, schedule_config: Optional[Dict[str, Any]] = None):
        self.component_name = component_name
        self.schedule_type = schedule_type
        self.schedule_config = schedule_config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_next_run(self, last_run: Optional[datetime] = None) -> datetime:
        return compute_next_run(self.schedule_type, self.schedule_config, last_run)

    def ensure_scheduled(self, next_run_at: Optional[datetime] = None) -> None:
        """Ensure the TaskSchedule row exists without moving an existing next_run_at."""
        upsert_task_schedule(
            self.component_name,
            self.schedule_type,
            self.schedule_config,
            next_run_at=next_run_at,
        )

    def publish(self, result_queue: Queue, result: Any) -> None:
        """Hand a result to the UI thread."""
        try:
            result_queue.put((self.component_name, result))
        except Exception as e:
            self.logger.error(f"Could not publish result for {self.component_name}: {e}")

    @abstractmethod
    def run(
        self,
        config: Dict[str, Any],
        result_queue: Queue,
        **kwargs: Any,
    ) -> None:
        """
        Execute the task: do the work, call update_after_run(self.component_name),
        then publish the result on result_queue.
        """
        pass
