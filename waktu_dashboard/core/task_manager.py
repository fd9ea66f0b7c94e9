"""
Single place for scheduling: in-memory timers and DB-backed registered tasks.
"""
import logging
from datetime import datetime, timezone
from queue import Queue
from threading import Timer
from typing import Any, Callable, Dict, List, Optional

from waktu_dashboard.core.models import utc_now
from waktu_dashboard.core.task import get_next_run_from_db


class TaskManager:
    def __init__(self):
        self.tasks: Dict[str, Timer] = {}
        self.result_queue = Queue()
        self.logger = logging.getLogger("TaskManager")
        self._registered_tasks: Dict[str, Callable[..., None]] = {}
        self._registered_config: Dict[str, tuple] = {}  # component_name -> (config, config_data)

    def schedule_task(self, name: str, callback: Callable, delay: float, one_time: bool = True) -> None:
        """Schedule a callback to run after delay seconds, replacing a timer with the same name."""
        try:
            self.logger.info(f"Scheduling task {name} with delay {delay} seconds")
            self.cancel_task(name)

            scheduled_time = datetime.now().timestamp() + delay
            timer = Timer(delay, self._run_task, args=(name, callback, delay, one_time))
            timer.daemon = True
            timer.scheduled_time = scheduled_time

            self.tasks[name] = timer
            timer.start()
            self.logger.debug(f"Timer started for {name}, scheduled for {datetime.fromtimestamp(scheduled_time)}")
        except Exception as e:
            self.logger.error(f"Error scheduling task {name}: {e}")

    def cancel_task(self, name: str) -> None:
        timer = self.tasks.pop(name, None)
        if timer is not None:
            self.logger.debug(f"Cancelling existing task {name}")
            timer.cancel()

    def _run_task(self, name: str, callback: Callable, delay: float, one_time: bool) -> None:
        try:
            callback()
        except Exception as e:
            self.logger.error(f"Error running task {name}: {e}")
        if not one_time:
            self.schedule_task(name, callback, delay, one_time)

    def register_task(self, component_name: str, runnable: Callable[..., None]) -> None:
        """Register a runnable for a widget. runnable(config, result_queue, **kwargs) does the work."""
        self._registered_tasks[component_name] = runnable
        self.logger.debug(f"Registered task for component: {component_name}")

    def schedule_registered_task(
        self,
        component_name: str,
        config: Dict[str, Any],
        config_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Schedule a registered task at next_run from the DB (immediately when past due or unknown).
        The runnable moves next_run forward; we then reschedule for the new value.
        """
        if component_name not in self._registered_tasks:
            self.logger.warning(f"No task registered for component: {component_name}")
            return
        self._registered_config[component_name] = (config, config_data)
        next_run = get_next_run_from_db(component_name)
        if next_run is None:
            delay = 0
        else:
            delay = max(0, int((next_run - utc_now()).total_seconds()))
        self.schedule_task(
            component_name,
            lambda: self._run_registered_and_reschedule(component_name),
            delay,
            one_time=True,
        )

    def _run_registered_and_reschedule(self, component_name: str) -> None:
        self._invoke(component_name)
        config, config_data = self._registered_config.get(component_name, (None, None))
        if config is not None:
            self.schedule_registered_task(component_name, config, config_data)

    def _invoke(self, component_name: str, **kwargs: Any) -> None:
        runnable = self._registered_tasks.get(component_name)
        config, config_data = self._registered_config.get(component_name, (None, None))
        if runnable is None or config is None:
            self.logger.warning(f"No task registered for component: {component_name}")
            return
        try:
            if config_data is not None:
                runnable(config, self.result_queue, config_data=config_data, **kwargs)
            else:
                runnable(config, self.result_queue, **kwargs)
        except Exception as e:
            self.logger.exception(f"Registered task {component_name} failed: {e}")

    def run_task_now(self, component_name: str, **kwargs: Any) -> None:
        """Run a registered task once on a background timer (manual refresh, zone change, new day).
        kwargs are passed through to the runnable, e.g. force_fetch=True."""
        self.schedule_task(
            f"{component_name}_run_now",
            lambda: self._invoke(component_name, **kwargs),
            0,
            one_time=True,
        )

    def update_task_config(self, component_name: str, config: Dict[str, Any]) -> None:
        """Replace the widget config used by the next run of its registered task."""
        _, config_data = self._registered_config.get(component_name, (None, None))
        self._registered_config[component_name] = (config, config_data)

    def get_active_timers(self) -> List[Dict[str, Any]]:
        """Return active timer names and their next run time (for the API)."""
        result = []
        for name, timer in list(self.tasks.items()):
            if getattr(timer, "scheduled_time", None) is not None and timer.is_alive():
                next_run = datetime.fromtimestamp(timer.scheduled_time, tz=timezone.utc)
                result.append({"name": name, "next_run_at": next_run})
        return result

    def stop(self) -> None:
        """Stop all scheduled tasks."""
        for task in list(self.tasks.values()):
            task.cancel()
        self.tasks.clear()
