"""
Local HTTP API for the prayer dashboard, served by uvicorn on a daemon thread.

GET /api/components and GET /api/tasks describe the running dashboard; every
plugin package with an ``api`` module contributes ``get_router(dashboard_app)``,
mounted under /api/components/<package>/ (e.g. /api/components/prayer/next).
Interactive docs at /docs when the server is enabled.
"""
import importlib
import logging
import pkgutil
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from waktu_dashboard.core.models import get_all_task_schedules

logger = logging.getLogger(__name__)

PLUGINS_PACKAGE = "waktu_dashboard.plugins"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765

# Never echoed back through /api/components
SECRET_KEYS = frozenset({"api_key", "password", "token", "secret", "credentials", "client_secret"})


class ComponentInfo(BaseModel):
    name: str
    enabled: bool
    config: Dict[str, Any]


class TaskScheduleInfo(BaseModel):
    component_name: str
    schedule_type: str
    schedule_config: Optional[Dict[str, Any]] = None
    next_run_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_error: Optional[str] = None


class ActiveTimerInfo(BaseModel):
    name: str
    next_run_at: Optional[datetime] = None


class TasksResponse(BaseModel):
    db_schedules: List[TaskScheduleInfo]
    active_timers: List[ActiveTimerInfo]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """DB datetimes are naive UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _component_info(name: str, config: Any) -> ComponentInfo:
    if not isinstance(config, dict):
        return ComponentInfo(name=name, enabled=True, config={})
    return ComponentInfo(
        name=name,
        enabled=bool(config.get("enable", True)),
        config={k: v for k, v in config.items() if k.lower() not in SECRET_KEYS},
    )


def mount_plugin_routers(app: FastAPI, dashboard_app: Any) -> List[str]:
    """Include each plugin's router; returns the mounted package names."""
    mounted = []
    package = importlib.import_module(PLUGINS_PACKAGE)
    for _, name, is_pkg in pkgutil.iter_modules(package.__path__):
        if not is_pkg:
            continue
        module_name = f"{PLUGINS_PACKAGE}.{name}.api"
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if e.name != module_name:
                logger.warning(f"Plugin {name} API not mounted: {e}")
            continue
        get_router = getattr(module, "get_router", None)
        if get_router is None:
            continue
        try:
            router = get_router(dashboard_app)
        except Exception as e:
            logger.warning(f"Plugin {name} API failed to build its router: {e}", exc_info=True)
            continue
        if router is not None:
            app.include_router(router, prefix=f"/api/components/{name}")
            mounted.append(name)
    logger.debug(f"Mounted plugin APIs: {', '.join(mounted)}")
    return mounted


def create_app(dashboard_app: Any) -> FastAPI:
    """FastAPI app bound to a running DashboardApp (or anything shaped like one)."""
    app = FastAPI(
        title="Waktu Solat Dashboard API",
        description="Prayer times, azan control and the dashboard widgets' data",
    )

    @app.get("/api/components", response_model=List[ComponentInfo])
    def list_components() -> List[ComponentInfo]:
        """Registered widgets with their enabled flag and config (secrets removed)."""
        configured = dashboard_app.config.data.get("components") or {}
        return [
            _component_info(name, configured.get(name) or {})
            for name in dashboard_app.plugin_manager.components
        ]

    @app.get("/api/tasks", response_model=TasksResponse)
    def list_tasks() -> TasksResponse:
        """Persisted fetch schedules and the timers currently armed in memory."""
        schedules = [
            TaskScheduleInfo(**dict(row, next_run_at=_as_utc(row["next_run_at"]), last_run_at=_as_utc(row["last_run_at"])))
            for row in get_all_task_schedules()
        ]
        timers = [
            ActiveTimerInfo(name=timer["name"], next_run_at=timer["next_run_at"])
            for timer in dashboard_app.task_manager.get_active_timers()
        ]
        return TasksResponse(db_schedules=schedules, active_timers=timers)

    mount_plugin_routers(app, dashboard_app)
    return app


def run_api_server(dashboard_app: Any) -> Optional[threading.Thread]:
    """
    Serve the API in a daemon thread when api.enabled is set in the config.
    api.host / api.port / api.log_level default to 127.0.0.1, 8765 and warning.
    """
    api_config = dashboard_app.config.data.get("api") or {}
    if not api_config.get("enabled", False):
        logger.info("API server disabled (set api.enabled: true to serve /api)")
        return None

    host = api_config.get("host", DEFAULT_HOST)
    port = int(api_config.get("port", DEFAULT_PORT))
    fastapi_app = create_app(dashboard_app)

    def serve():
        import uvicorn

        logger.info(f"API server listening at http://{host}:{port} (docs at /docs)")
        try:
            uvicorn.run(fastapi_app, host=host, port=port, log_level=api_config.get("log_level", "warning"))
        except Exception as e:
            logger.exception(f"API server stopped: {e}")

    thread = threading.Thread(target=serve, daemon=True, name="api-server")
    thread.start()
    return thread
