import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.notifications import QueuedDeliveryWorker
from infrastructure.services import get_delivery_worker, get_settings
from jobs import scheduled_tasks
from modules.github.directory import RecipientDirectory
from modules.github.providers import get_directory, get_github_handler

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

# Upper bound on how long shutdown waits for queued deliveries
SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 30.0


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _start_delivery_worker(logger: BoundLogger) -> QueuedDeliveryWorker:
    worker = get_delivery_worker()
    worker.start()
    logger.info("delivery_worker_ready", pending=worker.pending)
    return worker


def _stop_delivery_worker(worker: QueuedDeliveryWorker, logger: BoundLogger) -> None:
    pending = worker.pending
    worker.stop(drain=True, timeout=SHUTDOWN_DRAIN_TIMEOUT_SECONDS)
    if worker.pending:
        logger.warning(
            "delivery_worker_shutdown_incomplete",
            pending_at_shutdown=pending,
            remaining=worker.pending,
        )



def _start_scheduled_tasks(
    directory: RecipientDirectory, settings: "Settings", logger: BoundLogger
) -> Optional[threading.Event]:
    reload_minutes = settings.github.GITHUB_DIRECTORY_RELOAD_MINUTES
    scheduled_tasks.init(directory, reload_minutes)
    if reload_minutes <= 0:
        return None
    stop_event = scheduled_tasks.run_continuously()
    logger.info("scheduled_tasks_started")
    return stop_event


def _stop_scheduled_tasks(stop_event: Optional[threading.Event]) -> None:
    if stop_event is None:
        return
    stop_event.set()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    # Fail fast on a broken users/repos configuration
    try:
        app.state.directory = get_directory()
    except Exception as exc:
        logger.error("directory_load_failed", error=str(exc))
        raise

    app.state.delivery_worker = _start_delivery_worker(logger)
    app.state.github_handler = get_github_handler()
    app.state.scheduled_stop_event = _start_scheduled_tasks(
        app.state.directory, settings, logger
    )

    yield

    logger.info("application_shutdown")

    _stop_scheduled_tasks(app.state.scheduled_stop_event)
    _stop_delivery_worker(app.state.delivery_worker, logger)
