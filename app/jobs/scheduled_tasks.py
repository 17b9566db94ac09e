import threading

import schedule

from infrastructure.logging import get_module_logger
from modules.github.directory import RecipientDirectory

logger = get_module_logger()


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("scheduled_job_failed", job=job.__name__, error=str(e))

    return wrapper


def init(directory: RecipientDirectory, reload_minutes: int) -> None:
    """Register the periodic jobs. A non-positive interval disables the reload."""
    schedule.clear()
    if reload_minutes <= 0:
        logger.info("directory_reload_disabled")
        return

    schedule.every(reload_minutes).minutes.do(safe_run(directory.reload_from_files))
    logger.info("scheduled_tasks_initialized", directory_reload_minutes=reload_minutes)


def run_continuously(interval=1):
    """Run pending jobs every ``interval`` seconds on a daemon thread.

    Returns:
        threading.Event: Set it to stop the thread. Missed runs are not
        caught up; a job runs at most once per check.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        def run(self):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                cease_continuous_run.wait(interval)

    continuous_thread = ScheduleThread(name="scheduled-tasks", daemon=True)
    continuous_thread.start()
    return cease_continuous_run
