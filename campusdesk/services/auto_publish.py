"""
Auto-Publish Loop
=================
Background thread that sweeps the repository every few seconds and publishes
scheduled assignments whose time has come. Each sweep holds the repository
lock, so sweeps never overlap with each other or with request handlers.
"""
import logging
import threading

from campusdesk.models import utcnow
from campusdesk.services import publisher

logger = logging.getLogger(__name__)


class AutoPublisher:
    """Runs `publisher.tick` on a fixed interval in a daemon thread."""

    def __init__(self, repo, interval_seconds=10.0):
        self.repo = repo
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread = None

    def run_once(self, now=None):
        """One sweep. Returns the assignments it published."""
        now = now or utcnow()
        with self.repo.lock:
            due = publisher.tick(now, self.repo.list_assignments())
            for assignment in due:
                self.repo.update_assignment(assignment)
        for assignment in due:
            year = f"Year {assignment.target_year}" if assignment.target_year else assignment.class_id
            logger.info("Assignment \"%s\" has been published to %s students", assignment.title, year)
        return due

    def _run(self):
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                # Keep the loop alive; the next sweep retries
                logger.exception("Auto-publish sweep failed")

    def start(self):
        if self.is_running():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="auto-publish", daemon=True)
        self._thread.start()
        logger.info("Auto-publish started (every %.0fs)", self.interval_seconds)

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def is_running(self):
        return self._thread is not None and self._thread.is_alive()
