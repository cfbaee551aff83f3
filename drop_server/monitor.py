from typing import Callable, Optional
from datetime import datetime, timedelta
from collections import deque

from drop_server.logger_config import setup_logger

logger = setup_logger()


class FailureMonitor:
    def __init__(self, failure_threshold: int, window_seconds: int = 60, alert_handler: Optional[Callable[[str], None]] = None):
        """
        Count internal upload failures and alert when too many land close together.

        Args:
            failure_threshold: Failures inside the window that trigger an alert
            window_seconds: Length of the sliding window in seconds
            alert_handler: Callback receiving the alert message. Defaults to a critical log line
        """
        if failure_threshold <= 0:
            raise ValueError("Failure threshold must be positive")
        if window_seconds <= 0:
            raise ValueError("Window seconds must be positive")

        self._failure_threshold = failure_threshold
        self._window = timedelta(seconds=window_seconds)
        self._alert_handler = alert_handler or logger.critical
        self._recent = deque()
        self.uploads_stored = 0
        self.upload_failures = 0

    def record_success(self) -> None:
        self.uploads_stored += 1

    def record_failure(self) -> None:
        """Alerts once each time the failures inside the window reach the threshold."""
        now = datetime.now()
        self.upload_failures += 1
        self._recent.append(now)
        while self._recent[0] < now - self._window:
            self._recent.popleft()

        if len(self._recent) == self._failure_threshold:
            self._alert_handler(
                f"{self._failure_threshold} upload failures within {int(self._window.total_seconds())}s "
                f"({self.upload_failures} failed, {self.uploads_stored} stored since startup)"
            )

    def summary(self) -> str:
        return f"{self.uploads_stored} uploads stored, {self.upload_failures} internal failures"
