"""Bounded health polling for updock."""

import time
from typing import Callable

from updock.errors import PollTimeout


class HealthPoller:
    """Evaluates a health predicate at a fixed cadence for a fixed number of attempts.

    The budget is counted in attempts, not wall-clock time: ``wait(predicate, 3)``
    evaluates the predicate at most three times and sleeps ``interval`` seconds
    between evaluations. A budget of zero makes no evaluation at all and raises
    ``PollTimeout`` immediately.
    """

    def __init__(self, logger, console, interval: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.logger = logger
        self.console = console
        self.interval = interval
        self.sleep = sleep

    def wait(self, predicate: Callable[[], bool], attempts: int) -> int:
        """Returns the attempt number that succeeded, or raises ``PollTimeout``."""
        self.console.print(f"[yellow]Waiting for the application to become healthy ({attempts} attempts)...[/yellow]")

        for attempt in range(1, attempts + 1):
            if self._evaluate(predicate, attempt):
                self.console.print(f"[green]Application is healthy after {attempt} attempt(s).[/green]")
                return attempt
            if attempt < attempts:
                self.sleep(self.interval)

        raise PollTimeout(attempts)

    def _evaluate(self, predicate: Callable[[], bool], attempt: int) -> bool:
        try:
            healthy = bool(predicate())
        except Exception as exc:
            self.logger.debug("Health check attempt %s raised: %s", attempt, exc)
            return False

        self.logger.debug("Health check attempt %s: %s", attempt, "healthy" if healthy else "not ready")
        return healthy
