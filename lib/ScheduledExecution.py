"""
Scheduled Execution Record Module

This module defines the record kept by the low-latency strategy for
each armed hook occurrence. The record owns the pending job and the
action behind it. The job callback reports back only through the
record's own completion event; it never touches the strategy cache.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import threading
from datetime import datetime

class ScheduledExecution(object):
    """
    Armed execution of one hook occurrence.

    Attributes:
        event (CronEvent): Hook occurrence key
        action (callable): Action run when the timer fires
        run_at (datetime): Time the action was scheduled to run
        armed_at (datetime): Time the timer was armed
        job (Job): APScheduler job, set by arm()
    """

    def __init__(self, event: object, action: object, run_at: datetime, armed_at: datetime) -> None:
        self.event = event
        self.action = action
        self.run_at = run_at
        self.armed_at = armed_at
        self.job = None
        self._service = None

        ## one-shot signals
        self._done = threading.Event()
        self._cancelled = threading.Event()

    def arm(self, service: object, delay: float) -> 'ScheduledExecution':
        """
        Schedule the action on the given service.

        Args:
            service (ActionService): Service running the timer
            delay (float): Seconds until the action runs

        Returns:
            ScheduledExecution: This record
        """

        self._service = service
        self.job = service.schedule_action(self.execute, delay, name = str(self.event))
        if hasattr(self.action, 'register_job'):
            self.action.register_job(self.job)

        return self

    def execute(self) -> None:
        """Timer callback."""

        try:
            if not self._cancelled.is_set():
                self.action()

        finally:
            self._done.set()

    def get_delay(self, now: datetime) -> float:
        """Seconds until the scheduled run time, negative once passed."""

        return (self.run_at - now).total_seconds()

    def cancel(self) -> None:
        """
        Cancel the execution.

        A pending job is removed. An action that already started is
        asked to stop, which may or may not succeed before it ends.
        A finished execution is left unchanged.

        Returns:
            None
        """

        if self._done.is_set():
            return

        self._cancelled.set()
        if self.job is not None:
            self._service.cancel(self.job)

        if hasattr(self.action, 'cancel'):
            self.action.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def __repr__(self) -> str:
        return '<ScheduledExecution %s run_at=%s done=%s cancelled=%s>' % (self.event, self.run_at.isoformat(), self.done, self.cancelled)
