"""
Action Module

This module defines the base class for units of work scheduled by
the cron manager. An action is a callable object: invoking it runs
the work, records its state and timestamps, and logs the outcome.
Failures are reported by the action itself and never raised to the
scheduler that invoked it.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum

class ActionState(Enum):
    """Lifecycle of an action."""

    INITIALIZING = 'initializing'
    SCHEDULED = 'scheduled'
    RUNNING = 'running'
    COMPLETE = 'complete'
    ERROR = 'error'
    CANCELLED = 'cancelled'

    @property
    def is_complete(self) -> bool:
        return self in (ActionState.COMPLETE, ActionState.ERROR, ActionState.CANCELLED)

class Action(ABC):
    """
    Base class for scheduled actions.

    Attributes:
        category (str): Action category used in log records
        site (Site): Site the action runs against, or None
        state (ActionState): Current lifecycle state
        result (object): Value returned by exec()
    """

    def __init__(self, logger: object, category: str, site: object = None) -> None:
        """
        Initialize the action.

        Args:
            logger (object): Application logger
            category (str): Action category
            site (Site): Site the action runs against

        Returns:
            None
        """

        self.logger = logger
        self.category = category
        self.site = site
        self.state = ActionState.INITIALIZING
        self.result = None
        self.job = None

        ## timestamps
        self.creation_time = datetime.now(timezone.utc)
        self.start_time = None
        self.completion_time = None

        ## guards state changes between the worker and cancel()
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable description of the action."""

    @abstractmethod
    def exec(self) -> object:
        """Perform the work. A False result marks the action as failed."""

    def interrupt(self) -> None:
        """Stop in-flight work. Called by cancel()."""

    def register_job(self, job: object) -> None:
        with self._lock:
            self.job = job

            ## an immediate job may already be running
            if self.state == ActionState.INITIALIZING:
                self.state = ActionState.SCHEDULED

    def cancel(self) -> None:
        """
        Cancel the action.

        A pending action will not run. A running action is
        interrupted on a best-effort basis. A finished action is
        left unchanged.

        Returns:
            None
        """

        with self._lock:
            if self.state.is_complete:
                return

            running = self.state == ActionState.RUNNING
            self.state = ActionState.CANCELLED
            self.completion_time = datetime.now(timezone.utc)

        self.logger.warning({'cancel': self.description})
        if running:
            self.interrupt()

    def __call__(self) -> object:
        """
        Run the action.

        Returns:
            object: The exec() result, or None if the action was
                    cancelled or failed
        """

        with self._lock:
            if self.state == ActionState.CANCELLED:
                return None

            self.state = ActionState.RUNNING
            self.start_time = datetime.now(timezone.utc)

        subdomain = self.site.subdomain if self.site is not None else 'site'
        self.logger.info({'action': self.description, 'site': subdomain, 'category': self.category, 'status': 'start'})

        try:
            self.result = self.exec()

        except Exception as e:
            ## failures stay with the action
            with self._lock:
                if self.state == ActionState.RUNNING:
                    self.state = ActionState.ERROR

            self.logger.error({'action': self.description, 'site': subdomain, 'category': self.category, 'status': 'error', 'error': str(e)}, exc_info = True)
            return None

        finally:
            self.completion_time = datetime.now(timezone.utc)

        with self._lock:
            if self.state == ActionState.RUNNING:
                self.state = ActionState.ERROR if self.result is False else ActionState.COMPLETE

        self.logger.info({'action': self.description, 'site': subdomain, 'category': self.category, 'status': self.state.value})
        return self.result

    def __repr__(self) -> str:
        return '<%s %s [%s]>' % (type(self).__name__, self.description, self.state.value)
