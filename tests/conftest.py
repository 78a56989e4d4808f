"""Shared test fixtures for the cron manager tests."""

import sys
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure the lib directory is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "lib"))


T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable aware-datetime clock."""

    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeJob:
    def __init__(self, func, delay, name):
        self.func = func
        self.delay = delay
        self.name = name
        self.removed = False


class FakeActionService:
    """Records scheduled actions instead of running them."""

    def __init__(self):
        self.jobs = []
        self.started = False
        self.shut_down = False

    def start(self):
        self.started = True

    def shutdown(self, wait=True):
        self.shut_down = True

    def schedule_action(self, action, delay=0.0, name=None):
        job = FakeJob(action, delay, name)
        self.jobs.append(job)
        return job

    def cancel(self, job):
        if job.removed:
            return False
        job.removed = True
        return True

    def run_all(self):
        for job in self.jobs:
            if not job.removed:
                job.func()


class FakeCron:
    def __init__(self, hooks):
        self.hooks = list(hooks)

    def __iter__(self):
        return iter(list(self.hooks))

    def get_waiting_hooks(self, now=None):
        return [hook for hook in self.hooks if hook.is_waiting(now)]


@pytest.fixture
def logger():
    log = logging.getLogger("tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service():
    return FakeActionService()
