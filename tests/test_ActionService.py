"""
Tests for ActionService, Action and the scheduled execution record,
using a real APScheduler background scheduler.
"""

import logging
import threading
from datetime import datetime, timezone

import pytest

from Action import Action, ActionState
from ActionService import ActionService
from ScheduledExecution import ScheduledExecution


class DummyAction(Action):

    def __init__(self, logger, result=True, error=None, block=None):
        super().__init__(logger, "test")
        self._result = result
        self._error = error
        self._block = block
        self.ran = threading.Event()
        self.interrupted = False

    @property
    def description(self):
        return "dummy"

    def exec(self):
        self.ran.set()
        if self._block is not None:
            self._block.wait(10)
        if self._error is not None:
            raise self._error
        return self._result

    def interrupt(self):
        self.interrupted = True
        if self._block is not None:
            self._block.set()


@pytest.fixture
def actions(logger):
    svc = ActionService(logger, max_workers=2, name="test")
    svc.start()
    yield svc
    svc.shutdown(wait=True)


class TestActionService:

    def test_immediate_action_runs(self, actions):
        done = threading.Event()
        actions.schedule_action(done.set, name="set")
        assert done.wait(10)

    def test_start_is_idempotent(self, actions):
        actions.start()
        assert actions.running

    def test_pending_job_can_be_cancelled_once(self, actions):
        job = actions.schedule_action(lambda: None, delay=600)
        assert job in actions.list_jobs()
        assert actions.cancel(job) is True
        assert actions.cancel(job) is False
        assert actions.list_jobs() == []

    def test_negative_delay_runs_immediately(self, actions):
        done = threading.Event()
        actions.schedule_action(done.set, delay=-30)
        assert done.wait(10)

    def test_shutdown_stops_scheduler(self, logger):
        svc = ActionService(logger, max_workers=1)
        svc.start()
        svc.shutdown()
        assert not svc.running

    def test_shutdown_reports_pending_jobs(self, logger, caplog):
        svc = ActionService(logger, max_workers=1, name="pending")
        svc.start()
        svc.schedule_action(lambda: None, delay=600)
        with caplog.at_level(logging.INFO, logger="tests"):
            svc.shutdown(wait=False)
        assert any(r.msg == {"service": "pending", "status": "start", "pending": 1} for r in caplog.records)


class TestAction:

    def test_success_marks_complete(self, logger):
        action = DummyAction(logger, result="ok")
        assert action() == "ok"
        assert action.state == ActionState.COMPLETE
        assert action.start_time is not None
        assert action.completion_time is not None

    def test_false_result_marks_error(self, logger):
        action = DummyAction(logger, result=False)
        action()
        assert action.state == ActionState.ERROR

    def test_exception_is_contained(self, logger):
        action = DummyAction(logger, error=RuntimeError("boom"))
        assert action() is None
        assert action.state == ActionState.ERROR

    def test_cancelled_action_does_not_run(self, logger):
        action = DummyAction(logger)
        action.cancel()
        assert action() is None
        assert not action.ran.is_set()
        assert action.state == ActionState.CANCELLED

    def test_cancel_after_completion_is_ignored(self, logger):
        action = DummyAction(logger)
        action()
        action.cancel()
        assert action.state == ActionState.COMPLETE

    def test_cancel_while_running_interrupts(self, logger):
        block = threading.Event()
        action = DummyAction(logger, block=block)
        worker = threading.Thread(target=action)
        worker.start()
        assert action.ran.wait(10)

        action.cancel()
        worker.join(10)
        assert action.interrupted
        assert action.state == ActionState.CANCELLED

    def test_scheduling_registers_job(self, actions, logger):
        action = DummyAction(logger)
        job = actions.schedule_action(action, delay=600)
        assert action.job is job
        assert action.state == ActionState.SCHEDULED
        actions.cancel(job)

    def test_scheduled_action_completes(self, actions, logger):
        action = DummyAction(logger)
        actions.schedule_action(action)
        assert action.ran.wait(10)


class TestScheduledExecution:

    def now(self):
        return datetime.now(timezone.utc)

    def test_execute_marks_done(self, actions, logger):
        action = DummyAction(logger)
        record = ScheduledExecution("event", action, self.now(), self.now()).arm(actions, 0)
        assert action.ran.wait(10)
        for _ in range(100):
            if record.done:
                break
            threading.Event().wait(0.05)
        assert record.done
        assert not record.cancelled

    def test_cancel_pending(self, actions, logger):
        action = DummyAction(logger)
        record = ScheduledExecution("event", action, self.now(), self.now()).arm(actions, 600)
        record.cancel()
        assert record.cancelled
        assert actions.list_jobs() == []
        assert action.state == ActionState.CANCELLED

    def test_cancel_after_done_is_ignored(self, logger):
        action = DummyAction(logger)
        record = ScheduledExecution("event", action, self.now(), self.now())
        record.execute()
        record.cancel()
        assert record.done
        assert not record.cancelled
        assert action.state == ActionState.COMPLETE

    def test_cancelled_record_skips_action(self, logger):
        action = DummyAction(logger)
        record = ScheduledExecution("event", action, self.now(), self.now())
        record.cancel()
        record.execute()
        assert record.done
        assert not action.ran.is_set()
