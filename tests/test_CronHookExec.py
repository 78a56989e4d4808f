"""
Tests for the CronHookExec action.
"""

from unittest import mock

from conftest import T0
from Action import ActionState
from CronHook import CronHook
from CronHookExec import CronHookExec
from Errors import WPCLIError
from Sites import Site


SITE = Site(blog_id=4, domain="four.example.com")
HOOK = CronHook("wp_update_themes", T0)


def build(logger, wpcli):
    factory = mock.Mock()
    factory.build.return_value = wpcli
    return CronHookExec(logger, factory, SITE, HOOK, timeout=30), factory


class TestCronHookExec:

    def test_builds_run_command(self, logger):
        wpcli = mock.Mock()
        action, factory = build(logger, wpcli)

        factory.build.assert_called_once_with("cron", "event", "run", "wp_update_themes", timeout=30)
        wpcli.set_site.assert_called_once_with(SITE)
        wpcli.load_themes.assert_called_once_with(False)
        wpcli.set_format.assert_called_once_with("default")

    def test_description(self, logger):
        action, _ = build(logger, mock.Mock())
        assert action.description == "Execute cron hook [wp_update_themes] @ four.example.com"

    def test_success(self, logger):
        wpcli = mock.Mock()
        action, _ = build(logger, wpcli)
        assert action() is True
        wpcli.execute.assert_called_once_with()
        assert action.state == ActionState.COMPLETE

    def test_wpcli_failure_marks_error(self, logger):
        wpcli = mock.Mock()
        wpcli.execute.side_effect = WPCLIError("wp cron event run", 255, "Error: fatal")
        action, _ = build(logger, wpcli)
        assert action() is False
        assert action.state == ActionState.ERROR

    def test_interrupt_kills_process(self, logger):
        wpcli = mock.Mock()
        action, _ = build(logger, wpcli)
        action.interrupt()
        wpcli.kill.assert_called_once_with()
