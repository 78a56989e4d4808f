"""
Cron Hook Definition Module

This module defines the CronHook data structure. A CronHook is one
pending WordPress cron event on a site: the hook name and the time
it is next due to run.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from dataclasses import dataclass
from datetime import datetime, timezone

## WP-CLI date format for next_run_gmt
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

@dataclass(frozen = True)
class CronHook(object):
    """
    Pending cron hook.

    Attributes:
        hook (str):
            Name of the hook to run.

        next_run (datetime):
            Timezone-aware UTC time the hook is next due.
    """

    hook: str
    next_run: datetime

    @classmethod
    def from_dict(cls, data: dict) -> 'CronHook':
        """
        Build a hook from a WP-CLI 'cron event list' entry.

        Args:
            data (dict): Entry with 'hook' and 'next_run_gmt'

        Returns:
            CronHook: Parsed hook
        """

        next_run = datetime.strptime(data['next_run_gmt'], DATE_FORMAT).replace(tzinfo = timezone.utc)
        return cls(hook = data['hook'], next_run = next_run)

    def is_waiting(self, now: datetime = None) -> bool:
        """True when the hook is already due."""

        now = now or datetime.now(timezone.utc)
        return self.next_run < now
