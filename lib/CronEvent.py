"""
Cron Event Key Module

A CronEvent identifies one occurrence of a hook on a site. The due
time is truncated to the minute, so the same occurrence found by
later scans with slightly different precision maps to the same key.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from dataclasses import dataclass
from datetime import datetime

@dataclass(frozen = True)
class CronEvent(object):
    """
    Hook occurrence key.

    Attributes:
        site (Site): Site the hook runs on
        hook (str): Hook name
        exec_time (datetime): Due time, truncated to the minute
    """

    site: object
    hook: str
    exec_time: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, 'exec_time', self.exec_time.replace(second = 0, microsecond = 0))

    @classmethod
    def from_hook(cls, site: object, cron_hook: object) -> 'CronEvent':
        return cls(site = site, hook = cron_hook.hook, exec_time = cron_hook.next_run)

    def __str__(self) -> str:
        return '%s@%s' % (self.hook, self.exec_time.isoformat())
