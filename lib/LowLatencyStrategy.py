"""
Low-Latency Cron Strategy

Scans the sites on a coarse period only to discover hooks. Every
newly seen hook occurrence gets its own timer that fires at the
hook's due time, so execution latency does not depend on the scan
period.

Responsibilities:
- Arm one timer per hook occurrence, keyed by CronEvent
- Never arm the same occurrence twice while it is cached
- Evict records that finished, were cancelled, or went stale
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import threading
from datetime import timedelta

## import private pkgs
from ActionService import ActionService
from CronAgent import CronStrategy
from CronEvent import CronEvent
from Errors import DispatchFault
from ScheduledExecution import ScheduledExecution

class LowLatencyStrategy(CronStrategy):
    """
    Timer based dispatch of hook occurrences.

    The scheduled cache is written only from the scan loop thread.
    Timer callbacks report back through their own record.

    Attributes:
        action_service (ActionService): Pool running the armed timers
        stale_grace (int): Seconds a record may be overdue before it
                           is cancelled
    """

    name = 'lowlatency'

    def __init__(self, logger: object, action_factory: object, scan_period: int = 300, max_workers: int = 8, stale_grace: int = 120, action_service: object = None, clock = None) -> None:
        """
        Initialize the strategy.

        Args:
            logger (object): Application logger
            action_factory (callable): Builds an action from (site, hook)
            scan_period (int): Seconds between discovery scans
            max_workers (int): Timer pool size
            stale_grace (int): Overdue seconds before a record is cancelled
            action_service (ActionService): Timer pool, built when omitted
            clock (callable): Returns the current aware datetime

        Returns:
            None
        """

        super().__init__(logger, action_factory, scan_period, clock)
        self.stale_grace = stale_grace
        self.action_service = action_service or ActionService(logger, max_workers = max_workers, name = self.name)

        ## CronEvent -> ScheduledExecution
        self._scheduled = {}
        self._lock = threading.Lock()

    def pre_scan(self) -> None:
        super().pre_scan()
        self.action_service.start()

    def handle_events(self, site: object) -> None:
        for hook in site.cron:
            event = CronEvent.from_hook(site, hook)
            if self.is_event_scheduled(event):
                continue

            try:
                self.schedule_event(event, hook)

            except Exception as e:
                fault = DispatchFault(event, e)
                self.logger.warning({'site': site.domain, 'status': 'arming failed', 'error': str(fault)})

    def schedule_event(self, event: CronEvent, hook: object) -> ScheduledExecution:
        """
        Arm a timer for one hook occurrence.

        Args:
            event (CronEvent): Occurrence key
            hook (CronHook): Hook with its exact due time

        Returns:
            ScheduledExecution: The cached record
        """

        now = self.clock()

        ## overdue hooks fire at once
        delay = max(0.0, (hook.next_run - now).total_seconds())

        action = self.action_factory(event.site, hook)
        record = ScheduledExecution(event, action, run_at = now + timedelta(seconds = delay), armed_at = now)
        record.arm(self.action_service, delay)

        with self._lock:
            self._scheduled[event] = record

        self.logger.debug({'site': event.site.domain, 'event': str(event), 'delay': delay})
        return record

    def is_event_scheduled(self, event: CronEvent) -> bool:
        with self._lock:
            return event in self._scheduled

    @property
    def scheduled_events(self) -> dict:
        with self._lock:
            return dict(self._scheduled)

    def post_scan(self) -> float:
        self.clean_hook_cache()
        return super().post_scan()

    def clean_hook_cache(self) -> int:
        """
        Eviction pass over the scheduled cache.

        Records overdue by more than the grace window are cancelled.
        Cancelled and finished records are then dropped.

        Returns:
            int: Number of records removed
        """

        now = self.clock()
        with self._lock:
            records = list(self._scheduled.items())

        for event, record in records:
            if not record.done and not record.cancelled and record.get_delay(now) < -self.stale_grace:
                self.logger.warning({'site': event.site.domain, 'event': str(event), 'status': 'stale, cancelling'})
                record.cancel()

        removed = 0
        with self._lock:
            for event, record in records:
                if record.cancelled or record.done:
                    self._scheduled.pop(event, None)
                    removed += 1

        if removed:
            self.logger.debug({'evicted': removed, 'cached': len(self._scheduled)})

        return removed

    def shutdown(self) -> None:
        """
        Cancel pending records and stop the timer pool.

        Returns:
            None
        """

        with self._lock:
            records = list(self._scheduled.values())
            self._scheduled.clear()

        for record in records:
            if not record.done:
                record.cancel()

        self.action_service.shutdown(wait = False)
