"""
Cron Agent Module

This module implements the scan loop shared by every cron
scheduling strategy. The agent repeatedly enumerates the managed
sites and hands each one to its strategy, then idles until the
strategy's next scan is due.

Cycle:
    pre_scan() -> handle_events(site) for every site -> post_scan() -> idle

Responsibilities:
- Drive the scan loop on a dedicated thread
- Isolate failures of a single site from the rest of the cycle
- End the loop when an idle wait is interrupted by stop()
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from enum import Enum

## import private pkgs
from Errors import InterruptedWait

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class AgentState(Enum):
    """Scan loop states."""

    IDLE = 'idle'
    SCANNING = 'scanning'
    DISPATCHING = 'dispatching'
    STOPPED = 'stopped'

class CronStrategy(ABC):
    """
    Scheduling strategy driven by a CronAgent.

    A strategy computes the next scan deadline in pre_scan() and
    reports the seconds left until it from post_scan(). The agent
    does the waiting.

    Attributes:
        scan_period (int): Seconds between scan starts
        next_scan (datetime): Deadline of the next scan
    """

    name = 'cron'

    def __init__(self, logger: object, action_factory: object, scan_period: int = 300, clock = None) -> None:
        """
        Initialize the strategy.

        Args:
            logger (object): Application logger
            action_factory (callable): Builds an action from (site, hook)
            scan_period (int): Seconds between scan starts
            clock (callable): Returns the current aware datetime

        Returns:
            None
        """

        self.logger = logger
        self.action_factory = action_factory
        self.scan_period = scan_period
        self.clock = clock or utc_now
        self.next_scan = None

    def pre_scan(self) -> None:
        self.next_scan = self.clock() + timedelta(seconds = self.scan_period)

    @abstractmethod
    def handle_events(self, site: object) -> None:
        """Inspect one site and dispatch its hooks."""

    def post_scan(self) -> float:
        """
        Finish a scan cycle.

        Returns:
            float: Seconds to idle before the next scan
        """

        return self.seconds_to_next_scan()

    def seconds_to_next_scan(self) -> float:
        if self.next_scan is None:
            return 0.0

        ## a scan that overran its period starts the next one at once
        return max(0.0, (self.next_scan - self.clock()).total_seconds())

    def shutdown(self) -> None:
        """Release strategy resources."""

class CronAgent(object):
    """
    Always-on scan loop.

    The loop runs until stop() is called. Failures while handling a
    single site are logged and the cycle continues with the next
    site; an interrupted idle wait ends the loop.
    """

    def __init__(self, logger: object, sites: object, strategy: CronStrategy, name: str = 'cron') -> None:
        """
        Initialize the agent.

        Args:
            logger (object): Application logger
            sites (iterable): Managed sites, re-iterated every cycle
            strategy (CronStrategy): Scheduling strategy
            name (str): Agent name

        Returns:
            None
        """

        self.logger = logger
        self.sites = sites
        self.strategy = strategy
        self.name = name

        ## runtime state
        self.state = AgentState.IDLE
        self.cycles = 0
        self._stop = threading.Event()
        self._thread = None

    @property
    def enabled(self) -> bool:
        return not self._stop.is_set()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Run the scan loop on a background thread.

        Returns:
            None
        """

        if self._thread is not None:
            raise RuntimeError('agent %s is already started' % (self.name))

        self._thread = threading.Thread(target = self.run, name = 'agent-%s' % (self.name), daemon = True)
        self._thread.start()

    def stop(self, timeout: float = None) -> None:
        """
        Request shutdown and wait for the loop to end.

        Args:
            timeout (float): Maximum seconds to wait for the loop

        Returns:
            None
        """

        self.logger.info({'agent': self.name, 'status': 'stop requested'})
        self._stop.set()

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def run(self) -> None:
        """
        Scan loop body.

        Returns:
            None
        """

        self.logger.info({'agent': self.name, 'strategy': self.strategy.name, 'status': 'start'})
        try:
            while self.enabled:
                self.scan()

        except InterruptedWait:
            self.logger.info({'agent': self.name, 'status': 'noticed shutdown request, aborting cron processing'})

        except Exception as e:
            self.logger.error({'agent': self.name, 'status': 'terminated with an exception', 'error': str(e)}, exc_info = True)

        finally:
            self.state = AgentState.STOPPED
            self.strategy.shutdown()
            self.logger.info({'agent': self.name, 'status': 'cron processing is shut down'})

    def scan(self) -> None:
        """
        Run one scan cycle, including the idle wait.

        Returns:
            None

        Raises:
            InterruptedWait: stop() was called during the cycle
        """

        self.state = AgentState.SCANNING
        self.strategy.pre_scan()

        try:
            sites = list(self.sites)

        except Exception as e:
            ## no sites this cycle, retry after the idle wait
            self.logger.error({'agent': self.name, 'status': 'site enumeration failed', 'error': str(e)})
            sites = []

        for site in sites:
            if not self.enabled:
                raise InterruptedWait('shutdown requested during scan')

            self.state = AgentState.DISPATCHING
            self.logger.debug({'agent': self.name, 'site': site.domain, 'status': 'processing cron events'})
            try:
                self.strategy.handle_events(site)

            except Exception as e:
                self.logger.warning({'agent': self.name, 'site': site.domain, 'status': 'cron events failed', 'error': str(e)})

        seconds = self.strategy.post_scan()
        self.cycles += 1

        self.state = AgentState.IDLE
        self.idle(seconds)

    def idle(self, seconds: float) -> None:
        """
        Wait before the next cycle.

        Args:
            seconds (float): Seconds to wait, negative values wait zero

        Returns:
            None

        Raises:
            InterruptedWait: stop() was called while waiting
        """

        self.logger.debug({'agent': self.name, 'idle': seconds})
        if self._stop.wait(max(0.0, seconds)):
            raise InterruptedWait('idle wait interrupted')
