"""
Round-Robin Cron Strategy

Re-scans every site on a fixed period and hands each hook that is
already due to the action service right away. Precision is bounded
by the scan period.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import private pkgs
from CronAgent import CronStrategy
from CronEvent import CronEvent
from Errors import DispatchFault

class RoundRobinStrategy(CronStrategy):
    """
    Fire-and-forget dispatch of waiting hooks.

    Attributes:
        action_service (ActionService): Runs the actions
    """

    name = 'roundrobin'

    def __init__(self, logger: object, action_service: object, action_factory: object, scan_period: int = 300, clock = None) -> None:
        """
        Initialize the strategy.

        Args:
            logger (object): Application logger
            action_service (ActionService): Runs the actions
            action_factory (callable): Builds an action from (site, hook)
            scan_period (int): Seconds between scan starts
            clock (callable): Returns the current aware datetime

        Returns:
            None
        """

        super().__init__(logger, action_factory, scan_period, clock)
        self.action_service = action_service
        self.dispatched = 0

    def pre_scan(self) -> None:
        super().pre_scan()
        self.action_service.start()

    def handle_events(self, site: object) -> None:
        for hook in site.cron.get_waiting_hooks(self.clock()):
            try:
                action = self.action_factory(site, hook)
                self.action_service.schedule_action(action)
                self.dispatched += 1

            except Exception as e:
                fault = DispatchFault(CronEvent.from_hook(site, hook), e)
                self.logger.warning({'site': site.domain, 'status': 'dispatch failed', 'error': str(fault)})

    def post_scan(self) -> float:
        """
        Report the cycle's dispatch count and finish the scan.

        Returns:
            float: Seconds to idle before the next scan
        """

        self.logger.info({'strategy': self.name, 'dispatched': self.dispatched})
        self.dispatched = 0
        return super().post_scan()
