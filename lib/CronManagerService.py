"""
Cron Manager Service

This module implements the runtime service that wires the cron
manager together: the WP-CLI factory, the managed sites, the action
pool and the configured cron agent.

Responsibilities:
- Forward APScheduler logs into the application logger
- Build the configured scheduling strategy and its agent
- Manage service lifecycle and graceful shutdown
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import signal
import logging
import threading
from functools import partial

## import private pkgs
from Sites import Sites
from WPCLI import WPCLIFactory
from CronAgent import CronAgent
from CronHookExec import CronHookExec
from ActionService import ActionService
from RoundRobinStrategy import RoundRobinStrategy
from LowLatencyStrategy import LowLatencyStrategy

class APSchedulerForwardHandler(logging.Handler):
    """
    Logging bridge handler for APScheduler.

    This handler forwards APScheduler log records to the
    application-level logger, preserving log level semantics.
    """

    def __init__(self, my_logger):
        super().__init__()

        ## application logger used for forwarding
        self.my_logger = my_logger

    def emit(self, record):
        """
        Emit a log record.

        Args:
            record (logging.LogRecord): Log record to emit

        Returns:
            None
        """

        try:
            msg = self.format(record)

            ## map APScheduler log levels to application logger
            if record.levelno >= logging.ERROR:
                self.my_logger.error({'apscheduler': msg})

            elif record.levelno >= logging.WARNING:
                self.my_logger.warning({'apscheduler': msg})

            else:
                self.my_logger.debug({'apscheduler': msg})

        except Exception:
            self.handleError(record)

class CronManagerService(object):
    """
    Core cron manager service controller.

    This class owns the shared action pool and the cron agent, and
    keeps the process alive until a termination signal arrives or
    the agent loop ends on its own.
    """

    def __init__(self, logger: object, config: dict) -> None:
        """
        Initialize the service.

        Args:
            logger (object): Application logger
            config (dict): Merged configuration, see Config

        Returns:
            None
        """

        self.logger = logger
        self.logger.info({'status': 'start'})

        self.config = config
        cron = config['cron']
        actions = config['actions']

        ## internal runtime state
        self._running = False
        self._stopped = threading.Event()

        ## forward APScheduler logs into application logger
        self._setup_apscheduler_logging()

        self.factory = WPCLIFactory(config['wpcli'], self.logger)
        self.sites = Sites(self.factory, config['wpcli'], hook_refresh = cron['hook_refresh'], logger = self.logger)

        ## shared pool for fire-and-forget actions
        self.action_service = ActionService(self.logger,
                                            max_workers = actions['max_workers'],
                                            timezone = actions['timezone'],
                                            coalesce = actions['coalesce'],
                                            max_instances = actions['max_instances'],
                                            )

        self.strategy = self.build_strategy(cron['agent'])
        self.agent = CronAgent(self.logger, self.sites, self.strategy, name = cron['agent'])
        self.logger.info({'status': 'end', 'agent': cron['agent']})

    def build_strategy(self, agent: str) -> object:
        """
        Build the scheduling strategy named in the configuration.

        Args:
            agent (str): 'lowlatency' or 'roundrobin'

        Returns:
            CronStrategy: The strategy instance
        """

        cron = self.config['cron']
        action_factory = partial(CronHookExec, self.logger, self.factory, timeout = cron['action_timeout'])

        if agent == 'roundrobin':
            return RoundRobinStrategy(self.logger, self.action_service, action_factory, scan_period = cron['scan_period'])

        if agent == 'lowlatency':
            return LowLatencyStrategy(self.logger, action_factory,
                                      scan_period = cron['scan_period'],
                                      max_workers = cron['max_workers'],
                                      stale_grace = cron['stale_grace'],
                                      )

        raise ValueError('unknown cron agent: %s' % (agent))

    def _setup_apscheduler_logging(self) -> None:
        """
        Redirect APScheduler internal logs into the application logger.

        Returns:
            None
        """

        aps_logger = logging.getLogger('apscheduler')
        aps_logger.setLevel(logging.DEBUG)

        ## replace a bridge left by a previous service instance
        for handler in list(aps_logger.handlers):
            if isinstance(handler, APSchedulerForwardHandler):
                aps_logger.removeHandler(handler)

        handler = APSchedulerForwardHandler(self.logger)
        handler.setFormatter(logging.Formatter('%(levelname)s %(name)s %(message)s'))

        ## disable log propagation to avoid duplicate logs
        aps_logger.addHandler(handler)
        aps_logger.propagate = False

    def start(self) -> None:
        """
        Start the action pool and the cron agent.

        Returns:
            None
        """

        self.logger.info({'status': 'start'})
        self.action_service.start()
        self.agent.start()
        self._running = True
        self.logger.info({'status': 'end'})

    def stop(self, timeout: float = 30) -> None:
        """
        Stop the cron agent and the action pool.

        Args:
            timeout (float): Seconds to wait for the agent loop

        Returns:
            None
        """

        self.logger.info({'status': 'start'})
        try:
            self.agent.stop(timeout)
            self.action_service.shutdown(wait = True)

        finally:
            self._running = False
            self._stopped.set()

        self.logger.info({'status': 'end'})

    def serve_forever(self, poll_interval: float = 1.0) -> None:
        """
        Run the service until a termination signal is received.

        SIGTERM and SIGINT stop the service gracefully. The service
        also stops when the agent loop ends by itself.

        Args:
            poll_interval (float): Seconds between agent liveness checks

        Returns:
            None
        """

        self.start()

        ## register signal handlers for graceful shutdown
        signal.signal(signal.SIGTERM, self._handle_exit)
        signal.signal(signal.SIGINT, self._handle_exit)

        ## main service loop
        while self._running:
            if self._stopped.wait(poll_interval):
                break

            if not self.agent.is_alive():
                self.logger.error({'status': 'cron agent ended unexpectedly'})
                self.stop()

    def _handle_exit(self, signum, frame) -> None:
        """
        Handle process termination signals.

        Args:
            signum (int): Signal number
            frame (object): Current stack frame

        Returns:
            None
        """

        self.logger.info({'status': 'Received signal %s, exiting...' % (signum)})
        self.stop()
