"""
Action Scheduling Service

This module runs actions on a thread pool using APScheduler. An
action can be run immediately or after a delay; either way the
caller gets back the APScheduler job, which can be removed while it
is still pending.

Responsibilities:
- Initialize a background scheduler with a bounded thread pool
- Schedule actions now or after a delay
- Cancel pending jobs
- Manage scheduler lifecycle
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from datetime import datetime, timedelta, timezone
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError

class ActionService(object):
    """
    Thread pool backed action scheduler.

    This class wraps an APScheduler BackgroundScheduler with an
    in-memory job store. Jobs run at most once; late jobs are still
    run however late they are, since staleness is handled by the
    callers.
    """

    def __init__(self, logger: object, max_workers: int = 4, timezone: str = 'UTC', coalesce: bool = False, max_instances: int = 1, name: str = 'actions') -> None:
        """
        Initialize the action service.

        Args:
            logger (object): Application logger
            max_workers (int): Maximum worker threads
            timezone (str): Scheduler timezone
            coalesce (bool): Job coalescing behavior
            max_instances (int): Maximum concurrent job instances
            name (str): Service name used in log records

        Returns:
            None
        """

        ## application logger
        self.logger = logger
        self.logger.info({'service': name, 'status': 'start'})

        ## scheduler configuration
        self.name = name
        self.max_workers = max_workers
        self.timezone = timezone
        self.coalesce = bool(coalesce)
        self.max_instances = max_instances

        ## initialize scheduler instance
        self.init()
        self.logger.info({'service': name, 'status': 'end'})

    def init(self) -> None:
        """
        Initialize the APScheduler instance.

        Returns:
            None
        """

        self._scheduler = BackgroundScheduler(
            executors = {
                ## thread pool used for action execution
                'default': ThreadPoolExecutor(max_workers = self.max_workers)

            },
            job_defaults = {
                ## collapse multiple pending executions into one
                'coalesce': self.coalesce,

                ## limit concurrent executions per job
                'max_instances': self.max_instances,

                ## run late jobs no matter how late
                'misfire_grace_time': None,

            },
            timezone = self.timezone,
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """
        Start the scheduler if it is not running yet.

        Returns:
            None
        """

        if not self._scheduler.running:
            self.logger.info({'service': self.name, 'status': 'starting', 'max_workers': self.max_workers})
            self._scheduler.start()

    def shutdown(self, wait: bool = True) -> None:
        """
        Shutdown the scheduler.

        Args:
            wait (bool): Wait for running actions to finish

        Returns:
            None
        """

        self.logger.info({'service': self.name, 'status': 'start', 'pending': len(self.list_jobs())})
        if self._scheduler.running:
            self._scheduler.shutdown(wait = wait)

        self.logger.info({'service': self.name, 'status': 'end'})

    def schedule_action(self, action: object, delay: float = 0.0, name: str = None) -> object:
        """
        Schedule an action.

        Args:
            action (callable): Action to run, called with no arguments
            delay (float): Seconds to wait before running, clamped at zero
            name (str): Job name, defaults to the action description

        Returns:
            Job: The scheduled APScheduler job
        """

        ## overdue work runs immediately
        run_date = datetime.now(timezone.utc) + timedelta(seconds = max(0.0, delay))

        job = self._scheduler.add_job(
            func = action,
            trigger = 'date',
            run_date = run_date,
            name = name or getattr(action, 'description', repr(action)),
        )
        self.logger.debug({'service': self.name, 'job': job.id, 'name': job.name, 'run_date': run_date.isoformat()})

        if hasattr(action, 'register_job'):
            action.register_job(job)

        return job

    def cancel(self, job: object) -> bool:
        """
        Remove a pending job.

        Args:
            job (Job): Job returned by schedule_action()

        Returns:
            bool: True if the job was still pending
        """

        try:
            job.remove()
            return True

        except JobLookupError:
            ## already dispatched or finished
            return False

    def list_jobs(self) -> list:
        """
        List the jobs that have not run yet.

        Returns:
            list: Pending APScheduler jobs
        """

        return self._scheduler.get_jobs()
