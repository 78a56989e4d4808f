"""
Cron Hook Execution Action

Runs one WordPress cron hook on one site with
'wp cron event run <hook> --url=<domain>'.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import private pkgs
from Action import Action
from Errors import WPCLIError

class CronHookExec(Action):
    """
    Action executing a single cron hook.
    """

    def __init__(self, logger: object, factory: object, site: object, hook: object, timeout: int = None) -> None:
        """
        Initialize the action.

        Args:
            logger (object): Application logger
            factory (WPCLIFactory): WP-CLI command factory
            site (Site): Site to run the hook on
            hook (CronHook): Hook to run
            timeout (int): Seconds before the run is killed

        Returns:
            None
        """

        super().__init__(logger, 'cron', site)
        self.hook = hook

        self.wpcli = factory.build('cron', 'event', 'run', hook.hook, timeout = timeout)
        self.wpcli.set_site(site)
        self.wpcli.load_themes(False)
        self.wpcli.set_format('default')

    @property
    def description(self) -> str:
        return 'Execute cron hook [%s] @ %s' % (self.hook.hook, self.site.domain)

    def exec(self) -> bool:
        try:
            self.wpcli.execute()
            return True

        except WPCLIError as e:
            self.logger.warning({'hook': self.hook.hook, 'site': self.site.domain, 'error': str(e)})
            return False

    def interrupt(self) -> None:
        self.wpcli.kill()
