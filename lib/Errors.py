"""
Cron Manager Error Types

This module defines the exception hierarchy shared by the cron
manager components.

Propagation rules:
- LaunchError is raised to the caller of Command.start()
- DrainFault is recorded on the output reader, never raised past it
- InterruptedWait ends the agent loop that observed it
- DispatchFault is isolated to the hook that caused it
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"


class CronManagerError(Exception):
    """Base class for cron manager errors."""


class ConfigError(CronManagerError):
    """Raised when the configuration file is missing or invalid."""


class LaunchError(CronManagerError):
    """
    The operating system refused to start a process.

    Attributes:
        argv (list): Argument vector that failed to launch
    """

    def __init__(self, argv: list, cause: Exception) -> None:
        self.argv = list(argv)
        self.cause = cause
        super().__init__('failed to launch %s: %s' % (argv[0] if argv else '<none>', cause))


class DrainFault(CronManagerError):
    """An I/O failure while capturing process output."""


class InterruptedWait(CronManagerError):
    """An idle or completion wait was interrupted by a shutdown request."""


class DispatchFault(CronManagerError):
    """
    A single hook could not be dispatched.

    Attributes:
        event (object): The hook occurrence that failed
    """

    def __init__(self, event: object, cause: Exception) -> None:
        self.event = event
        self.cause = cause
        super().__init__('failed to dispatch %s: %s' % (event, cause))


class WPCLIError(CronManagerError):
    """
    A WP-CLI invocation finished with a failing exit code.

    Attributes:
        command (str): Quoted command line
        result (int): Process exit code
        output (str): Captured output
    """

    def __init__(self, command: str, result: int, output: str) -> None:
        self.command = command
        self.result = result
        self.output = output
        super().__init__('Result=%s: %s' % (result, output))
