"""
Logging Setup Module

This module builds the application logger shared by every cron
manager component. Components log dict payloads, for example
{'status': 'start'}, and the formatter records the calling module
and function alongside them.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import sys
import logging
from logging.handlers import RotatingFileHandler

class Log(object):
    """
    Application logger factory.

    Attributes:
        logger (logging.Logger): Configured application logger
    """

    def __init__(self, config: dict) -> None:
        """
        Initialize the application logger.

        Args:
            config (dict): Application configuration, uses the
                           'log' section and the optional 'name'

        Returns:
            None
        """

        log_config = config['log']
        self.formatter = logging.Formatter(log_config['format'])

        self.logger = logging.getLogger(config.get('name', 'CronManager'))
        self.logger.setLevel(getattr(logging, str(log_config['level']).upper(), logging.INFO))
        self.logger.propagate = False

        ## drop handlers from a previous initialization
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

        self.add_handler(logging.StreamHandler(sys.stdout))

        ## optional rotating log file
        if log_config.get('file'):
            self.add_handler(RotatingFileHandler(
                log_config['file'],
                maxBytes = log_config['max_bytes'],
                backupCount = log_config['backup_count'],
            ))

    def add_handler(self, handler: logging.Handler) -> None:
        handler.setFormatter(self.formatter)
        self.logger.addHandler(handler)
