"""
Cron Manager Service Entry Point

This module provides the main entry point for initializing and running
the Cron Manager service. It is responsible for:

- Loading configuration
- Initializing logging
- Starting the CronManagerService runtime
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import build in pkgs
import re
import os
import sys
import argparse

## Resolve project root directory
workpath = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))

## Extend Python module search path for project libraries
sys.path.append("%s/lib" % (workpath))

## import private pkgs
from Log import Log
from Config import Config, AGENTS
from Errors import ConfigError
from CronManagerService import CronManagerService

class CronManager(object):
    """
    Core Cron Manager controller.

    Lifecycle:
        1. Load configuration
        2. Initialize logging
        3. Start CronManagerService
    """

    def __init__(self, config_path: str = None, agent: str = None) -> None:
        """
        Initialize the Cron Manager runtime environment.

        Args:
            config_path (str): Configuration file, defaults to etc/CronManager.yaml
            agent (str): Overrides cron.agent from the configuration
        """

        ## set private values
        self.configObj = Config(workpath, path = config_path)
        self.config = self.configObj.config
        self.config['pid'] = os.getpid()
        self.config['pname'] = os.path.basename(__file__)
        self.config['name'] = re.sub(r'\..*$', '', self.config['pname'])
        if agent:
            self.config['cron']['agent'] = agent

        ## logger init
        self.loggerObj = Log(self.config)
        self.logger = self.loggerObj.logger

        ## debug prt
        self.logger.debug({'config': str(self.configObj.path)})
        self.logger.debug({'wpcli.path': self.config['wpcli']['path']})
        self.logger.debug({'cron.agent': self.config['cron']['agent']})
        self.logger.debug({'cron.scan_period': self.config['cron']['scan_period']})

    def run(self) -> bool:
        """
        Start the Cron Manager service in blocking mode.

        Returns:
            bool: True once the service has shut down
        """

        self.logger.debug({'status': 'start', 'pid': self.config['pid']})

        ## gen service object
        svcObj = CronManagerService(self.logger, self.config)

        ## blocks until SIGTERM / SIGINT
        svcObj.serve_forever()

        self.logger.debug({'status': 'end'})
        return True

def parse_args(argv: list = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description = 'Run WordPress cron hooks on schedule.')
    parser.add_argument('-c', '--config', help = 'configuration file (default: etc/CronManager.yaml)')
    parser.add_argument('--agent', choices = AGENTS, help = 'override the configured cron agent')
    return parser.parse_args(argv)

def main(argv: list = None) -> int:
    """
    Application entry point.

    Returns:
        int: Process exit code
    """

    args = parse_args(argv)
    try:
        cmObj = CronManager(args.config, args.agent)

    except ConfigError as e:
        sys.stderr.write('%s\n' % (e))
        return 2

    cmObj.run()
    return 0

if __name__ == "__main__":
    sys.exit(main())
