"""
Configuration Loader Module

This module loads the cron manager configuration from a YAML
file under the project etc/ directory and fills in defaults for
every optional setting.

Rules:
- Fail closed when the file is missing or malformed
- Numeric scheduling knobs must be positive integers
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import copy
from pathlib import Path

import yaml

## import private pkgs
from Errors import ConfigError

DEFAULTS = {
    'log': {
        'level': 'INFO',
        'file': None,
        'format': '%(asctime)s %(levelname)s %(name)s %(module)s.%(funcName)s %(message)s',
        'max_bytes': 10485760,
        'backup_count': 5,
    },
    'wpcli': {
        'path': '/opt/wpcli/wp',
        'wordpress_dir': None,
        'default_host': None,
        'multisite': True,
    },
    'cron': {
        'agent': 'lowlatency',
        'scan_period': 300,
        'max_workers': 8,
        'stale_grace': 120,
        'hook_refresh': 60,
        'action_timeout': 300,
    },
    'actions': {
        'max_workers': 4,
        'timezone': 'UTC',
        'coalesce': False,
        'max_instances': 1,
    },
}

AGENTS = ('lowlatency', 'roundrobin')

POSITIVE_INTS = (
    ('cron', 'scan_period'),
    ('cron', 'max_workers'),
    ('cron', 'stale_grace'),
    ('cron', 'action_timeout'),
    ('actions', 'max_workers'),
    ('actions', 'max_instances'),
)

class Config(object):
    """
    Cron manager configuration.

    Attributes:
        path (Path): Loaded configuration file
        config (dict): Merged configuration values
    """

    def __init__(self, workpath: str, name: str = 'CronManager', path: str = None) -> None:
        """
        Load the configuration.

        Args:
            workpath (str): Project root directory
            name (str): Configuration base name, used as etc/<name>.yaml
            path (str): Explicit configuration file, overrides workpath

        Returns:
            None
        """

        self.path = Path(path) if path else Path(workpath) / 'etc' / ('%s.yaml' % (name))
        self.config = self.load(self.path)

    @staticmethod
    def load(path: Path) -> dict:
        """
        Read, merge and validate a configuration file.

        Args:
            path (Path): YAML file to read

        Returns:
            dict: Configuration with defaults applied

        Raises:
            ConfigError: The file is missing or invalid
        """

        if not path.exists():
            raise ConfigError('Missing required config file: %s' % (path))

        try:
            raw = yaml.safe_load(path.read_text(encoding = 'utf-8'))

        except yaml.YAMLError as e:
            raise ConfigError('Invalid YAML in config file %s: %s' % (path, e)) from e

        if raw is None:
            raw = {}

        if not isinstance(raw, dict):
            raise ConfigError('Invalid YAML root object in config file: %s' % (path))

        config = Config.merge(DEFAULTS, raw)
        Config.validate(config)
        return config

    @staticmethod
    def merge(defaults: dict, overrides: dict) -> dict:
        merged = copy.deepcopy(defaults)
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = Config.merge(merged[key], value)

            else:
                merged[key] = value

        return merged

    @staticmethod
    def validate(config: dict) -> None:
        for section, key in POSITIVE_INTS:
            value = config[section][key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError('%s.%s must be a positive integer, got %r' % (section, key, value))

        ## zero means refresh on every scan
        refresh = config['cron']['hook_refresh']
        if isinstance(refresh, bool) or not isinstance(refresh, int) or refresh < 0:
            raise ConfigError('cron.hook_refresh must be a non-negative integer, got %r' % (refresh))

        if config['cron']['agent'] not in AGENTS:
            raise ConfigError('cron.agent must be one of %s, got %r' % (', '.join(AGENTS), config['cron']['agent']))
