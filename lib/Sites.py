"""
Managed Sites Module

This module enumerates the WordPress sites managed by the cron
manager and the pending cron hooks of each site. Both lists are
read through WP-CLI and cached for a refresh interval.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import time
import logging
from dataclasses import dataclass, field

## import private pkgs
from CronHook import CronHook

class SiteCron(object):
    """
    Pending cron hooks of one site.

    Iterating returns every hook the site reports, due or not.
    """

    def __init__(self, factory: object, site: object, refresh: int = 60, logger: object = None, clock = time.monotonic) -> None:
        """
        Initialize the hook list.

        Args:
            factory (WPCLIFactory): WP-CLI command factory
            site (Site): Site owning the hooks
            refresh (int): Seconds a loaded list stays valid
            logger (object): Application logger
            clock (callable): Monotonic clock

        Returns:
            None
        """

        self.logger = logger or logging.getLogger('Sites')
        self.factory = factory
        self.site = site
        self.refresh_interval = refresh
        self.clock = clock

        self._hooks = None
        self._loaded_at = None

    def refresh(self) -> None:
        wpcli = self.factory.build('cron', 'event', 'list')
        wpcli.load_themes(False)
        wpcli.set_site(self.site)
        wpcli.set_fields('hook', 'next_run_gmt')

        self._hooks = [CronHook.from_dict(entry) for entry in wpcli.read_json()]
        self._loaded_at = self.clock()
        self.logger.debug({'site': self.site.domain, 'hooks': len(self._hooks)})

    def _check_refresh(self) -> None:
        if self._hooks is None or self.clock() - self._loaded_at >= self.refresh_interval:
            self.refresh()

    def __iter__(self):
        self._check_refresh()
        return iter(list(self._hooks))

    def get_waiting_hooks(self, now = None) -> list:
        return [hook for hook in self if hook.is_waiting(now)]

@dataclass(unsafe_hash = True)
class Site(object):
    """
    Managed site. Sites are identified by their blog id.

    Attributes:
        blog_id (int): WordPress blog id
        domain (str): Site domain, passed to WP-CLI as --url
        url (str): Site home URL
        cron (SiteCron): Pending hooks of this site
    """

    blog_id: int
    domain: str = field(default = None, compare = False)
    url: str = field(default = None, compare = False)
    cron: object = field(default = None, compare = False, repr = False)

    @property
    def subdomain(self) -> str:
        if not self.domain:
            return '<unknown>'

        return self.domain.split('.', 1)[0]

class Sites(object):
    """
    Collection of managed sites.

    On a multisite network the sites come from 'wp site list'.
    Otherwise the collection holds the single default site.
    """

    def __init__(self, factory: object, config: dict, hook_refresh: int = 60, refresh: int = 900, logger: object = None, clock = time.monotonic) -> None:
        """
        Initialize the collection.

        Args:
            factory (WPCLIFactory): WP-CLI command factory
            config (dict): The 'wpcli' configuration section
            hook_refresh (int): Hook list refresh interval in seconds
            refresh (int): Site list refresh interval in seconds
            logger (object): Application logger
            clock (callable): Monotonic clock

        Returns:
            None
        """

        self.logger = logger or logging.getLogger('Sites')
        self.factory = factory
        self.multisite = bool(config.get('multisite', True))
        self.default_host = config.get('default_host')
        self.hook_refresh = hook_refresh
        self.refresh_interval = refresh
        self.clock = clock

        ## blog id -> Site, kept across refreshes so hook caches survive
        self._sites = {}
        self._loaded_at = None

    def _new_site(self, blog_id: int, domain: str, url: str) -> Site:
        site = Site(blog_id = blog_id, domain = domain, url = url)
        site.cron = SiteCron(self.factory, site, self.hook_refresh, self.logger, self.clock)
        return site

    def _list_sites(self) -> list:
        if not self.multisite:
            url = 'http://%s/' % (self.default_host) if self.default_host else None
            return [{'blog_id': 1, 'domain': self.default_host, 'url': url}]

        wpcli = self.factory.build('site', 'list')
        wpcli.load_themes(False)
        wpcli.load_plugins(False)
        wpcli.set_fields('blog_id', 'domain', 'url')
        return wpcli.read_json()

    def refresh(self) -> None:
        """
        Reload the site list.

        Returns:
            None
        """

        self.logger.info({'status': 'start'})

        sites = {}
        for entry in self._list_sites():
            blog_id = int(entry['blog_id'])
            site = self._sites.get(blog_id)
            if site is None:
                site = self._new_site(blog_id, entry.get('domain'), entry.get('url'))
                self.logger.debug({'loaded site': blog_id, 'url': site.url})

            else:
                site.domain = entry.get('domain')
                site.url = entry.get('url')

            sites[blog_id] = site

        self._sites = sites
        self._loaded_at = self.clock()
        self.logger.info({'status': 'end', 'sites': len(self._sites)})

    def _check_refresh(self) -> None:
        if self._loaded_at is None or self.clock() - self._loaded_at >= self.refresh_interval:
            self.refresh()

    def __iter__(self):
        self._check_refresh()
        return iter(sorted(self._sites.values(), key = lambda site: site.blog_id))

    def __len__(self) -> int:
        self._check_refresh()
        return len(self._sites)
