"""
Building of urls from route aliases; the inverse of the route table.
"""

import logging
from collections.abc import Mapping
from functools import partial

import regex

from concourse.routing.exceptions import (
    AliasNotFoundError,
    UnresolvedPlaceholderError,
)
from concourse.routing.routing import Breadcrumb

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = '/'
DEFAULT_HOST = 'gustavus.edu'
# in order of priority.
DEFAULT_HOST_KEYS = ('HTTP_X_FORWARDED_HOST', 'HTTP_HOST', 'SERVER_NAME')

collapse_slashes = partial(regex.compile('/{2,}').sub, '/')


def resolve_host(
        environ=None, host_keys=DEFAULT_HOST_KEYS, default_host=DEFAULT_HOST):
    """
    Resolve the host from the first of the host_keys with a value in the
    environ, falling back to the default_host.
    """

    if environ:
        for key in host_keys:
            value = environ.get(key)
            if value:
                # forwarded hosts may be a list, the first is the client
                return value.split(',')[0].strip()
    return default_host


def expand_route(route, params):
    """
    Substitute the params into the pattern of the route, with values
    being percent-encoded except for wildcards, which are substituted as
    is.
    """

    pattern = route.pattern
    missing = [
        name for name in pattern.names if params.get(name) in (None, '')]
    if missing:
        raise UnresolvedPlaceholderError(route.alias, missing)
    return pattern.template.expand({
        name: str(params[name]) for name in pattern.names})


class URLBuilder(object):
    """
    Builds urls for the routes in a route table.
    """

    def __init__(
            self, table, base_dir=DEFAULT_BASE_DIR, default_host=DEFAULT_HOST,
            host_keys=DEFAULT_HOST_KEYS, environ=None):
        """
        Arguments

        table
            The RouteTable
        base_dir
            The root of the application, used when build is not given
            an explicit base_dir.
        default_host
            The host used for full urls when the environ provides none.
        host_keys
            The keys in the environ that may provide the host, in the
            order of priority.
        environ
            The default request environ.
        """

        self.table = table
        self.base_dir = base_dir
        self.default_host = default_host
        self.host_keys = tuple(host_keys)
        self.environ = environ

    def route(self, alias):
        try:
            return self.table[alias]
        except KeyError:
            raise AliasNotFoundError(alias) from None

    def host(self, environ=None):
        return resolve_host(
            self.environ if environ is None else environ,
            self.host_keys, self.default_host,
        )

    def build(
            self, alias, params=None, base_dir='', full_url=False,
            environ=None):
        """
        Build the url for the route with the alias.

        Arguments

        alias
            The alias of the route.
        params
            The values for the placeholders of the route.
        base_dir
            The base directory to prefix, defaults to the base_dir of
            this builder.
        full_url
            If true, produce an absolute https url.
        environ
            The request environ to resolve the host from for full urls.
        """

        route = self.route(alias)
        path = expand_route(route, {} if params is None else params)
        url = collapse_slashes((base_dir or self.base_dir) + path)
        if full_url:
            url = 'https://' + self.host(environ) + url
        return url

    def urlify(self, crumbs):
        """
        Return a list of breadcrumb dicts with the aliases resolved into
        urls.
        """

        results = []
        for crumb in crumbs:
            if isinstance(crumb, Mapping):
                crumb = Breadcrumb.from_config(crumb)
            if crumb.alias is None:
                url = crumb.url
            else:
                url = self.build(crumb.alias, crumb.params)
            results.append({'text': crumb.text, 'url': url})
        return results

    def breadcrumbs(self, alias):
        """
        The breadcrumbs configured for the route with the alias.
        """

        return self.urlify(self.route(alias).breadcrumbs)


def build_url(table, alias, params=None, base_dir='', full_url=False, **kw):
    """
    Build a url for the alias in the table.  Additional keyword
    arguments are passed to URLBuilder.
    """

    return URLBuilder(table, **kw).build(
        alias, params, base_dir=base_dir, full_url=full_url)
