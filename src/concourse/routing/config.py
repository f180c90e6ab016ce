"""
The configuration classes for routing.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

import toml

from concourse.routing.access import AccessGuard
from concourse.routing.dispatch import Router
from concourse.routing.routing import Route, RouteTable
from concourse.routing.urls import (
    DEFAULT_BASE_DIR,
    DEFAULT_HOST,
    DEFAULT_HOST_KEYS,
    URLBuilder,
)

logger = logging.getLogger(__name__)

# configuration key to Route argument; both the original camel cased
# keys and the snake cased keys are accepted.
route_keys = {
    'handler': 'handler',
    'visibleTo': 'visibility',
    'visible_to': 'visibility',
    'breadCrumbs': 'breadcrumbs',
    'breadcrumbs': 'breadcrumbs',
}


def route_kwargs(key, value):
    kwargs = {}
    for name, item in value.items():
        if name == 'route':
            continue
        if name not in route_keys:
            raise ValueError(
                "route '%s' has unsupported key '%s'" % (key, name))
        if route_keys[name] in kwargs:
            raise ValueError(
                "route '%s' defines '%s' more than once" % (
                    key, route_keys[name]))
        kwargs[route_keys[name]] = item
    return kwargs


def route_from_entry(key, value):
    """
    The alias keyed form, i.e. {alias: {'route': pattern, ...}}.
    """

    return Route(key, value['route'], **route_kwargs(key, value))


def route_from_legacy_entry(key, value):
    """
    The older path keyed form, i.e. {pattern: {'handler': ...}}, where
    the pattern doubles as the alias.
    """

    return Route(key, key, **route_kwargs(key, value))


def iter_routes(mapping):
    for key, value in mapping.items():
        if not isinstance(value, Mapping):
            raise ValueError("route '%s' must be a table" % (key,))
        if 'route' in value:
            yield route_from_entry(key, value)
        elif key.startswith('/'):
            yield route_from_legacy_entry(key, value)
        else:
            raise ValueError("route '%s' missing the 'route' key" % (key,))


def build_route_table(mapping):
    """
    Normalize either shape of route configuration into a RouteTable.
    """

    table = RouteTable(iter_routes(mapping))
    logger.debug("loaded %d routes", len(table))
    return table


def is_structured(config_mapping):
    """
    Whether the mapping provides the routes under a 'routes' table, as
    opposed to being the routes itself.
    """

    routes = config_mapping.get('routes')
    return (
        isinstance(routes, Mapping) and
        'route' not in routes and
        'handler' not in routes
    )


class Settings(object):
    """
    The settings for the routing of an application.
    """

    def __init__(
            self, base_dir=DEFAULT_BASE_DIR, default_host=DEFAULT_HOST,
            host_keys=DEFAULT_HOST_KEYS, static_root=None, interactive=True):
        self.base_dir = base_dir
        self.default_host = default_host
        self.host_keys = tuple(host_keys)
        self.static_root = Path('.' if static_root is None else static_root)
        self.interactive = interactive

    @classmethod
    def from_config(cls, mapping):
        try:
            return cls(**mapping)
        except TypeError as e:
            raise ValueError("unsupported settings: %s" % e) from None


class BaseConfiguration(Mapping):

    def __init__(self, config_mapping):
        self.config_str = ''
        self.path = None
        self.__mapping = dict(config_mapping)

    def __getitem__(self, key):
        return self.__mapping[key]

    def __iter__(self):
        return iter(self.__mapping)

    def __len__(self):
        return len(self.__mapping)

    @classmethod
    def from_toml(cls, config_str, **kw):
        inst = cls(toml.loads(config_str), **kw)
        inst.config_str = config_str
        return inst

    @classmethod
    def from_path(cls, path, **kw):
        path = Path(path)
        inst = cls.from_toml(path.read_text(encoding='utf8'), **kw)
        inst.path = path
        return inst


class Configuration(BaseConfiguration):
    """
    The main configuration class.

    The routes may be provided either under the 'routes' table with the
    settings under the 'settings' table, or the mapping may be the
    routes itself:

        [settings]
        base_dir = "/app"

        [routes.index]
        route = "/"
        handler = "package.module:Controller.index"

        [routes.item]
        route = '/item/{id=\\d+}'
        handler = "package.module:Controller.item"
        visibleTo = ["app", "admin"]

        [routes.edit]
        route = '/item/{id=\\d+}/edit'
        handler = "package.module:Controller.edit"

        [routes.edit.visibleTo]
        application = "app"
        permissions = ["admin", "editor"]
        login_level = "guest"

    TOML arrays must hold a single type, so the list form of visibleTo
    only loads from TOML when every item is a string; the table form
    takes any number of permissions.
    """

    def __init__(self, config_mapping, **settings):
        """
        Arguments:

        config_mapping
            The raw configuration mapping.

        Keyword arguments override the settings from the mapping.
        """

        super().__init__(config_mapping)
        if is_structured(config_mapping):
            routes = config_mapping['routes']
            settings_mapping = dict(config_mapping.get('settings', {}))
            unknown = set(config_mapping) - {'routes', 'settings'}
            if unknown:
                raise ValueError(
                    "unsupported configuration tables: %s" % ', '.join(
                        sorted(unknown)))
        else:
            routes = config_mapping
            settings_mapping = {}
        settings_mapping.update(settings)
        self.settings = Settings.from_config(settings_mapping)
        self.routes = build_route_table(routes)

    def url_builder(self, environ=None):
        return URLBuilder(
            self.routes,
            base_dir=self.settings.base_dir,
            default_host=self.settings.default_host,
            host_keys=self.settings.host_keys,
            environ=environ,
        )

    def router(
            self, authenticator=None, resolver=None, error_pages=None,
            interactive=None):
        """
        Construct a Router for the routes.

        Arguments

        authenticator
            The Authenticator for the visibility rules of the routes.
        resolver
            The HandlerResolver.
        error_pages
            The ErrorPages.
        interactive
            Overrides the interactive setting.
        """

        if interactive is None:
            interactive = self.settings.interactive
        return Router(
            self.routes,
            resolver=resolver,
            guard=AccessGuard(authenticator, interactive=interactive),
            error_pages=error_pages,
            static_root=self.settings.static_root,
            url_builder=self.url_builder(),
        )
