"""
Dispatching of requests to the handlers of the routes they resolve to.
"""

import logging
from importlib.metadata import EntryPoint
from pathlib import Path
from urllib.parse import quote

from concourse.routing.access import AccessGuard
from concourse.routing.controller import Controller
from concourse.routing.exceptions import (
    AliasNotFoundError,
    HandlerResolutionError,
)
from concourse.routing.http import (
    ErrorPages,
    serve_file,
    to_response,
)
from concourse.routing.pattern import normalize_path
from concourse.routing.routing import Route
from concourse.routing.urls import URLBuilder

logger = logging.getLogger(__name__)


def split_handler_reference(ref):
    """
    Split a 'package.module:Class.method' reference into the reference
    to the owner and the name of the method.  References without a
    method, such as 'package.module:function', have None as the method.
    """

    module, sep, attr = ref.partition(':')
    if not (module and sep and attr):
        raise HandlerResolutionError(
            ref, "expected the form 'package.module:Class.method'")
    owner, dot, method = attr.rpartition('.')
    if not dot:
        return ref, None
    return '%s:%s' % (module, owner), method


class ResolvedHandler(object):
    """
    A handler that has been resolved to the owning object and the name
    of the method to invoke on it, if any.
    """

    def __init__(self, owner, method=None):
        self.owner = owner
        self.method = method

    def bind(self, alias, router=None, environ=None):
        """
        Return a callable for the handler.  Handler classes are
        instantiated with the alias; controllers also receive the
        router and the request environ.
        """

        if self.method is None:
            return self.owner

        target = self.owner
        if isinstance(target, type):
            if issubclass(target, Controller):
                target = target(alias, router=router, environ=environ)
            else:
                target = target(alias)

        try:
            return getattr(target, self.method)
        except AttributeError:
            raise HandlerResolutionError(
                '%r.%s' % (self.owner, self.method), 'no such method'
            ) from None

    def __eq__(self, other):
        return (
            type(self) is type(other) and
            self.owner is other.owner and
            self.method == other.method
        )

    def __repr__(self):
        return '<ResolvedHandler %r %s>' % (self.owner, self.method)


class HandlerResolver(object):
    """
    Resolves handler references into handlers.  Handlers may be
    registered under a name upfront, otherwise string references are
    imported as entry points; each reference is only resolved once.
    """

    def __init__(self, handlers=None):
        """
        Arguments

        handlers
            A mapping of name to a callable, or to a 2-tuple of the
            owner and method name, to register.
        """

        self.__registry = {}
        self.__cache = {}
        for name, target in (handlers or {}).items():
            if isinstance(target, tuple):
                self.register(name, *target)
            else:
                self.register(name, target)

    def register(self, name, target, method=None):
        if method is None and not callable(target):
            raise TypeError("%r is not callable" % (target,))
        self.__registry[name] = ResolvedHandler(target, method)
        self.__cache.pop(name, None)

    def is_reference(self, ref):
        """
        Whether the ref looks like a handler reference rather than an
        alias.
        """

        return callable(ref) or (isinstance(ref, str) and (
            ref in self.__registry or ':' in ref))

    def _load(self, ref):
        owner_ref, method = split_handler_reference(ref)
        try:
            owner = EntryPoint(
                name='handler', value=owner_ref, group='concourse.routing',
            ).load()
        except (ImportError, AttributeError) as e:
            raise HandlerResolutionError(ref, str(e)) from None
        logger.debug("resolved handler '%s' to %r", ref, owner)
        return ResolvedHandler(owner, method)

    def resolve(self, ref):
        if callable(ref):
            return ResolvedHandler(ref)
        if ref in self.__registry:
            return self.__registry[ref]
        if ref not in self.__cache:
            self.__cache[ref] = self._load(ref)
        return self.__cache[ref]


class Router(object):
    """
    Dispatches requests to the handlers of the routes in a route table.
    """

    def __init__(
            self, table, resolver=None, guard=None, error_pages=None,
            static_root=None, url_builder=None):
        """
        Arguments

        table
            The RouteTable to find routes from.
        resolver
            The HandlerResolver for the handlers of the routes.
        guard
            The AccessGuard that enforces the visibility rules; if not
            provided, routes with visibility rules are always denied.
        error_pages
            The ErrorPages for the routing outcomes.
        static_root
            The directory that routes without handlers serve files from,
            defaults to the current working directory.
        url_builder
            The URLBuilder for the table.
        """

        self.table = table
        self.resolver = HandlerResolver() if resolver is None else resolver
        self.guard = AccessGuard() if guard is None else guard
        self.error_pages = ErrorPages() if error_pages is None else error_pages
        self.static_root = Path('.' if static_root is None else static_root)
        self.url_builder = (
            URLBuilder(table) if url_builder is None else url_builder)

    def return_url(self, environ):
        """
        The url of the current request, for returning to after login.
        """

        if not environ:
            return None
        uri = environ.get('REQUEST_URI')
        if not uri:
            uri = quote(
                environ.get('SCRIPT_NAME', '') + environ.get('PATH_INFO', ''))
            if environ.get('QUERY_STRING'):
                uri += '?' + environ['QUERY_STRING']
        return 'https://' + self.url_builder.host(environ) + uri

    def handle_request(self, path, environ=None):
        """
        Handle the request for the path, returning a Response.

        Arguments

        path
            The path from the application root, without query string.
        environ
            The request environ.
        """

        result = self.table.find(normalize_path(path))
        if not result:
            logger.info(
                "no route for '%s'; responding with %d", path, result.status)
            return self.error_pages.for_status(result.status)
        return to_response(self.run_handler(
            result.alias, result.route, result.params, environ=environ))

    __call__ = handle_request

    def serve_static(self, route, params):
        root = self.static_root.resolve()
        path = (root / route.pattern.fill(params)).resolve()
        try:
            path.relative_to(root)
        except ValueError:
            logger.warning(
                "static path '%s' for route '%s' outside of '%s'",
                path, route.alias, root,
            )
            return self.error_pages.not_found()
        return serve_file(path)

    def invoke(self, alias, route, params, environ=None):
        handler = self.resolver.resolve(route.handler).bind(
            alias, router=self, environ=environ)
        if not params:
            return handler()
        # the whole mapping is the one argument to the handler.
        return handler(params)

    def run_handler(self, alias, route, params=None, environ=None):
        """
        Run the handler for the route, if the route is visible to the
        current user.  Routes without a handler serve the file at the
        path of the route.

        Returns whatever the handler returned, or a Response.
        """

        params = {} if params is None else params
        if not self.guard.can_access(
                route.visibility, self.return_url(environ)):
            return self.error_pages.access_denied()

        if route.handler is None:
            return self.serve_static(route, params)

        return self.invoke(alias, route, params, environ=environ)

    def forward_route(self, alias):
        """
        Find the alias and the route to forward to.  The alias may
        instead be a handler reference, for which the route with that
        handler is used, or a route is made for it if there is none.
        """

        if isinstance(alias, str) and alias in self.table:
            return alias, self.table[alias]

        if self.resolver.is_reference(alias):
            found = self.table.alias_for_handler(alias)
            if found is not None:
                return found, self.table[found]
            logger.debug("forwarding to unrouted handler %r", alias)
            return None, Route(None, '/', handler=alias)

        raise AliasNotFoundError(alias)

    def forward(self, alias, params=None, environ=None):
        """
        Forward onto the handler for the alias or handler reference.
        """

        alias, route = self.forward_route(alias)
        return self.run_handler(alias, route, params, environ=environ)

    def build_url(self, alias, params=None, base_dir='', full_url=False,
                  environ=None):
        return self.url_builder.build(
            alias, params, base_dir=base_dir, full_url=full_url,
            environ=environ)
