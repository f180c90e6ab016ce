"""
This module provides the route table, which finds the route that a
requested path resolves to.
"""

import logging
from collections.abc import Mapping

from concourse.routing.access import VisibilityRule
from concourse.routing.pattern import (
    MismatchKind,
    RoutePattern,
    normalize_path,
    split_path,
)

logger = logging.getLogger(__name__)


class Breadcrumb(object):
    """
    A breadcrumb, linking to either a url or the alias of some route.
    """

    def __init__(self, text, url=None, alias=None, params=None):
        if (url is None) == (alias is None):
            raise ValueError(
                "breadcrumb '%s' must define exactly one of url or alias" %
                text
            )
        self.text = text
        self.url = url
        self.alias = alias
        self.params = {} if params is None else dict(params)

    @classmethod
    def from_config(cls, value):
        """
        Construct from a mapping of text and url or alias, where the
        alias may be a single entry mapping of alias to params.
        """

        if 'text' not in value:
            raise ValueError("breadcrumb %r missing the 'text' key" % (value,))
        alias = value.get('alias')
        params = None
        if isinstance(alias, Mapping):
            if len(alias) != 1:
                raise ValueError(
                    "breadcrumb alias mapping must have exactly one entry")
            (alias, params), = alias.items()
        return cls(value['text'], url=value.get('url'), alias=alias,
                   params=params)

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        return '<Breadcrumb %r>' % (self.text,)


class Route(object):
    """
    The route descriptor.  Instances are immutable once created.
    """

    __slots__ = ('alias', 'pattern', 'handler', 'visibility', 'breadcrumbs')

    def __init__(
            self, alias, pattern, handler=None, visibility=None,
            breadcrumbs=()):
        """
        Arguments

        alias
            The unique name for this route.
        pattern
            The RoutePattern, or a string to be compiled into one.
        handler
            The handler reference; either a string to be resolved by a
            HandlerResolver, or a callable.  If None, the pattern will
            be treated as a path to a static file.
        visibility
            A VisibilityRule, or its configuration form.
        breadcrumbs
            A sequence of Breadcrumb, or their configuration form.
        """

        if not isinstance(pattern, RoutePattern):
            pattern = RoutePattern(pattern)
        if visibility is not None and not isinstance(
                visibility, VisibilityRule):
            visibility = VisibilityRule.from_config(visibility)

        object.__setattr__(self, 'alias', alias)
        object.__setattr__(self, 'pattern', pattern)
        object.__setattr__(self, 'handler', handler)
        object.__setattr__(self, 'visibility', visibility)
        object.__setattr__(self, 'breadcrumbs', tuple(
            crumb if isinstance(crumb, Breadcrumb) else
            Breadcrumb.from_config(crumb)
            for crumb in breadcrumbs
        ))

    def __setattr__(self, attr, value):
        raise AttributeError("'%s' is immutable" % type(self).__name__)

    def __delattr__(self, attr):
        raise AttributeError("'%s' is immutable" % type(self).__name__)

    @property
    def route(self):
        return self.pattern.raw

    def __eq__(self, other):
        return type(self) is type(other) and all(
            getattr(self, attr) == getattr(other, attr)
            for attr in self.__slots__
        )

    def __repr__(self):
        return '<Route %s %r>' % (self.alias, self.pattern.raw)


class Found(object):
    """
    The route that was found, along with the params from the path.
    """

    status = 200

    def __init__(self, alias, route, params):
        self.alias = alias
        self.route = route
        self.params = params

    def __bool__(self):
        return True

    def __iter__(self):
        yield self.alias
        yield self.params

    def __repr__(self):
        return '<Found %s %r>' % (self.alias, self.params)


class NotFound(object):
    """
    No route was found; the kind records whether any candidate route
    had the right shape but was rejected by a placeholder constraint.
    """

    def __init__(self, kind=MismatchKind.STRUCTURAL):
        self.kind = kind

    @property
    def status(self):
        if self.kind is MismatchKind.CONSTRAINT:
            return 400
        return 404

    def __bool__(self):
        return False

    def __eq__(self, other):
        return type(self) is type(other) and self.kind is other.kind

    def __repr__(self):
        return '<NotFound %d>' % self.status


class RouteTable(Mapping):
    """
    An ordered, read-only mapping of alias to Route.  The order in which
    routes are declared is significant, as the first route that fully
    matches a requested path is the one that will be used.
    """

    def __init__(self, routes=()):
        """
        Arguments

        routes
            An iterable of Route objects.
        """

        self.__routes = {}
        for route in routes:
            if route.alias in self.__routes:
                raise ValueError(
                    "duplicate route alias '%s'" % (route.alias,))
            self.__routes[route.alias] = route

    def __getitem__(self, alias):
        return self.__routes[alias]

    def __iter__(self):
        return iter(self.__routes)

    def __len__(self):
        return len(self.__routes)

    def __repr__(self):
        return '<RouteTable %r>' % list(self.__routes)

    def find(self, path):
        """
        Find the first route that matches the path.

        Returns a Found, or a NotFound if none of the routes match.
        """

        segments = split_path(normalize_path(path))
        kind = MismatchKind.STRUCTURAL
        for alias, route in self.__routes.items():
            pattern = route.pattern
            if (not pattern.has_wildcard and
                    len(pattern.segments) != len(segments)):
                continue
            result = pattern.match(segments)
            if result:
                logger.debug("path '%s' matched route '%s'", path, alias)
                return Found(alias, route, result.params)
            if result.kind is MismatchKind.CONSTRAINT:
                # sticky for the remainder of this lookup
                kind = MismatchKind.CONSTRAINT

        logger.debug("no route found for path '%s' (%s)", path, kind.value)
        return NotFound(kind)

    __call__ = find

    def alias_for_handler(self, handler):
        """
        Return the alias of the first route with the handler, or None.
        """

        for alias, route in self.__routes.items():
            if route.handler == handler:
                return alias
        return None
