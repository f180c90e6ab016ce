class RoutingError(Exception):
    """
    Used to indicate a generic routing error.
    """


class AliasNotFoundError(RoutingError, KeyError):
    """
    This exception should be raised when an alias was requested that is
    not defined by the routing configuration.
    """

    def __init__(self, alias):
        self.alias = alias
        super().__init__(
            "alias '%s' not found in routing configuration" % (alias,))

    def __str__(self):
        # KeyError would otherwise repr the message.
        return self.args[0]


class HandlerResolutionError(RoutingError):
    """
    This exception should be raised when a handler reference cannot be
    resolved to something that may be invoked.
    """

    def __init__(self, handler, reason=''):
        self.handler = handler
        message = "handler '%s' could not be resolved" % (handler,)
        if reason:
            message = '%s: %s' % (message, reason)
        super().__init__(message)


class UnresolvedPlaceholderError(RoutingError, ValueError):
    """
    This exception should be raised when a url is built for a route
    without supplying values for all of its placeholders.
    """

    def __init__(self, alias, names):
        self.alias = alias
        self.names = tuple(names)
        super().__init__(
            "route '%s' missing values for placeholders: %s" % (
                alias, ', '.join(self.names)))
