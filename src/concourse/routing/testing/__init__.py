from concourse.routing.access import Authenticator
from concourse.routing.config import Configuration
from concourse.routing.controller import Controller
from concourse.routing.dispatch import split_handler_reference
from concourse.routing.exceptions import HandlerResolutionError
from concourse.routing.routing import Route

routing_config = {
    'index': {
        'route': '/',
        'handler': 'concourse.routing.testing:SampleController.index',
    },
    'indexTwo': {
        'route': '/indexTwo/{id}',
        'handler': 'concourse.routing.testing:SampleController.index_two',
        'breadCrumbs': [{'url': 'Some Url', 'text': 'text'}],
    },
    'indexTwoKey': {
        'route': '/indexTwo/{id}/{key}',
        'handler': 'concourse.routing.testing:SampleController.index_three',
    },
}


class SampleController(Controller):

    def get_routing_configuration(self):
        return Configuration(routing_config)

    def index(self):
        return 'SampleController index()'

    def index_two(self, params):
        return 'SampleController index_two(%s)' % params['id']

    def index_three(self, params):
        return 'SampleController index_three(%s, %s)' % (
            params['id'], params['key'])

    def crumbs(self):
        return self.get_breadcrumbs()


class AlternateController(SampleController):

    def index(self):
        return 'AlternateController index()'

    def index_two(self, params):
        return 'AlternateController index_two(%s)' % params['id']


class Plain(object):
    """
    A handler class that is not a controller.
    """

    def __init__(self, alias):
        self.alias = alias

    def show(self, params=None):
        return '%s show(%r)' % (self.alias, params)


def echo(params=None):
    return params


class StubAuthenticator(Authenticator):
    """
    An in-memory authenticator, granting the listed permissions per
    application to the user, if one is logged in.
    """

    def __init__(self, user=None, permissions=None):
        self.user = user
        self.permissions = {} if permissions is None else permissions
        self.login_requests = []
        self.checks = []

    def is_logged_in(self):
        return self.user is not None

    def check_permissions(self, application, login_level, permissions):
        self.checks.append((application, login_level, permissions))
        if self.user is None:
            return False
        granted = self.permissions.get(application, ())
        return all(permission in granted for permission in permissions)

    def current_user(self):
        return self.user

    def login(self, return_url):
        self.login_requests.append(return_url)


def forward_with_mapping(router, alias, params, mapping, environ=None):
    """
    Forward onto the alias or handler reference through the router, but
    with the owner of the handler substituted through the mapping, such
    that tests may forward to their own test controllers.

    Arguments

    router
        The Router
    alias
        The alias or handler reference to forward to.
    params
        The params for the handler.
    mapping
        A mapping of owner reference ('package.module:Class') to the
        reference of the owner to use instead.
    """

    alias, route = router.forward_route(alias)
    if not isinstance(route.handler, str):
        raise HandlerResolutionError(
            route.handler, "only string references may be remapped")
    owner, method = split_handler_reference(route.handler)
    if owner not in mapping:
        raise HandlerResolutionError(
            route.handler, "'%s' not found in the mapping" % owner)
    handler = mapping[owner] if method is None else '%s.%s' % (
        mapping[owner], method)
    route = Route(
        route.alias, route.pattern, handler=handler,
        visibility=route.visibility, breadcrumbs=route.breadcrumbs,
    )
    return router.run_handler(alias, route, params, environ=environ)
