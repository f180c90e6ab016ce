"""
The base controller, for the handlers of an application.
"""

import logging
from abc import ABC, abstractmethod

from concourse.routing.access import LOG_IN_LEVEL_ALL
from concourse.routing.http import redirect

logger = logging.getLogger(__name__)


class Controller(ABC):
    """
    Base class for controllers.  Instances are created by the router
    with the alias of the route being dispatched, the router itself and
    the environ for the current request.

    Subclasses must implement get_routing_configuration, which is used
    to construct a router when the controller was not created by one.
    """

    def __init__(self, alias=None, router=None, environ=None):
        self.alias = alias
        self.router = router
        self.environ = environ
        self.breadcrumbs = []

    @abstractmethod
    def get_routing_configuration(self):
        """
        Returns the Configuration for the application.
        """

    def get_router(self):
        if self.router is None:
            self.router = self.get_routing_configuration().router()
        return self.router

    @property
    def authenticator(self):
        return self.get_router().guard.authenticator

    def build_url(self, alias, params=None, base_dir='', full_url=False):
        return self.get_router().build_url(
            alias, params, base_dir=base_dir, full_url=full_url,
            environ=self.environ,
        )

    def forward(self, alias, params=None):
        return self.get_router().forward(alias, params, environ=self.environ)

    def set_breadcrumbs(self, breadcrumbs):
        """
        Sets the breadcrumbs; a list of dicts with the text and either
        the url or the alias.
        """

        self.breadcrumbs = list(breadcrumbs)
        return self

    def get_breadcrumbs(self):
        """
        Gets the breadcrumbs, with aliases converted into urls.  If none
        were set, the breadcrumbs of the current route are used.
        """

        url_builder = self.get_router().url_builder
        if self.breadcrumbs:
            return url_builder.urlify(self.breadcrumbs)
        if self.alias is None or self.alias not in url_builder.table:
            return []
        return url_builder.breadcrumbs(self.alias)

    def is_logged_in(self):
        authenticator = self.authenticator
        return authenticator is not None and authenticator.is_logged_in()

    def check_permissions(self, application, permissions, login_level=None):
        if login_level is None:
            login_level = LOG_IN_LEVEL_ALL
        if isinstance(permissions, str):
            permissions = [permissions]
        authenticator = self.authenticator
        if authenticator is None:
            return False
        return authenticator.check_permissions(
            application, login_level, list(permissions))

    def login(self, return_url=''):
        authenticator = self.authenticator
        if authenticator is None:
            logger.warning(
                "cannot challenge for login for '%s': no authenticator",
                self.alias,
            )
            return
        if not return_url:
            return_url = self.get_router().return_url(self.environ)
        authenticator.login(return_url)

    def redirect(self, path='/', status=303):
        return redirect(path, status)
