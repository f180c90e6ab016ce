"""
Visibility rules for routes, and the guard that enforces them through
some external authentication and permission service.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

LOG_IN_LEVEL_ALL = 'all'


class VisibilityRule(object):
    """
    The permission and login requirement attached to a route.
    """

    def __init__(self, application, permissions=(), login_level=None):
        """
        Arguments

        application
            The name of the application the permissions belong to.
        permissions
            A single permission or a sequence of permissions.
        login_level
            The login level to pass to the authenticator, defaults to
            LOG_IN_LEVEL_ALL.
        """

        if isinstance(permissions, str):
            permissions = [permissions]
        self.application = application
        self.permissions = tuple(permissions)
        self.login_level = (
            LOG_IN_LEVEL_ALL if login_level is None else login_level)

    @classmethod
    def from_config(cls, value):
        """
        Construct a rule from either the positional list form of
        [application, permissions, login_level] or a mapping.
        """

        if isinstance(value, Mapping):
            unknown = set(value) - {
                'application', 'permissions', 'login_level', 'loginLevel'}
            if unknown:
                raise ValueError(
                    "unsupported visibility keys: %s" % ', '.join(
                        sorted(unknown)))
            return cls(
                value.get('application', ''),
                value.get('permissions', ()),
                value.get('login_level', value.get('loginLevel')),
            )

        if isinstance(value, str) or not isinstance(value, Sequence):
            raise ValueError(
                "visibility must be a list or a table, not %r" % (value,))
        if len(value) > 3:
            raise ValueError(
                "visibility list accepts at most 3 items: application, "
                "permissions and login level"
            )
        # missing trailing items take their defaults.
        application, permissions, login_level = (
            list(value) + ['', (), None][len(value):])
        return cls(application, permissions, login_level)

    def __eq__(self, other):
        return (
            type(self) is type(other) and
            self.application == other.application and
            self.permissions == other.permissions and
            self.login_level == other.login_level
        )

    def __repr__(self):
        return '<VisibilityRule %r %r %r>' % (
            self.application, self.permissions, self.login_level)


class Authenticator(ABC):
    """
    The interface to the external authentication and permission
    service that the guard consults.
    """

    @abstractmethod
    def is_logged_in(self):
        """
        Whether the current user is authenticated.
        """

    @abstractmethod
    def check_permissions(self, application, login_level, permissions):
        """
        Whether the current user has the permissions in the application
        at the given login level.
        """

    @abstractmethod
    def current_user(self):
        """
        The current user, or None.
        """

    @abstractmethod
    def login(self, return_url):
        """
        Challenge the user to log in, returning to return_url after.
        """


class AccessGuard(object):

    def __init__(self, authenticator=None, interactive=True):
        """
        Arguments

        authenticator
            The Authenticator to consult.  Routes with a visibility
            rule are denied if this is not provided.
        interactive
            False when running in a background (i.e. cli or cron)
            context, where a login challenge must never be triggered.
        """

        self.authenticator = authenticator
        self.interactive = interactive

    def can_access(self, rule, return_url=None):
        """
        Return whether the current user may access something guarded by
        the provided rule.  Anonymous users in an interactive context
        will be challenged to log in as a side effect of denial.
        """

        if rule is None:
            return True

        if self.authenticator is None:
            logger.warning(
                "denying access to application '%s': no authenticator",
                rule.application,
            )
            return False

        if self.authenticator.check_permissions(
                rule.application, rule.login_level, list(rule.permissions)):
            return True

        if self.interactive and not self.authenticator.is_logged_in():
            logger.info(
                "anonymous access to application '%s' denied; "
                "challenging for login with return url '%s'",
                rule.application, return_url,
            )
            self.authenticator.login(return_url)
            return False

        logger.info(
            "access denied for user %r to application '%s'",
            self.authenticator.current_user(), rule.application,
        )
        return False
