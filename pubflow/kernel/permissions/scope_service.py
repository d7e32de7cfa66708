"""
Scope checks for site-level actions.

Scopes come from the user's system role (platform admins and service accounts
hold every scope) and from the roles they hold on the site in question.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from pubflow import scopes
from pubflow.kernel.models.user import SiteRoleName, SystemRole, User

# System roles that bypass site-level checks
SUPERUSER_ROLES = frozenset({SystemRole.ADMIN, SystemRole.SERVICE})

SITE_ROLE_SCOPES: Dict[SiteRoleName, FrozenSet[str]] = {
    SiteRoleName.ADMIN: frozenset({
        scopes.SITE_READ,
        scopes.SITE_UPDATE,
        scopes.SITE_SUBMISSIONS_LIST,
        scopes.SITE_SUBMISSIONS_READ,
        scopes.SITE_SUBMISSIONS_CREATE,
        scopes.SITE_SUBMISSIONS_UPDATE,
        scopes.SITE_SUBMISSIONS_DELETE,
        scopes.SITE_SUBMISSIONS_VERSIONS_CREATE,
        scopes.SITE_PUBLISHING,
    }),
    SiteRoleName.EDITOR: frozenset({
        scopes.SITE_READ,
        scopes.SITE_SUBMISSIONS_LIST,
        scopes.SITE_SUBMISSIONS_READ,
        scopes.SITE_SUBMISSIONS_UPDATE,
        scopes.SITE_SUBMISSIONS_VERSIONS_CREATE,
        scopes.SITE_PUBLISHING,
    }),
    SiteRoleName.SUBMITTER: frozenset({
        scopes.SITE_READ,
        scopes.SITE_SUBMISSIONS_LIST,
        scopes.SITE_SUBMISSIONS_READ,
        scopes.SITE_SUBMISSIONS_CREATE,
        scopes.SITE_SUBMISSIONS_VERSIONS_CREATE,
    }),
    SiteRoleName.REVIEWER: frozenset({scopes.SITE_READ}),
    SiteRoleName.PUBLIC: frozenset({scopes.SITE_READ}),
}


class ScopeService:
    """
    Answers "may this user do X on this site?".

    Synchronous: works over the user's eagerly loaded site roles, so it can be
    called before any job or write happens.
    """

    def __init__(self, role_scopes: Optional[Dict[SiteRoleName, FrozenSet[str]]] = None):
        self.role_scopes = role_scopes or SITE_ROLE_SCOPES

    def site_scopes(self, user: User, site_name: str) -> FrozenSet[str]:
        granted = set()
        for site_role in user.site_roles:
            if site_role.site_name == site_name:
                granted |= self.role_scopes.get(SiteRoleName(site_role.role), frozenset())
        return frozenset(granted)

    def has_scope(self, user: Optional[User], scope: str, site_name: str) -> bool:
        if user is None or not user.is_active:
            return False
        if SystemRole(user.system_role) in SUPERUSER_ROLES:
            return True
        return scope in self.site_scopes(user, site_name)

    def has_scopes(self, user: Optional[User], required: Iterable[str], site_name: str) -> bool:
        """True when the user holds every scope in required."""
        return all(self.has_scope(user, scope, site_name) for scope in required)

    def missing_scopes(self, user: Optional[User], required: Iterable[str], site_name: str) -> list:
        return [scope for scope in required if not self.has_scope(user, scope, site_name)]
