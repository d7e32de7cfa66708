"""
Permission gate - scope checks over system and site roles.
"""

from pubflow.kernel.permissions.scope_service import SITE_ROLE_SCOPES, ScopeService

__all__ = [
    "SITE_ROLE_SCOPES",
    "ScopeService",
]
