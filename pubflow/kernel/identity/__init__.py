"""
Identity - access token verification.
"""

from pubflow.kernel.identity.jwt import AccessTokenPayload, TokenVerifier

__all__ = [
    "AccessTokenPayload",
    "TokenVerifier",
]
