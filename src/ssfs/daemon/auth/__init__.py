"""SSFS authentication package — key lookup and the auth gate.

Re-exports public API so consumers can use:
    from ..auth import IdentityStore, authenticate
"""

from .identity import CredentialLookup, IdentityStore, LookupStatus
from .gate import AuthDecision, authenticate

__all__ = [
    "CredentialLookup",
    "IdentityStore",
    "LookupStatus",
    "AuthDecision",
    "authenticate",
]
