"""
API Key Validator
=================
Combines the protection policy and the provided key into one decision.

    allowed = gate disabled
              or no protected method requested
              or provided key matches the configured key
"""

import hmac
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .config import ApiKeyAuthConfig
from .errors import RpcError, UNAUTHORIZED_ERROR, UnauthorizedAccess
from .methods import extract_methods
from .policy import requires_auth


@dataclass(frozen=True)
class AuthDecision:
    """Result of an authorization check. Carries no side effects."""
    allowed: bool
    error: Optional[RpcError] = None

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise UnauthorizedAccess()


ALLOWED = AuthDecision(allowed=True)
DENIED = AuthDecision(allowed=False, error=UNAUTHORIZED_ERROR)


def keys_match(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison. A missing or empty key never matches."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def validate_api_key(
    config: ApiKeyAuthConfig,
    methods: Iterable[str],
    provided_key: Optional[str],
) -> AuthDecision:
    """
    Decide whether a request naming ``methods`` may proceed.

    Args:
        config: Gate configuration
        methods: Method names extracted from the request body
        provided_key: Key supplied by the caller, if any

    Returns:
        AuthDecision; denials carry the fixed unauthorized error
    """
    if not config.enabled:
        return ALLOWED
    if not requires_auth(methods, config.protected_set):
        return ALLOWED
    if keys_match(provided_key, config.api_key):
        return ALLOWED
    return DENIED


class ApiKeyValidator:
    """Validator bound to one immutable configuration."""

    def __init__(self, config: ApiKeyAuthConfig):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def check(self, methods: Iterable[str], provided_key: Optional[str]) -> AuthDecision:
        return validate_api_key(self.config, methods, provided_key)

    def check_body(self, body: Any, provided_key: Optional[str]) -> AuthDecision:
        """Check a deserialized JSON-RPC body (single, batch or malformed)."""
        return self.check(extract_methods(body), provided_key)
