"""
API Key Gate Configuration
==========================
Immutable configuration for the RPC API key gate.

Usage:
    from rpc_guard.config import ApiKeyAuthConfig

    config = ApiKeyAuthConfig(
        api_key=settings.BUNDLER_API_KEY,
        protected_methods=("eth_sendUserOperation",),
    )
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple, FrozenSet

# Methods the bundler deployment protects when PROTECTED_METHODS is not set
DEFAULT_PROTECTED_METHODS: Tuple[str, ...] = (
    "eth_sendUserOperation",
    "pimlico_sendUserOperationNow",
    "boost_sendUserOperation",
    "eth_estimateUserOperationGas",
)

API_KEY_ENV = "BUNDLER_API_KEY"
API_KEY_FALLBACK_ENV = "API_KEY"
PROTECTED_METHODS_ENV = "PROTECTED_METHODS"


def parse_protected_methods(value: str) -> Tuple[str, ...]:
    """Split a comma-separated method list, dropping blanks and duplicates."""
    methods = []
    for item in value.split(","):
        name = item.strip()
        if name and name not in methods:
            methods.append(name)
    return tuple(methods)


@dataclass(frozen=True)
class ApiKeyAuthConfig:
    """
    Configuration for the RPC API key gate.

    An empty or missing ``api_key`` disables the gate entirely, whatever
    ``protected_methods`` holds.
    """

    api_key: Optional[str] = None
    protected_methods: Tuple[str, ...] = ()

    _protected_set: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        methods = self.protected_methods
        if isinstance(methods, str):
            raise ValueError("protected_methods must be a sequence of names, not a string")
        methods = tuple(methods)
        for name in methods:
            if not isinstance(name, str):
                raise ValueError(f"protected method name must be a string: {name!r}")
        if self.api_key is not None and not isinstance(self.api_key, str):
            raise ValueError("api_key must be a string")

        object.__setattr__(self, "protected_methods", methods)
        object.__setattr__(self, "_protected_set", frozenset(methods))

    @property
    def enabled(self) -> bool:
        """True when a non-empty key is configured."""
        return bool(self.api_key)

    @property
    def protected_set(self) -> FrozenSet[str]:
        return self._protected_set

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ApiKeyAuthConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            ApiKeyAuthConfig read from BUNDLER_API_KEY (or API_KEY) and
            PROTECTED_METHODS
        """
        env = os.environ if environ is None else environ
        api_key = env.get(API_KEY_ENV) or env.get(API_KEY_FALLBACK_ENV) or None

        raw_methods = env.get(PROTECTED_METHODS_ENV)
        if raw_methods is None:
            methods: Iterable[str] = DEFAULT_PROTECTED_METHODS
        else:
            methods = parse_protected_methods(raw_methods)

        return cls(api_key=api_key, protected_methods=tuple(methods))


SERVICE_NAME_ENV = "SERVICE_NAME"
LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_JSON_ENV = "LOG_JSON"


@dataclass(frozen=True)
class ServiceSettings:
    """Process-level settings for the application factory and logging."""

    service_name: str = "bundler-rpc"
    log_level: str = "INFO"
    log_json: bool = True

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServiceSettings":
        """Read SERVICE_NAME, LOG_LEVEL and LOG_JSON."""
        env = os.environ if environ is None else environ
        return cls(
            service_name=env.get(SERVICE_NAME_ENV) or cls.service_name,
            log_level=(env.get(LOG_LEVEL_ENV) or cls.log_level).upper(),
            log_json=env.get(LOG_JSON_ENV, "true").lower() in ("1", "true", "yes"),
        )
