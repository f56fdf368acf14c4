"""Credential resolution for the API key.

The wrapper accepts either a literal ``api_key`` option or an
``api_key_id`` reference. References are resolved here, against a chain of
pluggable backends:

    ┌────────────────────────────────────────────────────────────┐
    │ api_key_id = "secret:env:STRIPE_KEY"     # environment var  │
    │ api_key_id = "secret:file:/run/secrets/stripe"  # file      │
    │ api_key_id = "stripe_key"                # any backend      │
    └────────────────────────────────────────────────────────────┘
                         │
                         ▼
    SecretsResolver(backends=[EnvSecretBackend(), FileSecretBackend()])
                         │
                         ▼
    SecretValue("sk_test_...")   # repr/str are redacted

Examples:
    >>> resolver = SecretsResolver([DictSecretBackend({"stripe_key": "sk_test"})])
    >>> resolver.resolve_reference("stripe_key")
    'sk_test'

Guardrails:
    - Resolved keys are wrapped in ``SecretValue`` before being stored.
    - Never log a resolved key; log the reference instead.
"""

from __future__ import annotations

import os
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class MissingSecretError(Exception):
    """Raised when a secret cannot be resolved from any backend."""

    def __init__(self, key: str, tried_backends: list[str] | None = None):
        self.key = key
        self.tried_backends = tried_backends or []

        msg = f"Secret not found: {key}"
        if tried_backends:
            msg += f" (tried: {', '.join(tried_backends)})"
        super().__init__(msg)


class SecretResolutionError(Exception):
    """Raised when a secret reference is malformed or names an unknown backend."""


# ---------------------------------------------------------------------------
# SecretValue wrapper
# ---------------------------------------------------------------------------


class SecretValue:
    """Wrapper that keeps a credential out of logs and reprs.

    Example:
        >>> key = SecretValue("sk_live_123")
        >>> str(key)
        '[REDACTED]'
        >>> key.get_secret()
        'sk_live_123'
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    def get_secret(self) -> str:
        """Get the actual secret value."""
        return self._value

    def __str__(self) -> str:
        return "[REDACTED]"

    def __repr__(self) -> str:
        return "SecretValue('[REDACTED]')"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretValue):
            return self._value == other._value
        return False

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class SecretBackend(ABC):
    """Abstract base for secret backends."""

    name: str = "backend"

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Return the secret value, or None if this backend does not have it."""
        ...


class EnvSecretBackend(SecretBackend):
    """Resolve secrets from environment variables.

    Tries ``{KEY}`` then ``STRIPE_SPINE_SECRET_{KEY}``.
    """

    name = "env"

    def get(self, name: str) -> str | None:
        key_upper = name.upper()
        for candidate in (key_upper, f"STRIPE_SPINE_SECRET_{key_upper}"):
            value = os.environ.get(candidate)
            if value is not None:
                return value
        return None


class FileSecretBackend(SecretBackend):
    """Resolve secrets from files in a directory (Docker/Kubernetes secrets).

    File contents are cached after the first read.
    """

    name = "file"

    def __init__(self, secrets_dir: str | Path = "/run/secrets"):
        self.secrets_dir = Path(secrets_dir)
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> str | None:
        with self._lock:
            if name in self._cache:
                return self._cache[name]

        secret_path = self.secrets_dir / name
        if not secret_path.is_file():
            return None

        try:
            content = secret_path.read_text().strip()
        except OSError:
            return None
        with self._lock:
            self._cache[name] = content
        return content


class DictSecretBackend(SecretBackend):
    """In-memory backend, for tests."""

    name = "dict"

    def __init__(self, secrets: dict[str, str] | None = None):
        self._secrets = dict(secrets) if secrets else {}

    def get(self, name: str) -> str | None:
        return self._secrets.get(name)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

# secret:backend:key  (e.g. secret:env:STRIPE_API_KEY)
_REFERENCE_RE = re.compile(r"^secret:(\w+):(.+)$")

_SENTINEL = object()


class SecretsResolver:
    """Resolve secrets by trying backends in order until one succeeds."""

    def __init__(self, backends: list[SecretBackend] | None = None):
        self._backends: list[SecretBackend] = list(backends) if backends is not None else []

    def resolve(self, key: str, default: Any = _SENTINEL) -> str | None:
        """Resolve a plain key against every backend.

        Raises:
            MissingSecretError: If no backend has the key and no default is given
        """
        tried: list[str] = []
        for backend in self._backends:
            tried.append(backend.name)
            value = backend.get(key)
            if value is not None:
                return value

        if default is not _SENTINEL:
            return default
        raise MissingSecretError(key, tried)

    def resolve_reference(self, reference: str) -> str:
        """Resolve ``secret:<backend>:<key>`` or a plain key.

        ``env`` and ``file`` references are always available, whether or not
        a matching backend is registered; ``file`` takes an absolute path.

        Raises:
            SecretResolutionError: Malformed reference or unknown backend
            MissingSecretError: Secret not found
        """
        match = _REFERENCE_RE.match(reference)
        if match is None:
            if reference.startswith("secret:"):
                raise SecretResolutionError(
                    f"Invalid secret reference format: '{reference}'. "
                    "Expected 'secret:<backend>:<key>'."
                )
            return self.resolve(reference)

        backend_name, key = match.group(1), match.group(2)

        if backend_name == "env":
            value = os.environ.get(key)
            if value is None:
                raise MissingSecretError(key, ["env"])
            return value

        if backend_name == "file":
            path = Path(key)
            try:
                return path.read_text().strip()
            except OSError as e:
                raise MissingSecretError(key, ["file"]) from e

        for backend in self._backends:
            if backend.name == backend_name:
                value = backend.get(key)
                if value is None:
                    raise MissingSecretError(key, [backend_name])
                return value

        raise SecretResolutionError(f"Unknown secret backend '{backend_name}'")


# ---------------------------------------------------------------------------
# Process-wide resolver
# ---------------------------------------------------------------------------

_default_resolver: SecretsResolver | None = None


def get_resolver() -> SecretsResolver:
    """Get the process-wide resolver (env, then /run/secrets)."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = SecretsResolver([EnvSecretBackend(), FileSecretBackend()])
    return _default_resolver


def set_resolver(resolver: SecretsResolver | None) -> None:
    """Replace the process-wide resolver; ``None`` restores the default."""
    global _default_resolver
    _default_resolver = resolver


__all__ = [
    "MissingSecretError",
    "SecretResolutionError",
    "SecretValue",
    "SecretBackend",
    "EnvSecretBackend",
    "FileSecretBackend",
    "DictSecretBackend",
    "SecretsResolver",
    "get_resolver",
    "set_resolver",
]
