"""
External override slots.

Override slots are side-channel values (conventionally environment variables)
that take precedence over the environment table. They are read on every call
that consults them and never snapshotted, so test orchestration can inject
overrides between calls.

Slots:
    TEST_ENV                 Active environment name
    BASE_URL                 Full base URL, returned verbatim
    ENV_PREFIX               Environment prefix used when building a URL
    SUBDOMAIN                Subdomain used when building a URL
    <KEY>_USERNAME           Username for credential key <KEY>
    <KEY>_PASSWORD           Password for credential key <KEY>

<KEY> is derived from the credential key by derive_override_key().
"""

import os
import re
from collections.abc import Mapping
from typing import Protocol

from .constants import PASSWORD_SUFFIX, USERNAME_SUFFIX

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def derive_override_key(credential_key: str) -> str:
    """
    Derive the override slot prefix for a credential key.

    Upper-cases the key, then replaces every character outside [A-Z0-9]
    with an underscore. Override lookups must use exactly this derivation;
    any other spelling of the slot name is silently missed.

    Examples:
        >>> derive_override_key("RBCClient")
        'RBCCLIENT'
        >>> derive_override_key("read-only.user")
        'READ_ONLY_USER'
    """
    return _NON_ALNUM.sub("_", credential_key.upper())


def username_slot(credential_key: str) -> str:
    return derive_override_key(credential_key) + USERNAME_SUFFIX


def password_slot(credential_key: str) -> str:
    return derive_override_key(credential_key) + PASSWORD_SUFFIX


class OverrideSource(Protocol):
    """Protocol for reading named override slots."""

    def get(self, slot: str) -> str | None:
        """Return the slot value, or None when the slot is not set."""
        ...


class EnvOverrides:
    """
    Override source backed by the process environment.

    An empty value counts as unset.

    Example:
        overrides = EnvOverrides()
        overrides.get("BASE_URL")  # None unless BASE_URL is exported
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """
        Args:
            environ: Mapping to read from (defaults to os.environ, read live)
        """
        self._environ = environ

    def get(self, slot: str) -> str | None:
        environ = self._environ if self._environ is not None else os.environ
        value = environ.get(slot)
        return value or None


class MappingOverrides:
    """
    Override source backed by a plain, mutable dictionary.

    Useful for tests and for embedding the resolver without touching the
    process environment.

    Example:
        overrides = MappingOverrides({"ENV_PREFIX": "qa1"})
        overrides.set("BASE_URL", "http://localhost:8080")
    """

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, slot: str) -> str | None:
        return self._values.get(slot) or None

    def set(self, slot: str, value: str) -> None:
        self._values[slot] = value

    def unset(self, slot: str) -> None:
        self._values.pop(slot, None)

    def clear(self) -> None:
        self._values.clear()
