"""
Environment configuration and credential resolution.

ConfigResolver maps an environment name (explicit, or the active one) to a
base URL, URL paths and named credential pairs, applying override slots on
top of the environment table and failing loudly on missing data.

Each resolver owns its active-environment selector and its cache. Parallel
test workers that need different environments should each hold their own
resolver instead of switching the active environment of a shared one.
"""

from __future__ import annotations

import threading
from typing import Any

from pomkit.log import Logger, get_logger
from pomkit.security import SecretMasker, get_masker

from .constants import (
    BASE_URL_SLOT,
    DEFAULT_ENVIRONMENT,
    ENV_CACHE_PREFIX,
    ENV_NAME_SLOT,
    ENV_PREFIX_SLOT,
    SUBDOMAIN_SLOT,
)
from .exceptions import (
    EmptyCredentialSet,
    EmptyPathSet,
    IncompleteCredentialPair,
    MissingBaseUrl,
    MissingField,
    NoEnvironmentsDefined,
    UnknownCredential,
    UnknownEnvironment,
    UnknownPath,
)
from .models import Credentials, EnvironmentDefinition, UrlParts
from .overrides import (
    EnvOverrides,
    OverrideSource,
    derive_override_key,
    password_slot,
    username_slot,
)
from .table import EnvironmentTable, load_default_table


def _join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them."""
    clean_base = base_url[:-1] if base_url.endswith("/") else base_url
    clean_path = path if path.startswith("/") else f"/{path}"
    return f"{clean_base}{clean_path}"


class ConfigResolver:
    """
    Resolves environments, URLs and credentials from an EnvironmentTable.

    Active environment precedence:
        1. Name set with set_active_environment()
        2. TEST_ENV override slot
        3. default_environment ("QA")

    Base URL precedence (first match wins):
        1. BASE_URL override slot, verbatim
        2. URL parts of the environment, via build_base_url()
        3. Legacy base URL of the environment
        4. MissingBaseUrl

    Example:
        resolver = ConfigResolver(EnvironmentTable.from_file("etc/environments.yaml"))
        resolver.get_url("login", "QA")
        # 'https://qa2repohighway.devservices.dh.com/go.aspx'
        creds = resolver.get_credentials("RBCClient")
    """

    def __init__(
        self,
        table: EnvironmentTable,
        overrides: OverrideSource | None = None,
        logger: Logger | None = None,
        default_environment: str = DEFAULT_ENVIRONMENT,
        caching: bool = True,
        masker: SecretMasker | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            table: Environment table to resolve against
            overrides: Override slot source (default: process environment)
            logger: Logger for resolution events (default: "/pomkit/config")
            default_environment: Environment used when nothing else selects one
            caching: Whether resolved environments are cached
            masker: Masker that receives every password handed out
                (default: the global masker)
        """
        self._table = table
        self._overrides: OverrideSource = overrides or EnvOverrides()
        self._lg = logger or get_logger("config")
        self._default_environment = default_environment
        self._caching = caching
        self._masker = masker
        self._cache: dict[str, Any] = {}
        self._active: str | None = None
        self._lock = threading.RLock()

    @property
    def table(self) -> EnvironmentTable:
        return self._table

    @property
    def overrides(self) -> OverrideSource:
        return self._overrides

    @property
    def is_caching_enabled(self) -> bool:
        return self._caching

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # Active environment

    def get_active_environment_name(self) -> str:
        """
        Return the active environment name. Never fails.

        The returned name is not checked against the table; resolving it
        does that.
        """
        if self._active:
            return self._active

        from_slot = self._overrides.get(ENV_NAME_SLOT)
        if from_slot:
            self._lg.debug(
                "environment selected from override",
                extra={"env": from_slot, "slot": ENV_NAME_SLOT},
            )
            return from_slot
        return self._default_environment

    def set_active_environment(self, name: str) -> None:
        """
        Set the active environment explicitly.

        Invalidates the whole cache, whether or not the name changed.

        Raises:
            UnknownEnvironment: If name is not in the table
        """
        if not self.has_environment(name):
            error = UnknownEnvironment(name, self.available_environments())
            self._lg.error(str(error))
            raise error

        with self._lock:
            self._active = name
            self._cache.clear()
        self._lg.info("environment set", extra={"env": name})

    def has_environment(self, name: str) -> bool:
        return name in self._table

    def available_environments(self) -> list[str]:
        return self._table.names()

    # Cache controls

    def set_caching_enabled(self, enabled: bool) -> None:
        """Enable or disable caching. Disabling clears the cache immediately."""
        with self._lock:
            self._caching = enabled
            if not enabled:
                self._cache.clear()
        self._lg.info(f"caching {'enabled' if enabled else 'disabled'}")

    def clear_cache(self) -> None:
        """
        Drop all cached resolutions.

        The explicitly set active environment is kept; use
        set_active_environment() to change it.
        """
        with self._lock:
            self._cache.clear()
        self._lg.debug("cache cleared")

    # Environment resolution

    def resolve_environment(self, name: str | None = None) -> EnvironmentDefinition:
        """
        Resolve an environment definition.

        Args:
            name: Environment name (default: the active environment)

        Returns:
            The environment definition (same object on repeated cached calls)

        Raises:
            UnknownEnvironment: If the name is not in the table
        """
        env = name or self.get_active_environment_name()
        cache_key = ENV_CACHE_PREFIX + env

        if self._caching:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached  # type: ignore[no-any-return]

        if env not in self._table:
            error = UnknownEnvironment(env, self.available_environments())
            self._lg.error(str(error))
            raise error

        definition = self._table[env]
        if self._caching:
            with self._lock:
                self._cache[cache_key] = definition
        self._lg.debug("resolved environment", extra={"env": env})
        return definition

    # URLs

    def build_base_url(
        self, url_parts: UrlParts, prefix_override: str | None = None
    ) -> str:
        """
        Build a base URL from its parts.

        Pattern: ``protocol://<prefix><subdomain>.<domain>``. The prefix is
        prefix_override, else the ENV_PREFIX slot, else the environment's
        prefix; the subdomain is the SUBDOMAIN slot, else the environment's.
        Slots are read on every call.
        """
        prefix = (
            prefix_override
            or self._overrides.get(ENV_PREFIX_SLOT)
            or url_parts.environment_prefix
        )
        subdomain = self._overrides.get(SUBDOMAIN_SLOT) or url_parts.subdomain
        base_url = f"{url_parts.protocol}://{prefix}{subdomain}.{url_parts.domain}"

        self._lg.info(
            f"built base url: {base_url}",
            extra={"prefix": prefix, "subdomain": subdomain},
        )
        return base_url

    def get_base_url(self, name: str | None = None) -> str:
        """
        Return the base URL of an environment.

        Raises:
            UnknownEnvironment: If the environment is not in the table
            MissingBaseUrl: If it has neither URL parts nor a legacy base URL
        """
        override = self._overrides.get(BASE_URL_SLOT)
        if override:
            self._lg.info(
                f"using base url from override: {override}",
                extra={"slot": BASE_URL_SLOT},
            )
            return override

        definition = self.resolve_environment(name)

        if definition.url_parts is not None:
            return self.build_base_url(definition.url_parts)

        if definition.legacy_base_url:
            self._lg.warning(
                f"using legacy base url for {definition.name}, "
                "consider migrating to url parts",
                extra={"url": definition.legacy_base_url},
            )
            return definition.legacy_base_url

        error = MissingBaseUrl(name or self.get_active_environment_name())
        self._lg.error(str(error))
        raise error

    def get_path(self, path_key: str, name: str | None = None) -> str:
        """
        Return a URL path of an environment.

        Raises:
            UnknownEnvironment: If the environment is not in the table
            UnknownPath: If the path key is not defined for it
        """
        definition = self.resolve_environment(name)
        path = definition.paths.get(path_key)
        if not path:
            error = UnknownPath(path_key, definition.name, definition.paths.keys())
            self._lg.error(str(error))
            raise error
        return path

    def get_url(self, path_key: str, name: str | None = None) -> str:
        """
        Return base URL + path for a path key.

        A single trailing slash is stripped from the base URL and the path
        gets exactly one leading slash. No other validation is done.
        """
        url = _join_url(self.get_base_url(name), self.get_path(path_key, name))
        self._lg.info(f'constructed url for "{path_key}": {url}')
        return url

    def get_all_paths(self, name: str | None = None) -> dict[str, str]:
        return dict(self.resolve_environment(name).paths)

    # Credentials

    def get_credentials(self, credential_key: str, name: str | None = None) -> Credentials:
        """
        Return a credential pair with per-field overrides applied.

        Overrides are read from <KEY>_USERNAME and <KEY>_PASSWORD, where <KEY>
        is derive_override_key(credential_key). Each field is overridden
        independently.

        Raises:
            UnknownEnvironment: If the environment is not in the table
            UnknownCredential: If the credential key is not defined for it
        """
        definition = self.resolve_environment(name)
        credentials = definition.credential_sets.get(credential_key)
        if credentials is None:
            error = UnknownCredential(
                credential_key, definition.name, definition.credential_sets.keys()
            )
            self._lg.error(str(error))
            raise error

        username_override = self._overrides.get(username_slot(credential_key))
        password_override = self._overrides.get(password_slot(credential_key))

        if username_override:
            self._lg.info(
                f'using username override for "{credential_key}": {username_override}',
                extra={"slot": username_slot(credential_key)},
            )
        if password_override:
            self._lg.info(
                f'using password override for "{credential_key}"',
                extra={"slot": password_slot(credential_key)},
            )

        resolved = Credentials(
            username=username_override or credentials.username,
            password=password_override or credentials.password,
        )
        (self._masker or get_masker()).add_known_secret(resolved.password)

        self._lg.info(
            f"retrieved credentials for: {credential_key}",
            extra={"username": resolved.username},
        )
        return resolved

    def get_all_credentials(self, name: str | None = None) -> dict[str, Credentials]:
        """Table credentials of an environment, without overrides."""
        return dict(self.resolve_environment(name).credential_sets)

    def has_credentials(self, credential_key: str, name: str | None = None) -> bool:
        return credential_key in self.resolve_environment(name).credential_sets

    def available_credential_keys(self, name: str | None = None) -> list[str]:
        return list(self.resolve_environment(name).credential_sets)

    # Validation and reporting

    def validate_config(self) -> bool:
        """
        Check every environment in the table against the structural invariants.

        Checks, per environment: a display name; URL parts with all four
        components, or else a legacy base URL; at least one path; at least
        one credential pair, each with a username and a password.

        Returns:
            True when the table is valid

        Raises:
            ValidationError: The first violation found (NoEnvironmentsDefined,
                MissingField, EmptyPathSet, EmptyCredentialSet or
                IncompleteCredentialPair)
        """
        self._lg.info("validating environment table")
        try:
            self._validate_table()
        except Exception as e:
            self._lg.error(f"environment table validation failed: {e}")
            raise
        self._lg.info(
            "environment table validation passed",
            extra={"environments": len(self._table)},
        )
        return True

    def _validate_table(self) -> None:
        if len(self._table) == 0:
            raise NoEnvironmentsDefined()
        for env_name, definition in self._table.items():
            self._validate_environment(env_name, definition)

    @staticmethod
    def _validate_environment(env_name: str, definition: EnvironmentDefinition) -> None:
        if not definition.name:
            raise MissingField(env_name, "name")

        if definition.url_parts is not None:
            missing = definition.url_parts.missing_fields()
            if missing:
                raise MissingField(env_name, f"url.{missing[0]}")
        elif not definition.legacy_base_url:
            raise MissingField(env_name, "base_url")

        if not definition.paths:
            raise EmptyPathSet(env_name)

        if not definition.credential_sets:
            raise EmptyCredentialSet(env_name)

        for cred_key, credentials in definition.credential_sets.items():
            if not credentials.is_complete():
                raise IncompleteCredentialPair(env_name, cred_key)

    def log_summary(self, name: str | None = None) -> None:
        """Log a summary of the (active) environment configuration."""
        definition = self.resolve_environment(name)
        base_url = self.get_base_url(name)
        self._lg.info("=== configuration summary ===")
        self._lg.info(f"environment: {definition.name}")
        self._lg.info(f"base url: {base_url}")
        self._lg.info(f"paths: {len(definition.paths)} defined")
        self._lg.info(f"credentials: {len(definition.credential_sets)} users defined")
        self._lg.info(f"credential keys: {', '.join(definition.credential_sets)}")
        self._lg.info("=============================")


_default_resolver: ConfigResolver | None = None


def get_default_resolver() -> ConfigResolver:
    """
    Get the process-wide resolver, loading the default table on first use.

    Convenience for scripts and simple suites; code that runs environments in
    parallel should construct its own ConfigResolver instances.

    Raises:
        FileNotFoundError: If no environment table file can be found
    """
    global _default_resolver

    if _default_resolver is None:
        _default_resolver = ConfigResolver(load_default_table())
    return _default_resolver


def reset_default_resolver() -> None:
    """Forget the process-wide resolver."""
    global _default_resolver
    _default_resolver = None


__all__ = [
    "ConfigResolver",
    "derive_override_key",
    "get_default_resolver",
    "reset_default_resolver",
]
