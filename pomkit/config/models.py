"""
Immutable data model for environment definitions.

An EnvironmentDefinition describes one deployment target: how to build its
base URL, which URL paths it exposes and which credential pairs log into it.
Instances are frozen and their mappings are read-only views, so a definition
handed out from the resolver cache cannot be mutated by a caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class UrlParts:
    """
    Structured URL components.

    The base URL is built as ``protocol://<prefix><subdomain>.<domain>``,
    e.g. ``https://qa2repohighway.devservices.dh.com``.
    """

    protocol: str
    environment_prefix: str
    subdomain: str
    domain: str

    def missing_fields(self) -> list[str]:
        """Names of the components that are empty."""
        return [
            name
            for name in ("protocol", "environment_prefix", "subdomain", "domain")
            if not getattr(self, name)
        ]


@dataclass(frozen=True)
class Credentials:
    """A username/password pair. The password is kept out of repr()."""

    username: str
    password: str = field(repr=False)

    def is_complete(self) -> bool:
        return bool(self.username) and bool(self.password)

    def to_dict(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password}


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class EnvironmentDefinition:
    """
    One named deployment environment.

    Attributes:
        name: Display label (e.g. "Development")
        paths: Path key to URL path (e.g. "login" -> "/go.aspx")
        credential_sets: Credential key to Credentials
        url_parts: Structured URL components, preferred when present
        legacy_base_url: Pre-built base URL, used only without url_parts
    """

    name: str
    paths: Mapping[str, str] = field(default_factory=dict)
    credential_sets: Mapping[str, Credentials] = field(default_factory=dict)
    url_parts: UrlParts | None = None
    legacy_base_url: str | None = None

    def __post_init__(self) -> None:
        # frozen dataclass: bypass __setattr__ to install read-only views
        object.__setattr__(self, "paths", _freeze(self.paths))
        object.__setattr__(self, "credential_sets", _freeze(self.credential_sets))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EnvironmentDefinition:
        """
        Build a definition from its table-file form.

        Args:
            data: Mapping with name, url, base_url, paths and credentials

        Returns:
            EnvironmentDefinition instance
        """
        url = data.get("url")
        url_parts = None
        if url is not None:
            url_parts = UrlParts(
                protocol=url.get("protocol") or "",
                environment_prefix=url.get("prefix") or "",
                subdomain=url.get("subdomain") or "",
                domain=url.get("domain") or "",
            )

        credentials = {
            cred_key: Credentials(
                username=(pair or {}).get("username") or "",
                password=(pair or {}).get("password") or "",
            )
            for cred_key, pair in (data.get("credentials") or {}).items()
        }

        return cls(
            name=data.get("name") or "",
            paths={k: str(v) for k, v in (data.get("paths") or {}).items()},
            credential_sets=credentials,
            url_parts=url_parts,
            legacy_base_url=data.get("base_url") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Table-file form of this definition (inverse of from_dict)."""
        result: dict[str, Any] = {
            "name": self.name,
            "paths": dict(self.paths),
            "credentials": {k: c.to_dict() for k, c in self.credential_sets.items()},
        }
        if self.url_parts is not None:
            result["url"] = {
                "protocol": self.url_parts.protocol,
                "prefix": self.url_parts.environment_prefix,
                "subdomain": self.url_parts.subdomain,
                "domain": self.url_parts.domain,
            }
        if self.legacy_base_url:
            result["base_url"] = self.legacy_base_url
        return result
