"""
Shape schemas for environment table files, using Pydantic.

The schemas only check types and structure (mappings where mappings belong,
strings where strings belong). Missing or empty values are allowed here on
purpose: the structural invariants are enforced by
ConfigResolver.validate_config(), which reports them with the dedicated
validation errors.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UrlPartsSchema(BaseModel):
    """URL components of an environment."""

    protocol: str | None = Field(None, description="URL scheme, http or https")
    prefix: str | None = Field(None, description="Environment prefix, e.g. qa2")
    subdomain: str | None = Field(None, description="Subdomain, e.g. repohighway")
    domain: str | None = Field(None, description="Domain, e.g. devservices.dh.com")

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: Any) -> Any:
        """Validate protocol is http or https when given."""
        if v and v.lower() not in ("http", "https"):
            raise ValueError(f"Invalid protocol '{v}'. Must be one of: http, https")
        return v

    model_config = ConfigDict(extra="forbid")


class CredentialsSchema(BaseModel):
    """A username/password pair."""

    username: str | None = None
    password: str | None = None

    model_config = ConfigDict(extra="forbid")


class EnvironmentSchema(BaseModel):
    """One environment definition."""

    name: str | None = Field(None, description="Display label")
    url: UrlPartsSchema | None = Field(None, description="Structured URL components")
    base_url: str | None = Field(None, description="Legacy pre-built base URL")
    paths: dict[str, str] | None = Field(None, description="Path key to URL path")
    credentials: dict[str, CredentialsSchema | None] | None = Field(
        None, description="Credential key to username/password"
    )

    model_config = ConfigDict(extra="allow")


class EnvironmentTableSchema(BaseModel):
    """Root schema of an environment table file."""

    environments: dict[str, EnvironmentSchema] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")


def validate_table(table_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Check the shape of a raw table dictionary.

    Args:
        table_dict: Parsed table file content

    Returns:
        The table as plain dicts

    Raises:
        pydantic.ValidationError: If the shape is invalid
    """
    validated = EnvironmentTableSchema.model_validate(table_dict)
    return validated.model_dump()
