"""
Exceptions raised while resolving or validating environment configuration.

Lookup errors name the missing key and enumerate the valid alternatives so a
broken setup can be diagnosed from the log alone.
"""

from collections.abc import Iterable

from pomkit.exceptions import ConfigError, ValidationError


def _join(names: Iterable[str]) -> str:
    return ", ".join(names)


class UnknownEnvironment(ConfigError):
    """Raised when an environment name is absent from the table."""

    def __init__(self, environment: str, available: Iterable[str]) -> None:
        self.environment = environment
        self.available = list(available)
        super().__init__(
            f'Environment "{environment}" not found. '
            f"Available environments: {_join(self.available)}"
        )


class MissingBaseUrl(ConfigError):
    """Raised when an environment has neither URL parts nor a legacy base URL."""

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(
            f"No base_url or url parts found for environment: {environment}"
        )


class UnknownPath(ConfigError):
    """Raised when a path key is not defined for the resolved environment."""

    def __init__(self, path_key: str, environment: str, available: Iterable[str]) -> None:
        self.path_key = path_key
        self.environment = environment
        self.available = list(available)
        super().__init__(
            f'Path "{path_key}" not found for environment "{environment}". '
            f"Available paths: {_join(self.available)}"
        )


class UnknownCredential(ConfigError):
    """Raised when a credential key is not defined for the resolved environment."""

    def __init__(
        self, credential_key: str, environment: str, available: Iterable[str]
    ) -> None:
        self.credential_key = credential_key
        self.environment = environment
        self.available = list(available)
        super().__init__(
            f'Credentials "{credential_key}" not found for environment '
            f'"{environment}". Available: {_join(self.available)}'
        )


class TableFormatError(ConfigError):
    """Raised when an environment table file cannot be parsed into a table."""

    pass


class NoEnvironmentsDefined(ValidationError):
    """Raised by validation when the table holds no environments at all."""

    def __init__(self) -> None:
        super().__init__("No environments defined in the environment table")


class MissingField(ValidationError):
    """Raised by validation when a required field is missing or empty."""

    def __init__(self, environment: str, field: str) -> None:
        self.environment = environment
        self.field = field
        super().__init__(
            f'Environment "{environment}" missing required field: {field}'
        )


class EmptyPathSet(ValidationError):
    """Raised by validation when an environment defines no paths."""

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(f'Environment "{environment}" has no paths defined')


class EmptyCredentialSet(ValidationError):
    """Raised by validation when an environment defines no credentials."""

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(f'Environment "{environment}" has no credentials defined')


class IncompleteCredentialPair(ValidationError):
    """Raised by validation when a credential lacks a username or password."""

    def __init__(self, environment: str, credential_key: str) -> None:
        self.environment = environment
        self.credential_key = credential_key
        super().__init__(
            f'Credentials "{credential_key}" in environment "{environment}" '
            f"missing username or password"
        )
