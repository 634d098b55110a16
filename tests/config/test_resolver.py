"""
Tests for ConfigResolver.

Tests key resolver features including:
- Active environment selection and precedence
- Environment resolution and caching
- Base URL precedence and URL joining
- Path and credential lookup, including per-field credential overrides
- Table validation
"""

import threading

import pytest

from pomkit.config import (
    ConfigResolver,
    Credentials,
    EmptyCredentialSet,
    EmptyPathSet,
    EnvironmentTable,
    EnvOverrides,
    IncompleteCredentialPair,
    MappingOverrides,
    MissingBaseUrl,
    MissingField,
    NoEnvironmentsDefined,
    UnknownCredential,
    UnknownEnvironment,
    UnknownPath,
    UrlParts,
)
from pomkit.exceptions import ConfigError, ValidationError
from pomkit.security import SecretMasker

# =============================================================================
# Active Environment
# =============================================================================


@pytest.mark.unit
class TestActiveEnvironment:
    """Test active environment selection."""

    def test_defaults_to_qa(self, resolver):
        """Test the default environment is QA when nothing selects one."""
        assert resolver.get_active_environment_name() == "QA"

    def test_custom_default(self, env_table, overrides):
        """Test a custom default environment name."""
        resolver = ConfigResolver(env_table, overrides=overrides, default_environment="dev")
        assert resolver.get_active_environment_name() == "dev"

    def test_override_slot_wins_over_default(self, resolver, overrides):
        """Test TEST_ENV selects the environment when nothing is set explicitly."""
        overrides.set("TEST_ENV", "prod")
        assert resolver.get_active_environment_name() == "prod"

    def test_explicit_wins_over_override_slot(self, resolver, overrides):
        """Test set_active_environment beats TEST_ENV."""
        overrides.set("TEST_ENV", "prod")
        resolver.set_active_environment("dev")
        assert resolver.get_active_environment_name() == "dev"

    def test_unknown_name_from_slot_is_returned_unchecked(self, resolver, overrides):
        """Test get_active_environment_name never fails, even for unknown names."""
        overrides.set("TEST_ENV", "staging")
        assert resolver.get_active_environment_name() == "staging"
        with pytest.raises(UnknownEnvironment):
            resolver.resolve_environment()

    def test_empty_override_slot_counts_as_unset(self, resolver, overrides):
        """Test an empty TEST_ENV falls through to the default."""
        overrides.set("TEST_ENV", "")
        assert resolver.get_active_environment_name() == "QA"

    def test_set_unknown_environment_lists_all_names(self, resolver):
        """Test the error for an unknown name enumerates every environment."""
        with pytest.raises(UnknownEnvironment) as exc_info:
            resolver.set_active_environment("nonexistent")

        message = str(exc_info.value)
        for name in ("dev", "QA", "prod", "local"):
            assert name in message
        assert exc_info.value.environment == "nonexistent"
        assert set(exc_info.value.available) == {"dev", "QA", "prod", "local"}

    def test_failed_set_keeps_previous_environment(self, resolver):
        """Test a rejected name leaves the active environment unchanged."""
        resolver.set_active_environment("dev")
        with pytest.raises(UnknownEnvironment):
            resolver.set_active_environment("nonexistent")
        assert resolver.get_active_environment_name() == "dev"

    def test_has_environment(self, resolver):
        """Test has_environment and available_environments."""
        assert resolver.has_environment("QA")
        assert not resolver.has_environment("qa")
        assert resolver.available_environments() == ["dev", "QA", "prod", "local"]

    def test_reads_process_environment_by_default(self, env_table, clean_env):
        """Test the default override source reads os.environ on every call."""
        resolver = ConfigResolver(env_table)
        assert isinstance(resolver.overrides, EnvOverrides)
        assert resolver.get_active_environment_name() == "QA"

        clean_env.setenv("TEST_ENV", "dev")
        assert resolver.get_active_environment_name() == "dev"


# =============================================================================
# Environment Resolution and Caching
# =============================================================================


@pytest.mark.unit
class TestResolveEnvironment:
    """Test resolve_environment and cache behavior."""

    def test_resolves_named_environment(self, resolver):
        """Test resolving an explicit name."""
        definition = resolver.resolve_environment("prod")
        assert definition.name == "Production"
        assert definition.url_parts.domain == "dh.com"

    def test_resolves_active_environment(self, resolver):
        """Test resolving without a name uses the active environment."""
        assert resolver.resolve_environment().name == "QA"

    def test_cached_result_is_same_object(self, resolver):
        """Test repeated resolution returns the same object while caching."""
        first = resolver.resolve_environment("QA")
        assert resolver.resolve_environment("QA") is first
        assert resolver.cache_size == 1

    def test_cache_key_is_prefixed_name(self, resolver):
        """Test the cache key format."""
        resolver.resolve_environment("dev")
        assert list(resolver._cache) == ["env:dev"]

    def test_set_active_environment_invalidates_cache(self, resolver):
        """Test switching environments drops every cache entry."""
        resolver.resolve_environment("QA")
        resolver.resolve_environment("dev")
        assert resolver.cache_size == 2

        resolver.set_active_environment("QA")
        assert resolver.cache_size == 0

    def test_set_same_environment_still_invalidates(self, resolver):
        """Test invalidation is unconditional."""
        resolver.set_active_environment("QA")
        resolver.resolve_environment()
        resolver.set_active_environment("QA")
        assert resolver.cache_size == 0

    def test_clear_cache_keeps_explicit_environment(self, resolver):
        """Test clear_cache drops entries but keeps the explicit active name."""
        resolver.set_active_environment("prod")
        resolver.resolve_environment()
        resolver.clear_cache()

        assert resolver.cache_size == 0
        assert resolver.get_active_environment_name() == "prod"

    def test_disabling_cache_clears_it(self, resolver):
        """Test set_caching_enabled(False) clears and stops caching."""
        resolver.resolve_environment("QA")
        resolver.set_caching_enabled(False)

        assert resolver.cache_size == 0
        assert not resolver.is_caching_enabled
        resolver.resolve_environment("QA")
        assert resolver.cache_size == 0

    def test_reenabling_cache(self, resolver):
        """Test caching resumes after re-enabling."""
        resolver.set_caching_enabled(False)
        resolver.set_caching_enabled(True)
        resolver.resolve_environment("QA")
        assert resolver.cache_size == 1

    def test_resolved_definition_is_read_only(self, resolver):
        """Test callers cannot mutate a cached definition."""
        definition = resolver.resolve_environment("QA")
        with pytest.raises(TypeError):
            definition.paths["login"] = "/elsewhere"  # type: ignore[index]
        with pytest.raises(AttributeError):
            definition.name = "changed"  # type: ignore[misc]

    def test_unknown_environment_is_not_cached(self, resolver):
        """Test failures leave the cache untouched."""
        with pytest.raises(UnknownEnvironment):
            resolver.resolve_environment("staging")
        assert resolver.cache_size == 0

    def test_concurrent_set_and_resolve(self, resolver):
        """Test a shared resolver survives concurrent switching and resolving."""
        errors: list[Exception] = []

        def worker(name: str) -> None:
            try:
                for _ in range(200):
                    resolver.set_active_environment(name)
                    resolver.resolve_environment(name)
            except Exception as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("QA", "dev")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert resolver.get_active_environment_name() in ("QA", "dev")


@pytest.mark.unit
class TestUnknownEnvironmentEverywhere:
    """Test every public lookup fails for unknown environments."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda r: r.resolve_environment("staging"),
            lambda r: r.get_base_url("staging"),
            lambda r: r.get_path("login", "staging"),
            lambda r: r.get_url("login", "staging"),
            lambda r: r.get_credentials("RBCClient", "staging"),
            lambda r: r.get_all_paths("staging"),
            lambda r: r.available_credential_keys("staging"),
        ],
    )
    def test_lookup_fails(self, resolver, call):
        """Test the lookup raises UnknownEnvironment, never a default."""
        with pytest.raises(UnknownEnvironment):
            call(resolver)

    def test_is_config_error(self, resolver):
        """Test lookup errors belong to the ConfigError hierarchy."""
        with pytest.raises(ConfigError):
            resolver.resolve_environment("staging")


# =============================================================================
# URLs
# =============================================================================


@pytest.mark.unit
class TestBaseUrl:
    """Test base URL construction and precedence."""

    def test_built_from_url_parts(self, resolver):
        """Test the base URL pattern protocol://<prefix><subdomain>.<domain>."""
        assert resolver.get_base_url("QA") == "https://qa2repohighway.devservices.dh.com"
        assert resolver.get_base_url("prod") == "https://prodrepohighway.dh.com"

    def test_override_returned_verbatim(self, resolver, overrides):
        """Test BASE_URL wins over url parts and is not normalized."""
        overrides.set("BASE_URL", "http://10.0.0.5:8080/app/")
        assert resolver.get_base_url("QA") == "http://10.0.0.5:8080/app/"

    def test_override_wins_for_unknown_environment(self, resolver, overrides):
        """Test BASE_URL is consulted before the environment is resolved."""
        overrides.set("BASE_URL", "http://override")
        assert resolver.get_base_url("staging") == "http://override"

    def test_prefix_override(self, resolver, overrides):
        """Test ENV_PREFIX replaces the table prefix."""
        overrides.set("ENV_PREFIX", "qa1")
        assert resolver.get_base_url("QA") == "https://qa1repohighway.devservices.dh.com"

    def test_subdomain_override(self, resolver, overrides):
        """Test SUBDOMAIN replaces the table subdomain."""
        overrides.set("SUBDOMAIN", "assets")
        assert resolver.get_base_url("QA") == "https://qa2assets.devservices.dh.com"

    def test_overrides_read_on_every_call(self, resolver, overrides):
        """Test overrides are not snapshotted, even with caching enabled."""
        assert resolver.get_base_url("QA") == "https://qa2repohighway.devservices.dh.com"
        overrides.set("ENV_PREFIX", "qa3")
        assert resolver.get_base_url("QA") == "https://qa3repohighway.devservices.dh.com"
        overrides.unset("ENV_PREFIX")
        assert resolver.get_base_url("QA") == "https://qa2repohighway.devservices.dh.com"

    def test_explicit_prefix_beats_slot(self, resolver, overrides):
        """Test build_base_url prefix_override wins over ENV_PREFIX."""
        overrides.set("ENV_PREFIX", "qa1")
        parts = UrlParts("https", "qa2", "repohighway", "devservices.dh.com")
        assert (
            resolver.build_base_url(parts, prefix_override="uat")
            == "https://uatrepohighway.devservices.dh.com"
        )

    def test_legacy_base_url(self, resolver, log_stream):
        """Test the legacy base URL is used without url parts, with a warning."""
        assert resolver.get_base_url("local") == "http://localhost:3000/"
        output = log_stream.getvalue()
        assert "WARNING" in output
        assert "legacy base url" in output

    def test_missing_base_url(self, overrides):
        """Test an environment without url parts or legacy URL fails."""
        table = EnvironmentTable.from_dict(
            {
                "environments": {
                    "bare": {
                        "name": "Bare",
                        "paths": {"login": "/login"},
                        "credentials": {"u": {"username": "u", "password": "p"}},
                    }
                }
            }
        )
        resolver = ConfigResolver(table, overrides=overrides)
        with pytest.raises(MissingBaseUrl, match="bare"):
            resolver.get_base_url("bare")


@pytest.mark.unit
class TestPathsAndUrls:
    """Test path lookup and URL joining."""

    def test_get_path(self, resolver):
        """Test a path lookup."""
        assert resolver.get_path("login", "QA") == "/go.aspx"

    def test_unknown_path_lists_available(self, resolver):
        """Test UnknownPath names the key and enumerates the valid ones."""
        with pytest.raises(UnknownPath) as exc_info:
            resolver.get_path("dashboard", "QA")

        message = str(exc_info.value)
        assert '"dashboard"' in message
        for key in ("login", "home", "logout", "settings"):
            assert key in message

    def test_login_url(self, resolver):
        """Test the documented QA login URL."""
        assert resolver.get_url("login", "QA") == "https://qa2repohighway.devservices.dh.com/go.aspx"

    def test_path_without_leading_slash(self, resolver):
        """Test a path without a leading slash gets one."""
        assert resolver.get_url("settings", "QA") == "https://qa2repohighway.devservices.dh.com/settings"

    def test_base_url_trailing_slash_stripped(self, resolver):
        """Test exactly one slash joins base URL and path."""
        assert resolver.get_url("login", "local") == "http://localhost:3000/login"

    @pytest.mark.parametrize(
        ("base_url", "path", "expected"),
        [
            ("http://h", "/a", "http://h/a"),
            ("http://h/", "/a", "http://h/a"),
            ("http://h", "a", "http://h/a"),
            ("http://h/", "a", "http://h/a"),
            ("http://h//", "/a", "http://h//a"),
            ("http://h/app", "/a/b", "http://h/app/a/b"),
        ],
    )
    def test_join_table(self, resolver, overrides, base_url, path, expected):
        """Test strip-one-trailing-slash plus ensure-one-leading-slash."""
        overrides.set("BASE_URL", base_url)
        table = EnvironmentTable.from_dict(
            {
                "environments": {
                    "x": {
                        "name": "X",
                        "base_url": "http://unused",
                        "paths": {"p": path},
                        "credentials": {"u": {"username": "u", "password": "p"}},
                    }
                }
            }
        )
        r = ConfigResolver(table, overrides=overrides)
        assert r.get_url("p", "x") == expected

    def test_get_all_paths_is_a_copy(self, resolver):
        """Test get_all_paths returns a mutable copy."""
        paths = resolver.get_all_paths("QA")
        paths["login"] = "/changed"
        assert resolver.get_path("login", "QA") == "/go.aspx"


# =============================================================================
# Credentials
# =============================================================================


@pytest.mark.unit
class TestCredentials:
    """Test credential lookup and per-field overrides."""

    def test_table_credentials_unchanged(self, resolver):
        """Test credentials come back unchanged without overrides."""
        creds = resolver.get_credentials("TDFClient", "QA")
        assert creds == Credentials(username="MIJITDF", password="Assetuse@2")

    def test_active_environment_used(self, resolver):
        """Test credentials resolve against the active environment."""
        resolver.set_active_environment("dev")
        assert resolver.get_credentials("admin").username == "admin@example.com"

    def test_username_override_only(self, resolver, overrides):
        """Test a username override leaves the table password."""
        overrides.set("RBCCLIENT_USERNAME", "OTHERUSER")
        creds = resolver.get_credentials("RBCClient", "QA")
        assert creds.username == "OTHERUSER"
        assert creds.password == "Assetuse@1"

    def test_password_override_only(self, resolver, overrides):
        """Test a password override leaves the table username."""
        overrides.set("RBCCLIENT_PASSWORD", "Secret#99")
        creds = resolver.get_credentials("RBCClient", "QA")
        assert creds.username == "MIJIRBC"
        assert creds.password == "Secret#99"

    def test_both_fields_overridden(self, resolver, overrides):
        """Test both overrides apply together."""
        overrides.set("RBCCLIENT_USERNAME", "U")
        overrides.set("RBCCLIENT_PASSWORD", "P4ss")
        assert resolver.get_credentials("RBCClient", "QA") == Credentials("U", "P4ss")

    def test_override_uses_derived_key(self, resolver, overrides):
        """Test punctuation in the key is replaced in the slot name."""
        overrides.set("READ_ONLY_USER_USERNAME", "ro2@example.com")
        assert resolver.get_credentials("read-only.user", "QA").username == "ro2@example.com"

    def test_raw_key_slot_is_ignored(self, resolver, overrides):
        """Test a slot spelled with the raw key is silently missed."""
        overrides.set("RBCClient_USERNAME", "IGNORED")
        assert resolver.get_credentials("RBCClient", "QA").username == "MIJIRBC"

    def test_override_does_not_leak_into_other_keys(self, resolver, overrides):
        """Test an override for one key leaves other keys untouched."""
        overrides.set("RBCCLIENT_USERNAME", "OTHERUSER")
        assert resolver.get_credentials("TDFClient", "QA").username == "MIJITDF"

    def test_unknown_credential_lists_available(self, resolver):
        """Test UnknownCredential enumerates the valid keys."""
        with pytest.raises(UnknownCredential) as exc_info:
            resolver.get_credentials("admin", "QA")

        assert exc_info.value.credential_key == "admin"
        assert exc_info.value.environment == "QA"
        for key in ("RBCClient", "TDFClient", "read-only.user"):
            assert key in str(exc_info.value)

    def test_password_registered_with_masker(self, env_table, overrides):
        """Test handed-out passwords become known secrets."""
        masker = SecretMasker()
        resolver = ConfigResolver(env_table, overrides=overrides, masker=masker)
        resolver.get_credentials("RBCClient", "QA")
        assert masker.mask("typed Assetuse@1") == "typed [MASKED]"

    def test_password_never_logged(self, resolver, overrides, log_stream):
        """Test credential retrieval logs the username but not the password."""
        overrides.set("RBCCLIENT_PASSWORD", "OverridePw#1")
        resolver.get_credentials("RBCClient", "QA")
        output = log_stream.getvalue()
        assert "MIJIRBC" in output
        assert "OverridePw#1" not in output
        assert "Assetuse@1" not in output

    def test_credential_helpers(self, resolver):
        """Test has_credentials, available_credential_keys and get_all_credentials."""
        assert resolver.has_credentials("RBCClient", "QA")
        assert not resolver.has_credentials("admin", "QA")
        assert resolver.available_credential_keys("QA") == [
            "RBCClient",
            "TDFClient",
            "read-only.user",
        ]
        assert resolver.get_all_credentials("dev")["admin"].password == "Admin123!"

    def test_all_credentials_ignore_overrides(self, resolver, overrides):
        """Test get_all_credentials returns table values."""
        overrides.set("RBCCLIENT_USERNAME", "OTHERUSER")
        assert resolver.get_all_credentials("QA")["RBCClient"].username == "MIJIRBC"


# =============================================================================
# Validation
# =============================================================================


def _resolver_for(table_dict, overrides=None) -> ConfigResolver:
    return ConfigResolver(
        EnvironmentTable.from_dict(table_dict), overrides=overrides or MappingOverrides()
    )


@pytest.mark.unit
class TestValidateConfig:
    """Test validate_config."""

    def test_valid_table(self, resolver):
        """Test a well-formed table validates."""
        assert resolver.validate_config() is True

    def test_shipped_table_is_valid(self, clean_env):
        """Test etc/environments.yaml validates."""
        from pomkit.config import load_default_table

        assert ConfigResolver(load_default_table()).validate_config() is True

    def test_empty_table(self):
        """Test a table without environments fails."""
        with pytest.raises(NoEnvironmentsDefined):
            _resolver_for({"environments": {}}).validate_config()

    def test_empty_credential_set(self, table_dict):
        """Test an environment without credentials fails with EmptyCredentialSet."""
        table_dict["environments"]["prod"]["credentials"] = {}
        with pytest.raises(EmptyCredentialSet) as exc_info:
            _resolver_for(table_dict).validate_config()
        assert exc_info.value.environment == "prod"

    def test_empty_path_set(self, table_dict):
        """Test an environment without paths fails with EmptyPathSet."""
        del table_dict["environments"]["dev"]["paths"]
        with pytest.raises(EmptyPathSet, match="dev"):
            _resolver_for(table_dict).validate_config()

    def test_incomplete_pair(self, table_dict):
        """Test a credential pair without a password fails."""
        table_dict["environments"]["QA"]["credentials"]["TDFClient"]["password"] = ""
        with pytest.raises(IncompleteCredentialPair) as exc_info:
            _resolver_for(table_dict).validate_config()
        assert exc_info.value.credential_key == "TDFClient"
        assert exc_info.value.environment == "QA"

    def test_null_pair(self, table_dict):
        """Test a credential key with no pair at all fails."""
        table_dict["environments"]["QA"]["credentials"]["TDFClient"] = None
        with pytest.raises(IncompleteCredentialPair):
            _resolver_for(table_dict).validate_config()

    def test_missing_name(self, table_dict):
        """Test an environment without a display name fails."""
        del table_dict["environments"]["dev"]["name"]
        with pytest.raises(MissingField) as exc_info:
            _resolver_for(table_dict).validate_config()
        assert exc_info.value.field == "name"

    def test_incomplete_url_parts(self, table_dict):
        """Test url parts with an empty component fail."""
        table_dict["environments"]["QA"]["url"]["domain"] = ""
        with pytest.raises(MissingField) as exc_info:
            _resolver_for(table_dict).validate_config()
        assert exc_info.value.field == "url.domain"

    def test_no_url_at_all(self, table_dict):
        """Test an environment without url parts or legacy URL fails."""
        del table_dict["environments"]["local"]["base_url"]
        with pytest.raises(MissingField, match="base_url"):
            _resolver_for(table_dict).validate_config()

    def test_first_violation_reported(self, table_dict):
        """Test validation stops at the first violation, in table order."""
        table_dict["environments"]["dev"]["paths"] = {}
        table_dict["environments"]["prod"]["credentials"] = {}
        with pytest.raises(EmptyPathSet):
            _resolver_for(table_dict).validate_config()

    def test_validation_errors_are_validation_errors(self, table_dict):
        """Test validation failures share the ValidationError base."""
        table_dict["environments"]["prod"]["credentials"] = {}
        with pytest.raises(ValidationError):
            _resolver_for(table_dict).validate_config()

    def test_failure_is_logged(self, table_dict, log_stream):
        """Test validation failures are logged before raising."""
        table_dict["environments"]["prod"]["credentials"] = {}
        with pytest.raises(EmptyCredentialSet):
            _resolver_for(table_dict).validate_config()
        assert "validation failed" in log_stream.getvalue()


# =============================================================================
# Summary and Default Resolver
# =============================================================================


@pytest.mark.unit
class TestSummary:
    """Test log_summary."""

    def test_summary_lines(self, resolver, log_stream):
        """Test the summary reports name, URL and counts."""
        resolver.log_summary()
        output = log_stream.getvalue()
        assert "environment: QA" in output
        assert "base url: https://qa2repohighway.devservices.dh.com" in output
        assert "paths: 4 defined" in output
        assert "credentials: 3 users defined" in output
        assert "RBCClient, TDFClient, read-only.user" in output


@pytest.mark.unit
class TestDefaultResolver:
    """Test the process-wide resolver."""

    def test_loads_table_from_env_var(self, clean_env, table_file):
        """Test POM_CONFIG_FILE selects the table of the default resolver."""
        from pomkit.config import get_default_resolver

        clean_env.setenv("POM_CONFIG_FILE", str(table_file))
        resolver = get_default_resolver()
        assert resolver.table.source == table_file.resolve()
        assert get_default_resolver() is resolver

    def test_reset(self, clean_env, table_file):
        """Test reset_default_resolver forgets the instance."""
        from pomkit.config import get_default_resolver, reset_default_resolver

        clean_env.setenv("POM_CONFIG_FILE", str(table_file))
        first = get_default_resolver()
        reset_default_resolver()
        assert get_default_resolver() is not first
