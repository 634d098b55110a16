"""
Tests for test run setup and teardown.
"""

import json
import os
from pathlib import Path

import pytest

from pomkit.config import ConfigResolver, UnknownCredential
from pomkit.data import DataProvider
from pomkit.screenshot import ScreenshotHelper
from pomkit.session import (
    RUN_DIR_ENV_VAR,
    SUMMARY_FILE,
    get_run_directory,
    global_setup,
    global_teardown,
)


@pytest.fixture
def workspace(temp_dir, clean_env):
    """Empty project root for a run."""
    return temp_dir


@pytest.fixture
def setup_kwargs(workspace, resolver):
    return {
        "resolver": resolver,
        "data_provider": DataProvider(data_dir=workspace / "data", caching=False),
        "screenshots": ScreenshotHelper(workspace / "screenshots"),
        "base_dir": workspace,
    }


# =============================================================================
# Run directory
# =============================================================================


@pytest.mark.unit
class TestRunDirectory:
    """Test get_run_directory()."""

    def test_from_env(self, clean_env, temp_dir):
        """Test TEST_RUN_DIR wins."""
        clean_env.setenv(RUN_DIR_ENV_VAR, str(temp_dir / "run"))
        assert get_run_directory() == temp_dir / "run"

    def test_latest_fallback(self, clean_env):
        """Test the fallback under the working directory."""
        assert get_run_directory() == Path.cwd() / "test-runs" / "latest"


# =============================================================================
# Setup
# =============================================================================


@pytest.mark.integration
class TestGlobalSetup:
    """Test global_setup()."""

    def test_creates_run_layout(self, workspace, setup_kwargs):
        """Test directories, exported run dir, and screenshot location."""
        context = global_setup(**setup_kwargs)

        assert context.run_dir.parent == workspace / "test-runs"
        assert context.run_dir.is_dir()
        assert (workspace / "logs").is_dir()
        assert os.environ[RUN_DIR_ENV_VAR] == str(context.run_dir)
        assert context.screenshots.directory == context.run_dir / "screenshots"
        assert context.screenshots.directory.is_dir()

    def test_context_values(self, setup_kwargs):
        """Test environment, base url and default credentials."""
        context = global_setup(**setup_kwargs)

        assert context.environment == "QA"
        assert context.base_url == "https://qa2repohighway.devservices.dh.com"
        assert context.credential_key == "RBCClient"
        assert context.credentials.username == "MIJIRBC"

    def test_enables_caching(self, setup_kwargs):
        """Test data caching is switched on."""
        context = global_setup(**setup_kwargs)
        assert context.data_provider.is_caching_enabled

    def test_reuses_run_dir(self, workspace, setup_kwargs, clean_env):
        """Test an exported TEST_RUN_DIR is reused."""
        existing = workspace / "shared-run"
        clean_env.setenv(RUN_DIR_ENV_VAR, str(existing))

        context = global_setup(**setup_kwargs)

        assert context.run_dir == existing
        assert existing.is_dir()

    def test_credential_key_argument(self, setup_kwargs):
        """Test an explicit credential key."""
        context = global_setup(credential_key="TDFClient", **setup_kwargs)
        assert context.credentials.username == "MIJITDF"

    def test_credential_key_from_env(self, setup_kwargs, clean_env):
        """Test AUTH_CREDENTIAL_KEY selects the credentials."""
        clean_env.setenv("AUTH_CREDENTIAL_KEY", "TDFClient")
        assert global_setup(**setup_kwargs).credential_key == "TDFClient"

    def test_dotenv_loaded(self, workspace, setup_kwargs):
        """Test .env in the base directory is loaded."""
        (workspace / ".env").write_text("AUTH_CREDENTIAL_KEY=TDFClient\n")
        assert global_setup(**setup_kwargs).credential_key == "TDFClient"

    def test_dotenv_does_not_override(self, workspace, setup_kwargs, clean_env):
        """Test exported variables win over .env."""
        (workspace / ".env").write_text("AUTH_CREDENTIAL_KEY=TDFClient\n")
        clean_env.setenv("AUTH_CREDENTIAL_KEY", "RBCClient")
        assert global_setup(**setup_kwargs).credential_key == "RBCClient"

    def test_missing_data_files_warn(self, workspace, setup_kwargs, log_stream):
        """Test missing data files are warned about, not fatal."""
        (workspace / "present.csv").write_text("a\n1\n")

        global_setup(data_files=["present.csv", "absent.csv"], **setup_kwargs)

        output = log_stream.getvalue()
        assert "test data file exists: present.csv" in output
        assert "test data file missing: absent.csv" in output
        assert "some test data files are missing" in output

    def test_old_screenshots_cleaned(self, workspace, setup_kwargs, clean_env):
        """Test screenshots older than seven days are removed from the run dir."""
        run_dir = workspace / "run"
        shots = run_dir / "screenshots"
        shots.mkdir(parents=True)
        stale = shots / "stale.png"
        stale.write_bytes(b"")
        os.utime(stale, (0, 0))
        clean_env.setenv(RUN_DIR_ENV_VAR, str(run_dir))

        global_setup(**setup_kwargs)

        assert not stale.exists()

    def test_unknown_credentials_propagate(self, setup_kwargs, log_stream):
        """Test configuration errors are logged and re-raised."""
        with pytest.raises(UnknownCredential):
            global_setup(credential_key="nobody", **setup_kwargs)
        assert "global setup failed" in log_stream.getvalue()

    def test_invalid_table_propagates(self, setup_kwargs, table_dict):
        """Test validation runs before anything else."""
        from pomkit.config import EmptyPathSet, EnvironmentTable

        table_dict["environments"]["dev"]["paths"] = {}
        setup_kwargs["resolver"] = ConfigResolver(EnvironmentTable.from_dict(table_dict))
        with pytest.raises(EmptyPathSet):
            global_setup(**setup_kwargs)

    def test_password_never_logged(self, setup_kwargs, log_stream):
        """Test the fetched password does not appear in the log."""
        global_setup(**setup_kwargs)
        assert "Assetuse@1" not in log_stream.getvalue()


# =============================================================================
# Teardown
# =============================================================================


@pytest.mark.integration
class TestGlobalTeardown:
    """Test global_teardown()."""

    def test_writes_summary(self, setup_kwargs):
        """Test the summary file contents."""
        context = global_setup(**setup_kwargs)

        path = global_teardown(context)

        assert path == context.run_dir / SUMMARY_FILE
        summary = json.loads(path.read_text())
        assert summary["environment"] == "QA"
        assert summary["base_url"] == context.base_url
        assert summary["run_directory"] == str(context.run_dir)
        assert summary["credential_key"] == "RBCClient"
        assert "password" not in json.dumps(summary).lower()

    def test_clears_data_cache(self, setup_kwargs, workspace):
        """Test the data cache is emptied."""
        data = workspace / "rows.csv"
        data.write_text("a\n1\n")
        context = global_setup(**setup_kwargs)
        context.data_provider.get_test_data(data)
        assert context.data_provider.cache_size == 1

        global_teardown(context)

        assert context.data_provider.cache_size == 0
