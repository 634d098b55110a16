"""
Test run setup and teardown.

global_setup() prepares a test run once, before any test executes: it loads
.env, validates the environment table, prepares the run directory and the
screenshot directory, and fetches the login credentials. global_teardown()
closes the run and writes a run summary.
"""

from __future__ import annotations

import datetime
import json
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from pomkit.config import ConfigResolver, Credentials, get_default_resolver
from pomkit.data import DataProvider
from pomkit.helpers import run_folder_name
from pomkit.log import LogConstants, get_logger
from pomkit.screenshot import ScreenshotHelper

RUN_DIR_ENV_VAR = "TEST_RUN_DIR"
CREDENTIAL_KEY_ENV_VAR = "AUTH_CREDENTIAL_KEY"
DEFAULT_CREDENTIAL_KEY = "RBCClient"
RUNS_DIR = "test-runs"
LATEST_RUN = "latest"
SUMMARY_FILE = "test-summary.json"
SCREENSHOT_RETENTION_DAYS = 7


@dataclass
class RunContext:
    """State shared by the tests of one run."""

    run_dir: Path
    environment: str
    base_url: str
    resolver: ConfigResolver
    data_provider: DataProvider
    screenshots: ScreenshotHelper
    credential_key: str
    credentials: Credentials
    started_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def summary(self) -> dict[str, Any]:
        """Run summary written by global_teardown()."""
        return {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "started_at": self.started_at.isoformat(),
            "environment": self.environment,
            "base_url": self.base_url,
            "run_directory": str(self.run_dir),
            "screenshots": str(self.screenshots.directory),
            "credential_key": self.credential_key,
        }


def get_run_directory() -> Path:
    """The current run directory: TEST_RUN_DIR, else test-runs/latest."""
    run_dir = os.environ.get(RUN_DIR_ENV_VAR)
    if run_dir:
        return Path(run_dir)
    return Path.cwd() / RUNS_DIR / LATEST_RUN


def _banner(text: str) -> None:
    lg = get_logger("session")
    rule = "=" * LogConstants.BANNER_WIDTH
    lg.info(rule)
    lg.info(text)
    lg.info(rule)


def _create_run_directory(base_dir: Path) -> Path:
    """Reuse TEST_RUN_DIR when set, else create test-runs/<timestamp> and export it."""
    lg = get_logger("session")
    existing = os.environ.get(RUN_DIR_ENV_VAR)
    if existing:
        run_dir = Path(existing)
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir

    run_dir = base_dir / RUNS_DIR / run_folder_name()
    if not run_dir.exists():
        run_dir.mkdir(parents=True)
        lg.info(f"created test run directory: {run_dir}")
    os.environ[RUN_DIR_ENV_VAR] = str(run_dir)
    return run_dir


def _create_directories(base_dir: Path) -> None:
    lg = get_logger("session")
    for name in (LogConstants.DEFAULT_LOG_DIR, RUNS_DIR):
        path = base_dir / name
        if not path.exists():
            path.mkdir(parents=True)
            lg.info(f"created directory: {path}")


def _check_data_files(base_dir: Path, data_files: Iterable[str | Path]) -> bool:
    """Warn about expected data files that are missing. Never raises."""
    lg = get_logger("session")
    lg.info("validating test data files")
    all_present = True
    for data_file in data_files:
        if (base_dir / data_file).exists():
            lg.info(f"test data file exists: {data_file}")
        else:
            lg.warning(f"test data file missing: {data_file}")
            all_present = False
    if not all_present:
        lg.warning("some test data files are missing, tests may fail")
    return all_present


def global_setup(
    resolver: ConfigResolver | None = None,
    data_provider: DataProvider | None = None,
    screenshots: ScreenshotHelper | None = None,
    credential_key: str | None = None,
    data_files: Iterable[str | Path] = (),
    base_dir: str | Path | None = None,
    dotenv_path: str | Path | None = None,
) -> RunContext:
    """
    Prepare a test run.

    Steps: load .env (existing environment variables win), validate the
    environment table, log the base URL, create or reuse the run directory,
    point screenshots at it and drop screenshots older than seven days,
    enable data caching, warn about missing data files, and fetch the login
    credentials.

    Args:
        resolver: Resolver to use (default: the process-wide resolver)
        data_provider: Data provider to enable caching on
        screenshots: Screenshot helper to move into the run directory
        credential_key: Login credential key (default: AUTH_CREDENTIAL_KEY,
            else "RBCClient")
        data_files: Data files, relative to base_dir, that tests expect
        base_dir: Root for logs/, test-runs/ and data files (default: cwd)
        dotenv_path: .env file to load (default: <base_dir>/.env)

    Returns:
        RunContext for the run

    Raises:
        PomError: Any configuration error, after logging it
    """
    lg = get_logger("session")
    _banner("GLOBAL SETUP - START")
    try:
        root = Path(base_dir) if base_dir is not None else Path.cwd()
        load_dotenv(dotenv_path or root / ".env", override=False)
        resolver = resolver or get_default_resolver()

        resolver.validate_config()
        environment = resolver.get_active_environment_name()
        base_url = resolver.get_base_url()
        lg.info(f"environment: {environment}")
        lg.info(f"base url: {base_url}")

        run_dir = _create_run_directory(root)
        lg.info(f"test run directory: {run_dir}")
        _create_directories(root)

        screenshots = screenshots or ScreenshotHelper()
        screenshots.set_run_directory(run_dir)
        screenshots.clean_old(SCREENSHOT_RETENTION_DAYS)

        data_provider = data_provider or DataProvider()
        data_provider.set_caching(True)

        _check_data_files(root, data_files)

        key = credential_key or os.environ.get(CREDENTIAL_KEY_ENV_VAR) or DEFAULT_CREDENTIAL_KEY
        lg.info("fetching login credentials")
        credentials = resolver.get_credentials(key)
        lg.info(f"fetched credentials for: {key}", extra={"username": credentials.username})

        resolver.log_summary()
        lg.info("global setup completed successfully")
    except Exception as e:
        lg.error(f"global setup failed: {e}")
        raise
    finally:
        _banner("GLOBAL SETUP - END")

    return RunContext(
        run_dir=run_dir,
        environment=environment,
        base_url=base_url,
        resolver=resolver,
        data_provider=data_provider,
        screenshots=screenshots,
        credential_key=key,
        credentials=credentials,
    )


def global_teardown(context: RunContext) -> Path:
    """
    Close a test run: clear the data cache and write test-summary.json
    into the run directory.

    Returns:
        Path of the written summary
    """
    lg = get_logger("session")
    _banner("GLOBAL TEARDOWN - START")
    try:
        context.data_provider.clear_cache()

        summary = context.summary()
        summary_path = context.run_dir / SUMMARY_FILE
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

        lg.info(f"test summary saved: {summary_path}")
        lg.info(f"environment: {context.environment}")
        lg.info(f"run directory: {context.run_dir}")
        lg.info("global teardown completed successfully")
    except Exception as e:
        lg.error(f"global teardown failed: {e}")
        raise
    finally:
        _banner("GLOBAL TEARDOWN - END")
    return summary_path
