"""
pytest plugin with fixtures for suites built on pomkit.

Enable it from a conftest.py:

    pytest_plugins = ["pomkit.testing"]

Command line options:
    --pom-config FILE       Environment table file (default: etc/environments.yaml lookup)
    --pom-env NAME          Active environment for the session
    --credential-key KEY    Credential key for the ``credentials`` fixture

Usage:
    def test_login(pom_resolver, credentials, pom_logger):
        pom_logger.step("open login page")
        url = pom_resolver.get_url("login")
        ...
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from pomkit.config import ConfigResolver, Credentials, EnvironmentTable, load_default_table
from pomkit.data import DataProvider
from pomkit.log import Logger, get_logger
from pomkit.screenshot import ScreenshotHelper
from pomkit.session import DEFAULT_CREDENTIAL_KEY, get_run_directory


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("pomkit", "page-object test configuration")
    group.addoption(
        "--pom-config",
        action="store",
        default=None,
        metavar="FILE",
        help="environment table file (default: etc/environments.yaml lookup)",
    )
    group.addoption(
        "--pom-env",
        action="store",
        default=None,
        metavar="NAME",
        help="active environment for the session (default: TEST_ENV, else QA)",
    )
    group.addoption(
        "--credential-key",
        action="store",
        default=DEFAULT_CREDENTIAL_KEY,
        metavar="KEY",
        help=f"credential key for the credentials fixture (default: {DEFAULT_CREDENTIAL_KEY})",
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase's report on the item so fixtures can see the outcome."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def pom_table(request: pytest.FixtureRequest) -> EnvironmentTable:
    """The environment table for the session."""
    config_file = request.config.getoption("--pom-config")
    if config_file:
        return EnvironmentTable.from_file(config_file)
    return load_default_table()


@pytest.fixture(scope="session")
def pom_resolver(request: pytest.FixtureRequest, pom_table: EnvironmentTable) -> ConfigResolver:
    """Session resolver; --pom-env sets its active environment."""
    resolver = ConfigResolver(pom_table)
    env = request.config.getoption("--pom-env")
    if env:
        resolver.set_active_environment(env)
    return resolver


@pytest.fixture
def credential_key(request: pytest.FixtureRequest) -> str:
    """Credential key for the credentials fixture. Override per module if needed."""
    return str(request.config.getoption("--credential-key"))


@pytest.fixture
def credentials(pom_resolver: ConfigResolver, credential_key: str) -> Credentials:
    get_logger("fixtures").info(
        f"fetching credentials for: {credential_key} "
        f"(environment: {pom_resolver.get_active_environment_name()})"
    )
    return pom_resolver.get_credentials(credential_key)


@pytest.fixture(scope="session")
def data_provider() -> DataProvider:
    return DataProvider()


@pytest.fixture(scope="session")
def screenshot_helper() -> ScreenshotHelper:
    """Screenshot helper writing into the current run directory."""
    helper = ScreenshotHelper()
    helper.set_run_directory(get_run_directory())
    return helper


@pytest.fixture
def pom_logger(request: pytest.FixtureRequest) -> Generator[Logger, None, None]:
    """
    Framework logger that brackets the test with start and end banners.

    The end banner carries the outcome of the test call (PASSED, FAILED or
    SKIPPED).
    """
    lg = get_logger("test")
    name = request.node.name
    lg.test_start(name)
    yield lg

    report = getattr(request.node, "rep_call", None)
    status = report.outcome if report is not None else "skipped"
    lg.test_end(name, status)


def pytest_report_header(config: pytest.Config) -> str | None:
    env = config.getoption("--pom-env")
    table = config.getoption("--pom-config")
    if not env and not table:
        return None
    return f"pomkit: env={env or 'default'} table={Path(table) if table else 'default'}"
