"""
Pytest configuration and shared fixtures for LazarusKit tests.
"""

import pytest

from lazaruskit.core.platform import PlatformInfo, clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from the runner environment they may execute in."""
    for name in (
        "INPUT_LAZARUS-VERSION",
        "INPUT_INCLUDE-PACKAGES",
        "INPUT_WITH-CACHE",
        "RUNNER_TEMP",
        "RUNNER_TOOL_CACHE",
        "GITHUB_PATH",
        "GITHUB_ENV",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def runner_env(tmp_path, monkeypatch):
    """
    Simulated GitHub Actions runner.

    Provides RUNNER_TEMP, RUNNER_TOOL_CACHE and the GITHUB_PATH / GITHUB_ENV
    command files, all under tmp_path.
    """
    temp = tmp_path / "runner_temp"
    tool_cache = tmp_path / "tool_cache"
    temp.mkdir()
    tool_cache.mkdir()
    github_path = tmp_path / "github_path"
    github_env = tmp_path / "github_env"
    github_path.touch()
    github_env.touch()

    monkeypatch.setenv("RUNNER_TEMP", str(temp))
    monkeypatch.setenv("RUNNER_TOOL_CACHE", str(tool_cache))
    monkeypatch.setenv("GITHUB_PATH", str(github_path))
    monkeypatch.setenv("GITHUB_ENV", str(github_env))
    monkeypatch.setenv("PATH", "/usr/bin")
    # Restored to unset on teardown after installers export it
    monkeypatch.setenv("FPCDIR", "")

    return {
        "temp": temp,
        "tool_cache": tool_cache,
        "github_path": github_path,
        "github_env": github_env,
    }


@pytest.fixture
def linux_x64() -> PlatformInfo:
    return PlatformInfo("linux", "x64", "6.5.0")


@pytest.fixture
def windows_x64() -> PlatformInfo:
    return PlatformInfo("windows", "x64", "10.0.20348")


@pytest.fixture
def windows_x86() -> PlatformInfo:
    return PlatformInfo("windows", "x86", "10.0.20348")


@pytest.fixture
def macos_x64() -> PlatformInfo:
    return PlatformInfo("macos", "x64", "13.6")
