"""
Pytest configuration and shared fixtures for the autoprofiler test suite.

This module provides common fixtures, in-memory page and browser fakes, and
configuration for all test modules in the autoprofiler project.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Page and Browser Fakes
# ============================================================================


class FakePage:
    """
    In-memory PageHandle.

    Each ``read_and_clear_samples`` call pops the next capture from the shared
    ``captures`` list; an exhausted list yields empty captures.
    """

    def __init__(self, captures: List[List[Dict[str, Any]]], fail_on: Optional[Dict[str, Exception]] = None):
        self.captures = captures
        self.fail_on = fail_on or {}
        self.actions: List[tuple] = []
        self.sampling: List[bool] = []
        self.procedures_run = 0
        self.reads = 0
        self.closed = False

    async def execute(self, action, argument):
        if self.closed:
            raise RuntimeError("Target page, context or browser has been closed")
        self.actions.append((action.value, argument))
        if argument in self.fail_on:
            raise self.fail_on[argument]

    async def run_procedure(self, procedure):
        if self.closed:
            raise RuntimeError("Target page, context or browser has been closed")
        self.procedures_run += 1
        await procedure(self)

    async def set_sampling_enabled(self, enabled):
        self.sampling.append(enabled)

    async def read_and_clear_samples(self):
        self.reads += 1
        if self.captures:
            return list(self.captures.pop(0))
        return []

    async def close(self):
        self.closed = True


class FakeBrowser:
    """Page provider fake; every page it opens shares one capture queue."""

    def __init__(self, captures: Optional[List[List[Dict[str, Any]]]] = None,
                 fail_on: Optional[Dict[str, Exception]] = None):
        self.captures = list(captures or [])
        self.fail_on = fail_on
        self.pages: List[FakePage] = []
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True

    async def new_page(self):
        page = FakePage(self.captures, self.fail_on)
        self.pages.append(page)
        return page


class FakeBrowserFactory:
    """
    Stands in for PlaywrightPageProvider in AutomationRunner.

    Repetition ``i`` gets a FakeBrowser fed with ``captures_per_repetition[i]``.
    """

    def __init__(self, captures_per_repetition: List[List[List[Dict[str, Any]]]],
                 fail_on: Optional[Dict[str, Exception]] = None):
        self.captures_per_repetition = list(captures_per_repetition)
        self.fail_on = fail_on
        self.browsers: List[FakeBrowser] = []
        self.browser_configs: List[Any] = []

    def __call__(self, browser_config):
        index = len(self.browsers)
        captures = (
            self.captures_per_repetition[index]
            if index < len(self.captures_per_repetition)
            else []
        )
        browser = FakeBrowser(captures, self.fail_on)
        self.browsers.append(browser)
        self.browser_configs.append(browser_config)
        return browser


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    FakePage = FakePage
    FakeBrowser = FakeBrowser
    FakeBrowserFactory = FakeBrowserFactory

    @staticmethod
    def make_sample(
        actual: float = 10.0,
        base: float = 8.0,
        commit: float = 100.0,
        start: float = 95.0,
        phase: str = "update",
        sample_id: str = "App",
        interactions: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Create a raw render sample as the page's instrumentation reports it."""
        return {
            "actualDuration": actual,
            "baseDuration": base,
            "commitTime": commit,
            "startTime": start,
            "phase": phase,
            "id": sample_id,
            "interactions": interactions or [],
        }

    @staticmethod
    def make_batch(actuals: List[float], number_of_interactions: float = 1, batch_id: str = "batch"):
        """Create a SampleBatch with one entry per actual duration."""
        from autoprofiler.models.samples import SampleBatch

        return SampleBatch.from_samples(
            [TestUtils.make_sample(actual=a, base=a / 2) for a in actuals],
            number_of_interactions=number_of_interactions,
            batch_id=batch_id,
        )


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def batch_id_factory():
    """Deterministic batch ids."""
    return lambda label: f"{label}-batch"


@pytest.fixture
def automation_settings(temp_dir):
    """Validated AutomationConfig for a single repetition against a local page."""
    from autoprofiler.models.config import AutomationConfig, BrowserConfig

    return AutomationConfig(
        average_of=1,
        include_mount=False,
        output="json",
        output_dir=temp_dir / "logs",
        browser=BrowserConfig(url="http://localhost:3000"),
    )


@pytest.fixture
def login_flows():
    """The scripted login flow used across tests."""
    return {"login": ["click #login-btn", "focus #email", "wait 500"]}


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data(temp_dir):
    """Sample `[automation]` configuration data for testing."""
    return {
        "general": {
            "average_of": 2,
            "include_mount": True,
            "output": "chart",
            "output_dir": "results",
        },
        "browser": {
            "url": "http://localhost:3000",
            "headless": False,
            "browser_args": ["--disable-gpu"],
            "viewport_width": 1280,
            "viewport_height": 720,
        },
        "retry": {"max_empty_capture_retries": 2},
        "aggregation": {"divisor": "contributing", "length_mismatch": "error"},
        "storage": {"format": "json", "compression": "gzip"},
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data, login_flows):
    """Create temporary configuration files for testing."""
    import toml

    flows_file = temp_dir / "flows.toml"
    with open(flows_file, "w") as f:
        toml.dump({"flows": login_flows}, f)

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(
            {"paths": {"flows_config": "flows.toml"}, "automation": sample_config_data},
            f,
        )

    return {
        "config": config_file,
        "flows": flows_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from autoprofiler.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)
