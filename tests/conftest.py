# tests/conftest.py
"""Shared test configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import os
from collections.abc import Iterator

import pytest
from hypothesis import Phase, Verbosity, settings

from signalfan.dispatcher import Dispatcher
from signalfan.scheduling import ManualScheduler
from tests.fixtures import Navigator, RecordingAnalyticsClient, RecordingErrorClient

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def analytics_client() -> RecordingAnalyticsClient:
    return RecordingAnalyticsClient("noop")


@pytest.fixture
def error_client() -> RecordingErrorClient:
    return RecordingErrorClient("noop_error")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def dispatcher(scheduler: ManualScheduler, navigator: Navigator) -> Iterator[Dispatcher]:
    """Empty Dispatcher with a manual scheduler and recording navigator.

    The dispatcher is closed after the test.
    """
    dispatcher = Dispatcher(navigate=navigator, scheduler=scheduler)
    yield dispatcher
    dispatcher.close()
