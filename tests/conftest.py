import os
import sys


PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from sendly import Sendly
from sendly.utils.config import get_settings


TEST_KEY = "sk_test_v1_abc123"


class NoJitter:
    """Stands in for random.Random so backoff delays are exact."""

    def uniform(self, a: float, b: float) -> float:
        return a


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Record retry delays instead of waiting them out."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def no_jitter() -> NoJitter:
    return NoJitter()


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sendly(fake_sleep, no_jitter):
    """Client whose requests respx can intercept, with retry sleeps recorded."""
    return Sendly(TEST_KEY, sleep=fake_sleep, rng=no_jitter)
