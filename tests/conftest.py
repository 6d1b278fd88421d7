"""pytest configuration and fixtures for fastersync tests."""

import pytest

from fastersync.config import set_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings from the environment around every test.

    Tests that install their own Settings via set_settings() do not leak
    the double settlement policy into later tests.
    """
    set_settings(None)
    yield
    set_settings(None)

