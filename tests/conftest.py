"""Shared test configuration and fixtures.

``fake_tui`` is overridden in place by many tests, so every test ends by
restoring the process-wide registry; otherwise overrides would leak from one
test into the next.
"""

import pytest

import fake_tui as _fake_tui
from automock import restore_all


@pytest.fixture(autouse=True)
def _restore_default_registry():
    yield
    restore_all()


@pytest.fixture
def fake_tui():
    """The fake terminal UI module, in its original (un-overridden) state."""
    return _fake_tui
