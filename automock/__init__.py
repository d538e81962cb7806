"""Transparent auto-mocking for test suites.

Override a module once and every member read or call on it is intercepted,
recorded and made inert, including members that do not exist::

    import blessed
    from automock import override_modules

    override_modules([blessed])
    form = blessed.form({})
    form.on("submit", handler)
    assert form.on.mock.call_count == 1
"""

from automock.exceptions import AutomockError, MockAssertionError, OverrideError
from automock.mock import MISSING, Call, MockFunction, MockRecord, create_mock
from automock.proxy import DeepProxy, is_proxy, wrap
from automock.registry import (
    OverrideRegistry,
    get_registry,
    mock_method,
    override_modules,
    restore_all,
)

__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "AutomockError",
    "Call",
    "DeepProxy",
    "MockAssertionError",
    "MockFunction",
    "MockRecord",
    "OverrideError",
    "OverrideRegistry",
    "create_mock",
    "get_registry",
    "is_proxy",
    "mock_method",
    "override_modules",
    "restore_all",
    "wrap",
]
