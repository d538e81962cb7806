"""pytest integration for automock.

Enable it from a top-level ``conftest.py`` with
``pytest_plugins = ["automock.plugin"]`` (or ``-p automock.plugin``). It adds:

- the ``override_registry`` fixture: a fresh ``OverrideRegistry`` per test,
  restored at teardown;
- the ``automock_modules`` ini option: import names of modules overridden for
  every test;
- the ``override_modules`` marker: modules (import names or module objects)
  overridden for a single test.
"""

import importlib
import logging
from collections.abc import Iterator
from typing import Any

import pytest

from automock.config import INI_MODULES_OPTION, MARKER_NAME
from automock.registry import OverrideRegistry

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the ``automock_modules`` ini option."""
    parser.addini(
        INI_MODULES_OPTION,
        type="linelist",
        default=[],
        help="Import names of modules to override with automock for every test",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``override_modules`` marker."""
    config.addinivalue_line(
        "markers",
        f"{MARKER_NAME}(*modules): override the given modules (import names "
        "or module objects) with automock proxies for this test",
    )


def _resolve_target(target: Any) -> Any:
    if isinstance(target, str):
        return importlib.import_module(target)
    return target


@pytest.fixture
def override_registry() -> Iterator[OverrideRegistry]:
    """Yield a per-test registry; every override it applied is undone after."""
    registry = OverrideRegistry()
    yield registry
    registry.restore_all()


@pytest.fixture(autouse=True)
def _automock_configured_overrides(
    request: pytest.FixtureRequest,
    override_registry: OverrideRegistry,
) -> None:
    """Apply overrides requested by the ini option and markers."""
    targets: list[Any] = list(request.config.getini(INI_MODULES_OPTION))
    for marker in request.node.iter_markers(MARKER_NAME):
        targets.extend(marker.args)
    if not targets:
        return
    logger.debug("Applying configured overrides for %s: %s", request.node.nodeid, targets)
    override_registry.override_modules(_resolve_target(t) for t in targets)
