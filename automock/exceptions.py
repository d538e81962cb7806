"""Custom exception classes for automock.

Normal operation of the mocking layer never raises: missing members are
fabricated and mocks accept any arguments. The exceptions here cover misuse of
the registry and failed assertions in test code.
"""

from typing import Any


class AutomockError(Exception):
    """Base class for every error raised by automock."""


class OverrideError(AutomockError):
    """Raised when a target cannot be overridden in place.

    Primitives, and objects without a writable ``__dict__`` (for example
    instances of ``__slots__`` classes or builtin types), have no members that
    can be substituted. Any member already replaced before the failure is put
    back before this is raised.

    Args:
        target: The object that could not be overridden.
        reason: Human-readable explanation of why the override failed.
        member: The member being substituted when the failure occurred, if any.
    """

    def __init__(self, target: Any, reason: str, member: str = "") -> None:
        self.target = target
        self.reason = reason
        self.member = member
        where = f" (member '{member}')" if member else ""
        super().__init__(
            f"Cannot override {target!r}{where}: {reason}"
        )


class MockAssertionError(AutomockError, AssertionError):
    """Raised by ``MockRecord`` assertion helpers when the check fails.

    Subclasses ``AssertionError`` so pytest reports it as a test failure
    rather than an error.

    Args:
        name: Qualified name of the mock being checked.
        expected: Description of what the assertion expected.
        actual: Description of what was actually recorded.
    """

    def __init__(self, name: str, expected: str, actual: str) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Mock '{name}': expected {expected}, got {actual}"
        )
