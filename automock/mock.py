"""Mock records and the mock function factory.

A ``MockRecord`` holds the call history and configuration of one synthesized
mock. ``create_mock()`` builds the callable bound to a record. The callable
only records: it never forwards to, or executes, the behaviour it stands in
for.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from automock.exceptions import MockAssertionError

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel type for "no value": unset configuration, absent members."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _format_call(name: str, args: tuple, kwargs: dict[str, Any]) -> str:
    """Render a call the way it would appear in source, e.g. ``f(1, x=2)``."""
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"{name}({', '.join(parts)})"


@dataclass(frozen=True)
class Call:
    """One recorded invocation of a mock.

    Attributes:
        args: Positional arguments, in order.
        kwargs: Keyword arguments.
    """

    args: tuple
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def arguments(self) -> list[Any]:
        """Positional arguments as a list."""
        return list(self.args)

    def matches(self, args: tuple, kwargs: dict[str, Any]) -> bool:
        return self.args == args and self.kwargs == kwargs


@dataclass
class MockRecord:
    """Call history and configuration for one mock function.

    ``calls`` is append-only while a test runs; a record is never reset; the
    registry replaces it with a fresh one when an override is re-applied.

    Attributes:
        name: Qualified name of the mocked member (e.g. ``"blessed.form().on"``).
        calls: Every invocation, in the order it happened.
        return_value: Value returned by calls, or ``MISSING`` if not configured.
        side_effect: Callable run with each call's arguments; its result is
            returned. Takes precedence over ``return_value``.
    """

    name: str
    calls: list[Call] = field(default_factory=list)
    return_value: Any = MISSING
    side_effect: Optional[Callable[..., Any]] = None

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def last_call(self) -> Optional[Call]:
        return self.calls[-1] if self.calls else None

    # -----------------------------------------------------------------------
    # Assertions
    # -----------------------------------------------------------------------

    def _describe_calls(self) -> str:
        if not self.calls:
            return "no calls"
        return ", ".join(
            _format_call(self.name, call.args, call.kwargs) for call in self.calls
        )

    def assert_called(self) -> None:
        """Fail unless the mock was called at least once."""
        if not self.calls:
            raise MockAssertionError(self.name, "at least one call", "no calls")

    def assert_not_called(self) -> None:
        """Fail if the mock was called."""
        if self.calls:
            raise MockAssertionError(self.name, "no calls", self._describe_calls())

    def assert_called_once(self) -> None:
        """Fail unless the mock was called exactly once."""
        if self.call_count != 1:
            raise MockAssertionError(
                self.name,
                "exactly one call",
                f"{self.call_count} calls: {self._describe_calls()}",
            )

    def assert_called_with(self, *args: Any, **kwargs: Any) -> None:
        """Fail unless the most recent call used exactly these arguments."""
        expected = _format_call(self.name, args, kwargs)
        last = self.last_call
        if last is None:
            raise MockAssertionError(self.name, expected, "no calls")
        if not last.matches(args, kwargs):
            raise MockAssertionError(
                self.name, expected, _format_call(self.name, last.args, last.kwargs)
            )

    def assert_called_once_with(self, *args: Any, **kwargs: Any) -> None:
        """Fail unless the mock was called exactly once, with these arguments."""
        self.assert_called_once()
        self.assert_called_with(*args, **kwargs)

    def assert_any_call(self, *args: Any, **kwargs: Any) -> None:
        """Fail unless some recorded call used exactly these arguments."""
        if not any(call.matches(args, kwargs) for call in self.calls):
            raise MockAssertionError(
                self.name,
                f"a call {_format_call(self.name, args, kwargs)}",
                self._describe_calls(),
            )


class MockFunction:
    """Callable bound to a ``MockRecord``. Build with ``create_mock()``.

    Attributes:
        mock: The record this function appends to.
    """

    __slots__ = ("mock", "_default_result")

    def __init__(
        self,
        record: MockRecord,
        default_result: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.mock = record
        self._default_result = default_result

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        record = self.mock
        record.calls.append(Call(args, dict(kwargs)))
        logger.debug(
            "Recorded call #%d: %s",
            record.call_count, _format_call(record.name, args, kwargs),
        )
        if record.side_effect is not None:
            return record.side_effect(*args, **kwargs)
        if record.return_value is not MISSING:
            return record.return_value
        if self._default_result is not None:
            return self._default_result()
        return None

    def __repr__(self) -> str:
        return f"<MockFunction {self.mock.name} calls={self.mock.call_count}>"


def create_mock(
    record: MockRecord,
    default_result: Optional[Callable[[], Any]] = None,
) -> MockFunction:
    """Build a mock function that records every call into *record*.

    The call count is never tracked separately: it is always
    ``len(record.calls)``.

    Args:
        record: The record to append calls to.
        default_result: Zero-argument factory for the value returned when the
            record has neither ``side_effect`` nor ``return_value``
            configured. Without one, calls return ``None``.

    Returns:
        A ``MockFunction`` accepting any arguments.
    """
    return MockFunction(record, default_result)
