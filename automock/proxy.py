"""Deep proxy wrapper: intercepts member reads and calls on any value.

``wrap(target)`` returns a ``DeepProxy`` standing in for *target*. Every member
read through the proxy is resolved statically against the target and re-wrapped
one level deeper; every call is recorded and returns another proxy, so chains
such as ``blessed.form({}).on("submit", handler)`` stay intercepted at every
hop. Members that do not exist are fabricated rather than reported missing.

Produced members are cached per proxy, so reading the same name twice returns
the identical object and test code can hold on to a handle and assert against
it later.
"""

import inspect
import logging
import types
from collections.abc import Iterator
from typing import Any, Optional

from automock.config import (
    DEFAULT_NAME,
    PRIMITIVE_TYPES,
    RESERVED_MEMBERS,
    RESULT_SUFFIX,
)
from automock.mock import MISSING, MockRecord, create_mock

logger = logging.getLogger(__name__)


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def target_name(target: Any) -> str:
    """Best-effort display name for *target* that runs none of its code."""
    if isinstance(
        target,
        (types.ModuleType, types.FunctionType, types.BuiltinFunctionType, type),
    ):
        return target.__name__
    if target is MISSING:
        return DEFAULT_NAME
    if isinstance(target, DeepProxy):
        return target._proxy_name
    return type(target).__name__


def _resolve_member(target: Any, name: str, qualified: str) -> Any:
    """Produce the stand-in for ``target.<name>``.

    The lookup is static: ``__getattr__`` hooks and property getters on the
    target never run.

    Args:
        target: The wrapped value, or ``MISSING`` for a fabricated proxy.
        name: The member being read.
        qualified: Display name for the produced proxy.

    Returns:
        The primitive value itself, or a new ``DeepProxy`` over the member
        (over ``MISSING`` when the member is absent or is a data descriptor).
    """
    if target is MISSING:
        value = MISSING
    else:
        value = inspect.getattr_static(target, name, MISSING)

    if isinstance(value, (staticmethod, classmethod)):
        value = value.__func__

    if isinstance(value, PRIMITIVE_TYPES):
        return value

    if value is MISSING or inspect.isdatadescriptor(value):
        logger.debug("Fabricating mock for %s", qualified)
        return DeepProxy(MISSING, qualified)

    return DeepProxy(value, qualified)


class DeepProxy:
    """Stand-in for one value that records calls and wraps what it returns.

    Functions and objects are handled the same way: a proxy is always
    callable, and always resolves members through its target. The only
    attribute of its own is ``mock``, the ``MockRecord`` for calls made on the
    proxy itself.

    Attribute assignment stores the value on the proxy only; the wrapped
    target is never mutated.

    Args:
        target: The value to wrap, or ``MISSING`` for a fabricated member.
        name: Qualified display name used in records and log messages.
    """

    __slots__ = (
        "_proxy_target",
        "_proxy_name",
        "_proxy_members",
        "_proxy_items",
        "_proxy_call",
        "_proxy_result",
    )

    def __init__(self, target: Any, name: str) -> None:
        object.__setattr__(self, "_proxy_target", target)
        object.__setattr__(self, "_proxy_name", name)
        object.__setattr__(self, "_proxy_members", {})
        object.__setattr__(self, "_proxy_items", {})
        object.__setattr__(self, "_proxy_result", None)
        object.__setattr__(
            self,
            "_proxy_call",
            create_mock(MockRecord(name), self._proxy_make_result),
        )

    @property
    def mock(self) -> MockRecord:
        """Call history and configuration for calls made on this proxy."""
        return self._proxy_call.mock

    def _proxy_make_result(self) -> "DeepProxy":
        # One result proxy per wrapper, shared by every call.
        result = self._proxy_result
        if result is None:
            result = DeepProxy(MISSING, self._proxy_name + RESULT_SUFFIX)
            object.__setattr__(self, "_proxy_result", result)
        return result

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._proxy_call(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if is_dunder(name) or name.startswith("_proxy_"):
            raise AttributeError(name)
        members = self._proxy_members
        try:
            return members[name]
        except KeyError:
            pass
        member = _resolve_member(
            self._proxy_target, name, f"{self._proxy_name}.{name}",
        )
        members[name] = member
        return member

    def __setattr__(self, name: str, value: Any) -> None:
        if name in RESERVED_MEMBERS or name.startswith("_proxy_"):
            raise AttributeError(f"'{name}' is reserved on {self!r}")
        self._proxy_members[name] = value

    def __delattr__(self, name: str) -> None:
        self._proxy_members.pop(name, None)

    def __dir__(self) -> list[str]:
        names = set(self._proxy_members) | RESERVED_MEMBERS
        if self._proxy_target is not MISSING:
            names.update(dir(self._proxy_target))
        return sorted(names)

    def __repr__(self) -> str:
        return f"<DeepProxy {self._proxy_name} calls={self.mock.call_count}>"

    # Duck-typing conveniences for code that treats members as widgets or
    # containers. A proxy is always truthy but looks like an empty sequence
    # to len() and iteration; subscripts fabricate a stable mock per key.

    def __bool__(self) -> bool:
        return True

    def __iter__(self) -> Iterator[Any]:
        return iter(())

    def __len__(self) -> int:
        return 0

    def __getitem__(self, key: Any) -> "DeepProxy":
        items = self._proxy_items
        label = repr(key)
        try:
            return items[label]
        except KeyError:
            pass
        item = DeepProxy(MISSING, f"{self._proxy_name}[{label}]")
        items[label] = item
        return item

    def __enter__(self) -> "DeepProxy":
        return self

    def __exit__(self, *exc_info: Any) -> bool:
        return False


def wrap(target: Any, name: Optional[str] = None) -> DeepProxy:
    """Wrap *target* in a ``DeepProxy``.

    Args:
        target: Any object, function or module.
        name: Display name for the proxy; defaults to the target's
            ``__name__`` (or its type name).

    Returns:
        A proxy whose member reads and calls are intercepted and recorded.
    """
    return DeepProxy(target, name or target_name(target))


def is_proxy(value: Any) -> bool:
    return isinstance(value, DeepProxy)


def member_of(proxy: DeepProxy, name: str) -> Any:
    """Read member *name* through *proxy*, even where it is shadowed by ``mock``."""
    return DeepProxy.__getattr__(proxy, name)
