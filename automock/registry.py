"""Override registry: installs deep proxies over shared module objects.

Modules are singleton namespace objects, so an override cannot simply rebind a
name: every holder of the module reference must see the mock. The registry
therefore substitutes the module's members in place with the members of a
``DeepProxy`` over the module, and remembers the originals so they can be put
back between test cases.

Re-applying an override to the same module discards the previous wrapper and
all of its records. Call ``override_modules()`` before each test (or use the
``override_registry`` fixture from ``automock.plugin``) to avoid call counts
leaking from one test into the next; the registry does not detect it.

Known limitation: a caller that bound a top-level function before the
override (``from blessed import screen``) keeps the original function, which
in-place substitution cannot reach. Instrument such call sites explicitly with
``mock_method(owner, name)``.
"""

import inspect
import itertools
import logging
import types
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from automock.config import MODULE_GETATTR, PRIMITIVE_TYPES
from automock.exceptions import OverrideError
from automock.mock import MISSING
from automock.proxy import (
    DeepProxy,
    is_dunder,
    is_proxy,
    member_of,
    target_name,
    wrap,
)

logger = logging.getLogger(__name__)


@dataclass
class OverrideEntry:
    """One active override: a module, its wrapper, and what was replaced.

    Attributes:
        module: The original module reference (kept alive while overridden).
        wrapper: The proxy whose members now stand in for the module's.
        sequence: Order in which overrides were applied, for undo.
        originals: Replaced member names mapped to their original values.
        previous_getattr: The module's own ``__getattr__`` before the
            override, or ``MISSING``.
        installed_getattr: Whether a fabricating ``__getattr__`` was installed.
    """

    module: Any
    wrapper: DeepProxy
    sequence: int
    originals: dict[str, Any] = field(default_factory=dict)
    previous_getattr: Any = MISSING
    installed_getattr: bool = False


@dataclass
class Instrumentation:
    """A single attribute replaced by ``mock_method()``.

    Attributes:
        owner: The object whose attribute was replaced.
        name: The attribute name.
        original: The value in the owner's own namespace before replacement,
            or ``MISSING`` if the attribute was inherited or absent.
        proxy: The recording proxy installed in its place.
        sequence: Order in which instrumentations were applied, for undo.
    """

    owner: Any
    name: str
    original: Any
    proxy: DeepProxy
    sequence: int


def _namespace_of(target: Any) -> Any:
    """Return the writable namespace mapping of *target*.

    Raises:
        OverrideError: If *target* is a primitive, a proxy, or has no
            ``__dict__``.
    """
    if isinstance(target, PRIMITIVE_TYPES):
        raise OverrideError(target, "primitive values have no members to replace")
    if is_proxy(target):
        raise OverrideError(target, "target is already an automock proxy")
    try:
        return vars(target)
    except TypeError as exc:
        raise OverrideError(target, "it has no __dict__") from exc


class OverrideRegistry:
    """Table of active overrides, one entry per module identity.

    An explicit registry can be created per test and passed around; the
    module-level functions in this module share a process-wide default.
    """

    def __init__(self) -> None:
        self._entries: dict[int, OverrideEntry] = {}
        self._instrumented: list[Instrumentation] = []
        self._sequence = itertools.count()

    def __contains__(self, module: Any) -> bool:
        return id(module) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # -----------------------------------------------------------------------
    # Applying overrides
    # -----------------------------------------------------------------------

    def override_modules(self, modules: Iterable[Any]) -> None:
        """Override every module in *modules*, in order.

        Args:
            modules: Module objects (or other namespace objects) to replace
                in place with deep proxies.

        Raises:
            OverrideError: If a target cannot be overridden. Targets earlier
                in the sequence stay overridden.
        """
        for module in modules:
            self.override(module)

    def override(self, module: Any) -> DeepProxy:
        """Replace the members of *module* in place with proxied members.

        If *module* is already overridden, its originals are restored first
        (together with any ``mock_method()`` instrumentation on it) and a
        fresh wrapper is built, so every record starts at zero calls.

        Args:
            module: A module object, class, or instance with a ``__dict__``.
                For an instance, the methods of its class are shadowed on
                the instance itself.

        Returns:
            The wrapper standing in for *module*.

        Raises:
            OverrideError: If *module* has no writable members. Any member
                already replaced is put back before raising.
        """
        if module in self:
            logger.debug("Re-applying override; discarding previous records")
            self.restore(module)

        namespace = _namespace_of(module)
        wrapper = wrap(module)
        entry = OverrideEntry(module, wrapper, next(self._sequence))

        for name in self._member_names(module, namespace):
            original = namespace.get(name, MISSING)
            replacement = member_of(wrapper, name)
            if replacement is original:
                continue
            try:
                setattr(module, name, replacement)
            except (AttributeError, TypeError) as exc:
                self._put_back(entry)
                raise OverrideError(module, str(exc), member=name) from exc
            entry.originals[name] = original

        if isinstance(module, types.ModuleType):
            self._install_getattr(entry)

        self._entries[id(module)] = entry
        logger.info(
            "Overrode %s (%d members replaced)",
            wrapper.mock.name, len(entry.originals),
        )
        return wrapper

    @staticmethod
    def _member_names(module: Any, namespace: Any) -> list[str]:
        """Names of the members of *module* to substitute.

        Modules and classes contribute their own namespace. An instance also
        contributes the methods and other non-primitive attributes of its
        class, which are shadowed on the instance and deleted on restore.
        Data descriptors (properties) of the class cannot be shadowed per
        instance and are left in place.
        """
        names = [name for name in namespace if not is_dunder(name)]
        if isinstance(module, (types.ModuleType, type)):
            return names
        cls = type(module)
        for name in dir(cls):
            if is_dunder(name) or name in namespace:
                continue
            value = inspect.getattr_static(cls, name, MISSING)
            if isinstance(value, PRIMITIVE_TYPES) or inspect.isdatadescriptor(value):
                continue
            names.append(name)
        return names

    def _install_getattr(self, entry: OverrideEntry) -> None:
        """Make missing members of the module itself fabricate mocks (PEP 562)."""
        namespace = vars(entry.module)
        entry.previous_getattr = namespace.get(MODULE_GETATTR, MISSING)
        wrapper = entry.wrapper

        def fabricate(name: str) -> Any:
            return member_of(wrapper, name)

        setattr(entry.module, MODULE_GETATTR, fabricate)
        entry.installed_getattr = True

    def mock_method(self, owner: Any, name: str) -> DeepProxy:
        """Replace ``owner.<name>`` with a recording proxy over its current value.

        Use this for call boundaries the module override cannot reach, such
        as a function imported by name before the override was applied.

        Args:
            owner: Any object with a writable namespace (module, class,
                instance, or an automock proxy).
            name: The attribute to instrument. It need not exist.

        Returns:
            The installed proxy; assert against its ``mock`` record.

        Raises:
            OverrideError: If the attribute cannot be replaced.
        """
        if is_proxy(owner):
            own = owner._proxy_members.get(name, MISSING)
            current = member_of(owner, name)
        else:
            own = _namespace_of(owner).get(name, MISSING)
            current = inspect.getattr_static(owner, name, MISSING)
            if isinstance(current, (staticmethod, classmethod)):
                current = current.__func__
        proxy = DeepProxy(current, f"{target_name(owner)}.{name}")

        try:
            setattr(owner, name, proxy)
        except (AttributeError, TypeError) as exc:
            raise OverrideError(owner, str(exc), member=name) from exc

        self._instrumented.append(
            Instrumentation(owner, name, own, proxy, next(self._sequence))
        )
        logger.debug("Instrumented %s", proxy.mock.name)
        return proxy

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def wrapper_for(self, module: Any) -> Optional[DeepProxy]:
        """Return the active wrapper for *module*, or ``None``."""
        entry = self._entries.get(id(module))
        return entry.wrapper if entry is not None else None

    # -----------------------------------------------------------------------
    # Restoring
    # -----------------------------------------------------------------------

    @staticmethod
    def _put_back(entry: OverrideEntry) -> None:
        module = entry.module
        for name, original in entry.originals.items():
            if original is MISSING:
                delattr(module, name)
            else:
                setattr(module, name, original)
        if entry.installed_getattr:
            if entry.previous_getattr is MISSING:
                delattr(module, MODULE_GETATTR)
            else:
                setattr(module, MODULE_GETATTR, entry.previous_getattr)

    @staticmethod
    def _undo_instrumentation(item: Instrumentation) -> None:
        if item.original is MISSING:
            delattr(item.owner, item.name)
        else:
            setattr(item.owner, item.name, item.original)

    def _undo(self, pending: list[Union[OverrideEntry, Instrumentation]]) -> None:
        """Undo *pending* overrides and instrumentations, most recent first."""
        pending.sort(key=lambda item: item.sequence, reverse=True)
        for item in pending:
            if isinstance(item, OverrideEntry):
                self._put_back(item)
                logger.info("Restored %s", item.wrapper.mock.name)
            else:
                self._undo_instrumentation(item)
                logger.debug("Removed instrumentation %s", item.proxy.mock.name)

    def restore(self, module: Any) -> None:
        """Put back the original members of *module*.

        Instrumentations installed with ``mock_method()`` on *module* itself
        are undone as well, interleaved with the override in reverse order.
        Does nothing if *module* is neither overridden nor instrumented by
        this registry.
        """
        pending: list[Union[OverrideEntry, Instrumentation]] = [
            item for item in self._instrumented if item.owner is module
        ]
        self._instrumented = [
            item for item in self._instrumented if item.owner is not module
        ]
        entry = self._entries.pop(id(module), None)
        if entry is not None:
            pending.append(entry)
        if not pending:
            logger.debug("Nothing to restore for %r", module)
            return
        self._undo(pending)

    def restore_all(self) -> None:
        """Undo every override and instrumentation, most recent first."""
        pending: list[Union[OverrideEntry, Instrumentation]] = [
            *self._entries.values(),
            *self._instrumented,
        ]
        self._entries.clear()
        self._instrumented.clear()
        self._undo(pending)


# ---------------------------------------------------------------------------
# Process-wide default registry
# ---------------------------------------------------------------------------

_default_registry = OverrideRegistry()


def get_registry() -> OverrideRegistry:
    """Return the process-wide registry behind the module-level functions."""
    return _default_registry


def override_modules(modules: Iterable[Any]) -> None:
    """Override *modules* in place using the default registry.

    Call it before each test case: re-applying discards the previous records,
    so call counts start again at zero.
    """
    _default_registry.override_modules(modules)


def mock_method(owner: Any, name: str) -> DeepProxy:
    return _default_registry.mock_method(owner, name)


def restore_all() -> None:
    _default_registry.restore_all()
