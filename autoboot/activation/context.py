"""Evaluation context: the narrow, read-only view conditions query.

The resolver never constructs components nor inspects the interpreter on
its own; it only asks an ``EvaluationContext``:

    is_library_available(name)      -> is an importable library present
    is_component_registered(name)   -> is a component of that type registered
    get_property(name)              -> environment property or None
"""
from __future__ import annotations

import importlib.util
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol


class EvaluationContext(Protocol):  # pragma: no cover
    def is_library_available(self, name: str) -> bool:
        ...

    def is_component_registered(self, type_name: str) -> bool:
        ...

    def get_property(self, name: str) -> Optional[str]:
        ...


class ComponentRegistry(Protocol):  # pragma: no cover
    def contains(self, type_name: str) -> bool:
        ...


def identity_of(ref: Any) -> str:
    """Qualified identity of a class (``module.QualName``) or a plain str."""
    if isinstance(ref, str):
        return ref
    module = getattr(ref, "__module__", None)
    qualname = getattr(ref, "__qualname__", None)
    if module is None or qualname is None:
        raise TypeError(f"Cannot derive identity from {ref!r}")
    return f"{module}.{qualname}"


class SnapshotContext:
    """Fixed snapshot of libraries, registered components and properties."""

    def __init__(
        self,
        libraries: Iterable[str] = (),
        components: Iterable[Any] = (),
        properties: Mapping[str, Any] | None = None,
    ):
        self._libraries = frozenset(libraries)
        self._components = frozenset(identity_of(c) for c in components)
        self._properties: Dict[str, str] = {
            k: str(v) for k, v in (properties or {}).items()
        }

    def is_library_available(self, name: str) -> bool:
        return name in self._libraries

    def is_component_registered(self, type_name: str) -> bool:
        return type_name in self._components

    def get_property(self, name: str) -> Optional[str]:
        return self._properties.get(name)


class RuntimeContext:
    """Context backed by the running interpreter and a component registry.

    Library lookups use ``importlib.util.find_spec`` and are memoized for
    the lifetime of the instance (one resolution run).
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        properties: Mapping[str, Any] | None = None,
    ):
        self._registry = registry
        self._properties: Dict[str, str] = {
            k: str(v) for k, v in (properties or {}).items()
        }
        self._library_cache: Dict[str, bool] = {}

    def is_library_available(self, name: str) -> bool:
        cached = self._library_cache.get(name)
        if cached is not None:
            return cached
        try:
            found = importlib.util.find_spec(name) is not None
        except (ImportError, ValueError):
            # parent package missing or malformed name
            found = False
        self._library_cache[name] = found
        return found

    def is_component_registered(self, type_name: str) -> bool:
        if self._registry is None:
            return False
        return bool(self._registry.contains(type_name))

    def get_property(self, name: str) -> Optional[str]:
        return self._properties.get(name)


__all__ = [
    "EvaluationContext",
    "ComponentRegistry",
    "SnapshotContext",
    "RuntimeContext",
    "identity_of",
]
