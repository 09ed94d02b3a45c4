"""Explicit module exclusions (deny-list)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Tuple

from .context import identity_of


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    # A single class or identity string counts as one reference.
    if isinstance(value, (str, type)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class ExclusionRequest:
    """Strong references must name a catalog entry; loose names need not.

    ``references`` holds classes (or identity strings) the caller has a
    hard reference to. ``names`` holds loosely-bound identities, e.g. from
    configuration or the environment, which may target modules that are
    not part of this deployment.
    """

    references: Tuple[Any, ...] = field(default_factory=tuple)
    names: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "references", _as_tuple(self.references))
        object.__setattr__(
            self,
            "names",
            tuple(n.strip() for n in _as_tuple(self.names) if n.strip()),
        )

    def strong_identities(self) -> Tuple[str, ...]:
        seen: dict[str, None] = {}
        for ref in self.references:
            seen.setdefault(identity_of(ref), None)
        return tuple(seen)

    def all_identities(self) -> FrozenSet[str]:
        return frozenset(self.strong_identities()) | frozenset(self.names)

    def merged_with(self, names: Iterable[str]) -> "ExclusionRequest":
        """Add externally supplied names under loose-name semantics."""
        merged = list(self.names)
        for n in (n.strip() for n in _as_tuple(names)):
            if n and n not in merged:
                merged.append(n)
        return ExclusionRequest(self.references, tuple(merged))

    def __bool__(self) -> bool:
        return bool(self.references or self.names)


NO_EXCLUSIONS = ExclusionRequest()


__all__ = ["ExclusionRequest", "NO_EXCLUSIONS"]
