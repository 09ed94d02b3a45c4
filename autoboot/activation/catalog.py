"""ModuleCatalog: ordered candidate descriptors from discovery sources."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Mapping, Tuple

from autoboot.discovery import ACTIVATION_KEY, load_factory_names

from .descriptor import ModuleDescriptor
from .manifests import load_manifests


class ModuleCatalog:
    """Immutable, ordered sequence of candidate descriptors.

    Duplicates are allowed: several discovery sources may list the same
    identity. The resolver keeps the first occurrence.
    """

    __slots__ = ("_descriptors",)

    def __init__(self, descriptors: Iterable[ModuleDescriptor] = ()):
        self._descriptors: Tuple[ModuleDescriptor, ...] = tuple(descriptors)

    @classmethod
    def from_sources(
        cls,
        identities: Iterable[str],
        manifests: Mapping[str, ModuleDescriptor] | None = None,
    ) -> "ModuleCatalog":
        manifests = manifests or {}
        return cls(
            manifests.get(i) or ModuleDescriptor.bare(i) for i in identities
        )

    def identities(self) -> Tuple[str, ...]:
        return tuple(d.id for d in self._descriptors)

    def __contains__(self, identity: object) -> bool:
        return any(d.id == identity for d in self._descriptors)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"ModuleCatalog({list(self.identities())!r})"


def load_catalog(
    factories: Iterable[str | Path],
    manifests_dir: str | Path,
    key: str = ACTIVATION_KEY,
) -> ModuleCatalog:
    return ModuleCatalog.from_sources(
        load_factory_names(key, factories), load_manifests(manifests_dir)
    )


__all__ = ["ModuleCatalog", "load_catalog"]
