"""Conditional module activation.

Pipeline: discovery sources → ModuleCatalog → ActivationResolver
(consulting an EvaluationContext and an ExclusionRequest) →
ActivationResult (ordered module identities).
"""
from __future__ import annotations

from .catalog import ModuleCatalog, load_catalog  # noqa: F401
from .conditions import (  # noqa: F401
    ComponentAbsent,
    ComponentPresent,
    ConditionEvaluationReport,
    ConditionOutcome,
    LibraryAbsent,
    LibraryPresent,
    PropertyMatches,
    evaluate_conditions,
)
from .context import (  # noqa: F401
    EvaluationContext,
    RuntimeContext,
    SnapshotContext,
    identity_of,
)
from .descriptor import ModuleDescriptor  # noqa: F401
from .exclusions import NO_EXCLUSIONS, ExclusionRequest  # noqa: F401
from .manifests import clear_manifest_cache, load_manifests  # noqa: F401
from .resolver import (  # noqa: F401
    ActivationResolver,
    ActivationResult,
    resolve,
    resolve_from_config,
)

__all__ = [
    "ActivationResolver",
    "ActivationResult",
    "ComponentAbsent",
    "ComponentPresent",
    "ConditionEvaluationReport",
    "ConditionOutcome",
    "EvaluationContext",
    "ExclusionRequest",
    "LibraryAbsent",
    "LibraryPresent",
    "ModuleCatalog",
    "ModuleDescriptor",
    "NO_EXCLUSIONS",
    "PropertyMatches",
    "RuntimeContext",
    "SnapshotContext",
    "clear_manifest_cache",
    "evaluate_conditions",
    "identity_of",
    "load_catalog",
    "load_manifests",
    "resolve",
    "resolve_from_config",
]
