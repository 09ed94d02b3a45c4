"""ActivationResolver: select, filter, exclude and order optional modules.

Resolution steps (pure function of catalog, exclusions and context):
  1. validate strong exclusions (each must name a catalog entry)
  2. drop excluded entries
  3. evaluate conditions, dropping non-matching descriptors
  4. deduplicate by identity, first occurrence wins
  5. stable constrained sort: after/before edges, ready modules picked by
     (order, catalog position); a cycle fails with every identity in it

Nothing is activated here; the result is handed to the component
registry by the caller.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, Iterator, List, Sequence, Set, Tuple

from autoboot import metrics
from autoboot.config import get_config
from autoboot.errors import CyclicOrderingConstraint, ExcludedIdentityNotFound
from autoboot.events import ModulesResolved, emit

from .catalog import ModuleCatalog, load_catalog
from .conditions import ConditionEvaluationReport, evaluate_conditions
from .context import EvaluationContext, RuntimeContext
from .descriptor import ModuleDescriptor
from .exclusions import NO_EXCLUSIONS, ExclusionRequest

logger = logging.getLogger("autoboot.activation")


@dataclass(frozen=True)
class ActivationResult:
    identities: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()
    report: ConditionEvaluationReport = field(
        default_factory=ConditionEvaluationReport, compare=False, repr=False
    )

    def __iter__(self) -> Iterator[str]:
        return iter(self.identities)

    def __len__(self) -> int:
        return len(self.identities)


class ActivationResolver:
    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def resolve(
        self,
        catalog: ModuleCatalog,
        exclusions: ExclusionRequest = NO_EXCLUSIONS,
        environment: EvaluationContext | None = None,
    ) -> ActivationResult:
        report = ConditionEvaluationReport()
        if not self.enabled:
            logger.info("module activation disabled; nothing resolved")
            return ActivationResult(report=report)
        t0 = perf_counter()
        ctx = environment if environment is not None else RuntimeContext()

        if exclusions:
            self._check_exclusions(catalog, exclusions)
        denied = exclusions.all_identities()
        survivors: Dict[str, ModuleDescriptor] = {}
        for descriptor in catalog:
            ident = descriptor.id
            if ident in denied:
                report.record_exclusion(ident)
                continue
            if ident in survivors:
                continue
            outcome = evaluate_conditions(descriptor.conditions, ctx)
            report.record(ident, outcome)
            if not outcome.match:
                logger.debug("module %s skipped: %s", ident, outcome.message)
                metrics.inc("activation_condition_skipped_total", {"module": ident})
                continue
            survivors[ident] = descriptor

        ordered = sort_descriptors(list(survivors.values()))
        result = ActivationResult(
            identities=tuple(d.id for d in ordered),
            excluded=report.exclusions,
            report=report,
        )
        elapsed_ms = (perf_counter() - t0) * 1000
        metrics.inc("activation_candidates_total", value=len(catalog))
        metrics.inc("activation_excluded_total", value=len(result.excluded))
        metrics.inc("activation_activated_total", value=len(result))
        metrics.observe("activation_resolve_ms", elapsed_ms)
        logger.info(
            "activation resolved: %d of %d candidates (%d excluded)",
            len(result),
            len(catalog),
            len(result.excluded),
        )
        emit(
            ModulesResolved(
                candidates=catalog.identities(),
                activated=result.identities,
                excluded=result.excluded,
                skipped=report.unmatched(),
            )
        )
        return result

    @staticmethod
    def _check_exclusions(
        catalog: ModuleCatalog, exclusions: ExclusionRequest
    ) -> None:
        invalid = [
            i for i in exclusions.strong_identities() if i not in catalog
        ]
        if invalid:
            raise ExcludedIdentityNotFound(invalid)


def sort_descriptors(
    descriptors: Sequence[ModuleDescriptor],
) -> List[ModuleDescriptor]:
    """Topologically sort unique descriptors, stable on (order, position).

    ``after``/``before`` entries naming modules outside ``descriptors`` are
    ignored.
    """
    index = {d.id: i for i, d in enumerate(descriptors)}
    successors: Dict[int, Set[int]] = {i: set() for i in range(len(descriptors))}
    for i, d in enumerate(descriptors):
        for name in d.after:
            j = index.get(name)
            if j is not None:
                successors[j].add(i)
        for name in d.before:
            j = index.get(name)
            if j is not None:
                successors[i].add(j)

    indegree = [0] * len(descriptors)
    for targets in successors.values():
        for t in targets:
            indegree[t] += 1

    ready = [(d.order, i) for i, d in enumerate(descriptors) if indegree[i] == 0]
    heapq.heapify(ready)
    ordered: List[ModuleDescriptor] = []
    while ready:
        _, i = heapq.heappop(ready)
        ordered.append(descriptors[i])
        for t in successors[i]:
            indegree[t] -= 1
            if indegree[t] == 0:
                heapq.heappush(ready, (descriptors[t].order, t))

    if len(ordered) < len(descriptors):
        emitted = {d.id for d in ordered}
        pending = [i for i, d in enumerate(descriptors) if d.id not in emitted]
        cyclic = _cycle_members(pending, successors)
        raise CyclicOrderingConstraint(descriptors[i].id for i in cyclic)
    return ordered


def _cycle_members(nodes: List[int], successors: Dict[int, Set[int]]) -> List[int]:
    """Nodes lying on a cycle (Tarjan SCCs of size > 1 or self-loops).

    Iterative: a long chain waiting behind a cycle must not exhaust the
    interpreter stack.
    """
    allowed = set(nodes)
    counter = 0
    low: Dict[int, int] = {}
    num: Dict[int, int] = {}
    stack: List[int] = []
    on_stack: Set[int] = set()
    members: Set[int] = set()

    def visit(v: int) -> Iterator[int]:
        nonlocal counter
        num[v] = low[v] = counter
        counter += 1
        stack.append(v)
        on_stack.add(v)
        return iter(sorted(w for w in successors[v] if w in allowed))

    for root in nodes:
        if root in num:
            continue
        work = [(root, visit(root))]
        while work:
            v, it = work[-1]
            for w in it:
                if w not in num:
                    work.append((w, visit(w)))
                    break
                if w in on_stack:
                    low[v] = min(low[v], num[w])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[v])
                if low[v] != num[v]:
                    continue
                component = []
                while True:
                    w = stack.pop()
                    on_stack.discard(w)
                    component.append(w)
                    if w == v:
                        break
                if len(component) > 1 or v in successors[v]:
                    members.update(component)
    return sorted(members)


def resolve(
    catalog: ModuleCatalog,
    exclusions: ExclusionRequest = NO_EXCLUSIONS,
    environment: EvaluationContext | None = None,
) -> ActivationResult:
    return ActivationResolver().resolve(catalog, exclusions, environment)


def resolve_from_config(
    environment: EvaluationContext | None = None,
    exclusions: ExclusionRequest = NO_EXCLUSIONS,
    cfg=None,
) -> ActivationResult:
    """Resolve the catalog described by the ``activation`` config section.

    Configured ``exclude`` names are merged into ``exclusions`` as
    loosely-bound names.
    """
    if cfg is None:
        cfg = get_config().activation
    catalog = load_catalog(cfg.factories, cfg.manifests_dir)
    return ActivationResolver(enabled=cfg.enabled).resolve(
        catalog, exclusions.merged_with(cfg.exclude), environment
    )


__all__ = [
    "ActivationResolver",
    "ActivationResult",
    "resolve",
    "resolve_from_config",
    "sort_descriptors",
]
