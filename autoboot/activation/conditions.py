"""Activation conditions (tagged variants) and their interpreter.

Conditions are plain data parsed from module manifests, discriminated by
``kind``::

    conditions:
      - {kind: library-present, names: [yaml]}
      - {kind: component-absent, types: [acme.db.Pool]}
      - {kind: property, name: acme.web.enabled, having_value: "true"}

``evaluate_conditions`` AND-s a descriptor's conditions, stopping at the
first one that does not match.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, Iterable, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .context import EvaluationContext


@dataclass(frozen=True)
class ConditionOutcome:
    match: bool
    message: str = ""

    @classmethod
    def matched(cls, message: str = "") -> "ConditionOutcome":
        return cls(True, message)

    @classmethod
    def no_match(cls, message: str) -> "ConditionOutcome":
        return cls(False, message)


class _ConditionBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _NamesCondition(_ConditionBase):
    names: Tuple[str, ...]

    @field_validator("names", mode="before")
    @classmethod
    def _one_or_many(cls, v: Any) -> Any:  # noqa: D401
        return (v,) if isinstance(v, str) else v

    @field_validator("names")
    @classmethod
    def _not_empty(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:  # noqa: D401
        if not v:
            raise ValueError("at least one name required")
        return v


class _TypesCondition(_ConditionBase):
    types: Tuple[str, ...]

    @field_validator("types", mode="before")
    @classmethod
    def _one_or_many(cls, v: Any) -> Any:  # noqa: D401
        return (v,) if isinstance(v, str) else v

    @field_validator("types")
    @classmethod
    def _not_empty(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:  # noqa: D401
        if not v:
            raise ValueError("at least one type required")
        return v


class LibraryPresent(_NamesCondition):
    kind: Literal["library-present"] = "library-present"


class LibraryAbsent(_NamesCondition):
    kind: Literal["library-absent"] = "library-absent"


class ComponentPresent(_TypesCondition):
    kind: Literal["component-present"] = "component-present"


class ComponentAbsent(_TypesCondition):
    kind: Literal["component-absent"] = "component-absent"


class PropertyMatches(_ConditionBase):
    kind: Literal["property"] = "property"
    name: str
    having_value: Optional[str] = None
    match_if_missing: bool = False


Condition = Annotated[
    Union[
        LibraryPresent,
        LibraryAbsent,
        ComponentPresent,
        ComponentAbsent,
        PropertyMatches,
    ],
    Field(discriminator="kind"),
]


def _library_present(c: LibraryPresent, ctx: EvaluationContext):
    missing = [n for n in c.names if not ctx.is_library_available(n)]
    if missing:
        return ConditionOutcome.no_match(
            f"library-present did not find required library '{missing[0]}'"
        )
    return ConditionOutcome.matched(
        "library-present found " + ", ".join(f"'{n}'" for n in c.names)
    )


def _library_absent(c: LibraryAbsent, ctx: EvaluationContext):
    present = [n for n in c.names if ctx.is_library_available(n)]
    if present:
        return ConditionOutcome.no_match(
            f"library-absent found unwanted library '{present[0]}'"
        )
    return ConditionOutcome.matched(
        "library-absent did not find " + ", ".join(f"'{n}'" for n in c.names)
    )


def _component_present(c: ComponentPresent, ctx: EvaluationContext):
    missing = [t for t in c.types if not ctx.is_component_registered(t)]
    if missing:
        return ConditionOutcome.no_match(
            f"component-present did not find any component of type '{missing[0]}'"
        )
    return ConditionOutcome.matched(
        "component-present found " + ", ".join(f"'{t}'" for t in c.types)
    )


def _component_absent(c: ComponentAbsent, ctx: EvaluationContext):
    present = [t for t in c.types if ctx.is_component_registered(t)]
    if present:
        return ConditionOutcome.no_match(
            f"component-absent found component of type '{present[0]}'"
        )
    return ConditionOutcome.matched(
        "component-absent did not find " + ", ".join(f"'{t}'" for t in c.types)
    )


def _property(c: PropertyMatches, ctx: EvaluationContext):
    value = ctx.get_property(c.name)
    if value is None:
        if c.match_if_missing:
            return ConditionOutcome.matched(f"property '{c.name}' missing")
        return ConditionOutcome.no_match(
            f"property did not find property '{c.name}'"
        )
    if c.having_value is None:
        # present and not "false" counts as enabled
        if value.strip().lower() == "false":
            return ConditionOutcome.no_match(
                f"property '{c.name}' is false"
            )
        return ConditionOutcome.matched(f"property '{c.name}' present")
    if value.strip().lower() != c.having_value.strip().lower():
        return ConditionOutcome.no_match(
            f"property '{c.name}' = '{value}', expected '{c.having_value}'"
        )
    return ConditionOutcome.matched(
        f"property '{c.name}' = '{c.having_value}'"
    )


_EVALUATORS: Dict[str, Callable[[Any, EvaluationContext], ConditionOutcome]] = {
    "library-present": _library_present,
    "library-absent": _library_absent,
    "component-present": _component_present,
    "component-absent": _component_absent,
    "property": _property,
}


def evaluate_condition(cond: Any, ctx: EvaluationContext) -> ConditionOutcome:
    try:
        fn = _EVALUATORS[cond.kind]
    except (AttributeError, KeyError) as e:
        raise TypeError(f"Unsupported condition: {cond!r}") from e
    return fn(cond, ctx)


def evaluate_conditions(
    conditions: Iterable[Any], ctx: EvaluationContext
) -> ConditionOutcome:
    """AND all conditions; first failing outcome wins."""
    messages = []
    for cond in conditions:
        outcome = evaluate_condition(cond, ctx)
        if not outcome.match:
            return outcome
        messages.append(outcome.message)
    return ConditionOutcome.matched("; ".join(messages))


class ConditionEvaluationReport:
    """One outcome per module identity.

    Also tracks exclusions so callers can explain why a candidate did not
    make it into the activation result.
    """

    def __init__(self) -> None:
        self._outcomes: Dict[str, ConditionOutcome] = {}
        self._excluded: list[str] = []

    def record(self, identity: str, outcome: ConditionOutcome) -> None:
        previous = self._outcomes.get(identity)
        # a later matching duplicate supersedes an earlier miss
        if previous is None or (outcome.match and not previous.match):
            self._outcomes[identity] = outcome

    def record_exclusion(self, identity: str) -> None:
        if identity not in self._excluded:
            self._excluded.append(identity)

    @property
    def exclusions(self) -> Tuple[str, ...]:
        return tuple(self._excluded)

    @property
    def outcomes(self) -> Dict[str, ConditionOutcome]:
        return dict(self._outcomes)

    def matched(self) -> Tuple[str, ...]:
        return tuple(k for k, v in self._outcomes.items() if v.match)

    def unmatched(self) -> Tuple[str, ...]:
        return tuple(k for k, v in self._outcomes.items() if not v.match)


__all__ = [
    "Condition",
    "ConditionOutcome",
    "ConditionEvaluationReport",
    "LibraryPresent",
    "LibraryAbsent",
    "ComponentPresent",
    "ComponentAbsent",
    "PropertyMatches",
    "evaluate_condition",
    "evaluate_conditions",
]
