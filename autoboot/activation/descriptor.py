"""Module descriptor schema."""
from __future__ import annotations

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .conditions import Condition


class ModuleDescriptor(BaseModel):
    id: str
    after: Tuple[str, ...] = ()
    before: Tuple[str, ...] = ()
    order: int = 0
    conditions: Tuple[Condition, ...] = ()

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("id cannot be empty")
        return v.strip()

    @field_validator("after", "before", mode="before")
    @classmethod
    def _one_or_many(cls, v: Any) -> Any:  # noqa: D401
        if v is None:
            return ()
        return (v,) if isinstance(v, str) else v

    @classmethod
    def bare(cls, identity: str) -> "ModuleDescriptor":
        """Descriptor for a discovered module without a manifest."""
        return cls(id=identity)
