"""Activation (module resolver) config schema."""
from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActivationConfig(BaseModel):
    enabled: bool = True
    # Loosely-bound module names; may target modules outside the catalog.
    exclude: List[str] = Field(default_factory=list)
    factories: List[str] = Field(default_factory=list)
    manifests_dir: str = "modules"

    model_config = ConfigDict(extra="forbid")

    @field_validator("exclude", "factories", mode="before")
    @classmethod
    def _split_csv(cls, v: Any) -> Any:  # noqa: D401
        # Env overrides arrive as a single comma separated string, possibly
        # already cast to a scalar (``42``, ``true``).
        if isinstance(v, (int, float)):
            v = str(v)
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v
