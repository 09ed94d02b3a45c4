"""Lifecycle (startup listeners) config schema."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from autoboot.discovery.factories import LISTENER_KEY


class LifecycleConfig(BaseModel):
    listeners_key: str = LISTENER_KEY

    model_config = ConfigDict(extra="forbid")
