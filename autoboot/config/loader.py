"""Configuration loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (AUTOBOOT__*).

Sections are validated by their own schema (``autoboot.config.schemas.*``);
unknown keys are rejected at both levels.
"""
from __future__ import annotations

import json
import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, Type

import yaml
from pydantic import BaseModel, ConfigDict

from autoboot import metrics
from autoboot.errors import AutobootError, validate_error_type

from .schemas.activation import ActivationConfig
from .schemas.lifecycle import LifecycleConfig
from .schemas.observability import LoggingConfig


class AggregatedConfig(BaseModel):
    schema_version: int = 1
    activation: ActivationConfig = ActivationConfig()
    lifecycle: LifecycleConfig = LifecycleConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = "configs"
ENV_PREFIX = "AUTOBOOT__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "activation": ActivationConfig,
    "lifecycle": LifecycleConfig,
    "logging": LoggingConfig,
}

_LEVEL_ALIASES = {"warning": "warn", "err": "error"}
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class ConfigError(AutobootError):
    error_type = "config-invalid"


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path.name} must hold a mapping")
    return data


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in sorted(os.environ.items()):
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        print(
            f"[config-env-override] path={dotted_path} value=*** source=env"
        )  # noqa: T201


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    return pathlib.Path(os.getenv("AUTOBOOT_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _normalize_and_validate(raw: Dict[str, Any]) -> None:
    """Apply cross-field normalizations and bounds validation.

    Normalizations:
      - logging.level aliases (warning → warn) and lower-casing.
    Validations (error → raise):
      - activation.manifests_dir must not be blank.
    """
    errors: list[tuple[str, str, str]] = []  # (path, code, msg)
    log_cfg = raw.get("logging")
    if isinstance(log_cfg, dict) and isinstance(log_cfg.get("level"), str):
        level = log_cfg["level"].lower()
        log_cfg["level"] = _LEVEL_ALIASES.get(level, level)

    act_cfg = raw.get("activation")
    if isinstance(act_cfg, dict) and "manifests_dir" in act_cfg:
        mdir = act_cfg["manifests_dir"]
        if not isinstance(mdir, str) or not mdir.strip():
            errors.append(
                (
                    "activation.manifests_dir",
                    "config-out-of-range",
                    "non-empty path required",
                )
            )

    if errors:
        for path, code, _ in errors:
            validate_error_type(code)
            metrics.inc(
                "config_validation_errors_total",
                {"path": path, "code": code},
            )
        details = ", ".join(f"{p}:{c}:{m}" for p, c, m in errors)
        raise ConfigError(f"config validation failed: {details}")


def _validate_sub_schemas(raw: Dict[str, Any]) -> Dict[str, Any]:
    validated: Dict[str, Any] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name in raw:
            try:
                validated[name] = cls.model_validate(raw[name])
            except Exception as e:  # noqa: BLE001
                raise ConfigError(
                    f"Validation failed for section '{name}': {e}"
                ) from e
    return validated


@lru_cache(maxsize=1)
def get_config() -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        merged.setdefault("schema_version", 1)
        _normalize_and_validate(merged)
        validated_sub = _validate_sub_schemas(merged)
        try:
            return AggregatedConfig.model_validate({**merged, **validated_sub})
        except Exception as e:  # noqa: BLE001
            raise ConfigError(str(e)) from e


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def configure_logging(cfg: LoggingConfig | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``autoboot`` logger tree."""
    cfg = cfg or get_config().logging
    logger = logging.getLogger("autoboot")
    logger.setLevel(_LEVELS[cfg.level])
    for h in list(logger.handlers):
        if getattr(h, "_autoboot_handler", False):
            logger.removeHandler(h)
    handler = logging.StreamHandler()
    if cfg.format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(name)s] %(levelname)s %(message)s")
        )
    handler._autoboot_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
