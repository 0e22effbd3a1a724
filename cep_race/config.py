from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .errors import ConfigurationError
from .sources.base import DEFAULT_SOURCES, SourceDescriptor
from .sources.factory import build_sources
from .sources.http_json import DEFAULT_REQUEST_TIMEOUT_SECONDS

DEFAULT_TIMEOUT_SECONDS = 1.0


@dataclass(frozen=True)
class LookupConfig:
    sources: tuple[SourceDescriptor, ...] = DEFAULT_SOURCES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    fail_fast: bool = False

    def with_overrides(self, *, timeout_seconds: float | None = None, fail_fast: bool | None = None) -> "LookupConfig":
        cfg = self
        if timeout_seconds is not None:
            cfg = replace(cfg, timeout_seconds=_positive("timeout_seconds", timeout_seconds))
        if fail_fast is not None:
            cfg = replace(cfg, fail_fast=fail_fast)
        return cfg


def _positive(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"run.{name} must be a number")
    if value <= 0:
        raise ConfigurationError(f"run.{name} must be positive, got {value}")
    return float(value)


def config_from_dict(config: dict[str, Any]) -> LookupConfig:
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    run_cfg = config.get("run") or {}
    if not isinstance(run_cfg, dict):
        raise ConfigurationError("config.run must be an object")

    fail_fast = run_cfg.get("fail_fast", False)
    if not isinstance(fail_fast, bool):
        raise ConfigurationError("run.fail_fast must be a boolean")

    return LookupConfig(
        sources=build_sources(config.get("sources")),
        timeout_seconds=_positive("timeout_seconds", run_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        request_timeout_seconds=_positive(
            "request_timeout_seconds",
            run_cfg.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS),
        ),
        fail_fast=fail_fast,
    )


def load_config(path: Path | None) -> LookupConfig:
    """Read a JSON config file; ``None`` means built-in defaults."""
    if path is None:
        return LookupConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Failed to read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {exc}") from exc
    return config_from_dict(raw)
