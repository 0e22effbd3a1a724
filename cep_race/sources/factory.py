from __future__ import annotations

from string import Formatter
from typing import Any

from ..errors import ConfigurationError
from .base import DEFAULT_SOURCES, SourceDescriptor

MAX_SOURCES = 2
SAMPLE_CEP = "00000-000"


def _placeholders(template: str) -> set[str]:
    try:
        return {field for _, field, _, _ in Formatter().parse(template) if field is not None}
    except ValueError as exc:
        raise ConfigurationError(f"Malformed url_template {template!r}: {exc}") from exc


def build_source(source_cfg: dict[str, Any]) -> SourceDescriptor:
    if not isinstance(source_cfg, dict):
        raise ConfigurationError("Each source must be an object")
    source_id = source_cfg.get("id")
    url_template = source_cfg.get("url_template")
    if not source_id or not url_template:
        raise ConfigurationError(f"Source {source_id or 'unknown'!r} requires both 'id' and 'url_template'")
    if not isinstance(source_id, str) or not isinstance(url_template, str):
        raise ConfigurationError(f"Source {source_id!r}: 'id' and 'url_template' must be strings")
    if _placeholders(url_template) != {"cep"}:
        raise ConfigurationError(f"Source {source_id!r}: url_template must contain exactly the {{cep}} placeholder")
    try:
        url_template.format(cep=SAMPLE_CEP)
    except (ValueError, KeyError, IndexError) as exc:
        raise ConfigurationError(f"Source {source_id!r}: url_template {url_template!r} cannot be formatted: {exc}") from exc
    return SourceDescriptor(name=source_id, url_template=url_template)


def build_sources(sources_cfg: Any) -> tuple[SourceDescriptor, ...]:
    if sources_cfg is None:
        return DEFAULT_SOURCES
    if not isinstance(sources_cfg, list) or len(sources_cfg) == 0:
        raise ConfigurationError("config.sources must be a non-empty list")
    if len(sources_cfg) > MAX_SOURCES:
        raise ConfigurationError(f"config.sources supports at most {MAX_SOURCES} sources, got {len(sources_cfg)}")

    sources = tuple(build_source(cfg) for cfg in sources_cfg)
    names = [s.name for s in sources]
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Source ids must be unique: {names}")
    return sources
