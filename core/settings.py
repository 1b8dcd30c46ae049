"""Analyzer settings loading and validation.

Settings come from built-in defaults, an optional YAML file and environment
overrides, in that order. Strict mode turns every malformed value into a
``ConfigValidationError``; non-strict mode logs a warning and keeps the
previous value.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Optional

import yaml

from tsanalyzer.config import (
    DEFAULT_EXPORT_ONLY,
    DEFAULT_INCLUDE_DOCUMENTATION,
    DEFAULT_SKIP_DECLARATION_FILES,
    EXCLUDED_DIRS,
    TS_EXTENSIONS,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidationError(RuntimeError):
    """Raised when strict settings validation fails."""


@dataclass(frozen=True)
class AnalyzerSettings:
    """Resolved extraction and discovery settings."""

    export_only: bool = DEFAULT_EXPORT_ONLY
    include_documentation: bool = DEFAULT_INCLUDE_DOCUMENTATION
    extensions: tuple[str, ...] = tuple(sorted(TS_EXTENSIONS))
    skip_declaration_files: bool = DEFAULT_SKIP_DECLARATION_FILES
    exclude_dirs: tuple[str, ...] = tuple(sorted(EXCLUDED_DIRS))

    def extraction_options(self) -> dict[str, Any]:
        """Keyword arguments accepted by the directory extraction API."""
        return {
            "export_only": self.export_only,
            "include_documentation": self.include_documentation,
            "extensions": self.extensions,
            "skip_declaration_files": self.skip_declaration_files,
            "exclude_dirs": self.exclude_dirs,
        }


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default", msg)


def _parse_flag(raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def resolve_log_level(default: int = logging.INFO) -> int:
    """Resolve the logging level from ``TSANALYZER_LOG_LEVEL`` env."""
    raw = os.getenv("TSANALYZER_LOG_LEVEL")
    if raw is None:
        return default
    name = raw.strip().upper()
    if name not in _LOG_LEVELS:
        logger.warning("Unknown TSANALYZER_LOG_LEVEL %r; using default", raw)
        return default
    return getattr(logging, name)


def load_settings_file(config_path: str, strict: bool = False) -> dict[str, Any]:
    """Load and parse a YAML settings file.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Settings file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse settings YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected settings payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _section(payload: dict[str, Any], name: str, strict: bool) -> dict[str, Any]:
    section = payload.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        _fail(f"Settings section '{name}' must be a mapping", strict)
        return {}
    return section


def _bool_value(section: dict[str, Any], key: str, current: bool, strict: bool) -> bool:
    if key not in section:
        return current
    value = section[key]
    if isinstance(value, bool):
        return value
    _fail(f"Setting '{key}' must be a boolean, got {value!r}", strict)
    return current


def _str_tuple(
    section: dict[str, Any],
    key: str,
    current: tuple[str, ...],
    strict: bool,
) -> tuple[str, ...]:
    if key not in section:
        return current
    value = section[key]
    if isinstance(value, list) and all(isinstance(item, str) and item for item in value):
        return tuple(value)
    _fail(f"Setting '{key}' must be a list of non-empty strings", strict)
    return current


def _normalize_extensions(extensions: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
    )


def apply_settings_payload(
    settings: AnalyzerSettings,
    payload: dict[str, Any],
    strict: bool = False,
) -> AnalyzerSettings:
    """Overlay a parsed YAML payload onto settings."""
    extraction = _section(payload, "extraction", strict)
    discovery = _section(payload, "discovery", strict)

    unknown = set(payload) - {"extraction", "discovery"}
    if unknown:
        _fail(f"Unknown settings sections: {', '.join(sorted(unknown))}", strict)

    return replace(
        settings,
        export_only=_bool_value(extraction, "export_only", settings.export_only, strict),
        include_documentation=_bool_value(
            extraction, "include_documentation", settings.include_documentation, strict
        ),
        extensions=_normalize_extensions(
            _str_tuple(discovery, "extensions", settings.extensions, strict)
        ),
        skip_declaration_files=_bool_value(
            discovery, "skip_declaration_files", settings.skip_declaration_files, strict
        ),
        exclude_dirs=_str_tuple(discovery, "exclude_dirs", settings.exclude_dirs, strict),
    )


def apply_env_overrides(settings: AnalyzerSettings, strict: bool = False) -> AnalyzerSettings:
    """Overlay ``TSANALYZER_*`` environment flags onto settings."""
    overrides: dict[str, bool] = {}
    for env_name, attr in (
        ("TSANALYZER_EXPORT_ONLY", "export_only"),
        ("TSANALYZER_INCLUDE_DOCS", "include_documentation"),
    ):
        raw = os.getenv(env_name)
        if raw is None:
            continue
        parsed = _parse_flag(raw)
        if parsed is None:
            _fail(f"{env_name} must be a boolean flag, got {raw!r}", strict)
            continue
        overrides[attr] = parsed

    if not overrides:
        return settings
    return replace(settings, **overrides)


def load_analyzer_settings(
    config_path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> AnalyzerSettings:
    """Resolve analyzer settings from defaults, YAML and environment.

    Args:
        config_path: Optional YAML settings file.
        strict: Strict validation; resolved from ``STRICT_CONFIG_VALIDATION``
            when None.

    Returns:
        The resolved AnalyzerSettings.

    Raises:
        ConfigValidationError: In strict mode, on any invalid input.
    """
    if strict is None:
        strict = resolve_strict_config_validation()

    settings = AnalyzerSettings()
    if config_path:
        payload = load_settings_file(config_path, strict=strict)
        settings = apply_settings_payload(settings, payload, strict=strict)
    settings = apply_env_overrides(settings, strict=strict)

    logger.debug("Resolved analyzer settings: %s", settings)
    return settings
