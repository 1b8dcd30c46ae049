"""Core shared settings, logging and reporting utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    phase_scope,
    set_run_id,
    source_scope,
)
from core.settings import (
    AnalyzerSettings,
    ConfigValidationError,
    load_analyzer_settings,
    load_settings_file,
    resolve_log_level,
    resolve_strict_config_validation,
)
from core.run_artifacts import build_run_report, write_run_report

__all__ = [
    "configure_structured_logging",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "source_scope",
    "AnalyzerSettings",
    "ConfigValidationError",
    "load_analyzer_settings",
    "load_settings_file",
    "resolve_log_level",
    "resolve_strict_config_validation",
    "build_run_report",
    "write_run_report",
]
