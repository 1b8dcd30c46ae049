"""Run report helpers for extraction runs."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any

from core.settings import AnalyzerSettings


def build_run_report(
    source: str,
    output_file: str,
    stats: dict[str, int],
    settings: AnalyzerSettings,
    status: str = "ok",
) -> dict[str, Any]:
    """Assemble the JSON-serializable summary of one extraction run."""
    return {
        "status": status,
        "source": os.path.abspath(source),
        "output_file": os.path.abspath(output_file),
        "stats": dict(stats),
        "settings": {
            "export_only": settings.export_only,
            "include_documentation": settings.include_documentation,
            "extensions": list(settings.extensions),
            "skip_declaration_files": settings.skip_declaration_files,
        },
    }


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
