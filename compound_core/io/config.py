from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from compound_core.domain.models import ReportConfig
from compound_core.log import LOG_LEVEL_ENV


def load_report_config(path: Optional[str | Path] = None) -> ReportConfig:
    """Report settings from JSON (defaults for missing keys); $COMPOUND_LOG_LEVEL wins for the log level."""
    defaults = ReportConfig()
    data = _read_json(path) if path else {}
    return ReportConfig(
        extra_payment_what_if=float(data.get("extra_payment_what_if", defaults.extra_payment_what_if)),
        milestone_years=tuple(int(y) for y in data.get("milestone_years", defaults.milestone_years)),
        log_level=str(os.environ.get(LOG_LEVEL_ENV) or data.get("log_level", defaults.log_level)),
        json_logs=bool(data.get("json_logs", defaults.json_logs)),
    )


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
