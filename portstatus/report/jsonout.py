from __future__ import annotations

import json

from ..models import ReportModel


def render_json(report: ReportModel) -> str:
    """Render the report as indented JSON; datetimes are stringified."""
    data = report.model_dump(mode="python")
    return json.dumps(data, indent=2, default=str)
