"""JSON export of a triggered pipeline.

Why JSON:
- Lets other tooling (scripts, CI jobs) pick up the pipeline id and URL.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import PipelineResult


def export_result_json(*, result: PipelineResult, output_path: Path) -> Path:
    """Write `PipelineResult` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
