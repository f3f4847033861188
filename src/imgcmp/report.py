"""JSON report helpers."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Sequence

from .compare import ComparisonResult


def build_report(
    result: ComparisonResult,
    *,
    image_paths: Optional[Sequence[str | Path]] = None,
    diff_path: Optional[str | Path] = None,
) -> Dict[str, object]:
    data = result.to_dict()
    if image_paths is not None:
        data["images"] = [str(path) for path in image_paths]
    data["diff_image"] = str(diff_path) if diff_path is not None else None
    return data


def write_json_report(
    result: ComparisonResult,
    path: str | Path,
    *,
    image_paths: Optional[Sequence[str | Path]] = None,
    diff_path: Optional[str | Path] = None,
) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = build_report(result, image_paths=image_paths, diff_path=diff_path)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)


def comparison_result_to_json(result: ComparisonResult) -> str:
    return json.dumps(build_report(result), ensure_ascii=False, indent=2)
