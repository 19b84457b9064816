import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np


def json_safe(obj: Any) -> Any:
    """Convert numpy scalars to builtins and NaN/Inf to None, recursively."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        obj = float(obj)
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {str(k): json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    return obj


def append_jsonl(path: str | Path, record: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        f.write(json.dumps(json_safe(record), ensure_ascii=False) + "\n")


def read_jsonl(path: str | Path, max_lines: Optional[int] = None) -> List[Dict[str, Any]]:
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        lines = f.readlines()
    if max_lines is not None:
        lines = lines[-max_lines:]
    return [json.loads(line) for line in lines if line.strip()]
