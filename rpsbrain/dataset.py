from __future__ import annotations

import json
import os
import time
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np


class NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        if isinstance(obj, Enum):
            return str(obj)
        return json.JSONEncoder.default(self, obj)


class TraceLogger:
    """Append finished decision traces to disk (JSONL).

    Structure:
      <root>/traces/<YYYYMMDD>/<session_id>.jsonl

    One line per round. The engine hands each trace over once and keeps
    nothing; what happens to the files afterwards is up to the host.
    """

    def __init__(self, root_dir: str, subdir: Optional[str] = None) -> None:
        self.root = root_dir
        self.trace_dir = os.path.join(self.root, subdir or "traces")
        os.makedirs(self.trace_dir, exist_ok=True)

    def _path_for(self, session_id: str, day: Optional[str] = None) -> str:
        d = os.path.join(self.trace_dir, day or time.strftime("%Y%m%d"))
        safe_sid = "s_" + "".join(c for c in session_id if c.isalnum() or c in ("-", "_"))
        return os.path.join(d, f"{safe_sid}.jsonl")

    def log(self, session_id: str, record: Dict[str, Any]) -> bool:
        try:
            record = dict(record)
            record.setdefault("session_id", session_id)
            record.setdefault("ts", int(time.time() * 1000))
            p = self._path_for(session_id)
            os.makedirs(os.path.dirname(p), exist_ok=True)
            with open(p, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False, cls=NumpyEncoder) + "\n")
            return True
        except (OSError, TypeError, ValueError) as e:
            # best-effort logging: never crash the game loop
            print(f"Trace logging failed for session {session_id}: {e}")
            return False

    def read(self, session_id: str, day: Optional[str] = None) -> list:
        """Load the traces recorded for ``session_id`` on ``day`` (default today)."""
        p = self._path_for(session_id, day)
        if not os.path.exists(p):
            return []
        with open(p, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
