from pathlib import Path
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def json_error(value: Any) -> Optional[str]:
    """Why ``value`` cannot go into a snapshot, or None when it can."""
    try:
        json.dumps(value)
    except (TypeError, ValueError) as e:
        return str(e)
    return None


class JsonSnapshot:
    """A single JSON document on disk, always read and written whole."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _tmp_path(self) -> Path:
        return self.path.with_name(f".{self.path.name}.tmp")

    def load(self) -> Dict[str, Any]:
        """Read the snapshot; any problem yields an empty mapping."""
        p = self.path
        if not p.exists():
            return {}
        try:
            with p.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Could not read snapshot %s, starting empty: %s", p, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Snapshot %s does not hold a JSON object, starting empty", p)
            return {}
        return data

    def save(self, obj: Dict[str, Any]):
        """Replace the snapshot with ``obj``. Raises on failure."""
        if not isinstance(obj, dict):
            raise TypeError("snapshot root must be a dict")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._tmp_path()
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(obj, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def exists(self) -> bool:
        return self.path.exists()
