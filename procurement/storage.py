# storage.py
# JSON file storage for the persisted session (token + user).

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SessionStore:
    """Durable key/value storage backed by one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def write(self, obj: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(obj, indent=2, default=str))

    def get(self, key: str) -> Optional[Any]:
        return self.read().get(key)

    def set(self, **values: Any) -> None:
        data = self.read()
        data.update(values)
        self.write(data)

    def remove(self, *keys: str) -> None:
        data = self.read()
        if not any(k in data for k in keys):
            return
        for k in keys:
            data.pop(k, None)
        self.write(data)
