from __future__ import annotations

import json
import logging
import os
from typing import Dict, Iterable, Optional

from notesmerge.errors import ConfigError

logger = logging.getLogger(__name__)


class JsonPropertyStore:
    """Key/value properties of one target document, persisted as JSON.

    The file holds one object per target id, so several targets can share it:

        {"<target id>": {"<source id>": "processed", ...}, ...}

    Every `set` rewrites the file so a crash mid-run keeps earlier markers.
    """

    def __init__(self, path: str, scope: str) -> None:
        self.path = path
        self.scope = scope
        self._all: Dict[str, Dict[str, str]] = self._load()

    def _load(self) -> Dict[str, Dict[str, str]]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Property store {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Property store {self.path} must contain a JSON object")
        return data

    @property
    def _scoped(self) -> Dict[str, str]:
        return self._all.setdefault(self.scope, {})

    def get(self, key: str) -> Optional[str]:
        return self._all.get(self.scope, {}).get(key)

    def set(self, key: str, value: str) -> None:
        self._scoped[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._all.get(self.scope, {}).pop(key, None) is not None:
            self._flush()

    def keys(self) -> Iterable[str]:
        return list(self._all.get(self.scope, {}).keys())

    def _flush(self) -> None:
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._all, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
        logger.debug("Wrote %d properties for %s to %s", len(self._scoped), self.scope, self.path)
