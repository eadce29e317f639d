from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from notesmerge.errors import ConfigError

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
# Path to the JSON settings file; every key is optional
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "settings.json")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_path(base: str, relative: str) -> str:
    return os.path.abspath(os.path.join(base, relative))


@dataclass
class Settings:
    backend: str = "local"
    folder_name: str = "Meet Recordings"
    prefix: str = "TRT"
    suffix: str = "Notes by Gemini"
    storage_root: str = "."
    target_document: str = "merged-notes.docx"
    # Defaults to the resolved target path; set to the Drive id when the target also lives in Drive
    target_id: Optional[str] = None
    properties_path: str = "config/processed.json"
    title_marker: str = "📄"
    heading_level: int = 2
    temp_prefix: str = "tmp-"
    access_token_env: str = "GOOGLE_OAUTH_TOKEN"
    request_timeout: Optional[float] = None
    log_file: Optional[str] = "config/notesmerge.log"
    debug_buffer: bool = False

    def resolve(self, base: str = PROJECT_ROOT) -> "Settings":
        """Turn relative paths into absolute ones anchored at `base`."""
        self.storage_root = _resolve_path(base, self.storage_root)
        self.target_document = _resolve_path(base, self.target_document)
        self.properties_path = _resolve_path(base, self.properties_path)
        if self.log_file:
            self.log_file = _resolve_path(base, self.log_file)
        if self.target_id is None and self.backend == "local":
            self.target_id = self.target_document
        return self

    @property
    def timeout(self) -> Optional[float]:
        if self.request_timeout is None or self.request_timeout <= 0:
            return None
        return float(self.request_timeout)

    def heading_text(self, title: str) -> str:
        return f"{self.title_marker} {title}" if self.title_marker else title


def _validate(data: Dict[str, Any]) -> None:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings key(s): {', '.join(unknown)}")
    backend = data.get("backend", "local")
    if backend not in ("local", "drive"):
        raise ConfigError(f"'backend' must be 'local' or 'drive', got {backend!r}")
    level = data.get("heading_level", 2)
    if not isinstance(level, int) or not 0 <= level <= 9:
        raise ConfigError("'heading_level' must be an integer between 0 and 9")
    for key in ("folder_name", "prefix", "suffix"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")


def load_settings(path: str = CONFIG_PATH) -> Settings:
    """Load settings from JSON, falling back to defaults when the file is absent.

    Doxygen:
    - @param path: Absolute path to the JSON settings file.
    - @return: Settings with paths resolved against the project root.
    - @throws ConfigError: If the file is not valid JSON or holds bad values.
    """
    if not os.path.exists(path):
        logger.warning("Settings file not found at %s; using defaults", path)
        return Settings().resolve()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    _validate(data)
    return Settings(**data).resolve()


def get_access_token(settings: Settings) -> str:
    token = os.environ.get(settings.access_token_env, "").strip()
    if not token:
        raise ConfigError(f"Environment variable {settings.access_token_env} holds no access token")
    return token


def configure_logging(log_file: Optional[str] = None, level: str = "INFO") -> None:
    """Log to stderr and, when `log_file` is given, append to that file."""
    handlers: list = [logging.StreamHandler(sys.stderr)]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=handlers, force=True)
