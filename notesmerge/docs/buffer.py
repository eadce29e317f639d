from __future__ import annotations

import logging
import os
import re
import shutil
import time
from typing import Optional

logger = logging.getLogger(__name__)

_UNSAFE_NAME_RE = re.compile(r"[^\w.\- ]+", re.UNICODE)


class BufferManager:
    """Session buffer under config/buffer/<timestamp> for temporary documents.

    Debug mode keeps the buffer on disk; release mode removes it on cleanup().
    Individual artifacts are deleted by their owner as soon as they are read,
    so cleanup() only sweeps what was orphaned.
    """

    def __init__(self, project_root: Optional[str] = None, debug: bool = False) -> None:
        self.debug = bool(debug)
        root = project_root or os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
        base = os.path.join(root, "config", "buffer")
        ts = time.strftime("%Y%m%d-%H%M%S")
        self.base_dir = os.path.join(base, ts)
        os.makedirs(self.base_dir, exist_ok=True)
        self._counter = 0

    def path(self, *parts: str) -> str:
        p = os.path.join(self.base_dir, *parts)
        os.makedirs(os.path.dirname(p), exist_ok=True)
        return p

    def write(self, name: str, blob: bytes, ext: str = ".docx") -> str:
        """Store `blob` under a unique, filesystem-safe name and return its path."""
        self._counter += 1
        safe = _UNSAFE_NAME_RE.sub("_", name).strip() or "document"
        out_path = self.path(f"{self._counter:04d}-{safe}{ext}")
        with open(out_path, "wb") as f:
            f.write(blob)
        return out_path

    def cleanup(self) -> None:
        if self.debug:
            logger.debug("Keeping buffer directory %s", self.base_dir)
            return
        try:
            shutil.rmtree(self.base_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove buffer directory %s: %s", self.base_dir, exc)
