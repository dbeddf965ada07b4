"""
exec_dashboard/persistence.py
=============================
Local key-value persistence of the dashboard snapshot as a JSON file.
"""
from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Optional

from .types import STORAGE_KEY, Snapshot

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    Stores snapshots under a fixed key inside one JSON file, so several
    dashboards (keys) can share a file. Writes go through a temp file and
    an atomic rename.
    """

    def __init__(self, path: str, key: str = STORAGE_KEY) -> None:
        self.path = path
        self.key = key

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                blob = json.load(fh)
        except (OSError, ValueError):
            logger.exception("Failed to load dashboard data from %s", self.path)
            return {}
        if not isinstance(blob, dict):
            logger.error("Ignoring %s: expected a JSON object", self.path)
            return {}
        return blob

    def _write_all(self, blob: Dict[str, Any]) -> None:
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(blob, fh, ensure_ascii=False, indent=1)
        os.replace(tmp, self.path)

    def save(self, state: Snapshot) -> None:
        blob = self._read_all()
        blob[self.key] = state
        self._write_all(blob)
        logger.info("Saved dashboard data to %s [%s]", self.path, self.key)

    def load(self) -> Optional[Snapshot]:
        state = self._read_all().get(self.key)
        if state is None:
            return None
        if not isinstance(state, dict):
            logger.error("Ignoring stored %s: expected a JSON object", self.key)
            return None
        return state

    def clear(self) -> None:
        blob = self._read_all()
        if self.key in blob:
            del blob[self.key]
            self._write_all(blob)
            logger.info("Cleared dashboard data in %s [%s]", self.path, self.key)
