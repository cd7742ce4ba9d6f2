"""Single-record settings file with backfilled defaults."""

from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from invoicedesk import config

LOGGER = logging.getLogger("invoicedesk.data.settings_store")


class SettingsStore:
    """Reads and writes the application settings record.

    Every read and write is merged over :data:`config.DEFAULT_SETTINGS`, so
    fields added in later versions are backfilled for older files.
    """

    def __init__(self, path: Path | str, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self.path: Path = Path(path)
        self.defaults: Dict[str, Any] = copy.deepcopy(
            dict(defaults if defaults is not None else config.DEFAULT_SETTINGS)
        )
        self._counter_lock = threading.Lock()

    def _ensure_file(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._dump(self.defaults)

    def _dump(self, settings: Mapping[str, Any]) -> None:
        self.path.write_text(
            json.dumps(settings, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def _merged(self, *layers: Mapping[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(self.defaults)
        for layer in layers:
            merged.update(layer)
        return merged

    def read(self) -> Dict[str, Any]:
        """Return the full settings record; defaults on any read failure."""
        try:
            self._ensure_file()
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            LOGGER.exception("Failed to read settings from %s", self.path)
            return self._merged()
        if not isinstance(stored, dict):
            LOGGER.warning("Settings file %s is not a JSON object; using defaults", self.path)
            return self._merged()
        return self._merged(stored)

    def write(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``partial`` over the current record and persist it.

        Raises ``OSError`` if the file cannot be written.
        """
        current = self.read()
        merged = self._merged(current, partial)
        self._ensure_file()
        self._dump(merged)
        LOGGER.debug("Settings written to %s", self.path)
        return merged

    def next_invoice_number(self) -> str:
        """Increment and persist ``lastInvoiceNumber``; return it zero-padded."""
        with self._counter_lock:
            settings = self.read()
            try:
                last = int(float(settings.get("lastInvoiceNumber") or 0))
            except (TypeError, ValueError, OverflowError):
                last = 0
            following = last + 1
            self.write({"lastInvoiceNumber": following})
        return str(following).zfill(4)
