"""
Configuration Store
===================

Durable printer endpoint configuration, keyed by printer id.

JsonConfigStore keeps a ``printers.json`` file in the data directory;
MemoryConfigStore has the same behaviour without touching disk. Both
serialize access with one lock, so readers see either the old or the new
endpoint, never a mix.
"""

import os
import copy
import json
import logging
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import DATA_DIR, DEFAULT_PRINTER_ID, DEFAULT_PRINTER_HOST, LEGACY_PRINTER_HOST, ESCPOS_PORT
from .models import PrinterEndpoint, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = PrinterEndpoint(DEFAULT_PRINTER_HOST, ESCPOS_PORT)


class ConfigStore:
    """Base class: validation, defaults and legacy migration."""

    def __init__(self, default: PrinterEndpoint = DEFAULT_ENDPOINT):
        self.default = default
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        raise NotImplementedError

    def _save(self, data: Dict[str, Dict[str, Any]]):
        raise NotImplementedError

    def get(self, printer_id: str = DEFAULT_PRINTER_ID) -> PrinterEndpoint:
        """
        Get the endpoint for a printer.

        Unknown ids get the default endpoint. A stored host equal to the
        old factory default is rewritten to the current default.
        """
        with self._lock:
            data = self._load()
            stored = data.get(printer_id)
            if stored is None:
                return self.default

            try:
                endpoint = PrinterEndpoint.from_dict(stored)
            except ValidationError as e:
                logger.warning("Ignoring invalid stored config for %s: %s", printer_id, e)
                return self.default

            if endpoint.host == LEGACY_PRINTER_HOST:
                logger.info("Migrating printer %s from %s to %s",
                            printer_id, LEGACY_PRINTER_HOST, self.default.host)
                endpoint = self.default
                data[printer_id] = endpoint.to_dict()
                try:
                    self._save(data)
                except OSError as e:
                    logger.warning("Failed to persist migrated config: %s", e)

            return endpoint

    def set(self, printer_id: str, endpoint: Union[PrinterEndpoint, Dict[str, Any]]) -> PrinterEndpoint:
        """
        Store a new endpoint.

        Raises:
            ValidationError: Invalid host or port; nothing is stored
        """
        if not isinstance(endpoint, PrinterEndpoint):
            endpoint = PrinterEndpoint.from_dict(endpoint)

        with self._lock:
            data = self._load()
            data[printer_id] = endpoint.to_dict()
            self._save(data)

        logger.info("Printer %s set to %s", printer_id, endpoint)
        return endpoint

    def reset(self, printer_id: str = DEFAULT_PRINTER_ID) -> PrinterEndpoint:
        """Restore the default endpoint."""
        return self.set(printer_id, self.default)


class MemoryConfigStore(ConfigStore):
    """In-process store, used by tests."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Any]]] = None, **kwargs):
        super().__init__(**kwargs)
        self._data = copy.deepcopy(initial or {})

    def _load(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._data)

    def _save(self, data: Dict[str, Dict[str, Any]]):
        self._data = copy.deepcopy(data)


class JsonConfigStore(ConfigStore):
    """Store backed by a JSON file, replaced atomically on every write."""

    def __init__(self, path: Optional[Union[str, Path]] = None, **kwargs):
        super().__init__(**kwargs)
        self.path = Path(path) if path else Path(DATA_DIR) / 'printers.json'

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load printer config from %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Dict[str, Any]]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix='.printers-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
