"""
JSON File Key/Value Store

Holds the user settings record and the legacy `ratesUrl` key as
string values in one small JSON object on disk.

Writes go to a temporary file in the same directory which then
replaces the target with os.replace, so readers never observe a
half-written file.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from cost_manager.config import get_settings
from cost_manager.errors import StorageUnavailable
from cost_manager.log import get_logger
from cost_manager.services.storage.interface import KeyValueStorageInterface


class JsonFileKeyValueStore(KeyValueStorageInterface):
    """
    File-backed key/value store.

    The file is re-read on every access; a missing or corrupt file is an
    empty store. Only OS-level read/write failures raise.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path or get_settings().storage.settings_path)
        self._logger = get_logger(__name__)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailable(f"Failed to read settings file {self._path}: {e}") from e
        try:
            data = json.loads(text or "{}")
        except ValueError as e:
            # Unreadable contents count as empty; the next write replaces them
            self._logger.warning("settings_file_corrupt", path=str(self._path), error=str(e))
            return {}
        if not isinstance(data, dict):
            self._logger.warning("settings_file_corrupt", path=str(self._path), error="not a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        temp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=self._path.name + "-",
                suffix=".tmp",
                dir=self._path.parent,
                delete=False,
            ) as tf:
                temp_name = tf.name
                json.dump(data, tf, indent=2, sort_keys=True)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(temp_name, self._path)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise StorageUnavailable(f"Failed to write settings file {self._path}: {e}") from e
        self._logger.debug("settings_file_written", path=str(self._path), keys=sorted(data))

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
