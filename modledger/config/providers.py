# modledger/config/providers.py
from __future__ import annotations
import copy
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import json5

from modledger.core.dictpath import getByPath, setByPath, deleteByPath
from .types import ConfigProvider

logger = logging.getLogger(__name__)

__all__ = ["OverrideProvider", "DictProvider", "FileProvider", "writeJson5Atomic"]



def writeJson5Atomic(path: Path, data: Mapping[str, Any]) -> None:
    """Dumps `data` as json5 next to `path` and swaps it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    out = json5.dumps(dict(data), indent=2, quote_keys=True)
    if not out.endswith("\n"):
        out += "\n"
    tmpPath = path.with_name(path.name + ".tmp")
    with open(tmpPath, "w", encoding="utf-8") as fl:
        fl.write(out)
        fl.flush()
        os.fsync(fl.fileno())
    os.replace(tmpPath, path)



class _MappingLayer:
    """Shared dotted-key reads over a nested dict held in `self._data`."""
    _data: Mapping[str, Any]

    def get(self, key: str) -> Any | None:
        return getByPath(self._data, key, None)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._data))

    def _assign(self, key: str, value: Any) -> None:
        # None removes the key so lower layers show through again
        if value is None:
            deleteByPath(self._data, key, pruneEmptyParents=True)
            return
        setByPath(self._data, key, copy.deepcopy(value), createIfMissing=True)



class OverrideProvider(_MappingLayer, ConfigProvider):
    """Topmost in-memory layer for runtime overrides. Never persisted."""
    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        for key, value in (data or {}).items():
            self._assign(key, value)

    def set(self, key: str, value: Any) -> None:
        self._assign(key, value)

    def save(self) -> None:
        return



class DictProvider(_MappingLayer, ConfigProvider):
    """Read-only layer, used for the built-in installer defaults."""
    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise TypeError(f"{type(self).__name__}: 'data' must be a Mapping, not '{type(data).__name__}'")
        self._data = data

    def set(self, key: str, value: Any) -> None:
        raise RuntimeError(f"{type(self).__name__} is read-only")

    def save(self) -> None:
        return



class FileProvider(_MappingLayer, ConfigProvider):
    """
    Layer backed by a .json5 settings file.

    A missing file reads as empty. A file that does not parse, or that holds
    anything but an object, raises instead of silently falling back to defaults:
    an installer pointed at the wrong game directory must not guess.

    Example:
        fp = FileProvider("./modledger.json5")
        fp.set("paths.dataRoot", "D:/Games/Fallout3/Data")
        fp.save()
    """
    def __init__(self, path: str | Path, *, readOnly: bool = False) -> None:
        self.path = Path(path)
        self.readOnly = readOnly
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug("Settings file '%s' is missing; using defaults", self.path)
            return {}
        if not self.path.is_file():
            raise IsADirectoryError(f"{type(self).__name__}: '{self.path}' exists but is not a file")

        try:
            parsed = json5.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as err:
            raise ValueError(f"{type(self).__name__}: parse failed for '{self.path}': {err}") from err

        if parsed is None:
            return {}
        if not isinstance(parsed, Mapping):
            raise TypeError(f"{type(self).__name__}: '{self.path}' must hold a JSON object, not '{type(parsed).__name__}'")
        return dict(parsed)

    def _requireWritable(self) -> None:
        if self.readOnly:
            raise RuntimeError(f"{type(self).__name__}({self.path}) is read-only")

    def set(self, key: str, value: Any) -> None:
        self._requireWritable()
        self._assign(key, value)

    def save(self) -> None:
        self._requireWritable()
        writeJson5Atomic(self.path, self._data)
        logger.debug("Saved %d top-level setting(s) to '%s'", len(self._data), self.path)
