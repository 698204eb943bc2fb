# modledger/upgrade/plugins.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modledger.transaction.file_transaction import FileTransaction

logger = logging.getLogger(__name__)

__all__ = ["PLUGIN_SUFFIXES", "isPluginPath", "PluginList"]



PLUGIN_SUFFIXES = (".esp", ".esm")



def isPluginPath(path: str) -> bool:
    """Plugins live directly in the data root."""
    return "/" not in path and path.lower().endswith(PLUGIN_SUFFIXES)



class PluginList:
    """
    The game's active plugin list (one file name per line, `#` starts a comment).
    Changes stay in memory until commitActivePlugins() stages them in a transaction.
    """

    def __init__(self, path: Path | str, active: list[str] | None = None) -> None:
        self.path = Path(path)
        self._active: list[str] = list(active or [])

    @classmethod
    def load(cls, path: Path | str) -> PluginList:
        plugins = cls(path)
        plugins.reload()
        return plugins

    def reload(self) -> None:
        self._active = self._parse(self.path.read_bytes()) if self.path.is_file() else []

    # ----- Queries -----

    def isActive(self, name: str) -> bool:
        folded = name.lower()
        return any(item.lower() == folded for item in self._active)

    def activePlugins(self) -> list[str]:
        return list(self._active)

    # ----- Mutation -----

    def activate(self, name: str) -> None:
        if not self.isActive(name):
            self._active.append(name)
            logger.debug("Activated plugin '%s'", name)

    def deactivate(self, name: str) -> None:
        folded = name.lower()
        before = len(self._active)
        self._active = [item for item in self._active if item.lower() != folded]
        if len(self._active) != before:
            logger.debug("Deactivated plugin '%s'", name)

    def dumps(self) -> str:
        return "".join(f"{name}\n" for name in self._active)

    def commitActivePlugins(self, txn: FileTransaction) -> None:
        """Stages the list in `txn`; an unchanged list leaves the file untouched."""
        data = self.dumps().encode("utf-8")
        current = txn.read(self.path)
        if current is not None and self._parse(current) == self._active:
            return
        if current is None and not self._active:
            return
        txn.write(self.path, data)

    @staticmethod
    def _parse(data: bytes) -> list[str]:
        names: list[str] = []
        for line in data.decode("utf-8", errors="replace").splitlines():
            name = line.split("#", 1)[0].strip()
            if name and name.lower() not in (item.lower() for item in names):
                names.append(name)
        return names
