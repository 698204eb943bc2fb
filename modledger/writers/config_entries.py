# modledger/writers/config_entries.py
from __future__ import annotations
from pathlib import Path

from modledger.ledger.resources import ConfigEntry
from .base import ResourceWriter
from .ini import readIniValue, writeIniValue

__all__ = ["ConfigEntryWriter"]



class ConfigEntryWriter(ResourceWriter[ConfigEntry, str]):
    """
    Live value: the key in the registered config file. Shadowed values exist only
    in the owners' change records; the physical file holds the top value alone.
    """

    def filePath(self, resource: ConfigEntry) -> Path:
        return self.context.settings.configFilePath(resource.file)

    def liveValue(self, resource: ConfigEntry) -> str | None:
        return readIniValue(self.context.txn, self.filePath(resource), resource.section, resource.key)

    def validate(self, resource: ConfigEntry) -> None:
        self.filePath(resource)

    def hasLiveValue(self, resource: ConfigEntry, owners: list[str]) -> bool:
        return bool(owners)

    def applyLive(self, resource: ConfigEntry, payload: str) -> tuple[Path, str | None]:
        path = self.filePath(resource)
        previous = readIniValue(self.context.txn, path, resource.section, resource.key)
        writeIniValue(self.context.txn, path, resource.section, resource.key, payload)
        return path, previous

    def archive(self, resource: ConfigEntry, payload: str, ownerAbove: str) -> None:
        return None

    def preserveShadowed(self, resource: ConfigEntry, previous: str | None, owners: list[str]) -> None:
        # Lower owners keep their values in their change records; only the pre-mod value needs a home
        if not owners:
            self.context.ledger.recordOriginalValue(resource, previous)

    def recordChange(self, resource: ConfigEntry, payload: str) -> None:
        self.context.changes.addConfigEdit(resource, payload)
