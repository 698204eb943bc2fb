# modledger/writers/data_files.py
from __future__ import annotations
import logging
from pathlib import Path

from modledger.core.paths import resolveSafe
from modledger.ledger.resources import DataFile
from .base import ResourceWriter

logger = logging.getLogger(__name__)

__all__ = ["DataFileWriter"]



class DataFileWriter(ResourceWriter[DataFile, bytes]):
    """
    Live file: <dataRoot>/<path>.
    Side archive: <overwriteRoot>/<dir of path>/<modKey>_<fileName>, where the key is
    that of the owner directly above the archived payload.
    """

    def livePath(self, resource: DataFile) -> Path:
        settings = self.context.settings
        return resolveSafe(settings.paths.dataRoot, resource.path, allowSymlinks=settings.install.allowSymlinks)

    def archivePath(self, resource: DataFile, modKey: str) -> Path:
        settings = self.context.settings
        name = f"{modKey}_{resource.fileName}"
        relative = f"{resource.directory}/{name}" if resource.directory else name
        return resolveSafe(settings.paths.overwriteRoot, relative, allowSymlinks=settings.install.allowSymlinks)

    def archivePathFor(self, resource: DataFile, baseName: str) -> Path:
        return self.archivePath(resource, self.context.ledger.getModKey(baseName))

    # ----- Hooks -----

    def validate(self, resource: DataFile) -> None:
        self.livePath(resource)

    def hasLiveValue(self, resource: DataFile, owners: list[str]) -> bool:
        return self.context.txn.exists(self.livePath(resource))

    def applyLive(self, resource: DataFile, payload: bytes) -> tuple[Path, bytes | None]:
        live = self.livePath(resource)
        previous = self.context.txn.read(live)
        self.context.txn.write(live, payload)
        return live, previous

    def archive(self, resource: DataFile, payload: bytes, ownerAbove: str) -> Path:
        target = self.archivePathFor(resource, ownerAbove)
        self.context.txn.write(target, payload)
        return target

    def preserveShadowed(self, resource: DataFile, previous: bytes | None, owners: list[str]) -> None:
        # The requester becomes the new top, so whatever it shadows is archived under its key
        if previous is None:
            return
        target = self.archivePathFor(resource, self.context.package.baseName)
        self.context.txn.write(target, previous)
        logger.debug("Archived shadowed '%s' to '%s'", resource, target)

    def recordChange(self, resource: DataFile, payload: bytes) -> None:
        self.context.changes.addFile(resource)
