# modledger/upgrade/undo.py
from __future__ import annotations
import logging

from modledger.core.jsonutils import decodeBytes
from modledger.ledger.resources import ConfigEntry, DataFile, ShaderEntry
from modledger.writers.base import WriterContext
from modledger.writers.config_entries import ConfigEntryWriter
from modledger.writers.data_files import DataFileWriter
from modledger.writers.ini import writeIniValue
from modledger.writers.shaders import applyShaderOrFail

logger = logging.getLogger(__name__)

__all__ = ["LedgerUndoOperations"]



class LedgerUndoOperations:
    """
    Removes one mod's claim on a resource and puts back what the claim shadowed.

    Data files follow the side-archive chain: for owners [o1 … on], the payload of
    o(i) sits under the key of o(i+1) and whatever o1 replaced sits under o1's key.
      • undoing the top owner promotes its own archive to live (or deletes the file)
      • undoing an inner owner hands its own archive to the owner above it

    Config and shader values come from the next owner's change record, or the
    value recorded before the first claim.

    Undoing a resource the mod does not claim is a no-op.
    """

    def __init__(self, context: WriterContext) -> None:
        self.context = context
        self.baseName = context.package.baseName
        self._dataFiles = DataFileWriter(context)
        self._configEntries = ConfigEntryWriter(context)

    # ----- Data files -----

    def uninstallDataFile(self, resource: DataFile | str) -> None:
        if isinstance(resource, str):
            resource = DataFile.of(resource)
        ledger, txn = self.context.ledger, self.context.txn
        owners = ledger.getOwners(resource)
        if self.baseName not in owners:
            logger.debug("'%s' does not own %s; nothing to undo", self.baseName, resource)
            return
        
        ownArchive = self._dataFiles.archivePathFor(resource, self.baseName)
        if owners[-1] == self.baseName:
            live = self._dataFiles.livePath(resource)
            shadowed = txn.read(ownArchive)
            if shadowed is not None:
                txn.write(live, shadowed)
                txn.delete(ownArchive)
                logger.info("Restored shadowed %s after removing '%s'", resource, self.baseName)
            else:
                txn.delete(live)
                logger.info("Deleted %s; '%s' was its only source", resource, self.baseName)
        else:
            above = ledger.ownerAbove(resource, self.baseName)
            aboveArchive = self._dataFiles.archivePathFor(resource, above)
            if txn.exists(ownArchive):
                txn.move(ownArchive, aboveArchive)
            else:
                txn.delete(aboveArchive)
            logger.info("Dropped archived %s of '%s' (shadowed by '%s')", resource, self.baseName, above)
        
        ledger.removeClaim(resource, self.baseName)

    # ----- Config entries -----

    def unEditConfig(self, resource: ConfigEntry | tuple[str, str, str]) -> None:
        if not isinstance(resource, ConfigEntry):
            resource = ConfigEntry.of(*resource)
        ledger = self.context.ledger
        owners = ledger.getOwners(resource)
        if self.baseName not in owners:
            logger.debug("'%s' does not own %s; nothing to undo", self.baseName, resource)
            return
        
        path = self._configEntries.filePath(resource)
        original = ledger.getOriginalValue(resource)
        ledger.removeClaim(resource, self.baseName)
        if owners[-1] != self.baseName:
            return
        
        remaining = ledger.getOwners(resource)
        if remaining:
            value = self._recordedValue(remaining[-1], resource, original)
        else:
            value = original
        writeIniValue(self.context.txn, path, resource.section, resource.key, value)
        logger.info("Reset %s to %r after removing '%s'", resource, value, self.baseName)

    # ----- Shaders -----

    def unEditShader(self, resource: ShaderEntry | tuple[int, str]) -> None:
        if not isinstance(resource, ShaderEntry):
            resource = ShaderEntry.of(*resource)
        ledger = self.context.ledger
        owners = ledger.getOwners(resource)
        if self.baseName not in owners:
            logger.debug("'%s' does not own %s; nothing to undo", self.baseName, resource)
            return
        
        original = ledger.getOriginalValue(resource)
        if owners[-1] == self.baseName:
            remaining = [owner for owner in owners if owner != self.baseName]
            if remaining:
                data = self._recordedValue(remaining[-1], resource, original)
            else:
                data = original
            if data is None:
                logger.warning("No earlier value recorded for %s; leaving the current shader in place", resource)
            else:
                payload = data if isinstance(data, bytes) else decodeBytes(data)
                applyShaderOrFail(self.context.shaderCodec, resource, payload)
                logger.info("Restored %s after removing '%s'", resource, self.baseName)
        
        ledger.removeClaim(resource, self.baseName)

    # ----- Helpers -----

    def _recordedValue(self, owner: str, resource: ConfigEntry | ShaderEntry, original: str | None):
        history = self.context.ledger.historicalChangeRecord(owner)
        if history is not None:
            values = history.configEdits if isinstance(resource, ConfigEntry) else history.shaderEdits
            if resource in values:
                return values[resource]
        logger.warning("'%s' owns %s but recorded no value for it; falling back to the original", owner, resource)
        return original
