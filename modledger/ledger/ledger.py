# modledger/ledger/ledger.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import json5
from pydantic import ValidationError

from modledger.core.errors import LedgerCorrupt, PackageNotInstalled
from modledger.core.ids import uuid_10
from modledger.core.time import nowMs
from modledger.mods.package import ModPackage
from .changes import ChangeRecord
from .models import LedgerDocument, LedgerEntry, ModRecord
from .resources import ResourceId

if TYPE_CHECKING:
    from modledger.transaction.file_transaction import FileTransaction

logger = logging.getLogger(__name__)

__all__ = ["InstallLedger"]



class InstallLedger:
    """
    Process-wide record of resource ownership.

    For every resource ever claimed it keeps the ordered list of mods (by baseName)
    that claimed it: oldest first, current top owner last. For every installed mod
    it keeps the version, the side-archive key and the change record of its last
    successful install or upgrade.

    The ledger is loaded once, mutated in memory during a session and written
    through the session's FileTransaction by flush(). Callers serialize sessions.
    """

    def __init__(self, path: Path | str, document: LedgerDocument | None = None) -> None:
        self.path = Path(path)
        self._doc = document if document is not None else LedgerDocument()

    # ----- Persistence -----

    @classmethod
    def load(cls, path: Path | str) -> InstallLedger:
        ledger = cls(path)
        ledger.reload()
        return ledger

    def reload(self) -> None:
        """Re-reads the persisted store, discarding in-memory changes."""
        if not self.path.exists():
            logger.debug("Ledger store '%s' is missing → starting empty", self.path)
            self._doc = LedgerDocument()
            return
        
        text = self.path.read_text(encoding="utf-8")
        try:
            raw = json5.loads(text) if text.strip() else {}
            self._doc = LedgerDocument.model_validate(raw)
        except (ValueError, ValidationError) as err:
            raise LedgerCorrupt(f"Ledger store '{self.path}' is unreadable: {err}") from err
        logger.debug(
            "Loaded ledger '%s' (mods=%d, entries=%d)", self.path, len(self._doc.mods), len(self._doc.entries),
        )

    def dumps(self) -> str:
        out = json5.dumps(self._doc.model_dump(mode="json"), indent=2, quote_keys=True)
        return out if out.endswith("\n") else out + "\n"

    def flush(self, txn: FileTransaction) -> None:
        """Stages the current state as a pending write of the ledger store."""
        txn.write(self.path, self.dumps().encode("utf-8"))

    def checkpoint(self) -> LedgerDocument:
        return self._doc.model_copy(deep=True)

    def restore(self, checkpoint: LedgerDocument) -> None:
        self._doc = checkpoint.model_copy(deep=True)

    # ----- Ownership -----

    def getOwners(self, resource: ResourceId) -> list[str]:
        entry = self._doc.entries.get(resource.token)
        return list(entry.owners) if entry is not None else []

    def topOwner(self, resource: ResourceId) -> str | None:
        owners = self.getOwners(resource)
        return owners[-1] if owners else None

    def ownerAbove(self, resource: ResourceId, baseName: str) -> str | None:
        """The owner directly above `baseName` in the claim order, None if it is the top (or absent)."""
        owners = self.getOwners(resource)
        if baseName not in owners:
            return None
        idx = owners.index(baseName)
        return owners[idx + 1] if idx + 1 < len(owners) else None

    def recordClaim(self, resource: ResourceId, baseName: str, *, preserveRank: bool = False) -> None:
        """
        Appends `baseName` as the new top owner, moving it there if it already
        claimed the resource. With preserveRank=True an existing claim keeps its
        position (used by upgrades, which never change relative priority).
        """
        entry = self._doc.entries.setdefault(resource.token, LedgerEntry())
        if baseName in entry.owners:
            if preserveRank:
                return
            entry.owners.remove(baseName)
        entry.owners.append(baseName)

    def removeClaim(self, resource: ResourceId, baseName: str) -> bool:
        entry = self._doc.entries.get(resource.token)
        if entry is None or baseName not in entry.owners:
            return False
        entry.owners.remove(baseName)
        if not entry.owners:
            del self._doc.entries[resource.token]
        return True

    def getOriginalValue(self, resource: ResourceId) -> str | None:
        entry = self._doc.entries.get(resource.token)
        return entry.original if entry is not None else None

    def recordOriginalValue(self, resource: ResourceId, value: str | None) -> None:
        """Stores the pre-mod value; only honored while nobody owns the resource yet."""
        entry = self._doc.entries.setdefault(resource.token, LedgerEntry())
        if entry.owners:
            return
        entry.original = value

    # ----- Installed mods -----

    def installedMods(self) -> list[str]:
        return sorted(self._doc.mods)

    def getModInfo(self, baseName: str) -> ModRecord | None:
        record = self._doc.mods.get(baseName)
        return record.model_copy(deep=True) if record is not None else None

    def installedVersion(self, baseName: str) -> str | None:
        record = self._doc.mods.get(baseName)
        return record.version if record is not None else None

    def getModKey(self, baseName: str) -> str:
        """Short stable key for side-archive names; allocated on first use."""
        key = self._doc.modKeys.get(baseName)
        if key is None:
            used = set(self._doc.modKeys.values())
            key = uuid_10()
            while key in used:
                key = uuid_10()
            self._doc.modKeys[baseName] = key
        return key

    def historicalChangeRecord(self, baseName: str) -> ChangeRecord | None:
        record = self._doc.mods.get(baseName)
        if record is None:
            return None
        return ChangeRecord.fromModel(record.changes)

    def registerMod(self, package: ModPackage, changes: ChangeRecord) -> None:
        """Records a fresh install. Claims were already made by the writers."""
        self._doc.mods[package.baseName] = ModRecord(
            version=package.version,
            key=self.getModKey(package.baseName),
            installedAtMs=nowMs(),
            changes=changes.toModel(),
        )

    def mergeUpgrade(self, package: ModPackage, changes: ChangeRecord) -> None:
        """
        Replaces the stored change record of `package.baseName` with `changes` and
        makes sure every resource in it is claimed by the mod, keeping any existing
        rank. Stale claims from the previous version must already be reconciled.
        """
        baseName = package.baseName
        previous = self._doc.mods.get(baseName)
        if previous is None:
            raise PackageNotInstalled(baseName)
        
        for resource in changes.resources():
            self.recordClaim(resource, baseName, preserveRank=True)
        
        stale = [
            str(res) for res in ChangeRecord.fromModel(previous.changes).difference(changes).resources()
            if baseName in self.getOwners(res)
        ]
        if stale:
            logger.warning("Merging '%s' with %d unreconciled claim(s): %s", baseName, len(stale), ", ".join(stale))
        
        self._doc.mods[baseName] = ModRecord(
            version=package.version,
            key=previous.key,
            installedAtMs=nowMs(),
            changes=changes.toModel(),
        )
        logger.info("Ledger merged upgrade of '%s': %s -> %s", baseName, previous.version, package.version)

    def forgetMod(self, baseName: str) -> None:
        """Drops the mod's record and key. Remaining claims are left untouched."""
        if self._doc.mods.pop(baseName, None) is None:
            raise PackageNotInstalled(baseName)
        self._doc.modKeys.pop(baseName, None)
        leftovers = [token for token, entry in self._doc.entries.items() if baseName in entry.owners]
        if leftovers:
            logger.warning("Mod '%s' forgotten with %d claim(s) still recorded", baseName, len(leftovers))
