# modledger/transaction/file_transaction.py
from __future__ import annotations
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from types import TracebackType

from modledger.core.errors import CommitFailure, RollbackFailure, SessionStateError

logger = logging.getLogger(__name__)

__all__ = ["TransactionState", "FileTransaction"]



class TransactionState(str, Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolledBack"



class FileTransaction:
    """
    Best-effort all-or-nothing mutation of a set of files.

    Every touched path is snapshotted (bytes, or None when absent) before its first
    mutation. Writes and deletes are staged in memory and readable through read()
    until commit() finalizes them in order. rollback() restores every snapshot,
    whether or not the staged mutations already reached the disk.

    Not isolated from other processes writing the same files.

    Usage:
        with FileTransaction() as txn:
            txn.snapshot(iniPath)
            txn.write(dataPath, payload)
            txn.commit()
        # leaving the block without commit() rolls back
    """

    def __init__(self, *, label: str = "install") -> None:
        self.label = label
        self.state = TransactionState.OPEN
        self._snapshots: dict[Path, bytes | None] = {}
        self._pending: dict[Path, bytes | None] = {}
        self._createdDirs: list[Path] = []
        self._tempFiles: set[Path] = set()

    # ----- Helpers -----

    @staticmethod
    def _key(path: Path | str) -> Path:
        return Path(path).absolute()

    def _requireOpen(self) -> None:
        if self.state is not TransactionState.OPEN:
            raise SessionStateError(f"Transaction '{self.label}' is already {self.state.value}")

    def _ensureParent(self, path: Path) -> None:
        missing: list[Path] = []
        parent = path.parent
        while not parent.exists():
            missing.append(parent)
            if parent.parent == parent:
                break
            parent = parent.parent
        if missing:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Deepest last so rollback can remove them in reverse creation order
            self._createdDirs.extend(reversed(missing))

    def _writeFile(self, path: Path, data: bytes) -> None:
        self._ensureParent(path)
        # Uniquely named so a user's own "<name>.tmp" is never clobbered
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False,
        ) as fl:
            tmpPath = Path(fl.name)
            self._tempFiles.add(tmpPath)
            fl.write(data)
            fl.flush()
            os.fsync(fl.fileno())
        os.replace(tmpPath, path)
        self._tempFiles.discard(tmpPath)

    def _discardTempFiles(self) -> None:
        for tmpPath in list(self._tempFiles):
            try:
                tmpPath.unlink(missing_ok=True)
            except OSError as err:
                logger.warning("Transaction '%s' could not remove temp file '%s': %s", self.label, tmpPath, err)
            self._tempFiles.discard(tmpPath)

    # ----- Snapshots / staged mutations -----

    def snapshot(self, path: Path | str) -> None:
        """Captures the current bytes of `path` (first snapshot wins)."""
        self._requireOpen()
        key = self._key(path)
        if key in self._snapshots:
            return
        self._snapshots[key] = key.read_bytes() if key.is_file() else None

    def isSnapshotted(self, path: Path | str) -> bool:
        return self._key(path) in self._snapshots

    def read(self, path: Path | str) -> bytes | None:
        """Current view of `path`: the staged value if any, otherwise the disk. None when absent."""
        key = self._key(path)
        if key in self._pending:
            return self._pending[key]
        return key.read_bytes() if key.is_file() else None

    def exists(self, path: Path | str) -> bool:
        return self.read(path) is not None

    def write(self, path: Path | str, data: bytes) -> None:
        self._requireOpen()
        self.snapshot(path)
        self._pending[self._key(path)] = bytes(data)

    def delete(self, path: Path | str) -> None:
        self._requireOpen()
        self.snapshot(path)
        self._pending[self._key(path)] = None

    def move(self, source: Path | str, target: Path | str) -> None:
        data = self.read(source)
        if data is None:
            raise FileNotFoundError(f"Cannot move missing file '{source}'")
        self.write(target, data)
        self.delete(source)

    def pendingPaths(self) -> list[Path]:
        return list(self._pending)

    # ----- Finalization -----

    def commit(self) -> None:
        """
        Finalizes all staged mutations. On any failure the transaction is rolled
        back and CommitFailure is raised (RollbackFailure if the restore failed too).
        """
        self._requireOpen()
        for path, data in self._pending.items():
            try:
                if data is None:
                    if path.is_file():
                        path.unlink()
                else:
                    self._writeFile(path, data)
            except OSError as err:
                failure = CommitFailure(str(path), str(err))
                failure.__cause__ = err
                logger.error("Transaction '%s' failed to commit '%s': %s", self.label, path, err)
                try:
                    self.rollback()
                except RollbackFailure as rollbackErr:
                    raise rollbackErr from failure
                raise failure
        
        logger.debug("Transaction '%s' committed %d change(s)", self.label, len(self._pending))
        self._pending.clear()
        self._snapshots.clear()
        self._createdDirs.clear()
        self.state = TransactionState.COMMITTED

    def rollback(self) -> None:
        """Restores every snapshot. Raises RollbackFailure listing the paths it could not restore."""
        self._requireOpen()
        self._pending.clear()
        self._discardTempFiles()
        errors: dict[str, BaseException] = {}
        for path, data in self._snapshots.items():
            try:
                if data is None:
                    if path.is_file():
                        path.unlink()
                elif not path.is_file() or path.read_bytes() != data:
                    self._writeFile(path, data)
            except OSError as err:
                errors[str(path)] = err
        
        self._discardTempFiles()
        for directory in reversed(self._createdDirs):
            try:
                directory.rmdir()
            except OSError:
                # Not empty (restored or foreign content); leave it
                continue
        
        self._snapshots.clear()
        self._createdDirs.clear()
        self.state = TransactionState.ROLLED_BACK
        if errors:
            logger.error("Transaction '%s' rollback left %d path(s) unrestored", self.label, len(errors))
            raise RollbackFailure(errors)
        logger.debug("Transaction '%s' rolled back", self.label)

    # ----- Context manager -----

    def __enter__(self) -> FileTransaction:
        return self

    def __exit__(
        self,
        excType: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self.state is not TransactionState.OPEN:
            return
        if exc is None:
            logger.warning("Transaction '%s' left without commit → rolling back", self.label)
            self.rollback()
            return
        try:
            self.rollback()
        except RollbackFailure as rollbackErr:
            raise rollbackErr from exc
