# modledger/core/errors.py
from __future__ import annotations
from typing import Any

__all__ = [
    "ModLedgerError",
    "InvalidTarget",
    "CommitFailure",
    "RollbackFailure",
    "ShaderEditFailure",
    "ReconciliationUndoFailure",
    "PackageNotInstalled",
    "LedgerCorrupt",
    "SessionStateError",
]



class ModLedgerError(Exception):
    """Base class for every failure raised by the install core."""
    pass



class InvalidTarget(ModLedgerError):
    """Raised when a resource identity is malformed or points outside its root."""
    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"Invalid install target {target!r}: {reason}")
        self.target = target
        self.reason = reason



class CommitFailure(ModLedgerError):
    """Raised when a pending mutation could not be finalized. Rollback has already run."""
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Failed to commit '{path}': {message}")
        self.path = path



class RollbackFailure(ModLedgerError):
    """
    Raised when one or more snapshots could not be restored.

    `errors` maps each path to the error hit while restoring it. The error that
    triggered the rollback (if any) is chained as __cause__.
    """
    def __init__(self, errors: dict[str, BaseException]) -> None:
        paths = ", ".join(sorted(errors))
        super().__init__(f"Rollback could not restore {len(errors)} path(s): {paths}")
        self.errors = errors



class ShaderEditFailure(ModLedgerError):
    def __init__(self, packageId: int, shaderName: str, reason: str | None = None) -> None:
        message = f"Failed to edit the shader '{shaderName}' in package {packageId}"
        super().__init__(f"{message}: {reason}" if reason else message)
        self.packageId = packageId
        self.shaderName = shaderName



class ReconciliationUndoFailure(ModLedgerError):
    """Raised after reconciliation finished with at least one failed undo."""
    def __init__(self, baseName: str, failures: list[tuple[Any, BaseException]]) -> None:
        details = "; ".join(f"{resource}: {err}" for resource, err in failures)
        super().__init__(f"Could not undo {len(failures)} stale change(s) of '{baseName}': {details}")
        self.baseName = baseName
        self.failures = failures



class PackageNotInstalled(ModLedgerError, LookupError):
    def __init__(self, baseName: str) -> None:
        super().__init__(f"Mod '{baseName}' is not installed")
        self.baseName = baseName



class LedgerCorrupt(ModLedgerError):
    pass



class SessionStateError(ModLedgerError, RuntimeError):
    pass
