# modledger/upgrade/reconcile.py
from __future__ import annotations
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from modledger.core.errors import ReconciliationUndoFailure
from modledger.ledger.changes import ChangeRecord
from modledger.ledger.resources import ConfigEntry, DataFile, ResourceId, ShaderEntry

logger = logging.getLogger(__name__)

__all__ = ["UndoOperations", "ReconciliationReport", "reconcileDifferences"]



class UndoOperations(Protocol):
    def uninstallDataFile(self, resource: DataFile) -> None: ...
    def unEditConfig(self, resource: ConfigEntry) -> None: ...
    def unEditShader(self, resource: ShaderEntry) -> None: ...



@dataclass
class ReconciliationReport:
    baseName: str
    undone: list[ResourceId] = field(default_factory=list)
    failures: list[tuple[ResourceId, BaseException]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raiseIfFailed(self) -> None:
        if self.failures:
            raise ReconciliationUndoFailure(self.baseName, list(self.failures))



def reconcileDifferences(
    previous: ChangeRecord,
    current: ChangeRecord,
    undo: UndoOperations,
    *,
    baseName: str,
) -> ReconciliationReport:
    """
    Undoes everything `previous` touched that `current` no longer does.

    Runs over all three resource kinds even when single undos fail; failures are
    collected in the report. Undos are independent of each other, the sorted order
    only makes logs reproducible.
    """
    stale = previous.difference(current)
    report = ReconciliationReport(baseName)
    
    steps: list[tuple[Callable[[ResourceId], None], list[ResourceId]]] = [
        (undo.uninstallDataFile, sorted(stale.dataFiles, key=lambda res: res.token)),
        (undo.unEditConfig, sorted(stale.configEdits, key=lambda res: res.token)),
        (undo.unEditShader, sorted(stale.shaderEdits, key=lambda res: res.token)),
    ]
    for operation, resources in steps:
        for resource in resources:
            try:
                operation(resource)
            except Exception as err:
                # Collected and raised by the caller once every set is done
                logger.error("Failed to undo %s of '%s': %s", resource, baseName, err, exc_info=True)
                report.failures.append((resource, err))
                continue
            report.undone.append(resource)
    
    if report.undone or report.failures:
        logger.info(
            "Reconciled '%s': %d stale change(s) undone, %d failed", baseName, len(report.undone), len(report.failures),
        )
    return report
