# modledger/writers/policy.py
from __future__ import annotations
import logging
from collections.abc import Callable
from typing import Optional

from modledger.ledger.resources import ResourceId
from .base import ResourceWriter, WriteOutcome, WriteResult

logger = logging.getLogger(__name__)

__all__ = ["ConfirmOverwrite", "StandardInstallPolicy"]



# (resource, current top owner or None for an unowned game value, requesting mod) → allow?
ConfirmOverwrite = Callable[[ResourceId, Optional[str], str], bool]



class StandardInstallPolicy:
    """
    Normal install rules for a mod writing a resource it does not own yet:
    confirm replacing a live value, keep what gets shadowed, become the top owner.

    Without a confirmOverwrite callback every overwrite is accepted.
    """

    def __init__(self, confirmOverwrite: ConfirmOverwrite | None = None) -> None:
        self.confirmOverwrite = confirmOverwrite

    def defaultWrite(self, writer: ResourceWriter, resource: ResourceId, payload: object) -> WriteResult:
        ctx = writer.context
        requester = ctx.package.baseName
        owners = ctx.ledger.getOwners(resource)
        
        if self.confirmOverwrite is not None and writer.hasLiveValue(resource, owners):
            currentOwner = owners[-1] if owners else None
            if not self.confirmOverwrite(resource, currentOwner, requester):
                logger.info("Overwrite of %s declined for '%s'", resource, requester)
                return WriteResult(WriteOutcome.DECLINED, resource)
        
        target, previous = writer.applyLive(resource, payload)
        writer.preserveShadowed(resource, previous, owners)
        writer.recordChange(resource, payload)
        ctx.ledger.recordClaim(resource, requester)
        if owners:
            logger.info("'%s' now shadows '%s' on %s", requester, owners[-1], resource)
        return WriteResult(WriteOutcome.WRITTEN, resource, target)
