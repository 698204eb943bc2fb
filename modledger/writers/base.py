# modledger/writers/base.py
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

from modledger.config.settings import InstallerSettings
from modledger.core.errors import ModLedgerError
from modledger.ledger.changes import ChangeRecord
from modledger.ledger.ledger import InstallLedger
from modledger.ledger.resources import ResourceId
from modledger.mods.package import ModPackage
from modledger.transaction.file_transaction import FileTransaction

if TYPE_CHECKING:
    from .shaders import ShaderCodec

logger = logging.getLogger(__name__)

__all__ = [
    "WriteOutcome",
    "WriteResult",
    "WriterContext",
    "InstallPolicy",
    "ResourceWriter",
]

R = TypeVar("R", bound=ResourceId)
P = TypeVar("P")



class WriteOutcome(str, Enum):
    WRITTEN = "written"     # live value updated
    ARCHIVED = "archived"   # stored as a shadowed value, live value untouched
    DECLINED = "declined"   # overwrite refused; nothing changed
    REJECTED = "rejected"   # invalid target; nothing changed



@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    resource: ResourceId | None
    target: Path | None = None
    error: ModLedgerError | None = None

    def __bool__(self) -> bool:
        return self.outcome in (WriteOutcome.WRITTEN, WriteOutcome.ARCHIVED)



@dataclass
class WriterContext:
    """Everything a writer needs for one session. `changes` is the session's fresh record."""
    package: ModPackage
    ledger: InstallLedger
    txn: FileTransaction
    settings: InstallerSettings
    changes: ChangeRecord
    policy: InstallPolicy
    shaderCodec: ShaderCodec | None = None



class InstallPolicy(Protocol):
    """Write rules for a mod that does not own the resource yet (may prompt, may refuse)."""
    def defaultWrite(self, writer: ResourceWriter, resource: ResourceId, payload: object) -> WriteResult: ...



class ResourceWriter(ABC, Generic[R, P]):
    """
    Decides where a write lands for one kind of resource.

      • requester not among the owners → the default install policy
      • requester owns it but is not on top → payload archived, live value untouched
      • requester is the top owner → live value updated
    
    Owner-side writes keep the requester's rank; only the default policy moves
    a mod to the top.
    """

    def __init__(self, context: WriterContext) -> None:
        self.context = context

    # ----- Kind-specific hooks -----

    def validate(self, resource: R) -> None:
        """Raises InvalidTarget when the resource cannot be written on this installation."""
        return None

    @abstractmethod
    def hasLiveValue(self, resource: R, owners: list[str]) -> bool:
        """True when a default write would replace something and should be confirmed."""
        ...

    @abstractmethod
    def applyLive(self, resource: R, payload: P) -> tuple[Path | None, P | None]:
        """Writes the live value. Returns (physical target, value that was live before)."""
        ...

    @abstractmethod
    def archive(self, resource: R, payload: P, ownerAbove: str) -> Path | None:
        """Stores a shadowed payload. Returns the side location if there is one."""
        ...

    @abstractmethod
    def preserveShadowed(self, resource: R, previous: P | None, owners: list[str]) -> None:
        """Keeps the value a default write is about to shadow, so undo can bring it back."""
        ...

    @abstractmethod
    def recordChange(self, resource: R, payload: P) -> None:
        ...

    # ----- Common policy -----

    def write(self, resource: R, payload: P) -> WriteResult:
        ctx = self.context
        baseName = ctx.package.baseName
        self.validate(resource)
        owners = ctx.ledger.getOwners(resource)
        
        if baseName not in owners:
            return ctx.policy.defaultWrite(self, resource, payload)
        
        if owners[-1] != baseName:
            ownerAbove = ctx.ledger.ownerAbove(resource, baseName)
            target = self.archive(resource, payload, ownerAbove)
            outcome = WriteOutcome.ARCHIVED
            logger.info("'%s' is shadowed by '%s'; archived %s", baseName, owners[-1], resource)
        else:
            target, _previous = self.applyLive(resource, payload)
            outcome = WriteOutcome.WRITTEN
            logger.debug("'%s' owns %s; wrote live value", baseName, resource)
        
        self.recordChange(resource, payload)
        ctx.ledger.recordClaim(resource, baseName, preserveRank=True)
        return WriteResult(outcome, resource, target)
