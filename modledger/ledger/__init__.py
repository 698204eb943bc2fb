# modledger/ledger/__init__.py
from .changes import ChangeRecord
from .ledger import InstallLedger
from .models import LedgerDocument, LedgerEntry, ModRecord
from .resources import ConfigEntry, DataFile, ResourceId, ResourceKind, ShaderEntry

__all__ = [
    "ChangeRecord",
    "InstallLedger",
    "LedgerDocument",
    "LedgerEntry",
    "ModRecord",
    "ConfigEntry",
    "DataFile",
    "ResourceId",
    "ResourceKind",
    "ShaderEntry",
]
