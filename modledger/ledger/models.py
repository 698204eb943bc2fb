# modledger/ledger/models.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "LEDGER_SCHEMA_VERSION",
    "ConfigEditModel",
    "ShaderEditModel",
    "ChangeRecordModel",
    "ModRecord",
    "LedgerEntry",
    "LedgerDocument",
]



LEDGER_SCHEMA_VERSION = 1



class ConfigEditModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file: str
    section: str
    key: str
    value: str



class ShaderEditModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    packageId: int
    shaderName: str
    data: str   # base64



class ChangeRecordModel(BaseModel):
    """Persisted form of a ChangeRecord."""
    model_config = ConfigDict(extra="forbid")

    dataFiles: list[str] = Field(default_factory=list)
    configEdits: list[ConfigEditModel] = Field(default_factory=list)
    shaderEdits: list[ShaderEditModel] = Field(default_factory=list)



class ModRecord(BaseModel):
    """What the ledger remembers about one installed mod (keyed by baseName)."""
    model_config = ConfigDict(extra="forbid")

    version: str
    key: str
    installedAtMs: int
    changes: ChangeRecordModel = Field(default_factory=ChangeRecordModel)



class LedgerEntry(BaseModel):
    """
    Ownership of one resource. `owners` is claim order: last entry is the top owner.
    `original` is the value present before the first claim (config value or base64
    shader bytes); None means there was none.
    """
    model_config = ConfigDict(extra="forbid")

    owners: list[str] = Field(default_factory=list)
    original: str | None = None

    @field_validator("owners")
    @classmethod
    def _uniqueOwners(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError(f"Duplicate owners in ledger entry: {value}")
        return value



class LedgerDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemaVersion: int = LEDGER_SCHEMA_VERSION
    mods: dict[str, ModRecord] = Field(default_factory=dict)
    # baseName → short key used in side-archive file names
    modKeys: dict[str, str] = Field(default_factory=dict)
    # ResourceId.token → entry
    entries: dict[str, LedgerEntry] = Field(default_factory=dict)

    @field_validator("schemaVersion")
    @classmethod
    def _supportedSchema(cls, value: int) -> int:
        if value != LEDGER_SCHEMA_VERSION:
            raise ValueError(f"Unsupported ledger schema version {value} (expected {LEDGER_SCHEMA_VERSION})")
        return value
