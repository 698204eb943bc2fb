# modledger/ledger/resources.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from modledger.core.errors import InvalidTarget
from modledger.core.paths import assertFilePathIsSafe

__all__ = [
    "ResourceKind",
    "DataFile",
    "ConfigEntry",
    "ShaderEntry",
    "ResourceId",
]



class ResourceKind(str, Enum):
    """Kinds of mutable resources a mod can claim."""
    DATA_FILE = "data"
    CONFIG_ENTRY = "config"
    SHADER_ENTRY = "shader"



@dataclass(frozen=True, eq=False)
class DataFile:
    """
    A file under the data root. `path` keeps the casing the installer used;
    identity is the case-folded path since the game file system is case-insensitive.
    """
    kind: ClassVar[ResourceKind] = ResourceKind.DATA_FILE
    path: str

    @classmethod
    def of(cls, path: str) -> DataFile:
        return cls(assertFilePathIsSafe(path))

    @property
    def token(self) -> str:
        return f"{self.kind.value}|{self.path.lower()}"

    @property
    def fileName(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def directory(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataFile):
            return NotImplemented
        return self.token == other.token

    def __hash__(self) -> int:
        return hash(self.token)

    def __str__(self) -> str:
        return self.path



@dataclass(frozen=True)
class ConfigEntry:
    """
    A (file, section, key) triple. All three parts are folded with str.lower()
    when built through of(); the live write uses the folded section and key.
    """
    kind: ClassVar[ResourceKind] = ResourceKind.CONFIG_ENTRY
    file: str
    section: str
    key: str

    @classmethod
    def of(cls, file: str, section: str, key: str) -> ConfigEntry:
        parts = []
        for label, value in (("file", file), ("section", section), ("key", key)):
            if not isinstance(value, str) or not value.strip():
                raise InvalidTarget(f"{file}[{section}]{key}", f"config {label} must be a non-empty string")
            if any(ch in value for ch in ("|", "\n", "\r", "\x00")):
                raise InvalidTarget(f"{file}[{section}]{key}", f"config {label} contains illegal characters")
            parts.append(value.strip().lower())
        return cls(*parts)

    @property
    def token(self) -> str:
        return f"{self.kind.value}|{self.file}|{self.section}|{self.key}"

    def __str__(self) -> str:
        return f"{self.file}[{self.section}]{self.key}"



@dataclass(frozen=True)
class ShaderEntry:
    kind: ClassVar[ResourceKind] = ResourceKind.SHADER_ENTRY
    packageId: int
    shaderName: str

    @classmethod
    def of(cls, packageId: int, shaderName: str) -> ShaderEntry:
        if isinstance(packageId, bool) or not isinstance(packageId, int) or packageId < 0:
            raise InvalidTarget(f"{packageId}/{shaderName}", "shader package id must be a non-negative integer")
        if not isinstance(shaderName, str) or not shaderName.strip() or "|" in shaderName:
            raise InvalidTarget(f"{packageId}/{shaderName}", "shader name must be a non-empty string")
        return cls(packageId, shaderName.strip())

    @property
    def token(self) -> str:
        return f"{self.kind.value}|{self.packageId}|{self.shaderName}"

    def __str__(self) -> str:
        return f"shaderpackage{self.packageId:03d}/{self.shaderName}"



ResourceId = Union[DataFile, ConfigEntry, ShaderEntry]
