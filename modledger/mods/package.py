# modledger/mods/package.py
from __future__ import annotations
from pathlib import Path

import json5
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["MANIFEST_NAME", "ModPackage", "loadModPackage"]



MANIFEST_NAME = "manifest.json5"



class ModPackage(BaseModel):
    """
    One version of an installable mod.

    `baseName` is stable across versions and is the ownership identity in the ledger.
    `contentDir` holds the files a basic install copies into the data root.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    baseName: str
    version: str
    displayName: str | None = None
    hasInstallScript: bool = False
    contentDir: Path | None = Field(default=None, exclude=True)

    @field_validator("baseName", "version")
    @classmethod
    def _nonEmpty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value

    @property
    def label(self) -> str:
        return f"{self.displayName or self.baseName} {self.version}"



def loadModPackage(directory: Path | str) -> ModPackage:
    """
    Reads `<directory>/manifest.json5`. Content defaults to `<directory>/data`.
    
    Example manifest:
        { baseName: "BetterTextures", version: "2.0", hasInstallScript: false }
    """
    directory = Path(directory)
    manifestPath = directory / MANIFEST_NAME
    raw = json5.loads(manifestPath.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise TypeError(f"'{manifestPath}' must contain a JSON object, not '{type(raw).__name__}'")
    content = raw.pop("contentDir", "data")
    return ModPackage.model_validate({**raw, "contentDir": directory / content})
