# modledger/config/settings.py
from __future__ import annotations
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modledger.core.errors import InvalidTarget
from .providers import DictProvider, FileProvider, OverrideProvider
from .store import ConfigStore

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SETTINGS",
    "PathsSettings",
    "InstallSettings",
    "LoggingSettings",
    "InstallerSettings",
    "buildSettingsStore",
    "loadSettings",
    "saveSettings",
]



DEFAULT_SETTINGS: dict[str, Any] = {
    "paths": {
        "dataRoot": "Data",
        "overwriteRoot": "overwrites",
        "ledgerPath": "InstallLog.json5",
        "pluginsFile": "plugins.txt",
    },
    "configFiles": {},
    "shaderArchives": [],
    "install": {"allowSymlinks": False},
    "logging": {"devMode": False, "level": "INFO", "file": None},
}



class PathsSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dataRoot: Path
    overwriteRoot: Path
    ledgerPath: Path
    pluginsFile: Path



class InstallSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    allowSymlinks: bool = False



class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    devMode: bool = False
    level: str = "INFO"
    file: Path | None = None



class InstallerSettings(BaseModel):
    """Validated installer configuration. Paths are absolute once built by loadSettings()."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    paths: PathsSettings
    # Lower-cased config file name → physical file. Only these files may be edited.
    configFiles: dict[str, Path] = Field(default_factory=dict)
    shaderArchives: list[Path] = Field(default_factory=list)
    install: InstallSettings = Field(default_factory=InstallSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("configFiles")
    @classmethod
    def _foldConfigNames(cls, value: dict[str, Path]) -> dict[str, Path]:
        folded: dict[str, Path] = {}
        for name, path in value.items():
            key = name.strip().lower()
            if key in folded:
                raise ValueError(f"Config file '{name}' is registered twice (names are case-insensitive)")
            folded[key] = path
        return folded

    def resolvedAgainst(self, baseDir: Path) -> InstallerSettings:
        """Returns a copy with every relative path anchored at `baseDir`."""
        def anchor(path: Path) -> Path:
            path = Path(path).expanduser()
            return path if path.is_absolute() else (baseDir / path)
        
        return self.model_copy(update={
            "paths": PathsSettings(
                dataRoot=anchor(self.paths.dataRoot),
                overwriteRoot=anchor(self.paths.overwriteRoot),
                ledgerPath=anchor(self.paths.ledgerPath),
                pluginsFile=anchor(self.paths.pluginsFile),
            ),
            "configFiles": {name: anchor(path) for name, path in self.configFiles.items()},
            "shaderArchives": [anchor(path) for path in self.shaderArchives],
            "logging": self.logging.model_copy(update={
                "file": anchor(self.logging.file) if self.logging.file is not None else None,
            }),
        })

    def configFilePath(self, name: str) -> Path:
        path = self.configFiles.get(name.strip().lower())
        if path is None:
            raise InvalidTarget(name, "not a registered config file")
        return path

    def snapshotPaths(self) -> list[Path]:
        """Every global state file an install session may touch, ledger included."""
        paths: list[Path] = [*self.configFiles.values(), self.paths.pluginsFile, self.paths.ledgerPath]
        paths.extend(self.shaderArchives)
        return paths



def buildSettingsStore(path: Path | str | None = None) -> ConfigStore:
    """
    Layers: built-in defaults → optional json5 file → runtime overrides.
    """
    providers: list = [DictProvider(DEFAULT_SETTINGS)]
    if path is not None:
        providers.append(FileProvider(path, readOnly=True))
    providers.append(OverrideProvider())
    return ConfigStore(
        namespace="modledger:settings",
        providers=providers,
        validator=InstallerSettings.model_validate,
    )



def loadSettings(
    path: Path | str | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    baseDir: Path | str | None = None,
) -> InstallerSettings:
    """
    Builds InstallerSettings from defaults, an optional json5 file and dotted-key overrides.

    Relative paths resolve against `baseDir`, else the settings file's directory,
    else the current working directory.
    
    Example:
        settings = loadSettings("modledger.json5", overrides={"logging.devMode": True})
    """
    store = buildSettingsStore(path)
    for key, value in (overrides or {}).items():
        store.set(key, value)
    
    settings: InstallerSettings = store.validated()
    if baseDir is None:
        baseDir = Path(path).parent if path is not None else Path.cwd()
    resolved = settings.resolvedAgainst(Path(baseDir).absolute())
    logger.debug(
        "Loaded installer settings (dataRoot=%s, ledger=%s, configFiles=%d)",
        resolved.paths.dataRoot, resolved.paths.ledgerPath, len(resolved.configFiles),
    )
    return resolved



def saveSettings(path: Path | str, values: Mapping[str, Any]) -> InstallerSettings:
    """
    Writes dotted-key `values` into the json5 settings file at `path` and returns
    the settings it now yields. Nothing is written if the result does not validate.
    """
    fileLayer = FileProvider(path)
    store = ConfigStore(
        namespace="modledger:settings-file",
        providers=[DictProvider(DEFAULT_SETTINGS), fileLayer],
        validator=InstallerSettings.model_validate,
    )
    for key, value in values.items():
        store.set(key, value)
    fileLayer.save()
    return loadSettings(path)
