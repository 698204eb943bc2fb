# modledger/upgrade/runners.py
from __future__ import annotations
import logging
from collections.abc import Callable, Mapping
from typing import Optional, Protocol

from modledger.core.errors import ModLedgerError
from modledger.core.logging.util import getModLogger
from modledger.mods.package import ModPackage
from modledger.writers.base import WriteOutcome
from .plugins import isPluginPath
from .script_api import InstallScriptApi

logger = logging.getLogger(__name__)

__all__ = ["InstallScript", "InstallScriptRunner", "ScriptedInstallRunner", "runBasicInstall"]



# Returning False cancels the install; None counts as success
InstallScript = Callable[[InstallScriptApi], Optional[bool]]



class InstallScriptRunner(Protocol):
    def runCustom(self, package: ModPackage, api: InstallScriptApi) -> bool: ...
    def runBasic(self, package: ModPackage, api: InstallScriptApi, label: str) -> bool: ...



def runBasicInstall(package: ModPackage, api: InstallScriptApi, label: str) -> bool:
    """
    Copies every file under the package's content directory into the data root
    and activates the plugins among them. Files with invalid names are skipped.
    """
    contentDir = package.contentDir
    if contentDir is None or not contentDir.is_dir():
        logger.warning("%s: '%s' has no content directory; nothing to copy", label, package.label)
        return True
    
    files = sorted(path for path in contentDir.rglob("*") if path.is_file())
    logger.info("%s: %s (%d file(s))", label, package.label, len(files))
    for path in files:
        relative = path.relative_to(contentDir).as_posix()
        result = api.generateDataFile(relative, path.read_bytes())
        if result.outcome is WriteOutcome.REJECTED:
            continue
        if result and isPluginPath(relative):
            api.setPluginActivation(relative, True)
    return True



class ScriptedInstallRunner:
    """
    Runs install procedures written in Python, registered per mod baseName.
    Packages without a script go through runBasicInstall().

    Example:
        def install(api):
            api.generateDataFile("meshes/sword.nif", SWORD)
            api.editConfig("game.ini", "Display", "iSize", "200")

        runner = ScriptedInstallRunner({"Foo": install})
    """

    def __init__(self, scripts: Mapping[str, InstallScript] | None = None) -> None:
        self._scripts: dict[str, InstallScript] = dict(scripts or {})

    def register(self, baseName: str, script: InstallScript) -> None:
        self._scripts[baseName] = script

    def runCustom(self, package: ModPackage, api: InstallScriptApi) -> bool:
        script = self._scripts.get(package.baseName)
        if script is None:
            raise ModLedgerError(f"No install script registered for '{package.baseName}'")
        getModLogger(package.baseName).info("Running install script of %s", package.label)
        result = script(api)
        return result is None or bool(result)

    def runBasic(self, package: ModPackage, api: InstallScriptApi, label: str) -> bool:
        return runBasicInstall(package, api, label)
