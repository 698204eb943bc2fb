# modledger/upgrade/script_api.py
from __future__ import annotations
import logging

from modledger.core.errors import InvalidTarget
from modledger.ledger.resources import ConfigEntry, DataFile, ShaderEntry
from modledger.writers.base import WriteOutcome, WriteResult, WriterContext
from modledger.writers.config_entries import ConfigEntryWriter
from modledger.writers.data_files import DataFileWriter
from modledger.writers.shaders import ShaderWriter
from .plugins import PluginList

logger = logging.getLogger(__name__)

__all__ = ["InstallScriptApi"]



class InstallScriptApi:
    """
    What an install procedure may call. Every write goes through the writer
    for its resource kind, which decides where it lands.

    An invalid target only rejects that one write (outcome REJECTED); it does
    not abort the session.
    """

    def __init__(self, context: WriterContext, plugins: PluginList) -> None:
        self.context = context
        self.plugins = plugins
        self._dataFiles = DataFileWriter(context)
        self._configEntries = ConfigEntryWriter(context)
        self._shaders = ShaderWriter(context)

    @property
    def baseName(self) -> str:
        return self.context.package.baseName

    def generateDataFile(self, path: str, data: bytes) -> WriteResult:
        try:
            return self._dataFiles.write(DataFile.of(path), bytes(data))
        except InvalidTarget as err:
            return self._rejected(err)

    def editConfig(self, file: str, section: str, key: str, value: str) -> WriteResult:
        try:
            return self._configEntries.write(ConfigEntry.of(file, section, key), str(value))
        except InvalidTarget as err:
            return self._rejected(err)

    def editShader(self, packageId: int, shaderName: str, data: bytes) -> WriteResult:
        try:
            return self._shaders.write(ShaderEntry.of(packageId, shaderName), bytes(data))
        except InvalidTarget as err:
            return self._rejected(err)

    def setPluginActivation(self, pluginName: str, active: bool) -> None:
        if active:
            self.plugins.activate(pluginName)
        else:
            self.plugins.deactivate(pluginName)

    def _rejected(self, err: InvalidTarget) -> WriteResult:
        logger.warning("Rejected write by '%s': %s", self.baseName, err)
        return WriteResult(WriteOutcome.REJECTED, None, error=err)
