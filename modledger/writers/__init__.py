# modledger/writers/__init__.py
from .base import InstallPolicy, ResourceWriter, WriteOutcome, WriteResult, WriterContext
from .config_entries import ConfigEntryWriter
from .data_files import DataFileWriter
from .ini import readIniValue, writeIniValue
from .policy import StandardInstallPolicy
from .shaders import ShaderCodec, ShaderWriter

__all__ = [
    "InstallPolicy",
    "ResourceWriter",
    "WriteOutcome",
    "WriteResult",
    "WriterContext",
    "ConfigEntryWriter",
    "DataFileWriter",
    "readIniValue",
    "writeIniValue",
    "StandardInstallPolicy",
    "ShaderCodec",
    "ShaderWriter",
]
