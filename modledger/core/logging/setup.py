# modledger/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers
from typing import TYPE_CHECKING

from .formatters import DevFormatter, JsonFormatter

if TYPE_CHECKING:
    from modledger.config.settings import InstallerSettings

__all__ = ["configureLogging"]



def configureLogging(settings: InstallerSettings) -> None:
    """
    Initiate the global logging configuration.

    Dev:
      - Console pretty logs (DEBUG)
      - JSON file log (DEBUG) when logging.file is set
    
    Otherwise:
      - Console at logging.level (INFO by default)
      - JSON file log with rotation at the same level
    """
    logCfg = settings.logging
    if logCfg.devMode:
        rootLevel = logging.DEBUG
    else:
        rootLevel = getattr(logging, logCfg.level.upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(rootLevel)

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(rootLevel)
    consoleHandler.setFormatter(DevFormatter())
    root.addHandler(consoleHandler)

    if logCfg.file is not None:
        logCfg.file.parent.mkdir(parents=True, exist_ok=True)
        fileHandler = logging.handlers.RotatingFileHandler(
            logCfg.file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        fileHandler.setLevel(rootLevel)
        fileHandler.setFormatter(JsonFormatter())
        root.addHandler(fileHandler)
