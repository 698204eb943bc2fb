# modledger/config/__init__.py
from .settings import InstallerSettings, loadSettings, saveSettings, buildSettingsStore
from .store import ConfigStore

__all__ = [
    "InstallerSettings",
    "loadSettings",
    "saveSettings",
    "buildSettingsStore",
    "ConfigStore",
]
