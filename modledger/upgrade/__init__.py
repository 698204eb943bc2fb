# modledger/upgrade/__init__.py
from .plugins import PluginList
from .reconcile import ReconciliationReport, UndoOperations, reconcileDifferences
from .runners import InstallScript, InstallScriptRunner, ScriptedInstallRunner, runBasicInstall
from .script_api import InstallScriptApi
from .session import (
    InstallEnvironment,
    InstallSession,
    ModScriptSession,
    SessionResult,
    SessionState,
    UninstallSession,
    UpgradeSession,
    installMod,
    uninstallMod,
    upgradeMod,
)
from .undo import LedgerUndoOperations

__all__ = [
    "PluginList",
    "ReconciliationReport",
    "UndoOperations",
    "reconcileDifferences",
    "InstallScript",
    "InstallScriptRunner",
    "ScriptedInstallRunner",
    "runBasicInstall",
    "InstallScriptApi",
    "InstallEnvironment",
    "InstallSession",
    "ModScriptSession",
    "SessionResult",
    "SessionState",
    "UninstallSession",
    "UpgradeSession",
    "installMod",
    "uninstallMod",
    "upgradeMod",
    "LedgerUndoOperations",
]
