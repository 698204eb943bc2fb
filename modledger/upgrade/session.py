# modledger/upgrade/session.py
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from modledger.config.settings import InstallerSettings
from modledger.core.errors import PackageNotInstalled, RollbackFailure, SessionStateError
from modledger.core.ids import uuidv7
from modledger.core.logging.context import logContext
from modledger.ledger.changes import ChangeRecord
from modledger.ledger.ledger import InstallLedger
from modledger.ledger.models import LedgerDocument
from modledger.mods.package import ModPackage
from modledger.semver.semver import versionsEqual
from modledger.transaction.file_transaction import FileTransaction, TransactionState
from modledger.writers.base import InstallPolicy, WriterContext
from modledger.writers.data_files import DataFileWriter
from modledger.writers.policy import StandardInstallPolicy
from modledger.writers.shaders import ShaderCodec
from .plugins import PluginList, isPluginPath
from .reconcile import reconcileDifferences
from .runners import InstallScriptRunner, ScriptedInstallRunner
from .script_api import InstallScriptApi
from .undo import LedgerUndoOperations

logger = logging.getLogger(__name__)

__all__ = [
    "SessionState",
    "SessionResult",
    "InstallEnvironment",
    "ModScriptSession",
    "InstallSession",
    "UpgradeSession",
    "UninstallSession",
    "installMod",
    "upgradeMod",
    "uninstallMod",
]



class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMMITTED = "committed"
    ROLLED_BACK = "rolledBack"



@dataclass(frozen=True)
class SessionResult:
    success: bool
    message: str
    state: SessionState
    error: BaseException | None = None



@dataclass
class InstallEnvironment:
    """The long-lived collaborators every session works against. One session at a time."""
    settings: InstallerSettings
    ledger: InstallLedger
    plugins: PluginList
    runner: InstallScriptRunner = field(default_factory=ScriptedInstallRunner)
    policy: InstallPolicy = field(default_factory=StandardInstallPolicy)
    shaderCodec: ShaderCodec | None = None

    @classmethod
    def load(cls, settings: InstallerSettings, **kwargs) -> InstallEnvironment:
        return cls(
            settings=settings,
            ledger=InstallLedger.load(settings.paths.ledgerPath),
            plugins=PluginList.load(settings.paths.pluginsFile),
            **kwargs,
        )



class ModScriptSession(ABC):
    """
    One all-or-nothing run of a mod's install procedure.

    Idle → Running → Committed | RolledBack. Every global state file, the ledger
    store included, is snapshotted before anything runs. On failure the files,
    the in-memory ledger and the plugin list are restored and the error is re-raised.
    run() returns False (rolled back, no error) when the procedure itself cancels.
    """
    operation = "install"
    progressLabel = "Installing mod"
    exceptionMessage = "A problem occurred during install: \n{0}\nThe mod was not installed."
    successMessage = "The mod was successfully installed."
    failMessage = "The mod was not installed."

    def __init__(self, package: ModPackage, env: InstallEnvironment) -> None:
        self.package = package
        self.env = env
        self.state = SessionState.IDLE
        self.sessionId = uuidv7(prefix="ses_")
        self.txn: FileTransaction | None = None
        self.context: WriterContext | None = None

    # ----- Hooks -----

    def checkAlreadyDone(self) -> bool:
        return False

    @abstractmethod
    def doScript(self) -> bool:
        """Runs the operation inside the open transaction. False cancels it."""
        ...

    # ----- Helpers for subclasses -----

    def runInstallProcedure(self) -> bool:
        api = InstallScriptApi(self.context, self.env.plugins)
        if self.package.hasInstallScript:
            return self.env.runner.runCustom(self.package, api)
        return self.env.runner.runBasic(self.package, api, self.progressLabel)

    def undoOperations(self) -> LedgerUndoOperations:
        return LedgerUndoOperations(self.context)

    # ----- Run -----

    def run(self) -> bool:
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"Session {self.sessionId} was already run ({self.state.value})")
        self.state = SessionState.RUNNING

        with logContext(sessionId=self.sessionId, modId=self.package.baseName, operation=self.operation):
            logger.info("Starting %s of %s", self.operation, self.package.label)
            env = self.env
            checkpoint = env.ledger.checkpoint()
            self.txn = FileTransaction(label=f"{self.operation}:{self.package.baseName}")
            self.context = WriterContext(
                package=self.package,
                ledger=env.ledger,
                txn=self.txn,
                settings=env.settings,
                changes=ChangeRecord(),
                policy=env.policy,
                shaderCodec=env.shaderCodec,
            )
            try:
                for path in env.settings.snapshotPaths():
                    self.txn.snapshot(path)

                if self.checkAlreadyDone():
                    logger.info("%s is already done for %s; nothing to change", self.operation, self.package.label)
                    self.txn.commit()
                    self.state = SessionState.COMMITTED
                    return True

                if not self.doScript():
                    logger.info("%s of %s was cancelled", self.operation, self.package.label)
                    self._abort(checkpoint, None)
                    return False

                env.ledger.flush(self.txn)
                self.txn.commit()
            except BaseException as err:
                self._abort(checkpoint, err)
                raise

            self.state = SessionState.COMMITTED
            logger.info("Finished %s of %s", self.operation, self.package.label)
            return True

    def _abort(self, checkpoint: LedgerDocument, err: BaseException | None) -> None:
        self.state = SessionState.ROLLED_BACK
        self.env.ledger.restore(checkpoint)
        try:
            if self.txn.state is TransactionState.OPEN:
                self.txn.rollback()
        except RollbackFailure as rollbackErr:
            logger.critical("Rollback of %s failed; files may be inconsistent", self.package.label)
            if err is not None:
                raise rollbackErr from err
            raise
        finally:
            self.env.plugins.reload()
        if err is not None:
            logger.warning("Rolled back %s of %s: %s", self.operation, self.package.label, err)

    def execute(self) -> SessionResult:
        """run(), reported as success flag plus a message for the user."""
        try:
            done = self.run()
        except Exception as err:
            logger.exception("%s of %s failed", self.operation, self.package.label)
            return SessionResult(False, self.exceptionMessage.format(err), self.state, err)
        if not done:
            return SessionResult(False, self.failMessage, self.state)
        return SessionResult(True, self.successMessage, self.state)



class InstallSession(ModScriptSession):
    """Fresh install: every write goes through the install policy and the mod is registered."""

    def checkAlreadyDone(self) -> bool:
        installed = self.env.ledger.installedVersion(self.package.baseName)
        if installed is None:
            return False
        if versionsEqual(installed, self.package.version):
            return True
        raise SessionStateError(
            f"'{self.package.baseName}' is already installed at version {installed}; upgrade it instead"
        )

    def doScript(self) -> bool:
        if not self.runInstallProcedure():
            return False
        self.env.ledger.registerMod(self.package, self.context.changes)
        self.env.plugins.commitActivePlugins(self.txn)
        return True



class UpgradeSession(ModScriptSession):
    """
    In-place upgrade: the new version takes over the old version's rank on
    every resource it still touches. Resources only the old version touched
    are undone before the ledger merge.
    """
    operation = "upgrade"
    progressLabel = "Upgrading mod"
    exceptionMessage = "A problem occurred during in-place upgrade: \n{0}\nThe mod was not upgraded."
    successMessage = "The mod was successfully upgraded."
    failMessage = "The mod was not upgraded."

    def checkAlreadyDone(self) -> bool:
        installed = self.env.ledger.installedVersion(self.package.baseName)
        if installed is None:
            raise PackageNotInstalled(self.package.baseName)
        return versionsEqual(installed, self.package.version)

    def doScript(self) -> bool:
        if not self.runInstallProcedure():
            return False

        ledger = self.env.ledger
        previous = ledger.historicalChangeRecord(self.package.baseName)
        report = reconcileDifferences(
            previous, self.context.changes, self.undoOperations(), baseName=self.package.baseName,
        )
        # A stale claim must never survive into the merge
        report.raiseIfFailed()
        ledger.mergeUpgrade(self.package, self.context.changes)
        self.env.plugins.commitActivePlugins(self.txn)
        return True



class UninstallSession(ModScriptSession):
    """Undoes everything the installed version recorded and forgets the mod."""
    operation = "uninstall"
    progressLabel = "Uninstalling mod"
    exceptionMessage = "A problem occurred during uninstall: \n{0}\nThe mod was not uninstalled."
    successMessage = "The mod was successfully uninstalled."
    failMessage = "The mod was not uninstalled."

    def checkAlreadyDone(self) -> bool:
        if self.env.ledger.installedVersion(self.package.baseName) is None:
            raise PackageNotInstalled(self.package.baseName)
        return False

    def doScript(self) -> bool:
        ledger = self.env.ledger
        baseName = self.package.baseName
        previous = ledger.historicalChangeRecord(baseName)
        report = reconcileDifferences(previous, ChangeRecord(), self.undoOperations(), baseName=baseName)
        report.raiseIfFailed()

        dataFiles = DataFileWriter(self.context)
        for resource in previous.dataFiles:
            if isPluginPath(resource.path) and not self.txn.exists(dataFiles.livePath(resource)):
                self.env.plugins.deactivate(resource.path)

        ledger.forgetMod(baseName)
        self.env.plugins.commitActivePlugins(self.txn)
        return True



# ----- Entry points -----

def installMod(package: ModPackage, env: InstallEnvironment) -> SessionResult:
    return InstallSession(package, env).execute()



def upgradeMod(package: ModPackage, env: InstallEnvironment) -> SessionResult:
    return UpgradeSession(package, env).execute()



def uninstallMod(baseName: str, env: InstallEnvironment) -> SessionResult:
    version = env.ledger.installedVersion(baseName)
    if version is None:
        err = PackageNotInstalled(baseName)
        return SessionResult(False, UninstallSession.exceptionMessage.format(err), SessionState.IDLE, err)
    return UninstallSession(ModPackage(baseName=baseName, version=version), env).execute()
