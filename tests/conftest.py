# tests/conftest.py
from __future__ import annotations
import sys
from collections.abc import Callable
from pathlib import Path

import json5
import pytest

from modledger.config.settings import InstallerSettings, loadSettings
from modledger.core.jsonutils import decodeBytes, encodeBytes
from modledger.ledger import ChangeRecord, DataFile, InstallLedger
from modledger.mods.package import ModPackage
from modledger.transaction import FileTransaction
from modledger.upgrade.plugins import PluginList
from modledger.upgrade.runners import ScriptedInstallRunner
from modledger.upgrade.script_api import InstallScriptApi
from modledger.upgrade.session import InstallEnvironment
from modledger.upgrade.undo import LedgerUndoOperations
from modledger.writers import StandardInstallPolicy, WriterContext



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



# ----------------------------
# Collaborators
# ----------------------------

class FakeShaderCodec:
    """
    Shader packages kept in one json5 file inside the game directory, written
    directly like the real codec does. Sessions snapshot it through shaderArchives.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.failOn: set[tuple[int, str]] = set()
        self.calls: list[tuple[int, str, bytes]] = []

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        return json5.loads(self.path.read_text(encoding="utf-8"))

    def get(self, packageId: int, shaderName: str) -> bytes | None:
        raw = self._load().get(f"{packageId}/{shaderName}")
        return decodeBytes(raw) if raw is not None else None

    def seed(self, packageId: int, shaderName: str, data: bytes) -> None:
        shaders = self._load()
        shaders[f"{packageId}/{shaderName}"] = encodeBytes(data)
        self.path.write_text(json5.dumps(shaders, quote_keys=True), encoding="utf-8")

    def applyShaderEdit(self, packageId: int, shaderName: str, data: bytes) -> tuple[bool, bytes | None]:
        self.calls.append((packageId, shaderName, bytes(data)))
        if (packageId, shaderName) in self.failOn:
            return False, None
        old = self.get(packageId, shaderName)
        self.seed(packageId, shaderName, data)
        return True, old



# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture
def gameDir(tmp_path: Path) -> Path:
    root = tmp_path / "game"
    (root / "Data").mkdir(parents=True)
    (root / "game.ini").write_text("[Display]\niSize=50\n", encoding="utf-8")
    (root / "plugins.txt").write_text("Game.esm\n", encoding="utf-8")
    return root


@pytest.fixture
def settings(gameDir: Path) -> InstallerSettings:
    return loadSettings(
        overrides={
            "configFiles": {"Game.ini": "game.ini", "prefs.ini": "prefs.ini"},
            "shaderArchives": ["shaders.json5"],
        },
        baseDir=gameDir,
    )


@pytest.fixture
def shaderCodec(gameDir: Path) -> FakeShaderCodec:
    return FakeShaderCodec(gameDir / "shaders.json5")


@pytest.fixture
def runner() -> ScriptedInstallRunner:
    return ScriptedInstallRunner()


@pytest.fixture
def env(settings: InstallerSettings, runner: ScriptedInstallRunner, shaderCodec: FakeShaderCodec) -> InstallEnvironment:
    return InstallEnvironment.load(settings, runner=runner, shaderCodec=shaderCodec)


@pytest.fixture
def treeState() -> Callable[[Path], dict[str, bytes]]:
    """Every file under a directory with its bytes, for before/after comparisons."""
    def collect(root: Path) -> dict[str, bytes]:
        return {
            path.relative_to(root).as_posix(): path.read_bytes()
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }
    return collect


# ----------------------------
# Writer harness
# ----------------------------

class WriterHarness:
    """
    One ledger and one open transaction shared by several mods; api(name) opens
    a fresh writer context for that mod, undo(name) the matching undo operations.
    """

    def __init__(self, settings: InstallerSettings, shaderCodec, policy=None) -> None:
        self.settings = settings
        self.shaderCodec = shaderCodec
        self.policy = policy or StandardInstallPolicy()
        self.ledger = InstallLedger(settings.paths.ledgerPath)
        self.plugins = PluginList(settings.paths.pluginsFile)
        self.txn = FileTransaction()

    def context(self, baseName: str, version: str = "1.0") -> WriterContext:
        return WriterContext(
            package=ModPackage(baseName=baseName, version=version),
            ledger=self.ledger,
            txn=self.txn,
            settings=self.settings,
            changes=ChangeRecord(),
            policy=self.policy,
            shaderCodec=self.shaderCodec,
        )

    def api(self, baseName: str) -> InstallScriptApi:
        return InstallScriptApi(self.context(baseName), self.plugins)

    def install(self, baseName: str, script: Callable[[InstallScriptApi], object]) -> InstallScriptApi:
        """Runs `script` as a fresh install of `baseName` and registers the mod."""
        api = self.api(baseName)
        script(api)
        self.ledger.registerMod(api.context.package, api.context.changes)
        return api

    def undo(self, baseName: str) -> LedgerUndoOperations:
        return LedgerUndoOperations(self.context(baseName))

    def live(self, path: str) -> Path:
        return self.settings.paths.dataRoot / path

    def archive(self, path: str, baseName: str) -> Path:
        resource = DataFile.of(path)
        name = f"{self.ledger.getModKey(baseName)}_{resource.fileName}"
        return self.settings.paths.overwriteRoot / resource.directory / name


@pytest.fixture
def makeHarness(settings: InstallerSettings, shaderCodec: FakeShaderCodec) -> Callable[..., WriterHarness]:
    def make(policy=None, codec=shaderCodec) -> WriterHarness:
        return WriterHarness(settings, codec, policy)
    return make


@pytest.fixture
def harness(makeHarness: Callable[..., WriterHarness]) -> WriterHarness:
    return makeHarness()
