# tests/modledger/writers/test_resource_writers.py
from __future__ import annotations

import pytest

from modledger.core.errors import ShaderEditFailure
from modledger.ledger import ConfigEntry, DataFile, ShaderEntry
from modledger.writers import ResourceWriter, StandardInstallPolicy, WriteOutcome, readIniValue


FILE1 = DataFile.of("meshes/File1.nif")
ISIZE = ConfigEntry.of("game.ini", "Display", "iSize")


# ----------------------------
# Data files
# ----------------------------

def test_dataFile_ownersAB_writeFromA_isArchivedUnderB(harness) -> None:
    harness.api("A").generateDataFile(FILE1.path, b"A1")
    harness.api("B").generateDataFile(FILE1.path, b"B1")
    assert harness.ledger.getOwners(FILE1) == ["A", "B"]
    
    upgradeA = harness.api("A")
    result = upgradeA.generateDataFile(FILE1.path, b"A2")
    harness.txn.commit()
    
    assert result.outcome is WriteOutcome.ARCHIVED
    assert result
    assert harness.live(FILE1.path).read_bytes() == b"B1"
    assert harness.archive(FILE1.path, "B").read_bytes() == b"A2"
    assert result.target == harness.archive(FILE1.path, "B")
    assert harness.ledger.getOwners(FILE1) == ["A", "B"]
    assert FILE1 in upgradeA.context.changes.dataFiles


def test_dataFile_ownersAB_writeFromB_updatesLive(harness) -> None:
    harness.api("A").generateDataFile(FILE1.path, b"A1")
    harness.api("B").generateDataFile(FILE1.path, b"B1")
    
    result = harness.api("B").generateDataFile(FILE1.path, b"B2")
    harness.txn.commit()
    
    assert result.outcome is WriteOutcome.WRITTEN
    assert harness.live(FILE1.path).read_bytes() == b"B2"
    # A's payload stays archived under B's key
    assert harness.archive(FILE1.path, "B").read_bytes() == b"A1"
    assert harness.ledger.getOwners(FILE1) == ["A", "B"]


def test_dataFile_firstOwner_archivesGameFileUnderOwnKey(harness) -> None:
    live = harness.live("textures/sky.dds")
    live.parent.mkdir(parents=True)
    live.write_bytes(b"vanilla")
    
    harness.api("A").generateDataFile("textures\\sky.dds", b"A1")
    harness.txn.commit()
    
    assert live.read_bytes() == b"A1"
    assert harness.archive("textures/sky.dds", "A").read_bytes() == b"vanilla"


def test_dataFile_overwriteDeclined_changesNothing(makeHarness) -> None:
    asked: list[tuple] = []
    
    def confirm(resource, currentOwner, requester) -> bool:
        asked.append((str(resource), currentOwner, requester))
        return False
    
    harness = makeHarness(StandardInstallPolicy(confirm))
    harness.api("A").generateDataFile(FILE1.path, b"A1")
    api = harness.api("B")
    result = api.generateDataFile(FILE1.path, b"B1")
    
    assert result.outcome is WriteOutcome.DECLINED
    assert not result
    assert result.error is None
    assert asked == [(FILE1.path, "A", "B")]
    assert harness.txn.read(harness.live(FILE1.path)) == b"A1"
    assert harness.ledger.getOwners(FILE1) == ["A"]
    assert api.context.changes.isEmpty()


@pytest.mark.parametrize("path", ["../escape.nif", "/abs/file.nif", "C:/x.nif", "bad?.nif"])
def test_dataFile_invalidTarget_rejectsOnlyThatWrite(harness, path: str) -> None:
    api = harness.api("A")
    result = api.generateDataFile(path, b"x")
    assert result.outcome is WriteOutcome.REJECTED
    assert result.error is not None
    assert not result
    
    assert api.generateDataFile("ok.nif", b"x")
    assert harness.txn.pendingPaths() == [harness.live("ok.nif").absolute()]


# ----------------------------
# Config entries
# ----------------------------

def test_config_topOwner_writesLive_nonTopOnlyRecords(harness) -> None:
    gameIni = harness.settings.configFilePath("game.ini")
    
    harness.api("A").editConfig("Game.ini", "display", "ISIZE", "100")
    assert harness.ledger.getOriginalValue(ISIZE) == "50"
    harness.api("B").editConfig("game.ini", "Display", "iSize", "150")
    assert readIniValue(harness.txn, gameIni, "Display", "iSize") == "150"
    
    upgradeA = harness.api("A")
    result = upgradeA.editConfig("game.ini", "Display", "iSize", "200")
    assert result.outcome is WriteOutcome.ARCHIVED
    assert readIniValue(harness.txn, gameIni, "Display", "iSize") == "150"
    assert upgradeA.context.changes.configEdits == {ISIZE: "200"}
    
    result = harness.api("B").editConfig("game.ini", "Display", "iSize", "175")
    assert result.outcome is WriteOutcome.WRITTEN
    assert readIniValue(harness.txn, gameIni, "Display", "iSize") == "175"
    assert harness.ledger.getOwners(ISIZE) == ["A", "B"]


def test_config_unregisteredFile_isRejected(harness) -> None:
    result = harness.api("A").editConfig("system.ini", "Display", "iSize", "1")
    assert result.outcome is WriteOutcome.REJECTED
    assert "not a registered config file" in str(result.error)


# ----------------------------
# Shaders
# ----------------------------

def test_shader_liveEditAndArchive(harness, shaderCodec) -> None:
    shaderCodec.seed(3, "water", b"vanilla")
    entry = ShaderEntry.of(3, "water")
    
    assert harness.api("A").editShader(3, "water", b"A1").outcome is WriteOutcome.WRITTEN
    assert harness.ledger.getOriginalValue(entry) is not None
    assert harness.api("B").editShader(3, "water", b"B1").outcome is WriteOutcome.WRITTEN
    
    calls = len(shaderCodec.calls)
    upgradeA = harness.api("A")
    assert upgradeA.editShader(3, "water", b"A2").outcome is WriteOutcome.ARCHIVED
    assert len(shaderCodec.calls) == calls
    assert shaderCodec.get(3, "water") == b"B1"
    assert upgradeA.context.changes.shaderEdits == {entry: b"A2"}


def test_shader_codecRefusal_raises(harness, shaderCodec) -> None:
    shaderCodec.failOn.add((1, "sky"))
    with pytest.raises(ShaderEditFailure):
        harness.api("A").editShader(1, "sky", b"x")
    assert harness.ledger.getOwners(ShaderEntry.of(1, "sky")) == []


def test_shader_withoutCodec_raises(makeHarness) -> None:
    harness = makeHarness(codec=None)
    with pytest.raises(ShaderEditFailure, match="no shader codec"):
        harness.api("A").editShader(1, "sky", b"x")


def test_resourceWriter_withMissingHooks_cannotBeBuilt(harness) -> None:
    class HalfWriter(ResourceWriter):
        def hasLiveValue(self, resource, owners) -> bool:
            return False
    
    with pytest.raises(TypeError):
        HalfWriter(harness.context("A"))
