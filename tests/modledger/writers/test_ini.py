# tests/modledger/writers/test_ini.py
from __future__ import annotations
from pathlib import Path

from modledger.transaction import FileTransaction
from modledger.writers.ini import readIniValue, writeIniValue


def test_readIniValue_isCaseInsensitive(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_text("[Display]\niSize=50\n[Audio]\nfVolume=0.5\n", encoding="utf-8")
    txn = FileTransaction()
    
    assert readIniValue(txn, ini, "display", "ISIZE") == "50"
    assert readIniValue(txn, ini, "Audio", "fvolume") == "0.5"
    assert readIniValue(txn, ini, "Display", "missing") is None
    assert readIniValue(txn, ini, "Nope", "iSize") is None
    assert readIniValue(txn, tmp_path / "absent.ini", "Display", "iSize") is None


def test_writeIniValue_stagesThroughTransaction(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_text("[Display]\niSize=50\n", encoding="utf-8")
    txn = FileTransaction()
    
    writeIniValue(txn, ini, "display", "isize", "100")
    writeIniValue(txn, ini, "General", "sLanguage", "ENGLISH")
    assert ini.read_text(encoding="utf-8") == "[Display]\niSize=50\n"
    assert readIniValue(txn, ini, "Display", "iSize") == "100"
    
    txn.commit()
    text = ini.read_text(encoding="utf-8")
    assert text == "[Display]\niSize=100\n[General]\nsLanguage=ENGLISH\n"


def test_writeIniValue_noneRemovesKey(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_text("[Display]\niSize=50\nbFull=1\n", encoding="utf-8")
    txn = FileTransaction()
    
    writeIniValue(txn, ini, "Display", "iSize", None)
    assert readIniValue(txn, ini, "Display", "iSize") is None
    assert readIniValue(txn, ini, "Display", "bFull") == "1"
    
    # Removing something absent stages nothing new
    other = tmp_path / "other.ini"
    writeIniValue(txn, other, "Display", "iSize", None)
    assert not txn.isSnapshotted(other)


def test_writeIniValue_keepsNonUtf8Bytes(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_bytes(b"[General]\nsName=Caf\xe9\n")
    txn = FileTransaction()
    writeIniValue(txn, ini, "General", "iSize", "1")
    assert b"Caf\xe9" in txn.read(ini)


def test_writeIniValue_onlyTouchesTheTargetLine(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_bytes(b"; keep me\r\n[Display]\r\niSize W=1280\r\n; also me\r\niSize=100\r\n\r\n[Audio]\r\nfVolume=0.5\r\n")
    txn = FileTransaction()
    
    writeIniValue(txn, ini, "display", "isize", "200")
    assert txn.read(ini) == b"; keep me\r\n[Display]\r\niSize W=1280\r\n; also me\r\niSize=200\r\n\r\n[Audio]\r\nfVolume=0.5\r\n"
    assert readIniValue(txn, ini, "Display", "iSize W") == "1280"


def test_writeIniValue_addsKeyAtEndOfItsSection(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    ini.write_text("[Display]\niSize=50\n\n[Audio]\nfVolume=0.5", encoding="utf-8")
    txn = FileTransaction()
    
    writeIniValue(txn, ini, "Display", "bFull", "1")
    writeIniValue(txn, ini, "Audio", "bMute", "0")
    assert txn.read(ini) == b"[Display]\niSize=50\nbFull=1\n\n[Audio]\nfVolume=0.5\nbMute=0\n"
    
    writeIniValue(txn, ini, "Display", "bFull", None)
    assert readIniValue(txn, ini, "Display", "bFull") is None
    assert txn.read(ini).startswith(b"[Display]\niSize=50\n\n[Audio]")


def test_iniValues_toleratePreSectionKeysAndBareLines(tmp_path: Path) -> None:
    ini = tmp_path / "game.ini"
    original = "sLanguage=ENGLISH\n[Display]\nnot a pair\niSize=50\n"
    ini.write_text(original, encoding="utf-8")
    txn = FileTransaction()
    
    assert readIniValue(txn, ini, "Display", "iSize") == "50"
    writeIniValue(txn, ini, "Display", "iSize", "75")
    assert txn.read(ini).decode("utf-8") == original.replace("iSize=50", "iSize=75")
    
    writeIniValue(txn, ini, "Display", "iSize", "50")
    assert txn.read(ini).decode("utf-8") == original
