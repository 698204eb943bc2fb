# tests/modledger/transaction/test_file_transaction.py
from __future__ import annotations
import os
from pathlib import Path

import pytest

from modledger.core.errors import CommitFailure, RollbackFailure, SessionStateError
from modledger.transaction import FileTransaction, TransactionState


@pytest.fixture
def files(tmp_path: Path) -> dict[str, Path]:
    existing = tmp_path / "existing.txt"
    existing.write_bytes(b"before")
    return {"existing": existing, "new": tmp_path / "sub" / "dir" / "new.txt"}


def test_commit_appliesWritesAndDeletes(files: dict[str, Path]) -> None:
    txn = FileTransaction()
    txn.write(files["new"], b"hello")
    txn.delete(files["existing"])
    
    # Staged only
    assert not files["new"].exists()
    assert files["existing"].read_bytes() == b"before"
    assert txn.read(files["new"]) == b"hello"
    assert txn.exists(files["existing"]) is False
    
    txn.commit()
    assert txn.state is TransactionState.COMMITTED
    assert files["new"].read_bytes() == b"hello"
    assert not files["existing"].exists()
    assert [p.name for p in files["new"].parent.iterdir()] == ["new.txt"]


def test_rollback_restoresSnapshots(files: dict[str, Path], tmp_path: Path) -> None:
    txn = FileTransaction()
    txn.write(files["existing"], b"after")
    txn.write(files["new"], b"created")
    txn.rollback()
    
    assert txn.state is TransactionState.ROLLED_BACK
    assert files["existing"].read_bytes() == b"before"
    assert not files["new"].exists()
    assert not (tmp_path / "sub").exists()


def test_rollback_undoesChangesMadeBehindTheTransaction(files: dict[str, Path]) -> None:
    # External collaborators (the shader codec) write snapshotted files directly
    txn = FileTransaction()
    txn.snapshot(files["existing"])
    txn.snapshot(files["new"])
    files["existing"].write_bytes(b"tampered")
    files["new"].parent.mkdir(parents=True)
    files["new"].write_bytes(b"stray")
    
    txn.rollback()
    assert files["existing"].read_bytes() == b"before"
    assert not files["new"].exists()


def test_snapshot_firstWins(files: dict[str, Path]) -> None:
    txn = FileTransaction()
    txn.snapshot(files["existing"])
    files["existing"].write_bytes(b"changed outside")
    txn.snapshot(files["existing"])
    txn.rollback()
    assert files["existing"].read_bytes() == b"before"


def test_move_stagesWriteAndDelete(files: dict[str, Path]) -> None:
    txn = FileTransaction()
    txn.move(files["existing"], files["new"])
    assert txn.read(files["new"]) == b"before"
    assert txn.read(files["existing"]) is None
    txn.commit()
    assert files["new"].read_bytes() == b"before"
    assert not files["existing"].exists()
    
    with pytest.raises(FileNotFoundError):
        FileTransaction().move(files["existing"], files["new"])


def test_contextManager_rollsBackOnError(files: dict[str, Path]) -> None:
    with pytest.raises(ValueError):
        with FileTransaction() as txn:
            txn.write(files["existing"], b"after")
            raise ValueError("boom")
    assert files["existing"].read_bytes() == b"before"
    assert txn.state is TransactionState.ROLLED_BACK


def test_contextManager_rollsBackWithoutCommit(files: dict[str, Path]) -> None:
    with FileTransaction() as txn:
        txn.write(files["new"], b"never")
    assert not files["new"].exists()
    assert txn.state is TransactionState.ROLLED_BACK


def test_finishedTransaction_rejectsFurtherUse(files: dict[str, Path]) -> None:
    txn = FileTransaction()
    txn.commit()
    with pytest.raises(SessionStateError):
        txn.write(files["new"], b"late")
    with pytest.raises(SessionStateError):
        txn.rollback()


def test_commitFailure_rollsBackEverything(files: dict[str, Path], tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    blocked = files["existing"].with_name("blocked.txt")
    realReplace = os.replace
    
    def failingReplace(src, dst, *args, **kwargs):
        if Path(dst) == blocked:
            raise PermissionError("denied")
        return realReplace(src, dst, *args, **kwargs)
    
    monkeypatch.setattr(os, "replace", failingReplace)
    
    txn = FileTransaction()
    txn.write(files["existing"], b"after")   # finalized first
    txn.write(blocked, b"never")
    with pytest.raises(CommitFailure) as excInfo:
        txn.commit()
    
    assert isinstance(excInfo.value.__cause__, PermissionError)
    assert txn.state is TransactionState.ROLLED_BACK
    assert files["existing"].read_bytes() == b"before"
    assert not blocked.exists()
    assert [p.name for p in tmp_path.iterdir()] == ["existing.txt"]


def test_rollbackFailure_reportsPaths(files: dict[str, Path], monkeypatch: pytest.MonkeyPatch) -> None:
    txn = FileTransaction()
    txn.snapshot(files["existing"])
    files["existing"].write_bytes(b"tampered")
    
    def failingWrite(self, path, data):
        raise OSError("disk gone")
    
    monkeypatch.setattr(FileTransaction, "_writeFile", failingWrite)
    with pytest.raises(RollbackFailure) as excInfo:
        txn.rollback()
    assert str(files["existing"].absolute()) in excInfo.value.errors


@pytest.mark.parametrize("finish", ["commit", "rollback"])
def test_finish_leavesUnrelatedTmpFilesAlone(tmp_path: Path, finish: str) -> None:
    plugin = tmp_path / "foo.esp"
    plugin.write_bytes(b"v1")
    userTmp = tmp_path / "foo.esp.tmp"
    userTmp.write_bytes(b"not ours")
    
    txn = FileTransaction()
    txn.write(plugin, b"v2")
    getattr(txn, finish)()
    
    assert userTmp.read_bytes() == b"not ours"
    assert plugin.read_bytes() == (b"v2" if finish == "commit" else b"v1")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["foo.esp", "foo.esp.tmp"]
