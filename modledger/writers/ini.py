# modledger/writers/ini.py
from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modledger.transaction.file_transaction import FileTransaction

__all__ = ["readIniValue", "writeIniValue"]

# Game ini files are not guaranteed to be UTF-8; surrogateescape keeps unknown bytes intact.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
_COMMENT_PREFIXES = (";", "#")



def _lines(txn: FileTransaction, path: Path) -> list[str] | None:
    data = txn.read(path)
    if data is None:
        return None
    return data.decode(_ENCODING, errors=_ERRORS).splitlines(keepends=True)



def _sectionName(line: str) -> str | None:
    text = line.strip()
    if text.startswith("[") and "]" in text:
        return text[1:text.index("]")].strip()
    return None



def _keyOf(line: str) -> str | None:
    text = line.strip()
    if not text or text.startswith(_COMMENT_PREFIXES) or "=" not in text:
        return None
    return text.split("=", 1)[0].strip()



def _sectionBounds(lines: list[str], section: str) -> tuple[int, int] | None:
    """(header index, end index) of the first section named `section`, case-insensitively."""
    wanted = section.strip().lower()
    start = None
    for index, line in enumerate(lines):
        name = _sectionName(line)
        if name is None:
            continue
        if start is not None:
            return start, index
        if name.lower() == wanted:
            start = index
    return (start, len(lines)) if start is not None else None



def _keyLines(lines: list[str], bounds: tuple[int, int], key: str) -> list[int]:
    wanted = key.strip().lower()
    start, end = bounds
    return [
        index for index in range(start + 1, end)
        if (found := _keyOf(lines[index])) is not None and found.lower() == wanted
    ]



def _newline(lines: list[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"



def readIniValue(txn: FileTransaction, path: Path, section: str, key: str) -> str | None:
    """First value of `key` in `section`, matched case-insensitively. None when absent."""
    lines = _lines(txn, path)
    if lines is None:
        return None
    bounds = _sectionBounds(lines, section)
    if bounds is None:
        return None
    matches = _keyLines(lines, bounds, key)
    if not matches:
        return None
    return lines[matches[0]].strip().split("=", 1)[1].strip()



def writeIniValue(txn: FileTransaction, path: Path, section: str, key: str, value: str | None) -> None:
    """
    Sets (or with value=None removes) `key` in `section` of the ini file at `path`,
    staging the edited file in `txn`.

    Only the affected line changes: comments, ordering, spelling of other keys,
    line endings and lines outside any section are left byte-for-byte. An existing
    key keeps its spelling; a missing key is added at the end of its section, and a
    missing section is appended to the file.
    """
    lines = _lines(txn, path)
    bounds = _sectionBounds(lines, section) if lines is not None else None

    if value is None:
        if bounds is None:
            return
        matches = _keyLines(lines, bounds, key)
        if not matches:
            return
        for index in reversed(matches):
            del lines[index]
    else:
        lines = lines if lines is not None else []
        nl = _newline(lines)
        if bounds is None:
            if lines and not lines[-1].endswith(("\n", "\r")):
                lines[-1] += nl
            lines.append(f"[{section}]{nl}")
            lines.append(f"{key}={value}{nl}")
        else:
            matches = _keyLines(lines, bounds, key)
            if matches:
                line = lines[matches[0]]
                ending = line[len(line.rstrip("\r\n")):]
                existingKey = line.split("=", 1)[0].rstrip()
                lines[matches[0]] = f"{existingKey}={value}{ending}"
            else:
                # After the last non-blank line of the section
                start, end = bounds
                insertAt = end
                while insertAt - 1 > start and not lines[insertAt - 1].strip():
                    insertAt -= 1
                if not lines[insertAt - 1].endswith(("\n", "\r")):
                    lines[insertAt - 1] += nl
                lines.insert(insertAt, f"{key}={value}{nl}")

    txn.write(path, "".join(lines).encode(_ENCODING, errors=_ERRORS))
