# modledger/core/paths.py
from __future__ import annotations
import posixpath
import re
from pathlib import Path, PurePosixPath

from modledger.core.errors import InvalidTarget

__all__ = ["normalizeDataPath", "assertFilePathIsSafe", "resolveSafe"]



_DRIVE_RE = re.compile(r"^[A-Za-z]:")



def normalizeDataPath(path: str) -> str:
    """
    Returns the canonical relative form of a data path: forward slashes,
    no "." segments, no leading "./". Case is preserved; comparisons fold it.

    Examples:
      "Textures\\Armor\\foo.dds" -> "Textures/Armor/foo.dds"
      "./meshes//a.nif"          -> "meshes/a.nif"
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidTarget(str(path), "path must be a non-empty string")
    
    raw = path.strip().replace("\\", "/")
    normalized = posixpath.normpath(raw)
    if normalized in (".", ""):
        raise InvalidTarget(path, "path does not name a file")
    return normalized



def assertFilePathIsSafe(path: str) -> str:
    """
    Validates that `path` is a relative path that stays inside its root.
    Returns the normalized path. Raises InvalidTarget otherwise.
    """
    normalized = normalizeDataPath(path)
    if normalized.startswith("/") or _DRIVE_RE.match(normalized):
        raise InvalidTarget(path, "absolute paths are not allowed")
    
    parts = PurePosixPath(normalized).parts
    if any(part == ".." for part in parts):
        raise InvalidTarget(path, "path escapes its root")
    if any(ch in normalized for ch in ("\x00", ":", "*", "?", "\"", "<", ">", "|")):
        raise InvalidTarget(path, "path contains illegal characters")
    return normalized



def resolveSafe(root: Path, requested: str, *, allowSymlinks: bool = False) -> Path:
    """
    Returns the absolute path under `root` for `requested`, rejecting traversal and (optionally) symlinks.
    Raises InvalidTarget if the path leaves root or violates the symlink policy.
    """
    if not isinstance(root, Path):
        root = Path(root)
    
    relative = assertFilePathIsSafe(requested)
    raw = root.joinpath(relative)
    
    resolved = raw.resolve(strict=False) # Don't raise if file doesn't exist yet
    rootResolved = root.resolve(strict=False)
    
    if not resolved.is_relative_to(rootResolved):
        raise InvalidTarget(requested, "path points outside of its root directory")
    
    if not allowSymlinks:
        # Walk from the leaf up to root; none of the existing hops may be a symlink
        path = raw
        while True:
            if path.is_symlink():
                raise InvalidTarget(requested, "symlinks are not allowed")
            if path.resolve(strict=False) == rootResolved:
                break
            parent = path.parent
            if parent == path: # Filesystem root guard
                break
            path = parent
    return raw.absolute()
