# modledger/semver/semver.py
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

__all__ = ["SemVerPackVersion", "parseSemVerPackVersion", "versionsEqual"]



_NUMERIC_RE = re.compile(r"0|[1-9]\d*")
_IDENT_RE = re.compile(r"[0-9A-Za-z-]+")



@total_ordering
@dataclass(frozen=True)
class SemVerPackVersion:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()
    
    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        prerelease = f"-{'.'.join(self.prerelease)}" if self.prerelease else ""
        build = f"+{'.'.join(self.build)}" if self.build else ""
        return f"{base}{prerelease}{build}"
    
    def _cmpKey(self) -> tuple:
        # Build is ignored for ordering; a release sorts after any of its prereleases.
        # Numeric prerelease identifiers sort before alphanumeric ones.
        pre = tuple((0, int(ident)) if ident.isdigit() else (1, ident) for ident in self.prerelease)
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVerPackVersion):
            return NotImplemented
        return self._cmpKey() == other._cmpKey()
    
    def __hash__(self) -> int:
        return hash(self._cmpKey())
    
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVerPackVersion):
            return NotImplemented
        return self._cmpKey() < other._cmpKey()



def parseSemVerPackVersion(raw: str) -> SemVerPackVersion:
    """
    Parse a version string into SemVerPackVersion.
    
    Accepted forms (examples):
        "1"             -> 1.0.0
        "1.2"           -> 1.2.0
        "v1.2.3"        -> 1.2.3
        "1.2.3-alpha.1"
        "1.2.3+build.1"
    
    Rejected:
        ".1", "1.", "1..3", "1.2.3.4", "01.2.3" (leading zeroes), "1.0a", etc.
    """
    if not isinstance(raw, str):
        raise TypeError(f"Version string must be a string type, got {type(raw).__name__}")
    
    text = raw.strip()
    if not text:
        raise ValueError("Version string cannot be empty or whitespace only")
    
    # Accept a single 'v' and remove it (v1.2.3 -> 1.2.3)
    if text.startswith("v") and len(text) > 1 and text[1].isdigit():
        text = text[1:]
    
    text, _, build = text.partition("+")
    core, _, prerelease = text.partition("-")
    if "+" in raw and not build:
        raise ValueError(f"Empty build metadata in version {raw!r}")
    if "-" in text and not prerelease:
        raise ValueError(f"Empty prerelease in version {raw!r}")
    
    coreParts = core.split(".")
    if not 1 <= len(coreParts) <= 3:
        raise ValueError(f"Invalid version core {core!r} in {raw!r}")
    if not all(_NUMERIC_RE.fullmatch(part) for part in coreParts):
        raise ValueError(f"Invalid numeric component in version {raw!r}")
    numbers = [int(part) for part in coreParts] + [0] * (3 - len(coreParts))
    
    preParts = tuple(prerelease.split(".")) if prerelease else ()
    buildParts = tuple(build.split(".")) if build else ()
    for ident in preParts + buildParts:
        if not _IDENT_RE.fullmatch(ident):
            raise ValueError(f"Invalid identifier {ident!r} in version {raw!r}")
    
    return SemVerPackVersion(numbers[0], numbers[1], numbers[2], preParts, buildParts)



def versionsEqual(first: str | None, second: str | None) -> bool:
    """
    Mod versions are free-form strings. Compare semantically when both parse
    ("1.0" == "1.0.0"), otherwise fall back to exact (stripped) string equality.
    """
    if first is None or second is None:
        return first is second
    try:
        return parseSemVerPackVersion(first) == parseSemVerPackVersion(second)
    except ValueError:
        return first.strip() == second.strip()
