# modledger/config/types.py
from __future__ import annotations
from typing import Any, Protocol

__all__ = ["ConfigProvider"]



class ConfigProvider(Protocol):
    """One layer of a ConfigStore. Keys are dotted paths."""
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> None: ...
    def to_dict(self) -> dict[str, Any]: ...
    def save(self) -> None: ...
