# modledger/config/store.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .types import ConfigProvider

__all__ = ["ConfigStore", "deepMerge"]



def deepMerge(left: Mapping[str, Any], right: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merges `right` over `left`. Non-mapping values on the right replace."""
    out: dict[str, Any] = dict(left)
    for key, rightValue in right.items():
        leftValue = out.get(key)
        if isinstance(leftValue, Mapping) and isinstance(rightValue, Mapping):
            out[key] = deepMerge(leftValue, rightValue)
        else:
            out[key] = rightValue
    return out



class ConfigStore:
    """
    Minimal layered config store:
      - read: first-hit from the topmost provider down
      - write: goes to the topmost writable layer chosen at construction
      - validate: on set(), validate the *effective* merged document
    """

    def __init__(
        self,
        *,
        namespace: str,
        providers: list[ConfigProvider],
        validator: Callable[[dict[str, Any]], Any] | None = None,
    ) -> None:
        if not providers:
            raise ValueError(f"ConfigStore '{namespace}' needs at least one provider")
        self.namespace = namespace
        self._providers = providers
        self._validator = validator
    
    def _merged(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        # We merge from bottom to top
        for provider in self._providers:
            merged = deepMerge(merged, provider.to_dict())
        return merged
    
    def get(self, key: str) -> Any | None:
        for provider in reversed(self._providers): # Topmost first precedence
            value = provider.get(key)
            if value is not None:
                return value
        return None
    
    def set(self, key: str, value: Any) -> None:
        top = self._providers[-1]
        oldValue = top.get(key)
        top.set(key, value)
        if self._validator is None:
            return
        try:
            self._validator(self._merged())
        except Exception:
            # rollback
            top.set(key, oldValue)
            raise
    
    def snapshot(self) -> dict[str, Any]:
        return self._merged()
    
    def validated(self) -> Any:
        merged = self._merged()
        return self._validator(merged) if self._validator is not None else merged
