# modledger/core/logging/util.py
from __future__ import annotations

import logging



def getLogger(name: str, side: str = "") -> logging.Logger:
    return logging.getLogger(f"{side}.{name}" if side else name)

def getModLogger(modId: str) -> logging.Logger:
    """Logger for messages emitted on behalf of one mod (install scripts, undo steps)."""
    return logging.getLogger(f"mod.{modId}")
