# modledger/core/time.py
from __future__ import annotations
import time

__all__ = ["nowMs"]



def nowMs() -> int:
    return int(time.time() * 1000)
