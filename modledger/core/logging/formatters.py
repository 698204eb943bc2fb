# modledger/core/logging/formatters.py
from __future__ import annotations

import logging

from modledger.core.jsonutils import safeJsonDumps
from .context import getLogContext

CONTEXT_KEYS = ("sessionId", "modId", "operation")



def _causeChain(exc: BaseException | None) -> list[dict[str, str]]:
    chain: list[dict[str, str]] = []
    seen: set[int] = set()
    cause = exc.__cause__ if exc is not None else None
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        chain.append({"type": type(cause).__name__, "message": str(cause)})
        cause = cause.__cause__
    return chain



class JsonFormatter(logging.Formatter):
    """
    One-line JSON records for the log file.

    A failed session logs a RollbackFailure raised from the error that started
    the rollback, so the `exc.causes` list keeps both visible in one record.
    """
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext() or {}
        entry = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": ctx,
            "pid": record.process,
        }

        if record.exc_info:
            excValue = record.exc_info[1]
            try:
                exc = {
                    "type": type(excValue).__name__ if excValue is not None else "Error",
                    "message": str(excValue),
                    "stack": self.formatException(record.exc_info),
                }
                causes = _causeChain(excValue)
                if causes:
                    exc["causes"] = causes
            except Exception:
                exc = {"type": "Error", "message": "format failed", "stack": None}
            entry["exc"] = exc

        return safeJsonDumps(entry)



class DevFormatter(logging.Formatter):
    """Console lines: `LEVEL: [logger] message [session/mod/operation]`."""
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext()
        tags = [str(ctx[key]) for key in CONTEXT_KEYS if ctx and ctx.get(key)]
        ctxStr = " [" + "/".join(tags) + "]" if tags else ""
        msg = record.getMessage()
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            msg += "\n" + str(record.stack_info)
        return f"{record.levelname}: [{record.name}] {msg}{ctxStr}"
