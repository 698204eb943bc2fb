# modledger/writers/shaders.py
from __future__ import annotations
from typing import Protocol

from modledger.core.errors import ShaderEditFailure
from modledger.core.jsonutils import encodeBytes
from modledger.ledger.resources import ShaderEntry
from .base import ResourceWriter

__all__ = ["ShaderCodec", "ShaderWriter", "applyShaderOrFail"]



class ShaderCodec(Protocol):
    """
    Edits compiled shaders inside the game's shader packages.
    Returns (applied, bytes that were there before the edit).
    """
    def applyShaderEdit(self, packageId: int, shaderName: str, data: bytes) -> tuple[bool, bytes | None]: ...



def applyShaderOrFail(codec: ShaderCodec | None, resource: ShaderEntry, data: bytes) -> bytes | None:
    if codec is None:
        raise ShaderEditFailure(resource.packageId, resource.shaderName, "no shader codec is configured")
    applied, oldData = codec.applyShaderEdit(resource.packageId, resource.shaderName, data)
    if not applied:
        raise ShaderEditFailure(resource.packageId, resource.shaderName)
    return oldData



class ShaderWriter(ResourceWriter[ShaderEntry, bytes]):

    def hasLiveValue(self, resource: ShaderEntry, owners: list[str]) -> bool:
        return bool(owners)

    def applyLive(self, resource: ShaderEntry, payload: bytes) -> tuple[None, bytes | None]:
        return None, applyShaderOrFail(self.context.shaderCodec, resource, payload)

    def archive(self, resource: ShaderEntry, payload: bytes, ownerAbove: str) -> None:
        return None

    def preserveShadowed(self, resource: ShaderEntry, previous: bytes | None, owners: list[str]) -> None:
        if not owners:
            self.context.ledger.recordOriginalValue(
                resource, encodeBytes(previous) if previous is not None else None,
            )

    def recordChange(self, resource: ShaderEntry, payload: bytes) -> None:
        self.context.changes.addShaderEdit(resource, payload)
