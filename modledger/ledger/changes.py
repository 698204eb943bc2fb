# modledger/ledger/changes.py
from __future__ import annotations
from dataclasses import dataclass, field

from modledger.core.jsonutils import encodeBytes, decodeBytes
from .models import ChangeRecordModel, ConfigEditModel, ShaderEditModel
from .resources import ConfigEntry, DataFile, ResourceId, ShaderEntry

__all__ = ["ChangeRecord"]



@dataclass
class ChangeRecord:
    """
    Everything one install/upgrade run touched.

    Membership is by resource identity. Config and shader edits also keep the
    payload written, since that is the only place a shadowed (non-live) value lives.
    """
    dataFiles: set[DataFile] = field(default_factory=set)
    configEdits: dict[ConfigEntry, str] = field(default_factory=dict)
    shaderEdits: dict[ShaderEntry, bytes] = field(default_factory=dict)

    # ----- Recording -----

    def addFile(self, resource: DataFile) -> None:
        self.dataFiles.add(resource)

    def addConfigEdit(self, resource: ConfigEntry, value: str) -> None:
        self.configEdits[resource] = value

    def addShaderEdit(self, resource: ShaderEntry, data: bytes) -> None:
        self.shaderEdits[resource] = bytes(data)

    # ----- Queries -----

    def contains(self, resource: ResourceId) -> bool:
        if isinstance(resource, DataFile):
            return resource in self.dataFiles
        if isinstance(resource, ConfigEntry):
            return resource in self.configEdits
        return resource in self.shaderEdits

    def resources(self) -> list[ResourceId]:
        return [*self.dataFiles, *self.configEdits, *self.shaderEdits]

    def isEmpty(self) -> bool:
        return not (self.dataFiles or self.configEdits or self.shaderEdits)

    def difference(self, other: ChangeRecord) -> ChangeRecord:
        """Resources in self that `other` does not touch (by identity, not by value)."""
        return ChangeRecord(
            dataFiles={res for res in self.dataFiles if res not in other.dataFiles},
            configEdits={res: val for res, val in self.configEdits.items() if res not in other.configEdits},
            shaderEdits={res: val for res, val in self.shaderEdits.items() if res not in other.shaderEdits},
        )

    # ----- Persistence -----

    def toModel(self) -> ChangeRecordModel:
        return ChangeRecordModel(
            dataFiles=sorted((res.path for res in self.dataFiles), key=str.lower),
            configEdits=[
                ConfigEditModel(file=res.file, section=res.section, key=res.key, value=value)
                for res, value in sorted(self.configEdits.items(), key=lambda item: item[0].token)
            ],
            shaderEdits=[
                ShaderEditModel(packageId=res.packageId, shaderName=res.shaderName, data=encodeBytes(data))
                for res, data in sorted(self.shaderEdits.items(), key=lambda item: item[0].token)
            ],
        )

    @classmethod
    def fromModel(cls, model: ChangeRecordModel) -> ChangeRecord:
        record = cls()
        for path in model.dataFiles:
            record.addFile(DataFile.of(path))
        for edit in model.configEdits:
            record.addConfigEdit(ConfigEntry.of(edit.file, edit.section, edit.key), edit.value)
        for edit in model.shaderEdits:
            record.addShaderEdit(ShaderEntry.of(edit.packageId, edit.shaderName), decodeBytes(edit.data))
        return record
