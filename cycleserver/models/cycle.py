"""
Cycle
---------------------------
"""
from typing import Dict, Any

from tortoise import Model, fields

from cycleserver.models.util import CycleStatus


class Cycle(Model):
    """
    A rentable cycle, identified by its RFID tag.

    A cycle that is PARKED may or may not be docked in a unit (a
    freshly registered cycle is parked but not docked anywhere).
    """
    id = fields.IntField(pk=True)
    rfid: str = fields.CharField(max_length=128, unique=True)
    status = fields.CharEnumField(CycleStatus, default=CycleStatus.PARKED, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rfid": self.rfid,
            "status": self.status,
        }

    def __str__(self):
        return f"[{self.status.value}] {self.rfid}"
