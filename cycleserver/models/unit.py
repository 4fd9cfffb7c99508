"""
Unit
---------------------------

A unit is a single docking slot inside of a booth.
It holds at most one cycle, identified by its RFID tag.
An occupied unit always has a cycle and a free one never does.
"""
from typing import Dict, Any, Optional

from tortoise import Model, fields

from cycleserver.models.util import UnitStatus


class Unit(Model):
    id = fields.IntField(pk=True)
    unit_id: str = fields.CharField(max_length=64, unique=True)
    booth = fields.ForeignKeyField("models.Booth", related_name="units", on_delete=fields.RESTRICT)
    status = fields.CharEnumField(UnitStatus, default=UnitStatus.FREE, index=True)
    cycle_rfid: Optional[str] = fields.CharField(max_length=128, null=True, unique=True)
    """Unique among the non-null values, so a cycle can only be docked in one unit."""

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    @property
    def is_occupied(self) -> bool:
        return self.status is UnitStatus.OCCUPIED

    def serialize(self) -> Dict[str, Any]:
        """
        Serializes the unit along with a summary of its booth.

        The booth must have been fetched.
        """
        return {
            "id": self.id,
            "unit_id": self.unit_id,
            "status": self.status,
            "cycle_rfid": self.cycle_rfid,
            "booth": self.booth.summary(),
        }

    def __str__(self):
        return f"[{self.status.value}] {self.unit_id}"
