"""
Vibration reading model - one document per (unit, equipment, date).
"""

from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import UniqueConstraint
from typing import Dict, Optional
import datetime as dt

from vibrate_monitor.utils.time import utc_now


def reading_id(unit: str, equipment: str, reading_date: dt.date) -> str:
    """Natural-key document id; saving the same key replaces the row."""
    return f"data_{unit}_{equipment}_{reading_date.isoformat()}"


class VibrationReadingBase(SQLModel):
    """Base reading schema."""
    unit: str = Field(..., index=True)
    equipment: str = Field(..., index=True)
    date: dt.date = Field(..., index=True)
    parameters: Dict[str, float] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    notes: str = Field(default="")


class VibrationReading(VibrationReadingBase, table=True):
    """Reading database table."""
    __tablename__ = "readings"
    __table_args__ = (UniqueConstraint("unit", "equipment", "date", name="uq_reading_natural_key"),)

    id: str = Field(primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    user_name: Optional[str] = None
    timestamp: dt.datetime = Field(default_factory=utc_now, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "unit": self.unit,
            "equipment": self.equipment,
            "date": self.date.isoformat(),
            "parameters": dict(self.parameters or {}),
            "notes": self.notes,
            "userId": self.user_id,
            "userName": self.user_name,
            "timestamp": self.timestamp.isoformat(),
        }
