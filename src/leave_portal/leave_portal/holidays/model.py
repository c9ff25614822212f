from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import date_from_json, datetime_from_json, datetime_to_json, format_iso_date
from ..core.enums import HolidayType


@dataclass(frozen=True)
class Holiday:
    id: str
    name: str
    date: date
    type: HolidayType
    description: Optional[str] = None
    is_optional: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": format_iso_date(self.date),
            "type": self.type.value,
            "description": self.description,
            "is_optional": self.is_optional,
            "created_by": self.created_by,
            "created_at": datetime_to_json(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Holiday":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            date=date_from_json(data["date"]),
            type=HolidayType(data.get("type") or HolidayType.NATIONAL.value),
            description=data.get("description"),
            is_optional=bool(data.get("is_optional")),
            created_by=data.get("created_by"),
            created_at=datetime_from_json(data.get("created_at")),
        )
