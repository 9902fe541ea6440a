"""Person record and its JSON representation."""

import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DEMOGRAPHIC_FIELDS = ("age", "gender", "nationality")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Person:
    name: str
    surname: str
    id: Optional[uuid.UUID] = None
    patronymic: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    gender_probability: Optional[float] = None
    nationality: Optional[str] = None
    nationality_probability: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def missing_demographics(self) -> List[str]:
        """Names of the demographic fields that are still absent."""
        return [f for f in DEMOGRAPHIC_FIELDS if getattr(self, f) is None]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = str(self.id) if self.id is not None else None
        for key in ("created_at", "updated_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        """Build a Person from a validated dict (see schema.validate_person)."""
        raw_id = data.get("id")
        person_id = None
        if raw_id:
            person_id = raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))

        def _ts(key: str) -> Optional[datetime]:
            value = data.get(key)
            if value is None or isinstance(value, datetime):
                return value
            return datetime.fromisoformat(value)

        return cls(
            id=person_id,
            name=data["name"],
            surname=data["surname"],
            patronymic=data.get("patronymic"),
            age=data.get("age"),
            gender=data.get("gender"),
            gender_probability=data.get("gender_probability"),
            nationality=data.get("nationality"),
            nationality_probability=data.get("nationality_probability"),
            created_at=_ts("created_at"),
            updated_at=_ts("updated_at"),
        )

