"""
Tests for the Person record.
"""

import uuid
from datetime import datetime, timezone

from personenrich.person import Person


class TestPerson:

    def test_missing_demographics_order(self):
        person = Person(name="Maria", surname="Rossi")
        assert person.missing_demographics() == ["age", "gender", "nationality"]

    def test_missing_demographics_partial(self):
        person = Person(name="Maria", surname="Rossi", gender="female", gender_probability=0.98)
        assert person.missing_demographics() == ["age", "nationality"]

    def test_zero_age_counts_as_present(self):
        person = Person(name="Baby", surname="Rossi", age=0)
        assert "age" not in person.missing_demographics()

    def test_to_dict(self):
        person_id = uuid.UUID("6f1c1b1e-8d52-4b55-9a8e-2f3e7d0c9b10")
        ts = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        person = Person(id=person_id, name="Maria", surname="Rossi", age=28, created_at=ts, updated_at=ts)

        data = person.to_dict()

        assert data["id"] == "6f1c1b1e-8d52-4b55-9a8e-2f3e7d0c9b10"
        assert data["age"] == 28
        assert data["gender"] is None
        assert data["created_at"] == "2024-05-01T12:00:00+00:00"

    def test_from_dict_parses_id_and_timestamps(self):
        data = {
            "id": "6f1c1b1e-8d52-4b55-9a8e-2f3e7d0c9b10",
            "name": "Maria",
            "surname": "Rossi",
            "nationality": "IT",
            "nationality_probability": 0.7,
            "created_at": "2024-05-01T12:00:00+00:00",
        }

        person = Person.from_dict(data)

        assert person.id == uuid.UUID(data["id"])
        assert person.nationality == "IT"
        assert person.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert person.updated_at is None

    def test_from_dict_without_id(self):
        person = Person.from_dict({"name": "Maria", "surname": "Rossi"})
        assert person.id is None
