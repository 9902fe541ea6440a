"""
Person repository.

Responsibilities:
- CRUD operations for the persons table.
- Filtered, paginated listing.
- Transaction-safe writes.

Non-Responsibilities:
- No enrichment decisions.
- No input validation (see schema.py).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import PersonRow
from .logger import StructuredLogger, get_logger
from .person import Person, utcnow

TEXT_FILTER_FIELDS = ("name", "surname", "patronymic", "gender", "nationality")
EXACT_FILTER_FIELDS = ("age",)

_MUTABLE_COLUMNS = (
    "name",
    "surname",
    "patronymic",
    "age",
    "gender",
    "gender_probability",
    "nationality",
    "nationality_probability",
)


class StoreError(Exception):
    """Raised when the record store fails for a reason other than a missing record."""
    pass


class PersonNotFoundError(Exception):
    """Raised when no person exists with the requested id."""

    def __init__(self, person_id):
        self.person_id = person_id
        super().__init__(f"person not found: id {person_id}")


class PersonAlreadyExistsError(StoreError):
    """Raised when creating a person whose id is already taken."""

    def __init__(self, person_id):
        self.person_id = person_id
        super().__init__(f"person already exists: id {person_id}")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back out
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def row_to_person(row: PersonRow) -> Person:
    return Person(
        id=uuid.UUID(row.id),
        name=row.name,
        surname=row.surname,
        patronymic=row.patronymic,
        age=row.age,
        gender=row.gender,
        gender_probability=row.gender_probability,
        nationality=row.nationality,
        nationality_probability=row.nationality_probability,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class PersonStore:
    """SQLAlchemy-backed store for Person records."""

    def __init__(
        self,
        session_factory: sessionmaker,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.logger = logger or get_logger()
        self.clock = clock

    def create(self, person: Person) -> Person:
        """
        Insert a new person.

        Assigns an id when the person has none and stamps both timestamps.

        Raises:
            PersonAlreadyExistsError: If the id is already taken
            StoreError: On any other database failure
        """
        if person.id is None:
            person.id = uuid.uuid4()
        now = self.clock()
        person.created_at = now
        person.updated_at = now

        self.logger.debug("Creating person", id=person.id, name=person.name, surname=person.surname)
        row = PersonRow(
            id=str(person.id),
            created_at=now,
            updated_at=now,
            **{col: getattr(person, col) for col in _MUTABLE_COLUMNS},
        )
        session = self.session_factory()
        try:
            session.add(row)
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if session.get(PersonRow, str(person.id)) is not None:
                self.logger.error("Person with this id already exists", id=person.id)
                raise PersonAlreadyExistsError(person.id) from e
            self.logger.error("Failed to create person", error=str(e))
            raise StoreError(f"failed to create person: {e}") from e
        except SQLAlchemyError as e:
            session.rollback()
            self.logger.error("Failed to create person", error=str(e))
            raise StoreError(f"failed to create person: {e}") from e
        finally:
            session.close()
        return person

    def get_by_id(self, person_id: uuid.UUID) -> Person:
        """
        Load a person by id.

        Raises:
            PersonNotFoundError: If no such person exists
            StoreError: On database failure
        """
        self.logger.debug("Getting person by id", id=person_id)
        session = self.session_factory()
        try:
            row = session.get(PersonRow, str(person_id))
        except SQLAlchemyError as e:
            self.logger.error("Failed to get person by id", id=person_id, error=str(e))
            raise StoreError(f"failed to get person: {e}") from e
        finally:
            session.close()

        if row is None:
            self.logger.debug("Person not found", id=person_id)
            raise PersonNotFoundError(person_id)
        return row_to_person(row)

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Person], int]:
        """
        List persons matching the filters, newest first.

        Text fields match case-insensitive substrings; age matches exactly.
        Unknown filter fields are ignored.

        Returns:
            Tuple of (page of persons, total number of matches)
        """
        filters = filters or {}
        self.logger.debug("Listing persons", filters=filters, offset=offset, limit=limit)

        conditions = []
        for field, value in filters.items():
            if field in TEXT_FILTER_FIELDS:
                conditions.append(getattr(PersonRow, field).ilike(f"%{value}%"))
            elif field in EXACT_FILTER_FIELDS:
                conditions.append(getattr(PersonRow, field) == value)
            else:
                self.logger.warning("Ignoring unknown filter field", field=field)

        session = self.session_factory()
        try:
            total = session.query(func.count(PersonRow.id)).filter(*conditions).scalar()
            if not total:
                return [], 0
            rows = (
                session.query(PersonRow)
                .filter(*conditions)
                .order_by(PersonRow.created_at.desc(), PersonRow.id)
                .offset(offset)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error("Failed to list persons", error=str(e))
            raise StoreError(f"failed to list persons: {e}") from e
        finally:
            session.close()

        return [row_to_person(r) for r in rows], total

    def update(self, person: Person) -> Person:
        """
        Overwrite the mutable fields of an existing person and refresh updated_at.

        Raises:
            PersonNotFoundError: If no such person exists
            StoreError: On database failure
        """
        self.logger.debug("Updating person", id=person.id)
        session = self.session_factory()
        try:
            row = session.get(PersonRow, str(person.id))
            if row is None:
                self.logger.error("Person not found for update", id=person.id)
                raise PersonNotFoundError(person.id)
            now = self.clock()
            created_at = row.created_at
            for col in _MUTABLE_COLUMNS:
                setattr(row, col, getattr(person, col))
            row.updated_at = now
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            self.logger.error("Failed to update person", id=person.id, error=str(e))
            raise StoreError(f"failed to update person: {e}") from e
        finally:
            session.close()

        person.updated_at = now
        if person.created_at is None:
            person.created_at = _as_utc(created_at)
        return person

    def delete(self, person_id: uuid.UUID) -> None:
        """
        Delete a person by id.

        Raises:
            PersonNotFoundError: If no such person exists
            StoreError: On database failure
        """
        self.logger.debug("Deleting person", id=person_id)
        session = self.session_factory()
        try:
            deleted = session.query(PersonRow).filter(PersonRow.id == str(person_id)).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            self.logger.error("Failed to delete person", id=person_id, error=str(e))
            raise StoreError(f"failed to delete person: {e}") from e
        finally:
            session.close()

        if deleted == 0:
            self.logger.debug("Person not found for deletion", id=person_id)
            raise PersonNotFoundError(person_id)

    def exists(self, person_id: uuid.UUID) -> bool:
        """Check whether a person with this id exists."""
        session = self.session_factory()
        try:
            return session.get(PersonRow, str(person_id)) is not None
        except SQLAlchemyError as e:
            self.logger.error("Failed to check if person exists", id=person_id, error=str(e))
            raise StoreError(f"failed to check if person exists: {e}") from e
        finally:
            session.close()
