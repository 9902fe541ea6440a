"""
Enrichment of person records with demographic data.

Fills the absent age, gender and nationality of a stored person by asking
the name-based lookup services, then persists the record once. A failing
lookup only leaves its own field absent; store failures abort the call.
"""

import uuid
from typing import Optional, Protocol

from .logger import StructuredLogger, get_logger
from .lookups.common import LookupFailure, LookupResult
from .person import Person
from .storage import PersonNotFoundError, StoreError


class PersonRepository(Protocol):
    def get_by_id(self, person_id: uuid.UUID) -> Person: ...

    def update(self, person: Person) -> Person: ...


class NameLookupCapability(Protocol):
    def lookup_by_name(self, name: str) -> LookupResult: ...


class Enricher:
    """Fills absent demographic fields of stored persons."""

    def __init__(
        self,
        store: PersonRepository,
        age_lookup: NameLookupCapability,
        gender_lookup: NameLookupCapability,
        nationality_lookup: NameLookupCapability,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.age_lookup = age_lookup
        self.gender_lookup = gender_lookup
        self.nationality_lookup = nationality_lookup
        self.logger = logger or get_logger()

    def enrich(self, person_id: uuid.UUID) -> Person:
        """
        Enrich one person and persist the result.

        Fields that are already present are never looked up or overwritten.
        The record is saved even when every lookup failed or was skipped.

        Raises:
            PersonNotFoundError: If the person does not exist
            StoreError: If loading or saving the person fails
        """
        self.logger.debug("Enriching person", id=person_id)

        try:
            person = self.store.get_by_id(person_id)
        except PersonNotFoundError:
            raise
        except StoreError as e:
            raise StoreError(f"failed to load person {person_id}: {e}") from e

        if person.age is None:
            result = self._lookup("age", self.age_lookup, person)
            if result is not None:
                person.age = result.value

        if person.gender is None:
            result = self._lookup("gender", self.gender_lookup, person)
            if result is not None:
                person.gender = result.value
                person.gender_probability = result.probability

        if person.nationality is None:
            result = self._lookup("nationality", self.nationality_lookup, person)
            if result is not None:
                person.nationality = result.value
                person.nationality_probability = result.probability

        try:
            person = self.store.update(person)
        except PersonNotFoundError:
            raise
        except StoreError as e:
            raise StoreError(f"failed to save enriched person {person_id}: {e}") from e

        self.logger.info(
            "Person enriched",
            id=person.id,
            missing=person.missing_demographics(),
        )
        return person

    def _lookup(self, field: str, capability: NameLookupCapability, person: Person) -> Optional[LookupResult]:
        """Run one lookup; None means the field stays absent."""
        try:
            result = capability.lookup_by_name(person.name)
        except LookupFailure as e:
            self.logger.warning(
                f"Failed to enrich with {field} data",
                id=person.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if not result.determined:
            self.logger.info(f"No {field} determination for name", id=person.id, name=person.name)
            return None
        return result
