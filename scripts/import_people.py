#!/usr/bin/env python3
"""
Import persons from a JSON file into the database.

The file holds a list of person objects (name, surname and optionally
patronymic, id and demographic fields).

Usage:
    python scripts/import_people.py --json data/people.json --db sqlite:///data/people.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from personenrich.database import init_database, get_session_factory
from personenrich.logger import get_logger
from personenrich.normalize import normalize_person
from personenrich.person import Person
from personenrich.schema import validate_person
from personenrich.storage import PersonStore, PersonAlreadyExistsError, StoreError


def load_people(json_path: Path) -> list:
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("persons", [])
    if not isinstance(data, list):
        raise ValueError(f"{json_path} must contain a list of persons")
    return data


def import_people(json_path: Path, database_url: str, dry_run: bool = False) -> dict:
    """
    Import persons from JSON into the database.

    Args:
        json_path: Path to JSON file
        database_url: SQLAlchemy database URL
        dry_run: If True, don't write to database

    Returns:
        Counters: imported, skipped, invalid, errors
    """
    print(f"Loading persons from {json_path}...")
    people = load_people(json_path)
    print(f"Found {len(people)} persons in JSON file")

    counts = {"imported": 0, "skipped": 0, "invalid": 0, "errors": 0}

    valid = []
    for i, entry in enumerate(people, 1):
        if not isinstance(entry, dict):
            print(f"⚠️  Skipping entry {i}: not an object")
            counts["invalid"] += 1
            continue
        errors = validate_person(entry)
        if errors:
            print(f"⚠️  Skipping entry {i}: {'; '.join(errors)}")
            counts["invalid"] += 1
            continue
        valid.append(Person.from_dict(normalize_person(entry)))

    if dry_run:
        print("\n[DRY RUN] Would import the following persons:")
        for i, person in enumerate(valid[:5], 1):
            print(f"  {i}. {person.name} {person.surname}")
        if len(valid) > 5:
            print(f"  ... and {len(valid) - 5} more")
        return counts

    print(f"\nInitializing database at {database_url}...")
    init_database(database_url)
    store = PersonStore(get_session_factory(database_url), logger=get_logger())

    for person in valid:
        if person.id is not None and store.exists(person.id):
            print(f"⚠️  Person {person.id} already exists, skipping")
            counts["skipped"] += 1
            continue
        try:
            store.create(person)
            counts["imported"] += 1
        except PersonAlreadyExistsError:
            counts["skipped"] += 1
        except StoreError as e:
            print(f"❌ Error importing {person.name} {person.surname}: {e}")
            counts["errors"] += 1

    print(
        f"\nDone. imported={counts['imported']} skipped={counts['skipped']} "
        f"invalid={counts['invalid']} errors={counts['errors']}"
    )
    return counts


def main():
    parser = argparse.ArgumentParser(description="Import persons from JSON into the database")
    parser.add_argument("--json", required=True, help="Path to JSON file with a list of persons")
    parser.add_argument("--db", default="sqlite:///data/people.db", help="SQLAlchemy database URL")
    parser.add_argument("--dry-run", action="store_true", help="Validate only, don't write")
    args = parser.parse_args()

    json_path = Path(args.json)
    if not json_path.exists():
        raise SystemExit(f"Input file not found: {json_path}")

    counts = import_people(json_path, args.db, dry_run=args.dry_run)
    if counts["errors"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
