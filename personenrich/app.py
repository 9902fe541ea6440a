import argparse
import json
import uuid
from typing import Any, Dict, Optional

from . import __version__
from .config import load_settings
from .database import init_database, get_session_factory
from .enrichment import Enricher
from .logger import get_logger
from .lookups import AgeLookup, GenderLookup, NationalityLookup
from .normalize import normalize_person
from .person import Person
from .schema import validate_person
from .storage import PersonStore, PersonNotFoundError, StoreError

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0
TEXT_FILTERS = ("name", "surname", "patronymic", "gender", "nationality")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _database_url(args: argparse.Namespace) -> str:
    return args.db or args.settings.database_url


def open_store(args: argparse.Namespace) -> PersonStore:
    url = _database_url(args)
    init_database(url)
    return PersonStore(get_session_factory(url), logger=get_logger())


def build_enricher(args: argparse.Namespace, store: PersonStore) -> Enricher:
    settings = args.settings
    logger = get_logger()
    return Enricher(
        store=store,
        age_lookup=AgeLookup(base_url=settings.agify_url, timeout=settings.lookup_timeout, logger=logger),
        gender_lookup=GenderLookup(base_url=settings.genderize_url, timeout=settings.lookup_timeout, logger=logger),
        nationality_lookup=NationalityLookup(
            base_url=settings.nationalize_url, timeout=settings.lookup_timeout, logger=logger
        ),
        logger=logger,
    )


def _parse_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise SystemExit(f"Invalid UUID format: {raw}")


def _parse_int(raw: Optional[str], default: int, minimum: int) -> int:
    """Parse a paging parameter, falling back to the default on bad input."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _person_data(args: argparse.Namespace) -> Dict[str, Any]:
    data = {
        "name": args.name,
        "surname": args.surname,
        "patronymic": args.patronymic,
        "age": args.age,
        "gender": args.gender,
        "gender_probability": args.gender_probability,
        "nationality": args.nationality,
        "nationality_probability": args.nationality_probability,
    }
    if getattr(args, "id", None) is not None:
        data["id"] = args.id
    return data


def _validated_person(data: Dict[str, Any]) -> Person:
    errors = validate_person(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    return Person.from_dict(normalize_person(data))


def cmd_init_db(args: argparse.Namespace) -> None:
    url = _database_url(args)
    init_database(url)
    print(f"Database ready: {url}")


def cmd_create(args: argparse.Namespace) -> None:
    person = _validated_person(_person_data(args))
    store = open_store(args)
    try:
        person = store.create(person)
    except StoreError as e:
        raise SystemExit(f"Failed to create person: {e}")
    _print_json(person.to_dict())


def cmd_get(args: argparse.Namespace) -> None:
    person_id = _parse_id(args.id)
    store = open_store(args)
    try:
        person = store.get_by_id(person_id)
    except PersonNotFoundError:
        raise SystemExit(f"Person not found: {person_id}")
    except StoreError as e:
        raise SystemExit(f"Failed to get person: {e}")
    _print_json(person.to_dict())


def cmd_list(args: argparse.Namespace) -> None:
    limit = _parse_int(args.limit, DEFAULT_LIMIT, minimum=1)
    offset = _parse_int(args.offset, DEFAULT_OFFSET, minimum=0)

    filters: Dict[str, Any] = {}
    for field in TEXT_FILTERS:
        value = getattr(args, field)
        if value:
            filters[field] = value
    if args.age is not None:
        try:
            filters["age"] = int(args.age)
        except ValueError:
            pass

    store = open_store(args)
    try:
        persons, total = store.list(filters, offset=offset, limit=limit)
    except StoreError as e:
        raise SystemExit(f"Failed to retrieve persons: {e}")
    _print_json({
        "data": [p.to_dict() for p in persons],
        "total": total,
        "limit": limit,
        "offset": offset,
    })


def cmd_update(args: argparse.Namespace) -> None:
    person_id = _parse_id(args.id)
    store = open_store(args)
    try:
        existing = store.get_by_id(person_id)
    except PersonNotFoundError:
        raise SystemExit(f"Person not found: {person_id}")
    except StoreError as e:
        raise SystemExit(f"Failed to check if person exists: {e}")

    person = _validated_person(_person_data(args))
    person.id = existing.id
    person.created_at = existing.created_at
    try:
        person = store.update(person)
    except PersonNotFoundError:
        raise SystemExit(f"Person not found: {person_id}")
    except StoreError as e:
        raise SystemExit(f"Failed to update person: {e}")
    _print_json(person.to_dict())


def cmd_delete(args: argparse.Namespace) -> None:
    person_id = _parse_id(args.id)
    store = open_store(args)
    try:
        store.delete(person_id)
    except PersonNotFoundError:
        raise SystemExit(f"Person not found: {person_id}")
    except StoreError as e:
        raise SystemExit(f"Failed to delete person: {e}")
    print(f"Deleted: {person_id}")


def cmd_enrich(args: argparse.Namespace) -> None:
    person_id = _parse_id(args.id)
    store = open_store(args)
    enricher = build_enricher(args, store)
    try:
        person = enricher.enrich(person_id)
    except PersonNotFoundError:
        raise SystemExit(f"Person not found: {person_id}")
    except StoreError as e:
        raise SystemExit(f"Failed to enrich person: {e}")
    _print_json(person.to_dict())


def cmd_enrich_missing(args: argparse.Namespace) -> None:
    store = open_store(args)
    enricher = build_enricher(args, store)

    pending = []
    offset = 0
    page_size = 100
    while True:
        try:
            page, total = store.list(offset=offset, limit=page_size)
        except StoreError as e:
            raise SystemExit(f"Failed to retrieve persons: {e}")
        pending.extend(p.id for p in page if p.missing_demographics())
        offset += page_size
        if offset >= total or not page:
            break
    if args.limit is not None:
        pending = pending[:args.limit]

    if not pending:
        print("No persons with missing demographics.")
        return
    print(f"Found {len(pending)} persons with missing demographics. Enriching...")
    complete = partial = errors = 0
    for person_id in pending:
        try:
            person = enricher.enrich(person_id)
        except (PersonNotFoundError, StoreError) as e:
            print(f"[error] {person_id} -> {e}")
            errors += 1
            continue
        missing = person.missing_demographics()
        if missing:
            partial += 1
            print(f"[partial] {person_id} missing={','.join(missing)}")
        else:
            complete += 1
            print(f"[complete] {person_id}")
    get_logger().log_metrics_summary()
    print(f"Done. complete={complete} partial={partial} errors={errors}")


def _add_db_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--db", help="SQLAlchemy database URL (default: PERSONENRICH_DATABASE_URL or sqlite:///data/people.db)")


def _add_person_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", required=True, help="First name")
    p.add_argument("--surname", required=True, help="Surname")
    p.add_argument("--patronymic", help="Patronymic")
    p.add_argument("--age", type=int, help="Age in years")
    p.add_argument("--gender", help="Gender (requires --gender-probability)")
    p.add_argument("--gender-probability", type=float, help="Gender probability in [0, 1]")
    p.add_argument("--nationality", help="Two-letter country code (requires --nationality-probability)")
    p.add_argument("--nationality-probability", type=float, help="Nationality probability in [0, 1]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="personenrich", description="Person records enriched with age, gender and nationality")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the persons table")
    _add_db_arg(ini)
    ini.set_defaults(func=cmd_init_db)

    cre = subparsers.add_parser("create", help="Create a person")
    _add_person_args(cre)
    cre.add_argument("--id", help="Explicit UUID (generated when omitted)")
    _add_db_arg(cre)
    cre.set_defaults(func=cmd_create)

    get = subparsers.add_parser("get", help="Show a person by id")
    get.add_argument("--id", required=True, help="Person UUID")
    _add_db_arg(get)
    get.set_defaults(func=cmd_get)

    lst = subparsers.add_parser("list", help="List persons with filters and pagination")
    for field in TEXT_FILTERS:
        lst.add_argument(f"--{field}", help=f"Case-insensitive substring match on {field}")
    lst.add_argument("--age", help="Exact age")
    lst.add_argument("--limit", help=f"Page size (default {DEFAULT_LIMIT})")
    lst.add_argument("--offset", help=f"Records to skip (default {DEFAULT_OFFSET})")
    _add_db_arg(lst)
    lst.set_defaults(func=cmd_list)

    upd = subparsers.add_parser("update", help="Replace the fields of a person")
    upd.add_argument("--id", required=True, help="Person UUID")
    _add_person_args(upd)
    _add_db_arg(upd)
    upd.set_defaults(func=cmd_update)

    dlt = subparsers.add_parser("delete", help="Delete a person")
    dlt.add_argument("--id", required=True, help="Person UUID")
    _add_db_arg(dlt)
    dlt.set_defaults(func=cmd_delete)

    enr = subparsers.add_parser("enrich", help="Fill missing age, gender and nationality from the lookup services")
    enr.add_argument("--id", required=True, help="Person UUID")
    _add_db_arg(enr)
    enr.set_defaults(func=cmd_enrich)

    enm = subparsers.add_parser("enrich-missing", help="Enrich every person with missing demographics")
    enm.add_argument("--limit", type=int, help="Optional limit on number of persons to enrich")
    _add_db_arg(enm)
    enm.set_defaults(func=cmd_enrich_missing)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.settings = load_settings()
    get_logger(level=args.settings.log_level, log_dir=args.settings.log_dir)
    args.func(args)


if __name__ == "__main__":
    main()
