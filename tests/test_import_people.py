"""
Tests for scripts/import_people.py.
"""

import importlib.util
import json
import uuid
from pathlib import Path

import pytest

from personenrich.database import get_session_factory
from personenrich.storage import PersonStore

SCRIPT = Path(__file__).parent.parent / "scripts" / "import_people.py"


@pytest.fixture(scope="module")
def importer():
    spec = importlib.util.spec_from_file_location("import_people", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def people_file(tmp_path):
    existing_id = str(uuid.uuid4())
    path = tmp_path / "people.json"
    path.write_text(json.dumps([
        {"name": "Maria", "surname": "Rossi", "nationality": "it", "nationality_probability": 0.7},
        {"id": existing_id, "name": "Ivan", "surname": "Petrov"},
        {"id": existing_id, "name": "Ivan", "surname": "Petrov"},
        {"name": "", "surname": "Nobody"},
        "not an object",
    ]))
    return path


class TestImportPeople:

    def test_import(self, importer, people_file, database_url, quiet_logger):
        counts = importer.import_people(people_file, database_url)

        assert counts == {"imported": 2, "skipped": 1, "invalid": 2, "errors": 0}
        store = PersonStore(get_session_factory(database_url), logger=quiet_logger)
        persons, total = store.list({"name": "maria"})
        assert total == 1
        assert persons[0].nationality == "IT"

    def test_dry_run_writes_nothing(self, importer, people_file, tmp_path):
        db_path = tmp_path / "dry" / "people.db"

        counts = importer.import_people(people_file, f"sqlite:///{db_path}", dry_run=True)

        assert counts["imported"] == 0
        assert counts["invalid"] == 2
        assert not db_path.exists()

    def test_wrapped_list(self, importer, tmp_path, database_url):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"persons": [{"name": "Anna", "surname": "Ivanova"}]}))

        counts = importer.import_people(path, database_url)

        assert counts["imported"] == 1

    def test_rejects_non_list(self, importer, tmp_path, database_url):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps("people"))

        with pytest.raises(ValueError):
            importer.import_people(path, database_url)
