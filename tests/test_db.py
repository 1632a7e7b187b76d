import os
import sqlite3
import sys
import threading

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database, ExerciseRepository, UserRepository
from errors import DuplicateError, OwnerMissingError, StorageError
from migrate import migrate
from validators import LogFilters


@pytest.fixture
def database(tmp_path):
    db_file = str(tmp_path / "tracker.db")
    migrate(db_file)
    database = Database(db_file, pool_size=2)
    yield database
    database.close()


@pytest.fixture
def users(database):
    return UserRepository(database)


@pytest.fixture
def exercises(database):
    return ExerciseRepository(database)


def test_migrate_is_idempotent(tmp_path):
    db_file = str(tmp_path / "schema.db")
    migrate(db_file)
    migrate(db_file)
    conn = sqlite3.connect(db_file)
    tables = {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    conn.close()
    assert {"user", "exercise"} <= tables


def test_create_and_find_user(users):
    assert users.create("alice") == {"id": 1, "username": "alice"}
    assert users.find_by_id(1) == {"id": 1, "username": "alice"}
    assert users.find_by_id(99) is None
    assert users.find_by_id(2**64) is None
    assert users.fetch_users() == [{"id": 1, "username": "alice"}]


def test_duplicate_username_does_not_insert(users):
    users.create("alice")
    with pytest.raises(DuplicateError) as exc:
        users.create("alice")
    assert "alice" in exc.value.message
    assert users.count() == 1


def test_create_exercise_echoes_fields(users, exercises):
    owner = users.create("alice")
    record = exercises.create(owner, "Run", 30, "2023-05-01")
    assert record == {
        "id": 1,
        "username": "alice",
        "description": "Run",
        "duration": 30,
        "date": "2023-05-01",
    }


def test_create_exercise_for_missing_owner(exercises):
    with pytest.raises(OwnerMissingError):
        exercises.create({"id": 42, "username": "ghost"}, "Run", 30, "2023-05-01")
    assert exercises.count() == 0


def test_fetch_and_count_with_filters(users, exercises):
    owner = users.create("alice")
    other = users.create("bob")
    for day in ["2023-01-01", "2023-01-02", "2023-01-03", "2023-01-04", "2023-01-05"]:
        exercises.create(owner, "Run", 10, day)
    exercises.create(other, "Swim", 20, "2023-01-03")

    logs = exercises.fetch_for_owner(owner["id"], LogFilters(limit=2))
    assert logs == [
        {"description": "Run", "duration": 10, "date": "2023-01-01"},
        {"description": "Run", "duration": 10, "date": "2023-01-02"},
    ]
    assert exercises.count_for_owner(owner["id"], LogFilters(limit=2)) == 5

    ranged = LogFilters("2023-01-02", "2023-01-04")
    assert [e["date"] for e in exercises.fetch_for_owner(owner["id"], ranged)] == [
        "2023-01-03",
        "2023-01-04",
    ]
    assert exercises.count_for_owner(owner["id"], ranged) == 2
    assert exercises.count_for_owner(other["id"]) == 1


def test_storage_error_releases_connection(database, users):
    with pytest.raises(StorageError):
        users.fetch_all("SELECT * FROM missing_table;")
    assert database.pool.checkedout() == 0
    assert database.pool.checkedin() == 1
    users.create("alice")
    assert database.pool.checkedout() == 0
    assert database.pool.checkedin() == 1


def test_missing_schema_is_storage_error(tmp_path):
    database = Database(str(tmp_path / "empty.db"))
    try:
        with pytest.raises(StorageError):
            UserRepository(database).create("alice")
    finally:
        database.close()


def test_pooled_connections_enforce_foreign_keys(database):
    with database._connection() as conn:
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys;")
        assert cursor.fetchone() == (1,)


def test_pool_times_out_when_exhausted(tmp_path):
    database = Database(str(tmp_path / "pool.db"), pool_size=2, pool_timeout=0.1)
    with database._connection():
        with database._connection():
            assert database.pool.checkedout() == 2
            with pytest.raises(StorageError):
                with database._connection():
                    pass
    assert database.pool.checkedout() == 0
    assert database.pool.checkedin() == 2
    database.close()
    with pytest.raises(StorageError):
        with database._connection():
            pass


def test_pool_shared_between_threads(database, users):
    errors = []

    def register(name):
        try:
            users.create(name)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)

    threads = [threading.Thread(target=register, args=(f"user{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert users.count() == 8
    assert database.pool.checkedout() == 0
    assert database.pool.checkedin() <= 2
