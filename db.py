import logging
import sqlite3
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool

from errors import DuplicateError, OwnerMissingError, StorageError
from query_builder import ExerciseQueryBuilder
from validators import SQLITE_MAX_INTEGER, LogFilters

logger = logging.getLogger(__name__)

Params = Union[Tuple, Dict[str, object]]


def _open(db_path: str) -> sqlite3.Connection:
    # pooled connections are handed to FastAPI's worker threads
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys=on;")
    return conn


class Database:
    """Provides pooled SQLite connections to repositories.

    The schema is provisioned by ``migrate.py``; this class never creates or
    alters tables.
    """

    def __init__(self, db_path: str = "exercise_tracker.db", pool_size: int = 5, pool_timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._closed = False
        self.pool = QueuePool(
            lambda: _open(db_path),
            pool_size=pool_size,
            max_overflow=0,
            timeout=pool_timeout,
        )
        event.listen(self.pool, "checkout", self._on_checkout)
        event.listen(self.pool, "checkin", self._on_checkin)

    @staticmethod
    def _on_checkout(dbapi_conn, connection_record, connection_proxy) -> None:
        logger.debug("Connection checked out from pool")

    @staticmethod
    def _on_checkin(dbapi_conn, connection_record) -> None:
        logger.debug("Connection returned to pool")

    @property
    def path(self) -> str:
        return self._db_path

    @contextmanager
    def _connection(self):
        if self._closed:
            raise StorageError("database is closed")
        try:
            connection = self.pool.connect()
        except PoolTimeoutError as e:
            raise StorageError("timed out waiting for a database connection") from e
        except (sqlite3.Error, SQLAlchemyError) as e:
            raise StorageError(str(e)) from e
        try:
            yield connection
            connection.commit()
        except BaseException:
            connection.rollback()
            raise
        finally:
            connection.close()

    def close(self) -> None:
        self._closed = True
        self.pool.dispose()


class BaseRepository:
    """Base repository providing helper methods."""

    def __init__(self, database: Database) -> None:
        self.db = database

    def execute(self, query: str, params: Params = ()) -> int:
        try:
            with self.db._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.lastrowid
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.error("statement failed: %s", e)
            raise StorageError(str(e)) from e

    def fetch_all(self, query: str, params: Params = ()) -> List[Tuple]:
        try:
            with self.db._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error("query failed: %s", e)
            raise StorageError(str(e)) from e

    def fetch_one(self, query: str, params: Params = ()) -> Optional[Tuple]:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None


class UserRepository(BaseRepository):
    """Repository for user table operations."""

    def create(self, username: str) -> dict:
        try:
            uid = self.execute("INSERT INTO user (username) VALUES (?);", (username,))
        except sqlite3.IntegrityError as e:
            raise DuplicateError(
                f"User with the username {username} already exists!"
            ) from e
        return {"id": uid, "username": username}

    def find_by_id(self, user_id: int) -> Optional[dict]:
        if user_id > SQLITE_MAX_INTEGER:
            return None
        row = self.fetch_one("SELECT id, username FROM user WHERE id = ?;", (user_id,))
        if row is None:
            return None
        return {"id": row[0], "username": row[1]}

    def fetch_users(self) -> List[dict]:
        rows = self.fetch_all("SELECT id, username FROM user ORDER BY id;")
        return [{"id": uid, "username": name} for uid, name in rows]

    def count(self) -> int:
        return self.fetch_one("SELECT COUNT(*) FROM user;")[0]


class ExerciseRepository(BaseRepository):
    """Repository for exercise table operations."""

    def __init__(self, database: Database, builder: Optional[ExerciseQueryBuilder] = None) -> None:
        super().__init__(database)
        self.builder = builder or ExerciseQueryBuilder()

    def create(self, owner: dict, description: str, duration: int, date: str) -> dict:
        try:
            self.execute(
                "INSERT INTO exercise (description, duration, date, owner_id) VALUES (?, ?, ?, ?);",
                (description, duration, date, owner["id"]),
            )
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" not in str(e):
                raise StorageError(str(e)) from e
            raise OwnerMissingError(
                "The user with the provided id does not exist!"
            ) from e
        return {
            "id": owner["id"],
            "username": owner["username"],
            "description": description,
            "duration": duration,
            "date": date,
        }

    def fetch_for_owner(self, owner_id: int, filters: LogFilters = LogFilters()) -> List[dict]:
        query, params = self.builder.list_query(owner_id, filters)
        return [
            {"description": description, "duration": duration, "date": date}
            for description, duration, date in self.fetch_all(query, params)
        ]

    def count_for_owner(self, owner_id: int, filters: LogFilters = LogFilters()) -> int:
        query, params = self.builder.count_query(owner_id, filters)
        return self.fetch_one(query, params)[0]

    def count(self) -> int:
        return self.fetch_one("SELECT COUNT(*) FROM exercise;")[0]
