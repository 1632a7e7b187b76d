import datetime
import logging
from typing import Any, List, Optional

from db import ExerciseRepository, UserRepository
from errors import NotFoundError, OwnerMissingError
from validators import (
    LogFilters,
    parse_user_id,
    require_username,
    validate_exercise,
)

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "The user with the provided id does not exist!"


class ExerciseLogService:
    """Coordinates validation, storage and aggregation of exercise logs."""

    def __init__(self, users: UserRepository, exercises: ExerciseRepository) -> None:
        self.users = users
        self.exercises = exercises

    def list_users(self) -> List[dict]:
        return self.users.fetch_users()

    def register_user(self, username: Any) -> dict:
        name = require_username(username)
        user = self.users.create(name)
        logger.info("registered user %s with id %s", name, user["id"])
        return user

    def get_user(self, user_id: Any) -> dict:
        user = self.users.find_by_id(parse_user_id(user_id))
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def add_exercise(
        self, user_id: Any, payload: dict, today: Optional[datetime.date] = None
    ) -> dict:
        """Validate ``payload`` and log it against the given user.

        The owner is looked up before inserting so a missing user is
        reported as such rather than as a constraint failure.
        """
        owner_id = parse_user_id(user_id)
        exercise = validate_exercise(payload, today)
        owner = self.users.find_by_id(owner_id)
        if owner is None:
            raise OwnerMissingError(USER_NOT_FOUND)
        record = self.exercises.create(
            owner, exercise.description, exercise.duration, exercise.date
        )
        logger.info(
            "logged %s minutes of '%s' for user %s",
            exercise.duration,
            exercise.description,
            owner_id,
        )
        return record

    def user_log(self, user_id: Any, filters: LogFilters = LogFilters()) -> dict:
        """Return the user with their filtered exercises and total count."""
        user = self.get_user(user_id)
        logs = self.exercises.fetch_for_owner(user["id"], filters)
        count = self.exercises.count_for_owner(user["id"], filters)
        return {
            "id": user["id"],
            "username": user["username"],
            "logs": logs,
            "count": count,
        }
