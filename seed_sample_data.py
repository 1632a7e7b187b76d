from migrate import migrate
from rest_api import ExerciseTrackerAPI

SAMPLE_EXERCISES = {
    "user1": [
        ("Shoulder press", 10, "2022-03-13"),
        ("Leg press", 20, "2022-02-11"),
        ("Pushups", 13, "2022-02-22"),
    ],
    "user2": [
        ("Running", 45, "2021-12-23"),
        ("Pushups", 10, "2020-09-25"),
    ],
    "user3": [
        ("Pullups", 25, "2022-03-20"),
    ],
}


def seed(db_path: str | None = None, yaml_path: str = "settings.yaml") -> bool:
    api = ExerciseTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    migrate(api.db_path)
    try:
        if api.logs.list_users():
            print("Database already contains users")
            return False
        for username, exercises in SAMPLE_EXERCISES.items():
            user = api.logs.register_user(username)
            for description, duration, date in exercises:
                api.logs.add_exercise(
                    user["id"],
                    {"description": description, "duration": duration, "date": date},
                )
        print("Seed data inserted")
        return True
    finally:
        api.close()


if __name__ == "__main__":
    seed()
