import sqlite3
import sys

SCHEMA = [
    """CREATE TABLE IF NOT EXISTS user (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE
        );""",
    """CREATE TABLE IF NOT EXISTS exercise (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            description TEXT NOT NULL,
            duration INTEGER NOT NULL CHECK (duration > 0),
            date TEXT NOT NULL,
            owner_id INTEGER NOT NULL,
            FOREIGN KEY(owner_id) REFERENCES user(id)
        );""",
    "CREATE INDEX IF NOT EXISTS idx_exercise_owner_date ON exercise (owner_id, date);",
]


def migrate(db_path='exercise_tracker.db'):
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    for statement in SCHEMA:
        cur.execute(statement)
    conn.commit()
    conn.close()

if __name__ == '__main__':
    path = sys.argv[1] if len(sys.argv) > 1 else 'exercise_tracker.db'
    migrate(path)
