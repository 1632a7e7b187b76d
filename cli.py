import argparse
import csv
import io
import json
import shutil

from log_config import setup_logging
from migrate import migrate
from rest_api import ExerciseTrackerAPI
from seed_sample_data import seed
from validators import validate_log_filters


def export_logs(
    db_path: str,
    user_id: str,
    fmt: str = "json",
    date_from: str | None = None,
    date_to: str | None = None,
    limit: str | None = None,
    yaml_path: str = "settings.yaml",
) -> str:
    """Return a user's exercise log serialised as JSON or CSV."""
    api = ExerciseTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    try:
        filters = validate_log_filters(date_from, date_to, limit)
        log = api.logs.user_log(user_id, filters)
    finally:
        api.close()
    if fmt == "json":
        return json.dumps(log, indent=2)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=["description", "duration", "date"])
    writer.writeheader()
    writer.writerows(log["logs"])
    return buf.getvalue()


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def serve(db_path: str | None, yaml_path: str, host: str | None, port: int | None) -> None:
    import uvicorn

    api = ExerciseTrackerAPI(db_path=db_path, yaml_path=yaml_path)
    setup_logging(api.settings.log_level)
    migrate(api.db_path)
    try:
        uvicorn.run(
            api.app,
            host=host or api.settings.host,
            port=port or api.settings.port,
        )
    finally:
        api.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Exercise tracker utility commands")
    sub = parser.add_subparsers(dest="cmd", required=True)

    init = sub.add_parser("init")
    init.add_argument("--db", default="exercise_tracker.db")

    demo = sub.add_parser("seed")
    demo.add_argument("--db", default=None)
    demo.add_argument("--yaml", default="settings.yaml")

    srv = sub.add_parser("serve")
    srv.add_argument("--db", default=None)
    srv.add_argument("--yaml", default="settings.yaml")
    srv.add_argument("--host", default=None)
    srv.add_argument("--port", type=int, default=None)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="exercise_tracker.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="exercise_tracker.db")

    exp = sub.add_parser("export")
    exp.add_argument("--db", default="exercise_tracker.db")
    exp.add_argument("--user", required=True)
    exp.add_argument("--fmt", choices=["json", "csv"], default="json")
    exp.add_argument("--from", dest="date_from", default=None)
    exp.add_argument("--to", dest="date_to", default=None)
    exp.add_argument("--limit", default=None)
    exp.add_argument("--out", default=None)

    args = parser.parse_args(argv)

    if args.cmd == "init":
        migrate(args.db)
        print(f"Schema ready in {args.db}")
    elif args.cmd == "seed":
        seed(args.db, args.yaml)
    elif args.cmd == "serve":
        serve(args.db, args.yaml, args.host, args.port)
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "export":
        data = export_logs(
            args.db, args.user, args.fmt, args.date_from, args.date_to, args.limit
        )
        if args.out:
            with open(args.out, "w", encoding="utf-8") as f:
                f.write(data)
        else:
            print(data)


if __name__ == "__main__":
    main()
