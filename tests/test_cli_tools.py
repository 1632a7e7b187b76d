import csv
import io
import json
import os
import sys
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import (
    export_logs,
    backup_db,
    restore_db,
    main,
)
from seed_sample_data import seed
from rest_api import ExerciseTrackerAPI

class CLIToolsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        for path in [self.db_path, self.yaml_path, "backup.db", "export.json"]:
            if os.path.exists(path):
                os.remove(path)

    def tearDown(self) -> None:
        for path in [self.db_path, self.yaml_path, "backup.db", "export.json"]:
            if os.path.exists(path):
                os.remove(path)

    def test_seed_only_once(self) -> None:
        self.assertTrue(seed(self.db_path, self.yaml_path))
        self.assertFalse(seed(self.db_path, self.yaml_path))
        api = ExerciseTrackerAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        try:
            users = api.logs.list_users()
            self.assertEqual([u["username"] for u in users], ["user1", "user2", "user3"])
            self.assertEqual(api.logs.user_log(1)["count"], 3)
        finally:
            api.close()

    def test_export_json_and_csv(self) -> None:
        seed(self.db_path, self.yaml_path)
        data = json.loads(export_logs(self.db_path, "2", "json", yaml_path=self.yaml_path))
        self.assertEqual(data["username"], "user2")
        self.assertEqual(data["count"], 2)

        text = export_logs(
            self.db_path, "1", "csv", date_from="2022-02-15", yaml_path=self.yaml_path
        )
        rows = list(csv.DictReader(io.StringIO(text)))
        self.assertEqual(
            sorted(r["description"] for r in rows), ["Pushups", "Shoulder press"]
        )

    def test_backup_restore(self) -> None:
        main(["init", "--db", self.db_path])
        self.assertTrue(os.path.exists(self.db_path))
        backup_db(self.db_path, "backup.db")
        self.assertTrue(os.path.exists("backup.db"))
        os.remove(self.db_path)
        restore_db("backup.db", self.db_path)
        self.assertTrue(os.path.exists(self.db_path))

    def test_export_command_writes_file(self) -> None:
        main(["seed", "--db", self.db_path, "--yaml", self.yaml_path])
        main(["export", "--db", self.db_path, "--user", "3", "--out", "export.json"])
        with open("export.json", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["logs"], [{"description": "Pullups", "duration": 25, "date": "2022-03-20"}])

if __name__ == "__main__":
    unittest.main()
