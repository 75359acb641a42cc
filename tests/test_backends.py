import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

import psycopg2

from domain.errors import PersistenceError
from domain.models import User
from infrastructure.db.backend_factory import create_backend
from infrastructure.db.ledger_backend_json import JsonFileLedgerBackend
from infrastructure.db.ledger_backend_memory import InMemoryLedgerBackend
from infrastructure.db.ledger_backend_postgres import PostgresLedgerBackend
from infrastructure.db.ledger_backend_sqlite import SqliteLedgerBackend

SAMPLE_USERS = [
    User(name="Q", games={"Tekken 8": 200, "Street Fighter 6": -15}),
    User(name="Alice", games={"Halo": 310}),
]


class JsonFileLedgerBackendTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "users.json")
        self.backend = JsonFileLedgerBackend(self.path)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _write(self, contents: str) -> None:
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write(contents)

    def test_missing_file_is_empty(self):
        self.assertEqual(self.backend.load_users(), [])

    def test_save_then_load(self):
        self.backend.save_users(SAMPLE_USERS)
        self.assertEqual(self.backend.load_users(), SAMPLE_USERS)
        self.assertFalse(os.path.exists(self.path + ".tmp"))

    def test_document_layout(self):
        self.backend.save_users(SAMPLE_USERS[1:])
        with open(self.path, encoding="utf-8") as fh:
            self.assertEqual(json.load(fh), [{"user": "Alice", "games": {"Halo": 310}}])

    def test_empty_file_is_empty(self):
        self._write("")
        self.assertEqual(self.backend.load_users(), [])

    def test_malformed_documents_fall_back_to_empty(self):
        bad_documents = [
            "{not json",
            '{"user": "Q"}',
            '[{"user": "Q"}]',
            '[{"user": 1, "games": {}}]',
            '[{"user": "Q", "games": {"Halo": "ten"}}]',
            '[{"user": "Q", "games": {"Halo": true}}]',
            '["Q"]',
        ]
        for document in bad_documents:
            with self.subTest(document=document):
                self._write(document)
                with self.assertLogs("shamebot", level="WARNING"):
                    self.assertEqual(self.backend.load_users(), [])

    def test_save_failure_raises_persistence_error(self):
        backend = JsonFileLedgerBackend(os.path.join(self.tmp_dir, "missing", "users.json"))
        with self.assertRaises(PersistenceError):
            backend.save_users(SAMPLE_USERS)


class SqliteLedgerBackendTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.tmp_dir, "ledger.db")
        self.backend = SqliteLedgerBackend(self.db_path)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_new_database_is_empty(self):
        self.assertEqual(self.backend.load_users(), [])

    def test_save_then_load_keeps_order(self):
        self.backend.save_users(SAMPLE_USERS)
        loaded = self.backend.load_users()
        self.assertEqual(loaded, SAMPLE_USERS)
        self.assertEqual(list(loaded[0].games), ["Tekken 8", "Street Fighter 6"])

    def test_out_of_range_total_becomes_persistence_error(self):
        with self.assertRaises(PersistenceError):
            self.backend.save_users([User(name="Q", games={"Halo": 2**70})])
        self.assertEqual(self.backend.load_users(), [])

    def test_save_replaces_previous_collection(self):
        self.backend.save_users(SAMPLE_USERS)
        self.backend.save_users(SAMPLE_USERS[1:])
        self.assertEqual(SqliteLedgerBackend(self.db_path).load_users(), SAMPLE_USERS[1:])


class PostgresLedgerBackendTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch("infrastructure.db.ledger_backend_postgres.psycopg2.connect")
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)
        conn = self.connect.return_value.__enter__.return_value
        self.cursor = conn.cursor.return_value.__enter__.return_value
        self.backend = PostgresLedgerBackend({"dbname": "shamebot_test"})

    def test_creates_table_on_init(self):
        self.connect.assert_called_with(dbname="shamebot_test")
        self.assertIn("CREATE TABLE IF NOT EXISTS ledger_games", self.cursor.execute.call_args[0][0])

    def test_load_groups_rows_by_user(self):
        self.cursor.fetchall.return_value = [
            ("Q", "Tekken 8", 200),
            ("Q", "Halo", 5),
            ("Alice", "Halo", 1),
        ]
        self.assertEqual(
            self.backend.load_users(),
            [User("Q", {"Tekken 8": 200, "Halo": 5}), User("Alice", {"Halo": 1})],
        )

    def test_save_rewrites_every_row(self):
        self.backend.save_users(SAMPLE_USERS)
        self.cursor.execute.assert_called_with("DELETE FROM ledger_games")
        rows = self.cursor.executemany.call_args[0][1]
        self.assertEqual(
            rows,
            [
                ("Q", "Tekken 8", 200, 0, 0),
                ("Q", "Street Fighter 6", -15, 0, 1),
                ("Alice", "Halo", 310, 1, 0),
            ],
        )

    def test_driver_errors_become_persistence_errors(self):
        self.cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
        with self.assertRaises(PersistenceError):
            self.backend.load_users()
        with self.assertRaises(PersistenceError):
            self.backend.save_users(SAMPLE_USERS)


class InMemoryLedgerBackendTests(unittest.TestCase):
    def test_load_returns_copies(self):
        backend = InMemoryLedgerBackend(SAMPLE_USERS)
        backend.load_users()[0].games["Tekken 8"] = 0
        self.assertEqual(backend.load_users(), SAMPLE_USERS)


class BackendFactoryTests(unittest.TestCase):
    def test_known_backends(self):
        self.assertIsInstance(create_backend("memory"), InMemoryLedgerBackend)
        self.assertIsInstance(create_backend("JSON"), JsonFileLedgerBackend)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_backend("redis")


if __name__ == "__main__":
    unittest.main()
