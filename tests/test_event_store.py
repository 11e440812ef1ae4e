from __future__ import annotations

import json
import unittest
from datetime import datetime, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gamecast.db import Base
from gamecast.events.ingest import build_event_document
from gamecast.events.store import (
    EventStoreError,
    SchemaMismatchError,
    SqlEventStore,
    load_game_events,
)


def _memory_session(create_tables: bool = True):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if create_tables:
        Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(bind=engine, autoflush=False, autocommit=False)()


def _document(game_id: str, event_type: str, second: int, **extra) -> dict:
    now = datetime(2025, 9, 14, 17, 0, second, tzinfo=timezone.utc)
    return build_event_document(game_id, event_type, {"team": "Titans"}, now=now, **extra)


class SqlEventStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, self.db = _memory_session()
        self.store = SqlEventStore(self.db)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_query_returns_documents_of_one_game_in_append_order(self) -> None:
        first = _document("g1", "game_start", 1)
        other = _document("g2", "game_start", 2)
        second = _document("g1", "score", 3)
        for document in (first, other, second):
            self.store.append(document)
        self.db.commit()

        documents = self.store.query_game("g1")

        self.assertEqual([first, second], documents)

    def test_query_filters_by_app_and_sport(self) -> None:
        self.store.append(_document("g1", "game_start", 1, app_id="scorer", sport="football"))
        self.store.append(_document("g1", "score", 2, app_id="other", sport="football"))
        self.db.commit()

        documents = self.store.query_game("g1", app_id="scorer", sport="football")

        self.assertEqual(["game_start"], [document["type"] for document in documents])

    def test_scan_matches_on_document_game_id(self) -> None:
        self.store.append(_document("g1", "game_start", 1, app_id="scorer"))
        self.store.append(_document("g2", "game_start", 2, app_id="scorer"))
        self.store.append(_document("g1", "score", 3, app_id="other"))
        self.db.commit()

        self.assertEqual(2, len(self.store.scan_game("g1")))
        self.assertEqual(["game_start"], [doc["type"] for doc in self.store.scan_game("g1", app_id="scorer")])

    def test_recent_game_ids_orders_by_latest_event(self) -> None:
        self.store.append(_document("g1", "game_start", 1))
        self.store.append(_document("g2", "game_start", 2))
        self.store.append(_document("g1", "score", 3))
        self.store.append(_document("g3", "game_start", 4))
        self.db.commit()

        self.assertEqual(["g3", "g1"], self.store.recent_game_ids(2))

    def test_query_schema_error_becomes_schema_mismatch(self) -> None:
        class _FailingDB:
            rolled_back = False

            def query(self, *_):
                raise OperationalError("SELECT", {}, Exception("no such column: game_events.game_id"))

            def rollback(self):
                self.rolled_back = True

        db = _FailingDB()

        with self.assertRaises(SchemaMismatchError) as ctx:
            SqlEventStore(db).query_game("g1")

        self.assertEqual("OperationalError", ctx.exception.code)
        self.assertIn("no such column", ctx.exception.details)
        self.assertTrue(db.rolled_back)


class LegacyTableFallbackTests(unittest.TestCase):
    def test_keyed_lookup_on_legacy_table_falls_back_to_scan(self) -> None:
        engine, db = _memory_session(create_tables=False)
        stored = [
            {"gameId": "g1", "type": "game_start", "payload": {}},
            {"GameID": "g1", "type": "score", "payload": {"points": 3}},
            {"gameId": "g2", "type": "game_start", "payload": {}},
        ]
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE game_events (id INTEGER PRIMARY KEY, raw_json TEXT NOT NULL)"))
            for document in stored:
                conn.execute(text("INSERT INTO game_events (raw_json) VALUES (:raw)"), {"raw": json.dumps(document)})

        with self.assertLogs("gamecast.events.store", level="WARNING") as logs:
            documents = load_game_events(SqlEventStore(db), "g1")

        self.assertEqual(stored[:2], documents)
        self.assertIn("falling back to scan", logs.output[0])
        db.close()
        engine.dispose()


class _StubStore:
    def __init__(self, query_error=None, scan_error=None, documents=None):
        self.query_error = query_error
        self.scan_error = scan_error
        self.documents = documents or []
        self.scan_calls = 0

    def query_game(self, game_id, *, app_id=None, sport=None):
        if self.query_error is not None:
            raise self.query_error
        return list(self.documents)

    def scan_game(self, game_id, *, app_id=None, sport=None):
        self.scan_calls += 1
        if self.scan_error is not None:
            raise self.scan_error
        return list(self.documents)


class LoadGameEventsTests(unittest.TestCase):
    def test_keyed_lookup_result_is_used_directly(self) -> None:
        store = _StubStore(documents=[{"type": "game_start"}])

        self.assertEqual([{"type": "game_start"}], load_game_events(store, "g1"))
        self.assertEqual(0, store.scan_calls)

    def test_schema_mismatch_scans_once(self) -> None:
        store = _StubStore(
            query_error=SchemaMismatchError("Event store key lookup failed", code="ProgrammingError"),
            documents=[{"type": "score"}],
        )

        with self.assertLogs("gamecast.events.store", level="WARNING"):
            documents = load_game_events(store, "g1")

        self.assertEqual([{"type": "score"}], documents)
        self.assertEqual(1, store.scan_calls)

    def test_other_store_errors_do_not_scan(self) -> None:
        store = _StubStore(query_error=EventStoreError("Event store query failed", code="TimeoutError"))

        with self.assertRaises(EventStoreError) as ctx:
            load_game_events(store, "g1")

        self.assertEqual("TimeoutError", ctx.exception.code)
        self.assertEqual(0, store.scan_calls)

    def test_failing_scan_is_reported(self) -> None:
        store = _StubStore(
            query_error=SchemaMismatchError("Event store key lookup failed", code="OperationalError"),
            scan_error=EventStoreError("Event store scan failed", code="OperationalError", details="disk I/O error"),
        )

        with self.assertLogs("gamecast.events.store", level="WARNING"):
            with self.assertRaises(EventStoreError) as ctx:
                load_game_events(store, "g1")

        self.assertNotIsInstance(ctx.exception, SchemaMismatchError)
        self.assertEqual("disk I/O error", ctx.exception.details)
        self.assertEqual(1, store.scan_calls)

    def test_generic_database_error_is_not_a_schema_mismatch(self) -> None:
        class _BrokenDB:
            def query(self, *_):
                raise SQLAlchemyError("connection reset")

            def rollback(self):
                pass

        with self.assertRaises(EventStoreError) as ctx:
            SqlEventStore(_BrokenDB()).query_game("g1")

        self.assertNotIsInstance(ctx.exception, SchemaMismatchError)
        self.assertEqual("SQLAlchemyError", ctx.exception.code)


if __name__ == "__main__":
    unittest.main()
