from __future__ import annotations

import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gamecast.db import Base
from gamecast.settings import (
    DEFAULT_LLM_MODEL,
    decrypt_api_key,
    encrypt_api_key,
    get_or_create_settings,
    snapshot_settings,
    update_settings,
)


class ApiKeyEncryptionTests(unittest.TestCase):
    def test_round_trip(self) -> None:
        token = encrypt_api_key("sk-test")

        self.assertNotEqual("sk-test", token)
        self.assertEqual("sk-test", decrypt_api_key(token))

    def test_empty_values_stay_empty(self) -> None:
        self.assertIsNone(encrypt_api_key(""))
        self.assertIsNone(decrypt_api_key(None))

    def test_foreign_token_is_rejected(self) -> None:
        with self.assertLogs("gamecast.settings", level="ERROR"):
            self.assertIsNone(decrypt_api_key("not-a-fernet-token"))


class UpdateSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_defaults_are_created_once(self) -> None:
        first = get_or_create_settings(self.db)
        second = get_or_create_settings(self.db)

        self.assertEqual(first.id, second.id)
        self.assertEqual(DEFAULT_LLM_MODEL, first.llm_model)
        self.assertIsNone(first.llm_api_key_enc)

    def test_blank_key_keeps_existing_key(self) -> None:
        update_settings(self.db, api_key=" sk-live ")
        update_settings(self.db, api_key="   ", model="  ")

        snapshot = snapshot_settings(get_or_create_settings(self.db))
        self.assertEqual("sk-live", decrypt_api_key(snapshot.llm_api_key_enc))
        self.assertEqual(DEFAULT_LLM_MODEL, snapshot.llm_model)

    def test_unknown_reasoning_effort_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            update_settings(self.db, reasoning_effort="maximum")

        self.assertEqual("low", get_or_create_settings(self.db).llm_reasoning_effort)


if __name__ == "__main__":
    unittest.main()
