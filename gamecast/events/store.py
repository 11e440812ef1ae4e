"""Append-only game event store backed by SQLAlchemy."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session

from gamecast.models import GameEvent

logger = logging.getLogger(__name__)
SCAN_BATCH_SIZE = 500


class EventStoreError(RuntimeError):
    def __init__(self, message: str, *, code: str = "EventStoreError", details: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details


class SchemaMismatchError(EventStoreError):
    """The keyed lookup does not match the table's schema; a scan may still work."""


class EventSource(Protocol):
    def query_game(self, game_id: str, *, app_id: Optional[str] = None, sport: Optional[str] = None) -> list[dict]:
        ...

    def scan_game(self, game_id: str, *, app_id: Optional[str] = None, sport: Optional[str] = None) -> list[dict]:
        ...


def document_game_id(document: dict[str, Any]) -> Any:
    return document.get("gameId") or document.get("GameID") or document.get("GameId")


def _matches_filters(document: dict[str, Any], app_id: Optional[str], sport: Optional[str]) -> bool:
    if app_id:
        value = document.get("appId") or document.get("AppID") or document.get("AppId")
        if value is None or str(value) != str(app_id):
            return False
    if sport:
        value = document.get("sport") or document.get("Sport")
        if value is None or str(value) != str(sport):
            return False
    return True


def _load_document(raw_json: str | None, row_id: Any = None) -> dict[str, Any]:
    try:
        document = json.loads(raw_json or "{}")
    except json.JSONDecodeError:
        logger.warning("Unreadable event document row_id=%s", row_id)
        return {}
    return document if isinstance(document, dict) else {}


class SqlEventStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def append(self, document: dict[str, Any]) -> GameEvent:
        row = GameEvent(
            event_id=document["eventId"],
            game_id=document["gameId"],
            app_id=document.get("appId"),
            sport=document.get("sport"),
            type=document.get("type") or "",
            timestamp=document.get("timestamp"),
            created_at=document.get("createdAt"),
            raw_json=json.dumps(document, ensure_ascii=False, separators=(",", ":")),
        )
        self.db.add(row)
        return row

    def query_game(self, game_id: str, *, app_id: Optional[str] = None, sport: Optional[str] = None) -> list[dict]:
        """Keyed lookup on the indexed ``game_id`` column."""
        try:
            query = self.db.query(GameEvent).filter(GameEvent.game_id == game_id)
            if app_id:
                query = query.filter(GameEvent.app_id == app_id)
            if sport:
                query = query.filter(GameEvent.sport == sport)
            rows = query.order_by(GameEvent.id.asc()).all()
        except (OperationalError, ProgrammingError) as exc:
            self.db.rollback()
            raise SchemaMismatchError(
                "Event store key lookup failed",
                code=type(exc).__name__,
                details=str(exc.orig) if exc.orig is not None else str(exc),
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise EventStoreError(
                "Event store query failed",
                code=type(exc).__name__,
                details=str(exc),
            ) from exc
        return [_load_document(row.raw_json, row.id) for row in rows]

    def scan_game(self, game_id: str, *, app_id: Optional[str] = None, sport: Optional[str] = None) -> list[dict]:
        """Unindexed scan over the stored documents, filtered by ``gameId``."""
        documents: list[dict] = []
        try:
            rows = self.db.query(GameEvent.id, GameEvent.raw_json).order_by(GameEvent.id.asc())
            for row_id, raw_json in rows.yield_per(SCAN_BATCH_SIZE):
                document = _load_document(raw_json, row_id)
                if document_game_id(document) != game_id:
                    continue
                if _matches_filters(document, app_id, sport):
                    documents.append(document)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise EventStoreError(
                "Event store scan failed",
                code=type(exc).__name__,
                details=str(exc),
            ) from exc
        return documents

    def recent_game_ids(
        self,
        limit: int,
        *,
        app_id: Optional[str] = None,
        sport: Optional[str] = None,
    ) -> list[str]:
        """Game ids ordered by most recently appended event."""
        try:
            latest = func.max(GameEvent.id)
            query = self.db.query(GameEvent.game_id, latest)
            if app_id:
                query = query.filter(GameEvent.app_id == app_id)
            if sport:
                query = query.filter(GameEvent.sport == sport)
            rows = query.group_by(GameEvent.game_id).order_by(latest.desc()).limit(limit).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise EventStoreError(
                "Event store query failed",
                code=type(exc).__name__,
                details=str(exc),
            ) from exc
        return [game_id for game_id, _ in rows]


def load_game_events(
    store: EventSource,
    game_id: str,
    *,
    app_id: Optional[str] = None,
    sport: Optional[str] = None,
) -> list[dict]:
    """Fetch every event of a game.

    A schema mismatch on the keyed lookup falls back once to a full scan.
    Any other failure, or a failing scan, raises EventStoreError.
    """
    try:
        return store.query_game(game_id, app_id=app_id, sport=sport)
    except SchemaMismatchError as exc:
        logger.warning(
            "Keyed lookup failed for game_id=%s (%s: %s); falling back to scan",
            game_id,
            exc.code,
            exc.details,
        )
    return store.scan_game(game_id, app_id=app_id, sport=sport)
