"""Append client events to the game log and keep the per-game session current."""

from __future__ import annotations

import json
import logging
import random
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from gamecast.events.store import SqlEventStore
from gamecast.models import GameSession
from gamecast.projection.events import as_int

logger = logging.getLogger(__name__)

SCORE_EVENT_TYPES = {"score", "touchdown", "field_goal", "safety"}
START_EVENT_TYPES = {"game_start", "kickoff"}
END_EVENT_TYPES = {"game_end", "final"}
PERIOD_EVENT_TYPES = {"quarter_change", "period_change"}
_EVENT_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class IngestResult:
    event_id: str
    game_id: str
    type: str
    timestamp: str


def _utc_iso(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_event_id(game_id: str, now: datetime) -> str:
    suffix = "".join(random.choices(_EVENT_ID_ALPHABET, k=9))
    return f"{game_id}-{int(now.timestamp() * 1000)}-{suffix}"


def build_event_document(
    game_id: str,
    event_type: str,
    payload: dict[str, Any] | None,
    *,
    app_id: str | None = None,
    sport: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    timestamp = _utc_iso(now)
    document: dict[str, Any] = {
        "eventId": new_event_id(game_id, now),
        "gameId": game_id,
        "type": event_type,
        "payload": payload or {},
        "timestamp": timestamp,
        "createdAt": timestamp,
    }
    if app_id:
        document["appId"] = app_id
    if sport:
        document["sport"] = sport
    return document


def _load_counts(raw: str | None) -> dict[str, int]:
    try:
        counts = json.loads(raw or "{}")
    except json.JSONDecodeError:
        return {}
    return counts if isinstance(counts, dict) else {}


def _bump(raw: str | None, team: str, amount: int) -> str:
    counts = _load_counts(raw)
    counts[team] = int(counts.get(team) or 0) + amount
    return json.dumps(counts, ensure_ascii=False, sort_keys=True)


def apply_session_update(session: GameSession, event_type: str, payload: dict[str, Any], timestamp: str) -> None:
    session.last_event_at = timestamp
    kind = event_type.lower()
    team = payload.get("team")
    team = team.strip() if isinstance(team, str) else ""

    if kind in SCORE_EVENT_TYPES:
        points = as_int(payload.get("points"))
        if team and points:
            session.scores_json = _bump(session.scores_json, team, points)
    elif kind in START_EVENT_TYPES:
        session.status = "active"
    elif kind in END_EVENT_TYPES:
        session.status = "completed"
    elif kind == "timeout":
        if team:
            session.timeouts_json = _bump(session.timeouts_json, team, 1)
    elif kind in PERIOD_EVENT_TYPES:
        period = payload.get("quarter") or payload.get("period")
        if period:
            session.current_quarter = str(period)


def _update_game_session(db: Session, document: dict[str, Any]) -> None:
    game_id = document["gameId"]
    session = db.query(GameSession).filter(GameSession.game_id == game_id).one_or_none()
    if session is None:
        session = GameSession(
            game_id=game_id,
            status="active",
            scores_json="{}",
            timeouts_json="{}",
            created_at=document["timestamp"],
        )
        db.add(session)
    apply_session_update(session, document["type"], document["payload"], document["timestamp"])


def ingest_event(
    db: Session,
    game_id: str,
    event_type: str,
    payload: dict[str, Any] | None = None,
    *,
    app_id: str | None = None,
    sport: str | None = None,
) -> IngestResult:
    """Append one event, then refresh the game's session summary.

    A failing session update is logged and does not undo the appended event.
    """
    document = build_event_document(game_id, event_type, payload, app_id=app_id, sport=sport)
    SqlEventStore(db).append(document)
    db.commit()
    logger.info(
        "Ingested event event_id=%s game_id=%s type=%s",
        document["eventId"],
        game_id,
        event_type,
    )

    try:
        _update_game_session(db, document)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed updating game session game_id=%s type=%s", game_id, event_type)

    return IngestResult(
        event_id=document["eventId"],
        game_id=game_id,
        type=event_type,
        timestamp=document["timestamp"],
    )
