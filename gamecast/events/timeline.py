"""Readable timeline entries for the game feed."""

from __future__ import annotations

from typing import Any, Iterable

from gamecast.events.store import SqlEventStore, document_game_id, load_game_events
from gamecast.projection.events import event_sort_key

RECENT_GAMES_LIMIT = 5
MAX_RECENT_ENTRIES = 200


def _phrase(prefix: str, value: Any) -> str:
    return f"{prefix}{value}" if value else ""


def event_text(event_type: Any, payload: dict[str, Any] | None) -> str:
    """Fallback headline for events that carry no ``text`` of their own."""
    payload = payload or {}
    kind = str(event_type).lower()
    team = payload.get("team")

    if kind == "kickoff":
        return "Kickoff" + _phrase(" by ", team)
    if kind == "touchdown":
        points = payload.get("points")
        return (
            "Touchdown"
            + _phrase(" for ", team)
            + _phrase(" by ", payload.get("player"))
            + (f" ({points} points)" if points else "")
        )
    if kind == "field_goal":
        distance = payload.get("distance")
        return "Field goal" + _phrase(" by ", team) + (f" from {distance} yards" if distance else "")
    if kind == "timeout":
        return "Timeout" + _phrase(" called by ", team)
    if kind in ("first_down", "play"):
        if payload.get("description"):
            return str(payload["description"])
        return f"{str(event_type).replace('_', ' ', 1)} play"
    if kind == "score":
        points = payload.get("points")
        return "Score update" + _phrase(" for ", team) + (f" (+{points})" if points else "")
    if kind in ("quarter_change", "period_change"):
        period = payload.get("quarter") or payload.get("period")
        return f"Quarter {period}" if period else "Quarter change"
    if kind == "game_start":
        return "Game started"
    if kind in ("game_end", "final"):
        return "Game ended"
    if kind == "commentary":
        return payload.get("message") or payload.get("comment") or "Commentary"
    return f"{event_type} event"


def _clock_time(timestamp: Any) -> str:
    if isinstance(timestamp, str) and "T" in timestamp:
        return timestamp.split("T", 1)[1][:5]
    return ""


def timeline_entry(document: dict[str, Any]) -> dict[str, Any]:
    payload = document.get("payload")
    if not isinstance(payload, dict):
        payload = {}
    return {
        "type": document.get("type"),
        "payload": payload,
        "timestamp": document.get("timestamp"),
        "time": payload.get("time") or _clock_time(document.get("timestamp")),
        "text": payload.get("text") or event_text(document.get("type"), payload),
        "eventId": document.get("eventId"),
        "gameId": document_game_id(document),
        "appId": document.get("appId") or document.get("AppID") or document.get("AppId"),
        "sport": document.get("sport") or document.get("Sport"),
    }


def build_timeline(documents: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    ordered = sorted(documents, key=event_sort_key)
    return [timeline_entry(document) for document in ordered]


def game_timeline(
    store: SqlEventStore,
    game_id: str,
    *,
    app_id: str | None = None,
    sport: str | None = None,
) -> list[dict[str, Any]]:
    return build_timeline(load_game_events(store, game_id, app_id=app_id, sport=sport))


def recent_games_timeline(
    store: SqlEventStore,
    *,
    app_id: str | None = None,
    sport: str | None = None,
    limit: int = RECENT_GAMES_LIMIT,
) -> list[dict[str, Any]]:
    """``game_start`` plus the latest event of the most recently active games, newest first."""
    documents: list[dict[str, Any]] = []
    seen: set[str] = set()
    for game_id in store.recent_game_ids(limit, app_id=app_id, sport=sport):
        events = load_game_events(store, game_id, app_id=app_id, sport=sport)
        if not events:
            continue
        game_start = next((event for event in events if event.get("type") == "game_start"), None)
        for document in (game_start, events[-1]):
            if document is None:
                continue
            key = str(document.get("eventId") or "") or (
                f"{document.get('type', '')}-{document.get('timestamp', '')}-{game_id}"
            )
            if key in seen:
                continue
            seen.add(key)
            documents.append(document)

    ordered = sorted(documents, key=event_sort_key, reverse=True)[:MAX_RECENT_ENTRIES]
    return [timeline_entry(document) for document in ordered]
