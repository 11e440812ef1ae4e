"""Decode raw game-log documents into typed event records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite(number: int | float) -> bool:
    try:
        return math.isfinite(number)
    except OverflowError:
        return False


def as_number(value: Any) -> int | float | None:
    """Return a finite number for ints, floats and numeric strings.

    Ints too large for a float count as unparsable, as do strings using
    digit-group underscores.
    """
    if _is_number(value):
        number = value
    elif isinstance(value, str) and value.strip() and "_" not in value:
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if not _is_finite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def as_int(value: Any) -> int | None:
    number = as_number(value)
    if isinstance(number, int):
        return number
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _parse_time(value: Any) -> float | None:
    if _is_number(value):
        return value if _is_finite(value) else None
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


def event_sort_key(event: Mapping[str, Any]) -> float:
    """Sortable time for an event: ``timestamp`` first, then ``createdAt``.

    Numbers are used as-is, ISO-8601 strings become epoch milliseconds and
    anything unparsable falls back to ``0`` so it sorts first.
    """
    if not isinstance(event, Mapping):
        return 0
    for field in ("timestamp", "createdAt"):
        resolved = _parse_time(event.get(field))
        if resolved is not None:
            return resolved
    return 0


@dataclass(frozen=True)
class GameEvent:
    event_id: str | None
    type: str
    sort_key: float
    quarter: int | None
    team: str | None
    clock: str
    description: str
    points: int | float | None
    score_type: str
    yards: int | float | None
    payload: Mapping[str, Any]


@dataclass(frozen=True)
class ScoreEvent(GameEvent):
    pass


@dataclass(frozen=True)
class TurnoverEvent(GameEvent):
    kind: str


@dataclass(frozen=True)
class DriveMarkerEvent(GameEvent):
    marker: str
    drive_number: int | None
    plays: int | None
    result: str
    turnover_kind: str

    @property
    def is_start(self) -> bool:
        return self.marker == "start"


@dataclass(frozen=True)
class GameStartEvent(GameEvent):
    home_team: str
    away_team: str


@dataclass(frozen=True)
class GameEndEvent(GameEvent):
    final_score: Mapping[str, Any] | None
    legacy_home: Any
    legacy_away: Any


@dataclass(frozen=True)
class OtherEvent(GameEvent):
    pass


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _team_name(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _event_id(event: Mapping[str, Any]) -> str | None:
    value = event.get("eventId")
    if value is None or value == "":
        value = event.get("EventID")
    if value is None or value == "":
        return None
    return str(value)


def _common_fields(event: Mapping[str, Any], payload: Mapping[str, Any]) -> dict[str, Any]:
    quarter = as_int(payload.get("quarter"))
    if quarter is not None and quarter < 1:
        quarter = None
    team = payload.get("team")
    if not isinstance(team, str) or not team.strip():
        team = None
    return {
        "event_id": _event_id(event),
        "type": _as_text(event.get("type")),
        "sort_key": event_sort_key(event),
        "quarter": quarter,
        "team": team,
        "clock": _as_text(payload.get("gameClock")),
        "description": _as_text(payload.get("description")),
        "points": as_number(payload.get("points")),
        "score_type": _as_text(payload.get("scoreType") or payload.get("type")),
        "yards": as_number(payload.get("yards")),
        "payload": payload,
    }


def decode_event(event: Mapping[str, Any]) -> GameEvent:
    """Decode one raw event document into its typed variant.

    Malformed documents never raise; fields that fail validation decode to
    ``None`` and the consumers decide whether the record is usable.
    """
    if not isinstance(event, Mapping):
        event = {}
    payload = event.get("payload")
    if not isinstance(payload, Mapping):
        payload = {}

    fields = _common_fields(event, payload)
    event_type = fields["type"]

    if event_type == "score":
        return ScoreEvent(**fields)
    kind = payload.get("type")
    kind = kind if isinstance(kind, str) else ""
    if event_type == "turnover":
        return TurnoverEvent(**fields, kind=kind)
    if event_type in ("drive_start", "drive_end"):
        result = payload.get("result")
        return DriveMarkerEvent(
            **fields,
            marker="start" if event_type == "drive_start" else "end",
            drive_number=as_int(payload.get("driveNumber")),
            plays=as_int(payload.get("plays")),
            result=result if isinstance(result, str) else "",
            turnover_kind=kind,
        )
    if event_type == "game_start":
        return GameStartEvent(
            **fields,
            home_team=_team_name(payload.get("homeTeam")),
            away_team=_team_name(payload.get("awayTeam")),
        )
    if event_type == "game_end":
        final_score = payload.get("finalScore")
        return GameEndEvent(
            **fields,
            final_score=final_score if isinstance(final_score, Mapping) else None,
            legacy_home=_first_present(payload, "finalScoreHome", "homeScore"),
            legacy_away=_first_present(payload, "finalScoreAway", "awayScore"),
        )
    return OtherEvent(**fields)


def decode_events(events: list[Mapping[str, Any]]) -> list[GameEvent]:
    """Decode and order a game's events by time; ties keep input order."""
    decoded = [decode_event(event) for event in events]
    return sorted(decoded, key=lambda item: item.sort_key)
