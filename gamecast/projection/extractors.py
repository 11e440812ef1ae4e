"""Pull scoring plays and turnovers out of a decoded game log."""

from __future__ import annotations

from typing import Iterable

from gamecast.projection.events import DriveMarkerEvent, GameEvent, ScoreEvent, TurnoverEvent
from gamecast.projection.schema import ScoringPlay, Turnover

SCORE_TYPE_POINTS: dict[str, int] = {
    "TD": 6,
    "FG": 3,
    "SAFETY": 2,
}

TURNOVER_RESULT_MARKERS = ("turnover", "interception", "fumble", "downs")


def points_for_score_type(score_type: str) -> int:
    return SCORE_TYPE_POINTS.get(score_type.upper(), 0)


def _is_drive_end_turnover(event: GameEvent) -> bool:
    if not isinstance(event, DriveMarkerEvent) or event.is_start:
        return False
    lowered = event.result.lower()
    return any(marker in lowered for marker in TURNOVER_RESULT_MARKERS)


def extract_scoring_plays(events: Iterable[GameEvent]) -> list[ScoringPlay]:
    """Scoring plays ordered by event time.

    An event counts when its type is ``score`` or its payload carries numeric
    points. Records without a quarter or a team are dropped.
    """
    plays: list[ScoringPlay] = []
    for event in events:
        has_numeric_points = event.points is not None
        if not (isinstance(event, ScoreEvent) or has_numeric_points):
            continue
        if event.quarter is None or event.team is None:
            continue

        subtype = (event.score_type or event.type).upper()
        points = event.points if has_numeric_points else points_for_score_type(subtype)
        plays.append(
            ScoringPlay(
                quarter=event.quarter,
                clock=event.clock,
                team=event.team,
                type=subtype,
                description=event.description,
                points=points,
                timestamp=event.sort_key,
                event_id=event.event_id,
            )
        )
    return sorted(plays, key=lambda play: play.timestamp)


def extract_turnovers(events: Iterable[GameEvent]) -> list[Turnover]:
    """Turnover events plus drives that ended in a turnover, ordered by event time."""
    turnovers: list[Turnover] = []
    for event in events:
        is_turnover = isinstance(event, TurnoverEvent)
        is_drive_end_turnover = _is_drive_end_turnover(event)
        if not (is_turnover or is_drive_end_turnover):
            continue
        if event.quarter is None or event.team is None:
            continue

        if is_turnover:
            kind = event.kind or "turnover"
        else:
            kind = event.turnover_kind or event.result
        turnovers.append(
            Turnover(
                quarter=event.quarter,
                clock=event.clock,
                team=event.team,
                type=kind,
                description=event.description,
                timestamp=event.sort_key,
            )
        )
    return sorted(turnovers, key=lambda turnover: turnover.timestamp)
