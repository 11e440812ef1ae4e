"""Build the game projection from a game's full event log."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from gamecast.projection.drives import summarize_drives
from gamecast.projection.events import GameEndEvent, GameEvent, GameStartEvent, decode_events
from gamecast.projection.extractors import extract_scoring_plays, extract_turnovers
from gamecast.projection.schema import GameProjection
from gamecast.projection.scoring import aggregate_quarters, resolve_final_score

logger = logging.getLogger(__name__)


class ProjectionStatus(str, Enum):
    READY = "READY"
    NOT_FOUND = "NOT_FOUND"
    FAILED_NO_START = "FAILED_NO_START"
    FAILED_NO_TEAMS = "FAILED_NO_TEAMS"
    INSUFFICIENT = "INSUFFICIENT"


STATUS_MESSAGES: dict[ProjectionStatus, str] = {
    ProjectionStatus.NOT_FOUND: "No events found for gameId",
    ProjectionStatus.FAILED_NO_START: "Game metadata (game_start) missing; recap cannot be built yet",
    ProjectionStatus.FAILED_NO_TEAMS: "game_start missing homeTeam or awayTeam; recap cannot be built yet",
    ProjectionStatus.INSUFFICIENT: "Game lacks scoring/ending data; recap cannot be built yet",
}


class ProjectionNotReady(RuntimeError):
    """The event log cannot produce a projection yet. Never a server fault."""

    def __init__(self, status: ProjectionStatus, game_id: str) -> None:
        super().__init__(STATUS_MESSAGES[status])
        self.status = status
        self.game_id = game_id


def _first_of(events: Iterable[GameEvent], kind: type) -> Any:
    for event in events:
        if isinstance(event, kind):
            return event
    return None


def build_projection(game_id: str, raw_events: list[Mapping[str, Any]]) -> GameProjection:
    """Project the event log of ``game_id`` into its recap read model.

    Raises ProjectionNotReady for an empty log, a missing or incomplete
    ``game_start`` and for games without any scoring, turnover or end event.
    """
    if not raw_events:
        raise ProjectionNotReady(ProjectionStatus.NOT_FOUND, game_id)

    events = decode_events(raw_events)

    game_start: GameStartEvent | None = _first_of(events, GameStartEvent)
    if game_start is None:
        raise ProjectionNotReady(ProjectionStatus.FAILED_NO_START, game_id)
    if not game_start.home_team or not game_start.away_team:
        raise ProjectionNotReady(ProjectionStatus.FAILED_NO_TEAMS, game_id)
    home_team = game_start.home_team
    away_team = game_start.away_team

    scoring_plays = extract_scoring_plays(events)
    turnovers = extract_turnovers(events)
    game_end: GameEndEvent | None = _first_of(events, GameEndEvent)
    if not scoring_plays and not turnovers and game_end is None:
        raise ProjectionNotReady(ProjectionStatus.INSUFFICIENT, game_id)

    projection = GameProjection(
        game_id=game_id,
        home_team=home_team,
        away_team=away_team,
        final_score=resolve_final_score(game_end, scoring_plays, home_team, away_team),
        quarters=aggregate_quarters(scoring_plays, home_team, away_team),
        scoring_plays=scoring_plays,
        turnovers=turnovers,
        drives=summarize_drives(events),
        events_count=len(raw_events),
    )
    logger.info(
        "Projection ready game_id=%s events=%s scoring_plays=%s turnovers=%s drives=%s",
        game_id,
        len(raw_events),
        len(scoring_plays),
        len(turnovers),
        len(projection.drives),
    )
    return projection
