"""Quarter-by-quarter scoreboard and final score resolution."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from gamecast.projection.events import GameEndEvent, as_int
from gamecast.projection.schema import FinalScore, QuarterScore, ScoringPlay
from gamecast.projection.sides import resolve_side

REGULATION_QUARTERS = 4


def aggregate_quarters(
    scoring_plays: Iterable[ScoringPlay],
    home_team: str,
    away_team: str,
) -> list[QuarterScore]:
    """Cumulative score through each quarter.

    Always covers at least four quarters; overtime periods extend the range.
    Plays whose team resolves to neither side add nothing.
    """
    by_quarter: dict[int, dict[str, int | float]] = {}
    last_quarter = REGULATION_QUARTERS
    for play in scoring_plays:
        last_quarter = max(last_quarter, play.quarter)
        side = resolve_side(play.team, home_team, away_team)
        if side is None:
            continue
        bucket = by_quarter.setdefault(play.quarter, {"home": 0, "away": 0})
        bucket[side] += play.points

    quarters: list[QuarterScore] = []
    home_total: int | float = 0
    away_total: int | float = 0
    for quarter in range(1, last_quarter + 1):
        bucket = by_quarter.get(quarter, {"home": 0, "away": 0})
        home_total += bucket["home"]
        away_total += bucket["away"]
        quarters.append(
            QuarterScore(quarter=quarter, home_points=home_total, away_points=away_total)
        )
    return quarters


def _lookup_team_key(score_map: Mapping[str, Any], team: str) -> Any:
    if team in score_map:
        return score_map[team]
    lowered = team.lower()
    for key, value in score_map.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _score_from_final_map(game_end: GameEndEvent, home_team: str, away_team: str) -> FinalScore | None:
    if game_end.final_score is None:
        return None
    home = as_int(_lookup_team_key(game_end.final_score, home_team))
    away = as_int(_lookup_team_key(game_end.final_score, away_team))
    if home is None or away is None:
        return None
    return FinalScore(home=home, away=away)


def _score_from_legacy_fields(game_end: GameEndEvent) -> FinalScore | None:
    home = as_int(game_end.legacy_home)
    away = as_int(game_end.legacy_away)
    if home is None or away is None:
        return None
    return FinalScore(home=home, away=away)


def _score_from_plays(scoring_plays: Iterable[ScoringPlay], home_team: str, away_team: str) -> FinalScore:
    totals: dict[str, int | float] = {"home": 0, "away": 0}
    for play in scoring_plays:
        side = resolve_side(play.team, home_team, away_team)
        if side is not None:
            totals[side] += play.points
    return FinalScore(home=totals["home"], away=totals["away"])


def resolve_final_score(
    game_end: GameEndEvent | None,
    scoring_plays: list[ScoringPlay],
    home_team: str,
    away_team: str,
) -> FinalScore:
    """Authoritative final score.

    Tries the ``finalScore`` map on ``game_end``, then the legacy
    home/away score fields, then the sum of scoring plays. Each source must
    supply both sides; a half-filled source is discarded, never merged.
    """
    if game_end is not None:
        resolved = _score_from_final_map(game_end, home_team, away_team)
        if resolved is not None:
            return resolved
        resolved = _score_from_legacy_fields(game_end)
        if resolved is not None:
            return resolved
    return _score_from_plays(scoring_plays, home_team, away_team)
