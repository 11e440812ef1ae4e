"""Map free-text team identifiers onto the home/away side of a game."""

from __future__ import annotations

from typing import Any, Literal, Optional

Side = Literal["home", "away"]


def _normalize(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def resolve_side(team_value: Any, home_team: Any, away_team: Any) -> Optional[Side]:
    """Return ``"home"``, ``"away"`` or ``None`` when the team is unknown.

    The literals ``home``/``away`` always win; otherwise the value is compared
    case-insensitively against the team names from ``game_start``.
    """
    team = _normalize(team_value)
    if not team:
        return None
    if team == "home":
        return "home"
    if team == "away":
        return "away"

    home = _normalize(home_team)
    away = _normalize(away_team)
    if home and team == home:
        return "home"
    if away and team == away:
        return "away"
    return None
