"""Data contract for the game projection returned to recap consumers."""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


class _Record(BaseModel):
    class Config:
        populate_by_name = True
        frozen = True


class ScoringPlay(_Record):
    quarter: int
    clock: str
    team: str
    type: str
    description: str
    points: Number
    timestamp: float = Field(default=0, exclude=True)
    event_id: Optional[str] = Field(default=None, alias="eventId")


class Turnover(_Record):
    quarter: int
    clock: str
    team: str
    type: str
    description: str
    timestamp: float = Field(default=0, exclude=True)


class Drive(_Record):
    quarter: Optional[int]
    team: str
    drive_number: int = Field(alias="driveNumber")
    plays: int
    yards: Number
    result: str


class QuarterScore(_Record):
    """Running score through the end of ``quarter``, not that quarter's own points."""

    quarter: int
    home_points: Number = Field(alias="homePoints")
    away_points: Number = Field(alias="awayPoints")


class FinalScore(_Record):
    home: Number
    away: Number


class GameProjection(_Record):
    """
    Canonical read model of one game, rebuilt from the full event log on every request.
    """

    game_id: str = Field(alias="gameId")
    home_team: str = Field(alias="homeTeam")
    away_team: str = Field(alias="awayTeam")
    final_score: FinalScore = Field(alias="finalScore")
    quarters: list[QuarterScore]
    scoring_plays: list[ScoringPlay] = Field(alias="scoringPlays")
    turnovers: list[Turnover]
    drives: list[Drive]
    events_count: int = Field(alias="eventsCount")

    def to_payload(self) -> dict[str, Any]:
        return {
            "gameId": self.game_id,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "finalScore": self.final_score.model_dump(),
            "quarters": [entry.model_dump(by_alias=True) for entry in self.quarters],
            "scoringPlays": [
                play.model_dump(by_alias=True, exclude_none=True) for play in self.scoring_plays
            ],
            "turnovers": [turnover.model_dump(by_alias=True) for turnover in self.turnovers],
            "drives": [drive.model_dump(by_alias=True, exclude_none=True) for drive in self.drives],
            "eventsCount": self.events_count,
        }
