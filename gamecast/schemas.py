from datetime import datetime
from pydantic import BaseModel, Field
from typing import Any, Optional


class IngestOut(BaseModel):
    message: str = "Event ingested successfully"
    event_id: str = Field(serialization_alias="eventId")
    game_id: str = Field(serialization_alias="gameId")
    type: str
    timestamp: str


class TimelineOut(BaseModel):
    game_id: Optional[str] = Field(default=None, serialization_alias="gameId")
    app_id: Optional[str] = Field(default=None, serialization_alias="appId")
    sport: Optional[str] = None
    timeline: list[dict[str, Any]]
    event_count: int = Field(serialization_alias="eventCount")


class ArticleOut(BaseModel):
    game_id: str = Field(serialization_alias="gameId")
    model: str
    article: dict[str, Any]


class SettingsIn(BaseModel):
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None
    llm_reasoning_effort: Optional[str] = None


class SettingsOut(BaseModel):
    llm_model: str
    llm_reasoning_effort: str
    has_api_key: bool
    updated_at_utc: Optional[datetime]
