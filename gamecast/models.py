from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from sqlalchemy.sql import func
from .db import Base


class GameEvent(Base):
    """One appended client event. Rows are inserted, never updated."""

    __tablename__ = "game_events"
    __table_args__ = (
        UniqueConstraint("event_id", name="uq_game_events_event_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String, nullable=False)
    game_id = Column(String, nullable=False, index=True)
    app_id = Column(String, nullable=True)
    sport = Column(String, nullable=True)
    type = Column(String, nullable=False, default="")
    timestamp = Column(String, nullable=True)
    created_at = Column(String, nullable=True)
    raw_json = Column(Text, nullable=False, default="{}")    # full event document
    inserted_at_utc = Column(DateTime(timezone=True), server_default=func.now())


class GameSession(Base):
    __tablename__ = "game_sessions"
    __table_args__ = (
        UniqueConstraint("game_id", name="uq_game_sessions_game_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active")    # active | completed
    current_quarter = Column(String, nullable=True)
    scores_json = Column(Text, nullable=False, default="{}")     # points by team
    timeouts_json = Column(Text, nullable=False, default="{}")   # timeouts by team
    last_event_at = Column(String, nullable=True)
    created_at = Column(String, nullable=True)


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint("game_id", name="uq_articles_game_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(String, nullable=False)
    model = Column(String, nullable=False, default="")
    article_json = Column(Text, nullable=False, default="{}")
    raw_ai_json = Column(Text, nullable=False, default="")
    created_at_utc = Column(DateTime(timezone=True), server_default=func.now())
    updated_at_utc = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    llm_api_key_enc = Column(Text, nullable=True)
    llm_model = Column(String, nullable=False, default="gpt-5")
    llm_reasoning_effort = Column(String, nullable=False, default="low")
    updated_at_utc = Column(DateTime(timezone=True), server_default=func.now())
