from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from gamecast.ai.llm_client import request_article
from gamecast.events.store import SqlEventStore, load_game_events
from gamecast.models import Article
from gamecast.projection.assembler import build_projection
from gamecast.settings import get_or_create_settings, snapshot_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedArticle:
    game_id: str
    model: str
    article: dict[str, Any]


def _upsert_article(db: Session, game_id: str, model: str, article: dict[str, Any], raw_ai_json: str) -> None:
    now = datetime.now(timezone.utc)
    row = db.query(Article).filter(Article.game_id == game_id).one_or_none()
    if not row:
        row = Article(game_id=game_id, created_at_utc=now)
        db.add(row)
    row.model = model
    row.article_json = json.dumps(article, ensure_ascii=False)
    row.raw_ai_json = raw_ai_json
    row.updated_at_utc = now


def generate_article(db: Session, game_id: str) -> GeneratedArticle:
    """Project the game, have the LLM write it up and keep the latest article."""
    events = load_game_events(SqlEventStore(db), game_id)
    projection = build_projection(game_id, events)
    settings = snapshot_settings(get_or_create_settings(db))

    logger.info(
        "Requesting article game_id=%s model=%s effort=%s",
        game_id,
        settings.llm_model,
        settings.llm_reasoning_effort,
    )
    article, raw_ai_json = request_article(projection.to_payload(), settings)

    _upsert_article(db, game_id, settings.llm_model, article, raw_ai_json)
    db.commit()
    logger.info("Article saved game_id=%s title=%s", game_id, article.get("title"))
    return GeneratedArticle(game_id=game_id, model=settings.llm_model, article=article)


def get_article(db: Session, game_id: str) -> GeneratedArticle | None:
    row = db.query(Article).filter(Article.game_id == game_id).one_or_none()
    if row is None:
        return None
    return GeneratedArticle(game_id=row.game_id, model=row.model, article=json.loads(row.article_json))
