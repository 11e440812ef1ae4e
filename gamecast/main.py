from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from gamecast.ai.articles import generate_article, get_article
from gamecast.ai.llm_client import ArticleClientError
from gamecast.db import Base, engine, get_db
from gamecast.events.ingest import ingest_event
from gamecast.events.store import EventStoreError, SqlEventStore, load_game_events
from gamecast.events.timeline import game_timeline, recent_games_timeline
from gamecast.log_buffer import get_log_handler, install_log_handler
from gamecast.projection.assembler import ProjectionNotReady, build_projection
from gamecast.schemas import ArticleOut, IngestOut, SettingsIn, SettingsOut, TimelineOut
from gamecast.settings import get_or_create_settings, update_settings

app = FastAPI(title="Gamecast")
logger = logging.getLogger(__name__)


@app.on_event("startup")
def on_startup() -> None:
    install_log_handler()
    Base.metadata.create_all(bind=engine)
    logger.info("Gamecast starting up")


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _not_ready_response(exc: ProjectionNotReady) -> JSONResponse:
    logger.info("Projection unavailable game_id=%s status=%s", exc.game_id, exc.status.value)
    return JSONResponse(
        status_code=404,
        content={"error": str(exc), "status": exc.status.value, "gameId": exc.game_id},
    )


def _store_error_response(exc: EventStoreError) -> JSONResponse:
    logger.error("Event store failure code=%s details=%s", exc.code, exc.details)
    return JSONResponse(
        status_code=500,
        content={"error": str(exc), "code": exc.code, "details": exc.details},
    )


def _internal_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


def _projection_response(db: Session, game_id: str):
    try:
        events = load_game_events(SqlEventStore(db), game_id)
        projection = build_projection(game_id, events)
    except ProjectionNotReady as exc:
        return _not_ready_response(exc)
    except EventStoreError as exc:
        return _store_error_response(exc)
    except Exception as exc:
        logger.exception("Projection failed game_id=%s", game_id)
        return _internal_error_response(exc)
    return projection.to_payload()


@app.post("/api/events")
def api_ingest_event(payload: dict, db: Session = Depends(get_db)):
    game_id = _clean(payload.get("gameId"))
    event_type = _clean(payload.get("type"))
    if not game_id or not event_type:
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required fields", "required": ["gameId", "type"]},
        )
    event_payload = payload.get("payload")
    if event_payload is not None and not isinstance(event_payload, dict):
        raise HTTPException(status_code=400, detail="payload must be an object")

    try:
        result = ingest_event(
            db,
            game_id,
            event_type,
            event_payload,
            app_id=_clean(payload.get("appId")),
            sport=_clean(payload.get("sport")),
        )
    except Exception as exc:
        logger.exception("Failed to ingest event game_id=%s type=%s", game_id, event_type)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to ingest event", "details": str(exc)},
        )
    return IngestOut(
        event_id=result.event_id,
        game_id=result.game_id,
        type=result.type,
        timestamp=result.timestamp,
    ).model_dump(by_alias=True)


@app.get("/api/games/recent")
def api_recent_games(appId: str | None = None, sport: str | None = None, db: Session = Depends(get_db)):
    try:
        timeline = recent_games_timeline(SqlEventStore(db), app_id=_clean(appId), sport=_clean(sport))
    except EventStoreError as exc:
        return _store_error_response(exc)
    return TimelineOut(
        app_id=_clean(appId),
        sport=_clean(sport),
        timeline=timeline,
        event_count=len(timeline),
    ).model_dump(by_alias=True)


@app.get("/api/games/{game_id}/timeline")
def api_game_timeline(
    game_id: str,
    appId: str | None = None,
    sport: str | None = None,
    db: Session = Depends(get_db),
):
    try:
        timeline = game_timeline(SqlEventStore(db), game_id, app_id=_clean(appId), sport=_clean(sport))
    except EventStoreError as exc:
        return _store_error_response(exc)
    return TimelineOut(
        game_id=game_id,
        app_id=_clean(appId),
        sport=_clean(sport),
        timeline=timeline,
        event_count=len(timeline),
    ).model_dump(by_alias=True)


@app.post("/api/recap")
def api_recap(payload: dict, db: Session = Depends(get_db)):
    game_id = _clean(payload.get("gameId"))
    if not game_id:
        raise HTTPException(status_code=400, detail="Missing or invalid gameId in request body")
    return _projection_response(db, game_id)


@app.get("/api/games/{game_id}/projection")
def api_game_projection(game_id: str, db: Session = Depends(get_db)):
    return _projection_response(db, game_id)


@app.post("/api/games/{game_id}/article")
def api_generate_article(game_id: str, db: Session = Depends(get_db)):
    try:
        generated = generate_article(db, game_id)
    except ProjectionNotReady as exc:
        return _not_ready_response(exc)
    except EventStoreError as exc:
        return _store_error_response(exc)
    except ArticleClientError as exc:
        logger.error("Article generation failed game_id=%s: %s", game_id, exc)
        return JSONResponse(
            status_code=502,
            content={"error": "LLM error during article generation", "details": str(exc)},
        )
    except Exception as exc:
        logger.exception("Article generation crashed game_id=%s", game_id)
        return _internal_error_response(exc)
    return ArticleOut(
        game_id=generated.game_id,
        model=generated.model,
        article=generated.article,
    ).model_dump(by_alias=True)


@app.get("/api/games/{game_id}/article")
def api_get_article(game_id: str, db: Session = Depends(get_db)):
    stored = get_article(db, game_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="No article generated for gameId")
    return ArticleOut(
        game_id=stored.game_id,
        model=stored.model,
        article=stored.article,
    ).model_dump(by_alias=True)


def _settings_out(settings) -> dict:
    return SettingsOut(
        llm_model=settings.llm_model,
        llm_reasoning_effort=settings.llm_reasoning_effort,
        has_api_key=bool(settings.llm_api_key_enc),
        updated_at_utc=settings.updated_at_utc,
    ).model_dump(mode="json")


@app.get("/api/settings")
def api_get_settings(db: Session = Depends(get_db)):
    return _settings_out(get_or_create_settings(db))


@app.post("/api/settings")
def api_save_settings(body: SettingsIn, db: Session = Depends(get_db)):
    try:
        settings = update_settings(
            db,
            api_key=body.llm_api_key,
            model=body.llm_model,
            reasoning_effort=body.llm_reasoning_effort,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _settings_out(settings)


@app.get("/api/logs")
def api_logs(
    limit: int = 100,
    level: str | None = None,
    logger_name: str | None = Query(default=None, alias="logger"),
):
    min_level = logging.NOTSET
    if level:
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise HTTPException(status_code=400, detail=f"Unknown log level: {level}")
        min_level = resolved
    entries = get_log_handler().entries(limit, min_level=min_level, logger_prefix=_clean(logger_name))
    return {"entries": entries}
