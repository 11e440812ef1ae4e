from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography.fernet import Fernet, InvalidToken

from gamecast.models import AppSettings

logger = logging.getLogger(__name__)
_FERNET: Fernet | None = None

DEFAULT_LLM_MODEL = "gpt-5"
DEFAULT_REASONING_EFFORT = "low"
REASONING_EFFORTS = ("minimal", "low", "medium", "high")


@dataclass(frozen=True)
class SettingsSnapshot:
    id: int
    llm_api_key_enc: str | None
    llm_model: str
    llm_reasoning_effort: str


def _default_settings() -> AppSettings:
    return AppSettings(
        id=1,
        llm_api_key_enc=None,
        llm_model=DEFAULT_LLM_MODEL,
        llm_reasoning_effort=DEFAULT_REASONING_EFFORT,
        updated_at_utc=datetime.now(timezone.utc),
    )


def get_or_create_settings(db) -> AppSettings:
    settings = db.query(AppSettings).filter(AppSettings.id == 1).one_or_none()
    if settings:
        return settings
    settings = _default_settings()
    db.add(settings)
    db.commit()
    db.refresh(settings)
    return settings


def snapshot_settings(settings: AppSettings) -> SettingsSnapshot:
    return SettingsSnapshot(
        id=settings.id,
        llm_api_key_enc=settings.llm_api_key_enc,
        llm_model=settings.llm_model,
        llm_reasoning_effort=settings.llm_reasoning_effort,
    )


def update_settings(
    db,
    *,
    api_key: str | None = None,
    model: str | None = None,
    reasoning_effort: str | None = None,
) -> AppSettings:
    settings = get_or_create_settings(db)
    if api_key and api_key.strip():
        settings.llm_api_key_enc = encrypt_api_key(api_key.strip())
    if model is not None:
        settings.llm_model = model.strip() or DEFAULT_LLM_MODEL
    if reasoning_effort is not None:
        effort = reasoning_effort.strip().lower()
        if effort not in REASONING_EFFORTS:
            raise ValueError(
                f"reasoning_effort must be one of: {', '.join(REASONING_EFFORTS)}"
            )
        settings.llm_reasoning_effort = effort
    settings.updated_at_utc = datetime.now(timezone.utc)
    db.commit()
    return settings


def _secret_key() -> bytes:
    secret = os.getenv("APP_SECRET_KEY", "").strip()
    if secret:
        return secret.encode("utf-8")
    generated = Fernet.generate_key()
    logger.warning(
        "APP_SECRET_KEY is not set; stored LLM API keys will not survive a restart. "
        "Temporary key: %s",
        generated.decode("ascii"),
    )
    return generated


def get_fernet() -> Fernet:
    global _FERNET
    if _FERNET is None:
        _FERNET = Fernet(_secret_key())
    return _FERNET


def encrypt_api_key(api_key: str | None) -> str | None:
    if not api_key:
        return None
    return get_fernet().encrypt(api_key.encode("utf-8")).decode("ascii")


def decrypt_api_key(token: str | None) -> str | None:
    if not token:
        return None
    try:
        return get_fernet().decrypt(token.encode("ascii")).decode("utf-8")
    except InvalidToken:
        logger.error("Stored LLM API key cannot be decrypted with the current APP_SECRET_KEY")
        return None
