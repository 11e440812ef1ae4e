from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

import requests

from gamecast.ai.prompt import RECAP_PROMPT
from gamecast.ai.schema import ARTICLE_SCHEMA
from gamecast.settings import decrypt_api_key

logger = logging.getLogger(__name__)

LLM_API_BASE = os.getenv("LLM_API_BASE", "https://api.openai.com/v1").rstrip("/")
LLM_CONNECT_TIMEOUT_SECONDS = 15
LLM_READ_TIMEOUT_SECONDS = 120
LLM_MAX_ATTEMPTS = 3
ERROR_SNIPPET_CHARS = 2000


class ArticleClientError(RuntimeError):
    pass


def _clip(value: str, limit: int = ERROR_SNIPPET_CHARS) -> str:
    return value if len(value) <= limit else value[:limit] + "...<truncated>"


def _diagnostic_fields(response_json: dict[str, Any]) -> list[str]:
    fields: list[str] = []
    if response_json.get("status"):
        fields.append(f"status={response_json['status']}")
    incomplete = response_json.get("incomplete_details")
    if isinstance(incomplete, dict) and incomplete.get("reason"):
        fields.append(f"incomplete_reason={incomplete['reason']}")
    error = response_json.get("error")
    if isinstance(error, dict):
        for key in ("message", "code"):
            if error.get(key):
                fields.append(f"error_{key}={error[key]}")
    return fields


def _describe_response(response_json: dict[str, Any]) -> str:
    fields = _diagnostic_fields(response_json) or ["no_debug_fields"]
    fields.append("response_json=" + _clip(json.dumps(response_json, ensure_ascii=False)))
    return "; ".join(fields)


def _build_response_payload(model: str, reasoning_effort: str, recap_input: dict[str, Any]) -> dict[str, Any]:
    def message(role: str, text: str) -> dict[str, Any]:
        return {"role": role, "content": [{"type": "input_text", "text": text}]}

    return {
        "model": model,
        "reasoning": {"effort": reasoning_effort},
        "input": [
            message("developer", RECAP_PROMPT),
            message("user", "recapInput:\n" + json.dumps(recap_input, ensure_ascii=False)),
        ],
        "text": {
            "format": {
                "type": "json_schema",
                "name": ARTICLE_SCHEMA["name"],
                "schema": ARTICLE_SCHEMA["schema"],
            }
        },
    }


def _output_text(response_json: dict[str, Any]) -> str:
    direct = response_json.get("output_text")
    if direct:
        return direct
    for item in response_json.get("output") or []:
        blocks = item.get("content") if isinstance(item, dict) else None
        for block in blocks or []:
            if isinstance(block, dict) and block.get("type") == "output_text":
                return block.get("text") or ""
    return ""


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        first_break = cleaned.find("\n")
        cleaned = cleaned[first_break + 1:] if first_break != -1 else cleaned[3:]
        cleaned = cleaned.strip()
    if cleaned.endswith("```"):
        cleaned = cleaned[: cleaned.rfind("```")].strip()
    return cleaned


def _post_with_retries(url: str, headers: dict[str, str], body: dict[str, Any]) -> requests.Response:
    """POST, retrying timeouts with a linear sleep. Other transport errors are final."""
    for attempt in range(1, LLM_MAX_ATTEMPTS + 1):
        try:
            return requests.post(
                url,
                headers=headers,
                json=body,
                timeout=(LLM_CONNECT_TIMEOUT_SECONDS, LLM_READ_TIMEOUT_SECONDS),
            )
        except requests.Timeout as exc:
            logger.warning("LLM request timed out (attempt %d/%d)", attempt, LLM_MAX_ATTEMPTS)
            if attempt == LLM_MAX_ATTEMPTS:
                raise ArticleClientError(
                    f"LLM request failed after retries due to timeout. Last error: {exc}"
                ) from exc
            time.sleep(attempt)
        except requests.RequestException as exc:
            raise ArticleClientError(f"LLM request failed: {exc}") from exc
    raise ArticleClientError("LLM request was never attempted")


def _decode_response(response: requests.Response) -> dict[str, Any]:
    try:
        response_json = response.json()
    except ValueError as exc:
        if response.status_code >= 400:
            raise ArticleClientError(
                f"LLM API error {response.status_code}: non-JSON response={_clip(response.text)}"
            ) from exc
        raise ArticleClientError("LLM API returned non-JSON response: " + _clip(response.text)) from exc
    if response.status_code >= 400:
        raise ArticleClientError(f"LLM API error {response.status_code}: {_describe_response(response_json)}")
    return response_json


def _parse_article(response_json: dict[str, Any]) -> dict[str, Any]:
    text = _output_text(response_json)
    if not text.strip():
        raise ArticleClientError("LLM response missing output_text: " + _describe_response(response_json))
    try:
        parsed = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise ArticleClientError("LLM response was not valid JSON; output_text=" + _clip(text)) from exc
    article = parsed.get("article", parsed) if isinstance(parsed, dict) else None
    if not isinstance(article, dict):
        raise ArticleClientError("LLM response missing article object")
    return article


def request_article(recap_input: dict[str, Any], settings) -> tuple[dict[str, Any], str]:
    """Ask the LLM to write up a projection.

    Returns the ``article`` object and the raw response JSON.
    """
    api_key = decrypt_api_key(settings.llm_api_key_enc)
    if not api_key:
        raise ArticleClientError("Missing LLM API key")

    response = _post_with_retries(
        f"{LLM_API_BASE}/responses",
        {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        _build_response_payload(settings.llm_model, settings.llm_reasoning_effort, recap_input),
    )
    response_json = _decode_response(response)
    return _parse_article(response_json), json.dumps(response_json, ensure_ascii=False)
