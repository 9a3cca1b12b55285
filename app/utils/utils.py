import json
import os
import re
from functools import lru_cache
from typing import Any, Callable, Optional

import requests
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from app.models.settings import LLMSettings, ProcessingSettings, ScoringThresholds, Settings
from app.utils.exceptions import ConfigurationError, ExternalCallError, RateLimitError
from app.utils.logging_config import get_logger

load_dotenv()

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _env(key: str, cast: Callable[[str], Any], default: Any) -> Any:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {key}", config_key=key, config_value=raw, cause=e)


def load_settings() -> Settings:
    """Build settings from the environment (.env is honoured)."""
    try:
        return Settings(
            llm_settings=LLMSettings(
                model_name=_env("LLM_MODEL", str, "llama3"),
                base_url=_env("OLLAMA_BASE_URL", str, "http://localhost:11434"),
                temperature=_env("LLM_TEMPERATURE", float, 0.1),
                timeout=_env("LLM_TIMEOUT", int, 120),
            ),
            processing_settings=ProcessingSettings(
                batch_size=_env("BATCH_SIZE", int, 10),
                batch_delay=_env("BATCH_DELAY", float, 1.0),
                retry_attempts=_env("RETRY_ATTEMPTS", int, 3),
                retry_base_delay=_env("RETRY_BASE_DELAY", float, 2.0),
            ),
            scoring_thresholds=ScoringThresholds(
                reject_max=_env("REJECT_MAX", int, 40),
                hold_max=_env("HOLD_MAX", int, 60),
            ),
        )
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", cause=e)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def ollama_generate(prompt: str, llm: Optional[LLMSettings] = None) -> str:
    """Send one prompt to Ollama and return the raw completion text."""
    llm = llm or get_settings().llm_settings
    url = f"{llm.base_url}/api/generate"
    try:
        resp = requests.post(
            url,
            json={
                "model": llm.model_name,
                "prompt": prompt,
                "options": {"temperature": llm.temperature},
                "stream": False  # important
            },
            timeout=llm.timeout,
        )
    except requests.RequestException as e:
        raise ExternalCallError(f"LLM request failed: {e}", service_name="ollama", cause=e)

    if resp.status_code == 429:
        raise RateLimitError("LLM rate limit exceeded (429)", service_name="ollama", status_code=429)
    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        message = f"{e} {resp.text[:200]}".strip()
        if "429" in message or "quota" in message.lower():
            raise RateLimitError(message, service_name="ollama", status_code=resp.status_code, cause=e)
        raise ExternalCallError(message, service_name="ollama", status_code=resp.status_code, cause=e)

    return resp.json().get("response", "") or ""


def safe_json(s: str, fallback: Any = None) -> Any:
    """Pull the JSON object out of an LLM reply, tolerating code fences and chatter."""
    if not s:
        return fallback
    text = _FENCE_RE.sub("", s).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        return fallback
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return fallback
