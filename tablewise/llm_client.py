"""
LLM client shared by the AI upsell, analyst, SQL and master-admin features.

Two providers are supported:

- OpenAI, through the official ``openai`` SDK (chat completions).
- Gemini, through its REST ``generateContent`` endpoint via ``requests``.

Callers may pass their own API key (restaurant admins paste one into the
dashboard) or rely on the server-side OPENAI_API_KEY / GEMINI_API_KEY. The
provider is picked from the key: keys beginning with ``sk-`` are OpenAI keys,
anything else is treated as a Gemini key.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import requests
from dotenv import load_dotenv
from openai import OpenAI

from . import config

logger = logging.getLogger(__name__)

# Load .env from the project root (one level above tablewise/)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

OPENAI = "openai"
GEMINI = "gemini"

_FENCE_RE = re.compile(r"```[a-zA-Z]*")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

# One SDK client per distinct key
_openai_clients: Dict[str, OpenAI] = {}


class LLMError(Exception):
    """Raised when no provider is configured or the provider call fails."""


# =============================================================================
# Provider Resolution
# =============================================================================

def resolve_provider(
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Decide which provider and key to use.

    Returns:
        (provider, api_key)

    Raises:
        LLMError: If no key is available for the chosen provider.
    """
    if provider:
        provider = provider.lower()
        if provider not in (OPENAI, GEMINI):
            raise LLMError(f"Unknown AI provider: {provider}")

    if api_key:
        if provider is None:
            provider = OPENAI if api_key.startswith("sk-") else GEMINI
        return provider, api_key

    if provider == OPENAI or (provider is None and config.OPENAI_API_KEY):
        key = config.OPENAI_API_KEY
        provider = OPENAI
    else:
        key = config.GEMINI_API_KEY
        provider = GEMINI

    if not key:
        raise LLMError("Server AI Key not configured")
    return provider, key


def _get_openai_client(api_key: str) -> OpenAI:
    client = _openai_clients.get(api_key)
    if client is None:
        client = OpenAI(api_key=api_key, timeout=config.LLM_TIMEOUT_SECONDS)
        _openai_clients[api_key] = client
    return client


# =============================================================================
# Provider Calls
# =============================================================================

def _call_openai(
    prompt: str,
    api_key: str,
    model: str,
    temperature: float,
    system: Optional[str],
    json_mode: bool,
) -> str:
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    completion = _get_openai_client(api_key).chat.completions.create(**kwargs)
    return completion.choices[0].message.content or ""


def _call_gemini(
    prompt: str,
    api_key: str,
    model: str,
    temperature: float,
    system: Optional[str],
    json_mode: bool,
) -> str:
    generation_config: Dict[str, Any] = {"temperature": temperature}
    if json_mode:
        generation_config["response_mime_type"] = "application/json"

    body: Dict[str, Any] = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": generation_config,
    }
    if system:
        body["systemInstruction"] = {"parts": [{"text": system}]}

    url = f"{config.GEMINI_API_BASE}/models/{model}:generateContent"
    response = requests.post(
        url,
        params={"key": api_key},
        json=body,
        timeout=config.LLM_TIMEOUT_SECONDS,
    )
    if not response.ok:
        raise LLMError(f"Failed to fetch from Gemini: {response.status_code} {response.reason}")

    data = response.json()
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        logger.warning("Gemini response had no text candidate")
        return ""


def call_llm(
    prompt: str,
    *,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    temperature: float = 0.2,
    system: Optional[str] = None,
    json_mode: bool = False,
) -> str:
    """
    Send a single prompt to the configured provider and return the raw text.

    Args:
        prompt: User prompt text.
        api_key: Optional caller-supplied key; falls back to server keys.
        provider: Force "openai" or "gemini"; inferred from the key otherwise.
        model: Model override; defaults to OPENAI_MODEL / GEMINI_MODEL.
        temperature: Sampling temperature.
        system: Optional system instruction.
        json_mode: Ask the provider for a JSON response body.

    Raises:
        LLMError: On missing configuration or any provider failure.
    """
    provider, key = resolve_provider(api_key, provider)
    if model is None:
        model = config.OPENAI_MODEL if provider == OPENAI else config.GEMINI_MODEL

    logger.debug("Calling %s model %s (prompt %d chars)", provider, model, len(prompt))

    try:
        if provider == OPENAI:
            return _call_openai(prompt, key, model, temperature, system, json_mode)
        return _call_gemini(prompt, key, model, temperature, system, json_mode)
    except LLMError:
        raise
    except Exception as e:
        logger.error("%s call failed: %s", provider, type(e).__name__)
        raise LLMError(f"Error communicating with {provider}: {e}") from e


# =============================================================================
# Response Parsing
# =============================================================================

def strip_code_fences(text: Optional[str]) -> str:
    """Remove markdown code fences such as ```json and ```sql."""
    if not text:
        return ""
    return _FENCE_RE.sub("", text).strip()


def parse_json_response(text: Optional[str], default: Any = None) -> Any:
    """Parse an LLM reply as JSON, returning ``default`` if it isn't valid."""
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse LLM response as JSON: %s", str(e))
        logger.debug("Raw LLM response: %s", cleaned[:500] if cleaned else "(empty)")
        return default


def extract_json_object(text: Optional[str]) -> Optional[str]:
    """Return the outermost {...} block embedded in free text, if any."""
    match = _JSON_OBJECT_RE.search(text or "")
    return match.group(0) if match else None
