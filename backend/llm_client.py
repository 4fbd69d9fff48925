"""
Thin wrapper over the OpenAI chat completions API.
Services pass prompts in and get raw text back; schema validation happens in the caller.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODELS = ["gpt-4o-mini", "gpt-4.1-mini"]

# Prompt in, raw model text (or None when the model said nothing) out.
LLMCallable = Callable[[str], Optional[str]]


def ai_enabled() -> bool:
    key = os.getenv("OPENAI_API_KEY", "")
    return bool(key and key.strip())


def model_candidates(env_var: str) -> list[str]:
    """Comma-separated model list from env_var, else the defaults."""
    configured = (os.environ.get(env_var) or "").strip()
    if not configured:
        return list(DEFAULT_MODELS)
    return [m.strip() for m in configured.split(",") if m.strip()]


def strip_code_fence(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```\w*\n?", "", raw)
        raw = re.sub(r"\n?```\s*$", "", raw)
    return raw.strip()


def _client():
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key or not str(api_key).strip():
        raise ValueError("OPENAI_API_KEY not configured")
    from openai import OpenAI

    return OpenAI(api_key=api_key)


def generate_text(prompt: str, models: list[str], tag: str = "llm") -> Optional[str]:
    """
    Send prompt to each candidate model in order until one answers.
    Returns the stripped message text, or None if the model returned nothing.
    Raises the last error if every candidate failed.
    """
    client = _client()
    last_error: Exception | None = None
    for model in models:
        try:
            t0 = time.perf_counter()
            response = client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.1,
            )
            elapsed = time.perf_counter() - t0
            logger.info("[%s] LLM call duration=%.2fs model=%s", tag, elapsed, model)
            content = response.choices[0].message.content if response.choices else None
            if not content or not content.strip():
                return None
            return strip_code_fence(content)
        except Exception as e:
            last_error = e
            logger.warning("[%s] model failed model=%s error=%s", tag, model, e)
            continue
    if last_error is not None:
        raise last_error
    raise RuntimeError("No OpenAI model candidates configured")


def llm_for(env_var: str, tag: str) -> LLMCallable:
    """Bind generate_text to the model list configured under env_var."""

    def _call(prompt: str) -> Optional[str]:
        return generate_text(prompt, model_candidates(env_var), tag=tag)

    return _call


def get_rank_llm() -> LLMCallable:
    """FastAPI dependency: model used to rank leads."""
    return llm_for("OPENAI_RANK_MODEL", tag="rank")


def get_mapping_llm() -> LLMCallable:
    """FastAPI dependency: model used to infer CSV column mappings."""
    return llm_for("OPENAI_MAPPING_MODEL", tag="column-map")
