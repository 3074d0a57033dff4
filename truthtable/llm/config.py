from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _enabled_from_env() -> bool:
    return os.getenv("TRUTHTABLE_LLM_ENABLED", "true").strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = "llama-3.3-70b-versatile"
    timeout: float = 10.0
    max_tokens: int = 512
    enabled: bool = field(default_factory=_enabled_from_env)
    # Review texts sent per request, longest-first
    max_reviews: int = 20
    max_review_chars: int = 600


DEFAULT_LLM_CONFIG = LLMConfig()
