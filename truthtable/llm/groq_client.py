from __future__ import annotations

import json
import logging
from typing import Sequence

from groq import Groq

from ..reviews.models import ReviewSummary
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a restaurant review analyst. "
    "Given customer reviews of a single restaurant, write a short, neutral "
    "two-sentence summary of what diners say, then list what they praise "
    "and what they complain about.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"summary": "<two sentences>", "highlights": ["<short phrase>"], "concerns": ["<short phrase>"]}\n'
    "Use at most three highlights and three concerns. "
    "Base everything on the reviews provided."
)


def _build_user_message(
    review_texts: Sequence[str],
    display_name: str | None,
    config: LLMConfig,
) -> str:
    lines = [f"## Restaurant\n{display_name or 'Unknown restaurant'}", "\n## Reviews"]
    texts = sorted((t.strip() for t in review_texts if t and t.strip()), key=len, reverse=True)
    for i, text in enumerate(texts[: config.max_reviews], start=1):
        lines.append(f"{i}. {text[: config.max_review_chars]}")
    return "\n".join(lines)


def summarize_reviews(
    review_texts: Sequence[str],
    display_name: str | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ReviewSummary | None:
    """
    Call Groq LLM to summarize a restaurant's reviews.

    Returns None on any failure (timeout, bad JSON, API error), when the
    LLM is disabled or unconfigured, or when there is no text to summarize.
    """
    if not config.enabled or not config.api_key:
        return None

    if not any(t and t.strip() for t in review_texts):
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(review_texts, display_name, config),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=0.3,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        summary = str(parsed.get("summary", "")).strip()
        if not summary:
            return None

        return ReviewSummary(
            summary=summary,
            highlights=[str(h) for h in parsed.get("highlights", []) if h][:3],
            concerns=[str(c) for c in parsed.get("concerns", []) if c][:3],
        )

    except Exception:
        logger.warning("Groq LLM call failed, returning analysis without summary", exc_info=True)
        return None
