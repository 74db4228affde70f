from __future__ import annotations

import json
import logging

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You classify search queries for a local business directory. "
    "Given a user's search text and the list of allowed categories, "
    "pick the single category the user is most likely looking for.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"category": "<one of the allowed categories or null>"}\n'
    "Use null when no category fits."
)


def _build_user_message(query: str, categories: list[str]) -> str:
    lines = ["## Allowed categories"]
    lines.extend(f"- {c}" for c in categories)
    lines.append("\n## Search text")
    lines.append(query)
    return "\n".join(lines)


def infer_category(
    query: str,
    categories: list[str],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """
    Ask the Groq LLM which of *categories* the query targets.

    Returns the category (as spelled in *categories*) or None on any failure
    (disabled, timeout, bad JSON, unknown category).
    """
    if not config.enabled or not config.api_key:
        return None

    if not query.strip() or not categories:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(query, categories)},
            ],
            max_tokens=config.max_tokens,
            temperature=0.0,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or "{}"
        answer = json.loads(content).get("category")

    except Exception:
        logger.warning("Groq category inference failed, keeping category 'all'", exc_info=True)
        return None

    if not isinstance(answer, str):
        return None
    by_lower = {c.lower(): c for c in categories}
    return by_lower.get(answer.strip().lower())
