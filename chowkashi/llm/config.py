from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    timeout: float = 10.0
    max_tokens: int = 64
    enabled: bool = os.getenv("LLM_ENABLED", "true").lower() in {"1", "true", "yes"}


DEFAULT_LLM_CONFIG = LLMConfig()
