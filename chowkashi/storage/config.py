from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class StorageConfig:
    # Empty path keeps state in memory only
    local_state_path: str = os.getenv("LOCAL_STATE_PATH", "")


DEFAULT_STORAGE_CONFIG = StorageConfig()
