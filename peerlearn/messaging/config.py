from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class StreamConfig:
    api_key: str = os.getenv("STREAM_API_KEY", "")
    api_secret: str = os.getenv("STREAM_API_SECRET", "")
    timeout: float = 6.0
    channel_type: str = "messaging"
    recent_channel_limit: int = 30
    group_channel_marker: str = "group-"
    system_user_id: str = "system"
    enabled: bool = True


DEFAULT_STREAM_CONFIG = StreamConfig()
