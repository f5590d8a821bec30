from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class EmbeddingConfig:
    model_name: str = field(
        default_factory=lambda: os.getenv("PEERLEARN_EMBEDDING_MODEL", "all-MiniLM-L6-v2")
    )
    dimension: int = 384
    load_timeout: float = 120.0
    encode_timeout: float = 10.0
    max_workers: int = 4


DEFAULT_EMBEDDING_CONFIG = EmbeddingConfig()
