from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SessionConfig:
    author_label: str = "You"
    search_delay: float = float(os.getenv("SEARCH_DELAY_SECONDS", "0.5"))
    submit_delay: float = float(os.getenv("SUBMIT_DELAY_SECONDS", "1.0"))
    max_search_length: int = 50
    session_secret: str = os.getenv("SESSION_SECRET", "coffeeshops-secret-change-in-production")
    max_sessions: int = int(os.getenv("MAX_SESSIONS", "1000"))
    session_idle_seconds: float = float(os.getenv("SESSION_IDLE_SECONDS", "1800"))


DEFAULT_SESSION_CONFIG = SessionConfig()
