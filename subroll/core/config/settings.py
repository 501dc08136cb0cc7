# File: subroll/core/config/settings.py

import os
from pathlib import Path
from typing import Tuple


class Settings:
    # --- Paths ---
    # subroll/core/config/settings.py -> subroll/core/config -> subroll/core -> subroll -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("SUBROLL_DATA_DIR", str(BASE_DIR / "data")))
    DOWNLOADS_DIR: Path = DATA_DIR / "downloads"

    # --- Database ---
    SQLITE_PATH: Path = DATA_DIR / "subroll.db"

    @property
    def DATABASE_URL(self) -> str:
        # An explicit URL always wins (Postgres, in-memory SQLite for tests, ...)
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit
        return f"sqlite:///{self.SQLITE_PATH}"

    # --- Collaborator Services ---
    API_BASE_URL: str = os.getenv("SUBROLL_API_URL", "http://localhost:8080")
    # Transcription of long uploads can take minutes
    REQUEST_TIMEOUT: float = float(os.getenv("SUBROLL_REQUEST_TIMEOUT", "300"))

    # --- Timeline ---
    DEFAULT_WORDS_PER_SUBTITLE: int = int(os.getenv("SUBROLL_WORDS_PER_SUBTITLE", "3"))
    ALLOWED_WORD_COUNTS: Tuple[int, ...] = (3, 5, 7)
    BROLL_DISPLAY_SECONDS: float = 3.0

    # --- Projects ---
    MAX_RECENT_PROJECTS: int = 10

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("SUBROLL_LOG_LEVEL", "INFO")

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.DOWNLOADS_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
