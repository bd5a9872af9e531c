"""Application settings for the SiteGuide backend."""
import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class Settings:
    app_name: str = "SiteGuide API"
    allow_origins: tuple[str, ...] = ("*",)  # demo; lock down in production
    # Dwell checkpoints (seconds) that trigger an analysis response.
    dwell_checkpoint: int = field(default_factory=lambda: _env_int("GUIDE_DWELL_CHECKPOINT", 8))
    summary_checkpoint: int = field(default_factory=lambda: _env_int("GUIDE_SUMMARY_CHECKPOINT", 15))
    session_idle_seconds: int = field(default_factory=lambda: _env_int("GUIDE_SESSION_IDLE_SECONDS", 1800))
    max_history_turns: int = 20

settings = Settings()
