import random
import time
from datetime import datetime, timezone

# Desktop user agents picked from when rotation is enabled.
USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
)


def pick_user_agent(rotate: bool, fallback: str | None, rng=random) -> str | None:
    """Uniform pick from USER_AGENTS when rotating, otherwise the configured agent."""
    if rotate:
        return rng.choice(USER_AGENTS)
    return fallback


def epoch_ms() -> int:
    return int(time.time() * 1000)


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-05-01T12:30:05.123Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
