"""Utility helper functions"""

from datetime import datetime, timezone
from typing import Optional
import math


WORDS_PER_MINUTE = 200
MIN_READ_TIME_MINUTES = 2

# Curated Unsplash photo IDs for tech/coding themes
UNSPLASH_PHOTO_IDS = (
    "1461749280684-dccba630e2f6",  # code on screen
    "1555066931-4365d14bab8c",  # laptop code
    "1504639725590-34d0984388bd",  # programming
    "1526374965328-7f61d4dc18c5",  # abstract tech
    "1518770660439-4636190af475",  # circuit board
    "1451187580459-43490279c0fa",  # earth from space
    "1550751827-4bd374c3f58b",  # server room
    "1558494949-ef010cbdcc31",  # AI brain
    "1485827404703-89b55fcc595e",  # robot
    "1531482615713-2afd69097998",  # coding workspace
    "1542831371-29b0f74f9713",  # code syntax
    "1607799279861-4dd421887fb3",  # dark code
)


def display_name(name: str) -> str:
    """Turn a repository slug like ``my-cool_repo`` into ``my cool repo``."""
    return name.replace("-", " ").replace("_", " ")


def truncate_string(text: str, max_length: int, suffix: str = "") -> str:
    """
    Truncate string to maximum length

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def word_count(text: Optional[str]) -> int:
    return len((text or "").split())


def estimate_read_time(text: Optional[str]) -> int:
    """
    Estimate reading time in minutes

    Args:
        text: Article body

    Returns:
        ceil(words / 200), never less than 2
    """
    return max(MIN_READ_TIME_MINUTES, math.ceil(word_count(text) / WORDS_PER_MINUTE))


def cover_image_url(index: int) -> str:
    """Pick a cover image, cycling through the curated photo list."""
    photo_id = UNSPLASH_PHOTO_IDS[index % len(UNSPLASH_PHOTO_IDS)]
    return f"https://images.unsplash.com/photo-{photo_id}?w=800&h=400&fit=crop&q=80"


def parse_github_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse GitHub ISO 8601 timestamps (``2024-05-01T12:00:00Z``)

    Args:
        value: Timestamp string

    Returns:
        Timezone-aware datetime or None
    """
    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_stored_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a timestamp read back from forks.json

    Older documents carry display dates such as ``May 1, 2024`` instead of
    ISO 8601.

    Args:
        value: Timestamp string

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    parsed = parse_github_datetime(value)
    if parsed is not None or not value:
        return parsed

    for format_str in ("%B %d, %Y", "%b %d, %Y"):
        try:
            return datetime.strptime(value.strip(), format_str).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
