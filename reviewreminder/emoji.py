"""Staleness indicators picked from the time since a request was updated."""

import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from reviewreminder.exceptions import ConfigurationError

DEFAULT_KEY = "default"

_UNITS = {
    "s": "seconds", "sec": "seconds", "second": "seconds", "seconds": "seconds",
    "m": "minutes", "min": "minutes", "minute": "minutes", "minutes": "minutes",
    "h": "hours", "hour": "hours", "hours": "hours",
    "d": "days", "day": "days", "days": "days",
    "w": "weeks", "week": "weeks", "weeks": "weeks",
}

_TERM = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]+)")


def parse_interval(text: str) -> timedelta:
    """
    Parse a human readable interval such as "2 days" or "1 day 6 hours".

    Raises:
        ConfigurationError: If the interval cannot be parsed
    """
    normalized = text.strip().lower()
    terms = _TERM.findall(normalized)

    if not terms or _TERM.sub("", normalized).strip(" ,"):
        raise ConfigurationError(f"Cannot parse interval: {text!r}")

    total = timedelta()
    for amount, unit in terms:
        if unit not in _UNITS:
            raise ConfigurationError(f"Unknown unit {unit!r} in interval {text!r}")
        total += timedelta(**{_UNITS[unit]: float(amount)})
    return total


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmojiSelector:
    """
    Picks the indicator of the largest configured interval the request has outlived.

    Example:
        ```python
        selector = EmojiSelector({"1 day": ":fire:", "1 hour": ":alarm_clock:", "default": ":zzz:"})
        selector.pick(updated_at)  # ":fire:" when older than a day
        ```
    """

    def __init__(self, emoji: dict[str, str], now: Callable[[], datetime] = _utcnow) -> None:
        self.default = emoji.get(DEFAULT_KEY, "")
        self.thresholds = sorted(
            ((parse_interval(key), value) for key, value in emoji.items() if key != DEFAULT_KEY),
            key=lambda item: item[0],
            reverse=True,
        )
        self._now = now

    def pick(self, last_updated_at: datetime) -> str:
        elapsed = self._now() - last_updated_at
        for threshold, value in self.thresholds:
            if threshold < elapsed:
                return value
        return self.default
