"""General utility helper functions."""

from __future__ import annotations

from urllib.parse import urlencode, urlsplit

__all__ = ["format_duration", "append_query_param"]


def format_duration(total_seconds: int | float | None) -> str:
    """Return a human-friendly Hh Mm Ss string for a duration in seconds.

    Examples:
      65 -> "1m 5s"
      3300 -> "55m 0s"
      59 -> "59s"
    """
    if total_seconds is None:
        return "unknown"
    seconds = int(total_seconds)
    if seconds < 60:
        return f"{seconds}s"
    minutes, sec = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {sec}s"
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes}m {sec}s"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h {minutes}m {sec}s"


def append_query_param(url: str, name: str, value: str) -> str:
    """Append ``name=value`` to ``url``, keeping any existing query string."""
    if url.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&" if urlsplit(url).query else "?"
    return f"{url}{separator}{urlencode({name: value})}"
