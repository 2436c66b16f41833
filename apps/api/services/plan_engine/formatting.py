"""Time and pace string helpers."""

from typing import Optional


def format_duration(total_seconds: float) -> str:
    """Format seconds as H:MM:SS, or M:SS under an hour."""
    total = int(round(total_seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_duration_minutes(text: Optional[str]) -> Optional[float]:
    """
    Parse "MM:SS" or "H:MM:SS" into minutes.

    Returns None for empty or malformed input.
    """
    if not text:
        return None
    try:
        parts = [int(p) for p in str(text).strip().split(":")]
    except ValueError:
        return None
    if any(p < 0 for p in parts):
        return None
    if len(parts) == 2:
        return parts[0] + parts[1] / 60
    if len(parts) == 3:
        return parts[0] * 60 + parts[1] + parts[2] / 60
    return None


def format_pace(minutes_per_km: float) -> str:
    """Format a min/km pace as M:SS."""
    total = int(round(minutes_per_km * 60))
    return f"{total // 60}:{total % 60:02d}"
