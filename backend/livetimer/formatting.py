from datetime import datetime
from typing import Tuple


def duration_parts(ms) -> Tuple[int, int, int]:
    """Split a millisecond count into whole (hours, minutes, seconds)."""
    total = int(ms or 0) // 1000
    seconds = total % 60
    total //= 60
    return total // 60, total % 60, seconds


def format_duration(ms) -> str:
    # [hh:]mm:ss, hours only shown when non-zero
    hours, minutes, seconds = duration_parts(ms)
    parts = ([hours] if hours > 0 else []) + [minutes, seconds]
    return ':'.join(f'{p:02d}' for p in parts)


def format_time(ts) -> str:
    """Local wall-clock HH:MM:SS for an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(int(ts) / 1000).strftime('%H:%M:%S')
