# walksafe/route_planner/utils/formatting.py
import math

from ..constants import RouteConstants

def format_duration(seconds: float) -> str:
    """
    Formats a raw walking duration for display.

    The duration is padded by the walking buffer and rounded up to whole
    minutes, so the estimate is never optimistic.

    >>> format_duration(590)
    '12 min walk'
    >>> format_duration(3600)
    '1 hr 12 min walk'
    """
    adjusted_seconds = seconds * RouteConstants.DURATION_BUFFER
    # Round before the ceiling so float noise (708.0000001) does not add a minute.
    total_minutes = math.ceil(round(adjusted_seconds / 60, 6))

    if total_minutes < 60:
        return f"{total_minutes} min walk"

    hours, mins = divmod(total_minutes, 60)
    return f"{hours} hr {mins} min walk"
