"""Level computation from cumulative XP.

Level = floor(sqrt(xp / 100)) + 1, so level N starts at (N-1)^2 * 100 XP:

  Level 1: 0 XP
  Level 2: 100 XP
  Level 3: 400 XP
  Level 4: 900 XP
  Level 5: 1600 XP

Every caller (event processing, profile view, leaderboard) goes through
this module so stored levels never drift from XP.
"""

from __future__ import annotations

import math

XP_PER_LEVEL_UNIT = 100


def level_for_xp(xp: int) -> int:
    """Return the level reached with ``xp`` cumulative XP."""
    if xp < 0:
        msg = f"XP must be non-negative, got {xp}"
        raise ValueError(msg)
    # isqrt(xp // 100) == floor(sqrt(xp / 100)) for integer xp
    return math.isqrt(xp // XP_PER_LEVEL_UNIT) + 1


def xp_floor(level: int) -> int:
    """Cumulative XP required to reach ``level``."""
    if level < 1:
        msg = f"Level must be >= 1, got {level}"
        raise ValueError(msg)
    return (level - 1) * (level - 1) * XP_PER_LEVEL_UNIT


def xp_ceil(level: int) -> int:
    """Cumulative XP required to reach ``level + 1``."""
    if level < 1:
        msg = f"Level must be >= 1, got {level}"
        raise ValueError(msg)
    return level * level * XP_PER_LEVEL_UNIT


def progress_percent(xp: int) -> float:
    """Percentage of the way from the current level to the next, in [0, 100]."""
    level = level_for_xp(xp)
    floor = xp_floor(level)
    ceil = xp_ceil(level)
    progress = (xp - floor) / (ceil - floor) * 100
    return min(max(progress, 0.0), 100.0)


def compute_level(xp: int) -> dict:
    """Compute full level info from total XP."""
    level = level_for_xp(xp)
    floor = xp_floor(level)
    ceil = xp_ceil(level)
    return {
        "level": level,
        "xp_floor": floor,
        "xp_ceil": ceil,
        "xp_into_level": xp - floor,
        "xp_for_level": ceil - floor,
        "progress": progress_percent(xp),
    }
