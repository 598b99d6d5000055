"""
Roster normalization: teams larger than the baseline have their points scaled
down so they do not win on headcount alone.
"""

import math
from fractions import Fraction
from typing import Dict, Optional

from ..config import BASELINE_ROSTER_SIZE, ROSTER_SIZES


def roster_size(
    team_name: str,
    explicit_size: Optional[int] = None,
    overrides: Optional[Dict[str, int]] = None,
    baseline: int = BASELINE_ROSTER_SIZE,
) -> int:
    """Look up a team's roster size; unlisted teams are at the baseline."""
    if explicit_size:
        return explicit_size
    if overrides is None:
        overrides = ROSTER_SIZES
    lookup = {name.lower(): size for name, size in overrides.items()}
    return lookup.get((team_name or "").strip().lower(), baseline)


def roster_factor(size: int, baseline: int = BASELINE_ROSTER_SIZE) -> Fraction:
    if size <= baseline:
        return Fraction(1)
    return Fraction(baseline, size)


def round_half_up(value) -> int:
    return math.floor(Fraction(value) + Fraction(1, 2))


def scale_points(raw_points: int, factor: Fraction) -> int:
    """Scale raw points by the roster factor, rounding once at the end."""
    return round_half_up(raw_points * factor)


def team_factor(team, overrides: Optional[Dict[str, int]] = None, baseline: int = BASELINE_ROSTER_SIZE) -> Fraction:
    size = roster_size(team.name, getattr(team, "roster_size", None), overrides, baseline)
    return roster_factor(size, baseline)
