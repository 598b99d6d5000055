"""
Activity rules and Run Rate (RR) calculation for logged entries.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

RR_CAP = 2.5
REST_RR = 1.0
DEFAULT_RR = 1.0
GOLF_BASE_HOLES = 9
RUN_BASE_DISTANCE = 4.0
CYCLING_BASE_DISTANCE = 10.0
# Duration RR above this asks the member for extra proof
VERIFICATION_RR = 1.6


class ActivityType(str, Enum):
    RUN = "run"
    GYM = "gym"
    YOGA = "yoga"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    HORSE_RIDING = "horse_riding"
    BADMINTON_PICKLEBALL = "badminton_pickleball"
    BASKETBALL_CRICKET = "basketball_cricket"
    MEDITATION = "meditation"
    STEPS = "steps"
    GOLF = "golf"


# Submission minimums for non-seniors; seniors use the lower baselines below
ACTIVITY_RULES: Dict[str, Dict[str, Any]] = {
    "run": {"name": "Brisk Walk/Jog/Run", "fields": ["distance"], "min_distance": 4.0},
    "gym": {"name": "Weightlifting / Gym Workout", "fields": ["duration"], "min_duration": 45},
    "yoga": {"name": "Yoga/Pilates/Zumba", "fields": ["duration"], "min_duration": 45},
    "cycling": {
        "name": "Cycling",
        "fields": ["duration", "distance"],
        "min_duration": 45,
        "min_distance": 10.0,
    },
    "swimming": {"name": "Swimming", "fields": ["duration"], "min_duration": 45},
    "horse_riding": {"name": "Horse Riding", "fields": ["duration"], "min_duration": 45},
    "badminton_pickleball": {"name": "Badminton/Pickleball", "fields": ["duration"], "min_duration": 45},
    "basketball_cricket": {"name": "Basketball/Cricket", "fields": ["duration"], "min_duration": 45},
    "meditation": {"name": "Meditation/Chanting/Breathing", "fields": ["duration"], "min_duration": 45},
    "steps": {"name": "Steps", "fields": ["steps"], "min_steps": 10000},
    "golf": {"name": "Golf", "fields": ["holes"], "min_holes": 9},
}

SENIOR_MIN_DISTANCE_RUN = 2.6

KINDS = ("workout", "rest")


class EntryValidationError(ValueError):
    """Raised when a submitted entry does not meet the activity rules."""


def base_thresholds(senior: bool) -> Tuple[int, int]:
    """Return (base_duration_minutes, base_steps) for the member."""
    if senior:
        return 30, 5000
    return 45, 10000


def _number(value) -> float:
    # Historical rows can carry nulls or strings; treat anything unreadable as 0
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number < 0:
        return 0.0
    return number


def _cap(rr: float) -> float:
    return min(rr, RR_CAP)


def calculate_rr(
    kind: str,
    activity_type: Optional[str] = None,
    duration=None,
    distance=None,
    steps=None,
    holes=None,
    senior: bool = False,
    enforce_floor: bool = False,
) -> float:
    """
    Calculate the Run Rate for one entry.

    Rest days are always 1.0. Workouts scale against the member's baseline
    and are capped at 2.5. With enforce_floor, steps and golf entries below
    their minimum earn 0.
    """
    if kind == "rest":
        return REST_RR

    base_duration, base_steps = base_thresholds(senior)
    minutes = _number(duration)
    km = _number(distance)

    if activity_type == ActivityType.STEPS.value:
        count = _number(steps)
        if enforce_floor and count < base_steps:
            return 0.0
        return _cap(count / base_steps)

    if activity_type == ActivityType.GOLF.value:
        count = _number(holes)
        if enforce_floor and count < GOLF_BASE_HOLES:
            return 0.0
        return _cap(count / GOLF_BASE_HOLES)

    if activity_type == ActivityType.RUN.value:
        return _cap(max(minutes / base_duration, km / RUN_BASE_DISTANCE))

    if activity_type == ActivityType.CYCLING.value:
        return _cap(max(minutes / base_duration, km / CYCLING_BASE_DISTANCE))

    if activity_type in ACTIVITY_RULES:
        return _cap(minutes / base_duration)

    return DEFAULT_RR


def classify_entry(entry, senior: bool = False, enforce_floor: bool = False) -> Tuple[int, float]:
    """
    Return (points, rr) for a logged entry.

    Approved entries earn exactly one point, whatever the effort. The RR stored
    at submission is used unless the floor check has to be re-applied.
    """
    points = 1 if entry.status == "approved" else 0

    if entry.kind == "rest":
        return points, REST_RR

    floor_applies = entry.activity_type in (ActivityType.STEPS.value, ActivityType.GOLF.value)
    if entry.rr_value is None or (enforce_floor and floor_applies):
        rr = calculate_rr(
            entry.kind,
            entry.activity_type,
            duration=entry.duration,
            distance=entry.distance,
            steps=entry.steps,
            holes=entry.holes,
            senior=senior,
            enforce_floor=enforce_floor,
        )
    else:
        rr = _cap(_number(entry.rr_value))

    return points, rr


def _provided(value) -> bool:
    return value is not None and value != ""


def _is_valid_number(value) -> bool:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return number == number and number >= 0


def validate_submission(
    kind: str,
    activity_type: Optional[str] = None,
    duration=None,
    distance=None,
    steps=None,
    holes=None,
    senior: bool = False,
) -> None:
    """Check a new entry against the activity minimums. Raises EntryValidationError."""
    if kind not in KINDS:
        raise EntryValidationError(f"Unknown entry kind: {kind}")

    if kind == "rest":
        return

    if not activity_type:
        raise EntryValidationError("Workout type is required")
    if activity_type not in ACTIVITY_RULES:
        raise EntryValidationError(f"Unknown workout type: {activity_type}")

    for label, value in (("duration", duration), ("distance", distance), ("steps", steps), ("holes", holes)):
        if _provided(value) and not _is_valid_number(value):
            raise EntryValidationError(f"Invalid {label}")

    rule = ACTIVITY_RULES[activity_type]
    base_duration, base_steps = base_thresholds(senior)

    if activity_type == ActivityType.STEPS.value:
        if not _provided(steps) or _number(steps) < base_steps:
            raise EntryValidationError(f"Minimum {base_steps:,} steps required")
        return

    if activity_type == ActivityType.GOLF.value:
        if not _provided(holes) or _number(holes) < rule["min_holes"]:
            raise EntryValidationError(f"Minimum {rule['min_holes']} holes required")
        return

    if activity_type == ActivityType.RUN.value:
        min_distance = SENIOR_MIN_DISTANCE_RUN if senior else rule["min_distance"]
        if not _provided(distance) or _number(distance) < min_distance:
            raise EntryValidationError(f"Minimum {min_distance} kms required for {rule['name']}")
        return

    if activity_type == ActivityType.CYCLING.value:
        if _provided(duration) and _provided(distance):
            raise EntryValidationError("Please provide only one: Duration OR Distance")
        duration_ok = _provided(duration) and _number(duration) >= base_duration
        distance_ok = _provided(distance) and _number(distance) >= rule["min_distance"]
        if not (duration_ok or distance_ok):
            raise EntryValidationError(
                f"Minimum {base_duration} mins OR {rule['min_distance']:g} kms required"
            )
        return

    if not _provided(duration) or _number(duration) < base_duration:
        raise EntryValidationError(f"Minimum {base_duration} mins required")


def needs_verification(activity_type: Optional[str], duration=None, senior: bool = False) -> bool:
    """True when a duration-based workout is long enough to be spot-checked."""
    if activity_type in (ActivityType.STEPS.value, ActivityType.GOLF.value, ActivityType.MEDITATION.value):
        return False
    if activity_type not in ACTIVITY_RULES:
        return False
    base_duration, _ = base_thresholds(senior)
    return _number(duration) / base_duration > VERIFICATION_RR
