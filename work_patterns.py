"""Recurring weekly work-pattern evaluation.

A pattern answers one question for one calendar date: may this therapist be
scheduled, and at what soft cost. The checks run in a fixed order and the first
one that blocks wins:

  1) offs_dow              - never-work weekdays, absolute
  2) every-other weekend   - alternating weekends anchored on a Saturday
  3) works_dow             - hard mode blocks other days, soft mode penalizes them

Weekday indexes are Sunday=0 .. Saturday=6 throughout.
"""

from __future__ import annotations

from datetime import date

from constants import SOFT_NON_WORKS_DAY_PENALTY
from models import Decision, WorkPattern, normalize_dow_values
from utils import weekday_index, weekend_saturday_for

__all__ = [
    'is_allowed_by_pattern',
    'is_weekend_on',
    'normalize_dow_values',
    'normalize_work_pattern',
    'shift_type_matches',
]


def normalize_work_pattern(raw: dict, therapist_id: str | None = None) -> WorkPattern:
    """Build a WorkPattern from a raw store record (unknown modes fall back to hard/none)."""
    return WorkPattern.from_dict(raw, therapist_id=therapist_id)


def is_weekend_on(pattern: WorkPattern, day: date) -> bool:
    """Whether the weekend containing day is a working weekend for the pattern.

    Weekdays and patterns without an alternating rotation are always "on". With
    the rotation enabled, a weekend is on when its Saturday is a whole even
    number of weeks from the anchor Saturday. A rotation without a usable
    anchor has no on weekends.
    """
    weekend_saturday = weekend_saturday_for(day)
    if weekend_saturday is None:
        return True
    if pattern.weekend_rotation != 'every_other':
        return True

    anchor = pattern.weekend_anchor_date
    anchor_saturday = weekend_saturday_for(anchor) if anchor else None
    if anchor_saturday is None:
        return False

    diff_days = (weekend_saturday - anchor_saturday).days
    return diff_days % 14 == 0


def is_allowed_by_pattern(pattern: WorkPattern, day: date) -> Decision:
    weekday = weekday_index(day)

    if weekday in pattern.offs_dow:
        return Decision(allowed=False, reason='blocked_offs_dow')

    if (
        pattern.weekend_rotation == 'every_other'
        and weekend_saturday_for(day) is not None
        and not is_weekend_on(pattern, day)
    ):
        return Decision(allowed=False, reason='blocked_every_other_weekend')

    # An empty works_dow list carries no weekday preference.
    outside_works_dow = bool(pattern.works_dow) and weekday not in pattern.works_dow
    if outside_works_dow:
        if pattern.works_dow_mode == 'hard':
            return Decision(allowed=False, reason='blocked_outside_works_dow_hard')
        return Decision(
            allowed=True,
            reason='soft_outside_works_dow',
            penalty=SOFT_NON_WORKS_DAY_PENALTY,
        )

    return Decision(allowed=True, reason='allowed')


def shift_type_matches(scope: str, shift_type: str) -> bool:
    """True if an override scoped to scope applies to shift_type."""
    return scope == 'both' or scope == shift_type
