"""Round-robin assignment heuristic.

``pick_therapist_for_date`` fills one seat of one (date, shift type) slot. It
is deterministic and side-effect free: the rotation cursor is passed in and
handed back, and the caller records the pick in its own working sets before
asking again. ``fill_coverage_slot`` is that caller for a single slot.

Candidate ranking among the eligible, in order:
  1) weekday preference matches the date
  2) fewer dates already worked in the date's Sunday-Saturday week
  3) closer to the cursor in scan order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Sequence

from constants import NO_ELIGIBLE_CANDIDATES_REASON, sanitize_weekly_limit
from models import Pick, Therapist
from utils import week_start_for, weekday_index, weekly_count_key
from logger import get_logger

logger = get_logger('assignment_selector')

WeeklyWorkedDates = Mapping[tuple[str, date], set]


def weekly_limit_for(therapist: Therapist, weekly_limit_by_therapist: Optional[Mapping[str, int]] = None) -> int:
    """Therapist's weekly limit, with an optional per-run override map."""
    if weekly_limit_by_therapist is None or therapist.id not in weekly_limit_by_therapist:
        return therapist.max_work_days_per_week
    return sanitize_weekly_limit(weekly_limit_by_therapist[therapist.id], therapist.max_work_days_per_week)


def pick_therapist_for_date(
    therapists: Sequence[Therapist],
    cursor: int,
    day: date,
    unavailable_dates_by_therapist: Mapping[str, set],
    assigned_ids_for_date: set,
    weekly_worked_dates: WeeklyWorkedDates,
    weekly_limit_by_therapist: Optional[Mapping[str, int]] = None,
) -> Pick:
    """Choose the next therapist for one seat on day.

    Args:
        therapists: ordered candidate list (the rotation)
        cursor: index the scan starts at; every candidate is visited once
        unavailable_dates_by_therapist: dates each therapist may not work
        assigned_ids_for_date: therapists already placed anywhere on day
        weekly_worked_dates: (therapist_id, week_start) -> dates already worked
        weekly_limit_by_therapist: optional overrides of the per-therapist limit

    Returns:
        Pick with the chosen therapist and the index after it, or
        Pick(None, cursor) when nobody qualifies
    """
    count = len(therapists)
    if count == 0:
        return Pick(therapist=None, next_cursor=cursor)

    week_start = week_start_for(day)
    weekday = weekday_index(day)

    # Scan order is offset order, so only a strictly better candidate replaces best.
    best = None  # (prefers_day, weekly_count, index)
    for offset in range(count):
        index = (cursor + offset) % count
        therapist = therapists[index]

        if therapist.id in assigned_ids_for_date:
            continue
        if day in unavailable_dates_by_therapist.get(therapist.id, ()):
            continue

        preferred_days = therapist.preferred_work_days
        # PRN therapists with listed weekdays only work those weekdays.
        if therapist.is_prn and preferred_days and weekday not in preferred_days:
            continue

        worked = weekly_worked_dates.get(weekly_count_key(therapist.id, week_start), ())
        limit = weekly_limit_for(therapist, weekly_limit_by_therapist)
        if day not in worked and len(worked) >= limit:
            continue

        prefers_day = not preferred_days or weekday in preferred_days
        weekly_count = len(worked)
        if (
            best is None
            or (prefers_day and not best[0])
            or (prefers_day == best[0] and weekly_count < best[1])
        ):
            best = (prefers_day, weekly_count, index)

    if best is None:
        return Pick(therapist=None, next_cursor=cursor)

    index = best[2]
    return Pick(therapist=therapists[index], next_cursor=(index + 1) % count)


def record_pick(
    therapist_id: str,
    day: date,
    assigned_ids_for_date: set,
    weekly_worked_dates: dict,
) -> None:
    """Update the caller's working sets after a successful pick."""
    assigned_ids_for_date.add(therapist_id)
    key = weekly_count_key(therapist_id, week_start_for(day))
    weekly_worked_dates.setdefault(key, set()).add(day)


@dataclass
class FillResult:
    """Outcome of filling one slot up to its target coverage."""
    picked: list[Therapist] = field(default_factory=list)
    next_cursor: int = 0
    coverage: int = 0
    unfilled_count: int = 0
    unfilled_reason: Optional[str] = None


def fill_coverage_slot(
    therapists: Sequence[Therapist],
    cursor: int,
    day: date,
    shift_type: str,
    unavailable_dates_by_therapist: Mapping[str, set],
    assigned_ids_for_date: set,
    weekly_worked_dates: dict,
    current_coverage: int,
    target_coverage: int,
    min_coverage: int,
    weekly_limit_by_therapist: Optional[Mapping[str, int]] = None,
) -> FillResult:
    """Pick therapists for one slot until target_coverage or no candidate is left.

    assigned_ids_for_date and weekly_worked_dates are updated in place after
    every pick. A slot that ends below min_coverage reports how many seats stay
    open and why.
    """
    coverage = current_coverage
    picked: list[Therapist] = []

    while coverage < target_coverage:
        pick = pick_therapist_for_date(
            therapists,
            cursor,
            day,
            unavailable_dates_by_therapist,
            assigned_ids_for_date,
            weekly_worked_dates,
            weekly_limit_by_therapist,
        )
        cursor = pick.next_cursor
        if pick.therapist is None:
            break

        picked.append(pick.therapist)
        record_pick(pick.therapist.id, day, assigned_ids_for_date, weekly_worked_dates)
        coverage += 1

    if coverage >= min_coverage:
        return FillResult(picked=picked, next_cursor=cursor, coverage=coverage)

    logger.debug(f"{day} {shift_type}: {min_coverage - coverage} seat(s) left open")
    return FillResult(
        picked=picked,
        next_cursor=cursor,
        coverage=coverage,
        unfilled_count=min_coverage - coverage,
        unfilled_reason=NO_ELIGIBLE_CANDIDATES_REASON,
    )
