"""Weekly workload rule used as the publish-time gate.

For every therapist and every Sunday-Saturday week touching the cycle, the
number of dates worked is compared with

    required = min(weekly limit, days of that week inside the cycle)

so the requirement shrinks for the partial weeks at either end of a cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from constants import MAX_WORK_DAYS_PER_WEEK
from models import ScheduleCycle
from utils import build_date_range, week_start_for, weekly_count_key
from logger import get_logger

logger = get_logger('weekly_rules')


@dataclass
class WeeklyRuleResult:
    under_count: int = 0
    over_count: int = 0

    @property
    def violations(self) -> int:
        return self.under_count + self.over_count


def exceeds_weekly_limit(worked_dates, target_date: date, max_work_days_per_week: int) -> bool:
    """True if working target_date would add a new day beyond the weekly limit."""
    return target_date not in worked_dates and len(worked_dates) >= max_work_days_per_week


def build_cycle_week_dates(cycle: ScheduleCycle) -> dict[date, set[date]]:
    """week_start -> the dates of that week that fall inside the cycle."""
    weeks: dict[date, set[date]] = {}
    for day in build_date_range(cycle.start_date, cycle.end_date):
        weeks.setdefault(week_start_for(day), set()).add(day)
    return weeks


def summarize_publish_weekly_violations(
    therapist_ids: Iterable[str],
    cycle_week_dates: Mapping[date, set],
    weekly_worked_dates: Mapping[tuple[str, date], set],
    max_work_days_per_week: int = MAX_WORK_DAYS_PER_WEEK,
    weekly_limit_by_therapist: Optional[Mapping[str, int]] = None,
) -> WeeklyRuleResult:
    """Count therapist-weeks under and over their required worked-day count.

    Args:
        therapist_ids: therapists subject to the rule
        cycle_week_dates: week_start -> dates of the week inside the cycle
        weekly_worked_dates: (therapist_id, week_start) -> dates worked
        max_work_days_per_week: limit for therapists missing from
            weekly_limit_by_therapist
        weekly_limit_by_therapist: personal weekly limits
    """
    limits = weekly_limit_by_therapist or {}
    result = WeeklyRuleResult()

    for therapist_id in therapist_ids:
        limit = limits.get(therapist_id, max_work_days_per_week)
        for week_start, week_dates_in_cycle in cycle_week_dates.items():
            required = min(limit, len(week_dates_in_cycle))
            worked_count = len(weekly_worked_dates.get(weekly_count_key(therapist_id, week_start), ()))
            if worked_count < required:
                result.under_count += 1
            if worked_count > required:
                result.over_count += 1

    logger.debug(f"Weekly rule: {result.under_count} under, {result.over_count} over")
    return result
