"""Availability resolution for one (therapist, date, shift type).

Layers, first match wins:
  1) employment status   - inactive, then on leave (FMLA)
  2) date overrides      - force_off / force_on for the cycle, exact shift scope
                           preferred over a 'both' scope; force_on bypasses the
                           recurring pattern entirely
  3) recurring pattern   - delegated to work_patterns.is_allowed_by_pattern

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from constants import OVERRIDE_FORCE_OFF, OVERRIDE_FORCE_ON
from models import AvailabilityOverride, Decision, Therapist, WorkPattern
from work_patterns import is_allowed_by_pattern, shift_type_matches
from logger import get_logger

logger = get_logger('availability')

REASON_LABELS = {
    'override_force_off': 'Force off override',
    'override_force_on': 'Force on override',
    'blocked_offs_dow': 'Never works this weekday',
    'blocked_every_other_weekend': 'Off weekend by alternating rotation',
    'blocked_outside_works_dow_hard': 'Outside hard works-day rule',
    'soft_outside_works_dow': 'Outside preferred work days',
    'inactive': 'Inactive therapist',
    'on_fmla': 'Therapist on FMLA',
}


def find_matching_override(
    overrides: Iterable[AvailabilityOverride],
    therapist_id: str,
    cycle_id: str,
    day: date,
    shift_type: str,
) -> Optional[AvailabilityOverride]:
    """Return the override governing this slot, or None.

    An override scoped exactly to shift_type beats a 'both' override; among
    equally scoped overrides the first one in input order wins.
    """
    fallback = None
    for override in overrides:
        if (
            override.therapist_id != therapist_id
            or override.cycle_id != cycle_id
            or override.date != day
            or not shift_type_matches(override.shift_type, shift_type)
        ):
            continue
        if override.shift_type == shift_type:
            return override
        if fallback is None:
            fallback = override
    return fallback


def resolve_availability(
    therapist_id: str,
    cycle_id: str,
    day: date,
    shift_type: str,
    is_active: bool,
    on_fmla: bool,
    pattern: Optional[WorkPattern],
    overrides: Iterable[AvailabilityOverride],
) -> Decision:
    """Final allow/deny decision for one therapist on one date and shift type.

    Args:
        shift_type: 'day' or 'night' (never 'both')
        pattern: recurring rule, None meaning no recurring constraint
        overrides: override records; only those for this therapist, cycle and
            date are considered

    Returns:
        Decision with a machine-readable reason, the soft penalty and the note
        of the override that decided it (if any)
    """
    if not is_active:
        return Decision(allowed=False, reason='inactive')

    if on_fmla:
        return Decision(allowed=False, reason='on_fmla')

    override = find_matching_override(overrides, therapist_id, cycle_id, day, shift_type)
    if override is not None and override.override_type == OVERRIDE_FORCE_OFF:
        return Decision(allowed=False, reason='override_force_off', override_note=override.note)
    if override is not None and override.override_type == OVERRIDE_FORCE_ON:
        return Decision(allowed=True, reason='override_force_on', override_note=override.note)

    if pattern is None:
        return Decision(allowed=True, reason='allowed')

    return is_allowed_by_pattern(pattern, day)


def resolve_eligibility(
    therapist: Therapist,
    cycle_id: str,
    day: date,
    shift_type: str,
    overrides: Iterable[AvailabilityOverride],
) -> Decision:
    """resolve_availability for a normalized Therapist record."""
    return resolve_availability(
        therapist.id,
        cycle_id,
        day,
        shift_type,
        is_active=therapist.is_active,
        on_fmla=therapist.on_fmla,
        pattern=therapist.pattern,
        overrides=overrides,
    )


def format_reason(reason: str) -> Optional[str]:
    """Human label for a blocking or noteworthy reason; None for plain 'allowed'."""
    return REASON_LABELS.get(reason)


def group_overrides_by_therapist(
    overrides: Iterable[AvailabilityOverride],
) -> dict[str, list[AvailabilityOverride]]:
    grouped: dict[str, list[AvailabilityOverride]] = defaultdict(list)
    for override in overrides:
        grouped[override.therapist_id].append(override)
    return dict(grouped)


def build_unavailable_dates(
    therapists: Iterable[Therapist],
    cycle_id: str,
    days: Iterable[date],
    shift_type: str,
    overrides: Iterable[AvailabilityOverride],
) -> dict[str, set[date]]:
    """Precompute, per therapist, the dates the resolver denies for shift_type.

    Soft-penalized days stay available; only denials land in the set. The
    Assignment Selector consumes this map instead of calling the resolver in
    its inner loop.
    """
    days = list(days)
    by_therapist = group_overrides_by_therapist(overrides)
    unavailable: dict[str, set[date]] = {}
    for therapist in therapists:
        own = by_therapist.get(therapist.id, [])
        blocked = set()
        for day in days:
            decision = resolve_eligibility(therapist, cycle_id, day, shift_type, own)
            if not decision.allowed:
                blocked.add(day)
        unavailable[therapist.id] = blocked
        if blocked:
            logger.debug(f"{therapist.id} unavailable for {shift_type} on {len(blocked)} of {len(days)} dates")
    return unavailable
