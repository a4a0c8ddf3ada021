"""Coverage and leadership validation over a whole cycle.

Every (date, shift type) slot in the cycle is checked, including slots with no
assignments at all. Per slot:

  under_coverage   active coverage below the minimum
  over_coverage    active coverage above the maximum
  missing_lead     no lead-role assignment, or nobody counting toward coverage
                   is lead eligible
  multiple_leads   more than one lead-role assignment
  ineligible_lead  a lead-role assignment held by a non-eligible therapist

A non-eligible designated lead therefore raises both missing_lead and
ineligible_lead on the same slot. Totals count flags, not slots.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Sequence

from constants import (
    MAX_SHIFT_COVERAGE_PER_DAY,
    MIN_SHIFT_COVERAGE_PER_DAY,
    SHIFT_TYPES,
    SLOT_ISSUE_PRIORITY,
)
from models import ShiftAssignment, SlotIssue
from utils import coverage_slot_key
from logger import get_logger

logger = get_logger('coverage_validation')


@dataclass
class SlotValidationResult:
    under_coverage: int = 0
    over_coverage: int = 0
    missing_lead: int = 0
    multiple_leads: int = 0
    ineligible_lead: int = 0
    issues: list[SlotIssue] = field(default_factory=list)

    @property
    def violations(self) -> int:
        return (
            self.under_coverage
            + self.over_coverage
            + self.missing_lead
            + self.multiple_leads
            + self.ineligible_lead
        )

    def counts(self) -> dict[str, int]:
        return {
            'under_coverage': self.under_coverage,
            'over_coverage': self.over_coverage,
            'missing_lead': self.missing_lead,
            'multiple_leads': self.multiple_leads,
            'ineligible_lead': self.ineligible_lead,
            'violations': self.violations,
        }

    def issue_for(self, slot_key: str):
        for issue in self.issues:
            if issue.slot_key == slot_key:
                return issue
        return None


@dataclass
class CoverageValidationResult:
    under_coverage: int = 0
    over_coverage: int = 0

    @property
    def violations(self) -> int:
        return self.under_coverage + self.over_coverage


def exceeds_coverage_limit(active_coverage: int, max_coverage_per_shift: int) -> bool:
    """True when adding one more therapist would push the slot past its maximum."""
    return active_coverage >= max_coverage_per_shift


def group_by_slot(assignments: Iterable[ShiftAssignment]) -> dict[str, list[ShiftAssignment]]:
    grouped: dict[str, list[ShiftAssignment]] = defaultdict(list)
    for assignment in assignments:
        grouped[coverage_slot_key(assignment.date, assignment.shift_type)].append(assignment)
    return grouped


def slot_reasons(
    slot_assignments: Sequence[ShiftAssignment],
    min_coverage_per_shift: int,
    max_coverage_per_shift: int,
) -> list[str]:
    """Violation reasons for the assignments of a single slot, in check order."""
    active = [a for a in slot_assignments if a.counts_toward_coverage]
    leads = [a for a in slot_assignments if a.is_lead]
    active_coverage = len(active)

    reasons = []
    if active_coverage < min_coverage_per_shift:
        reasons.append('under_coverage')
    if active_coverage > max_coverage_per_shift:
        reasons.append('over_coverage')
    if not leads or not any(a.is_lead_eligible for a in active):
        reasons.append('missing_lead')
    if len(leads) > 1:
        reasons.append('multiple_leads')
    if any(not a.is_lead_eligible for a in leads):
        reasons.append('ineligible_lead')
    return reasons


def summarize_shift_slot_violations(
    cycle_dates: Iterable[date],
    assignments: Iterable[ShiftAssignment],
    min_coverage_per_shift: int = MIN_SHIFT_COVERAGE_PER_DAY,
    max_coverage_per_shift: int = MAX_SHIFT_COVERAGE_PER_DAY,
) -> SlotValidationResult:
    """Scan every cycle slot and report per-slot issues plus aggregate counts.

    Issues come out in date order, day before night, so the first issue is the
    earliest slot a caller should jump to.
    """
    by_slot = group_by_slot(assignments)
    result = SlotValidationResult()

    for day in cycle_dates:
        for shift_type in SHIFT_TYPES:
            slot_key = coverage_slot_key(day, shift_type)
            slot_assignments = by_slot.get(slot_key, [])
            reasons = slot_reasons(slot_assignments, min_coverage_per_shift, max_coverage_per_shift)
            if not reasons:
                continue

            for reason in reasons:
                setattr(result, reason, getattr(result, reason) + 1)

            lead = next((a for a in slot_assignments if a.is_lead), None)
            result.issues.append(SlotIssue(
                slot_key=slot_key,
                date=day,
                shift_type=shift_type,
                reasons=reasons,
                lead_name=lead.therapist_name if lead else None,
            ))

    logger.debug(f"Slot validation: {result.counts()}")
    return result


def summarize_coverage_violations(
    cycle_dates: Iterable[date],
    coverage_by_slot: Mapping[str, int],
    min_coverage_per_shift: int = MIN_SHIFT_COVERAGE_PER_DAY,
    max_coverage_per_shift: int = MAX_SHIFT_COVERAGE_PER_DAY,
) -> CoverageValidationResult:
    """Coverage-only counterpart of summarize_shift_slot_violations for precounted slots."""
    result = CoverageValidationResult()
    for day in cycle_dates:
        for shift_type in SHIFT_TYPES:
            count = coverage_by_slot.get(coverage_slot_key(day, shift_type), 0)
            if count < min_coverage_per_shift:
                result.under_coverage += 1
            if count > max_coverage_per_shift:
                result.over_coverage += 1
    return result


def primary_reason(issue: SlotIssue) -> str:
    """The reason a navigation UI should label this slot with."""
    for reason in SLOT_ISSUE_PRIORITY:
        if reason in issue.reasons:
            return reason
    return issue.reasons[0] if issue.reasons else 'missing_lead'
