"""
Tests for coverage_validation.py - slot coverage and leadership checks
"""

import pytest
from datetime import date
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import SlotIssue
from coverage_validation import (
    exceeds_coverage_limit,
    primary_reason,
    slot_reasons,
    summarize_coverage_violations,
    summarize_shift_slot_violations,
)
from conftest import make_assignment

DAY = date(2026, 3, 2)


def staffed_slot(shift_type='day', lead_eligible=True, extra=2, day=DAY):
    """One lead plus `extra` staff on one slot."""
    slot = [make_assignment(day, shift_type, 'L1', role='lead', name='Lena', lead_eligible=lead_eligible)]
    slot += [make_assignment(day, shift_type, f'S{i}') for i in range(extra)]
    return slot


class TestSlotReasons:
    """Per-slot flag rules."""

    def test_empty_slot(self):
        """An empty slot is under coverage and missing a lead."""
        assert slot_reasons([], 3, 5) == ['under_coverage', 'missing_lead']

    def test_clean_slot(self):
        assert slot_reasons(staffed_slot(), 3, 5) == []

    def test_over_coverage(self):
        assert slot_reasons(staffed_slot(extra=5), 3, 5) == ['over_coverage']

    def test_inactive_statuses_do_not_count(self):
        slot = staffed_slot(extra=1) + [make_assignment(DAY, 'day', 'S9', status='sick')]
        assert slot_reasons(slot, 3, 5) == ['under_coverage']

    def test_on_call_counts(self):
        slot = staffed_slot(extra=1) + [make_assignment(DAY, 'day', 'S9', status='on_call')]
        assert slot_reasons(slot, 3, 5) == []

    def test_no_lead_role(self):
        slot = [make_assignment(DAY, 'day', f'S{i}', lead_eligible=True) for i in range(3)]
        assert slot_reasons(slot, 3, 5) == ['missing_lead']

    def test_multiple_leads(self):
        slot = staffed_slot(extra=1) + [make_assignment(DAY, 'day', 'L2', role='lead', lead_eligible=True)]
        assert slot_reasons(slot, 3, 5) == ['multiple_leads']

    def test_ineligible_lead_double_flagged(self):
        """A non-eligible lead with no eligible staff raises missing_lead and ineligible_lead."""
        assert slot_reasons(staffed_slot(lead_eligible=False), 3, 5) == ['missing_lead', 'ineligible_lead']

    def test_ineligible_lead_with_eligible_staff(self):
        slot = staffed_slot(lead_eligible=False, extra=1) + [make_assignment(DAY, 'day', 'S9', lead_eligible=True)]
        assert slot_reasons(slot, 3, 5) == ['ineligible_lead']

    def test_sick_lead_leaves_slot_without_eligible_coverage(self):
        slot = [make_assignment(DAY, 'day', 'L1', role='lead', status='sick', lead_eligible=True)]
        slot += [make_assignment(DAY, 'day', f'S{i}') for i in range(3)]
        assert slot_reasons(slot, 3, 5) == ['missing_lead']


class TestSummarizeShiftSlotViolations:
    """Whole-cycle slot scan."""

    def test_every_slot_checked(self):
        days = [date(2026, 3, 1), date(2026, 3, 2)]
        result = summarize_shift_slot_violations(days, [])
        assert result.under_coverage == 4
        assert result.missing_lead == 4
        assert result.violations == 8
        assert [i.slot_key for i in result.issues] == [
            '2026-03-01:day', '2026-03-01:night', '2026-03-02:day', '2026-03-02:night',
        ]

    def test_clean_cycle(self):
        assignments = staffed_slot('day') + staffed_slot('night')
        result = summarize_shift_slot_violations([DAY], assignments)
        assert result.violations == 0
        assert result.issues == []

    def test_issue_carries_lead_name(self):
        assignments = staffed_slot('day', lead_eligible=False) + staffed_slot('night')
        result = summarize_shift_slot_violations([DAY], assignments)
        issue = result.issue_for('2026-03-02:day')
        assert issue.lead_name == 'Lena'
        assert issue.reasons == ['missing_lead', 'ineligible_lead']
        assert result.issue_for('2026-03-02:night') is None

    def test_assignments_outside_range_ignored(self):
        assignments = staffed_slot('day', day=date(2026, 4, 1))
        result = summarize_shift_slot_violations([DAY], assignments)
        assert result.under_coverage == 2

    def test_custom_bounds(self):
        result = summarize_shift_slot_violations(
            [DAY], staffed_slot('day') + staffed_slot('night'),
            min_coverage_per_shift=4, max_coverage_per_shift=6,
        )
        assert result.under_coverage == 2

    def test_counts_dict(self):
        counts = summarize_shift_slot_violations([DAY], []).counts()
        assert counts == {
            'under_coverage': 2,
            'over_coverage': 0,
            'missing_lead': 2,
            'multiple_leads': 0,
            'ineligible_lead': 0,
            'violations': 4,
        }


class TestCoverageHelpers:
    """Tests for exceeds_coverage_limit, summarize_coverage_violations and primary_reason."""

    def test_exceeds_at_max(self):
        assert exceeds_coverage_limit(5, 5)
        assert not exceeds_coverage_limit(4, 5)

    def test_precounted_coverage(self):
        coverage = {'2026-03-02:day': 3, '2026-03-02:night': 6}
        result = summarize_coverage_violations([DAY], coverage)
        assert result.under_coverage == 0
        assert result.over_coverage == 1
        assert result.violations == 1

    def test_primary_reason_priority(self):
        issue = SlotIssue(slot_key='2026-03-02:day', date=DAY, shift_type='day',
                          reasons=['under_coverage', 'missing_lead'])
        assert primary_reason(issue) == 'missing_lead'
