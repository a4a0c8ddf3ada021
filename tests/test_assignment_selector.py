"""
Tests for assignment_selector.py - round-robin candidate selection
"""

import pytest
from datetime import date
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from availability import build_unavailable_dates
from assignment_selector import (
    fill_coverage_slot,
    pick_therapist_for_date,
    record_pick,
    weekly_limit_for,
)
from utils import build_date_range, week_start_for
from conftest import make_therapist

MONDAY = date(2026, 3, 2)
WEEK = date(2026, 3, 1)


def pick(therapists, cursor=0, day=MONDAY, unavailable=None, assigned=None, worked=None, limits=None):
    return pick_therapist_for_date(
        therapists, cursor, day, unavailable or {}, assigned or set(), worked or {}, limits
    )


class TestPickBasics:
    """Scan, skip and cursor behavior."""

    def test_empty_candidates(self):
        result = pick([], cursor=2)
        assert result.therapist is None
        assert result.next_cursor == 2

    def test_picks_at_cursor(self, day_team):
        result = pick(day_team, cursor=1)
        assert result.therapist.id == 'T2'
        assert result.next_cursor == 2

    def test_cursor_wraps(self, day_team):
        result = pick(day_team, cursor=3)
        assert result.therapist.id == 'T4'
        assert result.next_cursor == 0

    def test_skips_assigned_today(self, day_team):
        assert pick(day_team, assigned={'T1'}).therapist.id == 'T2'

    def test_skips_unavailable(self, day_team):
        assert pick(day_team, unavailable={'T1': {MONDAY}}).therapist.id == 'T2'

    def test_nobody_qualifies_keeps_cursor(self, day_team):
        result = pick(day_team, cursor=2, assigned={'T1', 'T2', 'T3', 'T4'})
        assert result.therapist is None
        assert result.next_cursor == 2

    def test_deterministic(self, day_team):
        """Identical inputs give identical results."""
        worked = {('T1', WEEK): {date(2026, 3, 1)}}
        first = pick(day_team, cursor=1, worked=worked, assigned={'T3'})
        second = pick(day_team, cursor=1, worked=worked, assigned={'T3'})
        assert first == second

    def test_does_not_mutate_inputs(self, day_team):
        assigned = {'T3'}
        worked = {('T1', WEEK): {date(2026, 3, 1)}}
        pick(day_team, assigned=assigned, worked=worked)
        assert assigned == {'T3'}
        assert worked == {('T1', WEEK): {date(2026, 3, 1)}}


class TestWeeklyLimit:
    """Candidates at their weekly limit are skipped."""

    def test_at_limit_skipped(self, day_team):
        worked = {('T1', WEEK): {date(2026, 3, 1), date(2026, 3, 3), date(2026, 3, 4)}}
        assert pick(day_team, worked=worked).therapist.id == 'T2'

    def test_same_date_already_worked_not_blocked(self):
        """A date already in the week's set adds no new worked day."""
        therapist = make_therapist('T1', employment_type='prn')
        worked = {('T1', WEEK): {MONDAY}}
        assert pick([therapist], worked=worked).therapist.id == 'T1'

    def test_per_run_limit_override(self, day_team):
        worked = {('T1', WEEK): {date(2026, 3, 1)}}
        assert pick(day_team, worked=worked, limits={'T1': 1}).therapist.id == 'T2'

    def test_weekly_limit_for(self):
        therapist = make_therapist('T1', employment_type='part_time')
        assert weekly_limit_for(therapist) == 2
        assert weekly_limit_for(therapist, {'T1': 5}) == 5
        assert weekly_limit_for(therapist, {'T1': 0}) == 2


class TestRanking:
    """Preference, then weekly count, then scan order."""

    def test_lower_weekly_count_wins(self, day_team):
        worked = {('T1', WEEK): {date(2026, 3, 1)}}
        assert pick(day_team, worked=worked).therapist.id == 'T2'

    def test_preferred_weekday_beats_lower_count(self):
        therapists = [
            make_therapist('T1', preferred_work_days=[3, 4]),
            make_therapist('T2', preferred_work_days=[1]),
        ]
        worked = {('T2', WEEK): {date(2026, 3, 1)}}
        result = pick(therapists, worked=worked)
        assert result.therapist.id == 'T2'
        assert result.next_cursor == 0

    def test_no_preference_counts_as_match(self):
        therapists = [
            make_therapist('T1', preferred_work_days=[4]),
            make_therapist('T2'),
        ]
        assert pick(therapists).therapist.id == 'T2'

    def test_scan_order_breaks_ties(self, day_team):
        assert pick(day_team, cursor=2).therapist.id == 'T3'


class TestPrn:
    """PRN therapists with listed weekdays only work those days."""

    def test_prn_off_listed_day_skipped(self):
        prn = make_therapist('P1', employment_type='prn', preferred_work_days=[6])
        assert pick([prn]).therapist is None

    def test_prn_on_listed_day(self):
        prn = make_therapist('P1', employment_type='prn', preferred_work_days=[1])
        assert pick([prn]).therapist.id == 'P1'

    def test_prn_without_listed_days_not_restricted(self):
        prn = make_therapist('P1', employment_type='prn')
        assert pick([prn]).therapist.id == 'P1'

    def test_full_time_off_preference_still_eligible(self):
        therapist = make_therapist('T1', preferred_work_days=[6])
        assert pick([therapist]).therapist.id == 'T1'


class TestFillCoverageSlot:
    """Tests for fill_coverage_slot."""

    def test_fills_to_target(self, day_team):
        assigned = set()
        worked = {}
        result = fill_coverage_slot(day_team, 0, MONDAY, 'day', {}, assigned, worked, 0, 3, 3)
        assert [t.id for t in result.picked] == ['T1', 'T2', 'T3']
        assert result.next_cursor == 3
        assert result.coverage == 3
        assert result.unfilled_count == 0
        assert result.unfilled_reason is None
        assert assigned == {'T1', 'T2', 'T3'}
        assert worked[('T2', WEEK)] == {MONDAY}

    def test_existing_coverage_counts(self, day_team):
        result = fill_coverage_slot(day_team, 0, MONDAY, 'day', {}, set(), {}, 2, 3, 3)
        assert len(result.picked) == 1

    def test_reports_unfilled(self, day_team):
        unavailable = {'T1': {MONDAY}, 'T2': {MONDAY}, 'T3': {MONDAY}}
        result = fill_coverage_slot(day_team, 0, MONDAY, 'day', unavailable, set(), {}, 0, 3, 3)
        assert [t.id for t in result.picked] == ['T4']
        assert result.unfilled_count == 2
        assert result.unfilled_reason == 'no_eligible_candidates_due_to_constraints'

    def test_record_pick(self):
        assigned = set()
        worked = {}
        record_pick('T1', MONDAY, assigned, worked)
        record_pick('T1', date(2026, 3, 3), assigned, worked)
        assert assigned == {'T1'}
        assert worked == {('T1', WEEK): {MONDAY, date(2026, 3, 3)}}


class TestGenerationRun:
    """Selector driven across whole cycles."""

    def test_hard_weekday_worker_two_weeks(self):
        """Mon-Fri hard pattern, limit 3: at most 3 per week, never a weekend or Sunday."""
        worker = make_therapist('T1', pattern={'works_dow': [1, 2, 3, 4, 5], 'works_dow_mode': 'hard'})
        days = build_date_range(date(2026, 3, 1), date(2026, 3, 14))
        unavailable = build_unavailable_dates([worker], 'C1', days, 'day', [])
        worked = {}
        cursor = 0
        picked_days = []
        for day in days:
            result = pick_therapist_for_date([worker], cursor, day, unavailable, set(), worked)
            cursor = result.next_cursor
            if result.therapist is not None:
                record_pick(result.therapist.id, day, set(), worked)
                picked_days.append(day)

        assert picked_days == [
            date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 4),
            date(2026, 3, 9), date(2026, 3, 10), date(2026, 3, 11),
        ]
        for blocked in (date(2026, 3, 1), date(2026, 3, 7), date(2026, 3, 8)):
            assert blocked not in picked_days
        assert all(len(dates) <= 3 for dates in worked.values())

    def test_weekly_counts_stay_balanced(self):
        """Equal limits, no PRN: weekly counts differ by at most one."""
        therapists = [make_therapist(f'T{i}') for i in range(1, 6)]
        days = build_date_range(date(2026, 3, 1), date(2026, 3, 14))
        worked = {}
        cursor = 0
        for day in days:
            fill = fill_coverage_slot(therapists, cursor, day, 'day', {}, set(), worked, 0, 2, 2)
            cursor = fill.next_cursor

        for week_start in {week_start_for(d) for d in days}:
            counts = [len(worked.get((t.id, week_start), ())) for t in therapists]
            assert max(counts) - min(counts) <= 1
            assert max(counts) <= 3
