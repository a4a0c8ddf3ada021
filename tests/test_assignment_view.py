"""
Tests for assignment_view.py - assignment indexes
"""

import pytest
from datetime import date
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from assignment_view import AssignmentView
from conftest import make_assignment


@pytest.fixture
def view():
    return AssignmentView.of([
        make_assignment(date(2026, 3, 2), 'day', 'T1'),
        make_assignment(date(2026, 3, 2), 'night', 'T2', status='on_call'),
        make_assignment(date(2026, 3, 3), 'day', 'T1', status='sick'),
        make_assignment(date(2026, 3, 9), 'day', 'T1', cycle_id='C2'),
    ])


class TestAssignmentView:
    """Tests for filters and indexes."""

    def test_len_and_iter(self, view):
        assert len(view) == 4
        assert [a.therapist_id for a in view] == ['T1', 'T2', 'T1', 'T1']

    def test_of_none(self):
        assert len(AssignmentView.of(None)) == 0

    def test_for_cycle(self, view):
        assert len(view.for_cycle('C2')) == 1

    def test_between(self, view):
        assert len(view.between(date(2026, 3, 2), date(2026, 3, 3))) == 3

    def test_for_therapists(self, view):
        assert len(view.for_therapists(['T2'])) == 1

    def test_assigned_ids_include_any_status(self, view):
        by_date = view.assigned_ids_by_date()
        assert by_date[date(2026, 3, 3)] == {'T1'}
        assert by_date[date(2026, 3, 2)] == {'T1', 'T2'}

    def test_coverage_skips_inactive(self, view):
        assert view.coverage_by_slot() == {
            '2026-03-02:day': 1,
            '2026-03-02:night': 1,
            '2026-03-09:day': 1,
        }

    def test_weekly_worked_dates(self, view):
        worked = view.weekly_worked_dates()
        assert worked[('T1', date(2026, 3, 1))] == {date(2026, 3, 2)}
        assert worked[('T1', date(2026, 3, 8))] == {date(2026, 3, 9)}
        assert worked[('T2', date(2026, 3, 1))] == {date(2026, 3, 2)}

    def test_find(self, view):
        assert view.find('T2', date(2026, 3, 2)).shift_type == 'night'
        assert view.find('T2', date(2026, 3, 3)) is None

    def test_by_therapist(self, view):
        grouped = view.by_therapist()
        assert len(grouped['T1']) == 3
        assert len(grouped['T2']) == 1
