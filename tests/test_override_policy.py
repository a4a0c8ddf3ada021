"""
Tests for override_policy.py - override write permissions and submission tracking
"""

import pytest
from datetime import date, datetime
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import AvailabilityOverride
from override_policy import (
    build_manager_override,
    build_missing_availability_rows,
    can_therapist_mutate_override,
)
from conftest import make_therapist


def therapist_override(therapist_id='T1', source='therapist', cycle_id='C1', created_at=None):
    return AvailabilityOverride(
        therapist_id=therapist_id,
        cycle_id=cycle_id,
        date=date(2026, 3, 2),
        override_type='force_off',
        source=source,
        created_at=created_at,
    )


class TestCanTherapistMutate:
    """Therapists may only change their own self-entered overrides."""

    def test_own_override(self):
        assert can_therapist_mutate_override(therapist_override(), 'T1')

    def test_someone_elses_override(self):
        assert not can_therapist_mutate_override(therapist_override(), 'T2')

    def test_manager_override_is_read_only(self):
        assert not can_therapist_mutate_override(therapist_override(source='manager'), 'T1')


class TestBuildManagerOverride:
    def test_fields(self):
        override = build_manager_override('C1', 'T1', date(2026, 3, 2), 'night', 'force_on', note='  cover  ')
        assert override.source == 'manager'
        assert override.shift_type == 'night'
        assert override.is_force_on
        assert override.note == 'cover'

    def test_blank_note(self):
        assert build_manager_override('C1', 'T1', date(2026, 3, 2), 'day', 'force_off', note='  ').note is None


class TestMissingAvailabilityRows:
    """Tests for build_missing_availability_rows."""

    def test_unsubmitted_first_then_by_name(self):
        therapists = [
            make_therapist('T1', 'Zoe'),
            make_therapist('T2', 'Adam'),
            make_therapist('T3', 'Beth'),
            make_therapist('T4', 'Cleo', is_active=False),
        ]
        overrides = [
            therapist_override('T1', created_at=datetime(2026, 2, 10, 9)),
            therapist_override('T1', created_at=datetime(2026, 2, 12, 9)),
            therapist_override('T3', cycle_id='C2'),
        ]
        rows = build_missing_availability_rows(therapists, overrides, 'C1')
        assert [r.therapist_name for r in rows] == ['Adam', 'Beth', 'Zoe']
        assert rows[2].overrides_count == 2
        assert rows[2].submitted
        assert rows[2].last_updated_at == datetime(2026, 2, 12, 9)
        assert rows[0].last_updated_at is None
        assert not rows[1].submitted
