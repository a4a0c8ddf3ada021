"""
Pytest fixtures and configuration for shift rule engine tests.
"""

import pytest
import sys
import os
from datetime import date

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import ScheduleCycle, ShiftAssignment, Therapist


def make_therapist(therapist_id, name=None, **kwargs):
    """Build a normalized Therapist from keyword fields."""
    data = {'id': therapist_id, 'full_name': name or therapist_id}
    data.update(kwargs)
    return Therapist.from_dict(data)


def make_assignment(day, shift_type='day', therapist_id='T1', role='staff', status='scheduled',
                    name=None, lead_eligible=False, cycle_id='C1'):
    return ShiftAssignment(
        cycle_id=cycle_id,
        date=day,
        shift_type=shift_type,
        therapist_id=therapist_id,
        role=role,
        status=status,
        therapist_name=name or therapist_id,
        is_lead_eligible=lead_eligible,
    )


@pytest.fixture
def march_cycle():
    """Two-week cycle, Sunday 2026-03-01 through Saturday 2026-03-14."""
    return ScheduleCycle(id='C1', label='Mar 1 - Mar 14', start_date=date(2026, 3, 1), end_date=date(2026, 3, 14))


@pytest.fixture
def march_cycle_dates():
    return [date(2026, 3, d) for d in range(1, 15)]


@pytest.fixture
def day_team():
    """Four full-time day therapists, the first lead eligible."""
    return [
        make_therapist('T1', 'Alice', is_lead_eligible=True),
        make_therapist('T2', 'Bob'),
        make_therapist('T3', 'Carol'),
        make_therapist('T4', 'Dan'),
    ]


@pytest.fixture
def sample_config():
    """Raw config dict in the layout of config.yaml."""
    return {
        'settings': {'min_coverage_per_shift': 3, 'max_coverage_per_shift': 5},
        'therapists': [
            {'id': 'T1', 'full_name': 'Alice', 'shift_type': 'day', 'is_lead_eligible': True},
            {'id': 'T2', 'full_name': 'Bob', 'shift_type': 'day'},
            {'id': 'T3', 'full_name': 'Carol', 'shift_type': 'day'},
            {'id': 'N1', 'full_name': 'Nora', 'shift_type': 'night', 'is_lead_eligible': True},
            {'id': 'N2', 'full_name': 'Omar', 'shift_type': 'night'},
            {'id': 'N3', 'full_name': 'Pia', 'shift_type': 'night'},
        ],
        'cycles': [
            {'id': 'C1', 'label': 'Week 1', 'start_date': '2026-03-01', 'end_date': '2026-03-07'},
        ],
        'overrides': [],
        'assignments': [],
    }
