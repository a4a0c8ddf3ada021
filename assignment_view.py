"""Assignment access adapter.

The service keeps assignments as a flat list of ShiftAssignment records. This
module provides the read/query helpers the generator and the publish gate
need, so neither has to re-derive the same indexes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterator, List, Optional, Set, Tuple

from models import ShiftAssignment
from utils import coverage_slot_key, is_date_within_range, week_start_for, weekly_count_key


@dataclass(frozen=True)
class AssignmentView:
    assignments: Tuple[ShiftAssignment, ...]

    @classmethod
    def of(cls, assignments) -> "AssignmentView":
        return cls(tuple(assignments or ()))

    def __iter__(self) -> Iterator[ShiftAssignment]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def for_cycle(self, cycle_id: str) -> "AssignmentView":
        return AssignmentView(tuple(a for a in self.assignments if a.cycle_id == cycle_id))

    def between(self, start_date: date, end_date: date) -> "AssignmentView":
        return AssignmentView(
            tuple(a for a in self.assignments if is_date_within_range(a.date, start_date, end_date))
        )

    def for_therapists(self, therapist_ids) -> "AssignmentView":
        wanted = set(therapist_ids)
        return AssignmentView(tuple(a for a in self.assignments if a.therapist_id in wanted))

    def assigned_ids_by_date(self) -> Dict[date, Set[str]]:
        """Therapists placed on each date, whatever their status."""
        by_date: Dict[date, Set[str]] = {}
        for a in self.assignments:
            by_date.setdefault(a.date, set()).add(a.therapist_id)
        return by_date

    def coverage_by_slot(self) -> Dict[str, int]:
        """slot key -> number of assignments counting toward coverage."""
        coverage: Dict[str, int] = {}
        for a in self.assignments:
            if not a.counts_toward_coverage:
                continue
            key = coverage_slot_key(a.date, a.shift_type)
            coverage[key] = coverage.get(key, 0) + 1
        return coverage

    def weekly_worked_dates(self) -> Dict[Tuple[str, date], Set[date]]:
        """(therapist_id, week_start) -> distinct dates counting toward the weekly limit."""
        worked: Dict[Tuple[str, date], Set[date]] = {}
        for a in self.assignments:
            if not a.counts_toward_coverage:
                continue
            key = weekly_count_key(a.therapist_id, week_start_for(a.date))
            worked.setdefault(key, set()).add(a.date)
        return worked

    def find(self, therapist_id: str, day: date) -> Optional[ShiftAssignment]:
        for a in self.assignments:
            if a.therapist_id == therapist_id and a.date == day:
                return a
        return None

    def by_therapist(self) -> Dict[str, List[ShiftAssignment]]:
        grouped: Dict[str, List[ShiftAssignment]] = {}
        for a in self.assignments:
            grouped.setdefault(a.therapist_id, []).append(a)
        return grouped
