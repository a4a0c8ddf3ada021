"""Who may write availability overrides.

This is an authorization rule for the write path, not a scheduling rule: the
availability resolver treats every stored override the same regardless of
who entered it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from models import AvailabilityOverride, Therapist


def can_therapist_mutate_override(override: AvailabilityOverride, therapist_id: str) -> bool:
    """Therapists may only edit or delete their own therapist-entered overrides."""
    return override.therapist_id == therapist_id and override.source == 'therapist'


def build_manager_override(
    cycle_id: str,
    therapist_id: str,
    day: date,
    shift_type: str,
    override_type: str,
    note: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> AvailabilityOverride:
    return AvailabilityOverride(
        therapist_id=therapist_id,
        cycle_id=cycle_id,
        date=day,
        shift_type=shift_type,
        override_type=override_type,
        source='manager',
        note=(note or '').strip() or None,
        created_at=created_at,
    )


@dataclass(frozen=True)
class MissingAvailabilityRow:
    therapist_id: str
    therapist_name: str
    overrides_count: int
    last_updated_at: Optional[datetime]

    @property
    def submitted(self) -> bool:
        return self.overrides_count > 0


def build_missing_availability_rows(
    therapists: Iterable[Therapist],
    overrides: Iterable[AvailabilityOverride],
    cycle_id: str,
) -> list[MissingAvailabilityRow]:
    """Active therapists with their override counts for a cycle.

    Therapists who have not submitted anything come first, then by name.
    """
    by_therapist: dict[str, list[AvailabilityOverride]] = {}
    for override in overrides:
        if override.cycle_id != cycle_id:
            continue
        by_therapist.setdefault(override.therapist_id, []).append(override)

    rows = []
    for therapist in therapists:
        if not therapist.is_active:
            continue
        own = by_therapist.get(therapist.id, [])
        stamps = [o.created_at for o in own if o.created_at is not None]
        rows.append(MissingAvailabilityRow(
            therapist_id=therapist.id,
            therapist_name=therapist.full_name,
            overrides_count=len(own),
            last_updated_at=max(stamps) if stamps else None,
        ))

    rows.sort(key=lambda row: (row.submitted, row.therapist_name))
    return rows
