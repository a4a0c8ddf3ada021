"""Value objects consumed by the rule engine.

Records arrive from the roster, override and assignment stores as loosely typed
dicts with nullable fields. Each ``from_dict`` below is the single, total
normalization step: it never raises for a dict input, it substitutes the
documented defaults for missing or unknown values, and it returns ``None`` only
when a record cannot be placed on the calendar at all (no usable date). The
engine modules only ever see the normalized, frozen objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from constants import (
    ASSIGNMENT_ROLES,
    COVERAGE_STATUSES,
    EMPLOYMENT_FULL_TIME,
    EMPLOYMENT_TYPES,
    OVERRIDE_FORCE_OFF,
    OVERRIDE_FORCE_ON,
    OVERRIDE_SOURCES,
    OVERRIDE_SHIFT_SCOPES,
    OVERRIDE_TYPES,
    ROLE_LEAD,
    ROLE_STAFF,
    SATURDAY,
    ASSIGNMENT_STATUSES,
    SHIFT_PREFERENCES,
    WEEKEND_ROTATIONS,
    WORKS_DOW_MODES,
    default_weekly_limit_for,
    sanitize_weekly_limit,
)
from utils import parse_date, weekday_index
from logger import get_logger

logger = get_logger('models')


def normalize_dow_values(values) -> tuple[int, ...]:
    """Deduplicated, sorted weekday indexes in [0, 6]; junk entries are dropped."""
    if not isinstance(values, (list, tuple, set, frozenset)):
        return ()
    cleaned = set()
    for value in values:
        if isinstance(value, bool):
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            continue
        if number != value and not isinstance(value, str):
            continue
        if 0 <= number <= 6:
            cleaned.add(number)
    return tuple(sorted(cleaned))


def normalize_shift_type(raw) -> str:
    return 'night' if raw == 'night' else 'day'


def normalize_employment_type(raw) -> str:
    return raw if raw in EMPLOYMENT_TYPES else EMPLOYMENT_FULL_TIME


def normalize_flag(raw, default: bool) -> bool:
    """Real bools pass through; anything else (including 'false' strings) is the default."""
    return raw if isinstance(raw, bool) else default


@dataclass(frozen=True)
class WorkPattern:
    """Recurring weekly rule for one therapist."""
    therapist_id: str
    works_dow: tuple[int, ...] = ()
    offs_dow: tuple[int, ...] = ()
    works_dow_mode: str = 'hard'
    weekend_rotation: str = 'none'
    weekend_anchor_date: Optional[date] = None
    shift_preference: str = 'either'

    @classmethod
    def from_dict(cls, data: dict, therapist_id: Optional[str] = None) -> "WorkPattern":
        anchor = parse_date(data.get('weekend_anchor_date'))
        if data.get('weekend_anchor_date') and anchor is None:
            logger.warning(
                f"Ignoring malformed weekend anchor {data.get('weekend_anchor_date')!r} "
                f"for therapist {therapist_id or data.get('therapist_id')}"
            )
        elif anchor is not None and weekday_index(anchor) != SATURDAY:
            logger.warning(
                f"Weekend anchor {anchor} for therapist {therapist_id or data.get('therapist_id')} is not a Saturday"
            )
        preference = data.get('shift_preference')
        mode = data.get('works_dow_mode')
        rotation = data.get('weekend_rotation')
        return cls(
            therapist_id=str(therapist_id or data.get('therapist_id', '')),
            works_dow=normalize_dow_values(data.get('works_dow')),
            offs_dow=normalize_dow_values(data.get('offs_dow')),
            works_dow_mode=mode if mode in WORKS_DOW_MODES else WORKS_DOW_MODES[0],
            weekend_rotation=rotation if rotation in WEEKEND_ROTATIONS else WEEKEND_ROTATIONS[0],
            weekend_anchor_date=anchor,
            shift_preference=preference if preference in SHIFT_PREFERENCES else 'either',
        )

    def to_dict(self) -> dict:
        return {
            'works_dow': list(self.works_dow),
            'offs_dow': list(self.offs_dow),
            'works_dow_mode': self.works_dow_mode,
            'weekend_rotation': self.weekend_rotation,
            'weekend_anchor_date': self.weekend_anchor_date.isoformat() if self.weekend_anchor_date else None,
            'shift_preference': self.shift_preference,
        }


@dataclass(frozen=True)
class Therapist:
    """A schedulable worker. Read-only to the engine."""
    id: str
    full_name: str
    employment_type: str = EMPLOYMENT_FULL_TIME
    shift_type: str = 'day'
    is_lead_eligible: bool = False
    max_work_days_per_week: int = 3
    preferred_work_days: tuple[int, ...] = ()
    is_active: bool = True
    on_fmla: bool = False
    pattern: Optional[WorkPattern] = None

    @property
    def is_prn(self) -> bool:
        return self.employment_type == 'prn'

    @property
    def is_schedulable(self) -> bool:
        return self.is_active and not self.on_fmla

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'full_name': self.full_name,
            'employment_type': self.employment_type,
            'shift_type': self.shift_type,
            'is_lead_eligible': self.is_lead_eligible,
            'max_work_days_per_week': self.max_work_days_per_week,
            'preferred_work_days': list(self.preferred_work_days),
            'is_active': self.is_active,
            'on_fmla': self.on_fmla,
        }
        if self.pattern is not None:
            data['pattern'] = self.pattern.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Therapist":
        therapist_id = str(data.get('id', ''))
        raw_employment = data.get('employment_type')
        if raw_employment is not None and raw_employment not in EMPLOYMENT_TYPES:
            logger.warning(
                f"Unknown employment type {raw_employment!r} for therapist {therapist_id}; "
                f"using the most restrictive weekly limit"
            )
        default_limit = default_weekly_limit_for(raw_employment)
        raw_pattern = data.get('pattern')
        pattern = (
            WorkPattern.from_dict(raw_pattern, therapist_id=therapist_id)
            if isinstance(raw_pattern, dict) else None
        )
        return cls(
            id=therapist_id,
            full_name=str(data.get('full_name') or data.get('name') or therapist_id),
            employment_type=normalize_employment_type(raw_employment),
            shift_type=normalize_shift_type(data.get('shift_type')),
            is_lead_eligible=normalize_flag(data.get('is_lead_eligible'), False),
            max_work_days_per_week=sanitize_weekly_limit(data.get('max_work_days_per_week'), default_limit),
            preferred_work_days=normalize_dow_values(data.get('preferred_work_days')),
            is_active=normalize_flag(data.get('is_active'), True),
            on_fmla=normalize_flag(data.get('on_fmla'), False),
            pattern=pattern,
        )


@dataclass(frozen=True)
class AvailabilityOverride:
    """A one-date exception to a therapist's recurring pattern."""
    therapist_id: str
    cycle_id: str
    date: date
    shift_type: str = 'both'
    override_type: str = OVERRIDE_FORCE_OFF
    source: str = 'therapist'
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_force_on(self) -> bool:
        return self.override_type == OVERRIDE_FORCE_ON

    def to_dict(self) -> dict:
        return {
            'therapist_id': self.therapist_id,
            'cycle_id': self.cycle_id,
            'date': self.date.isoformat(),
            'shift_type': self.shift_type,
            'override_type': self.override_type,
            'source': self.source,
            'note': self.note,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Optional["AvailabilityOverride"]:
        day = parse_date(data.get('date'))
        if day is None:
            logger.warning(f"Skipping override with invalid date: {data.get('date')!r}")
            return None
        override_type = data.get('override_type')
        if override_type not in OVERRIDE_TYPES:
            logger.warning(f"Skipping override with unknown type {override_type!r} on {day}")
            return None
        scope = data.get('shift_type')
        source = data.get('source')
        created_at = data.get('created_at')
        if isinstance(created_at, str):
            try:
                created_at = datetime.fromisoformat(created_at)
            except ValueError:
                created_at = None
        elif not isinstance(created_at, datetime):
            created_at = None
        note = data.get('note')
        return cls(
            therapist_id=str(data.get('therapist_id', '')),
            cycle_id=str(data.get('cycle_id', '')),
            date=day,
            shift_type=scope if scope in OVERRIDE_SHIFT_SCOPES else 'both',
            override_type=override_type,
            source=source if source in OVERRIDE_SOURCES else 'therapist',
            note=(note.strip() or None) if isinstance(note, str) else None,
            created_at=created_at,
        )


@dataclass(frozen=True)
class ShiftAssignment:
    """One therapist placed on one (date, shift type) slot."""
    cycle_id: str
    date: date
    shift_type: str
    therapist_id: str
    role: str = ROLE_STAFF
    status: str = 'scheduled'
    therapist_name: str = ''
    is_lead_eligible: bool = False

    @property
    def counts_toward_coverage(self) -> bool:
        return self.status in COVERAGE_STATUSES

    @property
    def is_lead(self) -> bool:
        return self.role == ROLE_LEAD

    def to_dict(self) -> dict:
        return {
            'cycle_id': self.cycle_id,
            'date': self.date.isoformat(),
            'shift_type': self.shift_type,
            'therapist_id': self.therapist_id,
            'role': self.role,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data: dict, therapist: Optional[Therapist] = None) -> Optional["ShiftAssignment"]:
        day = parse_date(data.get('date'))
        if day is None:
            logger.warning(f"Skipping assignment with invalid date: {data.get('date')!r}")
            return None
        status = data.get('status')
        if status not in ASSIGNMENT_STATUSES:
            logger.warning(f"Unknown assignment status {status!r} on {day}; treating as scheduled")
            status = 'scheduled'
        role = data.get('role')
        therapist_id = str(data.get('therapist_id', ''))
        return cls(
            cycle_id=str(data.get('cycle_id', '')),
            date=day,
            shift_type=normalize_shift_type(data.get('shift_type')),
            therapist_id=therapist_id,
            role=role if role in ASSIGNMENT_ROLES else ROLE_STAFF,
            status=status,
            therapist_name=therapist.full_name if therapist else str(data.get('therapist_name') or 'Unknown'),
            is_lead_eligible=therapist.is_lead_eligible if therapist else normalize_flag(data.get('is_lead_eligible'), False),
        )


@dataclass(frozen=True)
class ScheduleCycle:
    """A contiguous, inclusive date range that gets scheduled and published as a unit."""
    id: str
    label: str
    start_date: date
    end_date: date
    published: bool = False

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'label': self.label,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'published': self.published,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Optional["ScheduleCycle"]:
        start = parse_date(data.get('start_date'))
        end = parse_date(data.get('end_date'))
        if start is None or end is None or start > end:
            logger.warning(
                f"Skipping cycle {data.get('id')!r} with invalid range "
                f"{data.get('start_date')!r}..{data.get('end_date')!r}"
            )
            return None
        cycle_id = str(data.get('id', ''))
        return cls(
            id=cycle_id,
            label=str(data.get('label') or cycle_id),
            start_date=start,
            end_date=end,
            published=normalize_flag(data.get('published'), False),
        )


@dataclass(frozen=True)
class Decision:
    """Availability verdict for one (therapist, date, shift type)."""
    allowed: bool
    reason: str
    penalty: int = 0
    override_note: Optional[str] = None


@dataclass(frozen=True)
class Pick:
    """Result of one Assignment Selector call."""
    therapist: Optional[Therapist]
    next_cursor: int


@dataclass
class SlotIssue:
    """Violations found on one (date, shift type) slot."""
    slot_key: str
    date: date
    shift_type: str
    reasons: list[str] = field(default_factory=list)
    lead_name: Optional[str] = None
