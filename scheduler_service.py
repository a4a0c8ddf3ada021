"""Scheduler Service - workflow layer around the shift rule engine.

The engine modules (work_patterns, availability, assignment_selector,
coverage_validation, weekly_rules) are pure functions over in-memory records.
This service is the caller they expect: it loads the roster, cycles,
overrides and assignments in one batch from a YAML config file, runs the
engine, and holds the proposed results until they are saved back.

It provides:
- Roster management (add, remove, weekly limit overrides)
- Cycle management
- Availability overrides, with the therapist/manager write policy
- Draft generation (round-robin fill of every uncovered slot)
- Designated lead assignment
- Publish readiness checks (weekly rule + slot validation) and publishing
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional

import yaml

from constants import (
    ASSIGNMENT_STATUSES,
    MAX_SHIFT_COVERAGE_PER_DAY,
    MAX_WORK_DAYS_PER_WEEK,
    MIN_SHIFT_COVERAGE_PER_DAY,
    ROLE_LEAD,
    ROLE_STAFF,
    SHIFT_TYPES,
    sanitize_weekly_limit,
)
from models import (
    AvailabilityOverride,
    Decision,
    ScheduleCycle,
    ShiftAssignment,
    Therapist,
)
from assignment_view import AssignmentView
from availability import build_unavailable_dates, resolve_eligibility
from assignment_selector import fill_coverage_slot
from coverage_validation import (
    SlotValidationResult,
    exceeds_coverage_limit,
    summarize_shift_slot_violations,
)
from override_policy import can_therapist_mutate_override
from weekly_rules import (
    WeeklyRuleResult,
    build_cycle_week_dates,
    exceeds_weekly_limit,
    summarize_publish_weekly_violations,
)
from utils import build_date_range, coverage_slot_key, week_bounds_for, week_start_for, weekly_count_key
from logger import get_logger, log_timing, timed

logger = get_logger('scheduler_service')


@dataclass
class DraftResult:
    """Result of a draft generation run."""
    success: bool
    cycle_id: str = ""
    assignments: list[ShiftAssignment] = field(default_factory=list)
    unfilled: int = 0
    unfilled_slots: dict[str, int] = field(default_factory=dict)
    lead_missing: int = 0
    error_message: str = ""

    @property
    def added(self) -> int:
        return len(self.assignments)

    @property
    def is_complete(self) -> bool:
        return self.success and self.unfilled == 0 and self.lead_missing == 0


@dataclass
class PublishCheck:
    """Publish-time gate outcome for one cycle."""
    cycle_id: str
    slots: SlotValidationResult
    weekly: Optional[WeeklyRuleResult] = None
    weekly_rules_overridden: bool = False

    @property
    def can_publish(self) -> bool:
        weekly_ok = self.weekly is None or self.weekly.violations == 0
        return weekly_ok and self.slots.violations == 0

    def affected_summary(self, limit: int = 8) -> str:
        """'<date> <shift>' list of the first affected slots, for user feedback."""
        listed = [f"{issue.date.isoformat()} {issue.shift_type}" for issue in self.slots.issues[:limit]]
        extra = max(len(self.slots.issues) - limit, 0)
        if extra:
            listed.append(f"+{extra} more")
        return ", ".join(listed)


@dataclass
class AssignmentOutcome:
    """Result of a manual assignment or lead change."""
    ok: bool
    reason: str = ""
    assignment: Optional[ShiftAssignment] = None


@dataclass
class WorkloadCount:
    week_shift_count: int = 0
    cycle_shift_count: int = 0


class SchedulerService:
    """
    Service layer for shift scheduling operations.

    All state lives in memory and is persisted with save_config(). Engine
    results are proposals until then.
    """

    DEFAULT_CONFIG_FILE = "config.yaml"
    DEFAULT_SETTINGS = {
        'min_coverage_per_shift': MIN_SHIFT_COVERAGE_PER_DAY,
        'max_coverage_per_shift': MAX_SHIFT_COVERAGE_PER_DAY,
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the scheduler service.

        Args:
            config_path: Path to configuration file. If None, uses default.
        """
        self._config_path = config_path or self._get_default_config_path()
        self._settings: dict[str, int] = self.DEFAULT_SETTINGS.copy()
        self._therapists: list[Therapist] = []
        self._cycles: list[ScheduleCycle] = []
        self._overrides: list[AvailabilityOverride] = []
        self._assignments: list[ShiftAssignment] = []

        self._load_config()

    @staticmethod
    def _get_default_config_path() -> str:
        """Get the default config file path."""
        return os.path.join(os.path.dirname(os.path.abspath(__file__)), SchedulerService.DEFAULT_CONFIG_FILE)

    # =========================================================================
    # Configuration Management
    # =========================================================================

    def _load_config(self) -> None:
        """Load configuration from file."""
        if not os.path.exists(self._config_path):
            logger.info(f"Config file not found at {self._config_path}, using defaults")
            self._therapists = self._get_default_therapists()
            return

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
            if not isinstance(config, dict):
                raise yaml.YAMLError("top level must be a mapping")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file: {e}")
            self._therapists = self._get_default_therapists()
            return

        settings = config.get('settings')
        if not isinstance(settings, dict):
            settings = {}
        for key in self.DEFAULT_SETTINGS:
            value = settings.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                self._settings[key] = value

        if config.get('therapists'):
            self._therapists = [Therapist.from_dict(t) for t in config['therapists'] if isinstance(t, dict)]
        else:
            self._therapists = self._get_default_therapists()

        self._cycles = [c for c in (ScheduleCycle.from_dict(raw) for raw in self._records(config, 'cycles')) if c]
        self._overrides = [
            o for o in (AvailabilityOverride.from_dict(raw) for raw in self._records(config, 'overrides')) if o
        ]
        therapists_by_id = {t.id: t for t in self._therapists}
        self._assignments = [
            a for a in (
                ShiftAssignment.from_dict(raw, therapists_by_id.get(str(raw.get('therapist_id', ''))))
                for raw in self._records(config, 'assignments')
            ) if a
        ]
        logger.info(
            f"Configuration loaded from {self._config_path}: {len(self._therapists)} therapists, "
            f"{len(self._cycles)} cycles, {len(self._overrides)} overrides, "
            f"{len(self._assignments)} assignments"
        )

    @staticmethod
    def _records(config: dict, key: str) -> list[dict]:
        raw = config.get(key) or []
        if not isinstance(raw, list):
            logger.warning(f"Ignoring '{key}' section: expected a list")
            return []
        return [r for r in raw if isinstance(r, dict)]

    @staticmethod
    def _get_default_therapists() -> list[Therapist]:
        """Return the default roster."""
        defaults = [
            ("T001", "Ava Patel", "full_time", "day", True),
            ("T002", "Marcus Reed", "full_time", "day", False),
            ("T003", "Nina Lopez", "full_time", "day", False),
            ("T004", "Owen Brooks", "full_time", "day", True),
            ("T005", "Priya Shah", "part_time", "day", False),
            ("T006", "Leo Grant", "full_time", "day", False),
            ("T007", "Chris Allen", "full_time", "night", False),
            ("T008", "Maya Chen", "full_time", "night", True),
            ("T009", "Noah Rivera", "full_time", "night", True),
            ("T010", "Sara Kim", "full_time", "night", False),
            ("T011", "Dan Ortiz", "part_time", "night", False),
            ("T012", "Ivy Morgan", "full_time", "night", False),
        ]
        return [
            Therapist.from_dict({
                'id': i, 'full_name': n, 'employment_type': e, 'shift_type': s, 'is_lead_eligible': lead,
            })
            for i, n, e, s, lead in defaults
        ]

    def save_config(self) -> bool:
        """Save current configuration to file.

        Returns:
            True if save was successful, False otherwise.
        """
        config = {
            'settings': dict(self._settings),
            'therapists': [t.to_dict() for t in self._therapists],
            'cycles': [c.to_dict() for c in self._cycles],
            'overrides': [o.to_dict() for o in self._overrides],
            'assignments': [a.to_dict() for a in self._assignments],
        }
        try:
            with open(self._config_path, 'w', encoding='utf-8') as f:
                yaml.dump(config, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            logger.info(f"Configuration saved to {self._config_path}")
            return True
        except OSError as e:
            logger.error(f"Could not save config file: {e}")
            return False

    @property
    def min_coverage(self) -> int:
        return self._settings['min_coverage_per_shift']

    @property
    def max_coverage(self) -> int:
        return self._settings['max_coverage_per_shift']

    # =========================================================================
    # Roster Management
    # =========================================================================

    @property
    def therapists(self) -> list[Therapist]:
        """Get list of all therapists."""
        return self._therapists.copy()

    def get_therapist(self, therapist_id: str) -> Optional[Therapist]:
        for t in self._therapists:
            if t.id == therapist_id:
                return t
        return None

    def _require_therapist(self, therapist_id: str) -> Therapist:
        therapist = self.get_therapist(therapist_id)
        if therapist is None:
            raise ValueError(f"Unknown therapist '{therapist_id}'")
        return therapist

    def add_therapist(self, therapist: Therapist) -> Therapist:
        """Add a therapist to the roster.

        Raises:
            ValueError: If the id is already taken
        """
        if self.get_therapist(therapist.id) is not None:
            raise ValueError(f"Therapist '{therapist.id}' already exists")
        self._therapists.append(therapist)
        logger.info(f"Added therapist: {therapist.full_name} ({therapist.id})")
        return therapist

    def remove_therapist(self, therapist_id: str) -> bool:
        """Remove a therapist from the roster.

        Returns:
            True if removed, False if not found
        """
        for i, t in enumerate(self._therapists):
            if t.id == therapist_id:
                del self._therapists[i]
                logger.info(f"Removed therapist: {t.full_name} ({therapist_id})")
                return True
        return False

    def set_weekly_limit(self, therapist_id: str, limit) -> Therapist:
        """Manager override of a therapist's weekly work-day limit.

        Out-of-range values keep the current limit.
        """
        therapist = self._require_therapist(therapist_id)
        updated = replace(
            therapist,
            max_work_days_per_week=sanitize_weekly_limit(limit, therapist.max_work_days_per_week),
        )
        self._therapists = [updated if t.id == therapist_id else t for t in self._therapists]
        return updated

    def scheduling_eligible_therapists(self) -> list[Therapist]:
        """Active therapists who are not on leave."""
        return [t for t in self._therapists if t.is_schedulable]

    # =========================================================================
    # Cycle Management
    # =========================================================================

    @property
    def cycles(self) -> list[ScheduleCycle]:
        return self._cycles.copy()

    def get_cycle(self, cycle_id: str) -> Optional[ScheduleCycle]:
        for c in self._cycles:
            if c.id == cycle_id:
                return c
        return None

    def _require_cycle(self, cycle_id: str) -> ScheduleCycle:
        cycle = self.get_cycle(cycle_id)
        if cycle is None:
            raise ValueError(f"Unknown cycle '{cycle_id}'")
        return cycle

    def add_cycle(self, cycle: ScheduleCycle) -> ScheduleCycle:
        if self.get_cycle(cycle.id) is not None:
            raise ValueError(f"Cycle '{cycle.id}' already exists")
        self._cycles.append(cycle)
        logger.info(f"Added cycle {cycle.label}: {cycle.start_date} to {cycle.end_date}")
        return cycle

    def _set_published(self, cycle_id: str, published: bool) -> ScheduleCycle:
        cycle = replace(self._require_cycle(cycle_id), published=published)
        self._cycles = [cycle if c.id == cycle_id else c for c in self._cycles]
        return cycle

    # =========================================================================
    # Availability Overrides
    # =========================================================================

    def overrides_for_cycle(self, cycle_id: str) -> list[AvailabilityOverride]:
        return [o for o in self._overrides if o.cycle_id == cycle_id]

    def add_override(self, override: AvailabilityOverride) -> AvailabilityOverride:
        self._require_therapist(override.therapist_id)
        self._require_cycle(override.cycle_id)
        self._overrides.append(override)
        logger.info(
            f"Added {override.source} override {override.override_type} for {override.therapist_id} "
            f"on {override.date} ({override.shift_type})"
        )
        return override

    def remove_override(self, override: AvailabilityOverride, actor_id: str, actor_is_manager: bool = False) -> bool:
        """Delete an override on behalf of a manager or a therapist.

        Raises:
            PermissionError: If a therapist tries to delete an override they may not change
        """
        if not actor_is_manager and not can_therapist_mutate_override(override, actor_id):
            raise PermissionError(f"Therapist '{actor_id}' may not change this override")
        try:
            self._overrides.remove(override)
        except ValueError:
            return False
        return True

    def resolve(self, therapist_id: str, cycle_id: str, day: date, shift_type: str) -> Decision:
        """Availability decision for one therapist on one date and shift type."""
        therapist = self._require_therapist(therapist_id)
        return resolve_eligibility(therapist, cycle_id, day, shift_type, self.overrides_for_cycle(cycle_id))

    # =========================================================================
    # Assignments
    # =========================================================================

    @property
    def assignments(self) -> list[ShiftAssignment]:
        return self._assignments.copy()

    def assignments_for_cycle(self, cycle_id: str) -> list[ShiftAssignment]:
        return [a for a in self._assignments if a.cycle_id == cycle_id]

    def _weekly_worked_dates_around(self, cycle: ScheduleCycle) -> dict:
        """Worked dates for every week touching the cycle, across all cycles."""
        first_week_start, _ = week_bounds_for(cycle.start_date)
        _, last_week_end = week_bounds_for(cycle.end_date)
        return AssignmentView.of(self._assignments).between(first_week_start, last_week_end).weekly_worked_dates()

    def add_assignment(
        self,
        cycle_id: str,
        therapist_id: str,
        day: date,
        shift_type: str,
        status: str = 'scheduled',
        override_weekly_rules: bool = False,
    ) -> AssignmentOutcome:
        """Manually place a therapist on a slot, enforcing the same limits as generation."""
        if shift_type not in SHIFT_TYPES or status not in ASSIGNMENT_STATUSES:
            return AssignmentOutcome(ok=False, reason='invalid_input')
        cycle = self._require_cycle(cycle_id)
        therapist = self._require_therapist(therapist_id)
        cycle_view = AssignmentView.of(self.assignments_for_cycle(cycle_id))

        if cycle_view.find(therapist_id, day) is not None:
            return AssignmentOutcome(ok=False, reason='duplicate_shift')

        slot_coverage = cycle_view.coverage_by_slot().get(coverage_slot_key(day, shift_type), 0)
        if exceeds_coverage_limit(slot_coverage, self.max_coverage):
            return AssignmentOutcome(ok=False, reason='coverage_max_exceeded')

        if not override_weekly_rules:
            worked = self._weekly_worked_dates_around(cycle).get(weekly_count_key(therapist_id, week_start_for(day)), set())
            if exceeds_weekly_limit(worked, day, therapist.max_work_days_per_week):
                return AssignmentOutcome(ok=False, reason='weekly_limit_exceeded')

        assignment = ShiftAssignment(
            cycle_id=cycle_id,
            date=day,
            shift_type=shift_type,
            therapist_id=therapist_id,
            role=ROLE_STAFF,
            status=status,
            therapist_name=therapist.full_name,
            is_lead_eligible=therapist.is_lead_eligible,
        )
        self._assignments.append(assignment)
        return AssignmentOutcome(ok=True, assignment=assignment)

    def update_assignment_status(self, cycle_id: str, therapist_id: str, day: date, status: str) -> AssignmentOutcome:
        if status not in ASSIGNMENT_STATUSES:
            return AssignmentOutcome(ok=False, reason='invalid_input')
        for i, a in enumerate(self._assignments):
            if a.cycle_id == cycle_id and a.therapist_id == therapist_id and a.date == day:
                self._assignments[i] = replace(a, status=status)
                return AssignmentOutcome(ok=True, assignment=self._assignments[i])
        return AssignmentOutcome(ok=False, reason='not_found')

    def set_designated_lead(self, cycle_id: str, day: date, shift_type: str, therapist_id: str) -> AssignmentOutcome:
        """Make therapist_id the only lead of a slot.

        Any existing lead of the slot is demoted to staff. A therapist not yet
        on the slot is added as a scheduled lead, subject to the weekly limit
        and the coverage maximum.
        """
        if shift_type not in SHIFT_TYPES:
            return AssignmentOutcome(ok=False, reason='invalid_input')
        cycle = self._require_cycle(cycle_id)
        therapist = self.get_therapist(therapist_id)
        if therapist is None or not therapist.is_lead_eligible:
            return AssignmentOutcome(ok=False, reason='lead_not_eligible')

        existing = AssignmentView.of(self.assignments_for_cycle(cycle_id)).find(therapist_id, day)
        if existing is not None and existing.shift_type != shift_type:
            return AssignmentOutcome(ok=False, reason='invalid_input')

        if existing is None:
            slot_coverage = AssignmentView.of(self.assignments_for_cycle(cycle_id)).coverage_by_slot().get(
                coverage_slot_key(day, shift_type), 0
            )
            if exceeds_coverage_limit(slot_coverage, self.max_coverage):
                return AssignmentOutcome(ok=False, reason='coverage_max_exceeded')
            worked = self._weekly_worked_dates_around(cycle).get(weekly_count_key(therapist_id, week_start_for(day)), set())
            if exceeds_weekly_limit(worked, day, therapist.max_work_days_per_week):
                return AssignmentOutcome(ok=False, reason='weekly_limit_exceeded')

        updated: list[ShiftAssignment] = []
        lead = None
        for a in self._assignments:
            if a.cycle_id == cycle_id and a.date == day and a.shift_type == shift_type:
                if a.therapist_id == therapist_id:
                    a = replace(a, role=ROLE_LEAD)
                    lead = a
                elif a.is_lead:
                    a = replace(a, role=ROLE_STAFF)
            updated.append(a)
        if lead is None:
            lead = ShiftAssignment(
                cycle_id=cycle_id,
                date=day,
                shift_type=shift_type,
                therapist_id=therapist_id,
                role=ROLE_LEAD,
                status='scheduled',
                therapist_name=therapist.full_name,
                is_lead_eligible=True,
            )
            updated.append(lead)
        self._assignments = updated
        logger.info(f"Designated lead for {coverage_slot_key(day, shift_type)}: {therapist.full_name}")
        return AssignmentOutcome(ok=True, assignment=lead)

    # =========================================================================
    # Draft Generation
    # =========================================================================

    def generate_draft(self, cycle_id: str, persist: bool = True) -> DraftResult:
        """Fill every uncovered slot of a draft cycle up to minimum coverage.

        Day slots draw from day-shift therapists and night slots from night-shift
        therapists, each with its own rotation cursor. Existing assignments (in
        this and neighbouring cycles) seed the working sets, so a re-run only
        adds what is missing.

        Args:
            cycle_id: Cycle to generate into
            persist: Whether to keep the proposed assignments in the service

        Returns:
            DraftResult with the new staff assignments and unfilled seats

        Raises:
            ValueError: If the cycle is unknown or already published
        """
        cycle = self._require_cycle(cycle_id)
        if cycle.published:
            raise ValueError(f"Cycle '{cycle_id}' is published; move it to draft before auto-generating")

        therapists = sorted(self._therapists, key=lambda t: t.full_name)
        if not therapists:
            logger.warning("No therapists found to schedule")
            return DraftResult(success=False, cycle_id=cycle_id, error_message="No therapists found to schedule.")

        cycle_dates = build_date_range(cycle.start_date, cycle.end_date)
        overrides = self.overrides_for_cycle(cycle_id)
        cycle_view = AssignmentView.of(self.assignments_for_cycle(cycle_id))
        coverage_by_slot = cycle_view.coverage_by_slot()
        assigned_ids_by_date = cycle_view.assigned_ids_by_date()
        weekly_worked_dates = self._weekly_worked_dates_around(cycle)

        logger.info(
            f"Generating draft for cycle {cycle.label} ({cycle.start_date} to {cycle.end_date}) "
            f"with {len(therapists)} therapists"
        )

        candidates = {}
        unavailable = {}
        cursors = {}
        for shift_type in SHIFT_TYPES:
            candidates[shift_type] = [t for t in therapists if t.shift_type == shift_type]
            unavailable[shift_type] = build_unavailable_dates(
                candidates[shift_type], cycle_id, cycle_dates, shift_type, overrides
            )
            cursors[shift_type] = 0

        new_assignments: list[ShiftAssignment] = []
        unfilled_slots: dict[str, int] = {}

        with log_timing(f"draft generation for {cycle.label}"):
            for day in cycle_dates:
                assigned_for_date = assigned_ids_by_date.setdefault(day, set())
                for shift_type in SHIFT_TYPES:
                    fill = fill_coverage_slot(
                        candidates[shift_type],
                        cursors[shift_type],
                        day,
                        shift_type,
                        unavailable[shift_type],
                        assigned_for_date,
                        weekly_worked_dates,
                        current_coverage=coverage_by_slot.get(coverage_slot_key(day, shift_type), 0),
                        target_coverage=self.min_coverage,
                        min_coverage=self.min_coverage,
                    )
                    cursors[shift_type] = fill.next_cursor
                    for therapist in fill.picked:
                        new_assignments.append(ShiftAssignment(
                            cycle_id=cycle_id,
                            date=day,
                            shift_type=shift_type,
                            therapist_id=therapist.id,
                            role=ROLE_STAFF,
                            status='scheduled',
                            therapist_name=therapist.full_name,
                            is_lead_eligible=therapist.is_lead_eligible,
                        ))
                    if fill.unfilled_count:
                        unfilled_slots[coverage_slot_key(day, shift_type)] = fill.unfilled_count

        unfilled = sum(unfilled_slots.values())
        if persist:
            self._assignments.extend(new_assignments)
            lead_missing = self.assign_designated_leads(cycle_id)
        else:
            lead_missing = self._count_slots_missing_lead(cycle_dates, list(cycle_view) + new_assignments)

        if unfilled:
            logger.warning(f"Draft for {cycle.label} left {unfilled} seat(s) unfilled across {len(unfilled_slots)} slot(s)")
        logger.info(f"Draft generated with {len(new_assignments)} new shifts")

        return DraftResult(
            success=True,
            cycle_id=cycle_id,
            assignments=new_assignments,
            unfilled=unfilled,
            unfilled_slots=unfilled_slots,
            lead_missing=lead_missing,
        )

    def _lead_candidates(self, slot: list[ShiftAssignment]) -> list[ShiftAssignment]:
        """Covering slot members who could be promoted, or [] when the slot already has a lead.

        Eligibility is read from the current roster, which is what
        set_designated_lead checks.
        """
        if any(a.is_lead for a in slot):
            return []
        candidates = []
        for a in slot:
            therapist = self.get_therapist(a.therapist_id)
            if a.counts_toward_coverage and therapist is not None and therapist.is_lead_eligible:
                candidates.append(a)
        return sorted(candidates, key=lambda a: a.therapist_name)

    def _slot_missing_lead(self, slot: list[ShiftAssignment]) -> bool:
        return not any(a.is_lead for a in slot) and not self._lead_candidates(slot)

    def _count_slots_missing_lead(self, cycle_dates, assignments) -> int:
        by_slot: dict[str, list[ShiftAssignment]] = {}
        for a in assignments:
            by_slot.setdefault(coverage_slot_key(a.date, a.shift_type), []).append(a)
        return sum(
            1
            for day in cycle_dates
            for shift_type in SHIFT_TYPES
            if self._slot_missing_lead(by_slot.get(coverage_slot_key(day, shift_type), []))
        )

    def assign_designated_leads(self, cycle_id: str) -> int:
        """Promote a lead-eligible staff member on every slot that has no lead.

        A slot that already carries a lead role is left alone, even when that
        lead is no longer eligible; the publish check reports those.

        Returns:
            Number of slots left without a lead because nobody on them is eligible
        """
        cycle = self._require_cycle(cycle_id)
        missing = 0
        for day in build_date_range(cycle.start_date, cycle.end_date):
            for shift_type in SHIFT_TYPES:
                slot = [
                    a for a in self._assignments
                    if a.cycle_id == cycle_id and a.date == day and a.shift_type == shift_type
                ]
                if self._slot_missing_lead(slot):
                    missing += 1
                    continue
                candidates = self._lead_candidates(slot)
                if not candidates:
                    continue
                outcome = self.set_designated_lead(cycle_id, day, shift_type, candidates[0].therapist_id)
                if not outcome.ok:
                    missing += 1
        return missing

    def clear_draft(self, cycle_id: str) -> int:
        """Remove every assignment of a draft cycle.

        Returns:
            Number of assignments removed

        Raises:
            ValueError: If the cycle is unknown or published
        """
        cycle = self._require_cycle(cycle_id)
        if cycle.published:
            raise ValueError(f"Cycle '{cycle_id}' is published; only draft cycles can be reset")
        before = len(self._assignments)
        self._assignments = [a for a in self._assignments if a.cycle_id != cycle_id]
        removed = before - len(self._assignments)
        logger.info(f"Draft cleared for {cycle.label}: removed {removed} assignments")
        return removed

    # =========================================================================
    # Publishing
    # =========================================================================

    @timed(name="publish readiness check")
    def check_publish_readiness(self, cycle_id: str, override_weekly_rules: bool = False) -> PublishCheck:
        """Run the weekly workload rule and the slot validator for a cycle."""
        cycle = self._require_cycle(cycle_id)

        weekly = None
        if not override_weekly_rules:
            therapists = self.scheduling_eligible_therapists()
            weekly = summarize_publish_weekly_violations(
                [t.id for t in therapists],
                build_cycle_week_dates(cycle),
                self._weekly_worked_dates_around(cycle),
                max_work_days_per_week=MAX_WORK_DAYS_PER_WEEK,
                weekly_limit_by_therapist={t.id: t.max_work_days_per_week for t in therapists},
            )

        therapists_by_id = {t.id: t for t in self._therapists}
        slot_assignments = [
            self._with_current_profile(a, therapists_by_id.get(a.therapist_id))
            for a in AssignmentView.of(self.assignments_for_cycle(cycle_id)).between(cycle.start_date, cycle.end_date)
        ]
        slots = summarize_shift_slot_violations(
            build_date_range(cycle.start_date, cycle.end_date),
            slot_assignments,
            min_coverage_per_shift=self.min_coverage,
            max_coverage_per_shift=self.max_coverage,
        )
        check = PublishCheck(
            cycle_id=cycle_id,
            slots=slots,
            weekly=weekly,
            weekly_rules_overridden=override_weekly_rules,
        )
        if not check.can_publish:
            weekly_text = (
                f"weekly {weekly.violations} ({weekly.under_count} under, {weekly.over_count} over)"
                if weekly else "weekly overridden"
            )
            logger.info(f"Publish blocked for {cycle.label}: {weekly_text}; slots {slots.counts()}")
        return check

    @staticmethod
    def _with_current_profile(assignment: ShiftAssignment, therapist: Optional[Therapist]) -> ShiftAssignment:
        if therapist is None:
            return assignment
        return replace(assignment, therapist_name=therapist.full_name, is_lead_eligible=therapist.is_lead_eligible)

    def publish(self, cycle_id: str, override_weekly_rules: bool = False) -> PublishCheck:
        """Mark a cycle published if it passes the publish gate."""
        check = self.check_publish_readiness(cycle_id, override_weekly_rules=override_weekly_rules)
        if check.can_publish:
            cycle = self._set_published(cycle_id, True)
            logger.info(f"Cycle {cycle.label} published")
        return check

    def unpublish(self, cycle_id: str) -> ScheduleCycle:
        cycle = self._set_published(cycle_id, False)
        logger.info(f"Cycle {cycle.label} moved to draft")
        return cycle

    # =========================================================================
    # Reporting
    # =========================================================================

    def build_therapist_workload_counts(self, cycle_id: str, week_start: date) -> dict[str, WorkloadCount]:
        """Coverage-counting dates per therapist for one week and for the whole cycle."""
        cycle = self._require_cycle(cycle_id)
        week_end = week_start + timedelta(days=6)
        week_dates: dict[str, set[date]] = {}
        cycle_dates: dict[str, set[date]] = {}

        in_cycle = AssignmentView.of(self._assignments).between(cycle.start_date, cycle.end_date)
        for a in in_cycle:
            if not a.counts_toward_coverage:
                continue
            cycle_dates.setdefault(a.therapist_id, set()).add(a.date)
            if week_start <= a.date <= week_end:
                week_dates.setdefault(a.therapist_id, set()).add(a.date)

        return {
            therapist_id: WorkloadCount(
                week_shift_count=len(week_dates.get(therapist_id, ())),
                cycle_shift_count=len(dates),
            )
            for therapist_id, dates in cycle_dates.items()
        }
