# Shift types
SHIFT_TYPES = ['day', 'night']
OVERRIDE_SHIFT_SCOPES = ['day', 'night', 'both']

# Assignment roles and runtime statuses
ROLE_LEAD = 'lead'
ROLE_STAFF = 'staff'
ASSIGNMENT_ROLES = [ROLE_LEAD, ROLE_STAFF]

ASSIGNMENT_STATUSES = ['scheduled', 'on_call', 'sick', 'called_off']
# Only these statuses count toward per-slot coverage and the weekly limit.
COVERAGE_STATUSES = {'scheduled', 'on_call'}

# Employment types
EMPLOYMENT_FULL_TIME = 'full_time'
EMPLOYMENT_PART_TIME = 'part_time'
EMPLOYMENT_PRN = 'prn'
EMPLOYMENT_TYPES = [EMPLOYMENT_FULL_TIME, EMPLOYMENT_PART_TIME, EMPLOYMENT_PRN]

# Weekly work-day limits (Sunday-Saturday week), keyed by employment type.
# A manager can override a therapist's limit anywhere in [1, 7].
MAX_WORK_DAYS_PER_WEEK = 3
PART_TIME_MAX_WORK_DAYS_PER_WEEK = 2
PRN_MAX_WORK_DAYS_PER_WEEK = 1
WEEKLY_LIMIT_BOUNDS = (1, 7)

DEFAULT_WEEKLY_LIMITS = {
    EMPLOYMENT_FULL_TIME: MAX_WORK_DAYS_PER_WEEK,
    EMPLOYMENT_PART_TIME: PART_TIME_MAX_WORK_DAYS_PER_WEEK,
    EMPLOYMENT_PRN: PRN_MAX_WORK_DAYS_PER_WEEK,
}
# Unrecognized employment types get the most restrictive limit.
FALLBACK_WEEKLY_LIMIT = min(DEFAULT_WEEKLY_LIMITS.values())

# Coverage per (date, shift type) slot
MIN_SHIFT_COVERAGE_PER_DAY = 3
MAX_SHIFT_COVERAGE_PER_DAY = 5

# Work patterns
WORKS_DOW_MODES = ['hard', 'soft']
WEEKEND_ROTATIONS = ['none', 'every_other']
SHIFT_PREFERENCES = ['day', 'night', 'either']
# Penalty attached to a soft-mode day outside the therapist's works_dow.
SOFT_NON_WORKS_DAY_PENALTY = 25

# Override types and sources
OVERRIDE_FORCE_ON = 'force_on'
OVERRIDE_FORCE_OFF = 'force_off'
OVERRIDE_TYPES = [OVERRIDE_FORCE_OFF, OVERRIDE_FORCE_ON]
OVERRIDE_SOURCES = ['therapist', 'manager']

# Weekday indexes use Sunday=0 .. Saturday=6
SUNDAY = 0
SATURDAY = 6

# Slot validation reasons, in the order a caller should navigate to them.
SLOT_ISSUE_PRIORITY = [
    'missing_lead',
    'under_coverage',
    'over_coverage',
    'ineligible_lead',
    'multiple_leads',
]

NO_ELIGIBLE_CANDIDATES_REASON = 'no_eligible_candidates_due_to_constraints'


def default_weekly_limit_for(employment_type) -> int:
    """Default weekly work-day limit for an employment type.

    A missing type is treated as full time; an unrecognized one gets
    FALLBACK_WEEKLY_LIMIT.
    """
    if employment_type is None:
        return MAX_WORK_DAYS_PER_WEEK
    return DEFAULT_WEEKLY_LIMITS.get(employment_type, FALLBACK_WEEKLY_LIMIT)


def sanitize_weekly_limit(value, fallback: int = MAX_WORK_DAYS_PER_WEEK) -> int:
    """Return value truncated to an int if it lies in [1, 7], else fallback."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if value != value or value in (float('inf'), float('-inf')):
        return fallback
    rounded = int(value)
    low, high = WEEKLY_LIMIT_BOUNDS
    if rounded < low or rounded > high:
        return fallback
    return rounded
