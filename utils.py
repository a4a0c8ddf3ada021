from datetime import date, timedelta


def weekday_index(day: date) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def week_start_for(day: date) -> date:
    """Sunday on or before the given date."""
    return day - timedelta(days=weekday_index(day))


def week_bounds_for(day: date) -> tuple[date, date]:
    start = week_start_for(day)
    return start, start + timedelta(days=6)


def weekend_saturday_for(day: date):
    """Saturday of the weekend containing day, or None on a weekday."""
    dow = weekday_index(day)
    if dow == 6:
        return day
    if dow == 0:
        return day - timedelta(days=1)
    return None


def build_date_range(start_date: date, end_date: date) -> list[date]:
    """Inclusive list of dates; empty when start is after end."""
    if start_date > end_date:
        return []
    days = []
    current = start_date
    while current <= end_date:
        days.append(current)
        current += timedelta(days=1)
    return days


def is_date_within_range(day: date, start_date: date, end_date: date) -> bool:
    return start_date <= day <= end_date


def coverage_slot_key(day: date, shift_type: str) -> str:
    # External callers split this on ':' so the format must stay stable.
    return f"{day.isoformat()}:{shift_type}"


def parse_slot_key(slot_key: str) -> tuple[date, str]:
    day_str, shift_type = slot_key.split(':', 1)
    return date.fromisoformat(day_str), shift_type


def weekly_count_key(therapist_id: str, week_start: date) -> tuple[str, date]:
    return therapist_id, week_start


def parse_date(value):
    """Return a date for a date/ISO string value, None for anything else."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
