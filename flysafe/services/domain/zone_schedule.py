"""
Domain service: Decide whether a zone is active at a given instant.

Zone activity comes from two rule sets published alongside the geometries:
- general rules: permanent activation or a start/end date range
- specific rules: weekday lists and HHMM time-of-day windows

All instants are handled in UTC. Date ranges are half-open: a zone is
active from `start` up to, but not including, `end`.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence
import logging

from flysafe.domain.models import GeneralTimeRule, SpecificTimeRule, Zone

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "ACTIVE"
PERMANENT_FLAGS = ("YES", "1", "TRUE")

WEEKDAYS = {
    "MON": 0,
    "TUE": 1,
    "WED": 2,
    "THU": 3,
    "FRI": 4,
    "SAT": 5,
    "SUN": 6,
}


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _is_active_status(status: Optional[str]) -> bool:
    return (status or "").strip().upper() == ACTIVE_STATUS


def _applies_to(rule, zone_id: str) -> bool:
    return rule.parent_id == zone_id or rule.child_id == zone_id


def parse_days(days: str) -> set[int]:
    """
    Parse a comma separated weekday list ("MON,TUE") into weekday numbers.

    Unknown tokens are ignored.
    """
    parsed = set()
    for token in days.split(","):
        token = token.strip().upper()[:3]
        if token in WEEKDAYS:
            parsed.add(WEEKDAYS[token])
    return parsed


def parse_hhmm(value: str) -> int:
    """
    Parse an HHMM string into minutes since midnight.

    Raises:
        ValueError: If the value is not a valid HHMM time
    """
    text = value.strip()
    if len(text) < 4 or not text[:4].isdigit():
        raise ValueError(f"Invalid HHMM time: {value!r}")
    hours, minutes = int(text[:2]), int(text[2:4])
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid HHMM time: {value!r}")
    return hours * 60 + minutes


def in_daily_window(minute_of_day: int, start: int, end: int) -> bool:
    """
    Check a minute of day against a [start, end) window.

    Windows whose end is earlier than their start cross midnight.
    """
    if end < start:
        return minute_of_day >= start or minute_of_day < end
    return start <= minute_of_day < end


def _general_rule_active(rule: GeneralTimeRule, at: datetime) -> bool:
    if not _is_active_status(rule.status):
        return False
    if (rule.permanent or "").strip().upper() in PERMANENT_FLAGS:
        return True
    if rule.start is not None and rule.end is not None:
        return as_utc(rule.start) <= at < as_utc(rule.end)
    return False


def _specific_rule_active(rule: SpecificTimeRule, at: datetime) -> bool:
    if not _is_active_status(rule.status):
        return False

    if rule.days:
        if at.weekday() not in parse_days(rule.days):
            return False

    if rule.written_start_time and rule.written_end_time:
        try:
            start = parse_hhmm(rule.written_start_time)
            end = parse_hhmm(rule.written_end_time)
        except ValueError as e:
            logger.warning(f"Ignoring specific time rule {rule.name!r}: {e}")
            return False
        return in_daily_window(at.hour * 60 + at.minute, start, end)

    if (rule.time_unit or "").strip().upper() == "PERMANENT":
        return True

    # A day list without hours covers the whole day.
    return bool(rule.days)


def is_zone_active(
    zone: Zone,
    general_rules: Sequence[GeneralTimeRule],
    specific_rules: Sequence[SpecificTimeRule],
    at: datetime,
) -> bool:
    """
    Check whether a zone is active at an instant.

    Args:
        zone: Zone to check; its `zone_id` links it to the rules
        general_rules: All general time rules
        specific_rules: All specific time rules
        at: Instant to test (naive values are taken as UTC)

    Returns:
        True if any applicable rule makes the zone active
    """
    if not zone.zone_id:
        return False

    at = as_utc(at)

    for rule in general_rules:
        if _applies_to(rule, zone.zone_id) and _general_rule_active(rule, at):
            return True

    for rule in specific_rules:
        if _applies_to(rule, zone.zone_id) and _specific_rule_active(rule, at):
            return True

    return False


def filter_active_zones(
    zones: Iterable[Zone],
    general_rules: Sequence[GeneralTimeRule],
    specific_rules: Sequence[SpecificTimeRule],
    at: Optional[datetime] = None,
) -> list[Zone]:
    """
    Keep the zones active at `at` (default: now), preserving order.
    """
    at = as_utc(at or datetime.now(timezone.utc))
    zones = list(zones)
    active = [
        zone for zone in zones
        if is_zone_active(zone, general_rules, specific_rules, at)
    ]
    logger.info(f"{len(active)} of {len(zones)} zones active at {at.isoformat()}")
    return active
