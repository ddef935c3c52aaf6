"""
Unit tests for zone activity rules.

Tests cover:
- Permanent and date-range general rules (half-open, UTC)
- Weekday and time-of-day specific rules, including midnight crossing
- Rule linkage through parent/child identifiers
- Order-preserving filtering
"""
from datetime import datetime, timedelta, timezone
import pytest

from flysafe.domain.models import GeneralTimeRule, SpecificTimeRule, Zone
from flysafe.services.domain.zone_schedule import (
    filter_active_zones,
    in_daily_window,
    is_zone_active,
    parse_days,
    parse_hhmm,
)

# Wednesday 2024-05-15 14:30 UTC
WEDNESDAY_AFTERNOON = datetime(2024, 5, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def zone() -> Zone:
    return Zone(name="Military Area", zone_id="Z1")


# ============================================================
# Parsing Helper Tests
# ============================================================

class TestParsingHelpers:
    """Tests for HHMM and weekday parsing."""

    def test_parse_hhmm(self):
        assert parse_hhmm("0000") == 0
        assert parse_hhmm("0930") == 570
        assert parse_hhmm("2400") == 1440

    @pytest.mark.parametrize("value", ["9:30", "ab00", "2460", "2530", ""])
    def test_parse_hhmm_invalid(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)

    def test_parse_days(self):
        assert parse_days("MON, wed,SUN") == {0, 2, 6}

    def test_parse_days_ignores_unknown(self):
        assert parse_days("MON,XYZ") == {0}

    def test_daily_window_half_open(self):
        assert in_daily_window(600, 600, 720)
        assert in_daily_window(719, 600, 720)
        assert not in_daily_window(720, 600, 720)

    def test_daily_window_crosses_midnight(self):
        """22:00-02:00 covers late evening and early morning."""
        assert in_daily_window(23 * 60, 22 * 60, 2 * 60)
        assert in_daily_window(60, 22 * 60, 2 * 60)
        assert not in_daily_window(12 * 60, 22 * 60, 2 * 60)


# ============================================================
# General Rule Tests
# ============================================================

class TestGeneralRules:
    """Tests for permanent and date-range rules."""

    def test_permanent_rule_active(self, zone):
        rule = GeneralTimeRule(parent_id="Z1", permanent="YES", status="ACTIVE")

        assert is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON)

    def test_permanent_rule_inactive_status(self, zone):
        rule = GeneralTimeRule(parent_id="Z1", permanent="YES", status="DRAFT")

        assert not is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON)

    def test_date_range_contains_instant(self, zone):
        rule = GeneralTimeRule(
            child_id="Z1",
            status="ACTIVE",
            start=WEDNESDAY_AFTERNOON - timedelta(hours=1),
            end=WEDNESDAY_AFTERNOON + timedelta(hours=1),
        )

        assert is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON)

    def test_date_range_is_half_open(self, zone):
        """Active at start, inactive at end."""
        rule = GeneralTimeRule(
            parent_id="Z1",
            status="ACTIVE",
            start=WEDNESDAY_AFTERNOON,
            end=WEDNESDAY_AFTERNOON + timedelta(hours=2),
        )

        assert is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON)
        assert not is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON + timedelta(hours=2))

    def test_date_range_compared_in_utc(self, zone):
        """An instant given in another timezone is converted to UTC."""
        rule = GeneralTimeRule(
            parent_id="Z1",
            status="ACTIVE",
            start=datetime(2024, 5, 15, 14, 0, tzinfo=timezone.utc),
            end=datetime(2024, 5, 15, 15, 0, tzinfo=timezone.utc),
        )
        brussels = timezone(timedelta(hours=2))

        assert is_zone_active(zone, [rule], [], datetime(2024, 5, 15, 16, 30, tzinfo=brussels))
        assert not is_zone_active(zone, [rule], [], datetime(2024, 5, 15, 14, 30, tzinfo=brussels))

    def test_naive_instant_is_utc(self, zone):
        rule = GeneralTimeRule(
            parent_id="Z1",
            status="ACTIVE",
            start=datetime(2024, 5, 15, 14, 0, tzinfo=timezone.utc),
            end=datetime(2024, 5, 15, 15, 0, tzinfo=timezone.utc),
        )

        assert is_zone_active(zone, [rule], [], datetime(2024, 5, 15, 14, 30))

    def test_rule_for_other_zone_ignored(self, zone):
        rule = GeneralTimeRule(parent_id="Z2", permanent="YES", status="ACTIVE")

        assert not is_zone_active(zone, [rule], [], WEDNESDAY_AFTERNOON)

    def test_zone_without_id_inactive(self):
        rule = GeneralTimeRule(parent_id=None, permanent="YES", status="ACTIVE")

        assert not is_zone_active(Zone(name="Anonymous"), [rule], [], WEDNESDAY_AFTERNOON)


# ============================================================
# Specific Rule Tests
# ============================================================

class TestSpecificRules:
    """Tests for weekday and time-of-day rules."""

    def test_weekday_and_hours_match(self, zone):
        rule = SpecificTimeRule(
            parent_id="Z1", status="ACTIVE", days="MON,WED,FRI",
            written_start_time="0800", written_end_time="1800",
        )

        assert is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_wrong_weekday(self, zone):
        rule = SpecificTimeRule(
            parent_id="Z1", status="ACTIVE", days="SAT,SUN",
            written_start_time="0800", written_end_time="1800",
        )

        assert not is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_outside_hours(self, zone):
        rule = SpecificTimeRule(
            parent_id="Z1", status="ACTIVE",
            written_start_time="0600", written_end_time="1200",
        )

        assert not is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_overnight_window(self, zone):
        rule = SpecificTimeRule(
            parent_id="Z1", status="ACTIVE",
            written_start_time="2200", written_end_time="0200",
        )

        assert is_zone_active(zone, [], [rule], datetime(2024, 5, 15, 23, 15, tzinfo=timezone.utc))
        assert not is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_days_without_hours_cover_whole_day(self, zone):
        rule = SpecificTimeRule(parent_id="Z1", status="ACTIVE", days="WED")

        assert is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_permanent_time_unit(self, zone):
        rule = SpecificTimeRule(child_id="Z1", status="ACTIVE", time_unit="PERMANENT")

        assert is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_invalid_hours_skipped(self, zone):
        rule = SpecificTimeRule(
            parent_id="Z1", status="ACTIVE", days="WED",
            written_start_time="xx00", written_end_time="1800",
        )

        assert not is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)

    def test_inactive_status_skipped(self, zone):
        rule = SpecificTimeRule(parent_id="Z1", status="WITHDRAWN", time_unit="PERMANENT")

        assert not is_zone_active(zone, [], [rule], WEDNESDAY_AFTERNOON)


# ============================================================
# Filtering Tests
# ============================================================

class TestFilterActiveZones:
    """Tests for filtering a zone collection."""

    def test_keeps_active_zones_in_order(self):
        zones = [Zone(name=f"Z{i}", zone_id=str(i)) for i in range(4)]
        rules = [
            GeneralTimeRule(parent_id="3", permanent="YES", status="ACTIVE"),
            GeneralTimeRule(parent_id="1", permanent="YES", status="ACTIVE"),
        ]

        active = filter_active_zones(zones, rules, [], WEDNESDAY_AFTERNOON)

        assert [z.name for z in active] == ["Z1", "Z3"]

    def test_defaults_to_now(self):
        zones = [Zone(name="Always", zone_id="A")]
        rules = [GeneralTimeRule(parent_id="A", permanent="YES", status="ACTIVE")]

        assert filter_active_zones(zones, rules, []) == zones


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
