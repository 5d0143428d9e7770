"""Tests for Period parsing and transfer economics."""

import pytest

from rostercap.core.models import Period, PeriodKind


class TestPeriodParse:
    """Tests for Period.parse."""

    @pytest.mark.parametrize("value", [None, "", "Preseason", "preseason", "  PRESEASON "])
    def test_preseason_values(self, value):
        """Missing or preseason values parse as Preseason."""
        assert Period.parse(value) == Period.preseason()

    def test_setup(self):
        assert Period.parse("Setup").kind == PeriodKind.SETUP

    @pytest.mark.parametrize("value", ["5", 5, "Week 5", "week5"])
    def test_week_values(self, value):
        """Week numbers parse from strings and ints."""
        assert Period.parse(value) == Period.for_week(5)

    @pytest.mark.parametrize("value", ["0", "-1", "offseason", "week"])
    def test_invalid_values(self, value):
        with pytest.raises(ValueError):
            Period.parse(value)

    def test_period_passthrough(self):
        period = Period.for_week(3)
        assert Period.parse(period) is period


class TestPeriodModel:
    """Tests for Period behavior."""

    def test_to_setting_round_trip(self):
        for period in (Period.setup(), Period.preseason(), Period.for_week(12)):
            assert Period.parse(period.to_setting()) == period

    def test_settings_strings(self):
        assert Period.setup().to_setting() == "Setup"
        assert Period.preseason().to_setting() == "Preseason"
        assert Period.for_week(7).to_setting() == "7"

    def test_transfers_free_outside_weeks(self):
        """Setup and Preseason transfers are free; weeks are not."""
        assert Period.setup().transfers_are_free
        assert Period.preseason().transfers_are_free
        assert not Period.for_week(1).transfers_are_free

    def test_display_name(self):
        assert str(Period.for_week(5)) == "Week 5"
        assert str(Period.preseason()) == "Preseason"

    def test_week_requires_number(self):
        with pytest.raises(ValueError):
            Period(PeriodKind.WEEK)

    def test_non_week_rejects_number(self):
        with pytest.raises(ValueError):
            Period(PeriodKind.PRESEASON, 2)
