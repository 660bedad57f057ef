"""Tests for percentage/pixel conversion of zone thresholds."""
import pytest

from zm_toolkit.errors import RangeError
from zm_toolkit.units import UnitConverter, check_pixels, percent_to_pixels, pixels_to_percent

AREA = 10000


@pytest.mark.unit
class TestPercentToPixels:

    def test_simple(self):
        assert percent_to_pixels(25, AREA) == 2500

    def test_rounds_half_up(self):
        assert percent_to_pixels(50, 5) == 3

    @pytest.mark.parametrize("percent", [100.01, 150, -1])
    def test_out_of_range(self, percent):
        with pytest.raises(RangeError):
            percent_to_pixels(percent, AREA)

    def test_bounds_are_inclusive(self):
        assert percent_to_pixels(0, AREA) == 0
        assert percent_to_pixels(100, AREA) == AREA

    def test_monotonic(self):
        area = 777
        pixels = [percent_to_pixels(p / 4, area) for p in range(0, 401)]
        assert pixels == sorted(pixels)


@pytest.mark.unit
class TestPixelsToPercent:

    def test_formats_significant_digits(self):
        assert pixels_to_percent(1, 3) == "33.33"

    def test_whole_numbers_have_no_trailing_zeros(self):
        assert pixels_to_percent(2500, AREA) == "25"

    def test_zero_area_has_no_percentage(self):
        assert pixels_to_percent(10, 0) is None

    @pytest.mark.parametrize("percent", [0, 0.5, 12.5, 33.33, 99.9, 100])
    def test_round_trip_within_rounding(self, percent):
        area = 4321
        back = float(pixels_to_percent(percent_to_pixels(percent, area), area))
        # one pixel of rounding is at most 100/area percent
        assert abs(back - percent) <= 100 / area


@pytest.mark.unit
class TestCheckPixels:

    def test_within_area(self):
        check_pixels(AREA, AREA)

    def test_above_area(self):
        with pytest.raises(RangeError):
            check_pixels(AREA + 1, AREA)


@pytest.mark.unit
class TestUnitConverter:

    def test_percent_mode_converts_area_relative_writes(self):
        assert UnitConverter("Percent", AREA).to_stored("MinAlarmPixels", "12.5") == "1250"

    def test_percent_sign_is_accepted(self):
        assert UnitConverter("Percent", AREA).to_stored("MaxBlobPixels", "40%") == "4000"

    def test_percent_mode_rejects_over_100(self):
        with pytest.raises(RangeError) as exc_info:
            UnitConverter("Percent", AREA).to_stored("MinAlarmPixels", "101")
        assert exc_info.value.field_name == "MinAlarmPixels"

    def test_pixel_mode_passes_through(self):
        assert UnitConverter("Pixels", AREA).to_stored("MinAlarmPixels", " 900 ") == "900"

    def test_pixel_mode_rejects_more_than_area(self):
        with pytest.raises(RangeError):
            UnitConverter("Pixels", AREA).to_stored("MinAlarmPixels", "10001")

    def test_other_parameters_are_untouched(self):
        converter = UnitConverter("Percent", AREA)
        assert converter.to_stored("MinPixelThreshold", "150") == "150"
        assert converter.to_display("MinBlobs", "3") == "3"

    def test_non_numeric_threshold(self):
        with pytest.raises(RangeError):
            UnitConverter("Pixels", AREA).to_stored("MinAlarmPixels", "lots")

    @pytest.mark.parametrize("units", ["Percent", "Pixels"])
    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "NaN%"])
    def test_non_finite_threshold(self, units, value):
        with pytest.raises(RangeError) as exc_info:
            UnitConverter(units, AREA).to_stored("MinAlarmPixels", value)
        assert exc_info.value.field_name == "MinAlarmPixels"

    def test_pixel_mode_rejects_percent_sign(self):
        with pytest.raises(RangeError):
            UnitConverter("Pixels", AREA).to_stored("MinAlarmPixels", "50%")

    def test_pixel_mode_requires_whole_pixels(self):
        converter = UnitConverter("Pixels", AREA)
        assert converter.to_stored("MinAlarmPixels", "900.0") == "900"
        with pytest.raises(RangeError):
            converter.to_stored("MinAlarmPixels", "900.5")

    def test_display_in_percent_mode(self):
        assert UnitConverter("Percent", AREA).to_display("MinAlarmPixels", "2500") == "25%"

    def test_display_in_pixel_mode(self):
        assert UnitConverter("Pixels", AREA).to_display("MinAlarmPixels", "2500") == "2500"

    @pytest.mark.parametrize("stored", [None, ""])
    def test_absent_value_is_not_displayed(self, stored):
        assert UnitConverter("Percent", AREA).to_display("MaxAlarmPixels", stored) is None

    def test_for_zone_uses_polygon_area(self, driveway):
        converter = UnitConverter.for_zone(driveway)
        assert converter.area == 10000
        assert converter.percent_mode
