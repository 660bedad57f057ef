"""
Percentage / pixel conversion for zone thresholds.

ZoneMinder always stores the area-relative thresholds (MinAlarmPixels and
friends) as pixel counts. A zone whose unit mode is Percent shows and accepts
them as a percentage of the zone polygon's area instead.
"""
import logging
import math
from typing import Optional

from .errors import RangeError
from .schema import AREA_RELATIVE_PARAMETERS, UNITS_PERCENT

logger = logging.getLogger(__name__)

PERCENT_DISPLAY_FORMAT = "{:.4g}"


def _number(name: str, value, allow_percent: bool = True) -> float:
    text = str(value).strip()
    if text.endswith("%"):
        if not allow_percent:
            raise RangeError(f"{name} is a pixel count on this zone, got '{value}'", field_name=name, value=value)
        text = text[:-1].strip()
    try:
        number = float(text)
    except ValueError:
        raise RangeError(f"{name} must be a number, got '{value}'", field_name=name, value=value) from None
    if not math.isfinite(number):
        raise RangeError(f"{name} must be a finite number, got '{value}'", field_name=name, value=value)
    return number


def percent_to_pixels(percent: float, area: int, name: str = "value") -> int:
    """Pixels covering ``percent`` of ``area``, rounded half-up."""
    if not 0 <= percent <= 100:
        raise RangeError(f"{name} must be between 0 and 100 percent, got {percent:g}", field_name=name, value=percent)
    return int(area * percent / 100 + 0.5)


def pixels_to_percent(pixels: float, area: int) -> Optional[str]:
    """Percentage of ``area`` covered by ``pixels``, formatted for display."""
    if area <= 0:
        return None
    return PERCENT_DISPLAY_FORMAT.format(pixels * 100 / area)


def check_pixels(pixels: float, area: int, name: str = "value") -> None:
    if not 0 <= pixels <= area:
        raise RangeError(
            f"{name} must be between 0 and the zone area ({area} pixels), got {pixels:g}", field_name=name, value=pixels
        )


class UnitConverter:
    """Converts area-relative thresholds for one zone."""

    def __init__(self, units: str, area: int):
        self.units = units
        self.area = area

    @classmethod
    def for_zone(cls, zone) -> "UnitConverter":
        return cls(zone.units, zone.area)

    @property
    def percent_mode(self) -> bool:
        return self.units == UNITS_PERCENT

    def to_stored(self, name: str, value: str) -> str:
        """
        Value to send to the server for a write of ``name``.

        Raises:
            RangeError: the value is not a finite number, is above 100 percent,
                or is not a whole pixel count within the zone area.
        """
        if name not in AREA_RELATIVE_PARAMETERS:
            return value
        number = _number(name, value, allow_percent=self.percent_mode)
        if self.percent_mode:
            pixels = percent_to_pixels(number, self.area, name)
            logger.debug(f"{name}: {number:g}% of {self.area} px -> {pixels} px")
            return str(pixels)
        if not number.is_integer():
            raise RangeError(f"{name} must be a whole number of pixels, got '{value}'", field_name=name, value=value)
        check_pixels(number, self.area, name)
        return str(int(number))

    def to_display(self, name: str, stored) -> Optional[str]:
        """Display form of a stored value; None when nothing is stored."""
        if stored is None or stored == "":
            return None
        if name not in AREA_RELATIVE_PARAMETERS or not self.percent_mode:
            return str(stored)
        percent = pixels_to_percent(_number(name, stored), self.area)
        if percent is None:
            logger.warning(f"{name}: zone has no area, showing raw pixel count")
            return str(stored)
        return f"{percent}%"
