"""
Parameter registries for monitors and zones.

Which fields may be read or written, and which have an enumerated domain, is
declared here as data. Adding a field means adding a row to one of the tables
below, nothing else.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import (
    EmptyValueError,
    InvalidEnumValueError,
    MalformedParameterError,
    UnknownParameterError,
)

# Reading this name on a monitor lists its zones instead of a scalar field.
ZONES_PSEUDO_PARAMETER = "Zones"

PARAMETER_DELIMITER = ":"


class EntityKind(Enum):
    MONITOR = "monitor"
    ZONE = "zone"

    @property
    def api_name(self) -> str:
        """Name used in form fields (``Monitor[Function]``)."""
        return self.value.capitalize()

    @property
    def collection(self) -> str:
        """Name of the REST collection (``monitors/3.json``)."""
        return f"{self.value}s"


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    readable: bool = True
    writable: bool = False
    domain: Optional[frozenset] = None
    # Pixel counts that may also be expressed as a percentage of the zone area.
    area_relative: bool = False


FUNCTIONS = frozenset({"None", "Monitor", "Modect", "Record", "Mocord", "Nodect"})
ORIENTATIONS = frozenset({"ROTATE_0", "ROTATE_90", "ROTATE_180", "ROTATE_270", "FLIP_HORI", "FLIP_VERT"})
BOOLEAN_FLAGS = frozenset({"0", "1"})
ZONE_TYPES = frozenset({"Active", "Inclusive", "Exclusive", "Preclusive", "Inactive", "Privacy"})
ZONE_UNITS = frozenset({"Pixels", "Percent"})
CHECK_METHODS = frozenset({"AlarmedPixels", "FilteredPixels", "Blobs"})

UNITS_PERCENT = "Percent"
UNITS_PIXELS = "Pixels"


def _ro(name: str) -> ParameterSpec:
    return ParameterSpec(name)


def _rw(name: str, domain: Optional[frozenset] = None, area_relative: bool = False) -> ParameterSpec:
    return ParameterSpec(name, writable=True, domain=domain, area_relative=area_relative)


_MONITOR_PARAMETERS = (
    _ro("Id"),
    _rw("Name"),
    _ro("Type"),
    _rw("Function", FUNCTIONS),
    _rw("Enabled", BOOLEAN_FLAGS),
    _ro("Status"),
    _ro("Width"),
    _ro("Height"),
    _ro("Colours"),
    _rw("Orientation", ORIENTATIONS),
    _rw("MaxFPS"),
    _rw("AlarmMaxFPS"),
    _rw("AnalysisFPSLimit"),
    _rw("ImageBufferCount"),
    _rw("WarmupCount"),
    _rw("PreEventCount"),
    _rw("PostEventCount"),
    _rw("StreamReplayBuffer"),
    _rw("AlarmFrameCount"),
    _rw("SectionLength"),
    _rw("FrameSkip"),
    _rw("MotionFrameSkip"),
    _rw("Controllable", BOOLEAN_FLAGS),
    _rw("TrackMotion", BOOLEAN_FLAGS),
)

_ZONE_PARAMETERS = (
    _ro("Id"),
    _ro("MonitorId"),
    _rw("Name"),
    _rw("Type", ZONE_TYPES),
    _rw("Units", ZONE_UNITS),
    _ro("NumCoords"),
    _ro("Coords"),
    _ro("Area"),
    _rw("AlarmRGB"),
    _rw("CheckMethod", CHECK_METHODS),
    _rw("MinPixelThreshold"),
    _rw("MaxPixelThreshold"),
    _rw("MinAlarmPixels", area_relative=True),
    _rw("MaxAlarmPixels", area_relative=True),
    _rw("FilterX"),
    _rw("FilterY"),
    _rw("MinFilterPixels", area_relative=True),
    _rw("MaxFilterPixels", area_relative=True),
    _rw("MinBlobPixels", area_relative=True),
    _rw("MaxBlobPixels", area_relative=True),
    _rw("MinBlobs"),
    _rw("MaxBlobs"),
    _rw("OverloadFrames"),
    _rw("ExtendAlarmFrames"),
)

SCHEMA: Mapping[EntityKind, Mapping[str, ParameterSpec]] = MappingProxyType({
    EntityKind.MONITOR: MappingProxyType({p.name: p for p in _MONITOR_PARAMETERS}),
    EntityKind.ZONE: MappingProxyType({p.name: p for p in _ZONE_PARAMETERS}),
})

AREA_RELATIVE_PARAMETERS = frozenset(
    p.name for p in SCHEMA[EntityKind.ZONE].values() if p.area_relative
)


def as_kind(kind) -> EntityKind:
    return kind if isinstance(kind, EntityKind) else EntityKind(kind)


def is_parameter_name(kind, name: str) -> bool:
    """True when ``name`` is any known parameter (or the zone listing) of ``kind``."""
    kind = as_kind(kind)
    if kind is EntityKind.MONITOR and name == ZONES_PSEUDO_PARAMETER:
        return True
    return name in SCHEMA[kind]


def validate_read(kind, name: str) -> Optional[ParameterSpec]:
    """
    Check that ``name`` may be read on an entity of ``kind``.

    Returns the parameter descriptor, or None for the monitor zone listing,
    which is answered from the monitor's zone collection rather than a field.

    Raises:
        UnknownParameterError: the name is not readable for this kind.
    """
    kind = as_kind(kind)
    if kind is EntityKind.MONITOR and name == ZONES_PSEUDO_PARAMETER:
        return None
    spec = SCHEMA[kind].get(name)
    if spec is None or not spec.readable:
        raise UnknownParameterError(f"'{name}' is not a readable {kind.value} parameter", field_name=name)
    return spec


def validate_write(kind, name: str, value: Optional[str]) -> ParameterSpec:
    """
    Check that ``name`` may be set to ``value`` on an entity of ``kind``.

    Raises:
        UnknownParameterError: the name is not writable for this kind.
        EmptyValueError: the value is missing or blank.
        InvalidEnumValueError: the parameter has a fixed domain and value is not in it.
    """
    kind = as_kind(kind)
    spec = SCHEMA[kind].get(name)
    if spec is None or not spec.writable:
        raise UnknownParameterError(f"'{name}' is not a writable {kind.value} parameter", field_name=name, value=value)
    if value is None or not str(value).strip():
        raise EmptyValueError(f"No value given for {kind.value} parameter '{name}'", field_name=name, value=value)
    if spec.domain is not None and value not in spec.domain:
        allowed = ", ".join(sorted(spec.domain))
        raise InvalidEnumValueError(
            f"'{value}' is not a valid {name}; expected one of: {allowed}", field_name=name, value=value
        )
    return spec


def parse_parameter_token(token: str) -> tuple[str, str]:
    """
    Split a ``Name:Value`` write token.

    Only the first delimiter counts, so values may themselves contain colons.
    """
    if PARAMETER_DELIMITER not in token:
        raise MalformedParameterError(f"Expected Name{PARAMETER_DELIMITER}Value, got '{token}'", field_name=token)
    name, value = token.split(PARAMETER_DELIMITER, 1)
    if not name:
        raise MalformedParameterError(f"Missing parameter name in '{token}'", value=value)
    if not value.strip():
        raise EmptyValueError(f"No value given for parameter '{name}'", field_name=name, value=value)
    return name, value
