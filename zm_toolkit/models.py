"""
Typed representations of the server's monitors, zones and events.

Plain data objects built from the API's JSON documents, where every record is
wrapped one level deep (``{"Monitor": {...}}``). The HTTP side lives in
:mod:`zm_toolkit.session`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterator, Mapping

from .geometry import Polygon, polygon_from_coords
from .schema import UNITS_PIXELS


def _unwrap(data: dict, key: str) -> dict:
    return data.get(key, data)


@dataclass(frozen=True)
class Zone:
    """A detection zone polygon belonging to a monitor."""
    id: int
    monitor_id: int
    name: str
    type: str = ""
    units: str = UNITS_PIXELS
    coords: str = ""
    fields: Mapping[str, str] = field(default_factory=dict, repr=False)

    @property
    def polygon(self) -> Polygon:
        return polygon_from_coords(self.coords)

    @property
    def area(self) -> int:
        return self.polygon.area

    @classmethod
    def from_api_dict(cls, data: dict) -> "Zone":
        zone = _unwrap(data, "Zone")
        return cls(
            id=int(zone.get("Id", 0)),
            monitor_id=int(zone.get("MonitorId", 0)),
            name=zone.get("Name", ""),
            type=zone.get("Type", ""),
            units=zone.get("Units", UNITS_PIXELS),
            coords=zone.get("Coords", ""),
            fields=MappingProxyType(dict(zone)),
        )


class ZoneCollection:
    """A monitor's zones, addressable by id and by name."""

    def __init__(self, zones=()):
        zones = list(zones)
        self.by_id: Mapping[int, Zone] = MappingProxyType({z.id: z for z in zones})
        self.by_name: Mapping[str, Zone] = MappingProxyType({z.name: z for z in zones})

    def __iter__(self) -> Iterator[Zone]:
        return iter(sorted(self.by_id.values(), key=lambda z: z.id))

    def __len__(self) -> int:
        return len(self.by_id)


@dataclass
class Monitor:
    """A configured video source."""
    id: int
    name: str = ""
    function: str = ""      # "None", "Monitor", "Modect", "Record", ...
    enabled: bool = True
    status: str = ""        # connection status, e.g. "Connected"
    fields: Mapping[str, str] = field(default_factory=dict, repr=False)
    zones: ZoneCollection = field(default_factory=ZoneCollection, repr=False)

    @property
    def active(self) -> bool:
        """Enabled and with a function other than None."""
        return self.enabled and self.function != "None"

    def attach_zones(self, zones) -> None:
        self.zones = ZoneCollection(zones)

    @classmethod
    def from_api_dict(cls, data: dict) -> "Monitor":
        mon = _unwrap(data, "Monitor")
        status = (data.get("Monitor_Status") or {}).get("Status", "")
        fields = dict(mon)
        fields["Status"] = status
        return cls(
            id=int(mon.get("Id", 0)),
            name=mon.get("Name", ""),
            function=mon.get("Function", ""),
            enabled=_flag(mon.get("Enabled"), default=True),
            status=status,
            fields=MappingProxyType(fields),
        )


@dataclass(frozen=True)
class Event:
    """A recorded event. Immutable once fetched."""
    id: int
    monitor_id: int
    name: str = ""
    start_time: datetime | None = None
    notes: str = ""
    frames: int = 0
    alarm_frames: int = 0
    length: float = 0.0

    @classmethod
    def from_api_dict(cls, data: dict) -> "Event":
        ev = _unwrap(data, "Event")
        return cls(
            id=int(ev.get("Id", 0)),
            monitor_id=int(ev.get("MonitorId", 0)),
            name=ev.get("Name", ""),
            start_time=_parse_dt(ev.get("StartDateTime") or ev.get("StartTime")),
            notes=ev.get("Notes") or "",
            frames=int(ev.get("Frames") or 0),
            alarm_frames=int(ev.get("AlarmFrames") or 0),
            length=float(ev.get("Length") or 0),
        )


def _flag(val, default: bool = False) -> bool:
    """Server booleans arrive as "1"/"0", 1/0 or true/false."""
    if val is None or val == "":
        return default
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "yes")


def _parse_dt(val: str | None) -> datetime | None:
    if not val:
        return None
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(val, fmt)
        except (ValueError, TypeError):
            continue
    return None
