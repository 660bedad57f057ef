"""
Monitor/zone lookup tables and key resolution.

The registry is populated once per run from the server and is read-only
afterwards; it is passed explicitly to whatever needs to resolve a key.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .errors import NotFoundError
from .models import Monitor, Zone
from .schema import PARAMETER_DELIMITER, EntityKind, is_parameter_name
from .settings import MONITORS_ENDPOINT, ZONES_ENDPOINT

logger = logging.getLogger(__name__)


class MonitorRegistry:
    """Monitors indexed by id and by name."""

    def __init__(self, monitors):
        monitors = list(monitors)
        self.by_id: Mapping[int, Monitor] = MappingProxyType({m.id: m for m in monitors})
        self.by_name: Mapping[str, Monitor] = MappingProxyType({m.name: m for m in monitors})

    def __iter__(self) -> Iterator[Monitor]:
        return iter(sorted(self.by_id.values(), key=lambda m: m.id))

    def __len__(self) -> int:
        return len(self.by_id)


def _match(key, by_id: Mapping, by_name: Mapping):
    key = str(key).strip()
    if key.isdigit() and int(key) in by_id:
        return by_id[int(key)]
    return by_name.get(key)


class TokenKind(Enum):
    MONITOR_PARAMETER = "monitor parameter"
    ZONE = "zone"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TokenClass:
    """What an argument following a monitor key turned out to be."""
    kind: TokenKind
    zone: Optional[Zone] = None


class EntityResolver:
    """Resolves user-supplied ids or names to monitors and zones."""

    def __init__(self, registry: MonitorRegistry):
        self.registry = registry

    def monitor(self, key) -> Monitor:
        """
        Look up a monitor by numeric id, then by exact (case-sensitive) name.

        Raises:
            NotFoundError: neither matched.
        """
        monitor = _match(key, self.registry.by_id, self.registry.by_name)
        if monitor is None:
            raise NotFoundError("monitor", str(key))
        return monitor

    def resolve_monitor(self, key) -> int:
        return self.monitor(key).id

    def zone(self, monitor_id: int, key) -> Optional[Zone]:
        """Zone of the given monitor matching ``key``, or None."""
        monitor = self.registry.by_id.get(monitor_id)
        if monitor is None:
            raise NotFoundError("monitor", str(monitor_id))
        return _match(key, monitor.zones.by_id, monitor.zones.by_name)

    def resolve_zone(self, monitor_id: int, key) -> Optional[int]:
        zone = self.zone(monitor_id, key)
        return zone.id if zone else None

    def classify_token(self, monitor_id: int, token: str) -> TokenClass:
        """
        Decide whether ``token`` is a monitor parameter or a zone key.

        The parameter name (the part before any delimiter) is tried against
        the monitor registry first; only then is the whole token tried as a
        zone id or name.
        """
        name = token.split(PARAMETER_DELIMITER, 1)[0]
        if is_parameter_name(EntityKind.MONITOR, name):
            return TokenClass(TokenKind.MONITOR_PARAMETER)
        zone = self.zone(monitor_id, token)
        if zone is not None:
            return TokenClass(TokenKind.ZONE, zone)
        return TokenClass(TokenKind.UNKNOWN)


def load_registry(session) -> MonitorRegistry:
    """
    Fetch every monitor and zone and build the lookup tables.

    Zones are attached to their owning monitor; zones whose monitor is not
    in the monitor list are ignored.
    """
    logger.info("Fetching monitor list...")
    monitors = [Monitor.from_api_dict(m) for m in session.get_json(MONITORS_ENDPOINT).get("monitors", [])]
    logger.info(f"Found {len(monitors)} monitors.")

    zones_by_monitor = defaultdict(list)
    for item in session.get_json(ZONES_ENDPOINT).get("zones", []):
        zone = Zone.from_api_dict(item)
        zones_by_monitor[zone.monitor_id].append(zone)

    for monitor in monitors:
        monitor.attach_zones(zones_by_monitor.pop(monitor.id, []))
        logger.debug(f"Monitor {monitor.name} (ID: {monitor.id}): {len(monitor.zones)} zones")
    for orphan_id in zones_by_monitor:
        logger.warning(f"Ignoring zones of unknown monitor id {orphan_id}")

    return MonitorRegistry(monitors)
