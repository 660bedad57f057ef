"""
Zone polygon geometry.

ZoneMinder stores a zone outline as a space-separated list of "x,y" pairs
("0,0 639,0 639,479 0,479"). The outline is implicitly closed: the last
vertex connects back to the first.

Pure functions only, no I/O.
"""
import re
from dataclasses import dataclass

from .errors import PolygonError

Point = tuple[int, int]

_PAIR_RE = re.compile(r"^(-?\d+),(-?\d+)$")


@dataclass(frozen=True)
class Polygon:
    """
    A polygon normalised to clockwise winding.

    Attributes:
        vertices: vertices in clockwise order (image coordinates, y grows downwards)
        area: unsigned enclosed area rounded half-up to whole pixels
    """
    vertices: tuple[Point, ...]
    area: int

    @property
    def coords(self) -> str:
        return format_coords(self.vertices)


def parse_coords(coords: str) -> list[Point]:
    """Parse a serialized coordinate list into integer vertex pairs."""
    if not coords or not coords.strip():
        raise PolygonError("Empty coordinate list")
    points = []
    for pair in coords.split():
        match = _PAIR_RE.match(pair.rstrip(","))
        if not match:
            raise PolygonError(f"Malformed coordinate pair '{pair}' in '{coords}'")
        points.append((int(match.group(1)), int(match.group(2))))
    return points


def format_coords(points) -> str:
    return " ".join(f"{x},{y}" for x, y in points)


def shoelace_sum(points) -> int:
    """
    Twice the signed area of a closed polygon.

    Positive means the vertices run clockwise on screen, where the y axis
    points down; negative means counter-clockwise.
    """
    total = 0
    count = len(points)
    for i in range(count):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % count]
        total += x1 * y2 - x2 * y1
    return total


def _open_ring(points) -> list[Point]:
    ring = [tuple(p) for p in points]
    # A ring that repeats its first vertex at the end is closed explicitly.
    while len(ring) > 1 and ring[0] == ring[-1]:
        ring.pop()
    return ring


def polygon_from_points(points) -> Polygon:
    """
    Compute area and clockwise vertex order for an ordered vertex list.

    Collinear or otherwise degenerate outlines give an area of 0; callers
    decide whether that is meaningful.

    Raises:
        PolygonError: fewer than 3 distinct vertices.
    """
    ring = _open_ring(points)
    if len(set(ring)) < 3:
        raise PolygonError(f"A polygon needs at least 3 distinct vertices, got {len(set(ring))}")

    raw = shoelace_sum(ring)
    if raw < 0:
        # Keep the starting vertex and walk the ring the other way.
        ring = [ring[0]] + ring[:0:-1]
    return Polygon(vertices=tuple(ring), area=(abs(raw) + 1) // 2)


def polygon_from_coords(coords: str) -> Polygon:
    return polygon_from_points(parse_coords(coords))


def polygon_area(coords: str) -> int:
    """Area in pixels of a serialized zone outline."""
    return polygon_from_coords(coords).area
