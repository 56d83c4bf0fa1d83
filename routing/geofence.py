#Purpose: Zone geofencing logic.
#Answers "which delivery zones contain this point?" for fee resolution
#and for the preferred-zone rule of the driver candidate filter.
#Zones are polygons given as rings of (lat, lon) vertices.
#Output: the zones containing the point, in the order they were defined.

from typing import List, Sequence

from routing.geo import LatLon, validate_coordinate


def _on_segment(point: LatLon, start: LatLon, end: LatLon) -> bool:
    """True if point lies on the segment start-end (inclusive)."""
    (py, px), (ay, ax), (by, bx) = point, start, end
    cross = (bx - ax) * (py - ay) - (by - ay) * (px - ax)
    if abs(cross) > 1e-12:
        return False
    return min(ax, bx) <= px <= max(ax, bx) and min(ay, by) <= py <= max(ay, by)


def point_in_polygon(point, ring: Sequence[LatLon]) -> bool:
    """
    Ray casting test for a (lat, lon) point against a polygon ring.

    Points on an edge or vertex count as inside. The ring may be open or
    closed (first vertex repeated at the end). Fewer than 3 vertices never
    contains anything.
    """
    lat, lon = validate_coordinate(point)

    vertices = list(ring)
    if len(vertices) >= 2 and tuple(vertices[0]) == tuple(vertices[-1]):
        vertices = vertices[:-1]
    if len(vertices) < 3:
        return False

    inside = False
    count = len(vertices)
    for index in range(count):
        start = vertices[index]
        end = vertices[(index + 1) % count]

        if _on_segment((lat, lon), start, end):
            return True

        start_lat, start_lon = start
        end_lat, end_lon = end

        # cast the ray along +lon and count crossings
        if (start_lat > lat) != (end_lat > lat):
            crossing_lon = start_lon + (lat - start_lat) * (end_lon - start_lon) / (end_lat - start_lat)
            if lon < crossing_lon:
                inside = not inside

    return inside


def zones_containing(point, zones: Sequence) -> List:
    """
    Returns the zones (objects with a .boundary ring) whose polygon contains point,
    keeping the input order so callers can break ties by definition order.
    """
    validate_coordinate(point)
    return [zone for zone in zones if point_in_polygon(point, zone.boundary)]
