"""Conversion of OpenAir arcs into polyline approximations.

OpenAir describes curved boundaries either by a center plus two boundary
points (``DB``) or by a center, radius and two compass angles (``DA``). Both
are sampled into evenly spaced points along the sweep.

The sweep direction is taken from the arc's clockwise flag, never from the
shorter way round: a clockwise arc from 350 to 10 degrees sweeps +20, while
the same arc counterclockwise sweeps -340.

Typical usage:
    from airspacekit.geometry.arcs import ArcDefinition, arc_to_polygon_points

    arc = ArcDefinition(center=center, start_point=a, end_point=b, clockwise=True)
    points = arc_to_polygon_points(arc, num_points=30)
"""

from dataclasses import dataclass

from airspacekit.geometry.coordinates import Coordinate
from airspacekit.geometry.great_circle import bearing, destination, distance


@dataclass(frozen=True)
class ArcDefinition:
    """Arc defined by its center and two boundary points.

    Attributes:
        center: Arc center.
        start_point: First point on the arc; also fixes the radius.
        end_point: Point whose bearing from the center ends the sweep.
        clockwise: True for ``V D=+`` arcs, False for ``V D=-``.
    """

    center: Coordinate
    start_point: Coordinate
    end_point: Coordinate
    clockwise: bool = True


@dataclass(frozen=True)
class AngleArcDefinition:
    """Arc defined by center, radius and compass angles (``DA`` command).

    Attributes:
        center: Arc center.
        radius_nm: Radius in nautical miles.
        start_angle: Start bearing in degrees clockwise from true north.
        end_angle: End bearing in degrees clockwise from true north.
        clockwise: Sweep direction.
    """

    center: Coordinate
    radius_nm: float
    start_angle: float
    end_angle: float
    clockwise: bool = True


def sweep_angle(start_bearing: float, end_bearing: float, clockwise: bool) -> float:
    """Signed sweep from start to end bearing in the requested direction.

    Clockwise sweeps are normalized into [0, 360) and counterclockwise sweeps
    into (-360, 0].

    Examples:
        >>> sweep_angle(350.0, 10.0, clockwise=True)
        20.0
        >>> sweep_angle(350.0, 10.0, clockwise=False)
        -340.0
    """
    sweep = end_bearing - start_bearing
    if clockwise:
        if sweep < 0:
            sweep += 360
    elif sweep > 0:
        sweep -= 360
    return sweep


def _sample_sweep(
    center: Coordinate, radius_nm: float, start_bearing: float, sweep: float, num_points: int
) -> list[Coordinate]:
    points: list[Coordinate] = []
    for i in range(num_points + 1):
        t = i / num_points
        current = (start_bearing + sweep * t) % 360
        lat, lon = destination(center.latitude, center.longitude, current, radius_nm)
        points.append(Coordinate(lat, lon))
    return points


def arc_to_polygon_points(arc: ArcDefinition, num_points: int = 20) -> list[Coordinate]:
    """Sample an arc given by center, start and end points.

    The radius is the distance from the center to the start point; the end
    point only contributes its bearing.

    Args:
        arc: Arc definition.
        num_points: Number of segments; ``num_points + 1`` points are returned,
            the first on the start bearing and the last on the end bearing.

    Returns:
        Points along the arc, in sweep order.

    Raises:
        ValueError: If ``num_points`` is not positive.
    """
    if num_points <= 0:
        raise ValueError(f"num_points must be positive, got {num_points}")

    c = arc.center
    radius = distance(c.latitude, c.longitude, arc.start_point.latitude, arc.start_point.longitude)
    start_bearing = bearing(
        c.latitude, c.longitude, arc.start_point.latitude, arc.start_point.longitude
    )
    end_bearing = bearing(c.latitude, c.longitude, arc.end_point.latitude, arc.end_point.longitude)

    sweep = sweep_angle(start_bearing, end_bearing, arc.clockwise)
    return _sample_sweep(c, radius, start_bearing, sweep, num_points)


def arc_by_angles(
    center: Coordinate,
    radius_nm: float,
    start_angle: float,
    end_angle: float,
    clockwise: bool,
    num_points: int = 30,
) -> list[Coordinate]:
    """Sample an arc given by radius and explicit compass angles.

    Args:
        center: Arc center.
        radius_nm: Radius in nautical miles.
        start_angle: Start bearing in degrees.
        end_angle: End bearing in degrees.
        clockwise: Sweep direction.
        num_points: Number of segments (``num_points + 1`` points returned).

    Returns:
        Points along the arc, in sweep order.

    Raises:
        ValueError: If ``num_points`` is not positive.
    """
    if num_points <= 0:
        raise ValueError(f"num_points must be positive, got {num_points}")

    sweep = sweep_angle(start_angle, end_angle, clockwise)
    return _sample_sweep(center, radius_nm, start_angle, sweep, num_points)


def angle_arc_points(arc: AngleArcDefinition, num_points: int = 30) -> list[Coordinate]:
    """Sample an :class:`AngleArcDefinition`."""
    return arc_by_angles(
        arc.center, arc.radius_nm, arc.start_angle, arc.end_angle, arc.clockwise, num_points
    )
