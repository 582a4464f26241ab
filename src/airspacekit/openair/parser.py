"""Line-oriented OpenAir airspace parser.

Reads OpenAir text (reference: http://www.winpilot.com/UsersGuide/UserAirspace.asp)
and emits one :class:`OpenAirAirspace` per named record that carries some
geometry. The parser is best effort: malformed lines are skipped and logged
at DEBUG, and records without geometry are dropped silently.

Recognized commands:
    AC <class>          start a new airspace (flushes the previous one)
    AN <name>           display name
    AL / AH <text>      floor / ceiling text, converted to feet later
    V D=+ | V D=-       arc direction for subsequent arcs
    V X=<coord>         arc / circle center
    DP <coord>          polygon vertex
    DB <c1>,<c2>        arc between two boundary points
    DC <radius>         circle radius in NM
    DA <r>,<a1>,<a2>    arc by radius and compass angles
    *                   close the current airspace

Typical usage:
    from airspacekit.openair.parser import parse_openair_file

    airspaces = parse_openair_file(text)
    for airspace in airspaces:
        print(airspace.name, airspace.type)
"""

import logging
import re
from dataclasses import dataclass, field

from airspacekit.geometry.arcs import ArcDefinition, arc_by_angles, arc_to_polygon_points
from airspacekit.geometry.coordinates import Coordinate, parse_coordinate_pair

logger = logging.getLogger(__name__)

CLASS_LABELS: dict[str, str] = {
    "Q": "Class E",
    "R": "Restricted",
    "P": "Prohibited",
    "A": "Class A",
    "B": "Class B",
    "C": "Class C",
    "D": "Class D",
    "E": "Class E",
    "F": "Restricted",
    "W": "Warning",
    "G": "Class G",
}

DEFAULT_ARC_POINTS = 30
CLOSURE_TOLERANCE_DEG = 0.0001

_DIRECTION_RE = re.compile(r"^V\s+D\s*=\s*([+-])")
_CENTER_RE = re.compile(r"^V\s+X\s*=\s*(.*)$")
_RADIUS_RE = re.compile(r"^DC\s+([\d.]+)")
_ANGLE_ARC_RE = re.compile(r"^DA\s+([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)")


def class_label(code: str) -> str:
    """Map an OpenAir class code to its display label.

    Unknown codes pass through verbatim.

    Examples:
        >>> class_label("R")
        'Restricted'
        >>> class_label("CTR")
        'CTR'
    """
    return CLASS_LABELS.get(code, code)


@dataclass
class OpenAirAirspace:
    """Airspace as read from an OpenAir file, before conversion.

    Attributes:
        id: Synthetic parser id (``airspace-N``).
        name: Display name from ``AN``.
        type: Class label mapped from ``AC``.
        altitude_low: Raw ``AL`` text.
        altitude_high: Raw ``AH`` text.
        coordinates: Explicit ``DP`` points (or the ``V X=`` center when no
            point was given).
        center: Last ``V X=`` center, if any.
        radius: ``DC`` radius in nautical miles, if any.
        polygon: Closed vertex ring built from ``DP``/``DB``/``DA``, if any.
    """

    id: str
    name: str
    type: str
    altitude_low: str = "0"
    altitude_high: str = "18000"
    coordinates: list[Coordinate] = field(default_factory=list)
    center: Coordinate | None = None
    radius: float | None = None
    polygon: list[Coordinate] | None = None


@dataclass
class _PendingAirspace:
    """Mutable record under construction."""

    type: str
    name: str | None = None
    altitude_low: str | None = None
    altitude_high: str | None = None
    coordinates: list[Coordinate] = field(default_factory=list)
    center: Coordinate | None = None
    radius: float | None = None


class OpenAirParser:
    """Single-pass state machine over OpenAir lines.

    The parser owns the record under construction, its vertex accumulator,
    the current arc center and the arc direction. Feed lines one at a time
    with :meth:`feed_line` and call :meth:`finish` at end of input, or use
    :meth:`parse` for a whole document.

    Examples:
        >>> parser = OpenAirParser()
        >>> airspaces = parser.parse("AC D\\nAN Test\\nV X=40:00:00 N 100:00:00 W\\nDC 5\\n*")
        >>> airspaces[0].radius
        5.0
    """

    def __init__(
        self,
        arc_points: int = DEFAULT_ARC_POINTS,
        closure_tolerance_deg: float = CLOSURE_TOLERANCE_DEG,
    ) -> None:
        """Initialize parser state.

        Args:
            arc_points: Segments used when sampling DB and DA arcs.
            closure_tolerance_deg: Max first/last vertex gap treated as closed.
        """
        self.arc_points = arc_points
        self.closure_tolerance_deg = closure_tolerance_deg
        self._airspaces: list[OpenAirAirspace] = []
        self._counter = 0
        self._skipped_lines = 0
        self._reset_record()

    @property
    def skipped_lines(self) -> int:
        """Number of recognized command lines that could not be parsed."""
        return self._skipped_lines

    def _reset_record(self) -> None:
        self._current: _PendingAirspace | None = None
        self._polygon: list[Coordinate] = []
        self._arc_center: Coordinate | None = None
        self._clockwise = True

    def parse(self, text: str) -> list[OpenAirAirspace]:
        """Parse a complete OpenAir document.

        Args:
            text: Document text. Non-string or empty input yields no airspaces.

        Returns:
            Airspaces in file order.
        """
        if not isinstance(text, str) or not text:
            return []

        for line in text.splitlines():
            self.feed_line(line)
        return self.finish()

    def feed_line(self, raw_line: str) -> None:
        """Process a single line of OpenAir text."""
        line = raw_line.strip()

        if not line or line.startswith("*"):
            if line == "*" and self._current is not None:
                self._close_current()
            return

        if line.startswith("AC "):
            self._start_airspace(line[3:].strip())
        elif self._current is None:
            # Commands outside an AC block have nothing to attach to.
            return
        elif line.startswith("AN "):
            self._current.name = line[3:].strip()
        elif line.startswith("AL "):
            self._current.altitude_low = line[3:].strip()
        elif line.startswith("AH "):
            self._current.altitude_high = line[3:].strip()
        elif line.startswith("V "):
            self._handle_variable(line)
        elif line.startswith("DP "):
            self._handle_point(line)
        elif line.startswith("DB "):
            self._handle_boundary_arc(line)
        elif line.startswith("DC "):
            self._handle_circle(line)
        elif line.startswith("DA "):
            self._handle_angle_arc(line)

    def finish(self) -> list[OpenAirAirspace]:
        """Flush any open airspace and return everything parsed so far."""
        if self._current is not None:
            self._close_current()
        airspaces = self._airspaces
        self._airspaces = []
        return airspaces

    def _start_airspace(self, class_code: str) -> None:
        if self._current is not None:
            self._close_current()
        self._reset_record()
        self._current = _PendingAirspace(type=class_label(class_code))

    def _skip(self, line: str, reason: str) -> None:
        self._skipped_lines += 1
        logger.debug("Skipping OpenAir line (%s): %s", reason, line)

    def _handle_variable(self, line: str) -> None:
        direction = _DIRECTION_RE.match(line)
        if direction:
            self._clockwise = direction.group(1) == "+"
            return

        center_match = _CENTER_RE.match(line)
        if center_match:
            coord = parse_coordinate_pair(center_match.group(1))
            if coord is None:
                self._skip(line, "bad center")
                return
            self._arc_center = coord
            self._current.center = coord
            if not self._current.coordinates:
                self._current.coordinates = [coord]

    def _handle_point(self, line: str) -> None:
        coord = parse_coordinate_pair(line[3:])
        if coord is None:
            self._skip(line, "bad point")
            return
        self._polygon.append(coord)
        self._current.coordinates.append(coord)

    def _handle_boundary_arc(self, line: str) -> None:
        if self._arc_center is None:
            self._skip(line, "arc without center")
            return

        parts = line[3:].strip().split(",")
        if len(parts) != 2:
            self._skip(line, "expected two arc endpoints")
            return

        start = parse_coordinate_pair(parts[0].strip())
        end = parse_coordinate_pair(parts[1].strip())
        if start is None or end is None:
            self._skip(line, "bad arc endpoint")
            return

        # The arc continues from the last vertex when there is one.
        arc_start = self._polygon[-1] if self._polygon else start
        points = arc_to_polygon_points(
            ArcDefinition(
                center=self._arc_center,
                start_point=arc_start,
                end_point=end,
                clockwise=self._clockwise,
            ),
            self.arc_points,
        )
        self._polygon.extend(points[1:] if self._polygon else points)

    def _handle_circle(self, line: str) -> None:
        match = _RADIUS_RE.match(line)
        if not match:
            self._skip(line, "bad radius")
            return
        try:
            self._current.radius = float(match.group(1))
        except ValueError:
            self._skip(line, "bad radius")

    def _handle_angle_arc(self, line: str) -> None:
        if self._arc_center is None:
            self._skip(line, "arc without center")
            return

        match = _ANGLE_ARC_RE.match(line)
        if not match:
            self._skip(line, "bad angle arc")
            return
        try:
            radius, start_angle, end_angle = (float(g) for g in match.groups())
        except ValueError:
            self._skip(line, "bad angle arc")
            return

        self._polygon.extend(
            arc_by_angles(
                self._arc_center, radius, start_angle, end_angle, self._clockwise, self.arc_points
            )
        )

    def _close_ring(self) -> list[Coordinate]:
        ring = list(self._polygon)
        if len(ring) > 2:
            first, last = ring[0], ring[-1]
            tol = self.closure_tolerance_deg
            if (
                abs(first.latitude - last.latitude) > tol
                or abs(first.longitude - last.longitude) > tol
            ):
                ring.append(first)
        return ring

    def _close_current(self) -> None:
        current = self._current
        if current is None:
            return

        polygon = self._close_ring() if self._polygon else None
        has_geometry = polygon is not None or current.center is not None

        if current.name and has_geometry:
            self._airspaces.append(
                OpenAirAirspace(
                    id=f"airspace-{self._counter}",
                    name=current.name,
                    type=current.type or "Unknown",
                    altitude_low=current.altitude_low or "0",
                    altitude_high=current.altitude_high or "18000",
                    coordinates=list(current.coordinates),
                    center=current.center,
                    radius=current.radius,
                    polygon=polygon,
                )
            )
            self._counter += 1
        else:
            logger.debug(
                "Dropping airspace without %s", "name" if not current.name else "geometry"
            )

        self._reset_record()


def parse_openair_file(
    text: str,
    source: str = "US",
    arc_points: int = DEFAULT_ARC_POINTS,
    closure_tolerance_deg: float = CLOSURE_TOLERANCE_DEG,
) -> list[OpenAirAirspace]:
    """Parse OpenAir text into raw airspace definitions.

    Args:
        text: OpenAir document. Non-string or empty input yields ``[]``.
        source: Dataset label (``US``, ``CA`` or ``USER``); only logged here,
            ids are namespaced by :func:`convert_to_api_format`.
        arc_points: Segments used when sampling arcs.
        closure_tolerance_deg: Gap below which a ring counts as closed.

    Returns:
        Parsed airspaces in file order.
    """
    parser = OpenAirParser(arc_points=arc_points, closure_tolerance_deg=closure_tolerance_deg)
    airspaces = parser.parse(text)
    logger.info(
        "Parsed %d %s airspaces (%d unparseable lines skipped)",
        len(airspaces),
        source,
        parser.skipped_lines,
    )
    return airspaces
