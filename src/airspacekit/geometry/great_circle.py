"""Great-circle navigation formulas in nautical miles.

Haversine distance, initial bearing and forward projection on a spherical
Earth of radius 3440.065 NM, the aviation-standard unit set used throughout
airspacekit.

Typical usage:
    from airspacekit.geometry.great_circle import bearing, destination, distance

    d = distance(37.461, -122.115, 37.619, -122.375)
    b = bearing(37.461, -122.115, 37.619, -122.375)
    lat, lon = destination(37.461, -122.115, b, d)
"""

import math

EARTH_RADIUS_NM = 3440.065
KM_PER_NM = 1.852
KM_PER_DEGREE_LAT = 111.0


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points.

    Args:
        lat1: Latitude of the first point in degrees.
        lon1: Longitude of the first point in degrees.
        lat2: Latitude of the second point in degrees.
        lon2: Longitude of the second point in degrees.

    Returns:
        Distance in nautical miles.

    Examples:
        >>> round(distance(0.0, 0.0, 1.0, 0.0), 1)
        60.0
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_NM * c


def bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial true bearing from the first point to the second.

    Returns:
        Bearing in degrees, normalized to [0, 360).

    Examples:
        >>> round(bearing(0.0, 0.0, 1.0, 0.0))
        0
        >>> round(bearing(0.0, 0.0, 0.0, 1.0))
        90
    """
    d_lon = math.radians(lon2 - lon1)
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    y = math.sin(d_lon) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(
        lat2_rad
    ) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def destination(lat: float, lon: float, bearing_deg: float, distance_nm: float) -> tuple[float, float]:
    """Project a point along a bearing for a given distance.

    Args:
        lat: Start latitude in degrees.
        lon: Start longitude in degrees.
        bearing_deg: True bearing in degrees.
        distance_nm: Distance in nautical miles.

    Returns:
        (latitude, longitude) of the destination in degrees.
    """
    lat_rad = math.radians(lat)
    lon_rad = math.radians(lon)
    brng_rad = math.radians(bearing_deg)
    dist_rad = distance_nm / EARTH_RADIUS_NM

    new_lat_rad = math.asin(
        math.sin(lat_rad) * math.cos(dist_rad)
        + math.cos(lat_rad) * math.sin(dist_rad) * math.cos(brng_rad)
    )
    new_lon_rad = lon_rad + math.atan2(
        math.sin(brng_rad) * math.sin(dist_rad) * math.cos(lat_rad),
        math.cos(dist_rad) - math.sin(lat_rad) * math.sin(new_lat_rad),
    )
    return math.degrees(new_lat_rad), math.degrees(new_lon_rad)


def km_to_nm(distance_km: float) -> float:
    """Convert kilometres to nautical miles."""
    return distance_km / KM_PER_NM
