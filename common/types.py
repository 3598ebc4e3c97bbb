"""
Type Definitions for Geodetic Positions.

The solver accepts and returns plain floats in degrees. `GeodeticPoint`
is the caller-facing value type for code that wants a validated,
normalised position object to pass around (polygon vertex lists,
waypoint lists, batch inputs).
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class GeodeticPoint:
    """A geodetic position on the ellipsoid surface.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in DEGREES. Range: [-90, 90].
    longitude : float
        Geodetic longitude in DEGREES, normalised to [-180, 180].

    Notes
    -----
    - Latitude is positive north, negative south.
    - Longitude is positive east, negative west.

    Examples
    --------
    >>> p = GeodeticPoint(latitude=40.64, longitude=286.22)
    >>> round(p.longitude, 2)
    -73.78
    """
    latitude: float  # degrees
    longitude: float  # degrees

    def __post_init__(self):
        """Validate latitude and normalise longitude."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(
                f"Latitude {self.latitude} deg out of range [-90, 90]. "
                f"Did you swap latitude and longitude?"
            )
        lon = math.remainder(self.longitude, 360.0)
        if abs(lon) == 180.0:
            lon = math.copysign(180.0, self.longitude)
        object.__setattr__(self, "longitude", lon)

    def as_tuple(self) -> Tuple[float, float]:
        """Return ``(latitude, longitude)`` in degrees."""
        return self.latitude, self.longitude
