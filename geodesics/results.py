"""
Result Types Returned by the Geodesic Solver.

All angles are in degrees, lengths in meters and areas in square meters.
Fields typed ``Optional`` are ``None`` when the quantity was not part of
the requested capabilities; they are never filled with a placeholder
value.
"""

from dataclasses import dataclass
from typing import Optional

from common.types import GeodeticPoint


@dataclass(frozen=True)
class DirectResult:
    """Destination of a direct problem or a position along a line.

    Attributes
    ----------
    latitude : float
        Latitude of the point.
    longitude : float
        Longitude of the point, in [-180, 180] unless unrolled.
    azimuth : float
        Forward azimuth of the geodesic at the point.
    """
    latitude: float
    longitude: float
    azimuth: float

    @property
    def point(self) -> GeodeticPoint:
        """The position as a normalised `GeodeticPoint`."""
        return GeodeticPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class InverseResult:
    """Solution of an inverse problem.

    Attributes
    ----------
    distance : float
        Geodesic distance between the points in meters (>= 0).
    start_azimuth : float
        Forward azimuth at the first point, in [-180, 180].
    end_azimuth : float
        Forward azimuth at the second point, in [-180, 180].
    """
    distance: float
    start_azimuth: float
    end_azimuth: float


@dataclass(frozen=True)
class GeneralPosition:
    """Full result of a position query along a geodesic.

    Attributes
    ----------
    latitude : float
        Latitude of the point.
    longitude : float, optional
        Longitude of the point.
    azimuth : float
        Forward azimuth at the point.
    arc : float
        Arc length on the auxiliary sphere from the start, in degrees.
    distance : float, optional
        Distance from the start in meters.
    reduced_length : float, optional
        Reduced length m12 in meters.
    scale12 : float, optional
        Geodesic scale M12 of the point relative to the start.
    scale21 : float, optional
        Geodesic scale M21 of the start relative to the point.
    area : float, optional
        Area S12 between the geodesic segment and the equator in m^2.
    """
    latitude: float
    longitude: Optional[float]
    azimuth: float
    arc: float
    distance: Optional[float] = None
    reduced_length: Optional[float] = None
    scale12: Optional[float] = None
    scale21: Optional[float] = None
    area: Optional[float] = None


@dataclass(frozen=True)
class GeneralInverse:
    """Full solution of an inverse problem.

    Attributes
    ----------
    arc : float
        Arc length on the auxiliary sphere between the points, in degrees.
    distance : float, optional
        Geodesic distance in meters.
    start_azimuth, end_azimuth : float, optional
        Forward azimuths at the two points.
    reduced_length : float, optional
        Reduced length m12 in meters.
    scale12, scale21 : float, optional
        Geodesic scales M12 and M21.
    area : float, optional
        Area S12 between the geodesic and the equator in m^2.
    """
    arc: float
    distance: Optional[float] = None
    start_azimuth: Optional[float] = None
    end_azimuth: Optional[float] = None
    reduced_length: Optional[float] = None
    scale12: Optional[float] = None
    scale21: Optional[float] = None
    area: Optional[float] = None

    def to_inverse_result(self) -> InverseResult:
        """Drop the optional quantities."""
        return InverseResult(
            distance=self.distance,
            start_azimuth=self.start_azimuth,
            end_azimuth=self.end_azimuth
        )


@dataclass(frozen=True)
class PolygonResult:
    """Perimeter and area of a polygon or length of a polyline.

    Attributes
    ----------
    area : float, optional
        Enclosed area in m^2; ``None`` for a polyline.
    perimeter : float
        Perimeter of the polygon (closed) or length of the polyline.
    point_count : int
        Number of vertices.
    """
    area: Optional[float]
    perimeter: float
    point_count: int
