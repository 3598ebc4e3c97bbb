"""
Geodesics on an Ellipsoid of Revolution.

All geodesic calculations in the package originate from this module:

- Reference ellipsoids and their derived constants
- Direct and inverse geodesic problems (accurate to round-off)
- Geodesic lines for cheap repeated positions and waypoints
- Polygon and polyline perimeter and area
- numpy batch helpers
"""

from geodesics.capabilities import Capability, PositionFlag

from geodesics.ellipsoid import (
    EllipsoidModel,
    InvalidEllipsoidError,
    WGS84,
    GRS80,
    SPHERE,
)

from geodesics.series import SeriesCoefficients

from geodesics.results import (
    DirectResult,
    InverseResult,
    GeneralPosition,
    GeneralInverse,
    PolygonResult,
)

from geodesics.solver import Geodesic
from geodesics.line import GeodesicLine
from geodesics.polygon import Accumulator, PolygonAccumulator

from geodesics.batch import (
    geodesic_inverse_batch,
    geodesic_direct_batch,
    geodesic_distance,
    geodesic_distance_batch,
    compute_azimuth,
    interpolate_geodesic,
    track_segments,
    compute_heading_change,
)

__all__ = [
    # Flags
    "Capability",
    "PositionFlag",
    # Ellipsoids
    "EllipsoidModel",
    "InvalidEllipsoidError",
    "WGS84",
    "GRS80",
    "SPHERE",
    "SeriesCoefficients",
    # Results
    "DirectResult",
    "InverseResult",
    "GeneralPosition",
    "GeneralInverse",
    "PolygonResult",
    # Solver
    "Geodesic",
    "GeodesicLine",
    "Accumulator",
    "PolygonAccumulator",
    # Batch helpers
    "geodesic_inverse_batch",
    "geodesic_direct_batch",
    "geodesic_distance",
    "geodesic_distance_batch",
    "compute_azimuth",
    "interpolate_geodesic",
    "track_segments",
    "compute_heading_change",
]
