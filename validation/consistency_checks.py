"""
Geodesic Consistency Checks.

This module provides runtime checks that solver outputs obey the
geometric identities every correct geodesic solution must satisfy. They
are meant for validating a solver on a new ellipsoid, or a data set of
points, without an external reference.

Check Categories
----------------
1. Round trip (inverse followed by direct returns to the second point)
2. Symmetry (swapping the end points preserves the distance and swaps
   the azimuths)
3. Line consistency (positions along a line match independent direct
   solutions)
4. Orientation (reversing a polygon negates its area)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike

from common.logging_config import get_logger
from geodesics.geomath import ang_diff
from geodesics.solver import Geodesic

logger = get_logger(__name__)


class ConsistencyError(ValueError):
    """Raised in strict mode when a consistency check fails."""


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class GeodesicConsistencyChecker:
    """Checker for geometric consistency of geodesic solutions.

    Parameters
    ----------
    geodesic : Geodesic, optional
        Solver under test (default: WGS84).
    strict_mode : bool
        If True, raise `ConsistencyError` on the first failed check.
    distance_tolerance : float
        Allowed position or distance mismatch in meters.
    angle_tolerance : float
        Allowed azimuth or coordinate mismatch in degrees.
    """

    def __init__(
        self,
        geodesic: Optional[Geodesic] = None,
        strict_mode: bool = False,
        distance_tolerance: float = 1e-6,
        angle_tolerance: float = 1e-9
    ):
        self.geodesic = geodesic or Geodesic()
        self.strict_mode = strict_mode
        self.distance_tolerance = distance_tolerance
        self.angle_tolerance = angle_tolerance

    def _report(self, result: ValidationResult) -> ValidationResult:
        if result.passed:
            logger.debug(f"{result.test_name}: {result.message}")
            return result
        logger.warning(f"{result.test_name} failed: {result.message}")
        if self.strict_mode:
            raise ConsistencyError(f"{result.test_name}: {result.message}")
        return result

    def check_round_trip(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float
    ) -> ValidationResult:
        """Check that direct(inverse(p1, p2)) lands on p2."""
        inv = self.geodesic.inverse(lat1, lon1, lat2, lon2)
        end = self.geodesic.direct(lat1, lon1, inv.start_azimuth, inv.distance)
        miss = self.geodesic.distance(end.latitude, end.longitude, lat2, lon2)
        azimuth_error = abs(ang_diff(inv.end_azimuth, end.azimuth)[0])

        passed = (miss <= self.distance_tolerance and
                  azimuth_error <= self.angle_tolerance * max(1.0, inv.distance / 1e6))
        return self._report(ValidationResult(
            test_name="round_trip",
            passed=passed,
            message=f"Round trip miss {miss:.3e} m over {inv.distance:.1f} m",
            details={
                'distance_m': inv.distance,
                'miss_m': miss,
                'azimuth_error_deg': azimuth_error,
            }
        ))

    def check_symmetry(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float
    ) -> ValidationResult:
        """Check that swapping the end points swaps and reverses the azimuths."""
        forward = self.geodesic.inverse(lat1, lon1, lat2, lon2)
        backward = self.geodesic.inverse(lat2, lon2, lat1, lon1)

        distance_error = abs(forward.distance - backward.distance)
        # Reversing the path turns each azimuth by 180 degrees
        start_error = abs(ang_diff(forward.start_azimuth + 180.0,
                                   backward.end_azimuth)[0])
        end_error = abs(ang_diff(forward.end_azimuth + 180.0,
                                 backward.start_azimuth)[0])
        # Azimuths are meaningless for coincident points
        check_azimuths = forward.distance > self.distance_tolerance

        passed = distance_error <= self.distance_tolerance and (
            not check_azimuths or
            max(start_error, end_error) <= self.angle_tolerance
        )
        return self._report(ValidationResult(
            test_name="symmetry",
            passed=passed,
            message=f"Symmetry: distance mismatch {distance_error:.3e} m",
            details={
                'distance_error_m': distance_error,
                'start_azimuth_error_deg': start_error,
                'end_azimuth_error_deg': end_error,
            }
        ))

    def check_line_consistency(
        self,
        lat1: float,
        lon1: float,
        azi1: float,
        distances: ArrayLike
    ) -> ValidationResult:
        """Check positions along one line against independent direct solutions."""
        line = self.geodesic.line(lat1, lon1, azi1)
        max_error = 0.0
        for s in np.atleast_1d(np.asarray(distances, dtype=np.float64)):
            on_line = line.position(float(s))
            direct = self.geodesic.direct(lat1, lon1, azi1, float(s))
            max_error = max(
                max_error,
                self.geodesic.distance(on_line.latitude, on_line.longitude,
                                       direct.latitude, direct.longitude)
            )

        return self._report(ValidationResult(
            test_name="line_consistency",
            passed=max_error <= self.distance_tolerance,
            message=f"Line consistency: max mismatch {max_error:.3e} m",
            details={'max_error_m': max_error}
        ))

    def check_polygon_orientation(
        self,
        latitudes: Sequence[float],
        longitudes: Sequence[float],
        relative_tolerance: float = 1e-9
    ) -> ValidationResult:
        """Check that traversing a polygon backwards negates its area."""
        lats = np.asarray(latitudes, dtype=np.float64)
        lons = np.asarray(longitudes, dtype=np.float64)
        area_fwd, perim_fwd = self.geodesic.polygon_area(lats, lons)
        area_rev, perim_rev = self.geodesic.polygon_area(lats[::-1], lons[::-1])

        scale = max(abs(area_fwd), abs(area_rev), 1.0)
        area_error = abs(area_fwd + area_rev) / scale
        perimeter_error = abs(perim_fwd - perim_rev)
        passed = (area_error <= relative_tolerance and
                  perimeter_error <= self.distance_tolerance * max(1, lats.size))
        return self._report(ValidationResult(
            test_name="polygon_orientation",
            passed=passed,
            message=f"Orientation: relative area mismatch {area_error:.3e}",
            details={
                'area_forward_m2': area_fwd,
                'area_reverse_m2': area_rev,
                'perimeter_error_m': perimeter_error,
            }
        ))

    def check_all(
        self,
        latitudes: Sequence[float],
        longitudes: Sequence[float]
    ) -> List[ValidationResult]:
        """Run all checks on a sequence of points.

        Round trip and symmetry are checked for each consecutive pair,
        line consistency along the first leg and orientation on the
        polygon the points form.

        Parameters
        ----------
        latitudes, longitudes : sequence of float
            Points in degrees.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        lats = np.asarray(latitudes, dtype=np.float64)
        lons = np.asarray(longitudes, dtype=np.float64)
        if lats.shape != lons.shape:
            raise ValueError(
                f"Latitude and longitude arrays must have the same length, "
                f"got {lats.size} and {lons.size}"
            )
        results = []

        for i in range(1, lats.size):
            args = (float(lats[i - 1]), float(lons[i - 1]),
                    float(lats[i]), float(lons[i]))
            results.append(self.check_round_trip(*args))
            results.append(self.check_symmetry(*args))

        if lats.size >= 2:
            inv = self.geodesic.inverse(float(lats[0]), float(lons[0]),
                                        float(lats[1]), float(lons[1]))
            results.append(self.check_line_consistency(
                float(lats[0]), float(lons[0]), inv.start_azimuth,
                np.linspace(0.0, inv.distance, 5)
            ))

        if lats.size >= 3:
            results.append(self.check_polygon_orientation(lats, lons))

        return results
