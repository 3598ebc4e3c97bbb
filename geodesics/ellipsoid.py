"""
Ellipsoid of Revolution Model.

This module defines the earth model consumed by the geodesic solver: an
ellipsoid of revolution fixed by its equatorial radius and flattening.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Oblate (f > 0), spherical (f = 0) or prolate (f < 0) ellipsoid

The solver treats the two defining numbers as given. It does not reject
nonphysical combinations; the optional `validate` method is the guard for
callers who want one.

References
----------
- NIMA TR8350.2: WGS84 parameters
- Moritz, H. (2000). Geodetic Reference System 1980.
- Karney, C.F.F. (2013). Algorithms for geodesics. Eq. (2) to (5), (59).
"""

import math
from dataclasses import dataclass

from common.constants import GeodesyConstants


class InvalidEllipsoidError(ValueError):
    """Raised by `EllipsoidModel.validate` for a degenerate ellipsoid."""


@dataclass(frozen=True)
class EllipsoidModel:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    equatorial_radius : float
        Semi-major axis ``a`` in meters.
    flattening : float
        Flattening ``f = (a - b) / a``. Zero for a sphere, negative for a
        prolate ellipsoid.
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    polar_radius : float
        Semi-minor axis ``b = a (1 - f)`` in meters.
    e2 : float
        First eccentricity squared ``e^2 = f (2 - f)``.
    ep2 : float
        Second eccentricity squared ``e'^2 = e^2 / (1 - f)^2``.
    third_flattening : float
        ``n = f / (2 - f)``, the expansion parameter of every series.
    authalic_radius_squared : float
        ``c^2``, the squared radius of the sphere with the same area.

    Examples
    --------
    >>> ell = EllipsoidModel(6378137.0, 1 / 298.257223563, "WGS84")
    >>> round(ell.polar_radius, 6)
    6356752.314245
    """
    equatorial_radius: float
    flattening: float
    name: str = "custom"

    @property
    def a(self) -> float:
        """Equatorial radius in meters."""
        return self.equatorial_radius

    @property
    def f(self) -> float:
        """Flattening."""
        return self.flattening

    @property
    def f1(self) -> float:
        """Ratio of polar to equatorial radius, ``1 - f``."""
        return 1 - self.flattening

    @property
    def polar_radius(self) -> float:
        """Semi-minor axis in meters."""
        return self.equatorial_radius * (1 - self.flattening)

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.polar_radius

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.flattening * (2 - self.flattening)

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (self.f1 * self.f1)

    @property
    def third_flattening(self) -> float:
        """Third flattening ``n``."""
        return self.flattening / (2 - self.flattening)

    @property
    def n(self) -> float:
        """Third flattening ``n``."""
        return self.third_flattening

    @property
    def authalic_radius_squared(self) -> float:
        """Square of the authalic radius.

        Notes
        -----
        c^2 = a^2/2 + b^2/2 * atanh(e)/e for an oblate ellipsoid, with the
        analytic continuation atan(|e|)/|e| when e^2 < 0.
        """
        e2 = self.e2
        if e2 == 0:
            ratio = 1.0
        elif e2 > 0:
            ratio = math.atanh(math.sqrt(e2)) / math.sqrt(e2)
        else:
            ratio = math.atan(math.sqrt(-e2)) / math.sqrt(-e2)
        return (self.a * self.a + self.b * self.b * ratio) / 2

    @property
    def total_area(self) -> float:
        """Surface area of the ellipsoid in square meters."""
        return 4 * math.pi * self.authalic_radius_squared

    def validate(self) -> 'EllipsoidModel':
        """Check that both semi-axes are finite and positive.

        Returns
        -------
        EllipsoidModel
            ``self``, so the call can be chained.

        Raises
        ------
        InvalidEllipsoidError
            If the equatorial or polar radius is not finite and positive.
        """
        if not (math.isfinite(self.a) and self.a > 0):
            raise InvalidEllipsoidError(
                f"Equatorial radius {self.a} of ellipsoid '{self.name}' "
                f"is not positive"
            )
        if not (math.isfinite(self.b) and self.b > 0):
            raise InvalidEllipsoidError(
                f"Polar semi-axis {self.b} of ellipsoid '{self.name}' "
                f"is not positive (flattening {self.f})"
            )
        return self


# WGS84 ellipsoid - the default for the solver
WGS84 = EllipsoidModel(
    equatorial_radius=GeodesyConstants.WGS84_EQUATORIAL_RADIUS.value,
    flattening=GeodesyConstants.WGS84_FLATTENING.value,
    name="WGS84"
)

GRS80 = EllipsoidModel(
    equatorial_radius=GeodesyConstants.GRS80_EQUATORIAL_RADIUS.value,
    flattening=GeodesyConstants.GRS80_FLATTENING.value,
    name="GRS80"
)

SPHERE = EllipsoidModel(
    equatorial_radius=GeodesyConstants.MEAN_SPHERE_RADIUS.value,
    flattening=0.0,
    name="sphere"
)
