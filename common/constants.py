"""
Geodetic Constants for Ellipsoidal Geodesic Computations.

This module provides the defining parameters of the reference ellipsoids
used by the geodesic solver, with their uncertainty bounds and sources.
All constants are defined with SI units and traceable to authoritative
sources.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80 parameters: Moritz, H. (2000). Geodetic Reference System 1980.
  Journal of Geodesy, 74(1), 128-133.
- IUGG mean radius: Moritz (2000), Table 3.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodesyConstants:
    """Registry of reference ellipsoid parameters.

    Every ellipsoid is defined by exactly two numbers: the equatorial
    radius and the flattening. All other shape parameters (polar radius,
    eccentricities, third flattening) are derived from these in
    `geodesics.ellipsoid.EllipsoidModel` so that a single definition
    is the source of truth.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    WGS84_EQUATORIAL_RADIUS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # GRS80 Ellipsoid Parameters
    # Reference: Moritz (2000)
    # =========================================================================

    GRS80_EQUATORIAL_RADIUS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="GRS80, Moritz (2000)",
        description="Semi-major axis (equatorial radius) of GRS80 ellipsoid"
    )

    GRS80_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257222101,
        uncertainty=1e-15,  # Derived from J2
        unit="dimensionless",
        source="GRS80, Moritz (2000) (derived)",
        description="Flattening of GRS80 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # Spherical Earth
    # =========================================================================

    MEAN_SPHERE_RADIUS: Final[Constant] = Constant(
        value=6_371_000.0,
        uncertainty=10.0,
        unit="m",
        source="IUGG mean radius (rounded)",
        description="Radius of the spherical Earth model (flattening 0)"
    )
