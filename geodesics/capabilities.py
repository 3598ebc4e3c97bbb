"""
Capability and Position Flags.

A `GeodesicLine` precomputes only the series it needs. `Capability`
names the outputs a caller wants so the line can skip the rest, and
`PositionFlag` selects how a position query interprets its argument.
"""

from enum import IntFlag


class Capability(IntFlag):
    """Quantities that a geodesic line or general query can compute.

    Combine members with ``|`` and test membership with ``in``:

    >>> caps = Capability.STANDARD | Capability.AREA
    >>> Capability.AREA in caps
    True
    >>> Capability.REDUCED_LENGTH in caps
    False
    """
    NONE = 0
    LATITUDE = 1 << 7
    LONGITUDE = 1 << 8
    AZIMUTH = 1 << 9
    DISTANCE = 1 << 10
    DISTANCE_IN = 1 << 11
    REDUCED_LENGTH = 1 << 12
    GEODESIC_SCALE = 1 << 13
    AREA = 1 << 14

    STANDARD = LATITUDE | LONGITUDE | AZIMUTH | DISTANCE_IN
    ALL = (LATITUDE | LONGITUDE | AZIMUTH | DISTANCE | DISTANCE_IN |
           REDUCED_LENGTH | GEODESIC_SCALE | AREA)


class PositionFlag(IntFlag):
    """Modifiers for a position query along a geodesic."""
    NONE = 0
    # The query value is an arc length on the auxiliary sphere in degrees.
    ARC_MODE = 1 << 0
    # Longitude is not reduced to [-180, 180] but tracks the line continuously.
    LONG_UNROLL = 1 << 15


# Which coefficient sets each capability needs.
NEEDS_C1 = (Capability.DISTANCE | Capability.DISTANCE_IN |
            Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE)
NEEDS_C1P = Capability.DISTANCE_IN
NEEDS_C2 = Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE
NEEDS_C3 = Capability.LONGITUDE
NEEDS_C4 = Capability.AREA
