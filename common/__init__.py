"""
Common utilities and infrastructure for the ellipsoidal geodesic solver.

This package provides foundational components used across all modules:
- Reference ellipsoid constants with uncertainty bounds
- Unit conversion for distance and angle inputs
- The geodetic point value type
- Logging infrastructure
"""

from common.constants import Constant, GeodesyConstants
from common.units import ureg, Q_, to_meters, to_degrees
from common.types import GeodeticPoint
from common.logging_config import get_logger, set_level

__all__ = [
    "Constant",
    "GeodesyConstants",
    "ureg",
    "Q_",
    "to_meters",
    "to_degrees",
    "GeodeticPoint",
    "get_logger",
    "set_level",
]
