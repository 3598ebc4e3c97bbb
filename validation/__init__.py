"""
Validation Framework for Geodesic Solutions.

This module provides runtime consistency checks for the solver.
"""

from validation.consistency_checks import (
    ConsistencyError,
    GeodesicConsistencyChecker,
    ValidationResult,
)

__all__ = [
    "ConsistencyError",
    "GeodesicConsistencyChecker",
    "ValidationResult",
]
