"""
Unit Handling for Geodesic Inputs.

The solver works in meters and degrees throughout. This module lets
callers hand in `pint` quantities instead of bare floats for the two
inputs where unit mistakes are common: distances (kilometers, nautical
miles) and azimuths (radians). Bare numbers pass straight through so the
hot path stays a plain float computation.

Example Usage
-------------
>>> from common.units import Q_, to_meters, to_degrees
>>> to_meters(Q_(10, 'km'))
10000.0
>>> round(to_degrees(Q_(0.5, 'turn')), 6)
180.0
"""

from typing import Union

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

Numeric = Union[float, int, pint.Quantity]


def _convert(value: Numeric, unit: str, name: str) -> float:
    """Convert a quantity to ``unit`` or return a bare number unchanged."""
    if isinstance(value, pint.Quantity):
        try:
            return float(value.to(unit).magnitude)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Parameter '{name}' has incompatible units. "
                f"Expected {unit}, got {value.units}"
            ) from e
    return value


def to_meters(value: Numeric, name: str = "distance") -> float:
    """Return a length in meters.

    Parameters
    ----------
    value : float or pint.Quantity
        A bare number (taken to be meters already) or a length quantity.
    name : str
        Parameter name used in the error message.

    Returns
    -------
    float
        The length in meters.

    Raises
    ------
    ValueError
        If ``value`` is a quantity whose dimensionality is not a length.
    """
    return _convert(value, "meter", name)


def to_degrees(value: Numeric, name: str = "azimuth") -> float:
    """Return an angle in degrees.

    Parameters
    ----------
    value : float or pint.Quantity
        A bare number (taken to be degrees already) or an angle quantity.
    name : str
        Parameter name used in the error message.

    Returns
    -------
    float
        The angle in degrees.

    Raises
    ------
    ValueError
        If ``value`` is a quantity that is not an angle.
    """
    return _convert(value, "degree", name)
