"""
Angle and Floating-Point Helpers for Geodesic Computations.

The geodesic algorithms are accurate to round-off only if angles are
reduced exactly and a handful of sums are carried with their rounding
error. The helpers here do that bookkeeping so the solver modules can be
written in terms of degrees without losing precision near multiples of
90 degrees.

Conventions
-----------
- Angles are in degrees unless a name says otherwise.
- Normalised angles lie in [-180, 180]; -180 is kept for negative input.
- (sin, cos) pairs are returned in that order.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy,
  87(1), 43-55.
- Shewchuk, J.R. (1997). Adaptive precision floating-point arithmetic and
  fast robust geometric predicates. Discrete & Computational Geometry,
  18(3), 305-363.
"""

import math
import sys
from typing import Sequence, Tuple

DIGITS = sys.float_info.mant_dig
EPSILON = math.ldexp(1.0, 1 - DIGITS)
MIN_NORMAL = sys.float_info.min


def sq(x: float) -> float:
    """Square of a number."""
    return x * x


def cbrt(x: float) -> float:
    """Real cube root of a number."""
    y = math.pow(abs(x), 1 / 3.0)
    return y if x > 0 else (-y if x < 0 else x)


def norm(x: float, y: float) -> Tuple[float, float]:
    """Scale (x, y) to a unit vector.

    Returns NaNs for the zero vector, mirroring IEEE 0/0.
    """
    r = math.hypot(x, y)
    if r == 0:
        return math.nan, math.nan
    return x / r, y / r


def two_sum(u: float, v: float) -> Tuple[float, float]:
    """Error free transformation of a sum.

    Returns ``(s, t)`` with ``s = round(u + v)`` and ``u + v = s + t``
    exactly.
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    t = s if s == 0 else 0.0 - (up + vpp)
    return s, t


def polyval(degree: int, coeffs: Sequence[float], start: int, x: float) -> float:
    """Evaluate a polynomial by Horner's method.

    Evaluates ``coeffs[start] * x**degree + ... + coeffs[start + degree]``.
    A negative degree gives 0.
    """
    y = float(0 if degree < 0 else coeffs[start])
    while degree > 0:
        degree -= 1
        start += 1
        y = y * x + coeffs[start]
    return y


def ang_round(x: float) -> float:
    """Round tiny angles so that small differences become exact.

    Values with magnitude below 1/16 are rounded to a multiple of 2**-57
    degrees (about 7e-18 degrees), which removes round-off that would
    otherwise break the symmetry tests near the equator.
    """
    z = 1 / 16.0
    y = abs(x)
    w = z - y
    y = z - w if w > 0 else y
    return math.copysign(y, x)


def ang_normalize(x: float) -> float:
    """Reduce an angle to [-180, 180].

    180 keeps the sign of the input, so -180 maps to -180.
    """
    y = math.remainder(x, 360.0) if math.isfinite(x) else math.nan
    return math.copysign(180.0, x) if abs(y) == 180 else y


def lat_fix(x: float) -> float:
    """Replace latitudes outside [-90, 90] by NaN."""
    return math.nan if abs(x) > 90 else x


def ang_diff(x: float, y: float) -> Tuple[float, float]:
    """Compute ``y - x`` reduced to [-180, 180] with its rounding error.

    Returns
    -------
    Tuple[float, float]
        ``(d, e)`` where ``d + e`` is the exact difference and ``d`` is
        in [-180, 180].
    """
    d, t = two_sum(math.remainder(-x, 360.0), math.remainder(y, 360.0))
    d, t = two_sum(math.remainder(d, 360.0), t)
    if d == 0 or abs(d) == 180:
        d = math.copysign(d, y - x if t == 0 else -t)
    return d, t


def _quadrant_rotate(s: float, c: float, q: int) -> Tuple[float, float]:
    q &= 3
    if q == 1:
        s, c = c, -s
    elif q == 2:
        s, c = -s, -c
    elif q == 3:
        s, c = -c, s
    return s, c


def sincosd(x: float) -> Tuple[float, float]:
    """Sine and cosine of an angle in degrees with exact quadrant reduction.

    ``sincosd(90)`` gives exactly ``(1, 0)`` and ``sincosd(-0.0)`` keeps
    the sign of zero in the sine.
    """
    if not math.isfinite(x):
        return math.nan, math.nan
    r = math.fmod(x, 360.0)
    q = int(round(r / 90.0))
    r -= 90 * q
    r = math.radians(r)
    s, c = _quadrant_rotate(math.sin(r), math.cos(r), q)
    c += 0.0
    if s == 0:
        s = math.copysign(s, x)
    return s, c


def sincosde(x: float, t: float) -> Tuple[float, float]:
    """Sine and cosine of ``x + t`` degrees where ``t`` is a small correction.

    ``x`` is reduced exactly to [-45, 45] before ``t`` is added, so the
    correction is not lost against a large ``x``.
    """
    if not math.isfinite(x):
        return math.nan, math.nan
    r = math.fmod(x, 360.0)
    q = int(round(r / 90.0))
    r = ang_round((r - 90 * q) + t)
    r = math.radians(r)
    s, c = _quadrant_rotate(math.sin(r), math.cos(r), q)
    c += 0.0
    if s == 0:
        s = math.copysign(s, x)
    return s, c


def atan2d(y: float, x: float) -> float:
    """Two-argument arctangent in degrees, result in [-180, 180].

    The octant is reduced first so that ``atan2d(1, 1)`` is exactly 45
    and ``atan2d(0, -1)`` is exactly 180.
    """
    if abs(y) > abs(x):
        q = 2
        x, y = y, x
    else:
        q = 0
    if x < 0:
        q += 1
        x = -x
    ang = math.degrees(math.atan2(y, x))
    if q == 1:
        ang = math.copysign(180.0, y) - ang
    elif q == 2:
        ang = 90 - ang
    elif q == 3:
        ang = -90 + ang
    return ang
