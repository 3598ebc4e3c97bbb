"""
Series Expansions for Geodesics on an Ellipsoid.

Every quantity the solver needs is written as a trigonometric series in
the arc length sigma on the auxiliary sphere. The coefficients of those
series are polynomials in one of two small parameters:

- ``eps``, which depends on the geodesic (through its equatorial azimuth
  alpha0) and is computed once per geodesic;
- ``n``, the third flattening, which depends only on the ellipsoid and is
  tabulated once per ellipsoid in `SeriesCoefficients`.

Series
------
A1, C1    distance            s / b = A1 (sigma + sum C1[l] sin 2l sigma)
C1p       reverted distance   sigma = tau + sum C1p[l] sin 2l tau
A2, C2    reduced length and geodesic scale
A3, C3    longitude           lambda = omega - f sin(alpha0) I3(sigma)
C4        area                S = c^2 alpha + e^2 a^2 cos(alpha0) sin(alpha0) I4

All expansions are carried to sixth order, which keeps the truncation
error below double precision round-off for |f| <= 1/50.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Eqs. (15)-(18),
  (20)-(21), (24)-(25), (41)-(43), (58)-(64).
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from geodesics.geomath import polyval, sq

# Order of every series expansion.
GEODESIC_ORDER = 6
nA1 = GEODESIC_ORDER
nC1 = GEODESIC_ORDER
nC1p = GEODESIC_ORDER
nA2 = GEODESIC_ORDER
nC2 = GEODESIC_ORDER
nA3 = GEODESIC_ORDER
nA3x = nA3
nC3 = GEODESIC_ORDER
nC3x = (nC3 * (nC3 - 1)) // 2
nC4 = GEODESIC_ORDER
nC4x = (nC4 * (nC4 + 1)) // 2

_A1M1_COEFF = (1, 4, 64, 0, 256)

_C1_COEFF = (
    -1, 6, -16, 32,
    -9, 64, -128, 2048,
    9, -16, 768,
    3, -5, 512,
    -7, 1280,
    -7, 2048,
)

_C1P_COEFF = (
    205, -432, 768, 1536,
    4005, -4736, 3840, 12288,
    -225, 116, 384,
    -7173, 2695, 7680,
    3467, 7680,
    38081, 61440,
)

_A2M1_COEFF = (-11, -28, -192, 0, 256)

_C2_COEFF = (
    1, 2, 16, 32,
    35, 64, 384, 2048,
    15, 80, 768,
    7, 35, 512,
    63, 1280,
    77, 2048,
)

_A3_COEFF = (
    -3, 128,
    -2, -3, 64,
    -1, -3, -1, 16,
    3, -1, -2, 8,
    1, -1, 2,
    1, 1,
)

_C3_COEFF = (
    3, 128,
    2, 5, 128,
    -1, 3, 3, 64,
    -1, 0, 1, 8,
    -1, 1, 4,
    5, 256,
    1, 3, 128,
    -3, -2, 3, 64,
    1, -3, 2, 32,
    7, 512,
    -10, 9, 384,
    5, -9, 5, 192,
    7, 512,
    -14, 7, 512,
    21, 2560,
)

_C4_COEFF = (
    97, 15015,
    1088, 156, 45045,
    -224, -4784, 1573, 45045,
    -10656, 14144, -4576, -858, 45045,
    64, 624, -4576, 6864, -3003, 15015,
    100, 208, 572, 3432, -12012, 30030, 45045,
    1, 9009,
    -2944, 468, 135135,
    5792, 1040, -1287, 135135,
    5952, -11648, 9152, -2574, 135135,
    -64, -624, 4576, -6864, 3003, 135135,
    8, 10725,
    1856, -936, 225225,
    -8448, 4992, -1144, 225225,
    -1440, 4160, -4576, 1716, 225225,
    -136, 63063,
    1024, -208, 105105,
    3584, -3328, 1144, 315315,
    -128, 135135,
    -2560, 832, 405405,
    128, 99099,
)


def sin_cos_series(sinp: bool, sinx: float, cosx: float, c: Sequence[float]) -> float:
    """Evaluate a Fourier series by Clenshaw summation.

    Parameters
    ----------
    sinp : bool
        If True evaluate ``sum(c[i] * sin(2*i*x), i = 1..n)`` (``c[0]`` is
        unused); otherwise ``sum(c[i] * cos((2*i+1)*x), i = 0..n-1)``.
    sinx, cosx : float
        Sine and cosine of ``x``.
    c : sequence of float
        Series coefficients.

    Returns
    -------
    float
        The value of the series.
    """
    k = len(c)
    n = k - (1 if sinp else 0)
    ar = 2 * (cosx - sinx) * (cosx + sinx)  # 2 * cos(2 * x)
    y1 = 0.0
    if n & 1:
        k -= 1
        y0 = c[k]
    else:
        y0 = 0.0
    n = n // 2
    while n:
        n -= 1
        k -= 1
        y1 = ar * y0 - y1 + c[k]
        k -= 1
        y0 = ar * y1 - y0 + c[k]
    return 2 * sinx * cosx * y0 if sinp else cosx * (y0 - y1)


def a1m1f(eps: float) -> float:
    """The scale factor A1 - 1 of the distance integral."""
    m = nA1 // 2
    t = polyval(m, _A1M1_COEFF, 0, sq(eps)) / _A1M1_COEFF[m + 1]
    return (t + eps) / (1 - eps)


def _eps_series(eps: float, coeff: Sequence[int], order: int) -> List[float]:
    c = [0.0] * (order + 1)
    eps2 = sq(eps)
    d = eps
    o = 0
    for l in range(1, order + 1):
        m = (order - l) // 2
        c[l] = d * polyval(m, coeff, o, eps2) / coeff[o + m + 1]
        o += m + 2
        d *= eps
    return c


def c1f(eps: float) -> List[float]:
    """Coefficients C1[l], l = 1..6, of the distance integral."""
    return _eps_series(eps, _C1_COEFF, nC1)


def c1pf(eps: float) -> List[float]:
    """Coefficients C1'[l], l = 1..6, of the reverted distance series."""
    return _eps_series(eps, _C1P_COEFF, nC1p)


def a2m1f(eps: float) -> float:
    """The scale factor A2 - 1 of the reduced length integral."""
    m = nA2 // 2
    t = polyval(m, _A2M1_COEFF, 0, sq(eps)) / _A2M1_COEFF[m + 1]
    return (t - eps) / (1 + eps)


def c2f(eps: float) -> List[float]:
    """Coefficients C2[l], l = 1..6, of the reduced length integral."""
    return _eps_series(eps, _C2_COEFF, nC2)


def a3_table(n: float) -> Tuple[float, ...]:
    """Coefficients in eps of A3, each a polynomial in n."""
    table = []
    o = 0
    for j in range(nA3 - 1, -1, -1):
        m = min(nA3 - j - 1, j)
        table.append(polyval(m, _A3_COEFF, o, n) / _A3_COEFF[o + m + 1])
        o += m + 2
    return tuple(table)


def c3_table(n: float) -> Tuple[float, ...]:
    """Coefficients in eps of C3[l], l = 1..5, each a polynomial in n."""
    table = []
    o = 0
    for l in range(1, nC3):
        for j in range(nC3 - 1, l - 1, -1):
            m = min(nC3 - j - 1, j)
            table.append(polyval(m, _C3_COEFF, o, n) / _C3_COEFF[o + m + 1])
            o += m + 2
    return tuple(table)


def c4_table(n: float) -> Tuple[float, ...]:
    """Coefficients in eps of C4[l], l = 0..5, each a polynomial in n."""
    table = []
    o = 0
    for l in range(nC4):
        for j in range(nC4 - 1, l - 1, -1):
            m = nC4 - j - 1
            table.append(polyval(m, _C4_COEFF, o, n) / _C4_COEFF[o + m + 1])
            o += m + 2
    return tuple(table)


@dataclass(frozen=True)
class SeriesCoefficients:
    """Ellipsoid-dependent coefficient tables.

    Built once per ellipsoid from its third flattening and shared by
    every geodesic computed on it. Immutable, so a single instance may be
    read from many threads.

    Attributes
    ----------
    n : float
        Third flattening of the ellipsoid.
    a3x : tuple of float
        Coefficients of A3 as a polynomial in eps.
    c3x : tuple of float
        Coefficients of C3[l] as polynomials in eps, packed.
    c4x : tuple of float
        Coefficients of C4[l] as polynomials in eps, packed.
    """
    n: float
    a3x: Tuple[float, ...] = field(init=False, repr=False)
    c3x: Tuple[float, ...] = field(init=False, repr=False)
    c4x: Tuple[float, ...] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "a3x", a3_table(self.n))
        object.__setattr__(self, "c3x", c3_table(self.n))
        object.__setattr__(self, "c4x", c4_table(self.n))

    def a3f(self, eps: float) -> float:
        """The scale factor A3 of the longitude integral."""
        return polyval(nA3 - 1, self.a3x, 0, eps)

    def c3f(self, eps: float) -> List[float]:
        """Coefficients C3[l], l = 1..5 (index 0 unused)."""
        c = [0.0] * nC3
        mult = 1.0
        o = 0
        for l in range(1, nC3):
            m = nC3 - l - 1
            mult *= eps
            c[l] = mult * polyval(m, self.c3x, o, eps)
            o += m + 1
        return c

    def c4f(self, eps: float) -> List[float]:
        """Coefficients C4[l], l = 0..5."""
        c = [0.0] * nC4
        mult = 1.0
        o = 0
        for l in range(nC4):
            m = nC4 - l - 1
            c[l] = mult * polyval(m, self.c4x, o, eps)
            o += m + 1
            mult *= eps
        return c
