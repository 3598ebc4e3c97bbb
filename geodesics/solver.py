"""
Direct and Inverse Geodesic Problems on an Ellipsoid of Revolution.

This module provides the geodesic solver: given a start point, azimuth and
distance it finds the end point (direct problem), and given two points it
finds the shortest path between them (inverse problem). Both are accurate
to round-off for any pair of points on an ellipsoid with |f| <= 1/50,
including nearly antipodal points.

Scientific Context
------------------
Domain: Geodesy, differential geometry on surfaces of revolution
Model: Geodesic (locally shortest path) on a reference ellipsoid

Method
------
Both problems are mapped to the auxiliary sphere, where the geodesic is a
great circle parametrised by reduced latitude beta and arc length sigma.
Clairaut's constant ``sin(alpha0) = sin(alpha1) cos(beta1)`` fixes the
great circle. The true distance and longitude are recovered from sigma
through the series in `geodesics.series`.

- Direct: evaluated through a transient `GeodesicLine`, which inverts the
  distance series with a second series rather than by root finding.
- Inverse: the longitude difference as a function of the starting
  azimuth, lambda12(alpha1), is solved by Newton's method. The starting
  guess comes from the spherical solution, or from the astroid solution
  for nearly antipodal points. A bracket on alpha1 is kept so that a
  failed Newton step falls back to bisection. The iteration count is
  bounded; on exhaustion the latest estimate is returned and a warning
  logged.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy,
  87(1), 43-55. doi:10.1007/s00190-012-0578-z
- Karney, C.F.F. (2011). Geodesics on an ellipsoid of revolution.
  arXiv:1102.1215
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from common.logging_config import get_logger
from common.units import to_degrees, to_meters
from geodesics import geomath
from geodesics.capabilities import Capability, PositionFlag
from geodesics.ellipsoid import WGS84, EllipsoidModel
from geodesics.geomath import (
    ang_diff,
    ang_round,
    atan2d,
    lat_fix,
    norm,
    sincosd,
    sincosde,
    sq,
)
from geodesics.line import GeodesicLine
from geodesics.polygon import PolygonAccumulator
from geodesics.results import (
    DirectResult,
    GeneralInverse,
    GeneralPosition,
    InverseResult,
)
from geodesics.series import (
    SeriesCoefficients,
    a1m1f,
    a2m1f,
    c1f,
    c2f,
    nC2,
    sin_cos_series,
)

logger = get_logger(__name__)

_LENGTH_OUTPUTS = (Capability.DISTANCE | Capability.REDUCED_LENGTH |
                   Capability.GEODESIC_SCALE)
_DIFFERENTIAL_OUTPUTS = Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE


class Geodesic:
    """Geodesic solver for one ellipsoid.

    Parameters
    ----------
    ellipsoid : EllipsoidModel
        The earth model (default: WGS84).
    strict : bool
        If True, reject a degenerate ellipsoid with
        `InvalidEllipsoidError`. By default the parameters are used as
        given.

    Notes
    -----
    Instances are immutable after construction and may be shared between
    threads. The per-ellipsoid series tables are built once here.

    Examples
    --------
    >>> geod = Geodesic()
    >>> result = geod.inverse(-41.32, 174.81, 40.96, -5.50)
    >>> print(f"{result.distance:.3f} m")
    19959679.267 m
    """

    maxit1 = 20
    maxit2 = maxit1 + geomath.DIGITS + 10
    tiny = math.sqrt(geomath.MIN_NORMAL)
    tol0 = geomath.EPSILON
    # 200 rather than 100 so that the nearly antipodal case
    # 52.784459512564 0 -52.784459512563990912 179.634407464943777557
    # converges.
    tol1 = 200 * tol0
    tol2 = math.sqrt(tol0)
    tolb = tol0
    xthresh = 1000 * tol2

    def __init__(self, ellipsoid: EllipsoidModel = WGS84, strict: bool = False):
        if strict:
            ellipsoid.validate()
        self.ellipsoid = ellipsoid
        self.a = float(ellipsoid.equatorial_radius)
        self.f = float(ellipsoid.flattening)
        self._f1 = ellipsoid.f1
        self._e2 = ellipsoid.e2
        self._ep2 = ellipsoid.ep2
        self._n = ellipsoid.third_flattening
        self._b = ellipsoid.polar_radius
        self._c2 = ellipsoid.authalic_radius_squared
        # Threshold for the short line spherical solution; 0.1 because the
        # error is then smaller than the round-off of the Newton method.
        self._etol2 = 0.1 * Geodesic.tol2 / math.sqrt(
            max(0.001, abs(self.f)) * min(1.0, 1 - self.f / 2) / 2
        )
        self.series = SeriesCoefficients(self._n)
        logger.debug(
            f"Geodesic solver for {ellipsoid.name}: a={self.a} f={self.f}"
        )

    @classmethod
    def from_parameters(
        cls,
        equatorial_radius: float,
        flattening: float,
        strict: bool = False
    ) -> 'Geodesic':
        """Create a solver from the two ellipsoid parameters.

        Parameters
        ----------
        equatorial_radius : float
            Semi-major axis in meters.
        flattening : float
            Flattening; 0 for a sphere.
        strict : bool
            Reject degenerate parameters.

        Returns
        -------
        Geodesic
            Solver for the ellipsoid.
        """
        return cls(EllipsoidModel(equatorial_radius, flattening), strict=strict)

    @property
    def equatorial_radius(self) -> float:
        """Equatorial radius of the ellipsoid in meters."""
        return self.a

    @property
    def flattening(self) -> float:
        """Flattening of the ellipsoid."""
        return self.f

    @property
    def polar_radius(self) -> float:
        """Polar semi-axis of the ellipsoid in meters."""
        return self._b

    @property
    def total_area(self) -> float:
        """Surface area of the ellipsoid in square meters."""
        return 4 * math.pi * self._c2

    def __repr__(self) -> str:
        return f"Geodesic(a={self.a!r}, f={self.f!r})"

    # =========================================================================
    # Internal building blocks
    # =========================================================================

    def _lengths(
        self,
        eps: float,
        sig12: float,
        ssig1: float, csig1: float, dn1: float,
        ssig2: float, csig2: float, dn2: float,
        cbet1: float, cbet2: float,
        outmask: Capability
    ) -> Tuple[float, float, float, float, float]:
        """Distance, reduced length and geodesic scales on one geodesic.

        Returns ``(s12b, m12b, m0, M12, M21)`` where the lengths are in
        units of the polar semi-axis. Quantities not requested are NaN.
        """
        s12b = m12b = m0 = M12 = M21 = math.nan
        if not outmask & _LENGTH_OUTPUTS:
            return s12b, m12b, m0, M12, M21

        A1 = a1m1f(eps)
        C1a = c1f(eps)
        if outmask & _DIFFERENTIAL_OUTPUTS:
            A2 = a2m1f(eps)
            C2a = c2f(eps)
            m0x = A1 - A2
            A2 = 1 + A2
        A1 = 1 + A1

        if outmask & Capability.DISTANCE:
            B1 = (sin_cos_series(True, ssig2, csig2, C1a) -
                  sin_cos_series(True, ssig1, csig1, C1a))
            # Missing a factor of b
            s12b = A1 * (sig12 + B1)
            if outmask & _DIFFERENTIAL_OUTPUTS:
                B2 = (sin_cos_series(True, ssig2, csig2, C2a) -
                      sin_cos_series(True, ssig1, csig1, C2a))
                J12 = m0x * sig12 + (A1 * B1 - A2 * B2)
        elif outmask & _DIFFERENTIAL_OUTPUTS:
            # Assume here that nC1 >= nC2
            Ca = [0.0] + [A1 * C1a[l] - A2 * C2a[l] for l in range(1, nC2 + 1)]
            J12 = m0x * sig12 + (sin_cos_series(True, ssig2, csig2, Ca) -
                                 sin_cos_series(True, ssig1, csig1, Ca))

        if outmask & Capability.REDUCED_LENGTH:
            m0 = m0x
            # Missing a factor of b. Parentheses around (csig1 * ssig2) and
            # (ssig1 * csig2) give accurate cancellation for coincident points.
            m12b = (dn2 * (csig1 * ssig2) - dn1 * (ssig1 * csig2) -
                    csig1 * csig2 * J12)
        if outmask & Capability.GEODESIC_SCALE:
            csig12 = csig1 * csig2 + ssig1 * ssig2
            t = self._ep2 * (cbet1 - cbet2) * (cbet1 + cbet2) / (dn1 + dn2)
            M12 = csig12 + (t * ssig2 - csig2 * J12) * ssig1 / dn1
            M21 = csig12 - (t * ssig1 - csig1 * J12) * ssig2 / dn2
        return s12b, m12b, m0, M12, M21

    @staticmethod
    def _astroid(x: float, y: float) -> float:
        """Solve the astroid problem ``k^4+2k^3-(x^2+y^2-1)k^2-2y^2k-y^2 = 0``.

        Returns the positive root k, which seeds the inverse iteration for
        nearly antipodal points.
        """
        p = sq(x)
        q = sq(y)
        r = (p + q - 1) / 6
        if q == 0 and r <= 0:
            # y = 0 with |x| <= 1; the solution is the limit y -> 0
            return 0.0
        # Avoid possible division by zero when r = 0 by multiplying
        # equations for s and t by r^3 and r, respectively.
        S = p * q / 4
        r2 = sq(r)
        r3 = r * r2
        # The discriminant of the quadratic equation for T3. This is zero on
        # the evolute curve p^(1/3)+q^(1/3) = 1
        disc = S * (S + 2 * r3)
        u = r
        if disc >= 0:
            T3 = S + r3
            # Pick the sign on the sqrt to maximize abs(T3), minimising
            # round-off.
            T3 += -math.sqrt(disc) if T3 < 0 else math.sqrt(disc)
            T = geomath.cbrt(T3)
            # T can be zero; but then r2 / T -> 0.
            u += T + (r2 / T if T != 0 else 0.0)
        else:
            # T is complex, but the way u is defined the result is real.
            ang = math.atan2(math.sqrt(-disc), -(S + r3))
            # There are three possible cube roots. We choose the root which
            # avoids cancellation. Note that disc < 0 implies that r < 0.
            u += 2 * r * math.cos(ang / 3)
        v = math.sqrt(sq(u) + q)
        # Avoid loss of accuracy when u < 0.
        uv = q / (v - u) if u < 0 else u + v
        w = (uv - q) / (2 * v)
        # Rearrange expression for k to avoid loss of accuracy due to
        # subtraction. Division by 0 not possible because uv > 0, w >= 0.
        return uv / (math.sqrt(uv + sq(w)) + w)

    def _inverse_start(
        self,
        sbet1: float, cbet1: float, dn1: float,
        sbet2: float, cbet2: float, dn2: float,
        lam12: float, slam12: float, clam12: float
    ) -> Tuple[float, float, float, float, float, float]:
        """Starting azimuth for the inverse iteration.

        Returns ``(sig12, salp1, calp1, salp2, calp2, dnm)``. A non-negative
        ``sig12`` means the short line solution is already accurate and no
        iteration is needed; ``salp2, calp2, dnm`` are only valid then.
        """
        sig12 = -1.0
        salp2 = calp2 = dnm = math.nan
        # bet12 = bet2 - bet1 in [0, pi); bet12a = bet2 + bet1 in (-pi, 0]
        sbet12 = sbet2 * cbet1 - cbet2 * sbet1
        cbet12 = cbet2 * cbet1 + sbet2 * sbet1
        sbet12a = sbet2 * cbet1 + cbet2 * sbet1
        shortline = cbet12 >= 0 and sbet12 < 0.5 and cbet2 * lam12 < 0.5
        if shortline:
            sbetm2 = sq(sbet1 + sbet2)
            # sin((bet1+bet2)/2)^2 = (sbet1 + sbet2)^2 / ((sbet1 + sbet2)^2 +
            # (cbet1 + cbet2)^2)
            sbetm2 /= sbetm2 + sq(cbet1 + cbet2)
            dnm = math.sqrt(1 + self._ep2 * sbetm2)
            omg12 = lam12 / (self._f1 * dnm)
            somg12 = math.sin(omg12)
            comg12 = math.cos(omg12)
        else:
            somg12 = slam12
            comg12 = clam12

        salp1 = cbet2 * somg12
        if comg12 >= 0:
            calp1 = sbet12 + cbet2 * sbet1 * sq(somg12) / (1 + comg12)
        else:
            calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

        ssig12 = math.hypot(salp1, calp1)
        csig12 = sbet1 * sbet2 + cbet1 * cbet2 * comg12

        if shortline and ssig12 < self._etol2:
            # really short lines
            salp2 = cbet1 * somg12
            calp2 = sbet12 - cbet1 * sbet2 * (
                sq(somg12) / (1 + comg12) if comg12 >= 0 else 1 - comg12
            )
            salp2, calp2 = norm(salp2, calp2)
            # Set return value
            sig12 = math.atan2(ssig12, csig12)
        elif (abs(self._n) > 0.1 or  # Skip astroid calc if too eccentric
              csig12 >= 0 or
              ssig12 >= 6 * abs(self._n) * math.pi * sq(cbet1)):
            # Nothing to do, zeroth order spherical approximation is OK
            pass
        else:
            # Scale lam12 and bet2 to x, y coordinate system where antipodal
            # point is at origin and singular point is at y = 0, x = -1.
            lam12x = math.atan2(-slam12, -clam12)  # lam12 - pi
            if self.f >= 0:  # In fact f == 0 does not get here
                # x = dlong, y = dlat
                k2 = sq(sbet1) * self._ep2
                eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
                lamscale = self.f * cbet1 * self.series.a3f(eps) * math.pi
                betscale = lamscale * cbet1
                x = lam12x / lamscale
                y = sbet12a / betscale
            else:  # f < 0
                # x = dlat, y = dlong
                cbet12a = cbet2 * cbet1 - sbet2 * sbet1
                bet12a = math.atan2(sbet12a, cbet12a)
                # In the case of lon12 = 180, this repeats a calculation made
                # in the inverse.
                _, m12b, m0, _, _ = self._lengths(
                    self._n, math.pi + bet12a,
                    sbet1, -cbet1, dn1, sbet2, cbet2, dn2,
                    cbet1, cbet2, Capability.REDUCED_LENGTH
                )
                x = -1 + m12b / (cbet1 * cbet2 * m0 * math.pi)
                betscale = (sbet12a / x if x < -0.01
                            else -self.f * sq(cbet1) * math.pi)
                lamscale = betscale / cbet1
                y = lam12x / lamscale

            if y > -Geodesic.tol1 and x > -1 - Geodesic.xthresh:
                # strip near cut
                if self.f >= 0:
                    salp1 = min(1.0, -x)
                    calp1 = -math.sqrt(1 - sq(salp1))
                else:
                    calp1 = max(0.0 if x > -Geodesic.tol1 else -1.0, x)
                    salp1 = math.sqrt(1 - sq(calp1))
            else:
                # Estimate alp1 by solving the astroid problem.
                k = Geodesic._astroid(x, y)
                omg12a = lamscale * (
                    -x * k / (1 + k) if self.f >= 0 else -y * (1 + k) / k
                )
                somg12 = math.sin(omg12a)
                comg12 = -math.cos(omg12a)
                # Update spherical estimate of alp1 using omg12 instead of
                # lam12
                salp1 = cbet2 * somg12
                calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

        # Sanity check on starting guess. Backwards check allows NaN through.
        if not salp1 <= 0:
            salp1, calp1 = norm(salp1, calp1)
        else:
            salp1 = 1.0
            calp1 = 0.0
        return sig12, salp1, calp1, salp2, calp2, dnm

    def _lambda12(
        self,
        sbet1: float, cbet1: float, dn1: float,
        sbet2: float, cbet2: float, dn2: float,
        salp1: float, calp1: float,
        slam120: float, clam120: float,
        diffp: bool
    ) -> Tuple[float, ...]:
        """Longitude residual for a trial starting azimuth.

        Returns ``(v, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2, eps,
        domg12, dv)`` where ``v = lambda12(alpha1) - lon12`` and ``dv`` is
        its derivative with respect to alpha1 (NaN unless ``diffp``).
        """
        if sbet1 == 0 and calp1 == 0:
            # Break degeneracy of equatorial line. This case has already been
            # handled.
            calp1 = -Geodesic.tiny

        # sin(alp1) * cos(bet1) = sin(alp0)
        salp0 = salp1 * cbet1
        calp0 = math.hypot(calp1, salp1 * sbet1)  # calp0 > 0

        # tan(bet1) = tan(sig1) * cos(alp1)
        # tan(omg1) = sin(alp0) * tan(sig1) = tan(omg1)=tan(alp1)*sin(bet1)
        ssig1 = sbet1
        somg1 = salp0 * sbet1
        csig1 = comg1 = calp1 * cbet1
        ssig1, csig1 = norm(ssig1, csig1)

        # Enforce symmetries in the case abs(bet2) = -bet1. Need to be
        # careful about this case, since this can yield singularities in the
        # Newton iteration.
        # sin(alp2) * cos(bet2) = sin(alp0)
        salp2 = salp0 / cbet2 if cbet2 != cbet1 else salp1
        # calp2 = sqrt(1 - sq(salp2))
        #       = sqrt(sq(calp0) - sq(sbet2)) / cbet2
        # and subst for calp0 and rearrange to give (choose positive sqrt
        # to give alp2 in [0, pi/2]).
        if cbet2 != cbet1 or abs(sbet2) != -sbet1:
            calp2 = math.sqrt(
                sq(calp1 * cbet1) +
                ((cbet2 - cbet1) * (cbet1 + cbet2) if cbet1 < -sbet1
                 else (sbet1 - sbet2) * (sbet1 + sbet2))
            ) / cbet2
        else:
            calp2 = abs(calp1)

        # tan(bet2) = tan(sig2) * cos(alp2)
        # tan(omg2) = sin(alp0) * tan(sig2).
        ssig2 = sbet2
        somg2 = salp0 * sbet2
        csig2 = comg2 = calp2 * cbet2
        ssig2, csig2 = norm(ssig2, csig2)

        # sig12 = sig2 - sig1, limit to [0, pi]
        sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2),
                           csig1 * csig2 + ssig1 * ssig2)
        # omg12 = omg2 - omg1, limit to [0, pi]
        somg12 = max(0.0, comg1 * somg2 - somg1 * comg2)
        comg12 = comg1 * comg2 + somg1 * somg2
        # eta = omg12 - lam120
        eta = math.atan2(somg12 * clam120 - comg12 * slam120,
                         comg12 * clam120 + somg12 * slam120)

        k2 = sq(calp0) * self._ep2
        eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
        C3a = self.series.c3f(eps)
        B312 = (sin_cos_series(True, ssig2, csig2, C3a) -
                sin_cos_series(True, ssig1, csig1, C3a))
        domg12 = -self.f * self.series.a3f(eps) * salp0 * (sig12 + B312)
        lam12 = eta + domg12

        if diffp:
            if calp2 == 0:
                dlam12 = -2 * self._f1 * dn1 / sbet1
            else:
                _, dlam12, _, _, _ = self._lengths(
                    eps, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                    cbet1, cbet2, Capability.REDUCED_LENGTH
                )
                dlam12 *= self._f1 / (calp2 * cbet2)
        else:
            dlam12 = math.nan

        return (lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
                eps, domg12, dlam12)

    def _gen_inverse(
        self,
        lat1: float, lon1: float,
        lat2: float, lon2: float,
        outmask: Capability
    ) -> Tuple[float, ...]:
        """General inverse problem in sine/cosine form.

        Returns ``(a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21,
        S12)``; outputs not in ``outmask`` are NaN.
        """
        a12 = s12 = m12 = M12 = M21 = S12 = math.nan

        # Compute longitude difference (AngDiff does this carefully).
        lon12, lon12s = ang_diff(lon1, lon2)
        # Make longitude difference positive.
        lonsign = -1 if math.copysign(1.0, lon12) < 0 else 1
        lon12 *= lonsign
        lon12s *= lonsign
        lam12 = math.radians(lon12)
        # Calculate sincos of lon12 + error (this applies ang_round
        # internally).
        slam12, clam12 = sincosde(lon12, lon12s)
        # the supplementary longitude difference
        lon12s = (180 - lon12) - lon12s

        # If really close to the equator, treat as on equator.
        lat1 = ang_round(lat_fix(lat1))
        lat2 = ang_round(lat_fix(lat2))
        # Swap points so that point with higher (abs) latitude is point 1.
        # If one latitude is a NaN, then it becomes lat1.
        swapp = -1 if abs(lat1) < abs(lat2) or math.isnan(lat2) else 1
        if swapp < 0:
            lonsign *= -1
            lat2, lat1 = lat1, lat2
        # Make lat1 <= -0
        latsign = 1 if math.copysign(1.0, lat1) < 0 else -1
        lat1 *= latsign
        lat2 *= latsign
        # Now we have
        #
        #     0 <= lon12 <= 180
        #     -90 <= lat1 <= -0
        #     lat1 <= lat2 <= -lat1
        #
        # longsign, swapp, latsign register the transformation to bring the
        # coordinates to this canonical form. In all cases, 1 means no change
        # was made. We make these transformations so that there are few
        # cases to check, e.g., on verifying quadrants in atan2. In
        # addition, this enforces some symmetries in the results returned.

        sbet1, cbet1 = sincosd(lat1)
        sbet1 *= self._f1
        # Ensure cbet1 = +epsilon at poles
        sbet1, cbet1 = norm(sbet1, cbet1)
        cbet1 = max(Geodesic.tiny, cbet1)

        sbet2, cbet2 = sincosd(lat2)
        sbet2 *= self._f1
        # Ensure cbet2 = +epsilon at poles
        sbet2, cbet2 = norm(sbet2, cbet2)
        cbet2 = max(Geodesic.tiny, cbet2)

        # If cbet1 < -sbet1, then cbet2 - cbet1 is a sensitive measure of the
        # |bet1| - |bet2|. Alternatively (cbet1 >= -sbet1), abs(sbet2) + sbet1
        # is a better measure. This logic is used in assigning calp2 in
        # _lambda12. Sometimes these quantities vanish and in that case we
        # force bet2 = +/- bet1 exactly. An example where this is necessary
        # is the inverse problem 48.522876735459 0 -48.52287673545898293
        # 179.599720456223079643 which failed with Visual Studio 10 (Release
        # and Debug)
        if cbet1 < -sbet1:
            if cbet2 == cbet1:
                sbet2 = math.copysign(sbet1, sbet2)
        else:
            if abs(sbet2) == -sbet1:
                cbet2 = cbet1

        dn1 = math.sqrt(1 + self._ep2 * sq(sbet1))
        dn2 = math.sqrt(1 + self._ep2 * sq(sbet2))

        # True if the geodesic is a meridian (or the path through a pole).
        meridian = lat1 == -90 or slam12 == 0

        if meridian:
            # Endpoints are on a single full meridian, so the geodesic might
            # lie on a meridian.
            calp1 = clam12
            salp1 = slam12  # Head to the target longitude
            calp2 = 1.0
            salp2 = 0.0  # At the target we're heading north

            # tan(bet) = tan(sig) * cos(alp)
            ssig1 = sbet1
            csig1 = calp1 * cbet1
            ssig2 = sbet2
            csig2 = calp2 * cbet2

            # sig12 = sig2 - sig1
            sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2),
                               csig1 * csig2 + ssig1 * ssig2)
            s12x, m12x, _, M12, M21 = self._lengths(
                self._n, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                cbet1, cbet2,
                outmask | Capability.DISTANCE | Capability.REDUCED_LENGTH
            )
            # Add the check for sig12 since zero length geodesics might yield
            # m12 < 0. Test case was
            #
            #    echo 20.001 0 20.001 0 | GeodSolve -i
            #
            # In fact, we will have sig12 > pi/2 for meridional geodesic
            # which is not a shortest path.
            if sig12 < 1 or m12x >= 0:
                # Need at least 2, to handle 90 0 90 180
                if (sig12 < 3 * Geodesic.tiny or
                        # Prevent negative s12 or m12 for short lines
                        (sig12 < Geodesic.tol0 and (s12x < 0 or m12x < 0))):
                    sig12 = m12x = s12x = 0.0
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
            else:
                # m12 < 0, i.e., prolate and too close to anti-podal
                meridian = False

        # somg12 == 2 marks that it needs to be calculated
        somg12 = 2.0
        comg12 = 0.0
        omg12 = 0.0
        if (not meridian and
                # and sbet2 == 0 -- taken care of by the swap above
                sbet1 == 0 and
                # Mimic the way _lambda12 works with calp1 = 0
                (self.f <= 0 or lon12s >= self.f * 180)):
            # Geodesic runs along equator
            calp1 = calp2 = 0.0
            salp1 = salp2 = 1.0
            s12x = self.a * lam12
            sig12 = omg12 = lam12 / self._f1
            m12x = self._b * math.sin(sig12)
            if outmask & Capability.GEODESIC_SCALE:
                M12 = M21 = math.cos(sig12)
            a12 = lon12 / self._f1

        elif not meridian:
            # Now point1 and point2 belong within a hemisphere bounded by a
            # meridian and geodesic is neither meridional or equatorial.

            # Figure a starting point for Newton's method
            sig12, salp1, calp1, salp2, calp2, dnm = self._inverse_start(
                sbet1, cbet1, dn1, sbet2, cbet2, dn2, lam12, slam12, clam12
            )

            if sig12 >= 0:
                # Short lines (_inverse_start sets salp2, calp2, dnm)
                s12x = sig12 * self._b * dnm
                m12x = sq(dnm) * self._b * math.sin(sig12 / dnm)
                if outmask & Capability.GEODESIC_SCALE:
                    M12 = M21 = math.cos(sig12 / dnm)
                a12 = math.degrees(sig12)
                omg12 = lam12 / (self._f1 * dnm)
            else:
                (sig12, salp1, calp1, salp2, calp2,
                 ssig1, csig1, ssig2, csig2, eps, domg12) = self._solve_azimuth(
                    sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                    salp1, calp1, slam12, clam12, lat1, lat2, lon12
                )
                s12x, m12x, _, M12, M21 = self._lengths(
                    eps, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                    cbet1, cbet2, outmask
                )
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
                if outmask & Capability.AREA:
                    # omg12 = lam12 - domg12
                    sdomg12 = math.sin(domg12)
                    cdomg12 = math.cos(domg12)
                    somg12 = slam12 * cdomg12 - clam12 * sdomg12
                    comg12 = clam12 * cdomg12 + slam12 * sdomg12

        if outmask & Capability.DISTANCE:
            s12 = 0.0 + s12x  # Convert -0 to 0

        if outmask & Capability.REDUCED_LENGTH:
            m12 = 0.0 + m12x  # Convert -0 to 0

        if outmask & Capability.AREA:
            S12 = self._inverse_area(
                sbet1, cbet1, sbet2, cbet2, salp1, calp1, salp2, calp2,
                meridian, somg12, comg12, omg12
            ) * swapp * lonsign * latsign
            # Convert -0 to 0
            S12 += 0.0

        # Convert calp, salp to azimuth accounting for lonsign, swapp,
        # latsign.
        if swapp < 0:
            salp2, salp1 = salp1, salp2
            calp2, calp1 = calp1, calp2
            if outmask & Capability.GEODESIC_SCALE:
                M21, M12 = M12, M21

        salp1 *= swapp * lonsign
        calp1 *= swapp * latsign
        salp2 *= swapp * lonsign
        calp2 *= swapp * latsign

        return a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12

    def _solve_azimuth(
        self,
        sbet1: float, cbet1: float, dn1: float,
        sbet2: float, cbet2: float, dn2: float,
        salp1: float, calp1: float,
        slam12: float, clam12: float,
        lat1: float, lat2: float, lon12: float
    ) -> Tuple[float, ...]:
        """Newton iteration with bisection fallback for the starting azimuth.

        The bracket ``[alp1a, alp1b]`` always contains the root, so each
        rejected Newton step is replaced by the bracket midpoint and the
        loop terminates within ``maxit2`` evaluations. On exhaustion the
        current estimate is kept.
        """
        # Bracketing range
        salp1a = Geodesic.tiny
        calp1a = 1.0
        salp1b = Geodesic.tiny
        calp1b = -1.0
        tripn = False
        tripb = False
        numit = 0
        while True:
            # the WGS84 test set: mean = 1.47, sd = 1.25, max = 16
            # WGS84 and random input: mean = 2.85, sd = 0.60
            (v, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
             eps, domg12, dv) = self._lambda12(
                sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                salp1, calp1, slam12, clam12, numit < Geodesic.maxit1
            )
            # Reversed test to allow escape with NaNs
            if tripb or not abs(v) >= (8 if tripn else 1) * Geodesic.tol0:
                break
            if numit == Geodesic.maxit2:
                logger.warning(
                    f"Inverse iteration did not converge after {numit} steps "
                    f"(lat1={lat1}, lat2={lat2}, lon12={lon12}, "
                    f"residual={v:.3e}); returning best estimate"
                )
                break
            # Update bracketing values
            if v > 0 and (numit > Geodesic.maxit1 or
                          calp1 / salp1 > calp1b / salp1b):
                salp1b = salp1
                calp1b = calp1
            elif v < 0 and (numit > Geodesic.maxit1 or
                            calp1 / salp1 < calp1a / salp1a):
                salp1a = salp1
                calp1a = calp1
            numit += 1

            if numit <= Geodesic.maxit1 and dv > 0:
                dalp1 = -v / dv
                if abs(dalp1) < math.pi:
                    sdalp1 = math.sin(dalp1)
                    cdalp1 = math.cos(dalp1)
                    nsalp1 = salp1 * cdalp1 + calp1 * sdalp1
                    if nsalp1 > 0:
                        calp1 = calp1 * cdalp1 - salp1 * sdalp1
                        salp1 = nsalp1
                        salp1, calp1 = norm(salp1, calp1)
                        # In some regimes we don't get quadratic convergence
                        # because slope -> 0. So use convergence conditions
                        # based on epsilon instead of sqrt(epsilon).
                        tripn = abs(v) <= 16 * Geodesic.tol0
                        continue
            # Either dv was not positive or updated value was outside legal
            # range. Use the midpoint of the bracket as the next estimate.
            # This mechanism is not needed for the WGS84 ellipsoid, but it
            # does catch problems with more eccentric ellipsoids.
            salp1 = (salp1a + salp1b) / 2
            calp1 = (calp1a + calp1b) / 2
            salp1, calp1 = norm(salp1, calp1)
            tripn = False
            tripb = (abs(salp1a - salp1) + (calp1a - calp1) < Geodesic.tolb or
                     abs(salp1 - salp1b) + (calp1 - calp1b) < Geodesic.tolb)

        return (sig12, salp1, calp1, salp2, calp2,
                ssig1, csig1, ssig2, csig2, eps, domg12)

    def _inverse_area(
        self,
        sbet1: float, cbet1: float, sbet2: float, cbet2: float,
        salp1: float, calp1: float, salp2: float, calp2: float,
        meridian: bool, somg12: float, comg12: float, omg12: float
    ) -> float:
        """Area between the geodesic and the equator, canonical orientation."""
        # From Lambda12: sin(alp1) * cos(bet1) = sin(alp0)
        salp0 = salp1 * cbet1
        calp0 = math.hypot(calp1, salp1 * sbet1)  # calp0 > 0
        if calp0 != 0 and salp0 != 0:
            # From Lambda12: tan(bet) = tan(sig) * cos(alp)
            ssig1 = sbet1
            csig1 = calp1 * cbet1
            ssig2 = sbet2
            csig2 = calp2 * cbet2
            k2 = sq(calp0) * self._ep2
            eps = k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)
            # Multiplier = a^2 * e^2 * cos(alpha0) * sin(alpha0).
            A4 = sq(self.a) * calp0 * salp0 * self._e2
            ssig1, csig1 = norm(ssig1, csig1)
            ssig2, csig2 = norm(ssig2, csig2)
            C4a = self.series.c4f(eps)
            B41 = sin_cos_series(False, ssig1, csig1, C4a)
            B42 = sin_cos_series(False, ssig2, csig2, C4a)
            S12 = A4 * (B42 - B41)
        else:
            # Avoid problems with indeterminate sig1, sig2 on equator
            S12 = 0.0

        if not meridian and somg12 == 2:
            somg12 = math.sin(omg12)
            comg12 = math.cos(omg12)

        if (not meridian and
                # omg12 < 3/4 * pi
                comg12 > -0.7071 and  # Long difference not too big
                sbet2 - sbet1 < 1.75):  # Lat difference not too big
            # Use tan(Gamma/2) = tan(omg12/2)
            # * (tan(bet1/2)+tan(bet2/2))/(1+tan(bet1/2)*tan(bet2/2))
            # with tan(x/2) = sin(x)/(1+cos(x))
            domg12 = 1 + comg12
            dbet1 = 1 + cbet1
            dbet2 = 1 + cbet2
            alp12 = 2 * math.atan2(somg12 * (sbet1 * dbet2 + sbet2 * dbet1),
                                   domg12 * (sbet1 * sbet2 + dbet1 * dbet2))
        else:
            # alp12 = alp2 - alp1, used in atan2 so no need to normalize
            salp12 = salp2 * calp1 - calp2 * salp1
            calp12 = calp2 * calp1 + salp2 * salp1
            # The right thing appears to happen if alp1 = +/-180 and alp2 = 0,
            # viz salp12 = -0 and alp12 = -180. However this depends on the
            # sign being attached to 0 correctly. The following ensures the
            # correct behavior.
            if salp12 == 0 and calp12 < 0:
                salp12 = Geodesic.tiny * calp1
                calp12 = -1.0
            alp12 = math.atan2(salp12, calp12)
        return S12 + self._c2 * alp12

    # =========================================================================
    # Direct problem
    # =========================================================================

    def direct(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        distance
    ) -> DirectResult:
        """Solve the direct geodesic problem.

        Given a starting point, azimuth, and distance, find the endpoint
        and the forward azimuth there.

        Parameters
        ----------
        latitude, longitude : float
            Starting point in degrees.
        azimuth : float or pint.Quantity
            Initial azimuth, clockwise from north (degrees if a bare
            number).
        distance : float or pint.Quantity
            Distance to travel (meters if a bare number). A negative
            distance travels backwards along the geodesic.

        Returns
        -------
        DirectResult
            Latitude, longitude in [-180, 180] and forward azimuth of the
            destination.

        Examples
        --------
        >>> geod = Geodesic()
        >>> r = geod.direct(40.64, -73.78, 45.0, 10_000_000)
        >>> print(f"{r.latitude:.8f} {r.longitude:.8f} {r.azimuth:.8f}")
        32.62110046 49.05248709 140.40598588
        """
        caps = Capability.LATITUDE | Capability.LONGITUDE | Capability.AZIMUTH
        pos = self.general_direct(
            latitude, longitude, azimuth, distance, PositionFlag.NONE, caps
        )
        return DirectResult(pos.latitude, pos.longitude, pos.azimuth)

    def arc_direct(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        arc: float,
        capabilities: Capability = (Capability.LATITUDE | Capability.LONGITUDE |
                                    Capability.AZIMUTH | Capability.DISTANCE)
    ) -> GeneralPosition:
        """Solve the direct problem with the length given as an arc.

        Parameters
        ----------
        latitude, longitude : float
            Starting point in degrees.
        azimuth : float or pint.Quantity
            Initial azimuth.
        arc : float
            Arc length on the auxiliary sphere in degrees.
        capabilities : Capability
            Quantities to compute (default: position, azimuth, distance).

        Returns
        -------
        GeneralPosition
            Destination and the requested quantities.
        """
        return self.general_direct(
            latitude, longitude, azimuth, arc, PositionFlag.ARC_MODE,
            capabilities
        )

    def general_direct(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        distance_or_arc,
        flags: PositionFlag = PositionFlag.NONE,
        capabilities: Capability = Capability.ALL
    ) -> GeneralPosition:
        """General direct problem.

        Parameters
        ----------
        latitude, longitude : float
            Starting point in degrees.
        azimuth : float or pint.Quantity
            Initial azimuth.
        distance_or_arc : float or pint.Quantity
            Distance in meters, or arc length in degrees when ``flags``
            contains ``ARC_MODE``.
        flags : PositionFlag
            ``ARC_MODE`` and/or ``LONG_UNROLL``.
        capabilities : Capability
            Quantities to compute; others are returned as None.

        Returns
        -------
        GeneralPosition
            Destination and the requested quantities.
        """
        arcmode = PositionFlag.ARC_MODE in flags
        if not arcmode:
            distance_or_arc = to_meters(distance_or_arc)
        # Automatically supply DISTANCE_IN if necessary
        caps = Capability(capabilities)
        if not arcmode:
            caps |= Capability.DISTANCE_IN
        line = GeodesicLine(self, latitude, longitude, to_degrees(azimuth), caps)
        return line.general_position(distance_or_arc, flags)

    # =========================================================================
    # Inverse problem
    # =========================================================================

    def inverse(
        self,
        latitude1: float,
        longitude1: float,
        latitude2: float,
        longitude2: float
    ) -> InverseResult:
        """Solve the inverse geodesic problem.

        Given two points, find the length of the shortest geodesic between
        them and the forward azimuths at both ends.

        Parameters
        ----------
        latitude1, longitude1 : float
            First point in degrees.
        latitude2, longitude2 : float
            Second point in degrees.

        Returns
        -------
        InverseResult
            Distance in meters and azimuths in [-180, 180].

        Notes
        -----
        For exactly antipodal points on a sphere every meridian is a
        shortest path; the one through the first point is returned.

        Examples
        --------
        >>> geod = Geodesic()
        >>> r = geod.inverse(90.0, 0.0, -90.0, 0.0)
        >>> print(f"{r.distance:.3f}")
        20003931.459
        """
        general = self.general_inverse(
            latitude1, longitude1, latitude2, longitude2,
            Capability.DISTANCE | Capability.AZIMUTH
        )
        return general.to_inverse_result()

    def general_inverse(
        self,
        latitude1: float,
        longitude1: float,
        latitude2: float,
        longitude2: float,
        capabilities: Capability = Capability.ALL
    ) -> GeneralInverse:
        """General inverse problem.

        Parameters
        ----------
        latitude1, longitude1 : float
            First point in degrees.
        latitude2, longitude2 : float
            Second point in degrees.
        capabilities : Capability
            Quantities to compute: DISTANCE, AZIMUTH, REDUCED_LENGTH,
            GEODESIC_SCALE, AREA. Others are returned as None.

        Returns
        -------
        GeneralInverse
            Arc length and the requested quantities.
        """
        caps = Capability(capabilities)
        (a12, s12, salp1, calp1, salp2, calp2,
         m12, M12, M21, S12) = self._gen_inverse(
            latitude1, longitude1, latitude2, longitude2, caps
        )

        def wanted(cap: Capability, value: float) -> Optional[float]:
            return value if cap in caps else None

        if Capability.AZIMUTH in caps:
            azi1 = atan2d(salp1, calp1)
            azi2 = atan2d(salp2, calp2)
        else:
            azi1 = azi2 = None

        return GeneralInverse(
            arc=a12,
            distance=wanted(Capability.DISTANCE, s12),
            start_azimuth=azi1,
            end_azimuth=azi2,
            reduced_length=wanted(Capability.REDUCED_LENGTH, m12),
            scale12=wanted(Capability.GEODESIC_SCALE, M12),
            scale21=wanted(Capability.GEODESIC_SCALE, M21),
            area=wanted(Capability.AREA, S12)
        )

    def distance(
        self,
        latitude1: float,
        longitude1: float,
        latitude2: float,
        longitude2: float
    ) -> float:
        """Geodesic distance between two points in meters."""
        return self.general_inverse(
            latitude1, longitude1, latitude2, longitude2, Capability.DISTANCE
        ).distance

    # =========================================================================
    # Geodesic lines
    # =========================================================================

    def line(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        capabilities: Capability = Capability.STANDARD
    ) -> GeodesicLine:
        """Create a geodesic line from a point and an azimuth.

        Parameters
        ----------
        latitude, longitude : float
            Starting point in degrees.
        azimuth : float or pint.Quantity
            Starting azimuth.
        capabilities : Capability
            Quantities the line will be able to compute.

        Returns
        -------
        GeodesicLine
            A line without a reference point.
        """
        return GeodesicLine(self, latitude, longitude, to_degrees(azimuth),
                            capabilities)

    def direct_line(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        distance,
        capabilities: Capability = Capability.STANDARD
    ) -> GeodesicLine:
        """Create a geodesic line with a reference point a given distance away.

        Parameters
        ----------
        latitude, longitude : float
            Starting point in degrees.
        azimuth : float or pint.Quantity
            Starting azimuth.
        distance : float or pint.Quantity
            Distance to the reference point.
        capabilities : Capability
            Quantities the line will be able to compute. DISTANCE_IN is
            added automatically.

        Returns
        -------
        GeodesicLine
            Line whose ``distance`` and ``arc`` refer to the reference
            point.
        """
        return self._gen_direct_line(
            latitude, longitude, to_degrees(azimuth), False,
            to_meters(distance), capabilities
        )

    def arc_direct_line(
        self,
        latitude: float,
        longitude: float,
        azimuth,
        arc: float,
        capabilities: Capability = Capability.STANDARD
    ) -> GeodesicLine:
        """Create a geodesic line with a reference point a given arc away.

        The line's ``distance`` is only available when ``capabilities``
        contains DISTANCE; otherwise it is NaN.
        """
        return self._gen_direct_line(
            latitude, longitude, to_degrees(azimuth), True, arc, capabilities
        )

    def _gen_direct_line(
        self,
        latitude: float,
        longitude: float,
        azimuth: float,
        arcmode: bool,
        distance_or_arc: float,
        capabilities: Capability
    ) -> GeodesicLine:
        caps = Capability(capabilities)
        if not arcmode:
            caps |= Capability.DISTANCE_IN
        line = GeodesicLine(self, latitude, longitude, azimuth, caps)
        if arcmode:
            line._set_arc(distance_or_arc)
        else:
            line._set_distance(distance_or_arc)
        return line

    def inverse_line(
        self,
        latitude1: float,
        longitude1: float,
        latitude2: float,
        longitude2: float,
        capabilities: Capability = Capability.STANDARD
    ) -> GeodesicLine:
        """Create the geodesic line through two points.

        The inverse problem is solved once to fix the starting azimuth
        and the reference distance and arc to the second point.

        Parameters
        ----------
        latitude1, longitude1 : float
            First point in degrees.
        latitude2, longitude2 : float
            Second point in degrees.
        capabilities : Capability
            Quantities the line will be able to compute. If it contains
            DISTANCE_IN then DISTANCE is added so that the reference arc
            can be converted to a distance.

        Returns
        -------
        GeodesicLine
            Line from the first point with ``distance`` and ``arc`` to the
            second point.
        """
        a12, _, salp1, calp1, _, _, _, _, _, _ = self._gen_inverse(
            latitude1, longitude1, latitude2, longitude2, Capability.NONE
        )
        azi1 = atan2d(salp1, calp1)
        caps = Capability(capabilities)
        # Ensure that a12 can be converted to a distance
        if Capability.DISTANCE_IN in caps:
            caps |= Capability.DISTANCE
        line = GeodesicLine(self, latitude1, longitude1, azi1, caps,
                            salp1, calp1)
        line._set_arc(a12)
        return line

    # =========================================================================
    # Polygons
    # =========================================================================

    def polygon(self, polyline: bool = False) -> PolygonAccumulator:
        """Create an empty polygon (or polyline) accumulator on this ellipsoid."""
        return PolygonAccumulator(self, polyline)

    def polygon_area(
        self,
        latitudes: Sequence[float],
        longitudes: Sequence[float]
    ) -> Tuple[float, float]:
        """Area and perimeter of a polygon given as coordinate arrays.

        Parameters
        ----------
        latitudes, longitudes : sequence or ndarray of float
            Vertex coordinates in degrees, in order. The polygon is closed
            implicitly. Counter-clockwise traversal gives a positive area.

        Returns
        -------
        Tuple[float, float]
            (area in m^2, perimeter in m)

        Raises
        ------
        ValueError
            If the two arrays differ in length or are not one-dimensional.
        """
        lats = np.asarray(latitudes, dtype=np.float64)
        lons = np.asarray(longitudes, dtype=np.float64)
        if lats.ndim != 1 or lons.ndim != 1:
            raise ValueError(
                f"Latitude and longitude arrays must be one-dimensional, "
                f"got shapes {lats.shape} and {lons.shape}"
            )
        if lats.shape != lons.shape:
            raise ValueError(
                f"Latitude and longitude arrays must have the same length, "
                f"got {lats.size} and {lons.size}"
            )
        polygon = self.polygon()
        for lat, lon in zip(lats.tolist(), lons.tolist()):
            polygon.add_point(lat, lon)
        result = polygon.compute()
        return result.area, result.perimeter

    def polygon_area_from_points(
        self,
        points: Iterable[Tuple[float, float]]
    ) -> Tuple[float, float]:
        """Area and perimeter of a polygon given as ``(lat, lon)`` pairs.

        Accepts tuples or `GeodeticPoint` objects (anything with
        ``as_tuple``).
        """
        coords: List[Tuple[float, float]] = [
            p.as_tuple() if hasattr(p, "as_tuple") else tuple(p)
            for p in points
        ]
        if not coords:
            return 0.0, 0.0
        lats, lons = zip(*coords)
        return self.polygon_area(lats, lons)
