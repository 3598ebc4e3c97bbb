"""
Geodesic Lines.

A `GeodesicLine` fixes a starting point and azimuth and caches every
quantity that depends only on the geodesic: Clairaut's constant, the
series coefficients in eps and the series values at the start. Points
along the line then cost one series evaluation each, which makes the line
the right tool for generating many waypoints.

A line may carry a reference point (point 3) at a known distance and arc
from the start. This is set when the line is built from a direct problem
or from two end points, and is what `waypoints` divides evenly.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Sections 3 and 5.
"""

import math
from typing import TYPE_CHECKING, List, Optional, Tuple

from common.units import to_degrees, to_meters
from geodesics.capabilities import (
    NEEDS_C1,
    NEEDS_C1P,
    NEEDS_C2,
    NEEDS_C3,
    NEEDS_C4,
    Capability,
    PositionFlag,
)
from geodesics.geomath import (
    ang_normalize,
    ang_round,
    atan2d,
    lat_fix,
    norm,
    sincosd,
    sq,
)
from geodesics.results import DirectResult, GeneralPosition
from geodesics.series import (
    a1m1f,
    a2m1f,
    c1f,
    c1pf,
    c2f,
    sin_cos_series,
)

if TYPE_CHECKING:
    from geodesics.solver import Geodesic


class GeodesicLine:
    """A geodesic through a point with a given azimuth.

    Usually obtained from `Geodesic.line`, `Geodesic.direct_line`,
    `Geodesic.arc_direct_line` or `Geodesic.inverse_line` rather than
    constructed directly.

    Parameters
    ----------
    geodesic : Geodesic
        Solver for the ellipsoid.
    latitude, longitude : float
        Starting point in degrees.
    azimuth : float
        Starting azimuth in degrees.
    capabilities : Capability
        Quantities the line must be able to return. LATITUDE and AZIMUTH
        are always included.
    salp1, calp1 : float
        Sine and cosine of the azimuth when already known exactly (used by
        `Geodesic.inverse_line`); NaN to derive them from ``azimuth``.

    Notes
    -----
    Outputs outside ``capabilities`` come back as None from
    `general_position`. A distance query on a line built without
    DISTANCE_IN returns NaN for the position.
    """

    def __init__(
        self,
        geodesic: 'Geodesic',
        latitude: float,
        longitude: float,
        azimuth: float,
        capabilities: Capability = Capability.STANDARD,
        salp1: float = math.nan,
        calp1: float = math.nan
    ):
        from geodesics.solver import Geodesic

        self._a = geodesic.a
        self._f = geodesic.f
        self._b = geodesic._b
        self._c2 = geodesic._c2
        self._f1 = geodesic._f1
        self._caps = (Capability(capabilities) |
                      Capability.LATITUDE | Capability.AZIMUTH)

        self._lat1 = lat_fix(latitude)
        self._lon1 = longitude
        if math.isnan(salp1) or math.isnan(calp1):
            self._azi1 = ang_normalize(azimuth)
            self._salp1, self._calp1 = sincosd(ang_round(self._azi1))
        else:
            self._azi1 = azimuth
            self._salp1 = salp1
            self._calp1 = calp1

        sbet1, cbet1 = sincosd(ang_round(self._lat1))
        sbet1 *= self._f1
        # Ensure cbet1 = +epsilon at poles
        sbet1, cbet1 = norm(sbet1, cbet1)
        cbet1 = max(Geodesic.tiny, cbet1)
        self._dn1 = math.sqrt(1 + geodesic._ep2 * sq(sbet1))

        # Evaluate alp0 from sin(alp1) * cos(bet1) = sin(alp0),
        self._salp0 = self._salp1 * cbet1  # alp0 in [0, pi/2 - |bet1|]
        # Alt: calp0 = hypot(sbet1, calp1 * cbet1). The following is
        # slightly better (consider the case salp1 = 0).
        self._calp0 = math.hypot(self._calp1, self._salp1 * sbet1)
        # Evaluate sig with tan(bet1) = tan(sig1) * cos(alp1).
        # sig = 0 is nearest northward crossing of equator.
        # With bet1 = 0, alp1 = pi/2, we have sig1 = 0 (equatorial line).
        # With bet1 =  pi/2, alp1 = -pi, sig1 =  pi/2
        # With bet1 = -pi/2, alp1 =  0 , sig1 = -pi/2
        # Evaluate omg1 with tan(omg1) = sin(alp0) * tan(sig1).
        # With alp0 in (0, pi/2], quadrants for sig and omg coincide.
        # No atan2(0,0) ambiguity at poles since cbet1 = +epsilon.
        # With alp0 = 0, omg1 = 0 for alp1 = 0, omg1 = pi for alp1 = pi.
        self._ssig1 = sbet1
        self._somg1 = self._salp0 * sbet1
        self._csig1 = self._comg1 = (
            cbet1 * self._calp1 if sbet1 != 0 or self._calp1 != 0 else 1.0
        )
        # sig1 in (-pi, pi]
        self._ssig1, self._csig1 = norm(self._ssig1, self._csig1)
        # No need to normalize
        # self._somg1, self._comg1 = norm(self._somg1, self._comg1)

        self._k2 = sq(self._calp0) * geodesic._ep2
        eps = self._k2 / (2 * (1 + math.sqrt(1 + self._k2)) + self._k2)

        if self._caps & NEEDS_C1:
            self._A1m1 = a1m1f(eps)
            self._C1a = c1f(eps)
            self._B11 = sin_cos_series(True, self._ssig1, self._csig1,
                                       self._C1a)
            s = math.sin(self._B11)
            c = math.cos(self._B11)
            # tau1 = sig1 + B11
            self._stau1 = self._ssig1 * c + self._csig1 * s
            self._ctau1 = self._csig1 * c - self._ssig1 * s
            # Not necessary because C1pa reverts C1a
            #    B11 = -sin_cos_series(True, stau1, ctau1, C1pa)

        if self._caps & NEEDS_C1P:
            self._C1pa = c1pf(eps)

        if self._caps & NEEDS_C2:
            self._A2m1 = a2m1f(eps)
            self._C2a = c2f(eps)
            self._B21 = sin_cos_series(True, self._ssig1, self._csig1,
                                       self._C2a)

        if self._caps & NEEDS_C3:
            self._C3a = geodesic.series.c3f(eps)
            self._A3c = -self._f * self._salp0 * geodesic.series.a3f(eps)
            self._B31 = sin_cos_series(True, self._ssig1, self._csig1,
                                       self._C3a)

        if self._caps & NEEDS_C4:
            self._C4a = geodesic.series.c4f(eps)
            # Multiplier = a^2 * e^2 * cos(alpha0) * sin(alpha0)
            self._A4 = (sq(self._a) * self._calp0 * self._salp0 *
                        geodesic._e2)
            self._B41 = sin_cos_series(False, self._ssig1, self._csig1,
                                       self._C4a)

        # Reference point, set by _set_distance or _set_arc
        self._s13 = math.nan
        self._a13 = math.nan

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def latitude(self) -> float:
        """Latitude of the starting point."""
        return self._lat1

    @property
    def longitude(self) -> float:
        """Longitude of the starting point, as given."""
        return self._lon1

    @property
    def azimuth(self) -> float:
        """Azimuth at the starting point."""
        return self._azi1

    @property
    def equatorial_azimuth(self) -> float:
        """Azimuth where the line crosses the equator northwards."""
        return atan2d(self._salp0, self._calp0)

    @property
    def capabilities(self) -> Capability:
        return self._caps

    @property
    def distance(self) -> float:
        """Distance to the reference point in meters (NaN if none)."""
        return self._s13

    @property
    def arc(self) -> float:
        """Arc length to the reference point in degrees (NaN if none)."""
        return self._a13

    def __repr__(self) -> str:
        return (f"GeodesicLine(lat={self._lat1}, lon={self._lon1}, "
                f"azi={self._azi1}, s13={self._s13})")

    # =========================================================================
    # Position queries
    # =========================================================================

    def _gen_position(
        self,
        arcmode: bool,
        s12_a12: float,
        outmask: Capability,
        unroll: bool = False
    ) -> Tuple[float, ...]:
        """Core position evaluation.

        Returns ``(a12, lat2, lon2, azi2, s12, m12, M12, M21, S12)``;
        quantities not in ``outmask`` (restricted to the line's
        capabilities) are NaN.
        """
        from geodesics.solver import Geodesic

        a12 = lat2 = lon2 = azi2 = s12 = m12 = M12 = M21 = S12 = math.nan
        outmask &= self._caps
        if not (arcmode or self._caps & Capability.DISTANCE_IN):
            # Impossible distance calculation requested
            return a12, lat2, lon2, azi2, s12, m12, M12, M21, S12

        B12 = AB1 = 0.0
        if arcmode:
            # Interpret s12_a12 as spherical arc length
            sig12 = math.radians(s12_a12)
            ssig12, csig12 = sincosd(s12_a12)
        else:
            # Interpret s12_a12 as distance
            tau12 = s12_a12 / (self._b * (1 + self._A1m1))
            s = math.sin(tau12)
            c = math.cos(tau12)
            # tau2 = tau1 + tau12
            B12 = -sin_cos_series(True,
                                  self._stau1 * c + self._ctau1 * s,
                                  self._ctau1 * c - self._stau1 * s,
                                  self._C1pa)
            sig12 = tau12 - (B12 - self._B11)
            ssig12 = math.sin(sig12)
            csig12 = math.cos(sig12)
            if abs(self._f) > 0.01:
                # Reverted distance series is inaccurate for |f| > 1/100,
                # so correct sig12 with 1 Newton iteration. The following
                # table shows the approximate maximum error for
                # a = WGS_a() and various f relative to GeodesicExact.
                #     erri = the error in the inverse solution (nm)
                #     errd = the error in the direct solution (series only) (nm)
                #     errda = the error in the direct solution
                #             (series + 1 Newton) (nm)
                #
                #       f     erri  errd errda
                #     -1/5    12e6 1.2e9  69e6
                #     -1/10  123e3  12e6 765e3
                #     -1/20   1110 108e3  7155
                #     -1/50  18.63 200.9 27.12
                #     -1/100 18.63 23.78 23.37
                #     -1/150 18.63 21.05 20.26
                #      1/150 22.35 24.73 25.83
                #      1/100 22.35 25.03 25.31
                #      1/50  29.80 231.9 30.44
                #      1/20   5376 146e3  10e3
                #      1/10  829e3  22e6 1.5e6
                #      1/5   157e6 3.8e9 280e6
                ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
                csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
                B12 = sin_cos_series(True, ssig2, csig2, self._C1a)
                serr = ((1 + self._A1m1) * (sig12 + (B12 - self._B11)) -
                        s12_a12 / self._b)
                sig12 = sig12 - serr / math.sqrt(1 + self._k2 * sq(ssig2))
                ssig12 = math.sin(sig12)
                csig12 = math.cos(sig12)
                # Update B12 below

        # sig2 = sig1 + sig12
        ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
        csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
        dn2 = math.sqrt(1 + self._k2 * sq(ssig2))
        if outmask & (Capability.DISTANCE | Capability.REDUCED_LENGTH |
                      Capability.GEODESIC_SCALE):
            if arcmode or abs(self._f) > 0.01:
                B12 = sin_cos_series(True, ssig2, csig2, self._C1a)
            AB1 = (1 + self._A1m1) * (B12 - self._B11)
        # sin(bet2) = cos(alp0) * sin(sig2)
        sbet2 = self._calp0 * ssig2
        # Alt: cbet2 = hypot(csig2, salp0 * ssig2)
        cbet2 = math.hypot(self._salp0, self._calp0 * csig2)
        if cbet2 == 0:
            # I.e., salp0 = 0, csig2 = 0. Break the degeneracy in this case
            cbet2 = csig2 = Geodesic.tiny
        # tan(alp0) = cos(sig2)*tan(alp2)
        salp2 = self._salp0
        calp2 = self._calp0 * csig2  # No need to normalize

        if outmask & Capability.DISTANCE:
            s12 = (self._b * ((1 + self._A1m1) * sig12 + AB1)
                   if arcmode else s12_a12)

        if outmask & Capability.LONGITUDE:
            # tan(omg2) = sin(alp0) * tan(sig2)
            somg2 = self._salp0 * ssig2
            comg2 = csig2  # No need to normalize
            E = math.copysign(1, self._salp0)  # east or west going?
            # omg12 = omg2 - omg1
            if unroll:
                omg12 = E * (sig12 -
                             (math.atan2(ssig2, csig2) -
                              math.atan2(self._ssig1, self._csig1)) +
                             (math.atan2(E * somg2, comg2) -
                              math.atan2(E * self._somg1, self._comg1)))
            else:
                omg12 = math.atan2(somg2 * self._comg1 - comg2 * self._somg1,
                                   comg2 * self._comg1 + somg2 * self._somg1)
            lam12 = omg12 + self._A3c * (
                sig12 + (sin_cos_series(True, ssig2, csig2, self._C3a) -
                         self._B31))
            lon12 = math.degrees(lam12)
            if unroll:
                lon2 = self._lon1 + lon12
            else:
                lon2 = ang_normalize(ang_normalize(self._lon1) +
                                     ang_normalize(lon12))

        if outmask & Capability.LATITUDE:
            lat2 = atan2d(sbet2, self._f1 * cbet2)

        if outmask & Capability.AZIMUTH:
            azi2 = atan2d(salp2, calp2)

        if outmask & (Capability.REDUCED_LENGTH | Capability.GEODESIC_SCALE):
            B22 = sin_cos_series(True, ssig2, csig2, self._C2a)
            AB2 = (1 + self._A2m1) * (B22 - self._B21)
            J12 = (self._A1m1 - self._A2m1) * sig12 + (AB1 - AB2)
            if outmask & Capability.REDUCED_LENGTH:
                # Add parens around (_csig1 * ssig2) and (_ssig1 * csig2) to
                # ensure accurate cancellation in the case of coincident
                # points.
                m12 = self._b * ((dn2 * (self._csig1 * ssig2) -
                                  self._dn1 * (self._ssig1 * csig2)) -
                                 self._csig1 * csig2 * J12)
            if outmask & Capability.GEODESIC_SCALE:
                t = (self._k2 * (ssig2 - self._ssig1) *
                     (ssig2 + self._ssig1) / (self._dn1 + dn2))
                M12 = csig12 + (t * ssig2 - csig2 * J12) * self._ssig1 / self._dn1
                M21 = csig12 - (t * self._ssig1 - self._csig1 * J12) * ssig2 / dn2

        if outmask & Capability.AREA:
            B42 = sin_cos_series(False, ssig2, csig2, self._C4a)
            if self._calp0 == 0 or self._salp0 == 0:
                # alp12 = alp2 - alp1, used in atan2 so no need to normalize
                salp12 = salp2 * self._calp1 - calp2 * self._salp1
                calp12 = calp2 * self._calp1 + salp2 * self._salp1
            else:
                # tan(alp) = tan(alp0) * sec(sig)
                # tan(alp2-alp1) = (tan(alp2) -tan(alp1)) / (tan(alp2)*tan(alp1)+1)
                # = calp0 * salp0 * (csig1-csig2) / (salp0^2 + calp0^2 * csig1*csig2)
                # If csig12 > 0, write
                #   csig1 - csig2 = ssig12 * (csig1 * ssig12 / (1 + csig12) + ssig1)
                # else
                #   csig1 - csig2 = csig1 * (1 - csig12) + ssig12 * ssig1
                # No need to normalize
                salp12 = self._calp0 * self._salp0 * (
                    self._csig1 * (1 - csig12) + ssig12 * self._ssig1
                    if csig12 <= 0 else
                    ssig12 * (self._csig1 * ssig12 / (1 + csig12) + self._ssig1)
                )
                calp12 = sq(self._salp0) + sq(self._calp0) * self._csig1 * csig2
            S12 = (self._c2 * math.atan2(salp12, calp12) +
                   self._A4 * (B42 - self._B41))

        a12 = s12_a12 if arcmode else math.degrees(sig12)
        return a12, lat2, lon2, azi2, s12, m12, M12, M21, S12

    def general_position(
        self,
        value: float,
        flags: PositionFlag = PositionFlag.NONE
    ) -> GeneralPosition:
        """Position at a distance or arc along the line.

        Parameters
        ----------
        value : float or pint.Quantity
            Distance from the start (meters if a bare number), or arc
            length (degrees if a bare number) when ``flags`` contains
            ``ARC_MODE``. May be negative.
        flags : PositionFlag
            ``ARC_MODE`` and/or ``LONG_UNROLL``.

        Returns
        -------
        GeneralPosition
            Every quantity the line was built to compute; the rest are
            None.
        """
        flags = PositionFlag(flags)
        arcmode = PositionFlag.ARC_MODE in flags
        value = to_degrees(value, name="arc") if arcmode else to_meters(value)
        (a12, lat2, lon2, azi2, s12,
         m12, M12, M21, S12) = self._gen_position(
            arcmode, value, self._caps,
            PositionFlag.LONG_UNROLL in flags
        )
        caps = self._caps

        def wanted(cap: Capability, v: float) -> Optional[float]:
            return v if cap in caps else None

        return GeneralPosition(
            latitude=lat2,
            longitude=wanted(Capability.LONGITUDE, lon2),
            azimuth=azi2,
            arc=a12,
            distance=wanted(Capability.DISTANCE, s12),
            reduced_length=wanted(Capability.REDUCED_LENGTH, m12),
            scale12=wanted(Capability.GEODESIC_SCALE, M12),
            scale21=wanted(Capability.GEODESIC_SCALE, M21),
            area=wanted(Capability.AREA, S12)
        )

    def position(self, distance: float, unroll: bool = False) -> DirectResult:
        """Point at a given distance along the line.

        Parameters
        ----------
        distance : float or pint.Quantity
            Distance from the start, meters if a bare number. Negative
            goes backwards.
        unroll : bool
            Track longitude continuously instead of reducing it.

        Returns
        -------
        DirectResult
            Latitude, longitude and forward azimuth. All NaN if the line
            was built without DISTANCE_IN.
        """
        _, lat2, lon2, azi2, _, _, _, _, _ = self._gen_position(
            False, to_meters(distance),
            Capability.LATITUDE | Capability.LONGITUDE | Capability.AZIMUTH,
            unroll
        )
        return DirectResult(lat2, lon2, azi2)

    def arc_position(self, arc: float, unroll: bool = False) -> DirectResult:
        """Point at a given arc length (degrees or an angle quantity) along the line."""
        _, lat2, lon2, azi2, _, _, _, _, _ = self._gen_position(
            True, to_degrees(arc, name="arc"),
            Capability.LATITUDE | Capability.LONGITUDE | Capability.AZIMUTH,
            unroll
        )
        return DirectResult(lat2, lon2, azi2)

    # =========================================================================
    # Reference point
    # =========================================================================

    def _set_distance(self, s13: float) -> None:
        self._s13 = s13
        a13, _, _, _, _, _, _, _, _ = self._gen_position(
            False, s13, Capability.NONE
        )
        self._a13 = a13

    def _set_arc(self, a13: float) -> None:
        self._a13 = a13
        _, _, _, _, s13, _, _, _, _ = self._gen_position(
            True, a13, Capability.DISTANCE
        )
        self._s13 = s13

    def waypoints(self, num_points: int) -> List[DirectResult]:
        """Evenly spaced points from the start to the reference point.

        Spacing is uniform in distance when the line supports distance
        queries, otherwise uniform in arc length.

        Parameters
        ----------
        num_points : int
            Number of points including both ends (>= 2).

        Returns
        -------
        List[DirectResult]
            Points from the start to the reference point inclusive.

        Raises
        ------
        ValueError
            If ``num_points < 2`` or the line has no reference point.
        """
        if num_points < 2:
            raise ValueError(f"num_points must be at least 2, got {num_points}")
        if math.isnan(self._a13):
            raise ValueError(
                "Line has no reference point; build it with direct_line, "
                "arc_direct_line or inverse_line"
            )
        use_distance = (Capability.DISTANCE_IN in self._caps and
                        not math.isnan(self._s13))
        total = self._s13 if use_distance else self._a13
        points = []
        for i in range(num_points):
            value = total * i / (num_points - 1)
            if use_distance:
                points.append(self.position(value))
            else:
                points.append(self.arc_position(value))
        return points
