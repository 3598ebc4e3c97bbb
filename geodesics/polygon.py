"""
Geodesic Polygon Area and Perimeter.

A polygon on the ellipsoid is built up one vertex (or one edge) at a
time. Each edge contributes its length to the perimeter and the area S12
between the edge and the equator to the area; the sums are kept in
compensated accumulators so that polygons with many edges do not lose
precision.

Area Reduction
--------------
The summed S12 is only determined modulo the area of the ellipsoid, and
edges that cross the prime meridian shift it by half that area. The
number of crossings is tracked; its parity fixes the half-area term. The
raw sum is clockwise-positive; by default the result is converted to the
counter-clockwise convention and reduced into (-A/2, A/2].

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Section 6.
- Shewchuk, J.R. (1997). Adaptive precision floating-point arithmetic and
  fast robust geometric predicates. Discrete Comput. Geom. 18, 305-363.
"""

import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from common.units import to_degrees, to_meters
from geodesics.capabilities import Capability, PositionFlag
from geodesics.geomath import ang_diff, ang_normalize, two_sum
from geodesics.results import PolygonResult

if TYPE_CHECKING:
    from geodesics.solver import Geodesic


@dataclass
class Accumulator:
    """Running sum carried as an unevaluated pair ``s + t``.

    ``s`` holds the rounded sum and ``t`` the round-off error, so adding
    many terms of mixed sign keeps close to full double precision.

    Examples
    --------
    >>> acc = Accumulator()
    >>> for x in (1e16, 1.0, -1e16):
    ...     acc.add(x)
    >>> acc.sum()
    1.0
    """
    s: float = 0.0
    t: float = 0.0

    def add(self, y: float) -> None:
        """Add ``y`` to the sum."""
        # Here's Shewchuk's solution...
        # hold exact sum as [s, t, u]
        z, u = two_sum(y, self.t)  # Accumulate starting at least significant end
        self.s, self.t = two_sum(z, self.s)
        # Start is s, t decreasing and non-adjacent. Sum is now (s + t + u)
        # exactly with s, t, u non-adjacent and in decreasing order (except
        # for possible zeros). The following code tries to normalize the
        # result. Ideally, we want s = round(s + t + u) and u = round(s + t
        # + u - s). The following does an approximate job (and maintains the
        # decreasing non-adjacent property). Here are two "failures" using
        # 3-bit floats:
        #
        # Case 1: s is not equal to round(s + t + u) -- off by 1 ulp
        # [12, -1] - 8 -> [4, 0, -1] -> [4, -1] = 3 should be [3, 0] = 3
        #
        # Case 2: s + t is not as close to s + t + u as it shold be
        # [64, 5] + 4 -> [64, 8, 1] -> [64,  8] = 72 (off by 1)
        #                    should be [80, -7] = 73 (exact)
        #
        # "Fixing" these problems is probably not worth the expense. The
        # representation inevitably leads to small errors in the accumulated
        # values. The additional errors illustrated here amount to 1 ulp of
        # the less significant word during each addition to the Accumulator
        # and an additional possible error of 1 ulp in the reported sum.
        #
        # Incidentally, the "ideal" representation described above is not
        # canonical, because s = round(s + t + u) and u = round(s + t + u -
        # s) is not unique.
        if self.s == 0:  # This implies t == 0,
            self.s = u  # so result is u
        else:
            self.t += u  # otherwise just accumulate u to t.

    def sum(self, y: float = 0.0) -> float:
        """Return the sum plus ``y`` without changing the accumulator."""
        if y == 0:
            return self.s
        b = replace(self)
        b.add(y)
        return b.s

    def negate(self) -> None:
        self.s *= -1
        self.t *= -1

    def remainder(self, y: float) -> None:
        """Reduce the sum to its IEEE remainder modulo ``y``."""
        self.s = math.remainder(self.s, y)
        self.add(0.0)


def transit(lon1: float, lon2: float) -> int:
    """Prime meridian crossing between two vertices.

    Returns 1 for an eastward crossing, -1 for a westward crossing and 0
    otherwise. The longitude difference is computed the same way as in
    the inverse problem so that both agree on which way the edge runs.
    """
    lon12, _ = ang_diff(lon1, lon2)
    lon1 = ang_normalize(lon1)
    lon2 = ang_normalize(lon2)
    if lon12 > 0 and ((lon1 < 0 <= lon2) or (lon1 > 0 and lon2 == 0)):
        return 1
    if lon12 < 0 and lon1 >= 0 > lon2:
        return -1
    return 0


def transit_direct(lon1: float, lon2: float) -> int:
    """Parity-exact crossing count for an edge with unrolled longitudes.

    Equivalent to ``floor(lon2 / 360) - floor(lon1 / 360)`` modulo 2.
    """
    lon1 = math.remainder(lon1, 720.0)
    lon2 = math.remainder(lon2, 720.0)
    return ((0 if 0 <= lon2 < 360 else 1) -
            (0 if 0 <= lon1 < 360 else 1))


def reduce_area(
    area: Accumulator,
    total_area: float,
    crossings: int,
    reverse: bool,
    sign: bool
) -> float:
    """Reduce a clockwise area sum to the requested convention.

    Parameters
    ----------
    area : Accumulator
        Clockwise-positive area sum; modified in place.
    total_area : float
        Area of the ellipsoid.
    crossings : int
        Net number of prime meridian crossings.
    reverse : bool
        Keep the clockwise convention instead of counter-clockwise.
    sign : bool
        Reduce into (-A/2, A/2] if True, else into [0, A).

    Returns
    -------
    float
        The reduced area.
    """
    area.remainder(total_area)
    if crossings & 1:
        area.add((1 if area.sum() < 0 else -1) * total_area / 2)
    # area is with the clockwise sense. If not reverse convert to
    # counter-clockwise convention.
    if not reverse:
        area.negate()
    if sign:
        if area.sum() > total_area / 2:
            area.add(-total_area)
        elif area.sum() <= -total_area / 2:
            area.add(total_area)
    else:
        if area.sum() >= total_area:
            area.add(-total_area)
        elif area.sum() < 0:
            area.add(total_area)
    return 0.0 + area.sum()


@dataclass
class _PolygonState:
    """Running state of an accumulator; copied for trial vertices."""
    num: int = 0
    lat0: float = math.nan
    lon0: float = math.nan
    lat1: float = math.nan
    lon1: float = math.nan
    crossings: int = 0
    perimeter: Accumulator = field(default_factory=Accumulator)
    area: Accumulator = field(default_factory=Accumulator)

    def copy(self) -> '_PolygonState':
        return replace(self, perimeter=replace(self.perimeter),
                       area=replace(self.area))


class PolygonAccumulator:
    """Perimeter and area of a geodesic polygon or length of a polyline.

    Vertices are connected by geodesics and the polygon is closed
    implicitly from the last vertex back to the first. Arbitrarily
    complex polygons are allowed; in a self-intersecting polygon the area
    is the sum of the parts, with lobes traversed clockwise counting
    negative. Obtain instances from `Geodesic.polygon`.

    Parameters
    ----------
    geodesic : Geodesic
        Solver for the ellipsoid.
    polyline : bool
        If True only the length is accumulated and ``area`` is None.

    Notes
    -----
    Not thread-safe: concurrent mutation must be serialised by the caller.
    `test_point` and `test_edge` leave the accumulator unchanged.

    Examples
    --------
    >>> from geodesics import Geodesic
    >>> poly = Geodesic().polygon()
    >>> for lat, lon in [(0, 0), (0, 1), (1, 1), (1, 0)]:
    ...     poly.add_point(lat, lon)
    >>> result = poly.compute()
    >>> result.point_count
    4
    """

    _INVERSE_MASK = Capability.DISTANCE | Capability.AREA
    _DIRECT_MASK = (Capability.LATITUDE | Capability.LONGITUDE |
                    Capability.DISTANCE | Capability.AREA)

    def __init__(self, geodesic: 'Geodesic', polyline: bool = False):
        self._geodesic = geodesic
        self._polyline = polyline
        self._area0 = geodesic.total_area
        self._state = _PolygonState()

    @property
    def polyline(self) -> bool:
        return self._polyline

    @property
    def point_count(self) -> int:
        """Number of vertices added so far."""
        return self._state.num

    @property
    def current_latitude(self) -> float:
        """Latitude of the last vertex (NaN when empty)."""
        return self._state.lat1

    @property
    def current_longitude(self) -> float:
        """Longitude of the last vertex (NaN when empty)."""
        return self._state.lon1

    def clear(self) -> None:
        """Discard all vertices so a new polygon can be started."""
        self._state = _PolygonState()

    def _add_point(self, state: _PolygonState, lat: float, lon: float) -> None:
        if state.num == 0:
            state.lat0 = state.lat1 = lat
            state.lon0 = state.lon1 = lon
        else:
            edge = self._geodesic.general_inverse(
                state.lat1, state.lon1, lat, lon, self._INVERSE_MASK
            )
            state.perimeter.add(edge.distance)
            if not self._polyline:
                state.area.add(edge.area)
                state.crossings += transit(state.lon1, lon)
            state.lat1 = lat
            state.lon1 = lon
        state.num += 1

    def _add_edge(self, state: _PolygonState, azimuth: float, distance: float) -> None:
        azimuth = to_degrees(azimuth)
        distance = to_meters(distance)
        # Nothing to do without a starting point
        if state.num == 0:
            return
        pos = self._geodesic.general_direct(
            state.lat1, state.lon1, azimuth, distance,
            PositionFlag.LONG_UNROLL, self._DIRECT_MASK
        )
        state.perimeter.add(distance)
        if not self._polyline:
            state.area.add(pos.area)
            state.crossings += transit_direct(state.lon1, pos.longitude)
        state.lat1 = pos.latitude
        state.lon1 = pos.longitude
        state.num += 1

    def _compute(self, state: _PolygonState, reverse: bool, sign: bool) -> PolygonResult:
        if state.num < 2:
            return PolygonResult(
                area=None if self._polyline else 0.0,
                perimeter=0.0,
                point_count=state.num
            )
        if self._polyline:
            return PolygonResult(area=None, perimeter=state.perimeter.sum(),
                                 point_count=state.num)

        closing = self._geodesic.general_inverse(
            state.lat1, state.lon1, state.lat0, state.lon0, self._INVERSE_MASK
        )
        perimeter = state.perimeter.sum(closing.distance)
        area = replace(state.area)
        area.add(closing.area)
        crossings = state.crossings + transit(state.lon1, state.lon0)
        return PolygonResult(
            area=reduce_area(area, self._area0, crossings, reverse, sign),
            perimeter=perimeter,
            point_count=state.num
        )

    def add_point(self, latitude: float, longitude: float) -> None:
        """Add a vertex.

        Parameters
        ----------
        latitude : float
            Latitude in degrees, [-90, 90].
        longitude : float
            Longitude in degrees.
        """
        self._add_point(self._state, latitude, longitude)

    def add_edge(self, azimuth: float, distance: float) -> None:
        """Add a vertex given by an azimuth and distance from the last one.

        Does nothing if no vertex has been added yet.

        Parameters
        ----------
        azimuth : float or pint.Quantity
            Azimuth at the current vertex, degrees if a bare number.
        distance : float or pint.Quantity
            Length of the edge, meters if a bare number.
        """
        self._add_edge(self._state, azimuth, distance)

    def compute(self, reverse: bool = False, sign: bool = True) -> PolygonResult:
        """Perimeter and area of the polygon.

        Parameters
        ----------
        reverse : bool
            If True, clockwise traversal counts as positive area.
        sign : bool
            If True, return a signed area in (-A/2, A/2] where A is the
            ellipsoid area; otherwise the area of the region on the
            positive side, in [0, A).

        Returns
        -------
        PolygonResult
            Area (None for a polyline), perimeter and vertex count. With
            fewer than two vertices the perimeter and area are zero.
        """
        return self._compute(self._state, reverse, sign)

    def test_point(
        self,
        latitude: float,
        longitude: float,
        reverse: bool = False,
        sign: bool = True
    ) -> PolygonResult:
        """Result `compute` would give if a vertex were added.

        The accumulator itself is not modified.
        """
        trial = self._state.copy()
        self._add_point(trial, latitude, longitude)
        return self._compute(trial, reverse, sign)

    def test_edge(
        self,
        azimuth: float,
        distance: float,
        reverse: bool = False,
        sign: bool = True
    ) -> PolygonResult:
        """Result `compute` would give if an edge were added.

        The accumulator itself is not modified. On an empty accumulator
        the edge is ignored, as in `add_edge`.
        """
        trial = self._state.copy()
        self._add_edge(trial, azimuth, distance)
        return self._compute(trial, reverse, sign)

    def __repr__(self) -> str:
        kind = "polyline" if self._polyline else "polygon"
        return f"PolygonAccumulator({kind}, points={self._state.num})"
