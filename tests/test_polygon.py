import math

import pytest

from common.types import GeodeticPoint
from common.units import Q_
from geodesics import SPHERE, WGS84, Accumulator
from geodesics.polygon import reduce_area, transit, transit_direct

from conftest import ANTARCTICA_AREA, ANTARCTICA_PERIMETER

UNIT_SQUARE = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]


def _polygon(geod, points, polyline=False):
    poly = geod.polygon(polyline)
    for lat, lon in points:
        poly.add_point(lat, lon)
    return poly


# =============================================================================
# Fixtures from published values
# =============================================================================

def test_antarctica_area(geod, antarctica):
    lats, lons = zip(*antarctica)
    area, perimeter = geod.polygon_area(lats, lons)
    assert abs(area - ANTARCTICA_AREA) / ANTARCTICA_AREA < 1e-10
    assert perimeter == pytest.approx(ANTARCTICA_PERIMETER, rel=1e-9)


def test_antarctica_accumulator(geod, antarctica):
    result = _polygon(geod, antarctica).compute()
    assert result.point_count == 17
    assert result.area == pytest.approx(ANTARCTICA_AREA, rel=1e-10)
    assert result.perimeter == pytest.approx(ANTARCTICA_PERIMETER, rel=1e-9)


def test_antarctica_from_points(geod, antarctica):
    points = [GeodeticPoint(lat, lon) for lat, lon in antarctica]
    area, perimeter = geod.polygon_area_from_points(points)
    assert area == pytest.approx(ANTARCTICA_AREA, rel=1e-10)


def test_antarctica_reversed_is_negative(geod, antarctica):
    lats, lons = zip(*reversed(antarctica))
    area, perimeter = geod.polygon_area(lats, lons)
    assert area == pytest.approx(-ANTARCTICA_AREA, rel=1e-10)
    assert perimeter == pytest.approx(ANTARCTICA_PERIMETER, rel=1e-9)


def test_sphere_octant_area(sphere_geod):
    result = _polygon(sphere_geod, [(0, 0), (0, 90), (90, 0)]).compute()
    expected = math.pi * SPHERE.equatorial_radius ** 2 / 2
    assert result.point_count == 3
    assert result.area == pytest.approx(expected, rel=1e-12)


def test_wgs84_octant_area(geod):
    result = _polygon(geod, [(0, 0), (0, 90), (90, 0)]).compute()
    # One eighth of the ellipsoid
    assert result.area == pytest.approx(WGS84.total_area / 8, rel=1e-12)
    expected = math.pi * WGS84.equatorial_radius ** 2 / 2
    assert abs(result.area - expected) / expected < 0.01


# =============================================================================
# Accumulator behaviour
# =============================================================================

def test_polygon_initialization(geod):
    poly = geod.polygon()
    assert poly.point_count == 0
    assert not poly.polyline
    poly.add_point(0, 0)
    assert poly.point_count == 1
    assert poly.current_latitude == 0
    assert poly.current_longitude == 0


def test_polyline_length(geod):
    result = _polygon(geod, [(0, 0), (0, 90)], polyline=True).compute()
    assert result.point_count == 2
    assert result.area is None
    assert result.perimeter == pytest.approx(
        math.pi * WGS84.equatorial_radius / 2, abs=1e-6
    )


def test_too_few_points(geod):
    assert geod.polygon().compute().area == 0.0
    single = _polygon(geod, [(10, 10)]).compute()
    assert single.perimeter == 0.0
    assert single.area == 0.0
    assert single.point_count == 1
    assert _polygon(geod, [(10, 10)], polyline=True).compute().area is None


def test_add_edge(geod):
    poly = geod.polygon()
    poly.add_point(0, 0)
    poly.add_edge(90, 1_000_000)
    assert poly.point_count == 2
    assert abs(poly.current_latitude) < 0.1
    assert poly.current_longitude > 8.0


def test_add_edge_on_empty_is_noop(geod):
    poly = geod.polygon()
    poly.add_edge(90, 1_000_000)
    assert poly.point_count == 0
    assert math.isnan(poly.current_latitude)


def test_edges_match_points(geod):
    by_points = _polygon(geod, UNIT_SQUARE).compute()

    poly = geod.polygon()
    poly.add_point(*UNIT_SQUARE[0])
    for (lat1, lon1), (lat2, lon2) in zip(UNIT_SQUARE, UNIT_SQUARE[1:]):
        inv = geod.inverse(lat1, lon1, lat2, lon2)
        poly.add_edge(inv.start_azimuth, inv.distance)
    by_edges = poly.compute()

    assert by_edges.area == pytest.approx(by_points.area, rel=1e-9)
    assert by_edges.perimeter == pytest.approx(by_points.perimeter, rel=1e-12)


def test_clear(geod):
    poly = _polygon(geod, [(0, 0), (1, 1)])
    assert poly.point_count == 2
    poly.clear()
    assert poly.point_count == 0
    assert poly.compute().perimeter == 0.0


def test_test_point_leaves_polygon_unchanged(geod):
    poly = _polygon(geod, UNIT_SQUARE[:3])
    before = poly.compute()

    trial = poly.test_point(*UNIT_SQUARE[3])

    after = poly.compute()
    assert after == before
    assert trial.point_count == 4
    assert trial.area > before.area
    assert trial.area == pytest.approx(_polygon(geod, UNIT_SQUARE).compute().area,
                                       rel=1e-12)


def test_test_edge_leaves_polygon_unchanged(geod):
    poly = _polygon(geod, UNIT_SQUARE[:3])
    before = poly.compute()
    inv = geod.inverse(*UNIT_SQUARE[2], *UNIT_SQUARE[3])

    trial = poly.test_edge(inv.start_azimuth, inv.distance)

    assert poly.compute() == before
    assert poly.point_count == 3
    assert trial.point_count == 4
    assert trial.area == pytest.approx(_polygon(geod, UNIT_SQUARE).compute().area,
                                       rel=1e-9)


def test_test_edge_on_empty_reports_zero_points(geod):
    result = geod.polygon().test_edge(90, 1000)
    assert result.point_count == 0
    assert result.perimeter == 0.0
    assert result.area == 0.0


def test_add_edge_accepts_quantities(geod):
    by_meters = geod.polygon()
    by_meters.add_point(0, 0)
    by_meters.add_edge(90, 1_000_000)
    by_meters.add_edge(0, 1_000_000)

    by_quantity = geod.polygon()
    by_quantity.add_point(0, 0)
    by_quantity.add_edge(Q_(math.pi / 2, "radian"), Q_(1000, "km"))
    by_quantity.add_edge(0, Q_(1000, "km"))

    assert by_quantity.current_latitude == pytest.approx(by_meters.current_latitude,
                                                         abs=1e-12)
    assert by_quantity.current_longitude == pytest.approx(by_meters.current_longitude,
                                                          abs=1e-12)
    result = by_quantity.compute()
    assert result.perimeter == pytest.approx(by_meters.compute().perimeter, rel=1e-12)
    assert result.area == pytest.approx(by_meters.compute().area, rel=1e-12)


def test_test_edge_accepts_quantities(geod):
    poly = _polygon(geod, UNIT_SQUARE[:3])
    inv = geod.inverse(*UNIT_SQUARE[2], *UNIT_SQUARE[3])
    by_meters = poly.test_edge(inv.start_azimuth, inv.distance)
    by_quantity = poly.test_edge(inv.start_azimuth, Q_(inv.distance / 1000, "km"))
    assert by_quantity.area == pytest.approx(by_meters.area, rel=1e-9)
    assert by_quantity.perimeter == pytest.approx(by_meters.perimeter, rel=1e-12)


def test_add_edge_rejects_wrong_units(geod):
    poly = geod.polygon()
    # Checked even before the first vertex
    with pytest.raises(ValueError, match="distance"):
        poly.add_edge(90, Q_(1, "second"))
    poly.add_point(0, 0)
    with pytest.raises(ValueError, match="azimuth"):
        poly.add_edge(Q_(90, "meter"), 1000)
    assert poly.point_count == 1


def test_test_point_on_empty(geod):
    result = geod.polygon().test_point(10, 10)
    assert result.point_count == 1
    assert result.perimeter == 0.0


# =============================================================================
# Orientation and reduction
# =============================================================================

def test_clockwise_vs_counter_clockwise(geod):
    poly = _polygon(geod, UNIT_SQUARE)
    ccw = poly.compute(reverse=False, sign=True)
    cw = poly.compute(reverse=True, sign=True)
    assert ccw.area > 0
    assert cw.area < 0
    assert abs(ccw.area + cw.area) < 1e-6


def test_unsigned_area_of_clockwise_polygon(geod):
    clockwise = _polygon(geod, list(reversed(UNIT_SQUARE)))
    signed = clockwise.compute(sign=True)
    unsigned = clockwise.compute(sign=False)
    assert signed.area < 0
    # The rest of the earth
    assert unsigned.area == pytest.approx(WGS84.total_area + signed.area,
                                          rel=1e-12)


def test_antimeridian_square_matches_prime_meridian_square(geod):
    straddling = _polygon(geod, [(0, 179.5), (0, -179.5),
                                 (1, -179.5), (1, 179.5)]).compute()
    centred = _polygon(geod, [(0, -0.5), (0, 0.5), (1, 0.5), (1, -0.5)]).compute()
    assert straddling.area == pytest.approx(centred.area, rel=1e-10)
    assert straddling.perimeter == pytest.approx(centred.perimeter, rel=1e-12)


def test_polygon_around_pole(geod):
    ring = [(80.0, lon) for lon in (0.0, 90.0, 180.0, -90.0)]
    eastward = _polygon(geod, ring).compute()
    westward = _polygon(geod, list(reversed(ring))).compute()
    assert 0 < eastward.area < WGS84.total_area / 2
    assert westward.area == pytest.approx(-eastward.area, rel=1e-10)


def test_transit():
    assert transit(-1.0, 1.0) == 1
    assert transit(1.0, -1.0) == -1
    assert transit(179.0, -179.0) == 0
    assert transit(10.0, 20.0) == 0
    assert transit(-10.0, 0.0) == 1


def test_transit_direct():
    assert transit_direct(10.0, 20.0) == 0
    assert transit_direct(350.0, 370.0) == 1
    assert transit_direct(370.0, 350.0) == -1
    assert transit_direct(-10.0, 10.0) == -1


def test_reduce_area_conventions():
    total = 100.0
    assert reduce_area(Accumulator(-10.0), total, 0, False, True) == 10.0
    assert reduce_area(Accumulator(-10.0), total, 0, True, True) == -10.0
    assert reduce_area(Accumulator(10.0), total, 0, False, False) == 90.0
    # Odd crossings shift by half the total area
    assert reduce_area(Accumulator(-10.0), total, 1, False, True) == -40.0


def test_accumulator_compensates():
    acc = Accumulator()
    for x in (1e16, 1.0, -1e16):
        acc.add(x)
    assert acc.sum() == 1.0
    assert acc.sum(2.0) == 3.0
    assert acc.sum() == 1.0
    acc.negate()
    assert acc.sum() == -1.0


def test_polygon_area_mismatched_lengths(geod):
    with pytest.raises(ValueError):
        geod.polygon_area([0.0, 1.0, 2.0], [0.0, 1.0])


def test_polygon_area_empty(geod):
    assert geod.polygon_area([], []) == (0.0, 0.0)
    assert geod.polygon_area_from_points([]) == (0.0, 0.0)
