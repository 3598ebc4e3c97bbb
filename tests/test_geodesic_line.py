import math

import pytest

from common.units import Q_
from geodesics import Capability, EllipsoidModel, Geodesic, PositionFlag

from conftest import JFK, SIN


def test_line_initialization(geod):
    line = geod.line(*JFK, 45.0)
    assert line.latitude == 40.64
    assert line.longitude == -73.78
    assert line.azimuth == 45.0
    for cap in (Capability.LATITUDE, Capability.LONGITUDE,
                Capability.AZIMUTH, Capability.DISTANCE_IN):
        assert cap in line.capabilities
    # No reference point
    assert math.isnan(line.distance)
    assert math.isnan(line.arc)


def test_line_always_has_latitude_and_azimuth(geod):
    line = geod.line(*JFK, 45.0, Capability.NONE)
    assert Capability.LATITUDE in line.capabilities
    assert Capability.AZIMUTH in line.capabilities


def test_line_position_matches_direct(geod):
    line = geod.line(*JFK, 45.0)
    for s in (0.0, 1e3, 1e6, 1e7, -5e6):
        position = line.position(s)
        direct = geod.direct(*JFK, 45.0, s)
        assert position.latitude == pytest.approx(direct.latitude, abs=1e-12)
        assert position.longitude == pytest.approx(direct.longitude, abs=1e-12)
        assert position.azimuth == pytest.approx(direct.azimuth, abs=1e-12)


def test_position_at_zero_is_start(geod):
    line = geod.line(*JFK, 45.0)
    position = line.position(0.0)
    assert position.latitude == pytest.approx(40.64, abs=1e-12)
    assert position.longitude == pytest.approx(-73.78, abs=1e-12)
    assert position.azimuth == pytest.approx(45.0, abs=1e-12)


def test_direct_line_reference_point(geod):
    line = geod.direct_line(*JFK, 45.0, 1_000_000.0)
    assert line.latitude == 40.64
    assert line.longitude == -73.78
    assert line.azimuth == 45.0
    assert line.distance == 1_000_000.0
    assert line.arc == pytest.approx(
        geod.general_inverse(*JFK, *geod.direct(*JFK, 45.0, 1e6).point.as_tuple(),
                             Capability.NONE).arc,
        abs=1e-10
    )


def test_arc_direct_line_distance_requires_capability(geod):
    with_distance = geod.arc_direct_line(
        *JFK, 45.0, 10.0, Capability.STANDARD | Capability.DISTANCE
    )
    assert with_distance.arc == 10.0
    assert with_distance.distance > 1e6

    without = geod.arc_direct_line(
        *JFK, 45.0, 10.0,
        Capability.LATITUDE | Capability.LONGITUDE | Capability.AZIMUTH
    )
    assert math.isnan(without.distance)


def test_inverse_line_connects_points(geod):
    line = geod.inverse_line(*JFK, *SIN)
    inverse = geod.inverse(*JFK, *SIN)
    assert line.latitude == JFK[0]
    assert line.longitude == JFK[1]
    assert line.distance == pytest.approx(inverse.distance, abs=1e-3)
    assert line.azimuth == pytest.approx(inverse.start_azimuth, abs=1e-10)
    assert Capability.DISTANCE in line.capabilities

    end = line.position(line.distance)
    assert end.latitude == pytest.approx(SIN[0], abs=1e-9)
    assert end.longitude == pytest.approx(SIN[1], abs=1e-9)
    assert end.azimuth == pytest.approx(inverse.end_azimuth, abs=1e-9)


def test_waypoints_evenly_spaced(geod):
    line = geod.inverse_line(*JFK, *SIN)
    waypoints = line.waypoints(11)
    assert len(waypoints) == 11
    assert waypoints[0].latitude == pytest.approx(JFK[0], abs=1e-12)
    assert waypoints[0].longitude == pytest.approx(JFK[1], abs=1e-12)
    assert waypoints[-1].latitude == pytest.approx(SIN[0], abs=1e-6)
    assert waypoints[-1].longitude == pytest.approx(SIN[1], abs=1e-6)

    expected = line.distance / 10
    for prev, curr in zip(waypoints, waypoints[1:]):
        segment = geod.inverse(prev.latitude, prev.longitude,
                               curr.latitude, curr.longitude)
        assert segment.distance == pytest.approx(expected, abs=1.0)


def test_waypoints_distances_increase(geod):
    line = geod.inverse_line(*JFK, *SIN)
    distances = [geod.inverse(*JFK, p.latitude, p.longitude).distance
                 for p in line.waypoints(6)]
    assert distances == sorted(distances)


def test_waypoints_validation(geod):
    with pytest.raises(ValueError):
        geod.inverse_line(*JFK, *SIN).waypoints(1)
    with pytest.raises(ValueError):
        geod.line(*JFK, 45.0).waypoints(5)


def test_general_position_all_capabilities(geod):
    line = geod.line(0.0, 0.0, 90.0, Capability.ALL)
    result = line.general_position(1_000_000.0)
    assert result.distance == 1_000_000.0
    assert result.reduced_length is not None
    assert result.scale12 is not None
    assert result.scale21 is not None
    assert result.area is not None


def test_general_position_gated_fields_are_none(geod):
    line = geod.line(*JFK, 45.0)
    result = line.general_position(1_000_000.0)
    assert result.distance is None
    assert result.reduced_length is None
    assert result.scale12 is None
    assert result.area is None
    assert result.longitude is not None


def test_arc_mode_position(geod):
    line = geod.line(0.0, 0.0, 90.0, Capability.ALL)
    result = line.general_position(1.0, PositionFlag.ARC_MODE)
    assert result.arc == pytest.approx(1.0, abs=1e-12)
    assert result.longitude > 0.0


def test_arc_position_matches_distance_position(geod):
    line = geod.line(*JFK, 45.0, Capability.ALL)
    by_distance = line.general_position(5e6)
    by_arc = line.arc_position(by_distance.arc)
    assert by_arc.latitude == pytest.approx(by_distance.latitude, abs=1e-12)
    assert by_arc.longitude == pytest.approx(by_distance.longitude, abs=1e-12)


def test_position_accepts_quantities(geod):
    line = geod.line(*JFK, 45.0)
    assert line.position(Q_(1000, "km")) == line.position(1e6)
    by_nautical = line.position(Q_(500, "nautical_mile"))
    assert by_nautical.latitude == pytest.approx(line.position(926_000.0).latitude,
                                                 abs=1e-12)


def test_arc_position_accepts_quantities(geod):
    line = geod.line(*JFK, 45.0)
    by_radians = line.arc_position(Q_(math.pi / 4, "radian"))
    by_degrees = line.arc_position(45.0)
    assert by_radians.latitude == pytest.approx(by_degrees.latitude, abs=1e-12)
    assert by_radians.longitude == pytest.approx(by_degrees.longitude, abs=1e-12)


def test_general_position_accepts_quantities(geod):
    line = geod.line(*JFK, 45.0, Capability.ALL)
    assert line.general_position(Q_(2000, "km")) == line.general_position(2e6)
    by_arc = line.general_position(Q_(0.5, "radian"), PositionFlag.ARC_MODE)
    assert by_arc.arc == pytest.approx(math.degrees(0.5), abs=1e-12)


def test_position_rejects_wrong_units(geod):
    line = geod.line(*JFK, 45.0)
    with pytest.raises(ValueError, match="distance"):
        line.position(Q_(10, "degree"))
    with pytest.raises(ValueError, match="arc"):
        line.arc_position(Q_(10, "km"))


def test_distance_query_without_distance_in_is_nan(geod):
    line = geod.line(*JFK, 45.0, Capability.LATITUDE | Capability.LONGITUDE)
    position = line.position(1e6)
    assert math.isnan(position.latitude)
    assert math.isnan(position.longitude)
    assert math.isnan(position.azimuth)
    general = line.general_position(1e6)
    assert math.isnan(general.arc)
    # Arc mode still works
    assert not math.isnan(line.arc_position(5.0).latitude)


def test_equatorial_azimuth(geod):
    line = geod.line(0.0, 0.0, 30.0)
    assert line.equatorial_azimuth == pytest.approx(30.0, abs=1e-12)


def test_long_unroll_tracks_full_circuit(geod):
    line = geod.line(0.0, 0.0, 90.0)
    circumference = 2 * math.pi * geod.equatorial_radius
    wrapped = line.position(circumference * 0.75)
    unrolled = line.position(circumference * 0.75, unroll=True)
    assert wrapped.longitude == pytest.approx(-90.0, abs=1e-9)
    assert unrolled.longitude == pytest.approx(270.0, abs=1e-9)


def test_flattened_prolate_direct_accurate():
    # |f| > 0.01 takes the Newton correction on the reverted series
    geod = Geodesic(EllipsoidModel(6.4e6, -1 / 50))
    line = geod.line(20.0, 0.0, 30.0, Capability.ALL)
    pos = line.general_position(8e6)
    arc_pos = line.general_position(pos.arc, PositionFlag.ARC_MODE)
    assert arc_pos.distance == pytest.approx(8e6, abs=1e-6)
