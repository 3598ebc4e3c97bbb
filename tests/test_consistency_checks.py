import logging

import numpy as np
import pytest

from geodesics import SPHERE, Geodesic
from validation import ConsistencyError, GeodesicConsistencyChecker

from conftest import ANTARCTICA, JFK, SIN


@pytest.fixture
def checker(geod):
    return GeodesicConsistencyChecker(geod)


def test_round_trip_passes(checker):
    result = checker.check_round_trip(*JFK, *SIN)
    assert result.passed
    assert result.test_name == "round_trip"
    assert result.details['miss_m'] < 1e-6


def test_nearly_antipodal_round_trip_passes(checker):
    assert checker.check_round_trip(0.0, 0.0, 0.5, 179.7).passed


def test_symmetry_passes(checker):
    assert checker.check_symmetry(*JFK, *SIN).passed
    # Coincident points skip the azimuth comparison
    assert checker.check_symmetry(*JFK, *JFK).passed


def test_line_consistency_passes(checker):
    result = checker.check_line_consistency(*JFK, 45.0, np.linspace(0, 2e7, 9))
    assert result.passed
    assert result.details['max_error_m'] < 1e-6


def test_polygon_orientation_passes(checker):
    lats, lons = zip(*ANTARCTICA)
    result = checker.check_polygon_orientation(lats, lons)
    assert result.passed
    assert result.details['area_forward_m2'] > 0


def test_check_all(checker):
    lats = [0.0, 10.0, 10.0, 0.0]
    lons = [0.0, 0.0, 10.0, 10.0]
    results = checker.check_all(lats, lons)
    # Two checks per leg, one line check, one orientation check
    assert len(results) == 2 * 3 + 2
    assert all(r.passed for r in results)


def test_check_all_rejects_mismatched_shapes(checker):
    with pytest.raises(ValueError):
        checker.check_all([0.0, 1.0], [0.0])


def test_failure_is_logged(geod, caplog):
    # A negative tolerance can never be met
    checker = GeodesicConsistencyChecker(geod, distance_tolerance=-1.0)
    with caplog.at_level(logging.WARNING, logger="validation.consistency_checks"):
        result = checker.check_round_trip(*JFK, *SIN)
    assert not result.passed
    assert any("round_trip failed" in r.message for r in caplog.records)


def test_strict_mode_raises(geod):
    checker = GeodesicConsistencyChecker(geod, strict_mode=True,
                                         distance_tolerance=-1.0)
    with pytest.raises(ConsistencyError):
        checker.check_symmetry(*JFK, *SIN)


def test_default_solver_is_wgs84():
    checker = GeodesicConsistencyChecker()
    assert checker.geodesic.flattening == pytest.approx(1 / 298.257223563)


def test_sphere_solver_checks(sphere_geod):
    checker = GeodesicConsistencyChecker(sphere_geod)
    assert checker.check_round_trip(-60.0, 30.0, 45.0, -120.0).passed
    assert sphere_geod.flattening == SPHERE.flattening
    assert isinstance(checker.geodesic, Geodesic)
