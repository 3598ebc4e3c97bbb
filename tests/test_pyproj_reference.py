"""Cross-checks against PROJ's geodesic routines through pyproj."""

import numpy as np
import pytest

from geodesics.geomath import ang_diff

from conftest import ANTARCTICA

pyproj = pytest.importorskip("pyproj")


@pytest.fixture(scope="module")
def proj_geod():
    return pyproj.Geod(ellps="WGS84")


@pytest.fixture(scope="module")
def random_pairs():
    rng = np.random.default_rng(20131219)
    n = 200
    lat1 = np.degrees(np.arcsin(rng.uniform(-1, 1, n)))
    lat2 = np.degrees(np.arcsin(rng.uniform(-1, 1, n)))
    lon1 = rng.uniform(-180, 180, n)
    lon2 = rng.uniform(-180, 180, n)
    return lat1, lon1, lat2, lon2


def test_inverse_matches_pyproj(geod, proj_geod, random_pairs):
    lat1, lon1, lat2, lon2 = random_pairs
    az12, az21, dist = proj_geod.inv(lon1, lat1, lon2, lat2)
    for i in range(lat1.size):
        result = geod.inverse(lat1[i], lon1[i], lat2[i], lon2[i])
        assert result.distance == pytest.approx(dist[i], abs=1e-6)
        if dist[i] > 1.0:
            assert abs(ang_diff(az12[i], result.start_azimuth)[0]) < 1e-7
            # pyproj reports the back azimuth at the second point
            assert abs(ang_diff(az21[i] + 180.0, result.end_azimuth)[0]) < 1e-7


def test_direct_matches_pyproj(geod, proj_geod):
    rng = np.random.default_rng(7)
    lat1 = rng.uniform(-89, 89, 50)
    lon1 = rng.uniform(-180, 180, 50)
    azi1 = rng.uniform(-180, 180, 50)
    s12 = rng.uniform(0, 2e7, 50)
    lon2, lat2, back = proj_geod.fwd(lon1, lat1, azi1, s12)
    for i in range(lat1.size):
        result = geod.direct(lat1[i], lon1[i], azi1[i], s12[i])
        assert result.latitude == pytest.approx(lat2[i], abs=1e-9)
        assert abs(ang_diff(lon2[i], result.longitude)[0]) < 1e-9
        assert abs(ang_diff(back[i] + 180.0, result.azimuth)[0]) < 1e-9


def test_polygon_matches_pyproj(geod, proj_geod):
    lats, lons = zip(*ANTARCTICA)
    proj_area, proj_perimeter = proj_geod.polygon_area_perimeter(lons, lats)
    area, perimeter = geod.polygon_area(lats, lons)
    assert area == pytest.approx(proj_area, rel=1e-10)
    assert perimeter == pytest.approx(proj_perimeter, rel=1e-10)
