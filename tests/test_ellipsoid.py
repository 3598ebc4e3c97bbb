import math

import pytest

from geodesics import (
    GRS80,
    SPHERE,
    WGS84,
    EllipsoidModel,
    Geodesic,
    InvalidEllipsoidError,
)


def test_wgs84_derived_parameters():
    assert WGS84.polar_radius == pytest.approx(6356752.314245, abs=1e-6)
    assert WGS84.e2 == pytest.approx(0.00669437999014, rel=1e-12)
    assert WGS84.third_flattening == pytest.approx(
        WGS84.f / (2 - WGS84.f), rel=1e-15
    )


def test_wgs84_total_area():
    # Surface area of the WGS84 ellipsoid
    assert WGS84.total_area == pytest.approx(5.10066e14, rel=1e-5)


def test_sphere_area():
    assert SPHERE.authalic_radius_squared == pytest.approx(6371000.0 ** 2)
    assert SPHERE.total_area == pytest.approx(4 * math.pi * 6371000.0 ** 2)


def test_prolate_authalic_radius_between_axes():
    prolate = EllipsoidModel(6378137.0, -1 / 150)
    c = math.sqrt(prolate.authalic_radius_squared)
    assert prolate.a < c < prolate.b


def test_grs80_differs_from_wgs84_only_in_flattening():
    assert GRS80.a == WGS84.a
    assert GRS80.f != WGS84.f
    assert abs(GRS80.b - WGS84.b) < 1e-3


def test_validate_accepts_catalogue():
    for ellipsoid in (WGS84, GRS80, SPHERE):
        assert ellipsoid.validate() is ellipsoid


@pytest.mark.parametrize("a, f", [
    (0.0, 0.0),
    (-1.0, 0.0),
    (math.inf, 0.0),
    (6378137.0, 1.0),
    (6378137.0, 1.5),
    (math.nan, 0.0),
])
def test_validate_rejects_degenerate(a, f):
    with pytest.raises(InvalidEllipsoidError):
        EllipsoidModel(a, f).validate()


def test_strict_solver_rejects_degenerate():
    with pytest.raises(InvalidEllipsoidError):
        Geodesic(EllipsoidModel(6378137.0, 1.0), strict=True)


def test_lenient_solver_accepts_any_parameters():
    geod = Geodesic(EllipsoidModel(-1.0, 0.0))
    assert geod.equatorial_radius == -1.0


def test_invalid_ellipsoid_is_value_error():
    assert issubclass(InvalidEllipsoidError, ValueError)


def test_from_parameters():
    geod = Geodesic.from_parameters(6378000.0, 1 / 300)
    assert geod.equatorial_radius == 6378000.0
    assert geod.flattening == 1 / 300
