import pytest

from geodesics import SPHERE, WGS84, Geodesic


# JFK airport and Singapore Changi
JFK = (40.64, -73.78)
SIN = (1.36, 103.99)

# Antarctica outline, ordered so that the enclosed area is positive
ANTARCTICA = [
    (-72.9, -74.0), (-71.9, -102.0), (-74.9, -102.0), (-74.3, -131.0),
    (-77.5, -163.0), (-77.4, 163.0), (-71.7, 172.0), (-65.9, 140.0),
    (-65.7, 113.0), (-66.6, 88.0), (-66.9, 59.0), (-69.8, 25.0),
    (-70.0, -4.0), (-71.0, -14.0), (-77.3, -33.0), (-77.9, -46.0),
    (-74.7, -61.0),
]
ANTARCTICA_AREA = 13376856682207.4
ANTARCTICA_PERIMETER = 14710425.406974


@pytest.fixture(scope="session")
def geod():
    return Geodesic(WGS84)


@pytest.fixture(scope="session")
def sphere_geod():
    return Geodesic(SPHERE)


@pytest.fixture
def antarctica():
    return list(ANTARCTICA)
