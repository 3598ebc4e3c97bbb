"""
Vectorised Geodesic Helpers.

Array front-ends to the scalar solver for processing many point pairs at
once. Inputs follow numpy broadcasting rules, so one point can be paired
with many. The geodesic computations themselves are scalar; these helpers
handle shapes and dtypes so callers can work with arrays throughout.

All angles are in degrees and all lengths in meters.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from geodesics.capabilities import Capability
from geodesics.geomath import ang_diff
from geodesics.solver import Geodesic


# Shared solver for WGS84
_wgs84_geod = Geodesic()


def geodesic_inverse_batch(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
    geodesic: Optional[Geodesic] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Solve the inverse problem for arrays of point pairs.

    Parameters
    ----------
    lat1, lon1 : array_like
        First points in degrees.
    lat2, lon2 : array_like
        Second points in degrees.
    geodesic : Geodesic, optional
        Solver to use (default: WGS84).

    Returns
    -------
    Tuple[ndarray, ndarray, ndarray]
        (distance, start_azimuth, end_azimuth), each with the broadcast
        shape of the inputs.
    """
    geod = geodesic or _wgs84_geod
    arrays = np.broadcast_arrays(
        *(np.asarray(x, dtype=np.float64) for x in (lat1, lon1, lat2, lon2))
    )
    shape = arrays[0].shape
    distance = np.empty(shape, dtype=np.float64)
    azi1 = np.empty(shape, dtype=np.float64)
    azi2 = np.empty(shape, dtype=np.float64)

    for idx in np.ndindex(shape):
        result = geod.inverse(*(float(a[idx]) for a in arrays))
        distance[idx] = result.distance
        azi1[idx] = result.start_azimuth
        azi2[idx] = result.end_azimuth

    return distance, azi1, azi2


def geodesic_distance_batch(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
    geodesic: Optional[Geodesic] = None
) -> NDArray[np.float64]:
    """Compute geodesic distances for arrays of point pairs.

    Parameters
    ----------
    lat1, lon1 : array_like
        First points in degrees.
    lat2, lon2 : array_like
        Second points in degrees.
    geodesic : Geodesic, optional
        Solver to use (default: WGS84).

    Returns
    -------
    ndarray
        Geodesic distances in meters.

    Notes
    -----
    Inputs broadcast, so they can be:
    - Same shape: pairwise distances
    - Broadcastable shapes: distance from one point to many, etc.
    """
    geod = geodesic or _wgs84_geod
    arrays = np.broadcast_arrays(
        *(np.asarray(x, dtype=np.float64) for x in (lat1, lon1, lat2, lon2))
    )
    distances = np.empty(arrays[0].shape, dtype=np.float64)
    for idx in np.ndindex(distances.shape):
        distances[idx] = geod.general_inverse(
            *(float(a[idx]) for a in arrays), Capability.DISTANCE
        ).distance
    return distances


def geodesic_direct_batch(
    lat1: ArrayLike,
    lon1: ArrayLike,
    azimuth: ArrayLike,
    distance: ArrayLike,
    geodesic: Optional[Geodesic] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Solve the direct problem for arrays of starts, azimuths and distances.

    Returns
    -------
    Tuple[ndarray, ndarray, ndarray]
        (latitude, longitude, azimuth) of the destinations.
    """
    geod = geodesic or _wgs84_geod
    arrays = np.broadcast_arrays(
        *(np.asarray(x, dtype=np.float64) for x in (lat1, lon1, azimuth, distance))
    )
    shape = arrays[0].shape
    lat2 = np.empty(shape, dtype=np.float64)
    lon2 = np.empty(shape, dtype=np.float64)
    azi2 = np.empty(shape, dtype=np.float64)

    for idx in np.ndindex(shape):
        result = geod.direct(*(float(a[idx]) for a in arrays))
        lat2[idx] = result.latitude
        lon2[idx] = result.longitude
        azi2[idx] = result.azimuth

    return lat2, lon2, azi2


def geodesic_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """Geodesic distance between two points on WGS84 in meters."""
    return _wgs84_geod.distance(lat1, lon1, lat2, lon2)


def compute_azimuth(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """Compute the forward azimuth from point 1 to point 2.

    Returns
    -------
    float
        Forward azimuth in degrees clockwise from north, [-180, 180].
    """
    return _wgs84_geod.inverse(lat1, lon1, lat2, lon2).start_azimuth


def interpolate_geodesic(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    num_points: int,
    geodesic: Optional[Geodesic] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Interpolate points along the geodesic between two endpoints.

    Parameters
    ----------
    lat1, lon1 : float
        First point in degrees.
    lat2, lon2 : float
        Second point in degrees.
    num_points : int
        Number of points including endpoints (>= 2).
    geodesic : Geodesic, optional
        Solver to use (default: WGS84).

    Returns
    -------
    Tuple[ndarray, ndarray]
        (latitudes, longitudes) of the interpolated points.

    Notes
    -----
    Points are equally spaced in distance along the geodesic. The line
    is set up once, so each point costs a single series evaluation.
    """
    if num_points < 2:
        raise ValueError(f"num_points must be at least 2, got {num_points}")
    geod = geodesic or _wgs84_geod
    line = geod.inverse_line(
        lat1, lon1, lat2, lon2,
        Capability.LATITUDE | Capability.LONGITUDE | Capability.DISTANCE_IN
    )
    distances = np.linspace(0.0, line.distance, num_points)

    lats = np.zeros(num_points)
    lons = np.zeros(num_points)
    for i, s in enumerate(distances):
        pos = line.position(float(s))
        lats[i] = pos.latitude
        lons[i] = pos.longitude

    return lats, lons


def track_segments(
    latitudes: ArrayLike,
    longitudes: ArrayLike,
    geodesic: Optional[Geodesic] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Length and initial azimuth of each leg of a track.

    Parameters
    ----------
    latitudes, longitudes : array_like
        Track vertices in degrees, in order.
    geodesic : Geodesic, optional
        Solver to use (default: WGS84).

    Returns
    -------
    Tuple[ndarray, ndarray]
        (distances, azimuths) with one entry per consecutive pair; empty
        when fewer than two vertices are given.

    Raises
    ------
    ValueError
        If the coordinate arrays differ in shape.
    """
    lats = np.asarray(latitudes, dtype=np.float64).ravel()
    lons = np.asarray(longitudes, dtype=np.float64).ravel()
    if lats.shape != lons.shape:
        raise ValueError(
            f"Latitude and longitude arrays must have the same length, "
            f"got {lats.size} and {lons.size}"
        )
    if lats.size < 2:
        return np.empty(0), np.empty(0)
    distances, azimuths, _ = geodesic_inverse_batch(
        lats[:-1], lons[:-1], lats[1:], lons[1:], geodesic
    )
    return distances, azimuths


def compute_heading_change(
    heading1: float,
    heading2: float
) -> float:
    """Compute the signed change in heading (turn angle).

    Parameters
    ----------
    heading1 : float
        Initial heading in degrees.
    heading2 : float
        Final heading in degrees.

    Returns
    -------
    float
        Signed heading change in degrees, [-180, 180].
        Positive = clockwise (rightward) turn.
        Negative = counterclockwise (leftward) turn.
    """
    delta, err = ang_diff(heading1, heading2)
    return delta + err
