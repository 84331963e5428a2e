"""Coordinate conversion between GCJ-02 and WGS-84."""

import math

# Krasovsky 1940 ellipsoid used by the GCJ-02 offset
A = 6378245.0
EE = 0.00669342162296594323


def out_of_china(lat: float, lng: float) -> bool:
    """
    Check whether a point lies outside the mainland China bounding box.

    GCJ-02 is only offset inside this box; elsewhere it equals WGS-84.
    """
    return not (72.004 <= lng <= 137.8347 and 0.8293 <= lat <= 55.8271)


def _transform_lat(x: float, y: float) -> float:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(y * math.pi) + 40.0 * math.sin(y / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (160.0 * math.sin(y / 12.0 * math.pi) + 320.0 * math.sin(y * math.pi / 30.0)) * 2.0 / 3.0
    return ret


def _transform_lng(x: float, y: float) -> float:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * math.sqrt(abs(x))
    ret += (20.0 * math.sin(6.0 * x * math.pi) + 20.0 * math.sin(2.0 * x * math.pi)) * 2.0 / 3.0
    ret += (20.0 * math.sin(x * math.pi) + 40.0 * math.sin(x / 3.0 * math.pi)) * 2.0 / 3.0
    ret += (150.0 * math.sin(x / 12.0 * math.pi) + 300.0 * math.sin(x / 30.0 * math.pi)) * 2.0 / 3.0
    return ret


def _delta(lat: float, lng: float) -> tuple[float, float]:
    """Return the (lat, lng) offset GCJ-02 adds to a WGS-84 point."""
    d_lat = _transform_lat(lng - 105.0, lat - 35.0)
    d_lng = _transform_lng(lng - 105.0, lat - 35.0)

    rad_lat = lat / 180.0 * math.pi
    magic = math.sin(rad_lat)
    magic = 1 - EE * magic * magic
    sqrt_magic = math.sqrt(magic)

    d_lat = (d_lat * 180.0) / ((A * (1 - EE)) / (magic * sqrt_magic) * math.pi)
    d_lng = (d_lng * 180.0) / (A / sqrt_magic * math.cos(rad_lat) * math.pi)
    return d_lat, d_lng


def wgs_to_gcj(lat: float, lng: float) -> tuple[float, float]:
    """
    Convert a WGS-84 point to GCJ-02.

    Args:
        lat: WGS-84 latitude in decimal degrees
        lng: WGS-84 longitude in decimal degrees

    Returns:
        (lat, lng) in GCJ-02
    """
    if out_of_china(lat, lng):
        return lat, lng
    d_lat, d_lng = _delta(lat, lng)
    return lat + d_lat, lng + d_lng


def gcj_to_wgs(lat: float, lng: float) -> tuple[float, float]:
    """
    Convert a GCJ-02 point to WGS-84 with a single inverse step.

    Accurate to roughly 1-2 metres, which is plenty for pointing a map at
    a cinema.

    Args:
        lat: GCJ-02 latitude in decimal degrees
        lng: GCJ-02 longitude in decimal degrees

    Returns:
        (lat, lng) in WGS-84

    Example:
        >>> lat, lng = gcj_to_wgs(31.2, 121.5)
        >>> 31.2015 < lat < 31.2025 and 121.495 < lng < 121.496
        True
    """
    if out_of_china(lat, lng):
        return lat, lng
    d_lat, d_lng = _delta(lat, lng)
    return lat - d_lat, lng - d_lng


def gcj_to_wgs_exact(
    lat: float,
    lng: float,
    threshold: float = 1e-9,
    max_iterations: int = 30,
) -> tuple[float, float]:
    """
    Convert a GCJ-02 point to WGS-84 by bisecting on the forward transform.

    Args:
        lat: GCJ-02 latitude in decimal degrees
        lng: GCJ-02 longitude in decimal degrees
        threshold: Stop once the forward error is below this many degrees
        max_iterations: Upper bound on refinement steps

    Returns:
        (lat, lng) in WGS-84
    """
    if out_of_china(lat, lng):
        return lat, lng

    init_delta = 0.01
    min_lat, min_lng = lat - init_delta, lng - init_delta
    max_lat, max_lng = lat + init_delta, lng + init_delta
    wgs_lat, wgs_lng = lat, lng

    for _ in range(max_iterations):
        wgs_lat = (min_lat + max_lat) / 2
        wgs_lng = (min_lng + max_lng) / 2
        gcj_lat, gcj_lng = wgs_to_gcj(wgs_lat, wgs_lng)
        d_lat = gcj_lat - lat
        d_lng = gcj_lng - lng

        if abs(d_lat) < threshold and abs(d_lng) < threshold:
            break

        if d_lat > 0:
            max_lat = wgs_lat
        else:
            min_lat = wgs_lat
        if d_lng > 0:
            max_lng = wgs_lng
        else:
            min_lng = wgs_lng

    return wgs_lat, wgs_lng
