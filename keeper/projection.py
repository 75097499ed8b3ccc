"""Projection and rotation of the point field.

All rotations are applied to coordinates directly and composed by adding
angles. Nothing here keeps state: the caller passes the render state and the
feature switches on every call.

Pipeline for one point of one ring::

    sphere -> planar projection -> (4D fold) -> (3D tilt + perspective)
           -> canvas scale -> rotation about the centre (symmetry + parallax)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

from .parameters import (
    PROJECTION_CYLINDRICAL,
    PROJECTION_STEREOGRAPHIC,
    SECONDARY_SYMMETRIES,
    EngineOptions,
    ParameterBundle,
)

if TYPE_CHECKING:  # pragma: no cover
    from .animation import RenderState
    from .point_field import Point

INNER_DEPTH = 1.8
OUTER_DEPTH = 0.3
STEREO_MAX_K = 4.0
# stereographic coordinates are scaled by this so its equator matches the orthographic one
STEREO_SCALE = 0.5
CYLINDRICAL_EPS = 1e-2
# smallest denominator accepted by the perspective divisions
MIN_PERSPECTIVE = 0.2


@dataclass
class Projected:
    """A point placed on the canvas, in pixels."""

    x: float
    y: float
    depth_scale: float = 1.0


def to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def spherical_angles(longitude: float, latitude: float) -> Tuple[float, float]:
    """Polar angle from the north pole and azimuth, in radians."""

    phi = to_rad(90.0 - latitude)
    theta = to_rad(longitude + 180.0)
    return phi, theta


def spherical_to_cartesian(longitude: float, latitude: float, radius: float) -> Tuple[float, float, float]:
    phi, theta = spherical_angles(longitude, latitude)
    sin_phi = math.sin(phi)
    return (
        radius * sin_phi * math.cos(theta),
        radius * sin_phi * math.sin(theta),
        radius * math.cos(phi),
    )


def _wrap_pi(angle: float) -> float:
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def project_sphere(longitude: float, latitude: float, radius: float, projection_type: int = 0) -> Tuple[float, float]:
    """Map a spherical coordinate to the drawing plane (unit scale).

    ``0`` orthographic, ``1`` stereographic, ``2`` cylindrical. The
    stereographic factor ``k = 2 / (1 + cos phi)`` is capped near the south
    pole; it puts the equator at twice the orthographic radius, which
    :func:`project` compensates with :data:`STEREO_SCALE`.
    """

    phi, theta = spherical_angles(longitude, latitude)
    if projection_type == PROJECTION_STEREOGRAPHIC:
        k = min(2.0 / max(1.0 + math.cos(phi), 1e-9), STEREO_MAX_K)
        planar = radius * k * math.sin(phi)
        return planar * math.cos(theta), planar * math.sin(theta)
    if projection_type == PROJECTION_CYLINDRICAL:
        half = clamp(phi / 2.0, CYLINDRICAL_EPS, math.pi / 2.0 - CYLINDRICAL_EPS)
        x = _wrap_pi(theta) / math.pi
        y = math.log(math.tan(half)) * 0.3
        return radius * x, radius * y
    planar = radius * math.sin(phi)
    return planar * math.cos(theta), planar * math.sin(theta)


# ---------------------------------------------------------------------------
# Rotations


def rotate_about(x: float, y: float, cx: float, cy: float, angle: float) -> Tuple[float, float]:
    """Rotate ``(x, y)`` around ``(cx, cy)``; positive angles turn clockwise on screen."""

    dx = x - cx
    dy = y - cy
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return cx + dx * cos_a - dy * sin_a, cy + dx * sin_a + dy * cos_a


def depth_factor(ring: int, ring_count: int) -> float:
    """Parallax multiplier for ``ring`` (0 is the innermost ring)."""

    if ring_count < 2:
        return 1.0
    ring = int(clamp(ring, 0, ring_count - 1))
    t = (ring_count - 1 - ring) / (ring_count - 1)
    return OUTER_DEPTH + (INNER_DEPTH - OUTER_DEPTH) * t


def ring_angle(base_rotation: float, ring: int, ring_count: int, parallax: bool = True) -> float:
    if not parallax:
        return base_rotation
    return base_rotation * depth_factor(ring, ring_count)


def rotate_3d(x: float, y: float, z: float, ax: float, ay: float, az: float) -> Tuple[float, float, float]:
    """Rotate about X, then Y, then Z."""

    cos_x, sin_x = math.cos(ax), math.sin(ax)
    y, z = y * cos_x - z * sin_x, y * sin_x + z * cos_x

    cos_y, sin_y = math.cos(ay), math.sin(ay)
    x, z = x * cos_y + z * sin_y, -x * sin_y + z * cos_y

    cos_z, sin_z = math.cos(az), math.sin(az)
    x, y = x * cos_z - y * sin_z, x * sin_z + y * cos_z
    return x, y, z


def perspective(z: float, distance: float) -> float:
    return distance / max(distance + z, MIN_PERSPECTIVE)


def lift_to_4d(phi: float, radius: float, w_scale: float) -> float:
    return math.cos(phi) * radius * w_scale


def rotate_4d(
    x: float, y: float, z: float, w: float, xw: float, yw: float, zw: float
) -> Tuple[float, float, float, float]:
    """Apply the XW, YW and ZW plane rotations in that order."""

    cos_a, sin_a = math.cos(xw), math.sin(xw)
    x, w = x * cos_a - w * sin_a, x * sin_a + w * cos_a

    cos_a, sin_a = math.cos(yw), math.sin(yw)
    y, w = y * cos_a - w * sin_a, y * sin_a + w * cos_a

    cos_a, sin_a = math.cos(zw), math.sin(zw)
    z, w = z * cos_a - w * sin_a, z * sin_a + w * cos_a
    return x, y, z, w


def collapse_4d(x: float, y: float, z: float, w: float, distance: float) -> Tuple[float, float, float]:
    factor = perspective(w, distance)
    return x * factor, y * factor, z * factor


def tilt_angles(params: ParameterBundle, state: "RenderState") -> Tuple[float, float, float]:
    """X and Y tilt stay within their amplitude; Z is the continuous spin."""

    ax = params.tilt_amplitude_x * math.sin(state.tilt_clock + params.tilt_phase_x)
    ay = params.tilt_amplitude_y * math.sin(state.tilt_clock * 1.3 + params.tilt_phase_y)
    return ax, ay, state.spin


# ---------------------------------------------------------------------------
# Evolving geometry


def evolving_connection_skip(params: ParameterBundle, time: float) -> int:
    wave = math.sin(time * params.skip_evolution_rate + params.evolution_phase)
    offset = int(round(3.0 * wave))
    return 1 + (params.connection_skip - 1 + offset) % 7


def evolving_secondary_symmetry(params: ParameterBundle, time: float) -> int:
    wave = math.sin(time * params.symmetry_evolution_rate + params.evolution_phase * 0.5)
    base = SECONDARY_SYMMETRIES.index(params.secondary_symmetry)
    step = int(round(1.5 * (wave + 1.0)))
    return SECONDARY_SYMMETRIES[(base + step) % len(SECONDARY_SYMMETRIES)]


def active_connection_skip(params: ParameterBundle, state: "RenderState") -> int:
    if state.style == "evolving":
        return evolving_connection_skip(params, state.time)
    return params.connection_skip


def active_symmetries(params: ParameterBundle, state: "RenderState") -> List[int]:
    """One or two symmetry orders to replicate the field with."""

    orders = [params.primary_symmetry]
    if state.style == "evolving":
        orders.append(evolving_secondary_symmetry(params, state.time))
    elif params.complexity > 1:
        orders.append(params.secondary_symmetry)
    return orders


def lissajous_points(
    params: ParameterBundle, time: float, evolving: bool = False, samples: int = 240
) -> List[Tuple[float, float]]:
    delta = params.lissajous_delta
    if evolving:
        delta += time * 0.05
    out: List[Tuple[float, float]] = []
    for index in range(max(2, samples) + 1):
        t = 2.0 * math.pi * index / samples
        out.append((math.sin(params.lissajous_a * t + delta), math.sin(params.lissajous_b * t)))
    return out


# ---------------------------------------------------------------------------
# Full projection


def project(
    point: "Point",
    ring: int,
    ring_count: int,
    params: ParameterBundle,
    state: "RenderState",
    options: EngineOptions,
    *,
    pulse: float = 1.0,
    scale: float = 1.0,
    center: Tuple[float, float] = (0.0, 0.0),
    symmetry_angle: float = 0.0,
    shrink: float = 1.0,
) -> Projected:
    """Canvas position and depth scale of ``point`` drawn on ``ring``."""

    ring_fraction = (ring + 1) / max(1, ring_count)
    radius = point.radius * ring_fraction * pulse * shrink
    phi, _theta = spherical_angles(point.longitude, point.latitude)
    x, y = project_sphere(point.longitude, point.latitude, radius, params.projection_type)
    if params.projection_type == PROJECTION_STEREOGRAPHIC:
        x *= STEREO_SCALE
        y *= STEREO_SCALE
    z = radius * math.cos(phi) + (point.depth_bias - 0.5) * 0.2 * radius

    depth_scale = 1.0
    if options.fold_4d:
        w = lift_to_4d(phi, radius, params.w_scale)
        x, y, z, w = rotate_4d(x, y, z, w, state.fold_xw, state.fold_yw, state.fold_zw)
        x, y, z = collapse_4d(x, y, z, w, options.fold_distance)
    if options.tilt_3d:
        ax, ay, az = tilt_angles(params, state)
        x, y, z = rotate_3d(x, y, z, ax, ay, az)
    if options.fold_4d or options.tilt_3d:
        factor = perspective(z, options.perspective_distance)
        x *= factor
        y *= factor
        depth_scale = factor

    cx, cy = center
    angle = symmetry_angle + ring_angle(state.rotation, ring, ring_count, options.parallax)
    if state.style == "evolving":
        angle += point.twist_factor * 0.1 * math.sin(state.time * 0.1)
    sx, sy = rotate_about(cx + x * scale, cy + y * scale, cx, cy, angle)
    return Projected(sx, sy, depth_scale)


__all__ = [
    "Projected",
    "active_connection_skip",
    "active_symmetries",
    "collapse_4d",
    "depth_factor",
    "evolving_connection_skip",
    "evolving_secondary_symmetry",
    "lift_to_4d",
    "lissajous_points",
    "perspective",
    "project",
    "project_sphere",
    "ring_angle",
    "rotate_3d",
    "rotate_4d",
    "rotate_about",
    "spherical_angles",
    "spherical_to_cartesian",
    "tilt_angles",
]
