import dataclasses
import math

import pytest

from keeper.animation import RenderState
from keeper.hashing import digest
from keeper.parameters import SECONDARY_SYMMETRIES, EngineOptions, extract_params
from keeper.point_field import Point, build_points
from keeper.projection import (
    INNER_DEPTH,
    OUTER_DEPTH,
    active_symmetries,
    depth_factor,
    evolving_connection_skip,
    evolving_secondary_symmetry,
    lissajous_points,
    perspective,
    project,
    project_sphere,
    ring_angle,
    rotate_3d,
    rotate_4d,
    rotate_about,
    tilt_angles,
)
from tests.conftest import PEACE_TEXT, ZERO_DIGEST


def _norm(*values):
    return math.sqrt(sum(v * v for v in values))


def test_depth_factor_runs_from_inner_to_outer():
    assert depth_factor(0, 5) == pytest.approx(INNER_DEPTH)
    assert depth_factor(4, 5) == pytest.approx(OUTER_DEPTH)
    ratio = depth_factor(0, 7) / depth_factor(6, 7)
    assert 5.0 <= ratio <= 7.0
    values = [depth_factor(ring, 7) for ring in range(7)]
    assert values == sorted(values, reverse=True)


def test_single_ring_has_neutral_depth():
    assert depth_factor(0, 1) == 1.0


def test_ring_angle_without_parallax_is_uniform():
    assert ring_angle(0.5, 0, 5, parallax=False) == ring_angle(0.5, 4, 5, parallax=False) == 0.5
    assert ring_angle(0.5, 0, 5) > ring_angle(0.5, 4, 5)


def test_rotations_about_centre_compose_by_adding_angles():
    once = rotate_about(*rotate_about(130.0, 40.0, 100.0, 100.0, 0.3), 100.0, 100.0, 0.4)
    combined = rotate_about(130.0, 40.0, 100.0, 100.0, 0.7)
    assert once == pytest.approx(combined)
    assert rotate_about(130.0, 40.0, 100.0, 100.0, 2 * math.pi) == pytest.approx((130.0, 40.0))


def test_rotate_3d_axis_order():
    assert rotate_3d(0.0, 1.0, 0.0, math.pi / 2, math.pi / 2, 0.0) == pytest.approx((1.0, 0.0, 0.0), abs=1e-9)
    x, y, z = rotate_3d(0.3, -0.2, 0.9, 0.4, -1.1, 2.5)
    assert _norm(x, y, z) == pytest.approx(_norm(0.3, -0.2, 0.9))


def test_perspective_divides_by_depth():
    assert perspective(1.0, 3.0) == pytest.approx(0.75)
    assert perspective(0.0, 3.0) == pytest.approx(1.0)
    assert math.isfinite(perspective(-3.0, 3.0))


def test_rotate_4d_preserves_length():
    start = (0.4, -0.7, 0.2, 0.5)
    rotated = rotate_4d(*start, 0.7, -1.2, 2.4)
    assert _norm(*rotated) == pytest.approx(_norm(*start))
    assert rotate_4d(*start, 0.0, 0.0, 0.0) == pytest.approx(start)


@pytest.mark.parametrize("projection_type", [0, 1, 2])
def test_projections_stay_finite_at_the_poles(projection_type):
    for latitude in (-90.0, -89.999, 0.0, 89.999, 90.0):
        x, y = project_sphere(45.0, latitude, 1.0, projection_type)
        assert math.isfinite(x) and math.isfinite(y)


def test_orthographic_equator_lands_on_radius():
    x, y = project_sphere(30.0, 0.0, 0.8, 0)
    assert _norm(x, y) == pytest.approx(0.8)


def test_tilt_stays_within_amplitude(sample_digests):
    state = RenderState(tilt_clock=12.3, spin=4.0)
    for value in sample_digests[:40]:
        params = extract_params(value)
        ax, ay, az = tilt_angles(params, state)
        assert abs(ax) <= params.tilt_amplitude_x + 1e-12
        assert abs(ay) <= params.tilt_amplitude_y + 1e-12
        assert az == 4.0


def test_evolving_values_stay_in_range_and_move():
    params = extract_params(digest(PEACE_TEXT))
    skips = {evolving_connection_skip(params, t * 7.0) for t in range(400)}
    orders = {evolving_secondary_symmetry(params, t * 7.0) for t in range(400)}
    assert skips <= set(range(1, 8))
    assert orders <= set(SECONDARY_SYMMETRIES)
    assert len(skips) > 1
    assert len(orders) > 1


def test_fixed_style_uses_the_digest_symmetries():
    params = extract_params(ZERO_DIGEST)
    assert active_symmetries(params, RenderState()) == [6]
    assert len(active_symmetries(params, RenderState(style="evolving"))) == 2


def test_lissajous_curve_is_closed_and_bounded():
    params = extract_params(digest(PEACE_TEXT))
    curve = lissajous_points(params, 0.0, samples=120)
    assert len(curve) == 121
    assert curve[0] == pytest.approx(curve[-1])
    assert all(abs(x) <= 1.0 and abs(y) <= 1.0 for x, y in curve)


def test_project_is_pure_and_finite_with_every_feature():
    value = digest(PEACE_TEXT)
    params = extract_params(value)
    options = EngineOptions(fold_4d=True, style="evolving")
    state = RenderState(time=3.0, rotation=1.2, spin=0.4, tilt_clock=2.0,
                        fold_xw=0.5, fold_yw=0.2, fold_zw=0.1, style="evolving")
    for point in build_points(value, params.point_count):
        for ring in range(params.ring_count):
            first = project(point, ring, params.ring_count, params, state, options,
                            scale=200.0, center=(300.0, 300.0))
            again = project(point, ring, params.ring_count, params, state, options,
                            scale=200.0, center=(300.0, 300.0))
            assert first == again
            assert math.isfinite(first.x) and math.isfinite(first.y)
            assert first.depth_scale > 0.0


def test_project_without_features_is_flat():
    params = extract_params(ZERO_DIGEST)
    options = EngineOptions(parallax=False, tilt_3d=False, fold_4d=False)
    point = Point(longitude=0.0, latitude=0.0, radius=1.0)
    placed = project(point, 0, 1, params, RenderState(), options, scale=100.0, center=(0.0, 0.0))
    assert placed.depth_scale == 1.0
    assert _norm(placed.x, placed.y) == pytest.approx(100.0)


def test_stereographic_uses_the_full_conformal_factor():
    x, y = project_sphere(0.0, 0.0, 1.0, 1)
    assert _norm(x, y) == pytest.approx(2.0)
    x, y = project_sphere(0.0, 90.0, 1.0, 1)
    assert _norm(x, y) == pytest.approx(0.0)


def test_stereographic_equator_matches_orthographic_on_canvas():
    ortho = extract_params(ZERO_DIGEST)
    stereo = dataclasses.replace(ortho, projection_type=1)
    options = EngineOptions(parallax=False, tilt_3d=False, fold_4d=False)
    point = Point(longitude=40.0, latitude=0.0, radius=1.0)
    flat = project(point, 0, 1, ortho, RenderState(), options, scale=100.0)
    conformal = project(point, 0, 1, stereo, RenderState(), options, scale=100.0)
    assert _norm(conformal.x, conformal.y) == pytest.approx(_norm(flat.x, flat.y))


def test_fold_without_tilt_still_applies_perspective():
    params = extract_params(ZERO_DIGEST)
    options = EngineOptions(parallax=False, tilt_3d=False, fold_4d=True)
    point = Point(longitude=10.0, latitude=60.0, radius=1.0)
    placed = project(point, 0, 1, params, RenderState(), options, scale=100.0)
    assert placed.depth_scale != pytest.approx(1.0)
    assert placed.depth_scale > 0.0
