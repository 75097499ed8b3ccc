"""Tests for the parameter extractor."""

import dataclasses
import math

import pytest

from keeper.config import DEFAULTS
from keeper.errors import InvalidDigestError
from keeper.hashing import digest
from keeper.parameters import (
    AUDIO_OFFSETS,
    LISSAJOUS_RATIOS,
    PRIMARY_SYMMETRIES,
    SECONDARY_SYMMETRIES,
    VISUAL_OFFSETS,
    EngineOptions,
    extract_params,
)
from tests.conftest import FULL_DIGEST, PEACE_TEXT, ZERO_DIGEST


def test_round_trip_scenario_point_count():
    value = digest(PEACE_TEXT)
    params = extract_params(value)
    assert params.point_count == 8 + value[0] % 8 == 13
    assert extract_params(digest(PEACE_TEXT)).point_count == 13


def test_known_bundle_for_peace():
    params = extract_params(digest(PEACE_TEXT))
    assert params.ring_count == 7
    assert params.primary_symmetry == 8
    assert params.complexity == 2
    assert params.base_hue == pytest.approx(0xF6 * 360 / 256)


def test_all_zero_digest_hits_lower_bounds():
    params = extract_params(ZERO_DIGEST)
    assert params.point_count == 8
    assert params.ring_count == 3
    assert params.primary_symmetry == 6
    assert params.secondary_symmetry == 3
    assert params.base_hue == 0.0
    assert params.complexity == 1
    assert params.connection_skip == 1
    assert params.projection_type == 0
    assert params.pulse_amplitude == pytest.approx(0.05)
    assert params.pulse_speed == pytest.approx(0.015)
    assert params.w_scale == pytest.approx(0.3)
    assert (params.lissajous_a, params.lissajous_b) == LISSAJOUS_RATIOS[0]


def test_all_ff_digest_stays_inside_open_bounds():
    params = extract_params(FULL_DIGEST)
    assert params.point_count == 15
    assert params.ring_count == 3
    assert params.primary_symmetry == 16
    assert params.secondary_symmetry == 9
    assert params.connection_skip == 4
    assert params.base_hue < 360.0
    assert params.pulse_amplitude < 0.20
    assert params.pulse_speed < 0.045
    assert params.w_scale < 0.8
    assert max(params.fold_speed_xw, params.fold_speed_yw, params.fold_speed_zw) < 0.003


def test_range_invariants_hold_for_many_digests(sample_digests):
    for value in sample_digests:
        p = extract_params(value)
        assert 8 <= p.point_count <= 15
        assert 3 <= p.ring_count <= 7
        assert p.primary_symmetry in PRIMARY_SYMMETRIES
        assert p.secondary_symmetry in SECONDARY_SYMMETRIES
        assert 0.0 <= p.base_hue < 360.0
        assert 1 <= p.complexity <= 3
        assert 1 <= p.connection_skip <= 7
        assert p.projection_type in (0, 1, 2)
        assert 0.05 <= p.pulse_amplitude < 0.20
        assert 0.015 <= p.pulse_speed < 0.045
        assert 0.3 <= p.w_scale < 0.8
        assert 0.0 <= p.lissajous_delta < math.pi
        assert p.tilt_amplitude_x < math.pi / 2
        assert p.tilt_amplitude_y < math.pi / 2
        assert 0.0 < p.rotation_speed


def test_offsets_are_fixed_and_in_bounds():
    visual = list(VISUAL_OFFSETS.values())
    assert len(visual) == len(set(visual))
    assert all(0 <= offset < 32 for offset in visual + list(AUDIO_OFFSETS.values()))


def test_audio_bytes_are_disjoint_from_visual_bytes():
    assert set(AUDIO_OFFSETS.values()).isdisjoint(VISUAL_OFFSETS.values())


def test_changing_an_audio_byte_leaves_visuals_untouched():
    base = bytearray(digest(PEACE_TEXT))
    altered = bytearray(base)
    for offset in AUDIO_OFFSETS.values():
        altered[offset] ^= 0xFF
    assert extract_params(bytes(base)) == extract_params(bytes(altered))


def test_avalanche_changes_most_of_the_bundle():
    a = dataclasses.asdict(extract_params(digest(PEACE_TEXT)))
    b = dataclasses.asdict(extract_params(digest(PEACE_TEXT + " ")))
    changed = [key for key in a if a[key] != b[key]]
    assert len(changed) >= 15


def test_bundle_is_frozen():
    params = extract_params(ZERO_DIGEST)
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.point_count = 3  # type: ignore[misc]


def test_rejects_malformed_digest():
    with pytest.raises(InvalidDigestError):
        extract_params(bytes(16))


def test_fold_speed_cap():
    params = extract_params(FULL_DIGEST)
    assert all(speed <= 0.001 for speed in params.fold_speeds(0.001))
    assert params.fold_speeds(1.0) == (params.fold_speed_xw, params.fold_speed_yw, params.fold_speed_zw)


def test_engine_options_from_config():
    options = EngineOptions.from_config(DEFAULTS)
    assert options.parallax is True
    assert options.tilt_3d is True
    assert options.fold_4d is False
    assert options.style == "fixed"
    assert options.fold_speed_cap == pytest.approx(0.003)


def test_engine_options_ignore_unknown_style():
    options = EngineOptions.from_config({"animation": {"style": "cosmic"}, "features": {"fold4d": True}})
    assert options.style == "fixed"
    assert options.fold_4d is True
    assert EngineOptions.from_config({"animation": {"style": "Evolving"}}).evolving
