import dataclasses

import pytest

from keeper.animation import DISSOLVE_STEPS, AnimationController, Phase, RenderState, breathing_pulse
from keeper.errors import RenderSurfaceError
from keeper.parameters import EngineOptions
from keeper.pattern import generate_pattern
from tests.conftest import PEACE_TEXT


@pytest.fixture
def controller(qapp, config):
    engine = AnimationController(160, 160, config=config)
    yield engine
    engine.stop()


def test_breathing_pulse_is_bounded():
    amplitude = 0.2
    for step in range(2000):
        value = breathing_pulse(step * 0.03, amplitude)
        assert 1.0 - 1.2 * amplitude - 1e-9 <= value <= 1.0 + 1.2 * amplitude + 1e-9
    assert breathing_pulse(0.0, amplitude) == 1.0


def test_render_state_advances_and_resets():
    pattern = generate_pattern(PEACE_TEXT)
    state = RenderState()
    state.advance(pattern.params, EngineOptions(fold_4d=True))
    assert state.time == pytest.approx(pattern.params.pulse_speed)
    assert state.rotation == pytest.approx(pattern.params.rotation_speed)
    assert state.fold_xw > 0.0
    state.reset()
    assert (state.time, state.rotation, state.spin, state.fold_xw) == (0.0, 0.0, 0.0, 0.0)


def test_fold_accumulators_stay_still_when_disabled():
    pattern = generate_pattern(PEACE_TEXT)
    state = RenderState()
    state.advance(pattern.params, EngineOptions(fold_4d=False, tilt_3d=False))
    assert state.fold_xw == state.fold_yw == state.fold_zw == 0.0
    assert state.spin == 0.0


def test_phases_follow_the_lifecycle(controller):
    phases = []
    controller.phaseChanged.connect(phases.append)
    assert controller.phase is Phase.IDLE
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    assert controller.phase is Phase.BREATHING
    assert not controller.surface.is_uniform_black()
    assert controller.dissolve(run_timer=False)
    controller.finish_dissolve()
    assert phases == ["breathing", "dissolving", "idle"]


def test_start_runs_the_frame_timer_and_stop_is_idempotent(controller):
    controller.start(generate_pattern(PEACE_TEXT))
    assert controller.is_running
    controller.stop()
    controller.stop()
    assert not controller.is_running
    assert controller.phase is Phase.IDLE


def test_restart_resets_the_clock(controller):
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    for _ in range(5):
        controller.tick()
    assert controller.state.time > 0.0
    controller.start(generate_pattern("a different intention"), run_timer=False)
    assert controller.state.time == 0.0
    assert controller.pattern.text == "a different intention"


def test_tick_does_nothing_while_idle(controller):
    frames = []
    controller.frameRendered.connect(lambda: frames.append(1))
    controller.tick()
    assert frames == []


def test_dissolve_reaches_black_on_the_last_step(controller):
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    done = []
    controller.dissolved.connect(lambda: done.append(1))
    assert controller.dissolve(run_timer=False)
    for _ in range(DISSOLVE_STEPS - 1):
        controller.advance_dissolve()
    assert controller.phase is Phase.DISSOLVING
    assert done == []
    controller.advance_dissolve()
    assert controller.phase is Phase.IDLE
    assert controller.dissolve_step == DISSOLVE_STEPS
    assert controller.surface.is_uniform_black()
    assert done == [1]


def test_no_frames_after_dissolve(controller):
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    controller.dissolve(run_timer=False)
    controller.finish_dissolve()
    frames = []
    controller.frameRendered.connect(lambda: frames.append(1))
    controller.tick()
    controller.advance_dissolve()
    assert frames == []
    assert controller.surface.is_uniform_black()


def test_dissolve_needs_a_breathing_pattern(controller):
    assert not controller.dissolve(run_timer=False)
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    controller.stop()
    assert not controller.dissolve(run_timer=False)


def test_stop_during_dissolve_cancels_it(controller):
    controller.start(generate_pattern(PEACE_TEXT))
    controller.dissolve()
    assert controller.is_running
    controller.stop()
    assert not controller.is_running
    assert controller.phase is Phase.IDLE


def test_style_switch_changes_the_state(controller):
    controller.set_style("evolving")
    assert controller.state.style == "evolving"
    controller.set_style("anything else")
    assert controller.state.style == "fixed"
    controller.set_options(EngineOptions(style="evolving", fold_4d=True))
    assert controller.state.style == "evolving"
    assert controller.options.fold_4d


def test_empty_surface_is_refused(qapp):
    with pytest.raises(RenderSurfaceError):
        AnimationController(0, 10)


def test_clear_blacks_out_and_notifies(controller):
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    frames = []
    controller.frameRendered.connect(lambda: frames.append(1))
    controller.clear()
    assert frames == [1]
    assert controller.surface.is_uniform_black()


def test_fork_runs_on_its_own_clock(controller):
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    for _ in range(3):
        controller.tick()
    before = dataclasses.replace(controller.state)
    twin = controller.fork()
    assert twin.state == before
    assert twin.phase is Phase.BREATHING
    assert not twin.is_running
    for _ in range(10):
        twin.tick()
    assert controller.state == before
    assert twin.state.time > before.time
    assert twin.surface.image is not controller.surface.image
