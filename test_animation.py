"""Tests for the frame-driven animation driver."""

import math

import pytest

from cardcanvas.editor.animation import (
    AnimationKind,
    Animator,
    EASINGS,
    apply_animation,
    capture_state,
    typewriter_text,
)
from cardcanvas.editor.errors import ConfigurationError, UnknownAnimationError
from cardcanvas.editor.models import TextField
from cardcanvas.editor.raster import PillowText


def _text(text="HELLO", left=100.0, top=50.0, angle=0.0):
    return PillowText(TextField(id="t", text=text, left=left, top=top, font_size=20, angle=angle))


@pytest.fixture
def animator(surface, scheduler):
    return Animator(surface, scheduler)


def test_typewriter_boundary():
    assert typewriter_text("HELLO", 0.41) == "HE"
    assert typewriter_text("HELLO", 0.0) == ""
    assert typewriter_text("HELLO", 1.0) == "HELLO"
    assert typewriter_text("HELLO", 0.6) == "HEL"


def test_easings_hit_endpoints():
    for name, fn in EASINGS.items():
        assert fn(0.0) == pytest.approx(0.0), name
        assert fn(1.0) == pytest.approx(1.0), name


def test_parse_kind():
    assert AnimationKind.parse("slideInLeft") is AnimationKind.SLIDE_IN_LEFT
    assert AnimationKind.parse(AnimationKind.PULSE) is AnimationKind.PULSE
    with pytest.raises(UnknownAnimationError):
        AnimationKind.parse("wobble")


def test_unknown_kind_fails_before_scheduling(animator, scheduler):
    obj = _text()
    with pytest.raises(UnknownAnimationError):
        animator.animate(obj, "wobble")
    assert scheduler.pending == 0
    assert obj.snapshot().opacity == 1.0


def test_unknown_easing_is_configuration_error(animator):
    with pytest.raises(ConfigurationError):
        animator.animate(_text(), "fadeIn", easing="easeSideways")


def test_fade_in_runs_to_completion(animator, scheduler):
    obj = _text()
    completed = []
    done = animator.animate(obj, "fadeIn", duration=160, easing="linear", on_complete=lambda: completed.append(True))

    assert obj.snapshot().opacity == 0.0  # first frame applied at start
    scheduler.advance(80)
    assert obj.snapshot().opacity == pytest.approx(0.5)
    assert not done.done()

    scheduler.advance(80)
    assert done.done() and done.result() is None
    assert completed == [True]
    assert obj.snapshot().opacity == pytest.approx(1.0)
    assert animator.active_count == 0


def test_zero_duration_applies_final_state_immediately(animator):
    obj = _text()
    done = animator.animate(obj, "slideInLeft", duration=0)
    assert done.done()
    state = obj.snapshot()
    assert state.left == pytest.approx(100.0)
    assert state.opacity == pytest.approx(1.0)


def test_slide_in_left_offsets_then_settles(animator, scheduler):
    obj = _text()
    animator.animate(obj, "slideInLeft", duration=160, easing="linear")
    assert obj.snapshot().left == pytest.approx(0.0)
    scheduler.advance(80)
    assert obj.snapshot().left == pytest.approx(50.0)
    scheduler.run_until_idle()
    assert obj.snapshot().left == pytest.approx(100.0)
    assert obj.snapshot().top == pytest.approx(50.0)


def test_delay_postpones_start(animator, scheduler):
    obj = _text()
    done = animator.animate(obj, "fadeIn", duration=32, delay=100, easing="linear")
    assert obj.snapshot().opacity == 1.0
    scheduler.advance(96)
    assert obj.snapshot().opacity == 1.0
    scheduler.advance(16)
    assert obj.snapshot().opacity == 0.0
    scheduler.run_until_idle()
    assert done.done()


def test_rotate_in_returns_to_original_angle(animator, scheduler):
    obj = _text(angle=10)
    animator.animate(obj, "rotateIn", duration=0)
    assert obj.snapshot().angle == pytest.approx(10)

    obj = _text(angle=10)
    animator.animate(obj, "rotateIn", duration=100, easing="linear")
    assert obj.snapshot().angle == pytest.approx(370)


def test_pulse_oscillates_and_completes(animator, scheduler):
    obj = _text()
    initial = capture_state(obj)
    apply_animation(obj, AnimationKind.PULSE, initial, 1 / 6)
    assert obj.snapshot().scale_x == pytest.approx(1.1)

    obj = _text()
    done = animator.animate(obj, "pulse", duration=96)
    scheduler.run_until_idle()
    assert done.done()
    assert obj.snapshot().scale_x == pytest.approx(1.0)


def test_bounce_is_damped_and_lands(animator):
    obj = _text()
    initial = capture_state(obj)
    apply_animation(obj, AnimationKind.BOUNCE, initial, 0.5)
    assert obj.snapshot().top == pytest.approx(50 - math.sin(math.pi / 2) * 0.5 * 30)
    apply_animation(obj, AnimationKind.BOUNCE, initial, 1.0)
    assert obj.snapshot().top == pytest.approx(50)


def test_scale_in_grows_to_initial(animator):
    obj = _text()
    initial = capture_state(obj)
    apply_animation(obj, AnimationKind.SCALE_IN, initial, 0.25)
    assert obj.snapshot().scale_y == pytest.approx(0.25)
    assert obj.snapshot().opacity == pytest.approx(0.25)


def test_typewriter_reads_captured_text(animator, scheduler):
    obj = _text("HELLO")
    animator.animate(obj, "typewriter", duration=100, easing="linear")
    assert obj.text == ""
    scheduler.advance(48)
    assert obj.text == "HE"
    scheduler.run_until_idle()
    assert obj.text == "HELLO"


def test_animate_multiple_staggers_and_joins(animator, scheduler):
    objects = [_text(), _text(), _text()]
    done = animator.animate_multiple(objects, "fadeIn", duration=32, stagger=100, easing="linear")

    assert objects[0].snapshot().opacity == 0.0
    assert objects[1].snapshot().opacity == 1.0  # not started yet
    scheduler.advance(112)
    assert objects[1].snapshot().opacity < 1.0
    assert not done.done()

    scheduler.run_until_idle()
    assert done.done()
    assert all(o.snapshot().opacity == pytest.approx(1.0) for o in objects)


def test_animate_multiple_with_nothing_resolves(animator):
    assert animator.animate_multiple([], "fadeIn").done()


def test_cancelled_future_stops_animation(animator, scheduler):
    obj = _text()
    done = animator.animate(obj, "fadeIn", duration=160, easing="linear")
    scheduler.advance(32)
    opacity = obj.snapshot().opacity
    assert done.cancel()
    scheduler.advance(200)
    assert obj.snapshot().opacity == opacity
    assert scheduler.pending == 0


def test_cancel_all_leaves_futures_unresolved(animator, scheduler):
    first = animator.animate(_text(), "fadeIn", duration=160)
    second = animator.animate(_text(), "fadeIn", duration=160, delay=50)
    animator.cancel_all()
    scheduler.advance(1000)
    assert not first.done()
    assert not second.done()
    assert scheduler.pending == 0


def test_each_frame_requests_render(animator, scheduler, surface):
    before = surface.render_requests
    animator.animate(_text(), "fadeIn", duration=48)
    scheduler.run_until_idle()
    assert surface.render_requests - before >= 3
