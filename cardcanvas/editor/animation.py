"""
Text animations for the card editor.

Each animation is a pure function of eased progress applied to a state
snapshot taken when the animation starts; it never reads state it wrote
on a previous frame. Animations are transient presentation effects and
never touch the registry's original geometry, so the next resize puts
position, size, scale and angle back where the projector wants them.
"""

import itertools
import logging
import math
from concurrent.futures import Future
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Union

from .errors import ConfigurationError, UnknownAnimationError
from .models import TextState
from .scheduler import FrameScheduler
from .surface import DrawingSurface, RenderableText
from ..constants import (
    DEFAULT_ANIMATION_DURATION_MS,
    DEFAULT_STAGGER_DELAY_MS,
    DEFAULT_SLIDE_OFFSET_PX,
    BOUNCE_AMPLITUDE_PX,
    PULSE_AMPLITUDE,
)

logger = logging.getLogger(__name__)

Easing = Callable[[float], float]


class AnimationKind(str, Enum):
    """Supported animations, valued by their persisted names."""
    FADE_IN = "fadeIn"
    SLIDE_IN_LEFT = "slideInLeft"
    SLIDE_IN_RIGHT = "slideInRight"
    SLIDE_IN_TOP = "slideInTop"
    SLIDE_IN_BOTTOM = "slideInBottom"
    SCALE_IN = "scaleIn"
    ROTATE_IN = "rotateIn"
    TYPEWRITER = "typewriter"
    BOUNCE = "bounce"
    PULSE = "pulse"

    @classmethod
    def parse(cls, value: Union[str, "AnimationKind"]) -> "AnimationKind":
        """Resolve a kind by enum member or persisted name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownAnimationError(value) from None


def _ease_out_cubic(t: float) -> float:
    t -= 1
    return t * t * t + 1


def _ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return (t - 1) * (2 * t - 2) * (2 * t - 2) + 1


EASINGS: Dict[str, Easing] = {
    "linear": lambda t: t,
    "easeInQuad": lambda t: t * t,
    "easeOutQuad": lambda t: t * (2 - t),
    "easeInOutQuad": lambda t: 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t,
    "easeInCubic": lambda t: t * t * t,
    "easeOutCubic": _ease_out_cubic,
    "easeInOutCubic": _ease_in_out_cubic,
}

DEFAULT_EASING = "easeOutCubic"


def resolve_easing(easing: Union[str, Easing, None]) -> Easing:
    if easing is None:
        return EASINGS[DEFAULT_EASING]
    if callable(easing):
        return easing
    if easing not in EASINGS:
        raise ConfigurationError(f"Unknown easing function: {easing!r}")
    return EASINGS[easing]


def typewriter_text(text: str, progress: float) -> str:
    """Prefix of ``text`` visible at ``progress``: floor(len * progress) characters."""
    return text[:math.floor(len(text) * progress)]


def capture_state(obj: RenderableText) -> TextState:
    state = obj.snapshot()
    # A fully transparent object animates towards full opacity
    state.opacity = state.opacity or 1.0
    state.scale_x = state.scale_x or 1.0
    state.scale_y = state.scale_y or 1.0
    return state


def apply_animation(
    obj: RenderableText,
    kind: AnimationKind,
    initial: TextState,
    progress: float,
    slide_offset: float = DEFAULT_SLIDE_OFFSET_PX,
) -> None:
    """Set ``obj`` to the frame of ``kind`` at eased ``progress``."""
    remaining = 1 - progress

    if kind is AnimationKind.FADE_IN:
        obj.set_opacity(initial.opacity * progress)

    elif kind is AnimationKind.SLIDE_IN_LEFT:
        obj.set_position(initial.left - slide_offset * remaining, initial.top)
        obj.set_opacity(progress)

    elif kind is AnimationKind.SLIDE_IN_RIGHT:
        obj.set_position(initial.left + slide_offset * remaining, initial.top)
        obj.set_opacity(progress)

    elif kind is AnimationKind.SLIDE_IN_TOP:
        obj.set_position(initial.left, initial.top - slide_offset * remaining)
        obj.set_opacity(progress)

    elif kind is AnimationKind.SLIDE_IN_BOTTOM:
        obj.set_position(initial.left, initial.top + slide_offset * remaining)
        obj.set_opacity(progress)

    elif kind is AnimationKind.SCALE_IN:
        obj.set_scale(initial.scale_x * progress, initial.scale_y * progress)
        obj.set_opacity(progress)

    elif kind is AnimationKind.ROTATE_IN:
        obj.set_rotation(initial.angle + 360 * remaining)
        obj.set_opacity(progress)

    elif kind is AnimationKind.BOUNCE:
        bounce = math.sin(progress * math.pi) * remaining * BOUNCE_AMPLITUDE_PX
        obj.set_position(initial.left, initial.top - bounce)
        obj.set_opacity(progress)

    elif kind is AnimationKind.PULSE:
        pulse = 1 + math.sin(progress * math.pi * 3) * PULSE_AMPLITUDE
        obj.set_scale(initial.scale_x * pulse, initial.scale_y * pulse)

    elif kind is AnimationKind.TYPEWRITER:
        obj.set_text(typewriter_text(initial.text, progress))


class Animator:
    """
    Frame-driven animation driver.

    Each call to ``animate`` returns a ``concurrent.futures.Future`` that
    resolves on the final frame. Cancelling that future stops the
    animation where it is. ``cancel_all`` drops every in-flight animation
    without resolving its future.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        scheduler: FrameScheduler,
        default_duration: float = DEFAULT_ANIMATION_DURATION_MS,
        stagger_delay: float = DEFAULT_STAGGER_DELAY_MS,
        slide_offset: float = DEFAULT_SLIDE_OFFSET_PX,
    ):
        self.surface = surface
        self.scheduler = scheduler
        self.default_duration = default_duration
        self.stagger_delay = stagger_delay
        self.slide_offset = slide_offset
        self._ids = itertools.count(1)
        self._pending: Dict[int, Any] = {}

    @property
    def active_count(self) -> int:
        """Animations waiting on a delay or a frame."""
        return len(self._pending)

    def animate(
        self,
        obj: RenderableText,
        kind: Union[str, AnimationKind],
        duration: Optional[float] = None,
        delay: float = 0,
        easing: Union[str, Easing, None] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Future:
        """
        Animate one text object.

        Args:
            obj: Live object to animate
            kind: Animation kind (enum member or persisted name)
            duration: Milliseconds; zero or less applies the final frame at once
            delay: Milliseconds to wait before the first frame
            easing: Easing name or function (default easeOutCubic)
            on_complete: Called after the final frame

        Raises:
            UnknownAnimationError: if ``kind`` is not supported
        """
        kind = AnimationKind.parse(kind)
        easing_fn = resolve_easing(easing)
        duration = self.default_duration if duration is None else duration
        token = next(self._ids)
        future: Future = Future()

        def on_done(f: Future) -> None:
            if f.cancelled():
                self.scheduler.cancel(self._pending.pop(token, None))

        def start() -> None:
            self._pending.pop(token, None)
            start_time = self.scheduler.now()
            initial = capture_state(obj)

            def step(_timestamp: Optional[float] = None) -> None:
                self._pending.pop(token, None)
                if future.cancelled():
                    return
                elapsed = self.scheduler.now() - start_time
                progress = 1.0 if duration <= 0 else min(elapsed / duration, 1.0)
                apply_animation(obj, kind, initial, easing_fn(progress), self.slide_offset)
                self.surface.request_render()

                if progress < 1:
                    self._pending[token] = self.scheduler.request_frame(step)
                    return

                if on_complete is not None:
                    on_complete()
                future.set_result(None)

            step()

        future.add_done_callback(on_done)
        logger.debug(f"Animating {obj.field_id} with {kind.value} ({duration}ms, delay {delay}ms)")
        if delay > 0:
            self._pending[token] = self.scheduler.call_later(delay, start)
        else:
            start()
        return future

    def animate_multiple(
        self,
        objects: Sequence[RenderableText],
        kind: Union[str, AnimationKind],
        duration: Optional[float] = None,
        delay: float = 0,
        stagger: Optional[float] = None,
        easing: Union[str, Easing, None] = None,
    ) -> Future:
        """
        Run the same animation over several objects, each starting
        ``stagger`` ms after the previous one.

        Returns:
            Future resolving once every individual animation has finished
        """
        kind = AnimationKind.parse(kind)
        resolve_easing(easing)
        stagger = self.stagger_delay if stagger is None else stagger

        joined: Future = Future()
        if not objects:
            joined.set_result(None)
            return joined

        remaining = [len(objects)]

        def child_done(f: Future) -> None:
            if joined.done():
                return
            if not f.cancelled() and f.exception() is not None:
                joined.set_exception(f.exception())
                return
            remaining[0] -= 1
            if remaining[0] == 0:
                joined.set_result(None)

        for index, obj in enumerate(objects):
            child = self.animate(obj, kind, duration=duration, delay=delay + index * stagger, easing=easing)
            child.add_done_callback(child_done)
        return joined

    def cancel_all(self) -> None:
        """Stop every in-flight animation; their futures are left unresolved."""
        pending, self._pending = self._pending, {}
        for handle in pending.values():
            self.scheduler.cancel(handle)
        if pending:
            logger.debug(f"Cancelled {len(pending)} in-flight animation(s)")
