"""Playback of a precomputed step sequence.

The cursor owns the current position, the AutoPlayer owns the timer. Only one
advance is ever scheduled; any manual action cancels it, and an advance that
fires after the sequence was replaced is discarded by its generation token.
"""
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

import structlog

from rod_tickler.models.step import Step
from rod_tickler.models.step_sequence import StepSequence

# Speed 1 (slowest) .. 10 (fastest), in milliseconds between steps.
SPEED_MAP_MS = [1200, 950, 750, 600, 480, 380, 280, 200, 140, 90]
DEFAULT_INTERVAL_MS = 480
DEFAULT_SPEED = 5

log = structlog.get_logger()

T = TypeVar("T")


def interval_for_speed(speed: int) -> float:
    """Seconds between automatic advances for a speed setting."""
    if 1 <= speed <= len(SPEED_MAP_MS):
        return SPEED_MAP_MS[speed - 1] / 1000
    return DEFAULT_INTERVAL_MS / 1000


class CursorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    AT = "at"
    FINISHED = "finished"


class PlaybackCursor:
    """Position within a StepSequence. Loading a new sequence restarts at 0."""

    def __init__(self) -> None:
        self._sequence: Optional[StepSequence] = None
        self._index: Optional[int] = None

    @property
    def sequence(self) -> Optional[StepSequence]:
        return self._sequence

    @property
    def index(self) -> Optional[int]:
        return self._index

    @property
    def state(self) -> CursorState:
        if self._sequence is None or self._index is None:
            return CursorState.UNINITIALIZED
        if self._index == self._sequence.last_index:
            return CursorState.FINISHED
        return CursorState.AT

    @property
    def current(self) -> Optional[Step]:
        if self._sequence is None or self._index is None:
            return None
        return self._sequence[self._index]

    def load(self, sequence: StepSequence) -> Step:
        self._sequence = sequence
        self._index = 0
        return sequence[0]

    def reset(self) -> None:
        self._sequence = None
        self._index = None

    def step_forward(self) -> bool:
        """Move one step ahead. Returns False when uninitialized or finished."""
        if self.state != CursorState.AT:
            return False
        self._index += 1
        return True

    def step_backward(self) -> bool:
        """Move one step back. Returns False when uninitialized or at index 0."""
        if self.state == CursorState.UNINITIALIZED or self._index == 0:
            return False
        self._index -= 1
        return True

    def jump_to(self, index: int) -> Step:
        if self._sequence is None:
            raise RuntimeError("No step sequence loaded")
        step = self._sequence.step(index)
        self._index = index
        return step


class AutoPlayer:
    """Advances a PlaybackCursor on a timer, one pending advance at a time."""

    def __init__(
        self,
        cursor: PlaybackCursor,
        on_step: Callable[[Step], None],
        on_finish: Optional[Callable[[], None]] = None,
        *,
        speed: int = DEFAULT_SPEED,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.cursor = cursor
        self.speed = speed
        self._on_step = on_step
        self._on_finish = on_finish
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._timer = None
        self._generation = 0
        self._playing = False

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def interval(self) -> float:
        return interval_for_speed(self.speed)

    def _cancel_pending(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule(self) -> None:
        with self._lock:
            self._cancel_pending()
            generation = self._generation
            timer = self._timer_factory(self.interval, self._advance, args=(generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _advance(self, generation: int) -> None:
        # Frames are published under the lock so they reach on_step in cursor order.
        with self._lock:
            if generation != self._generation or not self._playing:
                log.debug("stale advance discarded", generation=generation, current=self._generation)
                return
            self._timer = None
            self.cursor.step_forward()
            finished = self.cursor.state == CursorState.FINISHED
            if finished:
                self._playing = False
            else:
                self._schedule()
            self._on_step(self.cursor.current)
            if finished and self._on_finish is not None:
                self._on_finish()

    def play(self) -> None:
        with self._lock:
            if self._playing or self.cursor.state == CursorState.UNINITIALIZED:
                return
            if self.cursor.state == CursorState.FINISHED:
                self._on_step(self.cursor.jump_to(0))
            self._playing = True
            self._schedule()

    def pause(self) -> None:
        with self._lock:
            self._playing = False
            self._cancel_pending()

    def toggle(self) -> None:
        with self._lock:
            if self._playing:
                self.pause()
            else:
                self.play()

    def set_speed(self, speed: int) -> None:
        """Takes effect from the next scheduled advance."""
        self.speed = speed

    def load(self, sequence: StepSequence) -> Step:
        with self._lock:
            self.pause()
            step = self.cursor.load(sequence)
            self._on_step(step)
            return step

    def reset(self) -> None:
        """Cancel any pending advance and unload the sequence."""
        with self._lock:
            self.pause()
            self.cursor.reset()

    def step_forward(self) -> bool:
        with self._lock:
            self.pause()
            moved = self.cursor.step_forward()
            if moved:
                self._on_step(self.cursor.current)
            return moved

    def step_backward(self) -> bool:
        with self._lock:
            self.pause()
            moved = self.cursor.step_backward()
            if moved:
                self._on_step(self.cursor.current)
            return moved

    def jump_to(self, index: int) -> Step:
        with self._lock:
            self.pause()
            step = self.cursor.jump_to(index)
            self._on_step(step)
            return step


class StepFeed(Generic[T]):
    """Thread-safe, size=1, latest-wins handoff from the player to the UI."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._has_value = False
        self._value: Optional[T] = None
        self._closed = False
        self.dropped = 0

    def publish(self, item: T) -> None:
        """Publish a frame, replacing one the consumer has not picked up yet."""
        with self._condition:
            if self._closed:
                return
            if self._has_value:
                self.dropped += 1
            self._value = item
            self._has_value = True
            self._condition.notify()

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Blocks until a frame is available or the feed is closed. Returns None on close."""
        with self._condition:
            ok = self._condition.wait_for(
                lambda: self._has_value or self._closed, timeout
            )
            if not ok:
                raise TimeoutError("feed get() timed out")
            if not self._has_value:
                return None
            value = self._value
            self._value = None
            self._has_value = False
            return value
