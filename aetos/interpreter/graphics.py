"""
Graphics capability used by the interpreter's drawing builtins.

The interpreter only talks to the abstract `GraphicsCapability`; the
embedding program decides which implementation backs it. `HeadlessGraphics`
draws into an in-memory RGB frame buffer and never opens a window, which is
what the command-line runner and the tests use.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Set, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Key codes accepted by is_key_pressed, mapped to key names.
KEY_CODES = {
    87: "W",
    83: "S",
    65: "A",
    68: "D",
    37: "Left",
    38: "Up",
    39: "Right",
    40: "Down",
    32: "Space",
}


def to_channel(value: int) -> int:
    """Truncate an integer to an 8-bit color channel."""
    return value & 0xFF


def clip_line(x1: int, y1: int, x2: int, y2: int, width: int, height: int
              ) -> Optional[Tuple[int, int, int, int]]:
    """
    Clip a segment to the pixel rectangle [0, width-1] x [0, height-1].

    Uses Liang-Barsky parametric clipping. Returns the clipped integer
    endpoints, or None when the segment misses the rectangle entirely.
    """
    dx = x2 - x1
    dy = y2 - y1
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x1), (dx, width - 1 - x1), (-dy, y1), (dy, height - 1 - y1)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)

    def clamp(value: float, limit: int) -> int:
        return min(max(int(round(value)), 0), limit - 1)

    if t0 == 0.0 and t1 == 1.0:
        return x1, y1, x2, y2
    return (clamp(x1 + t0 * dx, width), clamp(y1 + t0 * dy, height),
            clamp(x1 + t1 * dx, width), clamp(y1 + t1 * dy, height))


class GraphicsCapability(ABC):
    """Fixed-size pixel surface with integer coordinates and 8-bit RGB."""

    @abstractmethod
    def clear(self, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def draw_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def draw_rect(self, x: int, y: int, width: int, height: int, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def draw_circle(self, center_x: int, center_y: int, radius: int, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def draw_line(self, x1: int, y1: int, x2: int, y2: int, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def render(self) -> None:
        """Present the current frame."""

    @abstractmethod
    def poll_input(self) -> bool:
        """Process pending input; False once the surface has been closed."""

    @abstractmethod
    def is_key_down(self, key: str) -> bool:
        pass

    @abstractmethod
    def get_elapsed_time(self) -> float:
        """Seconds since the surface was created."""


class HeadlessGraphics(GraphicsCapability):
    """
    Off-screen implementation backed by a numpy frame buffer.

    Drawing outside the buffer is clipped. `close_after_polls` makes the
    surface report itself closed on that poll, which is how a caller bounds
    an otherwise endless render loop.
    """

    def __init__(self, width: int, height: int, title: str = "Aetos Program",
                 close_after_polls: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.width = width
        self.height = height
        self.title = title
        self.close_after_polls = close_after_polls
        self.buffer = np.zeros((height, width, 3), dtype=np.uint8)
        self.frames_rendered = 0
        self.polls = 0
        self.closed = False
        self.pressed_keys: Set[str] = set()
        self._clock = clock
        self._start_time = clock()
        logger.debug("headless graphics %dx%d '%s'", width, height, title)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self.buffer[y, x]
        return int(r), int(g), int(b)

    def clear(self, r: int, g: int, b: int) -> None:
        self.buffer[:, :] = (to_channel(r), to_channel(g), to_channel(b))

    def draw_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        if self._in_bounds(x, y):
            self.buffer[y, x] = (to_channel(r), to_channel(g), to_channel(b))

    def draw_rect(self, x: int, y: int, width: int, height: int, r: int, g: int, b: int) -> None:
        x0, x1 = max(x, 0), min(x + width, self.width)
        y0, y1 = max(y, 0), min(y + height, self.height)
        if x0 >= x1 or y0 >= y1:
            return
        self.buffer[y0:y1, x0:x1] = (to_channel(r), to_channel(g), to_channel(b))

    def draw_circle(self, center_x: int, center_y: int, radius: int, r: int, g: int, b: int) -> None:
        if radius < 0:
            return
        ys, xs = np.ogrid[:self.height, :self.width]
        mask = (xs - center_x) ** 2 + (ys - center_y) ** 2 <= radius * radius
        self.buffer[mask] = (to_channel(r), to_channel(g), to_channel(b))

    def draw_line(self, x1: int, y1: int, x2: int, y2: int, r: int, g: int, b: int) -> None:
        clipped = clip_line(x1, y1, x2, y2, self.width, self.height)
        if clipped is None:
            return
        x1, y1, x2, y2 = clipped

        # Bresenham, covering all octants
        dx = abs(x2 - x1)
        dy = -abs(y2 - y1)
        sx = 1 if x1 < x2 else -1
        sy = 1 if y1 < y2 else -1
        err = dx + dy

        x, y = x1, y1
        while True:
            self.draw_pixel(x, y, r, g, b)
            if x == x2 and y == y2:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x += sx
            if e2 <= dx:
                err += dx
                y += sy

    def render(self) -> None:
        self.frames_rendered += 1

    def poll_input(self) -> bool:
        self.polls += 1
        if self.close_after_polls is not None and self.polls >= self.close_after_polls:
            self.closed = True
        return not self.closed

    def close(self) -> None:
        self.closed = True

    def press_key(self, key: str) -> None:
        self.pressed_keys.add(key)

    def release_key(self, key: str) -> None:
        self.pressed_keys.discard(key)

    def is_key_down(self, key: str) -> bool:
        return key in self.pressed_keys

    def get_elapsed_time(self) -> float:
        return self._clock() - self._start_time


GraphicsFactory = Callable[[int, int, str], GraphicsCapability]
