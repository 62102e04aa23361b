"""
Ground-station access detection.

The detector samples an elevation margin g(t) = elevation(t) - min_elevation
on a coarse grid, brackets every sign change and refines the crossing time
until the bracket is narrower than the convergence threshold. Crossings drive
a two-state machine that emits completed access windows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from sat_attitude.core.epoch import Epoch

logger = logging.getLogger(__name__)

MarginFunction = Callable[[Epoch], float]


class HorizonState(Enum):
    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True)
class AccessWindow:
    sequence: int
    start: Epoch
    stop: Epoch

    def __post_init__(self):
        if self.stop < self.start:
            raise ValueError(f"Access window #{self.sequence} stops ({self.stop}) before it starts ({self.start}).")

    @property
    def duration_s(self) -> float:
        return self.stop - self.start


@dataclass(frozen=True)
class Continue:
    """A crossing that did not complete a window."""
    epoch: Epoch


@dataclass(frozen=True)
class WindowClosed:
    window: AccessWindow


Transition = Union[Continue, WindowClosed]


def is_above(margin: float) -> bool:
    # The threshold itself belongs to the visible side
    return margin >= 0.0


class VisibilityDetector:
    """
    Stateful event engine over the elevation margin.

    Epochs must be fed in increasing order: each crossing is bracketed
    between the previous and the current sample.
    """

    def __init__(
        self,
        margin: MarginFunction,
        max_check_s: float,
        threshold_s: float,
        max_iterations: int = 100,
    ):
        if max_check_s <= 0:
            raise ValueError(f"max_check_s must be positive. Got: {max_check_s}")
        if threshold_s <= 0:
            raise ValueError(f"threshold_s must be positive. Got: {threshold_s}")
        self.margin = margin
        self.max_check_s = max_check_s
        self.threshold_s = threshold_s
        self.max_iterations = max_iterations

        self._state: Optional[HorizonState] = None
        self._pending_begin: Optional[Epoch] = None
        self._next_sequence = 1
        self._last_t: Optional[Epoch] = None
        self._last_g = 0.0

    @property
    def state(self) -> Optional[HorizonState]:
        return self._state

    @property
    def pending_begin(self) -> Optional[Epoch]:
        """Begin of the window currently open, if any."""
        return self._pending_begin

    @property
    def started(self) -> bool:
        return self._state is not None

    def start(self, epoch: Epoch) -> HorizonState:
        g = self.margin(epoch)
        self._state = HorizonState.ABOVE if is_above(g) else HorizonState.BELOW
        self._last_t = epoch
        self._last_g = g
        if self._state is HorizonState.ABOVE:
            logger.warning(
                "Station already sees the satellite at %s; the access in progress has no "
                "observed begin and will not be reported.", epoch,
            )
        return self._state

    def transition(self, epoch: Epoch, rising: bool) -> Transition:
        """Apply one refined crossing to the state machine."""
        if rising:
            self._state = HorizonState.ABOVE
            self._pending_begin = epoch
            logger.debug("Access begins at %s", epoch)
            return Continue(epoch)

        self._state = HorizonState.BELOW
        if self._pending_begin is None:
            logger.debug("Access ends at %s without an observed begin; skipped", epoch)
            return Continue(epoch)

        window = AccessWindow(self._next_sequence, self._pending_begin, epoch)
        self._next_sequence += 1
        self._pending_begin = None
        logger.debug("Access #%d: %s -> %s (%.3f s)", window.sequence, window.start, window.stop, window.duration_s)
        return WindowClosed(window)

    def advance_to(self, epoch: Epoch) -> List[AccessWindow]:
        """
        Scan the margin from the last sample up to `epoch` and return the
        windows completed on the way, in order.
        """
        if self._last_t is None:
            raise RuntimeError("Detector must be started before it is advanced.")
        if epoch < self._last_t:
            raise ValueError(f"Epoch {epoch} precedes the last evaluated epoch {self._last_t}.")

        closed: List[AccessWindow] = []
        while self._last_t < epoch:
            t_next = min(self._last_t + self.max_check_s, epoch)
            g_next = self.margin(t_next)

            if is_above(g_next) != is_above(self._last_g):
                crossing = self.refine_crossing(self._last_t, self._last_g, t_next, g_next)
                result = self.transition(crossing, rising=is_above(g_next))
                if isinstance(result, WindowClosed):
                    closed.append(result.window)

            self._last_t = t_next
            self._last_g = g_next
        return closed

    def refine_crossing(self, t_lo: Epoch, g_lo: float, t_hi: Epoch, g_hi: float) -> Epoch:
        """
        Narrow a sign-change bracket below `threshold_s`.

        Secant steps, falling back to bisection whenever a step fails to halve
        the bracket. The result is the bracket end on the visible (g >= 0) side.
        """
        lo_above = is_above(g_lo)
        width = t_hi - t_lo
        bisect = False

        for _ in range(self.max_iterations):
            if width <= self.threshold_s:
                break
            if bisect:
                step = width / 2.0
            else:
                step = width * g_lo / (g_lo - g_hi)
                step = min(max(step, self.threshold_s / 2.0), width - self.threshold_s / 2.0)

            t_mid = t_lo + step
            g_mid = self.margin(t_mid)
            if is_above(g_mid) == lo_above:
                t_lo, g_lo = t_mid, g_mid
            else:
                t_hi, g_hi = t_mid, g_mid

            new_width = t_hi - t_lo
            bisect = new_width > 0.5 * width
            width = new_width
        else:
            logger.warning("Crossing refinement stopped after %d iterations (bracket %.6f s)", self.max_iterations, width)

        return t_lo if lo_above else t_hi
