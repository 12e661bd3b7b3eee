"""Playback synchronization: which lyric line is active at a given time."""

import time
from bisect import bisect_right
from typing import Callable, List, Optional, Sequence

from ..config import OFFSET_LIMIT, OFFSET_STEP, SYNC_LEAD_BIAS, SYNC_MIN_INTERVAL
from ..utils.logging import get_logger
from ..utils.validation import validate_offset
from .models import EMPTY_LYRICS, LyricSet, SyncState

logger = get_logger(__name__)

IndexCallback = Callable[[int], None]


def find_active_index(times: Sequence[float], t: float) -> int:
    """Index of the last line starting at or before ``t``, or -1.

    Among equal start times the later index wins.
    """
    return bisect_right(times, t) - 1


class SyncTracker:
    """Tracks the active line of a lyric set as playback time advances.

    Recomputation is rate limited to one per ``min_interval`` seconds;
    ``flush`` bypasses the limit so the final position is always exact.
    """

    def __init__(
        self,
        lines: Optional[LyricSet] = None,
        offset: float = 0.0,
        lead_bias: float = SYNC_LEAD_BIAS,
        min_interval: float = SYNC_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.lead_bias = lead_bias
        self.min_interval = min_interval
        self.clock = clock
        self.state = SyncState()
        self._lines = lines or EMPTY_LYRICS
        self._times: List[float] = self._lines.times
        self._offset = validate_offset(offset)
        self._subscribers: List[IndexCallback] = []

    @property
    def lines(self) -> LyricSet:
        return self._lines

    @property
    def active_index(self) -> int:
        return self.state.active_index

    @property
    def offset(self) -> float:
        """User offset in seconds; subtracted from playback time."""
        return self._offset

    @offset.setter
    def offset(self, value: float) -> None:
        self._offset = validate_offset(value)

    def adjust_offset(self, delta: float) -> float:
        """Shift the offset by ``delta``, rounded to OFFSET_STEP and clamped."""
        steps = round((self._offset + delta) / OFFSET_STEP)
        value = round(steps * OFFSET_STEP, 1)
        self._offset = max(-OFFSET_LIMIT, min(OFFSET_LIMIT, value))
        return self._offset

    def reset_offset(self) -> None:
        self._offset = 0.0

    def set_lines(self, lines: Optional[LyricSet]) -> None:
        """Replace the lyric set; the active line goes back to none."""
        self._lines = lines or EMPTY_LYRICS
        self._times = self._lines.times
        previous = self.state.active_index
        self.state.reset()
        if previous != -1:
            self._notify(-1)

    def index_at(self, current_time: float) -> int:
        """Active index for a playback time, without changing any state."""
        if not self._times:
            return -1
        return find_active_index(self._times, current_time + self.lead_bias - self._offset)

    def update(self, current_time: float, force: bool = False) -> Optional[int]:
        """Recompute the active line for a playback time.

        Returns the new index when it changed, otherwise None.
        """
        if not self._times:
            return self._set_active(-1)

        now = self.clock()
        last = self.state.last_update
        if not force and last is not None and now - last < self.min_interval:
            return None
        self.state.last_update = now

        return self._set_active(self.index_at(current_time))

    def flush(self, current_time: float) -> Optional[int]:
        """Forced update, used for the last position before playback stops."""
        return self.update(current_time, force=True)

    def subscribe(self, callback: IndexCallback) -> Callable[[], None]:
        """Call ``callback(index)`` on every change; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_active(self, index: int) -> Optional[int]:
        if index == self.state.active_index:
            return None
        self.state.active_index = index
        self._notify(index)
        return index

    def _notify(self, index: int) -> None:
        for callback in list(self._subscribers):
            try:
                callback(index)
            except Exception as e:
                logger.error(f"Active line callback failed: {e}")
