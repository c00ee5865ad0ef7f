"""
Frame decimation for the inference loop.
"""


class FrameSampler:
    """Decides which camera frames are sent through the models.

    Keeps a counter modulo ``period``; a tick is processed when the counter
    is at phase 0 before it advances. With period 2 every other frame runs
    inference, which keeps the inference rate below the capture rate.

    Args:
        period: Process one frame out of every ``period`` (>= 1).
        start_phase: Initial counter value.
    """

    def __init__(self, period: int = 2, start_phase: int = 0):
        if period < 1:
            raise ValueError(f"Sampling period must be >= 1, got {period}")
        self._period = period
        self._counter = start_phase % period

    @property
    def period(self) -> int:
        return self._period

    @property
    def counter(self) -> int:
        return self._counter

    def tick(self) -> bool:
        """Advance by one frame; True if this frame should be processed."""
        selected = self._counter == 0
        self._counter = (self._counter + 1) % self._period
        return selected

    def reset(self) -> None:
        self._counter = 0
