"""Fixed-capacity history of recent band energies."""

from collections import deque
from typing import List

from ..core.constants import HISTORY_CAPACITY


class TemporalHistory:
    """FIFO ring buffer of the most recent energy samples for one band."""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._values = deque(maxlen=capacity)

    def push(self, energy: float) -> None:
        """Append a sample, evicting the oldest once full."""
        self._values.append(float(energy))

    def recent(self, k: int) -> List[float]:
        """Last ``k`` samples, oldest first (fewer if not yet filled)."""
        if k <= 0:
            return []
        values = list(self._values)
        return values[-k:]

    @property
    def values(self) -> List[float]:
        return list(self._values)

    @property
    def is_full(self) -> bool:
        return len(self._values) == self.capacity

    def __len__(self) -> int:
        return len(self._values)
