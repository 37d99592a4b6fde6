"""Fixed-size moving average."""

from collections import deque


class MovingAverage:
    """Sliding window over the last `size` samples with a running sum.

    `push` and `current_average` are O(1). An empty window averages to 0.0.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"MovingAverage size must be positive, got {size}")
        self._size = size
        self._values: deque[float] = deque()
        self._sum = 0.0

    @property
    def size(self) -> int:
        return self._size

    def push(self, sample: float) -> float:
        """Add a sample, evicting the oldest beyond capacity. Returns the new mean."""
        self._values.append(sample)
        self._sum += sample
        if len(self._values) > self._size:
            self._sum -= self._values.popleft()
        return self.current_average()

    def current_average(self) -> float:
        if not self._values:
            return 0.0
        return self._sum / len(self._values)

    def values(self) -> list[float]:
        """Samples in the window, oldest first."""
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)
