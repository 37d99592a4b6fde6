"""Tests for MovingAverage."""

import random

import pytest

from stoic_agent.utils import MovingAverage


class TestMovingAverageInit:
    """Tests for MovingAverage construction."""

    @pytest.mark.parametrize("size", [0, -1, -10])
    def test_non_positive_size_rejected(self, size):
        """Test that size <= 0 is a construction-time fault."""
        with pytest.raises(ValueError, match="positive"):
            MovingAverage(size)

    def test_empty_average_is_zero(self):
        """Test that an empty window averages to 0.0."""
        window = MovingAverage(3)
        assert window.current_average() == 0.0
        assert window.values() == []
        assert len(window) == 0


class TestMovingAveragePush:
    """Tests for MovingAverage.push()."""

    def test_push_returns_mean(self):
        """Test that push returns the mean of retained samples."""
        window = MovingAverage(3)
        assert window.push(10) == 10
        assert window.push(20) == 15
        assert window.push(30) == 20

    def test_push_evicts_oldest(self):
        """Test that samples beyond capacity evict the oldest."""
        window = MovingAverage(3)
        for sample in [10, 20, 30, 40]:
            window.push(sample)

        assert window.values() == [20, 30, 40]
        assert window.current_average() == pytest.approx(30)

    def test_size_one_tracks_last_sample(self):
        """Test that a window of one always reports the last sample."""
        window = MovingAverage(1)
        window.push(5)
        assert window.push(80) == 80
        assert window.values() == [80]

    def test_current_average_does_not_mutate(self):
        """Test that reading the average leaves the window unchanged."""
        window = MovingAverage(2)
        window.push(1)
        window.push(3)

        assert window.current_average() == 2
        assert window.current_average() == 2
        assert window.values() == [1, 3]

    def test_values_returns_copy(self):
        """Test that values() cannot be used to mutate the window."""
        window = MovingAverage(2)
        window.push(1)
        window.values().append(100)
        assert window.values() == [1]

    @pytest.mark.parametrize("size", [1, 2, 5, 17])
    def test_matches_arithmetic_mean_of_last_n(self, size):
        """Test that the average equals the mean of at most the last N samples."""
        rng = random.Random(size)
        window = MovingAverage(size)
        samples = []

        for _ in range(60):
            sample = rng.uniform(0, 100)
            samples.append(sample)
            avg = window.push(sample)
            tail = samples[-size:]
            assert avg == pytest.approx(sum(tail) / len(tail))
