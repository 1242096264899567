"""Unit tests for weighted reservoir sampling.

Statistical tests use enough trials that the tolerances sit several standard
deviations away from the expected frequencies.
"""

import taichi as ti


class TestReservoirUpdate:
    """Tests for streaming candidates into a reservoir."""

    def test_empty_reservoir(self):
        """Test that a fresh reservoir has selected nothing."""
        from src.pathtracer.core.reservoir import NO_CANDIDATE, empty_reservoir

        y = ti.field(dtype=ti.i32, shape=())
        m = ti.field(dtype=ti.i32, shape=())
        wsum = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            r = empty_reservoir()
            y[None] = r.y
            m[None] = r.m
            wsum[None] = r.wsum

        test_kernel()
        assert y[None] == NO_CANDIDATE
        assert m[None] == 0
        assert wsum[None] == 0.0

    def test_update_counts_every_candidate(self):
        """Test that m grows by one per update, including zero weights."""
        from src.pathtracer.core.reservoir import empty_reservoir, reservoir_update

        m = ti.field(dtype=ti.i32, shape=())
        wsum = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            r = empty_reservoir()
            r = reservoir_update(r, 0, 0.5)
            r = reservoir_update(r, 1, 0.0)
            r = reservoir_update(r, 2, 1.5)
            m[None] = r.m
            wsum[None] = r.wsum

        test_kernel()
        assert m[None] == 3
        assert abs(wsum[None] - 2.0) < 1e-6

    def test_single_positive_weight_is_selected(self):
        """Test that the only candidate with positive weight is always kept."""
        from src.pathtracer.core.reservoir import empty_reservoir, reservoir_update

        picks = ti.field(dtype=ti.i32, shape=100)

        @ti.kernel
        def test_kernel():
            for trial in range(100):
                r = empty_reservoir()
                r = reservoir_update(r, 0, 0.0)
                r = reservoir_update(r, 1, 3.0)
                r = reservoir_update(r, 2, 0.0)
                picks[trial] = r.y

        test_kernel()
        assert all(picks[i] == 1 for i in range(100))

    def test_all_zero_weights_select_nothing(self):
        """Test that y stays unset when no weight is positive."""
        from src.pathtracer.core.reservoir import NO_CANDIDATE, empty_reservoir, reservoir_update

        y = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                r = empty_reservoir()
                for i in range(4):
                    r = reservoir_update(r, i, 0.0)
                y[None] = r.y

        test_kernel()
        assert y[None] == NO_CANDIDATE


class TestReservoirSelection:
    """Statistical tests for the selection distribution."""

    def _selection_frequencies(self, weights, trials):
        from src.pathtracer.core.reservoir import empty_reservoir, reservoir_update

        n = len(weights)
        weight_field = ti.field(dtype=ti.f32, shape=n)
        counts = ti.field(dtype=ti.i32, shape=n)
        for i, w in enumerate(weights):
            weight_field[i] = w

        @ti.kernel
        def test_kernel():
            for trial in range(trials):
                r = empty_reservoir()
                for i in range(n):
                    r = reservoir_update(r, i, weight_field[i])
                if r.y >= 0:
                    counts[r.y] += 1

        test_kernel()
        return [counts[i] / trials for i in range(n)]

    def test_equal_weights_select_uniformly(self):
        """Test that equal weights give each candidate about 1/n."""
        freqs = self._selection_frequencies([1.0, 1.0, 1.0, 1.0], 40000)
        for f in freqs:
            assert abs(f - 0.25) < 0.02

    def test_selection_proportional_to_weight(self):
        """Test that selection frequency tracks weight / total weight."""
        weights = [1.0, 2.0, 3.0, 4.0]
        freqs = self._selection_frequencies(weights, 40000)
        total = sum(weights)
        for f, w in zip(freqs, weights):
            assert abs(f - w / total) < 0.02


class TestReservoirFinalize:
    """Tests for the unbiased contribution weight."""

    def _finalize(self, weights, p_hat, eps=1e-5):
        from src.pathtracer.core.reservoir import (
            empty_reservoir,
            reservoir_finalize,
            reservoir_update,
        )

        n = len(weights)
        weight_field = ti.field(dtype=ti.f32, shape=n)
        w_out = ti.field(dtype=ti.f32, shape=())
        for i, w in enumerate(weights):
            weight_field[i] = w

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                r = empty_reservoir()
                for i in range(n):
                    r = reservoir_update(r, i, weight_field[i])
                r = reservoir_finalize(r, p_hat, eps)
                w_out[None] = r.w

        test_kernel()
        return w_out[None]

    def test_single_candidate_weight_is_one(self):
        """Test W = (1/p_hat) * (wsum/m) with wsum == p_hat and m == 1."""
        assert abs(self._finalize([2.0], 2.0) - 1.0) < 1e-6

    def test_weight_formula(self):
        """Test W against the closed form for several candidates."""
        # wsum = 6, m = 3, p_hat = 0.5 -> W = 2 * 2 = 4
        assert abs(self._finalize([1.0, 2.0, 3.0], 0.5) - 4.0) < 1e-5

    def test_zero_target_gives_zero_weight(self):
        """Test that p_hat == 0 forces W = 0 instead of a division by zero."""
        assert self._finalize([1.0, 1.0], 0.0) == 0.0

    def test_empty_stream_gives_zero_weight(self):
        """Test that an empty reservoir finalizes to zero."""
        assert self._finalize([0.0], 1.0) == 0.0
