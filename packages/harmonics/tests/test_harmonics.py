"""Tests for the harmonics package."""
import math

import numpy as np
import pytest


# ---------------------------------------------------------------------------
# Prime generation
# ---------------------------------------------------------------------------

class TestGeneratePrimes:

    def test_primes_up_to_30(self):
        from harmonics.primes import generate_primes
        assert generate_primes(30) == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]

    def test_limit_is_inclusive(self):
        from harmonics.primes import generate_primes
        assert generate_primes(29)[-1] == 29
        assert generate_primes(2) == [2]

    def test_below_two_is_empty(self):
        from harmonics.primes import generate_primes
        assert generate_primes(1) == []
        assert generate_primes(0) == []
        assert generate_primes(-10) == []

    def test_count_below_1000(self):
        from harmonics.primes import generate_primes
        primes = generate_primes(1000)
        assert len(primes) == 168
        assert primes[-1] == 997

    def test_fiftieth_prime(self):
        from harmonics.primes import generate_primes
        assert generate_primes(1000)[49] == 229

    def test_returns_python_ints(self):
        from harmonics.primes import generate_primes
        assert all(type(p) is int for p in generate_primes(50))


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

class TestHarmonicWeight:

    def test_bounded_for_full_table(self):
        from harmonics.primes import generate_primes, harmonic_weight, WEIGHT_CAP
        primes = generate_primes(1000)
        total = len(primes)
        for i, p in enumerate(primes):
            w = harmonic_weight(p, i, total)
            assert 0 < w <= WEIGHT_CAP

    def test_small_primes_hit_cap(self):
        from harmonics.primes import harmonic_weight, WEIGHT_CAP
        assert harmonic_weight(2, 0, 50) == WEIGHT_CAP
        assert harmonic_weight(3, 1, 50) == WEIGHT_CAP

    def test_uncapped_value(self):
        from harmonics.primes import harmonic_weight
        # 229 is not resonant: exp(-49 / 5) / 229²
        expected = math.exp(-49 / 5.0) / (229 * 229)
        assert harmonic_weight(229, 49, 50) == pytest.approx(expected)

    def test_resonance_boost(self):
        from harmonics.primes import harmonic_weight, resonance_boost
        assert resonance_boost(47) == pytest.approx(1.1)
        assert resonance_boost(53) == 1.0
        boosted = harmonic_weight(47, 14, 50)
        assert boosted == pytest.approx(1.1 * math.exp(-14 / 5.0) / 47 ** 2)

    def test_non_increasing_envelope(self):
        from harmonics.primes import generate_primes, harmonic_weights
        weights = harmonic_weights(generate_primes(1000)[:50])
        assert np.all(np.diff(weights) <= 0)

    def test_invalid_inputs(self):
        from harmonics.primes import harmonic_weight
        with pytest.raises(ValueError):
            harmonic_weight(1, 0, 10)
        with pytest.raises(ValueError):
            harmonic_weight(2, -1, 10)
        with pytest.raises(ValueError):
            harmonic_weight(2, 0, 0)


class TestPrimeTable:

    def test_first(self):
        from harmonics.primes import PrimeTable
        table = PrimeTable(limit=100)
        assert table.first(6) == [2, 3, 5, 7, 11, 13]
        assert len(table) == 25

    def test_first_too_many(self):
        from harmonics.primes import PrimeTable
        with pytest.raises(ValueError, match="holds 25"):
            PrimeTable(limit=100).first(26)

    def test_weights_shape(self):
        from harmonics.primes import PrimeTable
        assert PrimeTable().weights(50).shape == (50,)

    def test_categories(self):
        from harmonics.primes import PrimeTable
        cats = PrimeTable().categories()
        assert cats['fundamentals'] == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
        assert len(cats['mid_range']) == 40
        assert len(cats['overtones']) == 50
        assert len(cats['ultra_high']) == 68

    def test_shared_table_is_singleton(self):
        from harmonics.primes import get_prime_table
        assert get_prime_table() is get_prime_table()

    def test_primes_immutable(self):
        from harmonics.primes import PrimeTable
        assert isinstance(PrimeTable(limit=30).primes, tuple)


class TestPrimeDensity:

    def test_totals(self):
        from harmonics.primes import analyze_prime_density
        result = analyze_prime_density(1000)
        assert result['total_primes'] == 168
        assert result['average_density'] == pytest.approx(0.168)
        assert len(result['density_windows']) == 10

    def test_first_window(self):
        from harmonics.primes import analyze_prime_density
        first = analyze_prime_density(1000)['density_windows'][0]
        assert first['range'] == '0-100'
        assert first['count'] == 25
        assert first['density'] == pytest.approx(0.25)

    def test_window_counts_sum(self):
        from harmonics.primes import analyze_prime_density
        result = analyze_prime_density(450, window_size=100)
        assert sum(w['count'] for w in result['density_windows']) == result['total_primes']


# ---------------------------------------------------------------------------
# Coupling
# ---------------------------------------------------------------------------

class TestCouple:

    def test_zero_harmonics_zero_coupling(self):
        from harmonics.coupling import couple
        assert couple(np.zeros(50), list(range(2, 52)), 1.0) == 0.0

    def test_empty_bank(self):
        from harmonics.coupling import couple
        assert couple([], [], 1.0) == 0.0

    def test_bounded(self):
        from harmonics.coupling import couple
        from harmonics.primes import generate_primes
        primes = generate_primes(1000)[:50]
        h = np.full(50, 1e6)
        c = couple(h, primes, 3.0, coupling_strength=10.0)
        assert -1.0 <= c <= 1.0

    def test_matches_reference_loop(self):
        from harmonics.coupling import couple
        from harmonics.primes import generate_primes, harmonic_weight
        primes = generate_primes(100)[:8]
        np.random.seed(42)
        h = np.random.randn(8)
        t = 2.5

        total = 0.0
        for i in range(8):
            w = harmonic_weight(primes[i], i, 8)
            total += math.tanh(h[i] * w * math.cos(primes[i] * t * 0.001))
        for i in range(5):
            for j in range(i + 1, 5):
                total += (math.tanh(h[i]) * math.tanh(h[j])
                          * math.sin((primes[i] + primes[j]) * t * 0.0001) * 0.0001)
        expected = math.tanh(total * 0.001)

        assert couple(h, primes, t) == pytest.approx(expected, rel=1e-9, abs=1e-15)

    def test_precomputed_weights_match(self):
        from harmonics.coupling import couple
        from harmonics.primes import generate_primes, harmonic_weights
        primes = generate_primes(1000)[:50]
        h = np.linspace(-1, 1, 50)
        assert couple(h, primes, 0.7, weights=harmonic_weights(primes)) == couple(h, primes, 0.7)

    def test_nan_propagates(self):
        from harmonics.coupling import couple
        h = np.zeros(6)
        h[2] = np.nan
        assert np.isnan(couple(h, [2, 3, 5, 7, 11, 13], 1.0))

    def test_deterministic(self):
        from harmonics.coupling import couple
        h = np.linspace(0, 2, 10)
        primes = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
        assert couple(h, primes, 4.2) == couple(h, primes, 4.2)
