"""
Unit tests for HSV k-means clustering.

Tests the clustering core:
- circular hue distance
- exact-k output and degenerate inputs
- empty-cluster retention and convergence
"""
import numpy as np
import pytest

from aura_engine.services.colors.clustering import (
    KMeansClusterer, ClusteringResult, hue_distance, hsv_distance, circular_mean
)
from aura_engine.services.colors.models import HSVSample


class FixedChoiceRng:
    """Stands in for a Generator, returning predetermined seed indices."""
    
    def __init__(self, indices):
        self.indices = np.asarray(indices)
    
    def choice(self, n, size, replace):
        return self.indices[:size]


def blob(rng, hue, count, spread=0.01, saturation=0.8, value=0.7):
    """Tight cloud of HSV samples around a hue (wrapping into [0, 1))."""
    hues = np.mod(hue + rng.uniform(-spread, spread, count), 1.0)
    sats = np.clip(saturation + rng.uniform(-0.02, 0.02, count), 0, 1)
    vals = np.clip(value + rng.uniform(-0.02, 0.02, count), 0, 1)
    return np.stack([hues, sats, vals], axis=1)


class TestDistance:
    """Test HSV distance helpers"""
    
    def test_hue_wraparound(self):
        """Hues either side of 0 are close, not nearly a full turn apart"""
        assert hue_distance(0.01, 0.99) == pytest.approx(0.02)
        assert hue_distance(0.99, 0.01) == pytest.approx(0.02)
    
    def test_hue_distance_max_half_turn(self):
        assert hue_distance(0.0, 0.5) == pytest.approx(0.5)
        assert hue_distance(0.1, 0.7) == pytest.approx(0.4)
    
    def test_hue_distance_vectorised(self):
        result = hue_distance(np.array([0.0, 0.95]), 0.05)
        np.testing.assert_allclose(result, [0.05, 0.1])
    
    def test_hsv_distance(self):
        a = HSVSample(0.01, 0.5, 0.5)
        b = HSVSample(0.99, 0.5, 0.5)
        assert hsv_distance(a, b) == pytest.approx(0.02)
        
        c = HSVSample(0.0, 0.0, 0.0)
        d = HSVSample(0.0, 0.3, 0.4)
        assert hsv_distance(c, d) == pytest.approx(0.5)
    
    def test_circular_mean(self):
        assert hue_distance(circular_mean(np.array([0.98, 0.02])), 0.0) < 1e-9
        assert circular_mean(np.array([0.2, 0.3])) == pytest.approx(0.25)
        assert 0.0 <= circular_mean(np.array([0.999, 0.9995])) < 1.0


class TestClusterDegenerateInputs:
    """Test empty and undersized inputs"""
    
    def test_empty_samples(self, rng):
        clusterer = KMeansClusterer(rng=rng)
        assert clusterer.cluster(np.empty((0, 3)), k=3) == []
        assert clusterer.cluster([], k=3) == []
    
    def test_fewer_samples_than_k(self, rng):
        samples = [HSVSample(0.1, 0.5, 0.5), HSVSample(0.6, 0.5, 0.5)]
        assert KMeansClusterer(rng=rng).cluster(samples, k=3) == []
    
    def test_empty_result_shape(self):
        result = ClusteringResult.empty()
        assert result.k == 0
        assert result.centroid_samples() == []
    
    @pytest.mark.parametrize("k", [0, -1])
    def test_non_positive_k(self, rng, k):
        with pytest.raises(ValueError):
            KMeansClusterer(rng=rng).cluster([HSVSample(0.1, 0.5, 0.5)], k=k)
    
    def test_invalid_restarts(self):
        with pytest.raises(ValueError):
            KMeansClusterer(n_init=0)


class TestClusterInvariants:
    """Test output shape and ranges"""
    
    def test_returns_exactly_k_in_range(self):
        """Any non-empty sample set yields exactly k in-range centroids"""
        data_rng = np.random.default_rng(99)
        for trial in range(25):
            n = int(data_rng.integers(1, 200))
            samples = data_rng.random((n, 3))
            k = int(data_rng.integers(1, min(n, 6) + 1))
            
            centroids = KMeansClusterer(rng=np.random.default_rng(trial)).cluster(samples, k)
            
            assert len(centroids) == k
            for c in centroids:
                assert 0.0 <= c.hue < 1.0
                assert 0.0 <= c.saturation <= 1.0
                assert 0.0 <= c.value <= 1.0
    
    def test_circular_mean_also_in_range(self):
        samples = np.random.default_rng(5).random((80, 3))
        centroids = KMeansClusterer(
            rng=np.random.default_rng(1), circular_hue_mean=True
        ).cluster(samples, 4)
        assert len(centroids) == 4
        assert all(0.0 <= c.hue < 1.0 for c in centroids)
    
    def test_accepts_sample_objects(self, rng):
        samples = [HSVSample(0.1, 0.5, 0.5)] * 5 + [HSVSample(0.6, 0.5, 0.5)] * 5
        centroids = KMeansClusterer(rng=rng, n_init=20).cluster(samples, k=2)
        hues = sorted(c.hue for c in centroids)
        assert hues == pytest.approx([0.1, 0.6])
    
    def test_counts_cover_all_samples(self, rng):
        samples = np.random.default_rng(3).random((150, 3))
        result = KMeansClusterer(rng=rng).fit(samples, 3)
        assert result.counts.sum() == 150
        assert result.labels.shape == (150,)
        assert result.iterations >= 1


class TestClusterBehavior:
    """Test clustering outcomes"""
    
    def test_red_wraparound_stays_one_cluster(self):
        """With the circular mean, reds on both sides of 0.0 form one cluster near hue 0"""
        data_rng = np.random.default_rng(11)
        samples = np.vstack([
            blob(data_rng, 0.0, 300, spread=0.02),
            blob(data_rng, 2 / 3, 300),
        ])
        
        centroids = KMeansClusterer(
            rng=np.random.default_rng(2), n_init=10, circular_hue_mean=True
        ).cluster(samples, 2)
        red_distance = min(hue_distance(c.hue, 0.0) for c in centroids)
        blue_distance = min(hue_distance(c.hue, 2 / 3) for c in centroids)
        
        assert red_distance < 0.02
        assert blue_distance < 0.02
    
    def test_default_hue_mean_is_per_channel(self):
        """By default the hue centroid is the plain arithmetic mean"""
        samples = np.array([[0.02, 0.5, 0.5]] * 10 + [[0.98, 0.5, 0.5]] * 10)
        
        centroid = KMeansClusterer(rng=np.random.default_rng(0)).cluster(samples, 1)[0]
        
        assert centroid.hue == pytest.approx(0.5)
        assert centroid.saturation == pytest.approx(0.5)
    
    def test_circular_mean_opt_in(self):
        samples = np.array([[0.02, 0.5, 0.5]] * 10 + [[0.98, 0.5, 0.5]] * 10)
        
        centroid = KMeansClusterer(
            rng=np.random.default_rng(0), circular_hue_mean=True
        ).cluster(samples, 1)[0]
        
        assert hue_distance(centroid.hue, 0.0) < 1e-9
    
    def test_identical_samples_converge(self, rng):
        samples = np.tile([0.25, 0.6, 0.6], (50, 1))
        result = KMeansClusterer(rng=rng).fit(samples, 3)
        
        assert result.converged
        assert result.k == 3
        assert np.allclose(result.centroids, [0.25, 0.6, 0.6])
    
    def test_empty_cluster_keeps_previous_centroid(self):
        """A centroid that wins no samples is carried over unchanged"""
        clusterer = KMeansClusterer(rng=np.random.default_rng(0))
        data = np.array([[0.1, 0.5, 0.5], [0.12, 0.5, 0.5]])
        centroids = np.array([[0.11, 0.5, 0.5], [0.7, 0.9, 0.9]])
        labels = np.array([0, 0])
        
        updated = clusterer._update_centroids(data, labels, centroids)
        
        assert updated[0] == pytest.approx([0.11, 0.5, 0.5])
        assert updated[1].tolist() == [0.7, 0.9, 0.9]
    
    def test_duplicate_seeds_still_yield_k_centroids(self):
        """Two seeds on the same color leave one cluster empty at first"""
        a = [0.1, 0.5, 0.5]
        b = [0.3, 0.5, 0.5]
        samples = np.array([a, a, b])
        
        result = KMeansClusterer(rng=FixedChoiceRng([0, 1])).fit(samples, 2)
        
        assert result.k == 2
        found = sorted(tuple(np.round(c, 6)) for c in result.centroids)
        assert found == [tuple(a), tuple(b)]
    
    def test_restarts_never_worse(self):
        """The best of several seeded runs has inertia no higher than the first run"""
        samples = np.vstack([
            blob(np.random.default_rng(1), h, 100) for h in (0.0, 0.33, 0.66)
        ])
        single = KMeansClusterer(rng=np.random.default_rng(3), n_init=1).fit(samples, 3)
        multi = KMeansClusterer(rng=np.random.default_rng(3), n_init=8).fit(samples, 3)
        
        assert multi.inertia <= single.inertia
    
    def test_seeded_runs_reproducible(self):
        samples = np.random.default_rng(8).random((120, 3))
        first = KMeansClusterer(rng=np.random.default_rng(21)).cluster(samples, 3)
        second = KMeansClusterer(rng=np.random.default_rng(21)).cluster(samples, 3)
        assert first == second
