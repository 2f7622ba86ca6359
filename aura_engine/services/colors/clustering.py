"""
K-means clustering over HSV samples.

Lloyd's algorithm with uniform random seeding and a distance that treats hue as
circular, so reds at both ends of the wheel fall into the same cluster.
"""
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from loguru import logger

from aura_engine.config import config
from .models import HSVSample, array_to_samples, samples_to_array


def hue_distance(h1, h2):
    """Circular distance between hues expressed as fractions of the circle."""
    diff = np.abs(np.asarray(h1, dtype=np.float64) - np.asarray(h2, dtype=np.float64))
    diff = np.mod(diff, 1.0)
    result = np.minimum(diff, 1.0 - diff)
    return float(result) if np.ndim(result) == 0 else result


def hsv_distance(a: HSVSample, b: HSVSample) -> float:
    """Euclidean HSV distance with circular hue."""
    dh = hue_distance(a.hue, b.hue)
    ds = a.saturation - b.saturation
    dv = a.value - b.value
    return float(np.sqrt(dh * dh + ds * ds + dv * dv))


def pairwise_distances(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """(N, 3) x (K, 3) -> (N, K) HSV distances."""
    dh = np.abs(samples[:, None, 0] - centroids[None, :, 0])
    dh = np.minimum(dh, 1.0 - dh)
    ds = samples[:, None, 1] - centroids[None, :, 1]
    dv = samples[:, None, 2] - centroids[None, :, 2]
    return np.sqrt(dh * dh + ds * ds + dv * dv)


def circular_mean(hues: np.ndarray) -> float:
    """Mean of hue fractions on the circle, folded into [0, 1)."""
    angles = hues * 2.0 * np.pi
    mean = np.arctan2(np.sin(angles).mean(), np.cos(angles).mean()) / (2.0 * np.pi)
    mean = float(np.mod(mean, 1.0))
    return 0.0 if mean >= 1.0 else mean


@dataclass
class ClusteringResult:
    """Outcome of one clustering call."""
    centroids: np.ndarray  # (k, 3) h, s, v
    counts: np.ndarray  # samples assigned per centroid
    labels: np.ndarray
    inertia: float = 0.0
    iterations: int = 0
    converged: bool = False
    
    @property
    def k(self) -> int:
        return int(self.centroids.shape[0])
    
    def centroid_samples(self) -> List[HSVSample]:
        return array_to_samples(self.centroids)
    
    @classmethod
    def empty(cls) -> "ClusteringResult":
        return cls(
            centroids=np.empty((0, 3), dtype=np.float64),
            counts=np.empty(0, dtype=np.int64),
            labels=np.empty(0, dtype=np.int64),
        )


class KMeansClusterer:
    """Lloyd's k-means in HSV space with an injectable random source."""
    
    def __init__(self,
                 rng: Optional[np.random.Generator] = None,
                 n_init: Optional[int] = None,
                 circular_hue_mean: Optional[bool] = None):
        """
        Args:
            rng: Random generator for seeding; a fresh unseeded one per clusterer if omitted
            n_init: Independent seeded runs; the lowest-inertia run wins
            circular_hue_mean: Average hue on the circle instead of linearly
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.n_init = config.KMEANS_RESTARTS if n_init is None else n_init
        self.circular_hue_mean = (
            config.CIRCULAR_HUE_MEAN if circular_hue_mean is None else circular_hue_mean
        )
        if self.n_init < 1:
            raise ValueError(f"n_init must be at least 1, got {self.n_init}")
    
    def cluster(self, samples, k: int, max_iterations: Optional[int] = None) -> List[HSVSample]:
        """
        Cluster samples into exactly k centroids.
        
        Returns an empty list when there are no samples or fewer samples than k.
        """
        return self.fit(samples, k, max_iterations).centroid_samples()
    
    def fit(self, samples, k: int, max_iterations: Optional[int] = None) -> ClusteringResult:
        """Cluster samples and return centroids with their populations."""
        if max_iterations is None:
            max_iterations = config.MAX_ITERATIONS
        if not config.validate_k(k):
            raise ValueError(f"k must be a positive integer, got {k!r}")
        if not config.validate_max_iterations(max_iterations):
            raise ValueError(f"Invalid max_iterations: {max_iterations}")
        
        data = samples if isinstance(samples, np.ndarray) else samples_to_array(samples)
        data = np.asarray(data, dtype=np.float64).reshape(-1, 3)
        
        if data.shape[0] == 0:
            logger.debug("Clustering skipped: no samples")
            return ClusteringResult.empty()
        if k > data.shape[0]:
            logger.debug(f"Clustering skipped: {data.shape[0]} samples < k={k}")
            return ClusteringResult.empty()
        
        best: Optional[ClusteringResult] = None
        for run in range(self.n_init):
            result = self._lloyd(data, k, max_iterations)
            logger.debug(f"K-means run {run}: inertia={result.inertia:.4f} "
                         f"iterations={result.iterations} converged={result.converged}")
            if best is None or result.inertia < best.inertia:
                best = result
        
        logger.info(f"Clustering: {data.shape[0]} samples into k={k} "
                    f"(counts={best.counts.tolist()}, inertia={best.inertia:.4f})")
        return best
    
    def _lloyd(self, data: np.ndarray, k: int, max_iterations: int) -> ClusteringResult:
        seed_indices = self.rng.choice(data.shape[0], size=k, replace=False)
        centroids = data[seed_indices].copy()
        labels = np.zeros(data.shape[0], dtype=np.int64)
        iterations = 0
        converged = False
        
        for _ in range(max_iterations):
            iterations += 1
            labels = pairwise_distances(data, centroids).argmin(axis=1)
            new_centroids = self._update_centroids(data, labels, centroids)
            
            if np.array_equal(new_centroids, centroids):
                converged = True
                break
            centroids = new_centroids
        
        # Final assignment against the returned centroids
        distances = pairwise_distances(data, centroids)
        labels = distances.argmin(axis=1)
        inertia = float(np.sum(distances[np.arange(data.shape[0]), labels] ** 2))
        counts = np.bincount(labels, minlength=k)
        
        return ClusteringResult(
            centroids=centroids,
            counts=counts,
            labels=labels,
            inertia=inertia,
            iterations=iterations,
            converged=converged,
        )
    
    def _update_centroids(self, data: np.ndarray, labels: np.ndarray,
                          centroids: np.ndarray) -> np.ndarray:
        new_centroids = centroids.copy()
        for index in range(centroids.shape[0]):
            members = data[labels == index]
            if members.shape[0] == 0:
                # Empty cluster keeps its previous centroid
                continue
            if self.circular_hue_mean:
                hue = circular_mean(members[:, 0])
            else:
                hue = float(members[:, 0].mean())
            new_centroids[index] = (hue, members[:, 1].mean(), members[:, 2].mean())
        return new_centroids
