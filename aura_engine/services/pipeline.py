"""
Aura Detection Pipeline
Orchestrates sampling, clustering, classification and weighting into a result.

The pipeline is a plain blocking call. Callers that must stay responsive
(UI threads, event loops) dispatch it to a worker themselves.
"""
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

import numpy as np

from aura_engine.config import config
from aura_engine.exceptions import InsufficientSignal
from aura_engine.schemas import AuraDetectionResult
from aura_engine.services.colors.clustering import KMeansClusterer
from aura_engine.services.colors.dominance import DominanceEstimator
from aura_engine.services.colors.models import ClassifiedColor, PaletteEntry
from aura_engine.services.colors.palette import PaletteClassifier
from aura_engine.services.colors.sampling import PixelSampler
from aura_engine.services.imaging import (
    RegionOfInterest, crop_region, encode_jpeg, get_image_dimensions, to_rgb_u8
)
from aura_engine.services.observability import performance_monitor
from aura_engine.utils.ids import generate_detection_id
from aura_engine.utils.logging import get_logger


class DetectionStage(str, Enum):
    """Pipeline states; FAILED is reachable from every working stage."""
    IDLE = "idle"
    SAMPLING = "sampling"
    CLUSTERING = "clustering"
    CLASSIFYING = "classifying"
    WEIGHTING = "weighting"
    DONE = "done"
    FAILED = "failed"


class AuraMode(str, Enum):
    """Detection modes offered by the capture flow."""
    FACE_AURA = "face_aura"      # region around a face, grown before sampling
    OUTFIT_AURA = "outfit_aura"  # whole frame, duplicate colors collapsed


class AuraDetector(Protocol):
    """Anything that can turn a bitmap into an aura result."""
    
    def detect(self,
               bitmap: np.ndarray,
               k: Optional[int] = None,
               region: Optional[RegionOfInterest] = None,
               country_code: Optional[str] = None,
               image_bytes: Optional[bytes] = None,
               retain_image: bool = False) -> AuraDetectionResult:
        ...


class AuraDetectionPipeline:
    """Single concrete aura detector: sample → cluster → classify → weight."""
    
    def __init__(self,
                 palette: Optional[Sequence[PaletteEntry]] = None,
                 sampler: Optional[PixelSampler] = None,
                 rng_factory: Optional[Callable[[], np.random.Generator]] = None,
                 n_init: Optional[int] = None,
                 circular_hue_mean: Optional[bool] = None,
                 max_iterations: Optional[int] = None,
                 dominance_strategy: str = "rank",
                 mode: AuraMode = AuraMode.FACE_AURA,
                 region_expansion: Optional[float] = None):
        """
        Args:
            palette: Ordered palette catalog (process default when omitted)
            sampler: Pixel sampler (config defaults when omitted)
            rng_factory: Builds the seeding generator for each call
            n_init: K-means restarts per call
            circular_hue_mean: Average centroid hue on the circle
            max_iterations: Lloyd iteration cap
            dominance_strategy: "rank" or "population"
            mode: FACE_AURA grows the region of interest; OUTFIT_AURA de-duplicates colors
            region_expansion: Growth factor for FACE_AURA regions
        """
        self.classifier = PaletteClassifier(palette)
        self.sampler = sampler or PixelSampler()
        self.rng_factory = rng_factory or np.random.default_rng
        self.n_init = n_init
        self.circular_hue_mean = circular_hue_mean
        self.max_iterations = config.MAX_ITERATIONS if max_iterations is None else max_iterations
        self.dominance = DominanceEstimator(dominance_strategy)
        self.mode = AuraMode(mode)
        self.region_expansion = (
            config.REGION_EXPANSION if region_expansion is None else region_expansion
        )
    
    def detect(self,
               bitmap: np.ndarray,
               k: Optional[int] = None,
               region: Optional[RegionOfInterest] = None,
               country_code: Optional[str] = None,
               image_bytes: Optional[bytes] = None,
               retain_image: bool = False) -> AuraDetectionResult:
        """
        Detect the dominant aura colors of a bitmap.
        
        Args:
            bitmap: Decoded grayscale/RGB/RGBA uint8 image
            k: Number of clusters to extract (conventionally 3)
            region: Optional region of interest from an upstream detector
            country_code: Locale code passed through to the result
            image_bytes: Image bytes to retain verbatim in the result
            retain_image: Encode the analysed region as JPEG when no bytes are given
            
        Returns:
            AuraDetectionResult with 1-3 colors ordered by dominance
            
        Raises:
            InsufficientSignal: Too few chromatic samples to cluster
            ValueError: Invalid k, bitmap or region
        """
        if k is None:
            k = config.DEFAULT_K
        if not config.validate_k(k):
            raise ValueError(f"k must be a positive integer, got {k!r}")
        
        detection_id = generate_detection_id()
        log = get_logger()
        log_extra = {"detection_id": detection_id, "mode": self.mode.value, "k": k}
        log.info("Starting aura detection", extra=log_extra)
        
        stage = DetectionStage.SAMPLING
        try:
            image = self._select_region(to_rgb_u8(bitmap), region)
            with performance_monitor("sampling"):
                samples = self.sampler.sample(image)
            if samples.shape[0] == 0:
                raise InsufficientSignal(stage.value, 0)
            
            stage = DetectionStage.CLUSTERING
            clusterer = KMeansClusterer(
                rng=self.rng_factory(),
                n_init=self.n_init,
                circular_hue_mean=self.circular_hue_mean,
            )
            with performance_monitor("clustering", sample_count=samples.shape[0], cluster_count=k):
                clustering = clusterer.fit(samples, k, self.max_iterations)
            if clustering.k == 0:
                raise InsufficientSignal(stage.value, int(samples.shape[0]), k)
            
            stage = DetectionStage.CLASSIFYING
            with performance_monitor("classification", cluster_count=clustering.k):
                classified = self._classify(clustering)
            
            stage = DetectionStage.WEIGHTING
            percentages = self.dominance.weight(
                [c.entry for c in classified], [c.population for c in classified]
            )
            for color, pct in zip(classified, percentages):
                color.weight = pct
            
        except InsufficientSignal as e:
            log.warning(f"Aura detection failed: {e}",
                        extra={**log_extra, "stage": DetectionStage.FAILED.value,
                               "failed_stage": stage.value})
            raise
        
        if image_bytes is None and retain_image:
            image_bytes = encode_jpeg(image)
        
        entries = [c.entry for c in classified]
        result = AuraDetectionResult(
            detection_id=detection_id,
            primary_color=entries[0],
            secondary_color=entries[1] if len(entries) > 1 else None,
            tertiary_color=entries[2] if len(entries) > 2 else None,
            dominance_percentages=percentages,
            country_code=country_code or config.DEFAULT_COUNTRY_CODE,
            image_data=image_bytes,
            mode=self.mode.value,
        )
        
        log.info(
            "Aura detection complete: " + ", ".join(
                f"{c.entry.id}={c.weight:.2f}%" for c in classified
            ),
            extra={**log_extra, "stage": DetectionStage.DONE.value,
                   "sample_count": int(samples.shape[0])}
        )
        return result
    
    def _select_region(self, image: np.ndarray,
                       region: Optional[RegionOfInterest]) -> np.ndarray:
        if region is None:
            return image
        if self.mode is AuraMode.FACE_AURA and self.region_expansion != 1.0:
            region = region.expand(self.region_expansion, get_image_dimensions(image))
        return crop_region(image, region)
    
    def _classify(self, clustering) -> List[ClassifiedColor]:
        # Most populated cluster first; stable sort keeps clustering order on ties
        order = np.argsort(-clustering.counts, kind="stable")
        centroids = clustering.centroid_samples()
        
        classified = []
        for index in order:
            centroid = centroids[index]
            entry, rule = self.classifier.classify_detailed(centroid)
            classified.append(ClassifiedColor(
                entry=entry,
                matched_by=rule,
                centroid=centroid,
                population=int(clustering.counts[index]),
            ))
        
        if self.mode is AuraMode.OUTFIT_AURA:
            classified = _unique_by_id(classified)
            # Merged populations can reorder the entries
            classified.sort(key=lambda c: -c.population)
        
        return classified[:config.MAX_RESULT_COLORS]


def _unique_by_id(classified: List[ClassifiedColor]) -> List[ClassifiedColor]:
    """
    Drop repeated palette entries, keeping the first occurrence.
    
    The population of each dropped duplicate is added to the kept entry.
    """
    unique = {}
    for color in classified:
        kept = unique.get(color.entry.id)
        if kept is None:
            unique[color.entry.id] = replace(color)
        else:
            kept.population += color.population
    return list(unique.values())


def detect_aura(bitmap: np.ndarray, k: int = 3, **kwargs) -> AuraDetectionResult:
    """Run a one-off detection with a default pipeline."""
    return AuraDetectionPipeline().detect(bitmap, k=k, **kwargs)
