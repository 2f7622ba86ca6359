"""
Aura Engine Configuration
Manages environment variables and defaults for the color detection engine.
"""
import os
from typing import Optional


class Config:
    """Configuration class for the aura color engine."""
    
    # Logging
    LOG_LEVEL: str = os.environ.get("AURA_LOG_LEVEL", "INFO")
    
    # Sampling
    WORKING_SIZE: int = int(os.environ.get("AURA_WORKING_SIZE", "100"))
    BLUR_SIGMA: float = float(os.environ.get("AURA_BLUR_SIGMA", "2.0"))
    VALUE_MIN: float = float(os.environ.get("AURA_VALUE_MIN", "0.1"))
    VALUE_MAX: float = float(os.environ.get("AURA_VALUE_MAX", "0.95"))
    SATURATION_MIN: float = float(os.environ.get("AURA_SATURATION_MIN", "0.1"))
    
    # Clustering
    DEFAULT_K: int = int(os.environ.get("AURA_DEFAULT_K", "3"))
    MAX_ITERATIONS: int = int(os.environ.get("AURA_MAX_ITERATIONS", "20"))
    KMEANS_RESTARTS: int = int(os.environ.get("AURA_KMEANS_RESTARTS", "1"))
    CIRCULAR_HUE_MEAN: bool = bool(int(os.environ.get("AURA_CIRCULAR_HUE_MEAN", "0")))
    
    # Result assembly
    MAX_RESULT_COLORS: int = 3
    REGION_EXPANSION: float = float(os.environ.get("AURA_REGION_EXPANSION", "1.5"))
    DEFAULT_COUNTRY_CODE: str = os.environ.get("AURA_DEFAULT_COUNTRY_CODE", "US")
    JPEG_QUALITY: int = int(os.environ.get("AURA_JPEG_QUALITY", "70"))
    
    # Palette catalog override (JSON file); built-in palette when unset
    PALETTE_PATH: Optional[str] = os.environ.get("AURA_PALETTE_PATH")
    
    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("AURA_METRICS_ENABLED", "1")))
    
    @classmethod
    def validate_k(cls, k: int) -> bool:
        """Validate requested cluster count."""
        return isinstance(k, int) and k > 0
    
    @classmethod
    def validate_max_iterations(cls, max_iterations: int) -> bool:
        """Validate Lloyd iteration cap."""
        return 1 <= max_iterations <= 1000
    
    @classmethod
    def validate_working_size(cls, size: int) -> bool:
        """Validate sampler working resolution."""
        return 8 <= size <= 1024
    
    @classmethod
    def validate_blur_sigma(cls, sigma: float) -> bool:
        """Validate Gaussian blur sigma (0 disables smoothing)."""
        return 0.0 <= sigma <= 25.0
    
    @classmethod
    def validate_jpeg_quality(cls, quality: int) -> bool:
        """Validate JPEG quality for retained image bytes."""
        return 1 <= quality <= 100


# Global config instance
config = Config()
