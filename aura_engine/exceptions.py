"""
Aura Engine Errors

The core reports exactly one failure kind, InsufficientSignal, raised by the
pipeline when the input carries too little chromatic information. Lower layers
signal "no result" with empty outputs instead of raising.
"""
from typing import Optional


class AuraDetectionError(Exception):
    """Base class for aura detection failures."""


class InsufficientSignal(AuraDetectionError):
    """The filtered image has no usable chromatic samples, or fewer than k."""
    
    def __init__(self, stage: str, sample_count: int, k: Optional[int] = None):
        self.stage = stage
        self.sample_count = sample_count
        self.k = k
        if k is None:
            message = f"No usable color samples after filtering (stage={stage})"
        else:
            message = (
                f"Insufficient color samples for clustering: {sample_count} < k={k} "
                f"(stage={stage})"
            )
        super().__init__(message)
