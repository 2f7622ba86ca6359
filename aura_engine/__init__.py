"""
Aura Color Engine

Dominant-color extraction and aura palette classification for still images.
"""

__version__ = "1.0.0"

from loguru import logger

# Library convention: silent until the host opts in
logger.disable("aura_engine")

from aura_engine.exceptions import AuraDetectionError, InsufficientSignal
from aura_engine.schemas import AuraDetectionResult
from aura_engine.services.colors.models import HSVSample, PaletteEntry
from aura_engine.services.colors.palette import DEFAULT_PALETTE, PaletteClassifier
from aura_engine.services.imaging import RegionOfInterest
from aura_engine.services.pipeline import (
    AuraDetectionPipeline, AuraDetector, AuraMode, DetectionStage, detect_aura
)

__all__ = [
    "AuraDetectionError",
    "InsufficientSignal",
    "AuraDetectionResult",
    "HSVSample",
    "PaletteEntry",
    "DEFAULT_PALETTE",
    "PaletteClassifier",
    "RegionOfInterest",
    "AuraDetectionPipeline",
    "AuraDetector",
    "AuraMode",
    "DetectionStage",
    "detect_aura",
]
