"""
Value types shared by the color stages.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class HSVSample:
    """A single HSV color; hue is a fraction of the circle in [0, 1)."""
    hue: float
    saturation: float
    value: float
    
    @property
    def hue_degrees(self) -> float:
        # Rounded so that a degree boundary stored as a fraction maps back onto itself
        return round(self.hue * 360.0, 9)
    
    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.hue, self.saturation, self.value)
    
    @classmethod
    def from_degrees(cls, hue_degrees: float, saturation: float, value: float) -> "HSVSample":
        """Build a sample from a hue given in degrees."""
        return cls((hue_degrees % 360.0) / 360.0, saturation, value)


def samples_to_array(samples) -> np.ndarray:
    """Stack HSVSample objects (or h, s, v tuples) into an (N, 3) float64 array."""
    rows = [s.as_tuple() if isinstance(s, HSVSample) else tuple(s) for s in samples]
    if not rows:
        return np.empty((0, 3), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


def array_to_samples(array: np.ndarray) -> list:
    """Unstack an (N, 3) h, s, v array into HSVSample objects."""
    return [HSVSample(float(h), float(s), float(v)) for h, s, v in np.asarray(array)]


@dataclass(frozen=True)
class PaletteEntry:
    """A named aura color with its hue band and minimum saturation/brightness."""
    id: str
    name: str
    hue_range: Tuple[float, float]  # inclusive, degrees
    min_saturation: float
    min_value: float
    hex_value: str  # reference swatch; not used by classification
    
    @property
    def midpoint(self) -> float:
        lo, hi = self.hue_range
        return (lo + hi) / 2
    
    def hue_in_range(self, hue_degrees: float) -> bool:
        lo, hi = self.hue_range
        return lo <= hue_degrees <= hi
    
    def contains(self, color: HSVSample) -> bool:
        """Full primary predicate: hue band plus saturation and value minimums."""
        return (
            self.hue_in_range(color.hue_degrees)
            and color.saturation >= self.min_saturation
            and color.value >= self.min_value
        )


@dataclass
class ClassifiedColor:
    """A centroid mapped onto the palette, with its raw weight."""
    entry: PaletteEntry
    weight: float = 0.0
    matched_by: str = "range"  # "range" or "fallback"
    centroid: Optional[HSVSample] = None
    population: int = 0
