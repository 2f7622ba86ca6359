"""
Aura palette catalog and classification.

Classification walks the palette in declaration order and returns the first
entry whose hue band, saturation minimum and value minimum all admit the color.
Colors that match nothing fall back to the entry whose hue-band midpoint is
closest on a linear (non-circular) degree scale, so every color gets a name.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from loguru import logger

from aura_engine.config import config
from aura_engine.schemas import PaletteFile
from .models import HSVSample, PaletteEntry


RED = PaletteEntry("aura_red", "Red", (0.0, 20.0), 0.5, 0.4, "#FF0000")
ORANGE = PaletteEntry("aura_orange", "Orange", (21.0, 40.0), 0.5, 0.4, "#FF8800")
YELLOW = PaletteEntry("aura_yellow", "Yellow", (41.0, 70.0), 0.4, 0.5, "#FFFF00")
GREEN = PaletteEntry("aura_green", "Green", (71.0, 150.0), 0.3, 0.3, "#00FF00")
BLUE = PaletteEntry("aura_blue", "Blue", (151.0, 240.0), 0.3, 0.3, "#0088FF")
PURPLE = PaletteEntry("aura_purple", "Purple", (241.0, 290.0), 0.4, 0.3, "#8800FF")
PINK = PaletteEntry("aura_pink", "Pink", (291.0, 330.0), 0.4, 0.5, "#FF00FF")
# Spans the whole wheel; told apart from the hue bands only by brightness
WHITE = PaletteEntry("aura_white", "White", (0.0, 360.0), 0.0, 0.8, "#FFFFFF")

# Order is part of the classification contract
DEFAULT_PALETTE: Tuple[PaletteEntry, ...] = (
    RED, ORANGE, YELLOW, GREEN, BLUE, PURPLE, PINK, WHITE
)


def load_palette(path: Union[str, Path]) -> Tuple[PaletteEntry, ...]:
    """
    Load a palette catalog from JSON.
    
    Accepts either {"colors": [...]} or a bare list of entries using the
    camelCase field names (hueRange, saturationMin, brightnessMin, hexValue).
    Unknown fields such as localized descriptions are ignored.
    
    Raises:
        pydantic.ValidationError: If an entry is malformed
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"colors": raw}
    catalog = PaletteFile.model_validate(raw)
    entries = tuple(schema.to_entry() for schema in catalog.colors)
    logger.info(f"Loaded palette with {len(entries)} entries from {path}")
    return entries


@lru_cache(maxsize=1)
def get_default_palette() -> Tuple[PaletteEntry, ...]:
    """Palette configured for this process (read-only, loaded once)."""
    if config.PALETTE_PATH:
        return load_palette(config.PALETTE_PATH)
    return DEFAULT_PALETTE


class PaletteClassifier:
    """Maps HSV colors onto a fixed, ordered palette."""
    
    def __init__(self, palette: Optional[Sequence[PaletteEntry]] = None):
        self.palette: Tuple[PaletteEntry, ...] = tuple(
            get_default_palette() if palette is None else palette
        )
        if not self.palette:
            raise ValueError("Palette must contain at least one entry")
    
    def match_range(self, color: HSVSample) -> Optional[PaletteEntry]:
        """First entry whose full predicate admits the color, if any."""
        for entry in self.palette:
            if entry.contains(color):
                return entry
        return None
    
    def closest_by_hue(self, hue_degrees: float) -> PaletteEntry:
        """Entry whose hue-band midpoint is nearest, using linear distance."""
        closest = self.palette[0]
        min_distance = float("inf")
        for entry in self.palette:
            distance = abs(hue_degrees - entry.midpoint)
            if distance < min_distance:
                min_distance = distance
                closest = entry
        return closest
    
    def classify_detailed(self, color: HSVSample) -> Tuple[PaletteEntry, str]:
        """Classify and report which rule matched ("range" or "fallback")."""
        entry = self.match_range(color)
        if entry is not None:
            return entry, "range"
        
        entry = self.closest_by_hue(color.hue_degrees)
        logger.debug(f"No palette range admits HSV=({color.hue_degrees:.1f}°, "
                     f"{color.saturation:.3f}, {color.value:.3f}); "
                     f"nearest midpoint is {entry.id}")
        return entry, "fallback"
    
    def classify(self, color: HSVSample) -> PaletteEntry:
        """Classify a color; always returns a palette entry."""
        return self.classify_detailed(color)[0]
    
    def classify_all(self, colors: Sequence[HSVSample]) -> List[PaletteEntry]:
        return [self.classify(color) for color in colors]
