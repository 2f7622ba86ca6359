"""
Aura Engine Schemas
Pydantic models for palette catalog files and detection results.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from aura_engine.services.colors.models import PaletteEntry


# ============================================================================
# PALETTE CATALOG SCHEMAS
# ============================================================================

class PaletteEntrySchema(BaseModel):
    """One palette entry as stored in a catalog file."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    
    id: str = Field(..., min_length=1, description="Stable identifier, e.g. aura_red")
    name: str = Field(..., min_length=1, description="Display name")
    hue_range: Tuple[float, float] = Field(
        ...,
        alias="hueRange",
        description="Inclusive hue band in degrees as [lo, hi]"
    )
    saturation_min: float = Field(..., alias="saturationMin", ge=0.0, le=1.0)
    brightness_min: float = Field(..., alias="brightnessMin", ge=0.0, le=1.0)
    hex_value: str = Field(
        ...,
        alias="hexValue",
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Reference swatch in format #RRGGBB"
    )
    
    @field_validator("hue_range")
    @classmethod
    def check_hue_range(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        lo, hi = value
        if not (0.0 <= lo <= hi <= 360.0):
            raise ValueError(f"Hue range must satisfy 0 <= lo <= hi <= 360, got {value}")
        return value
    
    def to_entry(self) -> PaletteEntry:
        return PaletteEntry(
            id=self.id,
            name=self.name,
            hue_range=(float(self.hue_range[0]), float(self.hue_range[1])),
            min_saturation=self.saturation_min,
            min_value=self.brightness_min,
            hex_value=self.hex_value.upper(),
        )


class PaletteFile(BaseModel):
    """A palette catalog: entries in classification order."""
    colors: List[PaletteEntrySchema] = Field(..., min_length=1)
    
    @model_validator(mode="after")
    def check_unique_ids(self) -> "PaletteFile":
        ids = [entry.id for entry in self.colors]
        if len(ids) != len(set(ids)):
            raise ValueError("Palette entry ids must be unique")
        return self


# ============================================================================
# DETECTION RESULT
# ============================================================================

class AuraDetectionResult(BaseModel):
    """Outcome of one successful detection; immutable once built."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
    
    detection_id: str = Field(..., description="Identifier for log correlation")
    timestamp: datetime = Field(default_factory=datetime.now)
    primary_color: PaletteEntry
    secondary_color: Optional[PaletteEntry] = None
    tertiary_color: Optional[PaletteEntry] = None
    dominance_percentages: List[float] = Field(
        ...,
        min_length=1,
        max_length=3,
        description="Percentages parallel to the dominant colors, summing to 100"
    )
    country_code: str = Field(..., min_length=1)
    image_data: Optional[bytes] = Field(None, description="Retained JPEG bytes, if requested")
    mode: str = Field("face_aura", description="Detection mode used")
    
    @model_validator(mode="after")
    def check_percentages(self) -> "AuraDetectionResult":
        if len(self.dominance_percentages) != len(self.dominant_colors):
            raise ValueError("One percentage is required per dominant color")
        if abs(sum(self.dominance_percentages) - 100.0) > 0.01:
            raise ValueError(
                f"Dominance percentages must sum to 100, got {sum(self.dominance_percentages)}"
            )
        return self
    
    @property
    def dominant_colors(self) -> List[PaletteEntry]:
        colors = [self.primary_color]
        if self.secondary_color is not None:
            colors.append(self.secondary_color)
        if self.tertiary_color is not None:
            colors.append(self.tertiary_color)
        return colors
    
    @property
    def pairs(self) -> List[Tuple[PaletteEntry, float]]:
        """(palette entry, percentage) pairs in dominance order."""
        return list(zip(self.dominant_colors, self.dominance_percentages))
    
    def summary(self) -> dict:
        """Plain-data view without the image bytes."""
        return {
            "detection_id": self.detection_id,
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode,
            "country_code": self.country_code,
            "colors": [
                {"id": entry.id, "name": entry.name, "hex": entry.hex_value,
                 "percentage": round(pct, 2)}
                for entry, pct in self.pairs
            ],
        }
