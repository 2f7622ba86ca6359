"""
Aura Engine Imaging Utilities
Bitmap normalization, region-of-interest handling, and image byte I/O.
"""
import io
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from aura_engine.config import config


@dataclass(frozen=True)
class RegionOfInterest:
    """Axis-aligned pixel rectangle, origin at the top-left corner."""
    x: int
    y: int
    width: int
    height: int
    
    def expand(self, factor: float, image_size: Tuple[int, int]) -> "RegionOfInterest":
        """
        Grow the region around its centre and clamp it to the image.
        
        Args:
            factor: Scale applied to width and height (1.5 grows by 50%)
            image_size: (width, height) of the source bitmap
            
        Returns:
            Expanded region, never extending past the image bounds
        """
        image_w, image_h = image_size
        expanded_w = self.width * factor
        expanded_h = self.height * factor
        expanded_x = max(0.0, self.x - (expanded_w - self.width) / 2)
        expanded_y = max(0.0, self.y - (expanded_h - self.height) / 2)
        
        return RegionOfInterest(
            x=int(expanded_x),
            y=int(expanded_y),
            width=max(1, int(min(expanded_w, image_w - expanded_x))),
            height=max(1, int(min(expanded_h, image_h - expanded_y))),
        )


def to_rgb_u8(bitmap: np.ndarray) -> np.ndarray:
    """
    Normalize a decoded bitmap to an (H, W, 3) uint8 RGB array.
    
    Accepts grayscale (H, W), RGB (H, W, 3) and RGBA (H, W, 4). RGBA pixels
    are premultiplied by alpha so transparent areas read as black.
    
    Raises:
        ValueError: For empty bitmaps or unsupported channel layouts
    """
    image = np.asarray(bitmap)
    if image.size == 0:
        raise ValueError("Empty bitmap")
    
    if image.dtype != np.uint8:
        if np.issubdtype(image.dtype, np.floating) and image.max() <= 1.0:
            image = image * 255.0
        image = np.clip(image, 0, 255).astype(np.uint8)
    
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
    
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported bitmap shape: {image.shape}")
    
    if image.shape[2] == 4:
        alpha = image[:, :, 3:4].astype(np.float32) / 255.0
        rgb = image[:, :, :3].astype(np.float32) * alpha
        return np.round(rgb).astype(np.uint8)
    
    return image


def crop_region(bitmap: np.ndarray, region: RegionOfInterest) -> np.ndarray:
    """
    Crop a bitmap to a region of interest, clipped to the image bounds.
    
    Raises:
        ValueError: If the region does not overlap the bitmap
    """
    height, width = bitmap.shape[:2]
    x0 = max(0, region.x)
    y0 = max(0, region.y)
    x1 = min(width, region.x + region.width)
    y1 = min(height, region.y + region.height)
    
    if x1 <= x0 or y1 <= y0:
        raise ValueError(
            f"Region {region} does not overlap image of size {width}×{height}"
        )
    
    return bitmap[y0:y1, x0:x1]


def get_image_dimensions(bitmap: np.ndarray) -> Tuple[int, int]:
    """
    Get image width and height.
    
    Args:
        bitmap: Input image
        
    Returns:
        Tuple of (width, height)
    """
    height, width = bitmap.shape[:2]
    return width, height


def decode_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode JPEG/PNG bytes into an RGB uint8 array.
    
    Raises:
        ValueError: If the bytes are not a decodable image
    """
    if not data:
        raise ValueError("Empty image data")
    
    try:
        # Decode using PIL for safety
        pil_image = Image.open(io.BytesIO(data))
        if pil_image.mode != 'RGB':
            pil_image = pil_image.convert('RGB')
        return np.array(pil_image)
    except Exception as e:
        raise ValueError(f"Failed to decode image: {str(e)}")


def encode_jpeg(bitmap: np.ndarray, quality: Optional[int] = None) -> bytes:
    """
    Encode an RGB bitmap as JPEG bytes for the result's retained image.
    
    Args:
        bitmap: RGB uint8 image
        quality: JPEG quality 1-100 (default from config)
    """
    if quality is None:
        quality = config.JPEG_QUALITY
    if not config.validate_jpeg_quality(quality):
        raise ValueError(f"Invalid JPEG quality: {quality}")
    
    bgr = cv2.cvtColor(to_rgb_u8(bitmap), cv2.COLOR_RGB2BGR)
    success, buffer = cv2.imencode('.jpg', bgr, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not success:
        raise ValueError("Failed to encode JPEG")
    return buffer.tobytes()
