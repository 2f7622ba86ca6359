"""
RGB <-> HSV conversion.

Hue is kept as a fraction of the color circle in [0, 1); palette ranges are in
degrees and are compared through HSVSample.hue_degrees.
"""
from typing import Tuple

import numpy as np

from .models import HSVSample


def rgb_to_hsv(r: float, g: float, b: float) -> HSVSample:
    """
    Convert one RGB triple (channels in [0, 1]) to HSV.
    
    Achromatic input (max == min) yields hue 0 and saturation 0.
    """
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c
    
    hue = 0.0
    saturation = 0.0
    value = max_c
    
    if delta != 0:
        saturation = delta / max_c
        
        if r == max_c:
            hue = (g - b) / delta
        elif g == max_c:
            hue = 2 + (b - r) / delta
        else:
            hue = 4 + (r - g) / delta
        
        hue *= 60
        if hue < 0:
            hue += 360
    
    fraction = hue / 360.0
    if fraction >= 1.0:
        fraction = 0.0
    return HSVSample(fraction, saturation, value)


def rgb_array_to_hsv(pixels: np.ndarray) -> np.ndarray:
    """
    Vectorised rgb_to_hsv over an (N, 3) array.
    
    Args:
        pixels: RGB pixels, uint8 in [0, 255] or float in [0, 1]
        
    Returns:
        (N, 3) float64 array of h, s, v with h in [0, 1)
    """
    rgb = np.asarray(pixels)
    if rgb.dtype == np.uint8:
        rgb = rgb.astype(np.float64) / 255.0
    else:
        rgb = rgb.astype(np.float64)
    rgb = rgb.reshape(-1, 3)
    
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    max_c = rgb.max(axis=1)
    min_c = rgb.min(axis=1)
    delta = max_c - min_c
    chromatic = delta != 0
    safe_delta = np.where(chromatic, delta, 1.0)
    
    # Same precedence as the scalar version: red, then green, then blue
    hue = np.where(
        r == max_c,
        (g - b) / safe_delta,
        np.where(g == max_c, 2 + (b - r) / safe_delta, 4 + (r - g) / safe_delta),
    )
    hue = np.where(chromatic, hue * 60.0, 0.0)
    hue = np.where(hue < 0, hue + 360.0, hue) / 360.0
    hue[hue >= 1.0] = 0.0
    
    saturation = np.where(chromatic, delta / np.where(max_c == 0, 1.0, max_c), 0.0)
    
    return np.stack([hue, saturation, max_c], axis=1)


def hsv_to_rgb(color: HSVSample) -> Tuple[float, float, float]:
    """Convert an HSVSample back to RGB floats in [0, 1]."""
    h = (color.hue % 1.0) * 6.0
    s, v = color.saturation, color.value
    i = int(h) % 6
    f = h - int(h)
    p = v * (1 - s)
    q = v * (1 - s * f)
    t = v * (1 - s * (1 - f))
    return [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ][i]


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: #{hex_color}")
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hex(rgb_u8) -> str:
    """Convert an RGB uint8 triple to hex color string."""
    r, g, b = [int(x) for x in rgb_u8]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_hsv(hex_color: str) -> HSVSample:
    """Convert a hex swatch to HSV."""
    r, g, b = hex_to_rgb(hex_color)
    return rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
