"""
Pixel sampling for aura color analysis.

Reduces a bitmap of any size to a bounded set of chromatic HSV samples:
downscale, smooth, convert, then drop near-black, near-white and gray pixels.
"""
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from aura_engine.config import config
from aura_engine.services.imaging import to_rgb_u8
from .conversion import rgb_array_to_hsv


class PixelSampler:
    """Downscale + blur + HSV filter sampler."""
    
    def __init__(self,
                 working_size: Optional[int] = None,
                 blur_sigma: Optional[float] = None,
                 value_min: Optional[float] = None,
                 value_max: Optional[float] = None,
                 saturation_min: Optional[float] = None):
        """
        Args:
            working_size: Side of the square working resolution in pixels
            blur_sigma: Gaussian sigma of the smoothing pass (0 disables it)
            value_min: Samples with V <= value_min are dropped (near-black)
            value_max: Samples with V >= value_max are dropped (overexposed)
            saturation_min: Samples with S <= saturation_min are dropped (gray)
        """
        self.working_size = config.WORKING_SIZE if working_size is None else working_size
        self.blur_sigma = config.BLUR_SIGMA if blur_sigma is None else blur_sigma
        self.value_min = config.VALUE_MIN if value_min is None else value_min
        self.value_max = config.VALUE_MAX if value_max is None else value_max
        self.saturation_min = config.SATURATION_MIN if saturation_min is None else saturation_min
        
        if not config.validate_working_size(self.working_size):
            raise ValueError(f"Invalid working size: {self.working_size}")
        if not config.validate_blur_sigma(self.blur_sigma):
            raise ValueError(f"Invalid blur sigma: {self.blur_sigma}")
    
    def preprocess(self, bitmap: np.ndarray) -> np.ndarray:
        """Resize to the working resolution and apply the smoothing pass."""
        rgb = to_rgb_u8(bitmap)
        size = (self.working_size, self.working_size)
        
        # INTER_AREA averages source pixels when shrinking; LINEAR for upscaling tiny inputs
        height, width = rgb.shape[:2]
        shrinking = width >= self.working_size and height >= self.working_size
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        small = cv2.resize(rgb, size, interpolation=interpolation)
        
        if self.blur_sigma > 0:
            # Out-of-frame pixels count as black, so the frame edge fades darker
            small = cv2.GaussianBlur(
                small, (0, 0), sigmaX=self.blur_sigma, sigmaY=self.blur_sigma,
                borderType=cv2.BORDER_CONSTANT
            )
        return small
    
    def filter_samples(self, hsv: np.ndarray) -> np.ndarray:
        """Keep only chromatic, reasonably exposed samples."""
        s = hsv[:, 1]
        v = hsv[:, 2]
        keep = (v > self.value_min) & (v < self.value_max) & (s > self.saturation_min)
        return hsv[keep]
    
    def sample(self, bitmap: np.ndarray) -> np.ndarray:
        """
        Produce filtered HSV samples from a bitmap.
        
        Args:
            bitmap: Grayscale, RGB or RGBA uint8 array
            
        Returns:
            (N, 3) float64 array of h, s, v; empty when nothing survives filtering
        """
        small = self.preprocess(bitmap)
        hsv = rgb_array_to_hsv(small.reshape(-1, 3))
        samples = self.filter_samples(hsv)
        
        logger.debug(f"Sampling: {hsv.shape[0]} → {samples.shape[0]} samples "
                     f"(working_size={self.working_size}, blur_sigma={self.blur_sigma})")
        if samples.shape[0] == 0:
            logger.warning("No chromatic samples survived filtering")
        
        return samples
