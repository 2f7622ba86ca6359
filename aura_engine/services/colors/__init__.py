"""
Aura Colors Module

Provides HSV conversion, pixel sampling, k-means clustering, palette
classification and dominance weighting for aura color detection.
"""

__version__ = "1.0.0"
