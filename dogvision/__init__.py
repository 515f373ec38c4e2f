"""
DogVision - canine color perception simulator.

Remaps the color channels of still images and live video so they
approximate how a dichromat (or a dog) sees them.

Two delivery modes:
1. One-shot transform of an uploaded still image
2. Continuous frame-by-frame transform of a live source
"""

__version__ = "0.1.0"
__author__ = "DogVision Team"

from dogvision.core.contracts import ColorModel, PixelBuffer
from dogvision.transforms.color_transform import transform

__all__ = ["ColorModel", "PixelBuffer", "transform", "__version__"]
