"""
Color Transformation Engine.

Maps one PixelBuffer to a new one under a ColorModel:
- DICHROMATIC: 3x3 matrix in gamma space
- CANINE: cone/rod model in linear light with scotopic blending

Every pixel is computed independently, so the whole buffer is evaluated
as one vectorized numpy pass. Alpha is copied untouched and every color
channel is rounded (half to even) and clamped to [0, 255].

Applying CANINE to its own output is not the identity and does not
model any second-order effect. Do not chain it.
"""

from __future__ import annotations

from typing import Tuple, Union
import numpy as np
from numpy.typing import NDArray

from dogvision.core.contracts import CHANNELS, ColorModel, PixelBuffer
from dogvision.transforms import color_models as cm


def supported_models() -> Tuple[ColorModel, ...]:
    return tuple(_KERNELS)


def scotopic_blend_factor(
    luminance: Union[float, NDArray[np.float64]],
) -> Union[float, NDArray[np.float64]]:
    """
    Rod blend weight for a linear-light luminance.

    Below the scotopic threshold the weight grows linearly as the scene
    darkens, capped at SCOTOPIC_MAX_BLEND. At or above it, zero.

    Args:
        luminance: BT.709 luminance in [0, 1], scalar or array

    Returns:
        Blend factor(s) in [0, SCOTOPIC_MAX_BLEND]
    """
    lum = np.asarray(luminance, dtype=np.float64)
    factor = np.where(
        lum < cm.SCOTOPIC_THRESHOLD,
        np.minimum(cm.SCOTOPIC_MAX_BLEND, (cm.SCOTOPIC_THRESHOLD - lum) * cm.SCOTOPIC_GAIN),
        0.0,
    )
    return float(factor) if factor.ndim == 0 else factor


def _dichromatic(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    # Gamma-encoded values go straight through the matrix
    return rgb @ cm.DEUTERANOPIA_MATRIX.T


def _canine(rgb: NDArray[np.float64]) -> NDArray[np.float64]:
    linear = (rgb / 255.0) ** cm.GAMMA

    # Columns: S-cone, L-cone, rod
    responses = linear @ cm.CANINE_RESPONSE_MATRIX.T
    display = responses[:, :2] @ cm.CONE_TO_DISPLAY.T

    blend = scotopic_blend_factor(linear @ cm.LUMINANCE_WEIGHTS)
    rod_tint = responses[:, 2] * cm.ROD_TINT_SCALE
    display = (
        display * (1.0 - blend)[:, np.newaxis]
        + (rod_tint * blend)[:, np.newaxis] * cm.ROD_CHANNEL_BIAS
    )

    return np.maximum(display, 0.0) ** (1.0 / cm.GAMMA) * 255.0


_KERNELS = {
    ColorModel.DICHROMATIC: _dichromatic,
    ColorModel.CANINE: _canine,
}


def _to_channel_bytes(values: NDArray[np.float64]) -> NDArray[np.uint8]:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def transform(buffer: PixelBuffer, model: ColorModel = ColorModel.CANINE) -> PixelBuffer:
    """
    Apply a color simulation to a pixel buffer.

    Args:
        buffer: RGBA input; never modified
        model: Simulation variant

    Returns:
        Newly allocated PixelBuffer with the same dimensions

    Raises:
        InvalidBufferShape: If the byte length is not width * height * 4
        ValueError: If the model is not a ColorModel
    """
    buffer.validate()

    kernel = _KERNELS.get(model)
    if kernel is None:
        raise ValueError(f"Unsupported color model: {model!r}")

    pixels = buffer.data.reshape(-1, CHANNELS)
    out = np.empty_like(pixels)
    out[:, :3] = _to_channel_bytes(kernel(pixels[:, :3].astype(np.float64)))
    out[:, 3] = pixels[:, 3]

    return PixelBuffer(buffer.width, buffer.height, out.reshape(-1))
