"""
Color Transformation Module.

Responsibilities:
- Fixed color-model constants
- Pure per-pixel RGBA remapping
- Clamp and alpha invariants, enforced once for every model
"""

from .color_transform import transform, scotopic_blend_factor, supported_models
