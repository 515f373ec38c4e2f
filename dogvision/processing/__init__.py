"""
Still image processing.

Responsibilities:
- Decoding uploaded image bytes
- One-shot color transform
- Encoding results for display
"""

from .codec import decode_image, encode_image, format_for_path, to_data_url
from .static_image import StaticImageProcessor
