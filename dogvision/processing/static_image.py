"""
Static Image Processor.

One-shot path: decode an uploaded image, transform it once, and hand
back both buffers so the presentation layer can show a before/after
comparison. Decode failures are returned in the result, never raised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from dogvision.core.contracts import ColorModel, PixelBuffer, ProcessingResult
from dogvision.core.errors import DecodeError
from dogvision.processing.codec import decode_image, encode_image, to_data_url
from dogvision.transforms.color_transform import transform


class StaticImageProcessor:
    """
    Transforms single encoded images.

    The caller is expected to have checked that the input is declared as
    an image; anything that still fails to decode comes back as a
    ProcessingResult with success=False and a DecodeError.
    """

    def __init__(self, model: ColorModel = ColorModel.CANINE, image_format: str = "PNG"):
        """
        Initialize the processor.

        Args:
            model: Default simulation model
            image_format: Default format for encode()
        """
        self.model = model
        self.image_format = image_format

    def process(
        self,
        encoded_image: bytes,
        model: Optional[ColorModel] = None,
    ) -> ProcessingResult:
        """
        Decode and transform one image.

        Args:
            encoded_image: Compressed image bytes
            model: Override for the processor's default model

        Returns:
            ProcessingResult with original and transformed buffers
        """
        model = model or self.model

        try:
            original = decode_image(encoded_image)
        except DecodeError as e:
            logger.warning(f"Image decode failed: {e}")
            return ProcessingResult(model=model, success=False, error=e)

        transformed = transform(original, model)
        logger.debug(
            f"Processed {original.width}x{original.height} image with {model.value} model"
        )
        return ProcessingResult(original=original, transformed=transformed, model=model)

    def process_file(
        self,
        path: Union[str, Path],
        model: Optional[ColorModel] = None,
    ) -> ProcessingResult:
        """Read an image file and process it."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            error = DecodeError(f"Could not read {path}: {e}")
            logger.warning(str(error))
            return ProcessingResult(model=model or self.model, success=False, error=error)

        return self.process(data, model)

    def encode(self, buffer: PixelBuffer, image_format: Optional[str] = None) -> bytes:
        """Encode a buffer for display or download."""
        return encode_image(buffer, image_format or self.image_format)

    def to_data_url(self, buffer: PixelBuffer, image_format: Optional[str] = None) -> str:
        return to_data_url(buffer, image_format or self.image_format)
