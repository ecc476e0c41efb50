"""
VariantRenderer - Renders an image variant's adjustment chain with Pillow.
"""

import io
import logging
import os
from typing import Optional, Tuple

from PIL import Image

from .models import ImageVariant


class VariantRenderer:
    """
    Produces the derived resource of an ImageVariant.

    Reads the original's content from resource storage, applies the
    variant's adjustments in order and imports the encoded result.
    """

    OUTPUT_FORMATS = {
        'image/jpeg': ('JPEG', 'image/jpeg', '.jpg'),
        'image/png': ('PNG', 'image/png', '.png'),
        'image/gif': ('GIF', 'image/gif', '.gif'),
        'image/webp': ('WEBP', 'image/webp', '.webp'),
    }

    def __init__(
        self,
        storage,
        quality: int = 85,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize renderer.

        Args:
            storage: Resource storage (LocalResourceStorage or S3ResourceStorage)
            quality: Default encoder quality when no adjustment sets one
            logger: Optional logger instance
        """
        self.storage = storage
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def render(self, variant: ImageVariant) -> None:
        """Render variant and set its resource."""
        original = variant.original_asset.resource
        image_data = self.storage.get_content(original)

        img = Image.open(io.BytesIO(image_data))
        img.load()
        output_format, media_type, extension = self._get_output_format(original.media_type)
        img = self._convert_color_mode(img, output_format)

        save_options = {'quality': self.quality}
        for adjustment in variant.adjustments:
            img = adjustment.apply(img)
            save_options.update(adjustment.save_options())

        output = io.BytesIO()
        if output_format in ('JPEG', 'WEBP'):
            img.save(output, format=output_format, optimize=True, **save_options)
        elif output_format == 'PNG':
            img.save(output, format='PNG', optimize=True)
        else:
            img.save(output, format=output_format)

        data = output.getvalue()
        variant.resource = self.storage.import_resource(
            data,
            self._variant_filename(original.filename, extension),
            media_type
        )
        self.logger.debug(
            f"Rendered {variant!r}: {img.size[0]}x{img.size[1]}, {len(data)} bytes"
        )

    def _convert_color_mode(self, img: Image.Image, output_format: str) -> Image.Image:
        """Convert image to a color mode the output format can store."""
        if output_format != 'JPEG':
            return img
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img

    def _get_output_format(self, media_type: str) -> Tuple[str, str, str]:
        """Keep the original's format where Pillow can write it, else JPEG."""
        return self.OUTPUT_FORMATS.get(media_type.lower(), self.OUTPUT_FORMATS['image/jpeg'])

    @staticmethod
    def _variant_filename(original_filename: str, extension: str) -> str:
        root, _ = os.path.splitext(original_filename)
        return f"{root}{extension}"
