"""
Attribute deriver: dominant color of a product photo.

The external analyzer is asked first; when it has no answer the color is
computed locally with Pillow. A missing or unreadable image yields "N/A"
and never blocks generation of the sheet.
"""

from io import BytesIO
from typing import Optional, Protocol
import structlog

from PIL import Image, ImageOps

from exceptions import ColorDerivationError
from integrations.vision_client import VisionClient
from models.pipeline import ImageReference
from models.product_sheet import NOT_AVAILABLE

logger = structlog.get_logger(__name__)

# Downscale before quantizing; color-thief style sampling
THUMBNAIL_SIZE = (150, 150)
PALETTE_SIZE = 5


class ColorAnalyzer(Protocol):
    """External source of a dominant color."""

    def dominant_color(self, image: ImageReference) -> Optional[str]:
        ...


def format_rgb(rgb: tuple[int, int, int]) -> str:
    """(12, 34, 56) → 'rgb(12, 34, 56)'"""
    r, g, b = rgb
    return f"rgb({r}, {g}, {b})"


def compute_dominant_color(data: bytes) -> tuple[int, int, int]:
    """
    Most frequent color of an image after median-cut quantization.

    Args:
        data: Encoded image (JPEG, PNG, WebP, ...)

    Returns:
        (r, g, b)

    Raises:
        OSError / ValueError from Pillow if the image cannot be decoded
    """
    with Image.open(BytesIO(data)) as img:
        rgb = ImageOps.exif_transpose(img).convert("RGB")

    rgb.thumbnail(THUMBNAIL_SIZE)
    quantized = rgb.quantize(colors=PALETTE_SIZE, method=Image.Quantize.MEDIANCUT)

    palette = quantized.getpalette()
    counts = quantized.getcolors()
    if not palette or not counts:
        raise ValueError("Image has no pixels")

    _, index = max(counts)
    r, g, b = palette[index * 3:index * 3 + 3]
    return r, g, b


class ColorService:
    """
    Derive a representative color for a product.

    Usage:
        service = ColorService(analyzer=VisionClient())
        color = service.derive(image)  # "rgb(24, 40, 92)" or "N/A"
    """

    def __init__(self, analyzer: Optional[ColorAnalyzer] = None):
        self.analyzer = analyzer

    def derive(self, image: Optional[ImageReference]) -> str:
        """
        Dominant color descriptor for an image.

        Args:
            image: Product photo, or None if none was uploaded

        Returns:
            External color if available, else local computation, else "N/A"
        """
        if image is None:
            return NOT_AVAILABLE

        external = self._from_analyzer(image)
        if external:
            return external

        try:
            return self.local_color(image)
        except ColorDerivationError as e:
            logger.warning(
                "dominant_color_unavailable",
                product_id=image.product_id,
                error=e.message
            )
            return NOT_AVAILABLE

    def local_color(self, image: ImageReference) -> str:
        """
        Compute the color with Pillow.

        Raises:
            ColorDerivationError: If the image cannot be decoded
        """
        try:
            color = format_rgb(compute_dominant_color(image.data))
        except Exception as e:
            raise ColorDerivationError(image.product_id, f"Could not read image: {e}") from e

        logger.debug("dominant_color_computed", product_id=image.product_id, color=color)
        return color

    def _from_analyzer(self, image: ImageReference) -> Optional[str]:
        if self.analyzer is None:
            return None
        try:
            return self.analyzer.dominant_color(image)
        except Exception as e:
            logger.warning(
                "color_analyzer_failed",
                product_id=image.product_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return None


def get_color_service() -> ColorService:
    """ColorService wired to the configured vision endpoint."""
    return ColorService(analyzer=VisionClient())
