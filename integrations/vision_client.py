"""
Image analysis service client.

Posts a product photo to the configured vision endpoint and reads back a
dominant color. The endpoint is optional; when it is not configured the
client answers None and the local computation is used instead.

Expected response: {"dominantColor": "rgb(12, 34, 56)"} (null when unknown)
"""

from typing import Optional
import requests
import structlog

from config import settings
from exceptions import ExternalServiceError
from models.pipeline import ImageReference

logger = structlog.get_logger(__name__)

SERVICE_NAME = "vision"


class VisionClient:
    """Dominant color from an external image analysis endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url if url is not None else settings.vision_api_url
        self.api_key = api_key if api_key is not None else settings.vision_api_key
        self.timeout = timeout or settings.external_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def dominant_color(self, image: ImageReference) -> Optional[str]:
        """
        Ask the vision endpoint for the image's dominant color.

        Args:
            image: Uploaded product photo

        Returns:
            Color descriptor, or None if not configured or not detected

        Raises:
            ExternalServiceError: If the request fails
        """
        if not self.configured:
            return None

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            logger.info("vision_request", product_id=image.product_id, size=image.size)

            response = requests.post(
                self.url,
                files={"image": (image.filename, image.data, image.content_type)},
                data={"product_id": image.product_id},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("vision_request_failed", product_id=image.product_id, error=str(e))
            raise ExternalServiceError(SERVICE_NAME, f"Image analysis failed: {e}")

        color = result.get("dominantColor") if isinstance(result, dict) else None
        logger.debug("vision_response", product_id=image.product_id, color=color)
        return color or None
