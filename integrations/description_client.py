"""
Text generation service client.

Sends the merged product record to the configured generation endpoint and
returns the text it writes. Optional: without a URL the client answers
None and the local template is used.

Request:  {"product": {...}, "language": "en", "dominantColor": "rgb(...)"}
Response: {"description": "..."}
"""

from typing import Mapping, Optional
import requests
import structlog

from config import settings
from exceptions import ExternalServiceError
from models.product_sheet import Language

logger = structlog.get_logger(__name__)

SERVICE_NAME = "description"


class DescriptionClient:
    """Product copy from an external text generation endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url if url is not None else settings.description_api_url
        self.api_key = api_key if api_key is not None else settings.description_api_key
        self.timeout = timeout or settings.external_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def generate(
        self,
        record: Mapping[str, str],
        language: Language,
        dominant_color: str,
    ) -> Optional[str]:
        """
        Request a description.

        Returns:
            Generated text, or None if not configured or empty

        Raises:
            ExternalServiceError: If the request fails
        """
        if not self.configured:
            return None

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "product": dict(record),
            "language": language.value,
            "dominantColor": dominant_color,
        }

        try:
            logger.info(
                "description_request",
                product_id=record.get("id"),
                language=language.value
            )

            response = requests.post(
                self.url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("description_request_failed", product_id=record.get("id"), error=str(e))
            raise ExternalServiceError(SERVICE_NAME, f"Description generation failed: {e}")

        text = result.get("description") if isinstance(result, dict) else None
        if not text or not str(text).strip():
            return None
        return str(text)
