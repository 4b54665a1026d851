"""
Unit tests for the external vision and text generation clients.

HTTP calls are patched; nothing leaves the process.
"""

import pytest
import requests
from unittest.mock import patch, MagicMock

from integrations.vision_client import VisionClient
from integrations.description_client import DescriptionClient
from exceptions import ExternalServiceError
from models.product_sheet import Language

from tests.factories import ImageFactory


def json_response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestVisionClient:
    """Tests for VisionClient.dominant_color()"""

    def test_not_configured(self):
        """Without a URL the client answers None and sends nothing."""
        client = VisionClient(url="")

        with patch("integrations.vision_client.requests.post") as post:
            assert client.dominant_color(ImageFactory.create()) is None
            post.assert_not_called()

    def test_returns_color(self):
        client = VisionClient(url="https://vision.test/analyze", api_key="secret")

        with patch("integrations.vision_client.requests.post") as post:
            post.return_value = json_response({"dominantColor": "rgb(1, 2, 3)"})
            color = client.dominant_color(ImageFactory.create("JK5", data=b"img"))

        assert color == "rgb(1, 2, 3)"
        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["files"]["image"][1] == b"img"
        assert kwargs["data"] == {"product_id": "JK5"}

    def test_null_color(self):
        client = VisionClient(url="https://vision.test/analyze")

        with patch("integrations.vision_client.requests.post") as post:
            post.return_value = json_response({"dominantColor": None})
            assert client.dominant_color(ImageFactory.create()) is None

    def test_request_failure(self):
        client = VisionClient(url="https://vision.test/analyze")

        with patch("integrations.vision_client.requests.post") as post:
            post.side_effect = requests.exceptions.Timeout("timed out")
            with pytest.raises(ExternalServiceError) as exc_info:
                client.dominant_color(ImageFactory.create())

        assert exc_info.value.code == "VISION_ERROR"
        assert exc_info.value.status_code == 503


class TestDescriptionClient:
    """Tests for DescriptionClient.generate()"""

    def test_not_configured(self):
        client = DescriptionClient(url="")

        assert client.generate({"id": "JK1"}, Language.EN, "N/A") is None

    def test_returns_text(self):
        client = DescriptionClient(url="https://text.test/generate")

        with patch("integrations.description_client.requests.post") as post:
            post.return_value = json_response({"description": "A navy shirt."})
            text = client.generate({"id": "JK1", "name": "Shirt"}, Language.TR, "rgb(0, 0, 80)")

        assert text == "A navy shirt."
        assert post.call_args.kwargs["json"] == {
            "product": {"id": "JK1", "name": "Shirt"},
            "language": "tr",
            "dominantColor": "rgb(0, 0, 80)",
        }

    def test_blank_text_is_none(self):
        client = DescriptionClient(url="https://text.test/generate")

        with patch("integrations.description_client.requests.post") as post:
            post.return_value = json_response({"description": "   "})
            assert client.generate({"id": "JK1"}, Language.EN, "N/A") is None

    def test_http_error(self):
        client = DescriptionClient(url="https://text.test/generate")
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")

        with patch("integrations.description_client.requests.post", return_value=response):
            with pytest.raises(ExternalServiceError) as exc_info:
                client.generate({"id": "JK1"}, Language.EN, "N/A")

        assert exc_info.value.code == "DESCRIPTION_ERROR"

    def test_invalid_json(self):
        client = DescriptionClient(url="https://text.test/generate")
        response = MagicMock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("no json")

        with patch("integrations.description_client.requests.post", return_value=response):
            with pytest.raises(ExternalServiceError):
                client.generate({"id": "JK1"}, Language.EN, "N/A")
