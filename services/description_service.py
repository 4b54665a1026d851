"""
Description synthesizer.

Renders the product copy shown on a sheet from the merged record, the
selected language and the derived color. The template rendering is a pure
function and always available; an external generator, when configured,
is tried first and the template is its fallback.
"""

from typing import Mapping, Optional, Protocol
import structlog

from exceptions import UnsupportedLanguageError
from integrations.description_client import DescriptionClient
from models.product_sheet import Language, NOT_AVAILABLE

logger = structlog.get_logger(__name__)


# Caption per field, per language. Order is the order of lines.
TEMPLATES: dict[Language, tuple[tuple[str, str], ...]] = {
    Language.EN: (
        ("color", "Color"),
        ("size", "Size"),
        ("composition", "Material"),
        ("care", "Care"),
        ("drop", "Drop"),
        ("kalip", "Kalip"),
        ("dominant_color", "Dominant Color"),
    ),
    Language.TR: (
        ("color", "Renk"),
        ("size", "Beden"),
        ("composition", "Materyal"),
        ("care", "Bakım"),
        ("drop", "Drop"),
        ("kalip", "Kalip"),
        ("dominant_color", "Ana Renk"),
    ),
}


def parse_language(value: str) -> Language:
    """
    Language from a request value.

    Raises:
        UnsupportedLanguageError: If not a supported locale
    """
    try:
        return Language(value.strip().lower())
    except (ValueError, AttributeError):
        raise UnsupportedLanguageError(str(value), [lang.value for lang in Language])


def _value(record: Mapping[str, str], field: str) -> str:
    value = record.get(field)
    if value is None or str(value).strip() == "":
        return NOT_AVAILABLE
    return str(value)


def synthesize_description(
    record: Mapping[str, str],
    language: Language,
    dominant_color: str,
) -> str:
    """
    Render the description block.

    Every caption is rendered; empty or missing values show as "N/A".

    Args:
        record: Merged product record
        language: Output locale
        dominant_color: Derived color descriptor

    Returns:
        Newline-separated text, first line "<name> - <description>"
    """
    values = dict(record)
    values["dominant_color"] = dominant_color

    lines = [f"{_value(values, 'name')} - {_value(values, 'description')}"]
    for field, caption in TEMPLATES[language]:
        lines.append(f"{caption}: {_value(values, field)}")

    return "\n".join(lines)


class DescriptionGenerator(Protocol):
    """External source of product copy."""

    def generate(
        self,
        record: Mapping[str, str],
        language: Language,
        dominant_color: str,
    ) -> Optional[str]:
        ...


class DescriptionService:
    """
    Description for a sheet: external generator first, template fallback.
    """

    def __init__(self, generator: Optional[DescriptionGenerator] = None):
        self.generator = generator

    def generate(
        self,
        record: Mapping[str, str],
        language: Language,
        dominant_color: str,
    ) -> str:
        if self.generator is not None:
            try:
                text = self.generator.generate(record, language, dominant_color)
                if text:
                    return text
            except Exception as e:
                logger.warning(
                    "description_generator_failed",
                    product_id=record.get("id"),
                    error=str(e),
                    error_type=type(e).__name__
                )

        return synthesize_description(record, language, dominant_color)


def get_description_service() -> DescriptionService:
    """DescriptionService wired to the configured generation endpoint."""
    return DescriptionService(generator=DescriptionClient())
