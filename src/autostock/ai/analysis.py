"""Product analysis with a generative AI model.

Both entry points always return an ``AIAnalysisResult``. Any failure (no API
key, API error, unusable response) degrades to a zero-confidence result so
the caller falls back to manual entry.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from openai import APIConnectionError, APITimeoutError, OpenAI, RateLimitError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from autostock.domain.entities import DEFAULT_CATEGORY_NAME, AIAnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
NAME_CONFIDENCE = 0.8

CATEGORY_CHOICES = ("Ferretería", "Farmacia", "Autopartes", "Electrónica", "Hogar", "General")

IMAGE_PROMPT = f"""
Actúa como un experto en inventario y fijación de precios.
Analiza la imagen de este producto.
1. Identifica el nombre exacto del producto.
2. Categorízalo en una de estas: {", ".join(CATEGORY_CHOICES)}.
3. Genera una descripción breve pero comercial en español.
4. Estima el precio de mercado promedio (precio al público) en USD.
5. Indica tu nivel de confianza (0-1).
Devuelve JSON con las claves: name, category, description, confidence,
suggestedTags, estimatedMarketPrice.
"""

NAME_PROMPT = """
El usuario tiene un producto llamado "{name}" pero no tenemos una imagen clara.
1. Categorízalo en una de estas: {categories}.
2. Genera una descripción comercial convincente en español.
3. Indica el precio de mercado estándar promedio (al por menor) en USD.
4. Sugiere tags.
Devuelve JSON con las claves: category, description, suggestedTags,
estimatedMarketPrice.
"""

IMAGE_FALLBACK_DESCRIPTION = "No se pudo identificar. Ingrese nombre manualmente."
NAME_FALLBACK_DESCRIPTION = "Descripción manual requerida."


class AnalysisError(Exception):
    """The model returned nothing usable."""


def _price(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        return None
    return price if price.is_finite() and price >= 0 else None


def _confidence(value: Any) -> float:
    try:
        return min(1.0, max(0.0, float(value)))
    except (TypeError, ValueError):
        return 0.0


class ProductAnalyzer:
    """Wrapper around the OpenAI chat API for product metadata extraction."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        client: Optional[Any] = None,
        timeout: float = 30.0,
    ):
        """Initialize the analyzer.

        Args:
            api_key: OpenAI API key; without it (and without ``client``)
                every analysis returns the fallback result
            model: Chat model name
            client: Preconfigured client, used instead of building one
            timeout: Request timeout in seconds
        """
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout)

    @retry(
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type((RateLimitError, APIConnectionError, APITimeoutError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _complete(self, content: Any) -> dict[str, Any]:
        """Send one user message and decode the JSON reply."""
        if self.client is None:
            raise AnalysisError("API key is missing")
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            response_format={"type": "json_object"},
            temperature=0,
        )
        text = response.choices[0].message.content
        if not text:
            raise AnalysisError("Empty response from model")
        data = json.loads(text)
        if not isinstance(data, dict):
            raise AnalysisError("Model response is not a JSON object")
        return data

    def analyze_image(self, base64_image: str, mime_type: str = "image/jpeg") -> AIAnalysisResult:
        """Identify a product from a base64-encoded photo."""
        content = [
            {"type": "text", "text": IMAGE_PROMPT},
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{base64_image}"}},
        ]
        try:
            data = self._complete(content)
            return AIAnalysisResult(
                name=str(data.get("name") or ""),
                category=str(data.get("category") or DEFAULT_CATEGORY_NAME),
                description=str(data.get("description") or ""),
                confidence=_confidence(data.get("confidence")),
                suggested_tags=tuple(str(tag) for tag in data.get("suggestedTags") or ()),
                estimated_market_price=_price(data.get("estimatedMarketPrice")),
            )
        except Exception as e:
            logger.error("Image analysis failed: %s", e)
            return AIAnalysisResult(
                name="",
                category=DEFAULT_CATEGORY_NAME,
                description=IMAGE_FALLBACK_DESCRIPTION,
                confidence=0.0,
            )

    def analyze_product_by_name(self, name: str) -> AIAnalysisResult:
        """Categorize and price a product from its name alone."""
        prompt = NAME_PROMPT.format(name=name, categories=", ".join(CATEGORY_CHOICES))
        try:
            data = self._complete(prompt)
            return AIAnalysisResult(
                name=name,
                category=str(data.get("category") or DEFAULT_CATEGORY_NAME),
                description=str(data.get("description") or ""),
                confidence=NAME_CONFIDENCE,
                suggested_tags=tuple(str(tag) for tag in data.get("suggestedTags") or ()),
                estimated_market_price=_price(data.get("estimatedMarketPrice")),
            )
        except Exception as e:
            logger.error("Name analysis failed for '%s': %s", name, e)
            return AIAnalysisResult(
                name=name,
                category=DEFAULT_CATEGORY_NAME,
                description=NAME_FALLBACK_DESCRIPTION,
                confidence=0.0,
            )
