"""
Async Gemini client for text analysis and image text extraction.

Uses the ``google-genai`` SDK (``genai.Client(...).aio``).  The deep tier
switches to the higher-capability model and enables Google Search
grounding; grounding references then arrive on the first candidate's
``grounding_metadata.grounding_chunks``.  Image OCR is a separate
multimodal call with its own model.

Fail-fast philosophy: SDK ``APIError`` and ``httpx`` transport errors are
re-raised as ``NetworkError`` with the SDK status code; nothing is
retried.
"""

import logging
from typing import Any, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from rakshai.config import Settings
from rakshai.exceptions import NetworkError
from rakshai.models import (
    DepthTier,
    GroundingCitation,
    PromptSpec,
    ProviderIdentity,
    RawProviderReply,
)
from rakshai.tools.base import ProviderClient
from rakshai.utils import with_deadline

logger = logging.getLogger(__name__)

OCR_INSTRUCTION = (
    "Extract all legible text from this image. "
    "Return only the raw text, no markdown or comments."
)


class GeminiClient(ProviderClient):
    """Gemini backend with search grounding and multimodal OCR.

    Args:
        api_key: Gemini API key.
        fast_model: Model for the fast tier.
        deep_model: Model for the deep tier (search grounding enabled).
        ocr_model: Multimodal model for image text extraction.
        client: Pre-built ``genai.Client`` (used by tests).

    Usage::

        client = GeminiClient(api_key="AIza...")
        reply = await client.analyze(build_prompt("rumour"), text, DepthTier.DEEP)
        text = await client.extract_text(png_bytes, "image/png")
    """

    provider = ProviderIdentity.GEMINI
    supports_ocr = True

    def __init__(
        self,
        api_key: str,
        fast_model: str = "gemini-3-flash-preview",
        deep_model: str = "gemini-3-pro-preview",
        ocr_model: str = "gemini-2.5-flash-image",
        client: Optional[Any] = None,
    ) -> None:
        self.client = client or genai.Client(api_key=api_key)
        self.fast_model = fast_model
        self.deep_model = deep_model
        self.ocr_model = ocr_model

    @classmethod
    def from_settings(cls, api_key: str, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=api_key,
            fast_model=settings.gemini_fast_model,
            deep_model=settings.gemini_deep_model,
            ocr_model=settings.gemini_ocr_model,
        )

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze(
        self,
        prompt: PromptSpec,
        user_text: str,
        depth: DepthTier = DepthTier.FAST,
        timeout: Optional[float] = None,
    ) -> RawProviderReply:
        """Run a JSON-mode analysis call.

        Args:
            prompt: System instruction for the category.
            user_text: Text under analysis.
            depth: ``DEEP`` selects the pro model and search grounding.
            timeout: Optional deadline in seconds.

        Returns:
            Reply text and grounding citations.

        Raises:
            NetworkError: On SDK or transport failure.
        """
        deep = depth is DepthTier.DEEP
        model = self.deep_model if deep else self.fast_model
        config = types.GenerateContentConfig(
            system_instruction=prompt.system_instruction,
            response_mime_type="application/json",
            tools=[types.Tool(google_search=types.GoogleSearch())] if deep else None,
        )

        response = await self._generate(
            "Gemini analysis",
            timeout,
            model=model,
            contents=user_text,
            config=config,
        )

        citations = self.extract_grounding(response)
        logger.debug(
            "Gemini analysis completed: model=%s, text_len=%d, citations=%d",
            model,
            len(user_text),
            len(citations),
        )
        return RawProviderReply(
            text=response.text or "",
            citations=tuple(citations),
            citations_supported=deep,
        )

    # ------------------------------------------------------------------
    # OCR
    # ------------------------------------------------------------------

    async def extract_text(
        self,
        image: bytes,
        mime_type: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Return the verbatim legible text in an image.

        Args:
            image: Raw image bytes.
            mime_type: Image MIME type (e.g. ``image/png``).
            timeout: Optional deadline in seconds.

        Raises:
            NetworkError: On SDK or transport failure.
        """
        response = await self._generate(
            "Image analysis",
            timeout,
            model=self.ocr_model,
            contents=[
                types.Part.from_bytes(data=image, mime_type=mime_type),
                OCR_INSTRUCTION,
            ],
        )
        text = response.text or ""
        logger.debug(
            "Gemini OCR completed: model=%s, bytes=%d, chars=%d",
            self.ocr_model,
            len(image),
            len(text),
        )
        return text

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _generate(
        self, operation: str, timeout: Optional[float], **kwargs: Any
    ) -> Any:
        try:
            return await with_deadline(
                self.client.aio.models.generate_content(**kwargs),
                timeout,
                operation,
                provider=self.provider.value,
            )
        except genai_errors.APIError as exc:
            logger.warning("%s failed: %s %s", operation, exc.code, exc.message)
            raise NetworkError(
                f"{operation} failed: {exc.message or exc.status or exc.code}",
                provider=self.provider.value,
                status_code=exc.code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s", operation, exc)
            raise NetworkError(
                f"{operation} failed: {exc}", provider=self.provider.value
            ) from exc

    @staticmethod
    def extract_grounding(response: Any) -> List[GroundingCitation]:
        """Grounding chunks of the first candidate, as ``GroundingCitation``.

        Chunks without web data are kept with empty fields; the source
        extractor drops them.
        """
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []

        citations: List[GroundingCitation] = []
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            citations.append(
                GroundingCitation(
                    uri=getattr(web, "uri", None),
                    title=getattr(web, "title", None),
                )
            )
        return citations
