"""
Threat analysis orchestration.

``ThreatAnalyzer.analyze`` runs one request end to end:

    CredentialResolver -> build_prompt -> ProviderClient.analyze
        -> normalize (+ extract_sources) -> AnalysisResult

``OCRGateway`` extracts text from an image ahead of submission.  It
checks provider capability before credentials, so a provider without
image input fails fast even when its key is valid.

No state is shared between requests: each call resolves credentials,
builds a client and returns a fresh result.
"""

import logging
from typing import Callable, Optional, Union

from rakshai.config import CredentialResolver, Settings
from rakshai.exceptions import CapabilityError, ValidationError
from rakshai.models import AnalysisCategory, AnalysisResult, DepthTier, ProviderIdentity
from rakshai.normalizer import normalize_reply
from rakshai.prompts import build_prompt
from rakshai.tools import PROVIDER_CLIENTS, ProviderClient, create_provider_client, ocr_provider

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderIdentity, str, Settings], ProviderClient]


class OCRGateway:
    """Image text extraction routed to a multimodal provider.

    Args:
        resolver: Credential lookup.
        settings: Model identifiers and default deadline.
        client_factory: Builds a provider client from (identity, key, settings).
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        settings: Settings,
        client_factory: ClientFactory = create_provider_client,
    ) -> None:
        self.resolver = resolver
        self.settings = settings
        self.client_factory = client_factory

    async def extract_text(
        self,
        image: bytes,
        mime_type: str,
        provider: Optional[ProviderIdentity] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Extract legible text from ``image``.

        Args:
            image: Raw image bytes.
            mime_type: Image MIME type.
            provider: Provider to use; defaults to the configured one.
            timeout: Deadline in seconds; defaults to settings.

        Raises:
            CapabilityError: Provider has no image input (no network call).
            ConfigError: No key configured for the provider.
            NetworkError: Provider call failed.
            ValidationError: Empty image.
        """
        provider = provider or self.resolver.active_provider()
        if not PROVIDER_CLIENTS[provider].supports_ocr:
            raise CapabilityError("Image analysis", provider.value, ocr_provider().value)
        if not image:
            raise ValidationError("Image is empty")

        api_key = self.resolver.resolve(provider).require("image analysis")
        client = self.client_factory(provider, api_key, self.settings)
        text = await client.extract_text(
            image, mime_type, timeout=_deadline(timeout, self.settings)
        )
        logger.info("OCR completed: provider=%s, chars=%d", provider.value, len(text))
        return text


class ThreatAnalyzer:
    """Provider-agnostic threat analysis.

    Args:
        resolver: Credential lookup.
        settings: Model identifiers and default deadline.
        client_factory: Builds a provider client from (identity, key, settings).

    Usage::

        analyzer = ThreatAnalyzer(CredentialResolver(CredentialSources.load()), Settings())
        result = await analyzer.analyze("You won a prize!", "sms", DepthTier.FAST)
        print(result.score, result.risk_level)
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        settings: Settings,
        client_factory: ClientFactory = create_provider_client,
    ) -> None:
        self.resolver = resolver
        self.settings = settings
        self.client_factory = client_factory
        self.ocr = OCRGateway(resolver, settings, client_factory)

    async def analyze(
        self,
        text: str,
        category: Union[AnalysisCategory, str],
        depth: Union[DepthTier, str] = DepthTier.FAST,
        provider: Optional[ProviderIdentity] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisResult:
        """
        Analyze ``text`` for one category.

        Args:
            text: Free text (or OCR output / serialized form) to assess.
            category: Analysis category.
            depth: ``fast`` or ``deep``.
            provider: Provider to use; defaults to the configured one.
            timeout: Deadline in seconds; defaults to settings.

        Returns:
            A freshly built ``AnalysisResult``.

        Raises:
            ValidationError: Blank text, unknown category or tier.
            ConfigError: No key configured for the provider.
            NetworkError: Provider call failed.
            ParseError: Reply was not the expected JSON payload.
        """
        if not text or not text.strip():
            raise ValidationError("Text to analyze cannot be empty")
        try:
            tier = DepthTier(depth)
        except ValueError:
            raise ValidationError(
                f"Unknown depth tier '{depth}'. "
                f"Valid tiers: {[t.value for t in DepthTier]}"
            ) from None
        prompt = build_prompt(category)

        provider = provider or self.resolver.active_provider()
        api_key = self.resolver.resolve(provider).require("analysis")
        client = self.client_factory(provider, api_key, self.settings)

        reply = await client.analyze(
            prompt, text, tier, timeout=_deadline(timeout, self.settings)
        )
        result = normalize_reply(reply)

        logger.info(
            "Analysis completed: provider=%s, model=%s, category=%s, tier=%s, score=%d, risk=%s",
            provider.value,
            self.settings.model_for(provider, tier is DepthTier.DEEP),
            AnalysisCategory(category).value,
            tier.value,
            result.score,
            result.risk_level.value,
        )
        return result

    async def extract_text(
        self,
        image: bytes,
        mime_type: str,
        provider: Optional[ProviderIdentity] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Delegate to :class:`OCRGateway`."""
        return await self.ocr.extract_text(image, mime_type, provider, timeout)


def _deadline(timeout: Optional[float], settings: Settings) -> Optional[float]:
    return timeout if timeout is not None else settings.request_timeout
