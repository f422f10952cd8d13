"""
Language-model backends for RakshAI.

This package holds the only place where provider identity selects
behaviour:

- GeminiClient: Google Gemini via ``google-genai`` (analysis, grounding, OCR)
- PerplexityClient: Perplexity chat-completions via ``httpx`` (analysis)
- create_provider_client(): identity -> configured client
"""

from typing import Dict, Type

from rakshai.config import Settings
from rakshai.models import ProviderIdentity
from rakshai.tools.base import ProviderClient, ocr_provider
from rakshai.tools.gemini import GeminiClient
from rakshai.tools.perplexity import PerplexityClient

PROVIDER_CLIENTS: Dict[ProviderIdentity, Type[ProviderClient]] = {
    ProviderIdentity.GEMINI: GeminiClient,
    ProviderIdentity.PERPLEXITY: PerplexityClient,
}


def create_provider_client(
    provider: ProviderIdentity, api_key: str, settings: Settings
) -> ProviderClient:
    """Build the client variant for ``provider`` from settings.

    Raises:
        KeyError: If no client is registered for ``provider``.
    """
    return PROVIDER_CLIENTS[provider].from_settings(api_key, settings)


__all__ = [
    "ProviderClient",
    "GeminiClient",
    "PerplexityClient",
    "PROVIDER_CLIENTS",
    "create_provider_client",
    "ocr_provider",
]
