"""
Async Perplexity chat-completions client.

Uses ``httpx`` to POST the analysis request to the Perplexity
chat-completions endpoint.  Citations arrive as a flat top-level list of
URL strings.  Perplexity has no image input, so ``extract_text`` fails
with ``CapabilityError`` without touching the network.

Fail-fast philosophy: one request, no retries.  Non-2xx responses raise
``NetworkError`` carrying the provider's own ``error.message`` when the
body has one.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from rakshai.config import Settings
from rakshai.exceptions import NetworkError, ParseError
from rakshai.models import DepthTier, PromptSpec, ProviderIdentity, RawProviderReply
from rakshai.tools.base import ProviderClient
from rakshai.utils import with_deadline

logger = logging.getLogger(__name__)


class PerplexityClient(ProviderClient):
    """Async wrapper around the Perplexity chat-completions API.

    Args:
        api_key: Perplexity API key.
        fast_model: Model for the fast tier.
        deep_model: Model for the deep tier.
        base_url: API root.
        temperature: Sampling temperature; kept low for stable scoring.
        transport: Optional ``httpx`` transport (used by tests).

    Usage::

        client = PerplexityClient(api_key="pplx-...")
        reply = await client.analyze(build_prompt("sms"), text, DepthTier.DEEP)
    """

    provider = ProviderIdentity.PERPLEXITY
    supports_ocr = False

    BASE_URL: str = "https://api.perplexity.ai"

    def __init__(
        self,
        api_key: str,
        fast_model: str = "sonar",
        deep_model: str = "sonar-pro",
        base_url: Optional[str] = None,
        temperature: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.fast_model = fast_model
        self.deep_model = deep_model
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.temperature = temperature
        self._transport = transport

    @classmethod
    def from_settings(cls, api_key: str, settings: Settings) -> "PerplexityClient":
        return cls(
            api_key=api_key,
            fast_model=settings.perplexity_fast_model,
            deep_model=settings.perplexity_deep_model,
            base_url=settings.perplexity_base_url,
            temperature=settings.perplexity_temperature,
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
        """Execute a single analysis request.

        Args:
            prompt: System instruction for the category.
            user_text: Text under analysis.
            depth: Selects ``sonar`` or ``sonar-pro``.
            timeout: Optional deadline in seconds.

        Returns:
            Reply content (possibly fenced JSON) and citation URLs.

        Raises:
            NetworkError: On non-2xx responses or transport failure.
            ParseError: If a 2xx response body is not JSON.
        """
        model = self.deep_model if depth is DepthTier.DEEP else self.fast_model
        data = await with_deadline(
            self._post_chat(model, prompt.system_instruction, user_text),
            timeout,
            "Perplexity analysis",
            provider=self.provider.value,
        )

        text = self.extract_content(data)
        citations = self.extract_citations(data)
        logger.debug(
            "Perplexity analysis completed: model=%s, text_len=%d, citations=%d",
            model,
            len(user_text),
            len(citations),
        )
        return RawProviderReply(
            text=text, citations=tuple(citations), citations_supported=True
        )

    async def _post_chat(
        self, model: str, system_instruction: str, user_text: str
    ) -> Dict[str, Any]:
        # Transport-level timeouts are disabled; the caller's deadline governs.
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": model,
                        "messages": [
                            {"role": "system", "content": system_instruction},
                            {"role": "user", "content": user_text},
                        ],
                        "temperature": self.temperature,
                    },
                )
            except httpx.HTTPError as exc:
                logger.warning("Perplexity request failed: %s", exc)
                raise NetworkError(
                    f"Perplexity request failed: {exc}",
                    provider=self.provider.value,
                ) from exc

        if not response.is_success:
            message = self.extract_error_message(response)
            logger.warning(
                "Perplexity API error %d: %s", response.status_code, message
            )
            raise NetworkError(
                message, provider=self.provider.value, status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(
                "Perplexity returned a non-JSON response body",
                raw_text=response.text,
            ) from exc

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    @staticmethod
    def extract_error_message(response: httpx.Response) -> str:
        """Provider ``error.message`` if present, else a status-coded message."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return f"API Error: {response.status_code}"

    @staticmethod
    def extract_content(data: Dict[str, Any]) -> str:
        """Extract the answer text from a chat-completions response.

        Returns:
            Content string, or an empty string if the structure is
            unexpected (normalized as the default result).
        """
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.warning("Failed to extract text from Perplexity response")
            return ""
        return content if isinstance(content, str) else ""

    @staticmethod
    def extract_citations(data: Dict[str, Any]) -> List[str]:
        """Citation URLs from the response (may be empty)."""
        citations = data.get("citations") if isinstance(data, dict) else None
        if not isinstance(citations, list):
            return []
        return [url for url in citations if isinstance(url, str)]
