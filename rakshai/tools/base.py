"""
Abstract provider interface.

Every backend variant implements the same two coroutines, ``analyze``
and ``extract_text``.  Variants differ in transport, authentication,
capability and citation shape; those differences stay inside the
variant.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rakshai.config import Settings
from rakshai.exceptions import CapabilityError
from rakshai.models import DepthTier, PromptSpec, ProviderIdentity, RawProviderReply


class ProviderClient(ABC):
    """Base class for language-model backends.

    Class attributes:
        provider: Identity this variant implements.
        supports_ocr: Whether ``extract_text`` is available.  Checked
            before any credential lookup or network call.
    """

    provider: ProviderIdentity
    supports_ocr: bool = False

    @classmethod
    @abstractmethod
    def from_settings(cls, api_key: str, settings: Settings) -> "ProviderClient":
        """Build this variant with model identifiers taken from settings."""

    @abstractmethod
    async def analyze(
        self,
        prompt: PromptSpec,
        user_text: str,
        depth: DepthTier = DepthTier.FAST,
        timeout: Optional[float] = None,
    ) -> RawProviderReply:
        """Run one analysis call and return the unparsed reply.

        Raises:
            NetworkError: On non-success status or transport failure.
        """

    async def extract_text(
        self,
        image: bytes,
        mime_type: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Return the legible text in ``image``.

        Raises:
            CapabilityError: If this provider has no image input.
        """
        raise CapabilityError(
            "Image analysis", self.provider.value, ocr_provider().value
        )


def ocr_provider() -> ProviderIdentity:
    """Provider that supports image text extraction."""
    from rakshai.tools import PROVIDER_CLIENTS

    for identity, client_cls in PROVIDER_CLIENTS.items():
        if client_cls.supports_ocr:
            return identity
    raise LookupError("No registered provider supports image text extraction")
