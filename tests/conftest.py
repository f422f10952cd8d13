"""Shared fixtures for the RakshAI test suite."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from rakshai.config import CredentialResolver, CredentialSources, Settings, reset_settings


# ---------------------------------------------------------------------------
# Ensure we don't hit real APIs during tests
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _block_env_keys(monkeypatch):
    """Clear all provider keys so tests never hit real services."""
    keys = [
        "AI_PROVIDER",
        "PERPLEXITY_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "RAKSHAI_LOG_LEVEL",
        "RAKSHAI_REQUEST_TIMEOUT",
    ]
    for key in keys:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_singleton():
    """Ensure the Settings singleton is cleared before and after each test."""
    reset_settings()
    yield
    reset_settings()


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------
@pytest.fixture
def sample_payload():
    """A well-formed backend payload."""
    return {
        "score": 82,
        "riskLevel": "High",
        "radarValues": {
            "SocialProof": 10,
            "Fear": 70,
            "Urgency": 90,
            "Authority": 40,
            "Greed": 20,
            "Scarcity": 55,
        },
        "explanation": "Classic account-lock phishing lure.",
        "metrics": [
            {"label": "Sender Legitimacy", "value": "Unverified", "status": "bad"},
            {"label": "Link Safety", "value": "Shortened URL", "status": "warning"},
            {"label": "Grammar", "value": 3, "status": "good"},
        ],
    }


@pytest.fixture
def sample_reply_text(sample_payload):
    return json.dumps(sample_payload)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_resolver():
    """Build a resolver from an in-memory credential store."""

    def _make(**store):
        return CredentialResolver(CredentialSources(store=store))

    return _make


# ---------------------------------------------------------------------------
# Mock Gemini SDK client
# ---------------------------------------------------------------------------
@pytest.fixture
def mock_genai_client():
    """A mock ``genai.Client`` whose ``aio.models.generate_content`` is awaitable."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


def make_genai_response(text, chunks=None):
    """Shape a fake SDK response with optional grounding chunks.

    Args:
        text: Value of ``response.text``.
        chunks: List of ``(uri, title)`` tuples; ``None`` entries model
            chunks without web data.
    """
    response = MagicMock()
    response.text = text
    if chunks is None:
        response.candidates = []
        return response
    grounding = []
    for chunk in chunks:
        item = MagicMock()
        if chunk is None:
            item.web = None
        else:
            item.web.uri, item.web.title = chunk
        grounding.append(item)
    candidate = MagicMock()
    candidate.grounding_metadata.grounding_chunks = grounding
    response.candidates = [candidate]
    return response


@pytest.fixture
def genai_response():
    """Factory fixture for fake Gemini SDK responses."""
    return make_genai_response
