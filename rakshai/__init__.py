"""RakshAI: provider-agnostic threat analysis over Gemini and Perplexity."""

from rakshai.analyzer import OCRGateway, ThreatAnalyzer
from rakshai.config import CredentialResolver, Credentials, CredentialSources, Settings
from rakshai.exceptions import (
    CapabilityError,
    ConfigError,
    NetworkError,
    ParseError,
    RakshAIError,
    RequestTimeoutError,
    ValidationError,
)
from rakshai.models import (
    AnalysisCategory,
    AnalysisResult,
    DepthTier,
    InsuranceClaim,
    InvestmentOpportunity,
    ProviderIdentity,
    RiskLevel,
)

__all__ = [
    "ThreatAnalyzer",
    "OCRGateway",
    "Settings",
    "CredentialSources",
    "CredentialResolver",
    "Credentials",
    "RakshAIError",
    "ConfigError",
    "CapabilityError",
    "NetworkError",
    "RequestTimeoutError",
    "ParseError",
    "ValidationError",
    "AnalysisCategory",
    "AnalysisResult",
    "DepthTier",
    "InsuranceClaim",
    "InvestmentOpportunity",
    "ProviderIdentity",
    "RiskLevel",
]
