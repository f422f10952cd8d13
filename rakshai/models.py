"""
Shared data types for the RakshAI analysis layer.

Hierarchy of types
------------------
- **Enums**: ``AnalysisCategory``, ``DepthTier``, ``ProviderIdentity``,
  ``RiskLevel``, ``MetricStatus``
- **Signal taxonomy**: ``SignalDefinition``, ``SIGNAL_TAXONOMY``
- **Provider exchange**: ``PromptSpec``, ``GroundingCitation``,
  ``RawProviderReply``
- **Canonical result**: ``SignalPoint``, ``Metric``, ``Source``,
  ``AnalysisResult``
- **Structured category inputs**: ``InsuranceClaim``,
  ``InvestmentOpportunity``

Canonical result objects are frozen: they are built fresh for every
request and never mutated once returned.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# =============================================================================
# ENUMS
# =============================================================================


class AnalysisCategory(str, Enum):
    """The four risk-analysis verticals.  Drives prompt content only."""

    RUMOUR = "rumour"
    INSURANCE = "insurance"
    SMS = "sms"
    INVESTMENT = "investment"


class DepthTier(str, Enum):
    """Fast/cheap versus slow/capable model selection."""

    FAST = "fast"
    DEEP = "deep"


class ProviderIdentity(str, Enum):
    """Interchangeable language-model backends."""

    PERPLEXITY = "perplexity"
    GEMINI = "gemini"

    @property
    def api_key_name(self) -> str:
        """Credential key for this provider (e.g. ``GEMINI_API_KEY``)."""
        return f"{self.value.upper()}_API_KEY"

    @property
    def label(self) -> str:
        """Human-readable provider name."""
        return self.value.capitalize()


class RiskLevel(str, Enum):
    """Overall threat classification reported by the backend."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class MetricStatus(str, Enum):
    """Traffic-light status attached to a category metric."""

    GOOD = "good"
    WARNING = "warning"
    BAD = "bad"


# =============================================================================
# SIGNAL TAXONOMY
# =============================================================================


@dataclass(frozen=True)
class SignalDefinition:
    """One psychological-manipulation indicator."""

    key: str
    label: str
    color: str


# Order is part of the contract: charting relies on positional stability.
SIGNAL_TAXONOMY: Tuple[SignalDefinition, ...] = (
    SignalDefinition("Fear", "Fear", "#FF3B30"),
    SignalDefinition("Urgency", "Urgency", "#FF9500"),
    SignalDefinition("Authority", "Authority", "#5856D6"),
    SignalDefinition("Greed", "Greed", "#34C759"),
    SignalDefinition("Scarcity", "Scarcity", "#AF52DE"),
    SignalDefinition("SocialProof", "Social Proof", "#007AFF"),
)

SIGNAL_KEYS: Tuple[str, ...] = tuple(s.key for s in SIGNAL_TAXONOMY)


# =============================================================================
# PROVIDER EXCHANGE
# =============================================================================


@dataclass(frozen=True)
class PromptSpec:
    """System instruction plus the embedded output-schema description."""

    system_instruction: str
    schema_description: str


@dataclass(frozen=True)
class GroundingCitation:
    """A search-grounding reference as reported by Gemini.

    Either field may be missing when the backend returns partial data.
    """

    uri: Optional[str] = None
    title: Optional[str] = None


# Gemini returns grounding chunks, Perplexity returns bare URL strings.
ProviderCitation = Union[GroundingCitation, str]


@dataclass(frozen=True)
class RawProviderReply:
    """Unparsed reply text plus provider-specific citation data.

    Attributes:
        text: Reply text, expected to hold the JSON payload (possibly
            wrapped in a code fence).
        citations: Citations in the provider's own representation.
        citations_supported: Whether the call was made in a mode that can
            return citations at all.
    """

    text: str
    citations: Tuple[ProviderCitation, ...] = ()
    citations_supported: bool = False


# =============================================================================
# CANONICAL RESULT
# =============================================================================


@dataclass(frozen=True)
class SignalPoint:
    """One entry of the six-signal radar series."""

    name: str
    label: str
    value: int
    color: str


@dataclass(frozen=True)
class Metric:
    """A category-specific data point extracted by the backend."""

    label: str
    value: Union[str, int, float]
    status: MetricStatus = MetricStatus.WARNING


@dataclass(frozen=True)
class Source:
    """A uniform citation entry."""

    title: str
    uri: str


@dataclass(frozen=True)
class AnalysisResult:
    """Provider-independent threat assessment.

    Attributes:
        score: Threat score, always within 0..100.
        risk_level: Overall classification.
        signal_series: Exactly six entries in ``SIGNAL_TAXONOMY`` order.
        explanation: Forensic summary from the backend.
        metrics: Category-specific data points (possibly empty).
        sources: Citations, or ``None`` when the backend returned none.
        citations_supported: Whether the call could have returned
            citations.  Together with ``sources`` this separates "no
            citation support used" from "supported, zero results".
    """

    score: int
    risk_level: RiskLevel
    signal_series: Tuple[SignalPoint, ...]
    explanation: str
    metrics: Tuple[Metric, ...] = ()
    sources: Optional[Tuple[Source, ...]] = None
    citations_supported: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise ValueError(
                f"AnalysisResult.score must be within 0..100, got {self.score}"
            )
        if tuple(p.name for p in self.signal_series) != SIGNAL_KEYS:
            raise ValueError(
                f"AnalysisResult.signal_series must follow {SIGNAL_KEYS}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation using the canonical field names."""
        data: Dict[str, Any] = {
            "score": self.score,
            "riskLevel": self.risk_level.value,
            "signalSeries": [
                {"name": p.name, "label": p.label, "value": p.value, "color": p.color}
                for p in self.signal_series
            ],
            "explanation": self.explanation,
            "metrics": [
                {"label": m.label, "value": m.value, "status": m.status.value}
                for m in self.metrics
            ],
            "citationsSupported": self.citations_supported,
        }
        if self.sources is not None:
            data["sources"] = [{"title": s.title, "uri": s.uri} for s in self.sources]
        return data


# =============================================================================
# STRUCTURED CATEGORY INPUTS
# =============================================================================


@dataclass
class InsuranceClaim:
    """Claim details submitted for the ``insurance`` category."""

    description: str
    asset_type: str = "Vehicle"
    event: str = "Accident"

    def __post_init__(self) -> None:
        if not self.description.strip():
            raise ValueError("InsuranceClaim.description is required and cannot be empty")

    def to_text(self) -> str:
        """Serialize to the JSON text submitted to the backend."""
        return json.dumps(
            {"type": self.asset_type, "event": self.event, "desc": self.description}
        )


@dataclass
class InvestmentOpportunity:
    """Offer details submitted for the ``investment`` category."""

    platform: str
    roi: float = 15
    period: str = "Month"
    pitch: str = ""

    def __post_init__(self) -> None:
        if not self.platform.strip():
            raise ValueError(
                "InvestmentOpportunity.platform is required and cannot be empty"
            )

    def to_text(self) -> str:
        """Serialize to the JSON text submitted to the backend."""
        return json.dumps(
            {
                "platform": self.platform,
                "roi": self.roi,
                "period": self.period,
                "pitch": self.pitch,
            }
        )


# =============================================================================
# PUBLIC API
# =============================================================================

__all__: List[str] = [
    "AnalysisCategory",
    "DepthTier",
    "ProviderIdentity",
    "RiskLevel",
    "MetricStatus",
    "SignalDefinition",
    "SIGNAL_TAXONOMY",
    "SIGNAL_KEYS",
    "PromptSpec",
    "GroundingCitation",
    "ProviderCitation",
    "RawProviderReply",
    "SignalPoint",
    "Metric",
    "Source",
    "AnalysisResult",
    "InsuranceClaim",
    "InvestmentOpportunity",
]
