"""
Tolerant normalization of backend replies into ``AnalysisResult``.

Parsing is strict, projection is lenient.  An empty reply counts as ``{}``.
Text that is not a JSON object after fence stripping raises
``ParseError``; once the payload parses, each field is projected with
an explicit default:

==============  =========================================================
field           rule
==============  =========================================================
score           int, clamped to 0..100; 0 if missing or non-numeric
riskLevel       case-insensitive match, else ``Low``
radarValues     six fixed keys in taxonomy order, each clamped, 0 if absent
explanation     non-empty string, else ``"Analysis complete."``
metrics         objects with a label; unknown status -> ``warning``
==============  =========================================================

Unrecognized fields are ignored.
"""

import json
import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from rakshai.exceptions import ParseError
from rakshai.models import (
    SIGNAL_TAXONOMY,
    AnalysisResult,
    Metric,
    MetricStatus,
    ProviderCitation,
    RawProviderReply,
    RiskLevel,
    SignalPoint,
)
from rakshai.sources import extract_sources
from rakshai.utils import clamp, find_fenced_block, strip_code_fences

logger = logging.getLogger(__name__)

DEFAULT_EXPLANATION = "Analysis complete."


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_payload(raw_text: str) -> Mapping[str, Any]:
    """
    Strip fences and parse the reply as a JSON object.

    An empty reply is read as ``{}`` so every field takes its default.
    When the text does not parse and the payload sits in a fenced block
    surrounded by prose, that block is parsed instead.

    Raises:
        ParseError: If the text is not JSON, or not an object.
    """
    cleaned = strip_code_fences(raw_text or "")
    if not cleaned:
        logger.debug("Empty reply, using default result")
        return {}
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        embedded = find_fenced_block(raw_text)
        if embedded is None:
            raise _decode_error(exc, raw_text) from exc
        try:
            payload = json.loads(embedded)
        except json.JSONDecodeError:
            raise _decode_error(exc, raw_text) from exc
    if not isinstance(payload, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(payload).__name__}",
            raw_text=raw_text,
        )
    return payload


def _decode_error(exc: json.JSONDecodeError, raw_text: str) -> ParseError:
    return ParseError(
        f"Failed to parse analysis results: {exc.msg} at position {exc.pos}",
        raw_text=raw_text,
    )


# ---------------------------------------------------------------------------
# Field projection
# ---------------------------------------------------------------------------


def coerce_score(value: Any) -> int:
    """Convert a backend number to an int within 0..100 (0 if unusable)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return 0
    if not isinstance(value, (int, float)) or (
        isinstance(value, float) and not math.isfinite(value)
    ):
        return 0
    return clamp(int(round(value)))


def coerce_risk_level(value: Any) -> RiskLevel:
    if isinstance(value, str):
        wanted = value.strip().lower()
        for level in RiskLevel:
            if level.value.lower() == wanted:
                return level
    return RiskLevel.LOW


def build_signal_series(signals: Any) -> Tuple[SignalPoint, ...]:
    """Six entries in taxonomy order regardless of the source map."""
    source: Mapping[str, Any] = signals if isinstance(signals, dict) else {}
    series: List[SignalPoint] = []
    for signal in SIGNAL_TAXONOMY:
        raw = source.get(signal.key, source.get(signal.label))
        series.append(
            SignalPoint(
                name=signal.key,
                label=signal.label,
                value=coerce_score(raw),
                color=signal.color,
            )
        )
    return tuple(series)


def coerce_metrics(value: Any) -> Tuple[Metric, ...]:
    if not isinstance(value, list):
        return ()
    metrics: List[Metric] = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        label = entry.get("label")
        if not isinstance(label, str) or not label.strip():
            continue
        raw_value = entry.get("value", "")
        if isinstance(raw_value, bool) or not isinstance(raw_value, (str, int, float)):
            raw_value = "" if raw_value is None else str(raw_value)
        try:
            status = MetricStatus(str(entry.get("status", "")).strip().lower())
        except ValueError:
            status = MetricStatus.WARNING
        metrics.append(Metric(label=label.strip(), value=raw_value, status=status))
    return tuple(metrics)


def coerce_explanation(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_EXPLANATION


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def normalize(
    raw_text: str,
    citations: Optional[Sequence[ProviderCitation]] = None,
    citations_supported: bool = False,
) -> AnalysisResult:
    """
    Build the canonical result from a raw reply.

    Args:
        raw_text: Reply text, possibly wrapped in a code fence.
        citations: Provider-specific citations, mapped by
            :func:`rakshai.sources.extract_sources`.
        citations_supported: Whether the call could return citations.

    Returns:
        A freshly built, immutable ``AnalysisResult``.

    Raises:
        ParseError: If the reply is not a JSON object.
    """
    payload = parse_payload(raw_text)

    raw_score = payload.get("score")
    score = coerce_score(raw_score)
    if isinstance(raw_score, (int, float)) and not isinstance(raw_score, bool) and score != raw_score:
        logger.debug("Score %r adjusted to %d", raw_score, score)

    sources = extract_sources(citations or ())

    return AnalysisResult(
        score=score,
        risk_level=coerce_risk_level(payload.get("riskLevel")),
        signal_series=build_signal_series(payload.get("radarValues")),
        explanation=coerce_explanation(payload.get("explanation")),
        metrics=coerce_metrics(payload.get("metrics")),
        sources=sources or None,
        citations_supported=citations_supported,
    )


def normalize_reply(reply: RawProviderReply) -> AnalysisResult:
    """Normalize a ``RawProviderReply``."""
    return normalize(reply.text, reply.citations, reply.citations_supported)
