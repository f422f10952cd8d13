"""
Prompt construction for threat analysis.

``build_prompt(category)`` is a pure function of the category: the same
category always yields the identical instruction, independent of which
provider will receive it.  The instruction embeds a literal example of
the JSON payload and the value-domain constraints the normalizer relies
on.
"""

import json
from functools import lru_cache
from typing import Dict, Union

from rakshai.exceptions import ValidationError
from rakshai.models import SIGNAL_KEYS, AnalysisCategory, PromptSpec, RiskLevel

# Example metric labels per category, used to steer extraction
_METRIC_HINTS: Dict[AnalysisCategory, str] = {
    AnalysisCategory.RUMOUR: '"Source Credibility", "Verifiable Claims"',
    AnalysisCategory.INSURANCE: '"Timeline Consistency", "Damage Plausibility"',
    AnalysisCategory.SMS: '"Sender Legitimacy", "Link Safety"',
    AnalysisCategory.INVESTMENT: '"Promised ROI", "Regulation Status"',
}

_INSTRUCTION_TEMPLATE = """You are RakshAI, an elite protective intelligence engine.
Analyze the user's input for the category: "{category}".

Your goal is to identify fraud, misinformation, psychological manipulation, or risk.

You MUST return ONLY a valid JSON object. No markdown, no commentary.

Follow this JSON structure exactly:
{schema}

Definitions:
- score: integer 0 to 100 (100 is highest threat/risk).
- riskLevel: exactly one of {risk_levels}.
- radarValues: integer 0 to 100 for each psychological trigger ({signals}).
- metrics: Extract 3-4 key data points relevant to the category (e.g. {metric_hint}); status is one of "good", "warning", "bad".
- explanation: A concise, professional forensic summary of why this score was given.
"""


def schema_description() -> str:
    """Literal example of the expected output payload."""
    example = {
        "score": 0,
        "riskLevel": "|".join(level.value for level in RiskLevel),
        "radarValues": {key: 0 for key in SIGNAL_KEYS},
        "explanation": "string",
        "metrics": [{"label": "string", "value": "string", "status": "good|warning|bad"}],
    }
    return json.dumps(example, indent=2)


@lru_cache(maxsize=None)
def _build(category: AnalysisCategory) -> PromptSpec:
    schema = schema_description()
    instruction = _INSTRUCTION_TEMPLATE.format(
        category=category.value,
        schema=schema,
        risk_levels=", ".join(f'"{level.value}"' for level in RiskLevel),
        signals=", ".join(SIGNAL_KEYS),
        metric_hint=_METRIC_HINTS[category],
    )
    return PromptSpec(system_instruction=instruction, schema_description=schema)


def build_prompt(category: Union[AnalysisCategory, str]) -> PromptSpec:
    """
    Build the system instruction for an analysis category.

    Args:
        category: ``AnalysisCategory`` member or its string value.

    Returns:
        PromptSpec with the instruction and embedded schema.

    Raises:
        ValidationError: If ``category`` is not a known category.
    """
    try:
        resolved = AnalysisCategory(category)
    except ValueError:
        raise ValidationError(
            f"Unknown category '{category}'. "
            f"Valid categories: {[c.value for c in AnalysisCategory]}"
        ) from None
    return _build(resolved)
