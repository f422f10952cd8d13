"""
Entry point: analyze text (or an image) for one risk category.

Usage::

    # Fast analysis of a suspicious message:
    python run.py sms "Your account is locked, verify at http://bit.ly/x"

    # Deep analysis with web grounding, read text from stdin:
    echo "Celebrity X arrested" | python run.py rumour --deep

    # Extract text from a screenshot first (Gemini only):
    python run.py sms --image screenshot.png --provider gemini

    # Structured category forms:
    python run.py insurance "Rear bumper crushed at night" --asset-type Vehicle --event Theft
    python run.py investment "Guaranteed returns" --platform "Nexus Capital" --roi 40 --period Week

Exit codes: 0 success, 1 analysis failure, 2 missing/invalid configuration.
"""

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from rakshai.analyzer import ThreatAnalyzer
from rakshai.config import PROJECT_ROOT, CredentialResolver, CredentialSources, get_settings
from rakshai.exceptions import ConfigError, RakshAIError
from rakshai.models import (
    AnalysisCategory,
    DepthTier,
    InsuranceClaim,
    InvestmentOpportunity,
    ProviderIdentity,
)

logger = logging.getLogger("run")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assess text for fraud, misinformation and manipulation"
    )
    parser.add_argument(
        "category",
        choices=[c.value for c in AnalysisCategory],
        help="Analysis category",
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Text to analyze (read from stdin when omitted and no --image)",
    )
    parser.add_argument(
        "--deep",
        action="store_true",
        help="Use the higher-capability model with web grounding",
    )
    parser.add_argument(
        "--image",
        metavar="FILE",
        help="Extract text from an image first (requires Gemini)",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in ProviderIdentity],
        help="Override the configured AI_PROVIDER",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-call deadline in seconds (default: none)",
    )

    forms = parser.add_argument_group("category forms")
    forms.add_argument("--asset-type", help="insurance: insured asset (default: Vehicle)")
    forms.add_argument("--event", help="insurance: incident type (default: Accident)")
    forms.add_argument("--platform", help="investment: platform or issuer name")
    forms.add_argument("--roi", type=float, help="investment: promised ROI in percent")
    forms.add_argument("--period", help="investment: ROI period (default: Month)")
    return parser


def compose_text(args: argparse.Namespace, text: str) -> str:
    """Wrap raw text in the category form when form options are given."""
    category = AnalysisCategory(args.category)
    if category is AnalysisCategory.INSURANCE and (args.asset_type or args.event):
        claim = InsuranceClaim(
            description=text,
            asset_type=args.asset_type or "Vehicle",
            event=args.event or "Accident",
        )
        return claim.to_text()
    if category is AnalysisCategory.INVESTMENT and args.platform:
        opportunity = InvestmentOpportunity(
            platform=args.platform,
            roi=args.roi if args.roi is not None else 15,
            period=args.period or "Month",
            pitch=text,
        )
        return opportunity.to_text()
    return text


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    store_path = Path(settings.credential_store_path)
    if not store_path.is_absolute():
        store_path = PROJECT_ROOT / store_path
    resolver = CredentialResolver(
        CredentialSources.load(store_path=store_path),
        env_namespace=settings.env_namespace,
    )
    analyzer = ThreatAnalyzer(resolver, settings)
    provider = ProviderIdentity(args.provider) if args.provider else None

    try:
        if args.image:
            image_path = Path(args.image)
            mime_type = mimetypes.guess_type(image_path.name)[0] or "image/png"
            text = await analyzer.extract_text(
                image_path.read_bytes(), mime_type, provider=provider, timeout=args.timeout
            )
            logger.info("Extracted %d characters from %s", len(text), image_path)
        elif args.text is not None:
            text = args.text
        else:
            text = sys.stdin.read()

        result = await analyzer.analyze(
            compose_text(args, text),
            args.category,
            DepthTier.DEEP if args.deep else DepthTier.FAST,
            provider=provider,
            timeout=args.timeout,
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except (RakshAIError, ValueError, OSError) as exc:
        print(f"Analysis failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
