"""
Citation normalization.

Gemini attaches grounding chunks (URI + title) to its reply, Perplexity
returns a flat list of bare URLs.  ``extract_sources`` maps either shape
onto uniform ``Source`` entries, preserving the provider's order.
Partial data from a backend is not an error: malformed entries are
dropped.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from rakshai.models import GroundingCitation, ProviderCitation, Source
from rakshai.utils import hostname_title

logger = logging.getLogger(__name__)


def _from_grounding(citation: GroundingCitation) -> Optional[Source]:
    if citation.uri and citation.title:
        return Source(title=citation.title, uri=citation.uri)
    return None


def _from_url(url: str) -> Optional[Source]:
    title = hostname_title(url)
    if title is None:
        return None
    return Source(title=title, uri=url.strip())


def extract_sources(citations: Iterable[ProviderCitation]) -> Tuple[Source, ...]:
    """
    Map provider citations to ``Source`` entries.

    Grounding chunks are kept only when both URI and title are present.
    Bare URLs are titled by hostname with a leading ``www.`` removed;
    URLs without a hostname are dropped.

    Args:
        citations: ``GroundingCitation`` objects and/or URL strings.

    Returns:
        Sources in input order; empty when nothing usable was supplied.
    """
    sources: List[Source] = []
    dropped = 0
    for citation in citations:
        if isinstance(citation, GroundingCitation):
            source = _from_grounding(citation)
        elif isinstance(citation, str):
            source = _from_url(citation)
        else:
            source = None
        if source is None:
            dropped += 1
            continue
        sources.append(source)

    if dropped:
        logger.debug("Dropped %d malformed citation(s)", dropped)
    return tuple(sources)
