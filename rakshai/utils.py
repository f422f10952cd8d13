"""
Shared utility functions used throughout the RakshAI codebase.

Provides:
    - strip_code_fences(text): Remove a Markdown code fence around a payload
    - find_fenced_block(text): Fenced block embedded in surrounding prose
    - hostname_title(url): Human title for a bare citation URL
    - clamp(value, low, high): Bound a number to a closed range
    - with_deadline(awaitable, timeout, operation): Optional per-call deadline
"""

import asyncio
import logging
import re
from typing import Awaitable, Optional, TypeVar
from urllib.parse import urlparse

from rakshai.exceptions import RequestTimeoutError

# ---------------------------------------------------------------------------
# Type variable for generic return types in the deadline helper
# ---------------------------------------------------------------------------
T = TypeVar("T")

logger = logging.getLogger(__name__)


# ===========================================================================
# TEXT HELPERS
# ===========================================================================

_OPEN_FENCE_RE = re.compile(r"\A```[A-Za-z]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?[ \t]*```\Z")
_EMBEDDED_FENCE_RE = re.compile(
    r"^[ \t]*```[A-Za-z]*[ \t]*\n(.*?)\n[ \t]*```[ \t]*$", re.DOTALL | re.MULTILINE
)


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence wrapped around a payload.

    Only the opening fence line (```` ```json ````, ```` ``` ````) and a
    trailing ```` ``` ```` are removed; backticks inside the payload are
    left alone.  An unterminated opening fence (truncated reply) is still
    removed.  Text without a leading fence is returned stripped of
    whitespace.

    Args:
        text: Raw reply text.

    Returns:
        The payload without fence markup.
    """
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _OPEN_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _CLOSE_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def find_fenced_block(text: str) -> Optional[str]:
    """
    Return the body of the first fenced block that sits on its own lines.

    Used for replies that surround the payload with prose.  Fences must
    start a line and the closing fence must end one, so inline
    ```` ```code``` ```` runs inside a string value do not match.

    Returns:
        The block body, or ``None`` if there is no such block.
    """
    match = _EMBEDDED_FENCE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def hostname_title(url: str) -> Optional[str]:
    """
    Derive a human title from a URL's hostname.

    A leading ``www.`` label is dropped:
    ``https://www.example.com/a`` -> ``example.com``.

    Args:
        url: Absolute URL.

    Returns:
        Hostname title, or ``None`` if the URL has no hostname.
    """
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    if host.startswith("www."):
        host = host[4:]
    return host or None


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    """Bound ``value`` to ``[low, high]``."""
    return max(low, min(high, value))


# ===========================================================================
# DEADLINE
# The core enforces no timeout by default; callers may opt in per call.
# ===========================================================================


async def with_deadline(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    operation: str,
    provider: Optional[str] = None,
) -> T:
    """
    Await ``awaitable``, optionally bounded by ``timeout`` seconds.

    Args:
        awaitable: The provider call.
        timeout: Deadline in seconds, or ``None`` to wait indefinitely.
        operation: Human-readable operation name for error messages.
        provider: Provider identity value, attached to the error.

    Raises:
        RequestTimeoutError: If the deadline elapses first.  The pending
            call is cancelled.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("%s exceeded deadline of %.1fs", operation, timeout)
        raise RequestTimeoutError(operation, timeout, provider=provider) from exc
