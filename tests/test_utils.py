"""
Tests for rakshai.utils -- shared utility functions.

Covers:
    - strip_code_fences(): fenced, bare and unterminated payloads
    - find_fenced_block(): fenced block inside prose
    - hostname_title(): hostname derivation
    - clamp(): bounds
    - with_deadline(): pass-through, success and timeout
"""

import asyncio

import pytest

from rakshai.exceptions import NetworkError, RequestTimeoutError
from rakshai.utils import (
    clamp,
    find_fenced_block,
    hostname_title,
    strip_code_fences,
    with_deadline,
)


# ===========================================================================
# strip_code_fences()
# ===========================================================================


class TestStripCodeFences:
    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_single_line_fence(self):
        assert strip_code_fences('```JSON {"a": 1} ```') == '{"a": 1}'

    def test_unterminated_fence(self):
        assert strip_code_fences('```json\n{"a": 1') == '{"a": 1'

    def test_empty_fence(self):
        assert strip_code_fences("```json\n```") == ""

    def test_empty(self):
        assert strip_code_fences("") == ""

    def test_backticks_inside_unfenced_payload_kept(self):
        text = '{"explanation": "uses ```code``` markup"}'
        assert strip_code_fences(text) == text

    def test_backticks_inside_fenced_payload_kept(self):
        payload = '{"explanation": "quoted:\\n```\\nrm -rf /\\n```"}'
        assert strip_code_fences(f"```json\n{payload}\n```") == payload


class TestFindFencedBlock:
    def test_block_inside_prose(self):
        text = 'Result:\n```json\n{"a": 1}\n```\nDone'
        assert find_fenced_block(text) == '{"a": 1}'

    def test_inline_backticks_ignored(self):
        assert find_fenced_block('{"x": "in ```code``` markup"}') is None

    def test_no_block(self):
        assert find_fenced_block("plain text") is None


# ===========================================================================
# hostname_title()
# ===========================================================================


class TestHostnameTitle:
    def test_strips_leading_www(self):
        assert hostname_title("https://www.example.com/a") == "example.com"

    def test_keeps_subdomain(self):
        assert hostname_title("http://docs.python.org/3/") == "docs.python.org"

    def test_lowercases_host(self):
        assert hostname_title("https://WWW.Example.COM") == "example.com"

    def test_no_host(self):
        assert hostname_title("/relative/path") is None

    def test_invalid_url(self):
        assert hostname_title("http://[::1") is None


# ===========================================================================
# clamp()
# ===========================================================================


@pytest.mark.parametrize("value, expected", [(140, 100), (-5, 0), (42, 42)])
def test_clamp(value, expected):
    assert clamp(value) == expected


# ===========================================================================
# with_deadline()
# ===========================================================================


@pytest.mark.asyncio
async def test_with_deadline_without_timeout():
    async def work():
        return "ok"

    assert await with_deadline(work(), None, "op") == "ok"


@pytest.mark.asyncio
async def test_with_deadline_completes_in_time():
    async def work():
        return 7

    assert await with_deadline(work(), 5.0, "op") == 7


@pytest.mark.asyncio
async def test_with_deadline_times_out():
    async def stall():
        await asyncio.sleep(10)

    with pytest.raises(RequestTimeoutError) as exc_info:
        await with_deadline(stall(), 0.01, "Gemini analysis", provider="gemini")

    err = exc_info.value
    assert isinstance(err, NetworkError)
    assert err.operation == "Gemini analysis"
    assert err.timeout == 0.01
    assert err.provider == "gemini"
