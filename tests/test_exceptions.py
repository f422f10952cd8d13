"""Tests for rakshai.exceptions -- error taxonomy.

Validates the hierarchy, attribute storage and message formatting.
"""

import pytest

from rakshai.exceptions import (
    CapabilityError,
    ConfigError,
    NetworkError,
    ParseError,
    RakshAIError,
    RequestTimeoutError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Verify that every exception sits in the correct inheritance chain."""

    @pytest.mark.parametrize(
        "exc_cls",
        [ConfigError, NetworkError, ParseError],
    )
    def test_taxonomy_errors_are_rakshai_errors(self, exc_cls):
        err = exc_cls("test message")
        assert isinstance(err, RakshAIError)
        assert isinstance(err, Exception)

    def test_capability_error_is_rakshai_error(self):
        err = CapabilityError("Image analysis", "perplexity", "gemini")
        assert isinstance(err, RakshAIError)

    def test_timeout_is_network_error(self):
        err = RequestTimeoutError("Gemini analysis", 5.0)
        assert isinstance(err, NetworkError)
        assert isinstance(err, RakshAIError)

    def test_validation_error_is_value_error(self):
        err = ValidationError("invalid")
        assert isinstance(err, ValueError)
        assert not isinstance(err, RakshAIError)

    def test_config_error_not_network_error(self):
        assert not isinstance(ConfigError("missing"), NetworkError)


class TestConfigError:
    def test_stores_provider_and_key_name(self):
        err = ConfigError("missing", provider="gemini", key_name="GEMINI_API_KEY")
        assert err.provider == "gemini"
        assert err.key_name == "GEMINI_API_KEY"
        assert str(err) == "missing"

    def test_defaults_to_none(self):
        err = ConfigError("bad yaml")
        assert err.provider is None
        assert err.key_name is None


class TestCapabilityError:
    def test_message_names_required_provider(self):
        err = CapabilityError("Image analysis", "perplexity", "gemini")
        assert err.operation == "Image analysis"
        assert err.provider == "perplexity"
        assert err.required_provider == "gemini"
        assert "gemini" in str(err)
        assert "perplexity" in str(err)


class TestNetworkError:
    def test_stores_status_code(self):
        err = NetworkError("Invalid API key", provider="perplexity", status_code=401)
        assert err.status_code == 401
        assert err.provider == "perplexity"
        assert str(err) == "Invalid API key"

    def test_timeout_message(self):
        err = RequestTimeoutError("Perplexity analysis", 2.5, provider="perplexity")
        assert err.operation == "Perplexity analysis"
        assert err.timeout == 2.5
        assert err.provider == "perplexity"
        assert err.status_code is None
        assert "2.5 seconds" in str(err)


class TestParseError:
    def test_keeps_raw_text(self):
        err = ParseError("bad json", raw_text='{"score": ')
        assert err.raw_text == '{"score": '

    def test_can_be_caught_as_base(self):
        with pytest.raises(RakshAIError):
            raise ParseError("bad json")
