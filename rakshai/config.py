"""
Centralized configuration loader for RakshAI.

Loads settings from YAML files and environment variables, providing
sensible defaults when configuration files are absent, and resolves
which provider and credential a request should use.

Provides:
    - Settings: Model identifiers, endpoint, deadline and logging settings
    - get_settings(): Singleton accessor for Settings (entry point only)
    - CredentialSources: Immutable snapshot of the layered credential sources
    - CredentialResolver: Active-provider and API-key lookup
    - Credentials: Resolved (provider, key) pair with ``require()``

Credential lookup order, first non-empty match wins:
    1. persistent key-value store (``config/credentials.yaml``)
    2. namespaced build-time variable from ``.env`` (``RAKSHAI_GEMINI_API_KEY``)
    3. process environment variable (``GEMINI_API_KEY``)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

from rakshai.exceptions import ConfigError
from rakshai.models import ProviderIdentity

# ---------------------------------------------------------------------------
# Project root directory (parent of rakshai/)
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = logging.getLogger(__name__)

PROVIDER_KEY = "AI_PROVIDER"
DEFAULT_PROVIDER = ProviderIdentity.PERPLEXITY
DEFAULT_ENV_NAMESPACE = "RAKSHAI_"


# ===========================================================================
# GLOBAL SETTINGS
# ===========================================================================


@dataclass
class Settings:
    """
    Application settings.

    Loaded from ``config/settings.yaml`` when available, falling back to
    sensible defaults.  ``RAKSHAI_LOG_LEVEL`` and ``RAKSHAI_REQUEST_TIMEOUT``
    from the environment or ``.env`` override the YAML values.
    """

    # Gemini model identifiers
    gemini_fast_model: str = "gemini-3-flash-preview"
    gemini_deep_model: str = "gemini-3-pro-preview"
    gemini_ocr_model: str = "gemini-2.5-flash-image"

    # Perplexity model identifiers and endpoint
    perplexity_fast_model: str = "sonar"
    perplexity_deep_model: str = "sonar-pro"
    perplexity_base_url: str = "https://api.perplexity.ai"
    perplexity_temperature: float = 0.2  # Low for deterministic scoring

    # Per-call deadline in seconds; None waits indefinitely
    request_timeout: Optional[float] = None

    # Credentials
    credential_store_path: str = "config/credentials.yaml"
    env_namespace: str = DEFAULT_ENV_NAMESPACE

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_yaml(
        cls, path: Optional[Path] = None, dotenv_path: Optional[Path] = None
    ) -> "Settings":
        """
        Load settings from a YAML file.

        If the file does not exist, returns an instance with all defaults.
        Unknown keys are ignored with a warning.  ``RAKSHAI_LOG_LEVEL`` and
        ``RAKSHAI_REQUEST_TIMEOUT`` are then taken from the process
        environment, or from the ``.env`` file, which is read with
        ``dotenv_values`` and never exported to ``os.environ``.

        Args:
            path: Path to the YAML file. Defaults to
                ``<PROJECT_ROOT>/config/settings.yaml``.
            dotenv_path: ``.env`` file. Defaults to ``<PROJECT_ROOT>/.env``.

        Returns:
            Populated Settings instance.

        Raises:
            ConfigError: If the YAML file exists but cannot be parsed.
        """
        path = path or PROJECT_ROOT / "config" / "settings.yaml"
        dotenv_path = dotenv_path or PROJECT_ROOT / ".env"

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(
                    f"Failed to parse settings YAML at {path}: {exc}"
                ) from exc
            if not isinstance(data, dict):
                raise ConfigError(f"Settings YAML at {path} must be a mapping")

        known = set(cls.__dataclass_fields__)
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                logger.warning("Ignoring unknown settings key '%s' in %s", key, path)

        settings = cls(**kwargs)

        # -----------------------------------------------------------------
        # Environment variable overrides
        # -----------------------------------------------------------------
        dotenv: Dict[str, Optional[str]] = (
            dict(dotenv_values(dotenv_path)) if dotenv_path.exists() else {}
        )

        env_level = os.environ.get("RAKSHAI_LOG_LEVEL") or dotenv.get("RAKSHAI_LOG_LEVEL")
        if env_level:
            settings.log_level = env_level.upper()

        env_timeout = os.environ.get("RAKSHAI_REQUEST_TIMEOUT") or dotenv.get(
            "RAKSHAI_REQUEST_TIMEOUT"
        )
        if env_timeout:
            try:
                settings.request_timeout = float(env_timeout)
            except (ValueError, TypeError):
                logger.warning(
                    "Invalid value for RAKSHAI_REQUEST_TIMEOUT='%s', using default",
                    env_timeout,
                )

        return settings

    def model_for(self, provider: ProviderIdentity, deep: bool) -> str:
        """Text-analysis model identifier for a provider and depth."""
        prefix = provider.value
        return getattr(self, f"{prefix}_{'deep' if deep else 'fast'}_model")


# ===========================================================================
# SINGLETON SETTINGS ACCESSOR
# ===========================================================================

_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global Settings singleton.

    On first call, loads from ``config/settings.yaml`` (or defaults).
    Subsequent calls return the cached instance.  Only the entry point
    uses this; core components receive Settings explicitly.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings.from_yaml()
    return _settings_instance


def reset_settings() -> None:
    """Reset the cached Settings singleton."""
    global _settings_instance
    _settings_instance = None


# ===========================================================================
# CREDENTIAL SOURCES
# ===========================================================================


def load_credential_store(path: Path) -> Dict[str, str]:
    """
    Read the persistent key-value credential store.

    Args:
        path: Path to a flat YAML mapping.

    Returns:
        Mapping of key to string value.  Empty if the file is absent.
        Null values are dropped.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse credential store at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Credential store at {path} must be a key-value mapping")
    return {str(k): str(v) for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class CredentialSources:
    """
    Immutable snapshot of every layer a credential may come from.

    Built once at start-up and passed to ``CredentialResolver`` so that
    the core never reads ambient global state.
    """

    store: Mapping[str, str] = field(default_factory=dict)
    build_env: Mapping[str, str] = field(default_factory=dict)
    process_env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "store", MappingProxyType(dict(self.store)))
        object.__setattr__(self, "build_env", MappingProxyType(dict(self.build_env)))
        object.__setattr__(self, "process_env", MappingProxyType(dict(self.process_env)))

    @classmethod
    def load(
        cls,
        store_path: Optional[Path] = None,
        dotenv_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CredentialSources":
        """
        Snapshot the credential store, the ``.env`` file and the environment.

        Args:
            store_path: Credential store YAML.  Defaults to
                ``<PROJECT_ROOT>/config/credentials.yaml``.
            dotenv_path: ``.env`` file read with ``dotenv_values`` (its
                values are not exported to ``os.environ``).  Defaults to
                ``<PROJECT_ROOT>/.env``.
            environ: Process environment.  Defaults to ``os.environ``.
        """
        store_path = store_path or PROJECT_ROOT / "config" / "credentials.yaml"
        dotenv_path = dotenv_path or PROJECT_ROOT / ".env"

        build_env: Dict[str, str] = {}
        if dotenv_path.exists():
            build_env = {
                k: v for k, v in dotenv_values(dotenv_path).items() if v is not None
            }

        return cls(
            store=load_credential_store(store_path),
            build_env=build_env,
            process_env=dict(os.environ if environ is None else environ),
        )


# ===========================================================================
# CREDENTIAL RESOLUTION
# ===========================================================================


@dataclass(frozen=True)
class Credentials:
    """API key resolved for one provider; ``api_key`` is ``None`` if absent."""

    provider: ProviderIdentity
    api_key: Optional[str] = None

    def __repr__(self) -> str:
        masked = "***" if self.api_key else None
        return f"Credentials(provider={self.provider.value!r}, api_key={masked!r})"

    @property
    def present(self) -> bool:
        return bool(self.api_key)

    def require(self, operation: str = "analysis") -> str:
        """
        Return the API key or fail.

        Raises:
            ConfigError: If no key is configured for the provider.
        """
        if not self.api_key:
            raise ConfigError(
                f"{self.provider.label} API Key missing for {operation}. "
                f"Please configure {self.provider.api_key_name} in Settings.",
                provider=self.provider.value,
                key_name=self.provider.api_key_name,
            )
        return self.api_key


class CredentialResolver:
    """Pure lookup of the active provider and its key over layered sources.

    Usage::

        resolver = CredentialResolver(CredentialSources.load())
        provider = resolver.active_provider()
        api_key = resolver.resolve(provider).require()
    """

    def __init__(
        self,
        sources: CredentialSources,
        env_namespace: str = DEFAULT_ENV_NAMESPACE,
    ) -> None:
        self.sources = sources
        self.env_namespace = env_namespace

    def lookup(self, key_name: str) -> Optional[str]:
        """First non-empty value for ``key_name`` across the layers."""
        candidates = (
            self.sources.store.get(key_name),
            self.sources.build_env.get(f"{self.env_namespace}{key_name}"),
            self.sources.process_env.get(key_name),
        )
        for value in candidates:
            if value and value.strip():
                return value.strip()
        return None

    def active_provider(self) -> ProviderIdentity:
        """
        Provider selected in configuration; ``perplexity`` when unset.

        Raises:
            ConfigError: If the configured value names no known provider.
        """
        value = self.lookup(PROVIDER_KEY)
        if value is None:
            return DEFAULT_PROVIDER
        try:
            return ProviderIdentity(value.lower())
        except ValueError:
            raise ConfigError(
                f"Unknown {PROVIDER_KEY} '{value}'. "
                f"Valid providers: {[p.value for p in ProviderIdentity]}",
                key_name=PROVIDER_KEY,
            ) from None

    def resolve(self, provider: ProviderIdentity) -> Credentials:
        """Credentials for ``provider``; absence is not an error here."""
        return Credentials(provider=provider, api_key=self.lookup(provider.api_key_name))

    def resolve_all(self) -> Dict[ProviderIdentity, Credentials]:
        """Credentials for every known provider."""
        return {p: self.resolve(p) for p in ProviderIdentity}


# ===========================================================================
# PUBLIC API
# ===========================================================================

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "CredentialSources",
    "CredentialResolver",
    "Credentials",
    "load_credential_store",
    "PROVIDER_KEY",
    "DEFAULT_PROVIDER",
    "PROJECT_ROOT",
]
