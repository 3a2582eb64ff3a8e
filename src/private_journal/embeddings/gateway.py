"""Embedding gateway — text to vector with provider selection and fallback.

Two separate decisions:
  - Construction: the *effective provider* is resolved once from the
    configured provider and credential availability, and never changes.
    A remote provider without credentials becomes ``local`` (one warning).
  - Per call: a failing remote request falls back to local embeddings for
    that call only. The next call tries the remote provider again.

Remote calls go through ``litellm.aembedding()``.
"""

from __future__ import annotations

import logging
import os
import warnings
from collections.abc import Mapping
from dataclasses import dataclass

import litellm

from private_journal.embeddings.local import DEFAULT_LOCAL_MODEL, LocalEmbedding
from private_journal.exceptions import EmbeddingProviderDegraded

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True

logger = logging.getLogger(__name__)

PROVIDERS: tuple[str, ...] = ("local", "openai", "gemini")

# Credential env vars per remote provider, checked in order.
_PROVIDER_ENV: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}

_KNOWN_DIMENSIONS: dict[str, int] = {
    "openai/text-embedding-3-small": 1536,
    "openai/text-embedding-3-large": 3072,
    "openai/text-embedding-ada-002": 1536,
    "gemini/text-embedding-004": 768,
    "gemini/gemini-embedding-001": 3072,
}


@dataclass(frozen=True)
class GatewayConfig:
    """Embedding provider configuration, fixed for the gateway's lifetime.

    Attributes:
        provider: Requested provider — ``local``, ``openai`` or ``gemini``.
        openai_api_key: Explicit OpenAI key; falls back to ``OPENAI_API_KEY``.
        gemini_api_key: Explicit Gemini key; falls back to ``GEMINI_API_KEY``
            then ``GOOGLE_API_KEY``.
        local_model: sentence-transformers model name for the local provider.
        openai_model: OpenAI embedding model name.
        gemini_model: Gemini embedding model name.
        dimensions: Override the vector size of a remote model not in the
            built-in table.
    """

    provider: str = "local"
    openai_api_key: str | None = None
    gemini_api_key: str | None = None
    local_model: str = DEFAULT_LOCAL_MODEL
    openai_model: str = "text-embedding-3-small"
    gemini_model: str = "text-embedding-004"
    dimensions: int | None = None


def resolve_effective_provider(
    provider: str,
    *,
    openai_key: str | None = None,
    gemini_key: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[str, str | None]:
    """Return ``(effective_provider, api_key)`` for *provider*.

    Explicit keys win over environment variables. A remote provider with no
    key anywhere resolves to ``("local", None)``.

    Raises:
        ValueError: If *provider* is not one of PROVIDERS.
    """
    if provider not in PROVIDERS:
        raise ValueError(
            f"Unknown embedding provider '{provider}' — expected one of {', '.join(PROVIDERS)}."
        )
    if provider == "local":
        return "local", None

    env = os.environ if environ is None else environ
    key = openai_key if provider == "openai" else gemini_key
    if not key:
        key = next((env[var] for var in _PROVIDER_ENV[provider] if env.get(var)), None)
    if not key:
        return "local", None
    return provider, key


class EmbeddingGateway:
    """Map text to a fixed-length vector, hiding provider selection.

    Args:
        config: Provider configuration. Defaults to local embeddings.
        local: Local embedding backend (also the fallback for remote failures).
        environ: Environment used for credential lookup (defaults to os.environ).
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        local: LocalEmbedding | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config or GatewayConfig()
        self._local = local or LocalEmbedding(self._config.local_model)
        self._provider, self._api_key = resolve_effective_provider(
            self._config.provider,
            openai_key=self._config.openai_api_key,
            gemini_key=self._config.gemini_api_key,
            environ=environ,
        )

        if self._provider != self._config.provider:
            env_vars = " or ".join(_PROVIDER_ENV[self._config.provider])
            warnings.warn(
                f"{self._config.provider} embeddings requested but no API key found "
                f"(set {env_vars}). Falling back to local embeddings for this session.",
                EmbeddingProviderDegraded,
                stacklevel=2,
            )

    @property
    def configured_provider(self) -> str:
        return self._config.provider

    @property
    def provider(self) -> str:
        """The effective provider, resolved once at construction."""
        return self._provider

    @property
    def model(self) -> str:
        """Effective model in provider/model form."""
        if self._provider == "openai":
            return f"openai/{self._config.openai_model}"
        if self._provider == "gemini":
            return f"gemini/{self._config.gemini_model}"
        return self._local.model

    @property
    def dimensions(self) -> int:
        """Vector size produced by the effective provider."""
        if self._provider == "local":
            return self._local.dimensions
        if self._config.dimensions is not None:
            return self._config.dimensions
        try:
            return _KNOWN_DIMENSIONS[self.model]
        except KeyError:
            raise ValueError(
                f"Unknown vector size for '{self.model}'. "
                "Set embedding.dimensions in the journal config."
            ) from None

    async def prepare(self) -> None:
        """Load the local model ahead of first use when it is the effective provider."""
        if self._provider == "local":
            await self._local.load()

    async def embed(self, text: str) -> list[float]:
        """Return the embedding for *text*.

        Never raises for a remote-provider failure; that call is served by
        the local provider instead.
        """
        if self._provider == "local":
            return await self._local.embed(text)

        try:
            response = await litellm.aembedding(
                model=self.model,
                input=[text],
                api_key=self._api_key,
            )
            return list(response.data[0]["embedding"])
        except Exception as exc:
            logger.warning(
                "%s embedding failed, falling back to local embeddings: %s",
                self._provider,
                exc,
            )
            return await self._local.embed(text)
