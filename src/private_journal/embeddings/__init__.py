"""Embedding providers."""

from private_journal.embeddings.gateway import (
    PROVIDERS,
    EmbeddingGateway,
    GatewayConfig,
    resolve_effective_provider,
)
from private_journal.embeddings.local import LocalEmbedding

__all__ = [
    "PROVIDERS",
    "EmbeddingGateway",
    "GatewayConfig",
    "LocalEmbedding",
    "resolve_effective_provider",
]
