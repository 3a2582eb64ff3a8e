"""Shared pytest fixtures."""

from __future__ import annotations

import hashlib
import math
import os
import re

# Use litellm's bundled model cost map instead of fetching it over the network
# at import time (the offline fetch-and-retry path can deadlock under pytest).
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest
import pytest_asyncio

from private_journal.db.index import ScopedVectorIndex
from private_journal.db.vectors import open_index_db
from private_journal.embeddings.gateway import EmbeddingGateway, GatewayConfig


class FakeLocalEmbedding:
    """Deterministic bag-of-words embedding; stands in for the sentence-transformers model.

    Each word is hashed into one of ``dimensions`` buckets, so texts sharing
    words are close under cosine distance. A small constant keeps the empty
    string from producing a zero vector.
    """

    model_name = "fake-hash"

    def __init__(self, dimensions: int = 16) -> None:
        self._dimensions = dimensions
        self.load_calls = 0
        self.embed_calls: list[str] = []

    @property
    def model(self) -> str:
        return f"local/{self.model_name}"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def load(self) -> None:
        self.load_calls += 1

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return hash_vector(text, self._dimensions)


def hash_vector(text: str, dimensions: int = 16) -> list[float]:
    vec = [0.01] * dimensions
    for token in re.findall(r"\w+", text.lower()):
        bucket = hashlib.md5(token.encode()).digest()[0] % dimensions
        vec[bucket] += 1.0
    norm = math.sqrt(sum(v * v for v in vec))
    return [v / norm for v in vec]


@pytest.fixture
def fake_local_cls() -> type[FakeLocalEmbedding]:
    return FakeLocalEmbedding


@pytest.fixture
def fake_local() -> FakeLocalEmbedding:
    return FakeLocalEmbedding()


@pytest.fixture
def gateway(fake_local) -> EmbeddingGateway:
    return EmbeddingGateway(GatewayConfig(provider="local"), local=fake_local)


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with sqlite-vec loaded, closed after test."""
    conn = open_index_db(tmp_path / "index.db")
    yield conn
    conn.close()


@pytest_asyncio.fixture
async def index(tmp_path, gateway):
    """Fresh ScopedVectorIndex per test, closed afterwards."""
    idx = ScopedVectorIndex(tmp_path / "index" / "journal.db", gateway)
    yield idx
    await idx.close()


@pytest.fixture
def roots(tmp_path):
    """(project_root, user_root) journal directories under tmp_path."""
    return tmp_path / "project" / ".private-journal", tmp_path / "home" / ".private-journal"
