"""Local sentence-transformers embeddings — no network once the model is cached."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_MODEL = "all-MiniLM-L6-v2"


class LocalEmbedding:
    """Deterministic embeddings from a lazily loaded SentenceTransformer.

    The model is loaded on first use, at most once even when several threads
    ask for it at the same time.
    """

    def __init__(self, model_name: str = DEFAULT_LOCAL_MODEL) -> None:
        self.model_name = model_name
        self._model: Any = None
        self._lock = threading.Lock()

    @property
    def model(self) -> str:
        """Model string in provider/model form, e.g. ``local/all-MiniLM-L6-v2``."""
        return f"local/{self.model_name}"

    @property
    def dimensions(self) -> int:
        return self._load().get_sentence_embedding_dimension()

    def _load(self) -> Any:
        with self._lock:
            if self._model is None:
                from sentence_transformers import SentenceTransformer

                logger.info("Loading local embedding model %s", self.model_name)
                self._model = SentenceTransformer(self.model_name)
        return self._model

    async def load(self) -> None:
        await asyncio.to_thread(self._load)

    async def embed(self, text: str) -> list[float]:
        model = await asyncio.to_thread(self._load)
        vector = await asyncio.to_thread(model.encode, text, normalize_embeddings=True)
        return [float(v) for v in vector]
