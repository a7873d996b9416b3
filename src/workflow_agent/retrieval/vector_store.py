"""Reference-workflow stores and the process-wide store handle."""

from __future__ import annotations

import asyncio
from hashlib import blake2b
from math import sqrt
from typing import Any, Protocol

from langchain_core.documents import Document

from workflow_agent.config import ModelConfig, Settings, VectorStoreConfig


class ExampleSearch(Protocol):
    """Similarity-search contract used by the retriever."""

    async def search(self, query: str, k: int) -> list[Document]:
        """Return up to `k` documents, most similar first."""

    def add_documents(self, documents: list[Document]) -> None:
        """Append documents to the collection."""


class HashingEmbedder:
    """Deterministic token-hashing embedding without external model calls.

    Used by `InMemoryExampleStore` for tests and offline runs; production
    retrieval embeds with the configured OpenAI embedding model.
    """

    def __init__(self, dimension: int = 256) -> None:
        self.dimension = dimension

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in text.lower().split():
            digest = blake2b(token.encode("utf-8"), digest_size=8).digest()
            idx = int.from_bytes(digest[:4], "little") % self.dimension
            vector[idx] += -1.0 if digest[4] % 2 else 1.0

        norm = sqrt(sum(value * value for value in vector))
        if norm == 0:
            return vector
        return [value / norm for value in vector]


class InMemoryExampleStore:
    """Cosine-similarity store over hashed embeddings, kept in process memory."""

    def __init__(self, embedder: HashingEmbedder | None = None) -> None:
        self._embedder = embedder or HashingEmbedder()
        self._records: list[tuple[Document, list[float]]] = []

    def add_documents(self, documents: list[Document]) -> None:
        for document in documents:
            self._records.append((document, self._embedder.embed(document.page_content)))

    def clear(self) -> None:
        self._records.clear()

    async def search(self, query: str, k: int) -> list[Document]:
        query_embedding = self._embedder.embed(query)
        ranked = sorted(
            self._records,
            key=lambda record: _cosine_similarity(query_embedding, record[1]),
            reverse=True,
        )
        return [document for document, _ in ranked[:k]]


class QdrantExampleStore:
    """Qdrant collection accessed through the LangChain community integration."""

    def __init__(self, config: VectorStoreConfig, models: ModelConfig) -> None:
        try:
            from langchain_community.vectorstores import Qdrant
            from langchain_openai import OpenAIEmbeddings
            from qdrant_client import QdrantClient
        except Exception as exc:  # pragma: no cover - import path is environment-dependent
            raise RuntimeError(
                "Qdrant dependencies are not available. Install qdrant-client/langchain-community."
            ) from exc

        self._qdrant_cls = Qdrant
        self._config = config
        embedding_kwargs: dict[str, Any] = {"model": models.embedding_model}
        if models.api_key:
            embedding_kwargs["api_key"] = models.api_key
        self._embeddings = OpenAIEmbeddings(**embedding_kwargs)
        self._client = QdrantClient(url=config.url, api_key=config.api_key)
        self._store: Any = Qdrant(
            client=self._client,
            collection_name=config.collection,
            embeddings=self._embeddings,
        )

    async def search(self, query: str, k: int) -> list[Document]:
        return await asyncio.to_thread(self._store.similarity_search, query, k)

    def add_documents(self, documents: list[Document]) -> None:
        self._store.add_documents(documents)

    def recreate(self, documents: list[Document]) -> None:
        """Drop the collection and rebuild it from `documents`."""
        self._store = self._qdrant_cls.from_documents(
            documents,
            self._embeddings,
            url=self._config.url,
            api_key=self._config.api_key,
            collection_name=self._config.collection,
            force_recreate=True,
        )


_store_handle: ExampleSearch | None = None


async def get_example_store(settings: Settings) -> ExampleSearch:
    """Return the process-wide store, building it on first use.

    Concurrent first calls may each build a client; the last one wins. A failed
    build leaves the handle unset so a later request tries again.
    """

    global _store_handle
    if _store_handle is None:
        store = await asyncio.to_thread(
            QdrantExampleStore, settings.vector_store, settings.models
        )
        _store_handle = store
    return _store_handle


def set_example_store(store: ExampleSearch | None) -> None:
    """Install (or clear, with None) the process-wide store handle."""
    global _store_handle
    _store_handle = store


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
