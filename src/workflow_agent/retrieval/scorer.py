"""Metadata-overlap reranking of similarity-search candidates."""

from __future__ import annotations

from abc import ABC, abstractmethod

from workflow_agent.config import RetrievalConfig
from workflow_agent.retrieval.classifier import classify
from workflow_agent.types import InferredMetadata, RetrievedExample


class Reranker(ABC):
    """Reranker interface applied to raw similarity-search hits."""

    @abstractmethod
    def rank(
        self, query: str, candidates: list[RetrievedExample], top_k: int
    ) -> list[RetrievedExample]:
        """Return at most `top_k` candidates in final order."""


class MetadataOverlapReranker(Reranker):
    """Reorders candidates by weighted overlap of inferred categorical tags.

    Vector similarity decides the input order; this reranker only promotes
    candidates that share industries, domains, channels or a trigger with the
    query. Equal scores keep their retrieval order (the sort is stable), which is
    why callers oversample the similarity search before reranking.
    """

    def __init__(self, config: RetrievalConfig | None = None) -> None:
        self.config = config or RetrievalConfig()

    def rank(
        self, query: str, candidates: list[RetrievedExample], top_k: int
    ) -> list[RetrievedExample]:
        query_metadata = classify(query)
        scored = [(self.score(query_metadata, candidate), candidate) for candidate in candidates]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [candidate for _, candidate in scored[:top_k]]

    def score(self, query_metadata: InferredMetadata, candidate: RetrievedExample) -> float:
        stored = candidate.metadata
        if stored is None:
            return 0.0

        score = 0.0
        score += len(query_metadata.industries & stored.industries) * self.config.industry_weight
        score += len(query_metadata.domains & stored.domains) * self.config.domain_weight
        score += len(query_metadata.channels & stored.channels) * self.config.channel_weight
        if (
            query_metadata.trigger
            and stored.trigger
            and query_metadata.trigger.lower() == stored.trigger.lower()
        ):
            score += self.config.trigger_weight
        return score


def rank(
    query: str,
    candidates: list[RetrievedExample],
    top_k: int,
    *,
    config: RetrievalConfig | None = None,
) -> list[RetrievedExample]:
    return MetadataOverlapReranker(config).rank(query, candidates, top_k)
