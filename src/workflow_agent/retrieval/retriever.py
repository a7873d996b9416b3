"""Best-effort retrieval of reference workflows for few-shot grounding."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from langchain_core.documents import Document

from workflow_agent.config import RetrievalConfig
from workflow_agent.retrieval.scorer import MetadataOverlapReranker, Reranker
from workflow_agent.retrieval.vector_store import ExampleSearch
from workflow_agent.types import InferredMetadata, RetrievedExample

logger = logging.getLogger(__name__)

StoreFactory = Callable[[], Awaitable[ExampleSearch]]


class ExampleRetriever:
    """Oversampled similarity search followed by metadata reranking.

    Retrieval is an enhancement, not a dependency: any failure to reach the
    store, search it, or read its payloads is logged and yields no examples.
    """

    def __init__(
        self,
        store_factory: StoreFactory,
        config: RetrievalConfig | None = None,
        reranker: Reranker | None = None,
    ) -> None:
        self.store_factory = store_factory
        self.config = config or RetrievalConfig()
        self.reranker = reranker or MetadataOverlapReranker(self.config)

    async def retrieve(self, query: str, *, top_k: int | None = None) -> list[RetrievedExample]:
        final_k = top_k or self.config.top_k
        try:
            store = await self.store_factory()
            documents = await store.search(query, final_k * self.config.oversample_factor)
            candidates = [document_to_example(document) for document in documents]
        except Exception as exc:
            logger.warning("Example retrieval failed, continuing without references: %s", exc)
            return []

        return self.reranker.rank(query, candidates, final_k)


def document_to_example(document: Document) -> RetrievedExample:
    """Read a stored reference workflow back from its search document."""

    payload: Mapping[str, Any] = document.metadata or {}
    tags = payload.get("tags")
    workflow = payload.get("workflow")
    return RetrievedExample(
        title=str(payload.get("title") or "Untitled workflow"),
        summary=document.page_content,
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        metadata=InferredMetadata.from_payload(payload.get("metadata")),
        graph=dict(workflow) if isinstance(workflow, Mapping) else None,
    )
