"""Configuration models for the workflow generation pipeline."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configures the generative model chain and its retry policy."""

    api_key: str | None = Field(default=None, repr=False)
    primary_model: str = "gpt-4.1"
    fallback_model: str | None = "gpt-4.1-mini"
    secondary_fallback_model: str | None = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_retries: int = Field(default=3, ge=1)
    retry_base_delay_seconds: float = Field(default=1.0, ge=0.0)

    def model_chain(self) -> list[str]:
        """Primary, fallback and secondary fallback ids with repeats removed."""
        chain: list[str] = []
        for model in (self.primary_model, self.fallback_model, self.secondary_fallback_model):
            if model and model not in chain:
                chain.append(model)
        return chain


class VectorStoreConfig(BaseModel):
    """Connection settings for the reference workflow collection."""

    url: str = "http://localhost:6333"
    api_key: str | None = Field(default=None, repr=False)
    collection: str = "ai_workflow_examples"


class RetrievalConfig(BaseModel):
    """Configures example retrieval and metadata reranking weights."""

    top_k: int = Field(default=3, ge=1)
    oversample_factor: int = Field(default=3, ge=1)
    industry_weight: float = Field(default=3.0, ge=0.0)
    domain_weight: float = Field(default=2.0, ge=0.0)
    channel_weight: float = Field(default=1.5, ge=0.0)
    trigger_weight: float = Field(default=1.0, ge=0.0)


class Settings(BaseModel):
    """Process-wide settings assembled from the hosting environment."""

    models: ModelConfig = Field(default_factory=ModelConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        models = ModelConfig()
        vector_store = VectorStoreConfig()
        retrieval = RetrievalConfig()
        return cls(
            models=ModelConfig(
                api_key=os.getenv("OPENAI_API_KEY") or None,
                primary_model=os.getenv("WORKFLOW_MODEL", models.primary_model),
                fallback_model=os.getenv("WORKFLOW_FALLBACK_MODEL", models.fallback_model),
                secondary_fallback_model=os.getenv(
                    "WORKFLOW_SECONDARY_FALLBACK_MODEL", models.secondary_fallback_model
                ),
                embedding_model=os.getenv("EMBEDDING_MODEL", models.embedding_model),
                max_retries=int(os.getenv("MODEL_MAX_RETRIES", str(models.max_retries))),
                retry_base_delay_seconds=float(
                    os.getenv("MODEL_RETRY_BASE_DELAY", str(models.retry_base_delay_seconds))
                ),
            ),
            vector_store=VectorStoreConfig(
                url=os.getenv("QDRANT_URL", vector_store.url),
                api_key=os.getenv("QDRANT_API_KEY") or None,
                collection=os.getenv("QDRANT_COLLECTION", vector_store.collection),
            ),
            retrieval=RetrievalConfig(
                top_k=int(os.getenv("RETRIEVAL_TOP_K", str(retrieval.top_k))),
            ),
            allowed_origins=_split_origins(os.getenv("AI_WORKFLOW_ALLOWED_ORIGIN", "*")),
        )


def _split_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]
