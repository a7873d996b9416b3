from workflow_agent.config import RetrievalConfig
from workflow_agent.retrieval.classifier import classify
from workflow_agent.retrieval.scorer import MetadataOverlapReranker, rank
from workflow_agent.types import InferredMetadata, RetrievedExample


def _example(title: str, metadata: InferredMetadata | None = None) -> RetrievedExample:
    return RetrievedExample(title=title, summary=f"{title} summary", metadata=metadata)


def test_rank_promotes_metadata_overlap_and_truncates() -> None:
    plain = _example("plain")
    no_metadata = _example("no-metadata")
    digest = _example(
        "digest",
        InferredMetadata(domains={"summaries"}, channels={"slack"}, trigger="schedule"),
    )
    candidates = [plain, no_metadata, digest]

    ranked = rank("Summarize news daily and send it to Slack", candidates, top_k=2)

    assert ranked[0] is digest
    assert len(ranked) == 2
    assert all(any(item is candidate for candidate in candidates) for item in ranked)


def test_ties_keep_retrieval_order() -> None:
    first = _example("first", InferredMetadata(domains={"research"}))
    second = _example("second", InferredMetadata(domains={"research"}))
    third = _example("third")

    ranked = rank("Research competitors", [third, first, second], top_k=3)

    assert [item.title for item in ranked] == ["first", "second", "third"]


def test_score_weights_follow_config() -> None:
    reranker = MetadataOverlapReranker(RetrievalConfig())
    query = InferredMetadata(
        industries={"ecommerce"},
        domains={"notifications"},
        channels={"telegram"},
        trigger="webhook",
    )
    candidate = _example(
        "orders",
        InferredMetadata(
            industries={"ecommerce"},
            domains={"notifications"},
            channels={"telegram"},
            trigger="WEBHOOK",
        ),
    )

    assert reranker.score(query, candidate) == 3.0 + 2.0 + 1.5 + 1.0
    assert reranker.score(query, _example("bare")) == 0.0


def test_higher_scores_never_follow_lower_scores() -> None:
    reranker = MetadataOverlapReranker()
    candidates = [
        _example("a"),
        _example("b", InferredMetadata(channels={"slack"})),
        _example("c", InferredMetadata(industries={"marketing"}, channels={"slack"})),
        _example("d", InferredMetadata(domains={"approvals"})),
    ]
    query = "Marketing approval flow that notifies Slack"

    ranked = reranker.rank(query, candidates, top_k=4)

    scores = [reranker.score(classify(query), item) for item in ranked]
    assert scores == sorted(scores, reverse=True)
