from workflow_agent.retrieval.classifier import TRIGGER_KEYWORDS, classify


def test_classify_reddit_notion_request_matches_keyword_tables() -> None:
    metadata = classify("Summarize Reddit threads about startups and post to Notion daily")

    assert metadata.domains == {"summaries"}
    assert metadata.industries == set()
    assert metadata.channels == set()
    assert metadata.trigger == "schedule"


def test_classify_is_deterministic() -> None:
    text = "Send a weekly Slack digest of new Shopify orders and email the finance team"

    first = classify(text)
    second = classify(text)

    assert first == second
    assert first.industries == {"ecommerce", "finance"}
    assert first.channels == {"slack", "email"}
    assert first.domains == {"summaries"}


def test_classify_accumulates_multiple_categories() -> None:
    metadata = classify("Scrape LinkedIn job posts, enrich leads and sync them to Airtable")

    assert {"research", "lead generation", "data sync"} <= metadata.domains
    assert "recruiting" in metadata.industries
    assert metadata.channels == {"linkedin"}


def test_trigger_is_first_match_in_table_order() -> None:
    labels = list(TRIGGER_KEYWORDS)
    assert labels.index("webhook") < labels.index("schedule")

    metadata = classify("Every day at 9am, call a webhook with the latest report")

    assert metadata.trigger == "webhook"


def test_classify_without_matches_returns_empty_metadata() -> None:
    metadata = classify("Hello there")

    assert metadata.is_empty()
    assert metadata.trigger is None
