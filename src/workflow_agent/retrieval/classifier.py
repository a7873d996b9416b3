"""Keyword tables that tag free text with industry/domain/channel/trigger labels.

The same `classify` function tags reference workflows at indexing time and the
incoming request at query time, so overlap scores compare like with like.
Matching is plain lower-case substring search; keywords are chosen so common
words do not collide (e.g. "advertis" instead of "ads", which hides in "threads").
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from workflow_agent.types import InferredMetadata

KeywordTable = Mapping[str, tuple[str, ...]]

INDUSTRY_KEYWORDS: KeywordTable = MappingProxyType(
    {
        "ecommerce": ("shopify", "ecommerce", "e-commerce", "woocommerce", "merchant", "storefront"),
        "marketing": ("marketing", "campaign", "advertis", "ugc", "brand", "seo"),
        "sales": ("sales", "crm", "prospect", "outreach", "hubspot", "salesforce"),
        "media": ("video", "youtube", "tiktok", "podcast", "music", "influencer"),
        "recruiting": ("recruit", "hiring", "job board", "job post", "candidate", "resume"),
        "finance": ("invoice", "finance", "accounting", "payment", "expense", "stripe"),
        "support": ("customer support", "helpdesk", "support ticket", "zendesk", "freshdesk"),
    }
)

DOMAIN_KEYWORDS: KeywordTable = MappingProxyType(
    {
        "summaries": ("summar", "digest", "recap", "tl;dr"),
        "research": ("research", "scrap", "crawl", "monitor"),
        "content": ("blog", "article", "caption", "copywrit", "scripts", "draft"),
        "lead generation": ("lead gen", "leadgen", "leads", "enrich"),
        "scheduling": ("schedul", "calendar", "publish"),
        "data sync": ("sync", "spreadsheet", "google sheets", "airtable", "database", "backup"),
        "approvals": ("approval", "approve", "human-in-the-loop", "sign-off", "signoff"),
        "notifications": ("notify", "notification", "alert", "remind"),
    }
)

CHANNEL_KEYWORDS: KeywordTable = MappingProxyType(
    {
        "slack": ("slack",),
        "email": ("email", "gmail", "outlook", "newsletter"),
        "telegram": ("telegram",),
        "discord": ("discord",),
        "linkedin": ("linkedin",),
        "instagram": ("instagram",),
        "whatsapp": ("whatsapp",),
        "sms": ("sms", "twilio", "text message"),
        "twitter": ("twitter", "tweet"),
    }
)

# Iteration order matters: the first label with a matching keyword wins.
TRIGGER_KEYWORDS: KeywordTable = MappingProxyType(
    {
        "webhook": ("webhook", "form submission", "http request", "api call"),
        "schedule": ("daily", "every day", "every morning", "weekly", "hourly", "cron", "each morning"),
        "email": ("new email", "incoming email", "when an email", "inbox"),
        "manual": ("manual", "on demand", "on-demand", "button"),
        "event": ("whenever", "new row", "new order", "new lead", "new file"),
    }
)


def classify(text: str) -> InferredMetadata:
    """Tag text with every matching industry/domain/channel and at most one trigger."""

    lowered = text.lower()
    return InferredMetadata(
        industries=_matching_labels(lowered, INDUSTRY_KEYWORDS),
        domains=_matching_labels(lowered, DOMAIN_KEYWORDS),
        channels=_matching_labels(lowered, CHANNEL_KEYWORDS),
        trigger=_first_matching_label(lowered, TRIGGER_KEYWORDS),
    )


def _matching_labels(text: str, table: KeywordTable) -> set[str]:
    return {
        label
        for label, keywords in table.items()
        if any(keyword in text for keyword in keywords)
    }


def _first_matching_label(text: str, table: KeywordTable) -> str | None:
    for label, keywords in table.items():
        if any(keyword in text for keyword in keywords):
            return label
    return None
