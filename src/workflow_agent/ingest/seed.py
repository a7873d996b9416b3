"""Seed the reference-workflow collection from curated samples.

Usage:
    workflow-agent-seed [--file data.json] [--in-memory]
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from workflow_agent.config import Settings
from workflow_agent.ingest.samples import SampleWorkflow, build_example_document, load_sample_workflows
from workflow_agent.obs.logging_config import configure_logging
from workflow_agent.retrieval.vector_store import ExampleSearch, InMemoryExampleStore, QdrantExampleStore

logger = logging.getLogger(__name__)


def seed_examples(store: ExampleSearch, samples: list[SampleWorkflow], *, recreate: bool = True) -> int:
    """Index `samples` into `store` and return how many were written.

    With `recreate`, a Qdrant collection is dropped and rebuilt; an in-memory
    store is cleared first.
    """

    documents = [build_example_document(sample) for sample in samples]
    if recreate and isinstance(store, QdrantExampleStore):
        store.recreate(documents)
        return len(documents)
    if recreate and isinstance(store, InMemoryExampleStore):
        store.clear()
    store.add_documents(documents)
    return len(documents)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed reference workflows for retrieval.")
    parser.add_argument("--file", help="JSON file of sample workflows (defaults to bundled samples)")
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Index into a throwaway in-memory store (dry run)",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging()
    settings = Settings.from_env()

    try:
        samples = load_sample_workflows(args.file)
        store: ExampleSearch = (
            InMemoryExampleStore()
            if args.in_memory
            else QdrantExampleStore(settings.vector_store, settings.models)
        )
        count = seed_examples(store, samples)
    except Exception:
        logger.exception("Seeding failed")
        return 1

    target = "in-memory store" if args.in_memory else f'collection "{settings.vector_store.collection}"'
    logger.info("Seeded %d workflow example(s) into %s", count, target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
