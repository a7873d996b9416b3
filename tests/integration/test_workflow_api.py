import json

from fastapi.testclient import TestClient

from workflow_agent.api.main import app, get_generator
from workflow_agent.config import ModelConfig
from workflow_agent.generation.invoker import ModelInvoker
from workflow_agent.generation.models import ModelResponse
from workflow_agent.generation.pipeline import WorkflowGenerator

REPLY = {
    "summary": "Alert the team on Telegram for large Shopify orders",
    "workflow": {"name": "Order alerts", "nodes": [], "connections": {}},
    "actions": [
        {"type": "add_node", "summary": "Add a Telegram node", "targetNode": "Telegram Alert"},
        {"type": "explode", "summary": "Unknown types become custom"},
    ],
}


class CannedGenerator:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.prompts: list[str] = []

    async def generate(self, system_instruction: str, user_text: str) -> ModelResponse:
        self.prompts.append(user_text)
        return ModelResponse(text=self.reply)


class OverloadedError(Exception):
    status_code = 503


class AlwaysOverloaded:
    async def generate(self, system_instruction: str, user_text: str) -> ModelResponse:
        raise OverloadedError("model is overloaded")


async def _no_sleep(_seconds: float) -> None:
    return None


def _client(generator: WorkflowGenerator) -> TestClient:
    app.dependency_overrides[get_generator] = lambda: generator
    return TestClient(app)


def _generator(model_generator) -> WorkflowGenerator:
    invoker = ModelInvoker(
        lambda _model: model_generator,
        ModelConfig(api_key="test", max_retries=1),
        sleep=_no_sleep,
    )
    return WorkflowGenerator(invoker=invoker)


def test_generate_workflow_trace_and_metrics() -> None:
    canned = CannedGenerator(json.dumps(REPLY))
    client = _client(_generator(canned))
    try:
        response = client.post(
            "/ai/workflow",
            json={
                "prompt": "Tell the team on Telegram about big Shopify orders",
                "existingWorkflow": {"name": "Order alerts", "nodes": [{"name": "Order Webhook"}]},
            },
        )
        assert response.status_code == 200
        payload = response.json()
        assert payload["ok"] is True
        suggestion = payload["suggestion"]
        assert suggestion["summary"] == REPLY["summary"]
        assert suggestion["actions"] == [
            {"type": "add_node", "summary": "Add a Telegram node", "targetNode": "Telegram Alert"},
            {"type": "custom", "summary": "Unknown types become custom"},
        ]
        assert suggestion["rawText"] == json.dumps(REPLY)
        assert "Workflow name: Order alerts" in canned.prompts[0]

        trace = client.get(f"/traces/{suggestion['traceId']}")
        assert trace.status_code == 200
        assert trace.json()["model_attempts"][0]["model"] == "gpt-4.1"

        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        assert metrics.json()["total_requests"] == 1
    finally:
        app.dependency_overrides.clear()


def test_empty_prompt_is_rejected() -> None:
    client = _client(_generator(CannedGenerator("{}")))
    try:
        response = client.post("/ai/workflow", json={"prompt": "   "})
        assert response.status_code == 400
    finally:
        app.dependency_overrides.clear()


def test_unconfigured_model_returns_503() -> None:
    client = _client(WorkflowGenerator(invoker=None))
    try:
        response = client.post("/ai/workflow", json={"prompt": "Send a daily Slack digest"})
        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]

        health = client.get("/health")
        assert health.json()["llm_configured"] is False
    finally:
        app.dependency_overrides.clear()


def test_exhausted_models_return_500() -> None:
    client = _client(_generator(AlwaysOverloaded()))
    try:
        response = client.post("/ai/workflow", json={"prompt": "Send a daily Slack digest"})
        assert response.status_code == 500
        assert "retries exhausted" in response.json()["detail"]
    finally:
        app.dependency_overrides.clear()


def test_unknown_trace_returns_404() -> None:
    client = _client(_generator(CannedGenerator("{}")))
    try:
        assert client.get("/traces/does-not-exist").status_code == 404
    finally:
        app.dependency_overrides.clear()


def test_prompt_catalog_lists_curated_examples() -> None:
    client = TestClient(app)

    response = client.get("/ai/prompts", params={"limit": 3})

    assert response.status_code == 200
    payload = response.json()
    assert payload["count"] == 3
    first = payload["prompts"][0]
    assert {"id", "title", "prompt", "description", "domains", "trigger"} <= set(first)
