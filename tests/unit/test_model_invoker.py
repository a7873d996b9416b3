import asyncio

import pytest

from workflow_agent.config import ModelConfig
from workflow_agent.errors import ModelInvocationError
from workflow_agent.generation.invoker import ModelInvoker, is_overload_error
from workflow_agent.generation.models import ModelResponse


class OverloadedError(Exception):
    def __init__(self, message: str = "model is overloaded", status_code: int = 503) -> None:
        super().__init__(message)
        self.status_code = status_code


class ScriptedGenerator:
    """Plays back a script of exceptions and texts, one entry per call."""

    def __init__(self, script: list[object]) -> None:
        self.script = list(script)
        self.calls = 0

    async def generate(self, system_instruction: str, user_text: str) -> ModelResponse:
        self.calls += 1
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return ModelResponse(text=str(step))


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _invoker(generators: dict[str, ScriptedGenerator], **config: object) -> tuple[ModelInvoker, RecordingSleep]:
    sleep = RecordingSleep()
    settings = ModelConfig(
        primary_model="primary",
        fallback_model="fallback",
        secondary_fallback_model="secondary",
        **config,
    )
    return ModelInvoker(generators.__getitem__, settings, sleep=sleep), sleep


def test_overload_retries_then_succeeds_without_fallback() -> None:
    primary = ScriptedGenerator([OverloadedError(), OverloadedError(), "ok"])
    fallback = ScriptedGenerator(["fallback text"])
    invoker, sleep = _invoker({"primary": primary, "fallback": fallback}, max_retries=3)

    text = asyncio.run(invoker.invoke_with_fallback("prompt"))

    assert text == "ok"
    assert primary.calls == 3
    assert fallback.calls == 0
    assert sleep.delays == [1.0, 2.0]


def test_backoff_uses_base_delay() -> None:
    primary = ScriptedGenerator([OverloadedError(), OverloadedError(), OverloadedError(), "ok"])
    invoker, sleep = _invoker({"primary": primary}, max_retries=4, retry_base_delay_seconds=0.5)

    assert asyncio.run(invoker.invoke("prompt")) == "ok"
    assert sleep.delays == [0.5, 1.0, 2.0]


def test_non_retryable_error_skips_remaining_retries_but_falls_back() -> None:
    primary = ScriptedGenerator([ValueError("invalid api key"), "never reached"])
    fallback = ScriptedGenerator(["from fallback"])
    invoker, sleep = _invoker({"primary": primary, "fallback": fallback}, max_retries=3)

    attempts = []
    text = asyncio.run(invoker.invoke_with_fallback("prompt", observer=attempts.append))

    assert text == "from fallback"
    assert primary.calls == 1
    assert sleep.delays == []
    assert [(a.model, a.attempt, a.error is None) for a in attempts] == [
        ("primary", 1, False),
        ("fallback", 1, True),
    ]


def test_exhausted_retries_raise_terminal_error() -> None:
    primary = ScriptedGenerator([OverloadedError(), OverloadedError()])
    invoker, _ = _invoker({"primary": primary}, max_retries=2)

    with pytest.raises(ModelInvocationError) as excinfo:
        asyncio.run(invoker.invoke("prompt"))

    assert excinfo.value.model == "primary"
    assert excinfo.value.attempts == 2
    assert excinfo.value.retryable


def test_all_models_failing_propagates_last_error() -> None:
    generators = {
        "primary": ScriptedGenerator([RuntimeError("boom")]),
        "fallback": ScriptedGenerator([OverloadedError()]),
        "secondary": ScriptedGenerator([KeyError("last")]),
    }
    invoker, _ = _invoker(generators, max_retries=1)

    with pytest.raises(ModelInvocationError) as excinfo:
        asyncio.run(invoker.invoke_with_fallback("prompt"))

    assert excinfo.value.model == "secondary"
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_duplicate_models_in_chain_are_skipped() -> None:
    primary = ScriptedGenerator([RuntimeError("down")])
    config = ModelConfig(
        primary_model="same",
        fallback_model="same",
        secondary_fallback_model="other",
        max_retries=1,
    )
    other = ScriptedGenerator(["ok"])
    invoker = ModelInvoker({"same": primary, "other": other}.__getitem__, config, sleep=RecordingSleep())

    assert config.model_chain() == ["same", "other"]
    assert asyncio.run(invoker.invoke_with_fallback("prompt")) == "ok"
    assert primary.calls == 1


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (OverloadedError(status_code=503), True),
        (OverloadedError("too many requests", status_code=429), True),
        (RuntimeError("[503 Service Unavailable] The model is overloaded."), True),
        (RuntimeError("Rate limit reached for requests"), True),
        (OverloadedError("bad request", status_code=400), False),
        (ValueError("invalid json"), False),
    ],
)
def test_overload_classification(error: Exception, expected: bool) -> None:
    assert is_overload_error(error) is expected


def test_generator_build_failure_falls_back_to_next_model() -> None:
    fallback = ScriptedGenerator(["from fallback"])

    def factory(model_id: str) -> ScriptedGenerator:
        if model_id == "primary":
            raise RuntimeError("cannot build primary client")
        return fallback

    settings = ModelConfig(primary_model="primary", fallback_model="fallback", secondary_fallback_model="secondary")
    invoker = ModelInvoker(factory, settings, sleep=RecordingSleep())
    attempts = []

    assert asyncio.run(invoker.invoke_with_fallback("prompt", observer=attempts.append)) == "from fallback"
    assert [(a.model, a.attempt) for a in attempts] == [("primary", 0), ("fallback", 1)]
    assert "cannot build primary client" in attempts[0].error

    with pytest.raises(ModelInvocationError) as excinfo:
        asyncio.run(invoker.invoke("prompt", model="primary"))
    assert excinfo.value.attempts == 0
    assert not excinfo.value.retryable
    assert isinstance(excinfo.value.__cause__, RuntimeError)
