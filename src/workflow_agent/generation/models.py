"""Generative model adapters behind a minimal `generate` contract."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from workflow_agent.config import ModelConfig


@dataclass(slots=True)
class ModelResponse:
    text: str


class ModelGenerator(Protocol):
    """A single configured model that turns prompts into text."""

    async def generate(self, system_instruction: str, user_text: str) -> ModelResponse:
        """Run one completion; transport errors propagate to the caller."""


GeneratorFactory = Callable[[str], ModelGenerator]


class ChatModelGenerator:
    """Adapts any LangChain chat model to `ModelGenerator`."""

    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    async def generate(self, system_instruction: str, user_text: str) -> ModelResponse:
        message = await self.llm.ainvoke(
            [SystemMessage(content=system_instruction), HumanMessage(content=user_text)]
        )
        return ModelResponse(text=message_text(message).strip())


def message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                if "text" in item:
                    parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return "".join(parts)
    return str(content)


def openai_generator_factory(config: ModelConfig) -> GeneratorFactory | None:
    """Build generators for OpenAI chat models, or None without an API key."""

    if not config.api_key:
        return None

    from langchain_openai import ChatOpenAI

    def _factory(model: str) -> ModelGenerator:
        return ChatModelGenerator(
            ChatOpenAI(
                model=model,
                temperature=config.temperature,
                api_key=config.api_key,
                max_retries=0,
            )
        )

    return _factory
