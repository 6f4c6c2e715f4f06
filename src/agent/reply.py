import os
import re
import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from .prompts import RIZZLER_SYSTEM_PROMPT

logger = logging.getLogger('rizzler.agent.reply')

ROLE_PREFIX = re.compile(r"^(User|Human|Assistant):\s*", re.IGNORECASE)
FALLBACK_REPLY = "I'm listening."

# Per-feature sampling, passed to generate_reply as overrides of the model defaults
PICKUP_LINES_SAMPLING = {"temperature": 0.9, "max_tokens": 400, "presence_penalty": 0.2, "frequency_penalty": 0.1}
TINDER_BIO_SAMPLING = {"temperature": 0.8, "max_tokens": 500, "presence_penalty": 0.1, "frequency_penalty": 0.2}


class ReplyGenerationError(Exception):
    """The upstream language model did not produce a usable reply."""


class GenerateReply(Protocol):
    async def generate_reply(self, messages: Sequence[BaseMessage], **sampling: Any) -> str: ...


@dataclass(frozen=True)
class ModelConfig:
    """Settings for the upstream chat model"""
    model_id: str = "gpt-4o-mini"
    temperature: float = 0.8
    max_tokens: int = 500
    presence_penalty: float = 0.1
    frequency_penalty: float = 0.1

    @classmethod
    def from_env(cls) -> "ModelConfig":
        return cls(model_id=os.getenv("MODEL_NAME", "gpt-4o-mini"))


def build_messages(history: Sequence[dict], message: str, system_prompt: str = RIZZLER_SYSTEM_PROMPT) -> list[BaseMessage]:
    """Assemble the prompt: system prompt, prior turns, then the new user message."""
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for turn in history:
        if turn["role"] == "assistant":
            messages.append(AIMessage(content=turn["content"]))
        else:
            messages.append(HumanMessage(content=turn["content"]))
    messages.append(HumanMessage(content=message))
    return messages


def clean_reply(content: str | list) -> str:
    """Strip whitespace and any leading role label from a model reply."""
    if isinstance(content, list):
        content = "".join(
            item if isinstance(item, str) else item.get("text", "")
            for item in content
        )
    reply = ROLE_PREFIX.sub("", content.strip())
    if len(reply) < 2:
        return FALLBACK_REPLY
    return reply


class ReplyGenerator:
    """Generates assistant replies through a LangChain chat model."""

    def __init__(self, config: ModelConfig | None = None, model: BaseChatModel | None = None):
        self.config = config or ModelConfig()
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        # created on first use so the service can start without an API key
        if self._model is None:
            self._model = ChatOpenAI(
                model=self.config.model_id,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                presence_penalty=self.config.presence_penalty,
                frequency_penalty=self.config.frequency_penalty,
            )
        return self._model

    async def generate_reply(self, messages: Sequence[BaseMessage], **sampling: Any) -> str:
        """
        Ask the model for the next assistant message.

        Args:
            messages: Full prompt, system message first
            sampling: Call-time overrides such as temperature or max_tokens

        Raises:
            ReplyGenerationError: If the model call fails or returns nothing
        """
        logger.debug(f"Calling {self.config.model_id} with {len(messages)} messages")
        model = self.model.bind(**sampling) if sampling else self.model
        try:
            response = await model.ainvoke(list(messages))
        except Exception as e:
            logger.error(f"Model call failed: {type(e).__name__}: {e}")
            raise ReplyGenerationError(f"Model call failed: {type(e).__name__}") from e

        if not response.content:
            logger.error("Model returned an empty response")
            raise ReplyGenerationError("No response from model")

        return clean_reply(response.content)
