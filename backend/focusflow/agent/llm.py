"""LLM provider configuration and the text-in/text-out client used by services."""

from collections.abc import Sequence
from functools import lru_cache

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_openai import ChatOpenAI

from focusflow.core.config import get_settings
from focusflow.core.errors import GenerationError
from focusflow.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache
def get_llm() -> ChatOpenAI:
    """Get configured LLM instance."""
    settings = get_settings()

    kwargs: dict = {
        "model": settings.OPENAI_MODEL,
        "temperature": settings.OPENAI_TEMPERATURE,
    }

    if settings.OPENAI_API_KEY:
        kwargs["api_key"] = settings.OPENAI_API_KEY
    if settings.OPENAI_API_BASE_URL:
        kwargs["base_url"] = settings.OPENAI_API_BASE_URL

    logger.info("Initializing LLM", model=settings.OPENAI_MODEL)
    return ChatOpenAI(**kwargs)


class LLMClient:
    """Thin wrapper turning a chat model into ``generate(prompt) -> text``.

    The model is resolved lazily so the app can start (and the background
    queue can be built) without provider credentials. No retries: every
    failure surfaces as ``GenerationError``.
    """

    def __init__(self, model: BaseChatModel | None = None) -> None:
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        if self._model is None:
            self._model = get_llm()
        return self._model

    async def generate(self, prompt: str) -> str:
        """Send a single prompt and return the response text."""
        return await self.chat([HumanMessage(content=prompt)])

    async def chat(self, messages: Sequence[BaseMessage]) -> str:
        """Send a message list and return the response text."""
        try:
            response = await self.model.ainvoke(list(messages))
        except Exception as e:
            logger.error("LLM call failed", error=str(e))
            raise GenerationError(f"LLM call failed: {e}") from e

        text = _response_text(response.content)
        if not text.strip():
            raise GenerationError("LLM returned an empty response")
        return text


def _response_text(content: str | list) -> str:
    # Some providers return content blocks instead of a plain string.
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
