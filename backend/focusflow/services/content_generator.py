"""Topic content generation via the LLM."""

from typing import Protocol

from focusflow.core.errors import GenerationError
from focusflow.core.logging import get_logger

logger = get_logger(__name__)

TOPIC_CONTENT_PROMPT = """\
You are an expert educational content creator. Create detailed, comprehensive \
learning content for the following topic:

Topic: "{topic_name}"

This topic is part of Day {day_number} in a learning journey focused on: "{journey_goal}"
{day_summary_line}
Please create educational content that:
1. Starts with a brief introduction to the topic
2. Explains key concepts in detail with examples
3. Provides practical applications or exercises
4. Includes code examples if relevant
5. Ends with a summary and next steps

Format the content using Markdown, with proper headings, code blocks, bullet points, etc.
Make the content comprehensive but concise, focusing on the most important aspects of the topic.
Respond with just the formatted Markdown content, no additional text."""

SIMPLIFY_PROMPT = """\
As an expert educator, simplify the following text to make it more accessible \
and easier to understand. Maintain the key concepts but use simpler language and \
shorter sentences. Break it down into bullet points if it helps clarity.

Original text: "{text}"

Guidelines:
- Use clear, everyday language
- Keep technical terms only if essential
- Break long sentences into shorter ones
- Maintain the original meaning
- Add examples where helpful

Simplified version:"""


class TextGenerator(Protocol):
    """Anything with ``generate(prompt) -> text``, e.g. ``LLMClient``."""

    async def generate(self, prompt: str) -> str: ...


def build_topic_prompt(
    topic_name: str, journey_goal: str, day_number: int, day_summary: str
) -> str:
    summary = day_summary.strip()
    day_summary_line = f'\nDay {day_number} Summary: "{summary}"\n' if summary else ""
    return TOPIC_CONTENT_PROMPT.format(
        topic_name=topic_name,
        journey_goal=journey_goal,
        day_number=day_number,
        day_summary_line=day_summary_line,
    )


class ContentGenerator:
    """Produces markdown study content for one topic. Stateless per call."""

    def __init__(self, llm: TextGenerator) -> None:
        self._llm = llm

    async def generate(
        self,
        topic_name: str,
        journey_goal: str,
        day_number: int,
        day_summary: str = "",
    ) -> str:
        """Generate content for a topic.

        Raises:
            GenerationError: If the LLM call fails or returns nothing
        """
        prompt = build_topic_prompt(topic_name, journey_goal, day_number, day_summary or "")
        try:
            content = await self._llm.generate(prompt)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Failed to generate content for {topic_name!r}: {e}") from e

        if not content or not content.strip():
            raise GenerationError(f"Empty content generated for {topic_name!r}")

        logger.debug("Topic content generated", topic=topic_name, length=len(content))
        return content.strip()


async def simplify_text(llm: TextGenerator, text: str) -> str:
    """Rewrite a passage in simpler language."""
    return (await llm.generate(SIMPLIFY_PROMPT.format(text=text))).strip()
