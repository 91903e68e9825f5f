"""LLM access and response parsing."""

from focusflow.agent.llm import LLMClient, get_llm
from focusflow.agent.llm_utils import extract_json_object

__all__ = ["LLMClient", "extract_json_object", "get_llm"]
