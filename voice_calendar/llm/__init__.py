"""Chat completion endpoint abstraction."""

from .base import BaseLLM, LLMResponse, ToolCall
from .openai_llm import OpenAILLM

__all__ = ["BaseLLM", "LLMResponse", "ToolCall", "OpenAILLM"]
