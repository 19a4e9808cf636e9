"""
Models module for the inference client abstraction.

Provides a unified interface for the hosted embedding and text generation API.
"""

from talent_match.models.llm_client import (
    InferenceError,
    LLMClient,
    LLMClientBase,
    LLMResponse,
    Message,
    extract_json,
)

__all__ = [
    "LLMClient",
    "LLMClientBase",
    "LLMResponse",
    "Message",
    "InferenceError",
    "extract_json",
]
