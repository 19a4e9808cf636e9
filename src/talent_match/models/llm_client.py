"""
Inference client abstraction.

Provides a unified interface for the hosted Hugging Face Inference API:
sentence embeddings via feature extraction and text generation with the
gpt-oss models.
"""

import ast
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

from talent_match.config import get_settings

logger = logging.getLogger(__name__)

ReasoningLevel = Literal["low", "medium", "high"]
ModelSize = Literal["small", "large"]

REASONING_INSTRUCTIONS: dict[str, str] = {
    "low": "Reasoning: low - Provide quick, concise responses.",
    "medium": "Reasoning: medium - Balance speed with detail and accuracy.",
    "high": "Reasoning: high - Provide thorough, detailed analysis with step-by-step reasoning.",
}


class Message(BaseModel):
    """A message in a conversation."""

    role: str = Field(..., description="Role of the speaker (system, user, assistant)")
    content: str = Field(..., description="Message content")


class LLMResponse(BaseModel):
    """Response from an LLM."""

    content: str = Field(..., description="Generated text content")
    finish_reason: str = Field(default="stop", description="Reason for completion")
    usage: dict[str, int] = Field(
        default_factory=dict,
        description="Token usage information",
    )
    model: str = Field(default="", description="Model used for generation")
    raw_response: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw response from the API",
    )


class InferenceError(Exception):
    """Exception raised when the inference API fails."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LLMClientBase(ABC):
    """Abstract base class for inference clients."""

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: Conversation history.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional model-specific parameters.

        Returns:
            Generated response.
        """
        ...

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        reasoning: ReasoningLevel = "medium",
        model_size: ModelSize = "large",
        max_tokens: int | None = None,
        temperature: float | None = None,
        system_prompt: str = "",
    ) -> str:
        """
        Generate raw text for a prompt.

        Raises:
            InferenceError: If generation fails.
        """
        ...

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for text.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.
        """
        ...

    async def chat_with_json(
        self,
        messages: list[Message],
        schema: dict[str, Any] | None = None,
        temperature: float = 0.2,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Generate a chat completion with JSON structured output.

        Args:
            messages: Conversation history.
            schema: Optional JSON schema for expected output.
            temperature: Sampling temperature (lower for more deterministic).
            **kwargs: Additional parameters.

        Returns:
            Parsed JSON response, or empty dict on error.
        """
        if schema:
            instruction = (
                "You must respond with valid JSON only. No additional text or explanation. "
                f"Your response must match this JSON schema: {json.dumps(schema)}"
            )
        else:
            instruction = "You must respond with valid JSON only. No additional text or explanation."
        augmented_messages = [Message(role="system", content=instruction)] + messages

        response = await self.chat(augmented_messages, temperature, **kwargs)

        if response.finish_reason == "error" or not response.content:
            logger.warning("JSON chat failed, returning empty dict")
            return {}

        parsed = extract_json(response.content)
        if isinstance(parsed, dict):
            return parsed
        if isinstance(parsed, list):
            return {"items": parsed}

        logger.warning("Failed to parse JSON from response")
        logger.debug(f"Response content: {response.content[:500]}")
        return {}


class LLMClient(LLMClientBase):
    """
    Hugging Face Inference API client.

    Embeddings come from the feature-extraction pipeline of a sentence
    transformer; text comes from the small or large gpt-oss model with a
    reasoning-level instruction prepended to the prompt.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        max_retries: int | None = None,
        timeout: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the inference client.

        Args:
            api_key: Bearer token (uses config if not provided).
            api_url: Base URL of the inference API (uses config if not provided).
            max_retries: Number of retries on failure (uses config if not provided).
            timeout: Request timeout in seconds (uses config if not provided).
            http_client: Preconfigured httpx client, mainly for tests.
        """
        settings = get_settings()
        self._settings = settings
        self._api_key = api_key or settings.hf_api_key
        self._api_url = (api_url or settings.hf_api_url).rstrip("/")
        self._max_retries = settings.llm_max_retries if max_retries is None else max_retries
        self._timeout = timeout or settings.llm_timeout
        self._client = http_client
        self._owns_client = http_client is None

        logger.info(f"Initialized inference client for {self._api_url}")

    def model_for(self, size: ModelSize) -> str:
        """Get the text generation model name for a size."""
        if size == "small":
            return self._settings.text_model_small
        return self._settings.text_model_large

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise InferenceError("HF_API_KEY is not configured")
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _post(self, model: str, payload: dict[str, Any]) -> Any:
        """
        POST a payload to a model endpoint with retry logic.

        Args:
            model: Model repository id.
            payload: JSON payload.

        Returns:
            Decoded JSON response.

        Raises:
            InferenceError: If the request fails after all retries.
        """
        headers = self._headers()
        client = await self._get_client()
        url = f"{self._api_url}/models/{model}"

        last_error: InferenceError | None = None
        attempts = 0

        while attempts <= self._max_retries:
            attempts += 1
            try:
                logger.debug(f"POST {url} (attempt {attempts})")
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                logger.warning(
                    f"Inference API returned {e.response.status_code} for {model} (attempt {attempts})"
                )
                last_error = InferenceError(
                    f"Inference API returned {e.response.status_code}",
                    status_code=e.response.status_code,
                    body=e.response.text,
                )

            except httpx.RequestError as e:
                logger.warning(f"Inference request failed for {model} (attempt {attempts}): {e}")
                last_error = InferenceError(f"Inference request failed: {e}")

            except ValueError as e:
                raise InferenceError(f"Inference API returned invalid JSON: {e}") from e

        raise last_error or InferenceError("Inference failed after all retries")

    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for text with the sentence transformer.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.

        Raises:
            InferenceError: If the request fails or the response has an unexpected shape.
        """
        data = await self._post(self._settings.embedding_model, {"inputs": text})

        # The pipeline returns either a flat vector or one row per input.
        if isinstance(data, list) and data and isinstance(data[0], list):
            data = data[0]
        if isinstance(data, list) and data and all(isinstance(v, (int, float)) for v in data):
            return [float(v) for v in data]

        raise InferenceError("Unexpected embedding response format")

    def build_prompt(
        self,
        prompt: str,
        reasoning: ReasoningLevel = "medium",
        system_prompt: str = "",
    ) -> str:
        """Join the system prompt, reasoning instruction and prompt."""
        parts = [system_prompt, REASONING_INSTRUCTIONS[reasoning], prompt]
        return "\n\n".join(p for p in parts if p)

    async def generate(
        self,
        prompt: str,
        reasoning: ReasoningLevel = "medium",
        model_size: ModelSize = "large",
        max_tokens: int | None = None,
        temperature: float | None = None,
        system_prompt: str = "",
    ) -> str:
        """
        Generate text with a gpt-oss model.

        Args:
            prompt: The prompt to send to the model.
            reasoning: Reasoning level instruction to prepend.
            model_size: Which gpt-oss model to use.
            max_tokens: Maximum new tokens.
            temperature: Sampling temperature.
            system_prompt: Optional system instructions.

        Returns:
            Generated text, stripped of whitespace.

        Raises:
            InferenceError: If generation fails.
        """
        model = self.model_for(model_size)
        payload = {
            "inputs": self.build_prompt(prompt, reasoning, system_prompt),
            "parameters": {
                "max_new_tokens": max_tokens or self._settings.llm_max_tokens,
                "temperature": self._settings.llm_temperature if temperature is None else temperature,
                "top_p": self._settings.llm_top_p,
                "return_full_text": False,
            },
        }
        data = await self._post(model, payload)

        if isinstance(data, list) and data:
            data = data[0]
        if isinstance(data, dict) and isinstance(data.get("generated_text"), str):
            text = data["generated_text"].strip()
            logger.debug(f"Generated {len(text)} chars with {model}")
            return text

        raise InferenceError("Unexpected text generation response format")

    def _build_prompt_from_messages(self, messages: list[Message]) -> tuple[str, str]:
        """
        Split messages into a system prompt and a conversation prompt.

        Args:
            messages: List of conversation messages.

        Returns:
            Tuple of (system prompt, formatted conversation).
        """
        system_parts: list[str] = []
        prompt_parts: list[str] = []

        for msg in messages:
            role = msg.role.lower()
            content = msg.content.strip()

            if role == "system":
                system_parts.append(content)
            elif role == "user":
                prompt_parts.append(f"[USER]\n{content}\n")
            elif role == "assistant":
                prompt_parts.append(f"[ASSISTANT]\n{content}\n")
            else:
                prompt_parts.append(f"[{role.upper()}]\n{content}\n")

        prompt_parts.append("[ASSISTANT]\n")

        return "\n".join(system_parts), "\n".join(prompt_parts)

    async def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: Conversation history.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional parameters (reasoning, model_size).

        Returns:
            Generated response; finish_reason is "error" on failure.
        """
        system_prompt, prompt = self._build_prompt_from_messages(messages)
        model_size: ModelSize = kwargs.get("model_size", "large")

        try:
            text = await self.generate(
                prompt,
                reasoning=kwargs.get("reasoning", "medium"),
                model_size=model_size,
                max_tokens=max_tokens,
                temperature=temperature,
                system_prompt=system_prompt,
            )
            return LLMResponse(
                content=text,
                finish_reason="stop",
                model=self.model_for(model_size),
                raw_response={"prompt": prompt, "response": text},
            )

        except InferenceError as e:
            logger.error(f"Inference chat failed: {e}")
            return LLMResponse(
                content="",
                finish_reason="error",
                model=self.model_for(model_size),
                raw_response={"error": str(e)},
            )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def _find_json_span(content: str) -> str | None:
    """Return the first balanced {...} or [...] span in the content."""
    starts = [i for i in (content.find("{"), content.find("[")) if i != -1]
    if not starts:
        return None
    start_idx = min(starts)

    open_bracket = content[start_idx]
    close_bracket = "}" if open_bracket == "{" else "]"
    depth = 0
    for i, char in enumerate(content[start_idx:], start=start_idx):
        if char == open_bracket:
            depth += 1
        elif char == close_bracket:
            depth -= 1
            if depth == 0:
                return content[start_idx : i + 1]
    return content[start_idx:]


def _fix_json_string(json_str: str) -> str:
    """
    Attempt to fix common JSON issues from LLM output.

    Args:
        json_str: Raw JSON string that may have issues.

    Returns:
        Cleaned JSON string.
    """
    if not json_str:
        return ""

    result = json_str.strip()

    result = re.sub(r"^```(?:json)?\s*", "", result, flags=re.IGNORECASE)
    result = re.sub(r"\s*```$", "", result)

    result = (
        result.replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )

    result = re.sub(r",(\s*[}\]])", r"\1", result)

    result = re.sub(r"\bNone\b", "null", result)
    result = re.sub(r"\bTrue\b", "true", result)
    result = re.sub(r"\bFalse\b", "false", result)

    # Only keys right after { or , so values are left alone.
    result = re.sub(
        r"([\{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*:)",
        r'\1"\2"\3',
        result,
    )

    if result.count("'") > 0 and result.count('"') == 0:
        result = result.replace("'", '"')

    return result


def _coerce_to_json_types(obj: Any) -> Any:
    """Coerce a literal_eval result to JSON-safe types."""
    if obj is ...:
        return None
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, dict):
        return {str(k): _coerce_to_json_types(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_coerce_to_json_types(v) for v in obj]
    return str(obj)


def parse_json_loose(raw: str) -> dict[str, Any] | list[Any] | None:
    """Parse JSON with best-effort repair.

    Returns a dict/list on success, else None.
    """
    if not raw:
        return None

    cleaned = _fix_json_string(raw)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    try:
        obj = ast.literal_eval(raw.strip())
    except (ValueError, SyntaxError):
        try:
            obj = ast.literal_eval(cleaned)
        except (ValueError, SyntaxError):
            return None

    if not isinstance(obj, (dict, list, tuple, set)):
        return None

    try:
        return json.loads(json.dumps(_coerce_to_json_types(obj)))
    except (TypeError, ValueError):
        return None


def extract_json(content: str) -> dict[str, Any] | list[Any] | None:
    """
    Extract the first JSON object or array from model output.

    Args:
        content: Raw generated text, possibly with prose or code fences.

    Returns:
        The parsed value, or None when nothing parsable was found.
    """
    if not content:
        return None
    content = content.strip()

    span = _find_json_span(content)
    if span is not None:
        parsed = parse_json_loose(span)
        if parsed is not None:
            return parsed

    return parse_json_loose(content)
