"""Text-generation client used by the card generators.

Card generation calls an LLM callable matching the protocol:

    async def __call__(self, purpose: str, prompt: str) -> str: ...

`purpose` names the caller ("card", "thank_you", "arcade_intro") and is only
used for logging and routing.

Two implementations are provided:

    HttpLLM   real HTTP client. Speaks the OpenAI chat-completions format
                (JSON mode) or the KoboldCpp text-completion format.
    EchoLLM   returns the prompt back unchanged. Useful for wiring checks;
                its output is not valid card JSON, so callers fall back.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that creates personalized Father's Day card "
    "messages. Always respond with valid JSON."
)


class LLM(Protocol):
    async def __call__(self, purpose: str, prompt: str) -> str: ...


ProviderFormat = Literal["openai", "koboldcpp"]


class HttpLLM:
    """Async HTTP client for text-generation backends.

    Supported formats:
      "openai"     POST /v1/chat/completions
                     {"model", "messages", "response_format": {"type": "json_object"}}
                     Response: {"choices": [{"message": {"content": "..."}}]}
      "koboldcpp"  POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "openai",
        model: str = "gpt-4o",
        timeout: float = 60.0,
        max_tokens: int = 500,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout
        self._max_tokens = max_tokens

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict]:
        if self._format == "koboldcpp":
            return f"{self._base_url}/api/v1/generate", {"prompt": prompt}

        body: dict = {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "max_tokens": self._max_tokens,
        }
        if self._model:
            body["model"] = self._model
        return f"{self._base_url}/v1/chat/completions", body

    def _parse_response(self, data: Any) -> str:
        if self._format == "koboldcpp":
            results = data.get("results") if isinstance(data, dict) else None
            first = results[0] if isinstance(results, list) and results else None
            text = first.get("text") if isinstance(first, dict) else None
            if not isinstance(text, str):
                raise LLMError("Unexpected response format from KoboldCpp backend")
            return text

        choices = data.get("choices") if isinstance(data, dict) else None
        first = choices[0] if isinstance(choices, list) and choices else None
        if not isinstance(first, dict):
            raise LLMError("Unexpected response format from OpenAI-compatible backend")
        message = first.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise LLMError("No content received from OpenAI-compatible backend")
        if not isinstance(content, str):
            raise LLMError("Unexpected response format from OpenAI-compatible backend")
        return content

    async def __call__(self, purpose: str, prompt: str) -> str:
        url, body = self._build_request(prompt)
        logger.debug("llm call purpose=%s url=%s prompt_len=%d", purpose, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM backend returned HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request to {self._base_url} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON response") from e
        text = self._parse_response(data)
        logger.debug("llm response purpose=%s len=%d", purpose, len(text))
        return text


class EchoLLM:
    """Returns the prompt text as-is. No network calls."""

    async def __call__(self, purpose: str, prompt: str) -> str:
        logger.debug("EchoLLM purpose=%s prompt_len=%d", purpose, len(prompt))
        return prompt


class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
