"""LLM client — HTTP connection to a text-completion backend.

The content provider calls an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` identifies what the text is for ("event_card", "evaluation"). The
implementation may use it for logging or routing; the simplest implementation
ignores it.

HttpLLM is the real client and supports KoboldCpp and OpenAI-compatible
backends, selected by provider_format. Tests inject stub callables instead.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["koboldcpp", "openai"]


class HttpLLM:
    """Async HTTP client for text-completion backends.

    Supported formats:
      "koboldcpp"  — POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
      "openai"     — POST /v1/completions   {"model": ..., "prompt": ...}
                     Response: {"choices": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:5001".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "koboldcpp".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 20.
        temperature:     Sampling temperature, omitted from the body when None.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 20.0,
        temperature: float | None = None,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout
        self._temperature = temperature

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        body: dict[str, Any] = {"prompt": prompt}
        if self._temperature is not None:
            body["temperature"] = self._temperature

        if self._format == "openai":
            if self._model:
                body["model"] = self._model
            return f"{self._base_url}/v1/completions", body

        # koboldcpp (default)
        return f"{self._base_url}/api/v1/generate", body

    def _parse_response(self, data: Any) -> str:
        """Extract the completion text from the response body."""
        key = "choices" if self._format == "openai" else "results"
        items = data.get(key) if isinstance(data, dict) else None
        if (
            not isinstance(items, list)
            or not items
            or not isinstance(items[0], dict)
            or not isinstance(items[0].get("text"), str)
        ):
            backend = "OpenAI-compatible" if self._format == "openai" else "KoboldCpp"
            raise LLMError(f"Unexpected response format from {backend} backend")
        return items[0]["text"]

    async def __call__(self, stage: str, prompt: str) -> str:
        url, body = self._build_request(prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {e}") from e
        except httpx.InvalidURL as e:
            raise LLMError(f"Invalid LLM backend URL: {self._base_url}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e

        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


def build_llm(connection: dict[str, Any]) -> HttpLLM | None:
    """Construct an HttpLLM from a config connection dict, or None if unset."""
    url = connection.get("provider_url", "")
    if not url:
        return None
    return HttpLLM(
        provider_url=url,
        api_key=connection.get("api_key", ""),
        provider_format=connection.get("provider_format", "koboldcpp"),
        model=connection.get("model", ""),
        timeout=float(connection.get("timeout", 20.0)),
        temperature=connection.get("temperature"),
    )


# ---------------------------------------------------------------------------
# LLMError — raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
