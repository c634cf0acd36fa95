"""LLM integration over an OpenAI-compatible chat completion endpoint."""

import logging
import time
from typing import Any, Dict, Optional

import openai
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from .config import LLMConfig, ProviderType

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class RemoteServiceError(RuntimeError):
    """The chat completion call failed or returned nothing usable.

    ``status_code`` and ``body`` carry the upstream HTTP status and payload
    when the endpoint answered with a non-2xx response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LLMResponse(BaseModel):
    """Represents an LLM response with metadata."""
    content: str
    model: str
    tokens_used: int = 0
    response_time: float = 0.0


class LLMProvider:
    """Sends single-turn chat completions. No automatic retries."""

    def __init__(self, config: LLMConfig):
        if not config.api_key:
            raise RemoteServiceError(
                "LLM API key not provided. Set OPENROUTER_API_KEY environment variable."
            )

        self.config = config
        self.total_tokens = 0
        self.api_calls = 0

        self.llm = self._initialize_llm()

    def _initialize_llm(self) -> ChatOpenAI:
        """Initialize the LLM instance."""
        if self.config.provider == ProviderType.OPENROUTER:
            headers = {}
            if self.config.referer:
                headers["HTTP-Referer"] = self.config.referer
            if self.config.title:
                headers["X-Title"] = self.config.title
            return self._chat_model(self.config.base_url or OPENROUTER_BASE_URL, headers or None)

        if self.config.provider == ProviderType.OPENAI:
            # base_url of None lets the client use the OpenAI default endpoint
            return self._chat_model(self.config.base_url, None)

        raise ValueError(f"Unsupported provider: {self.config.provider}")

    def _chat_model(self, base_url: Optional[str], headers: Optional[Dict[str, str]]) -> ChatOpenAI:
        return ChatOpenAI(
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            api_key=self.config.api_key,
            base_url=base_url,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            default_headers=headers,
        )

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        """Send one completion request and return the reply text."""
        start_time = time.time()

        messages = []
        if system_prompt:
            messages.append(("system", system_prompt))
        messages.append(("human", prompt))

        logger.info(f"Sending request to {self.config.model}")

        try:
            response = self.llm.invoke(messages)
        except openai.APIStatusError as e:
            logger.error(f"LLM endpoint returned {e.status_code}: {e.body}")
            raise RemoteServiceError(
                f"LLM API error: {e.status_code} - {e.body}",
                status_code=e.status_code,
                body=e.body,
            ) from e
        except openai.APIError as e:
            logger.error(f"LLM request failed: {e}")
            raise RemoteServiceError(f"LLM request failed: {e}") from e

        content = response.content if isinstance(response.content, str) else ""
        if not content:
            raise RemoteServiceError("Empty response from LLM")

        usage = getattr(response, "usage_metadata", None) or {}
        tokens_used = usage.get("total_tokens", 0)

        self.api_calls += 1
        self.total_tokens += tokens_used

        response_time = time.time() - start_time
        logger.info(f"Received response: {len(content)} chars in {response_time:.1f}s")

        return LLMResponse(
            content=content,
            model=self.config.model,
            tokens_used=tokens_used,
            response_time=response_time,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
        }


def create_llm_provider(config: LLMConfig) -> LLMProvider:
    """Factory function to create LLM provider."""
    return LLMProvider(config)
