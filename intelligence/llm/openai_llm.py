"""
OpenAI LLM
OpenAI chat completions and any OpenAI-compatible endpoint (OpenRouter, NVIDIA NIM).
"""
from typing import List, Optional
import logging
import inspect

from utils.exceptions import LLMError

from .base import BaseLLM, Message, LLMResponse


logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """
    OpenAI-compatible LLM implementation.

    ``base_url`` points the client at a compatible gateway, e.g.
    ``https://openrouter.ai/api/v1`` or ``https://integrate.api.nvidia.com/v1``.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: float = 60.0,
        top_p: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.base_url = base_url
        self.top_p = top_p
        self._async_client = None

    @property
    def provider(self) -> str:
        return "openai"

    def _get_async_client(self):
        """Lazily build the async client"""
        if self._async_client is None:
            from openai import AsyncOpenAI
            self._async_client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._async_client

    async def acomplete(
        self,
        messages: List[Message],
        **kwargs,
    ) -> LLMResponse:
        """Generate a response"""
        client = self._get_async_client()

        request_params = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
            "stream": False,
        }
        top_p = kwargs.get("top_p", self.top_p)
        if top_p is not None:
            request_params["top_p"] = top_p

        try:
            response = await client.chat.completions.create(**request_params)
        except Exception as e:
            raise LLMError(f"OpenAI API error: {e}", provider=self.provider, model=self.model) from e

        if not response.choices:
            return LLMResponse(content="", model=self.model, raw_response=response)

        choice = response.choices[0]
        content = choice.message.content or ""

        usage = {}
        if getattr(response, "usage", None) is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content,
            model=response.model or self.model,
            usage=usage,
            finish_reason=choice.finish_reason,
            raw_response=response,
        )

    async def aclose(self) -> None:
        client = self._async_client
        if client is None:
            return
        try:
            close_fn = getattr(client, "close", None)
            if callable(close_fn):
                maybe_awaitable = close_fn()
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable
        except Exception as exc:
            logger.debug(f"Closing OpenAI client failed: {exc}")
        self._async_client = None
