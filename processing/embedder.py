"""
Embedder
Async text embedding clients. Queries and passages are tagged separately
so asymmetric retrieval models embed each side correctly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import logging

import httpx

from config import EmbeddingSettings
from utils.exceptions import ConfigurationError, EmbeddingError


logger = logging.getLogger(__name__)

INPUT_TYPE_QUERY = "query"
INPUT_TYPE_PASSAGE = "passage"


def _sorted_embedding_payload(result: dict[str, Any]) -> List[List[float]]:
    embeddings = sorted(result["data"], key=lambda x: x["index"])
    return [[float(v) for v in entry["embedding"]] for entry in embeddings]


class BaseEmbedder(ABC):
    """
    Abstract embedder
    """

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    async def aembed(self, text: str, input_type: str) -> List[float]:
        """
        Embed one text.

        Args:
            text: Text to embed
            input_type: "query" or "passage"

        Returns:
            One embedding vector
        """

    async def aembed_query(self, query: str) -> List[float]:
        """Embed the thesis side of a comparison"""
        return await self.aembed(query, INPUT_TYPE_QUERY)

    async def aembed_passage(self, passage: str) -> List[float]:
        """Embed the candidate side of a comparison"""
        return await self.aembed(passage, INPUT_TYPE_PASSAGE)

    async def aclose(self) -> None:
        return None


class NvidiaEmbedder(BaseEmbedder):
    """
    NVIDIA NeMo Retriever embeddings (OpenAI-style ``/embeddings`` endpoint
    with an ``input_type`` field).
    """

    DEFAULT_MODEL = "nvidia/llama-3.2-nemoretriever-300m-embed-v2"
    DEFAULT_BASE_URL = "https://integrate.api.nvidia.com/v1"

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            model_name: Embedding model
            api_key: Bearer token
            base_url: API base URL
            timeout: Per-request timeout (seconds)
            client: Optional shared client (tests inject a mock transport here)
        """
        super().__init__(model_name)
        if not api_key:
            raise ConfigurationError(
                "NVIDIA embedding API key not set. Set EMBEDDING_API_KEY.",
                {"model": model_name},
            )
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def aembed(self, text: str, input_type: str) -> List[float]:
        url = f"{self.base_url}/embeddings"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model_name,
            "input": [text],
            "input_type": input_type,
            "encoding_format": "float",
            "truncate": "END",
        }

        try:
            response = await self._get_client().post(url, json=payload, headers=headers)
            response.raise_for_status()
            vectors = _sorted_embedding_payload(response.json())
        except httpx.HTTPError as exc:
            raise EmbeddingError(f"NVIDIA embedding API error: {exc}", model=self.model_name)
        except (KeyError, TypeError, ValueError) as exc:
            raise EmbeddingError(f"Unexpected embedding response: {exc}", model=self.model_name)

        if not vectors:
            raise EmbeddingError("Embedding response contained no vectors", model=self.model_name)
        return vectors[0]

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


class OpenAIEmbedder(BaseEmbedder):
    """
    OpenAI Embeddings API. Symmetric models: ``input_type`` is ignored.
    """

    DEFAULT_MODEL = "text-embedding-3-small"

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        super().__init__(model_name)
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            kwargs: dict[str, Any] = {"timeout": self.timeout}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def aembed(self, text: str, input_type: str) -> List[float]:
        try:
            response = await self._get_client().embeddings.create(
                input=[text],
                model=self.model_name,
            )
        except Exception as exc:
            raise EmbeddingError(f"OpenAI API error: {exc}", model=self.model_name)
        if not response.data:
            raise EmbeddingError("Embedding response contained no vectors", model=self.model_name)
        return [float(v) for v in response.data[0].embedding]

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None


def get_embedder(settings: EmbeddingSettings, **kwargs) -> BaseEmbedder:
    """
    Build the embedder named by ``settings.provider``.

    Supported providers:
        - "nvidia": NeMo Retriever (query/passage aware)
        - "openai": OpenAI embeddings
    """
    provider_name = (settings.provider or "nvidia").strip().lower()

    factory = {
        "nvidia": NvidiaEmbedder,
        "openai": OpenAIEmbedder,
    }

    if provider_name not in factory:
        supported = ", ".join(factory.keys())
        raise ValueError(f"Unknown provider: {provider_name}. Supported: {supported}")

    cls = factory[provider_name]
    return cls(
        model_name=settings.model_name or cls.DEFAULT_MODEL,
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout_sec,
        **kwargs,
    )
