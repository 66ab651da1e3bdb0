"""
Settings Configuration
Pydantic-based configuration, one model per concern.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

DEFAULT_BLOCK_PHRASES = [
    "please enable javascript",
    "you must be logged in",
    "403 forbidden",
    "access denied",
    "manage your cookies",
    "verify you are human",
    "are you a robot",
    "checking your browser before accessing",
    "unusual traffic from your computer network",
    "subscribe to continue reading",
]

DEFAULT_BLOCKED_DOMAINS = [
    "books.google.com",
    "researchgate.net",
    "jstor.org",
    "sciencedirect.com",
    "link.springer.com",
    "onlinelibrary.wiley.com",
    "tandfonline.com",
    "academic.oup.com",
    "ieeexplore.ieee.org",
    "dl.acm.org",
    "proquest.com",
    "ebscohost.com",
    "scholar.google.com",
]


class FetchSettings(BaseSettings):
    """Source fetching"""
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent to source sites")
    timeout_sec: float = Field(default=15.0, gt=0, description="Per-request timeout (seconds)")
    max_connections: int = Field(default=20, ge=1, description="Connection pool size")
    max_html_bytes: int = Field(default=2_000_000, ge=1, description="HTML bytes read per page; the rest is discarded")

    class Config:
        env_prefix = "FETCH_"
        frozen = True


class ExtractionSettings(BaseSettings):
    """Content extraction and quality gate"""
    max_chars: int = Field(default=10000, ge=1, description="Hard cap on text sent to metadata extraction")
    pdf_max_pages: int = Field(default=3, ge=1, description="Leading PDF pages kept for extraction")
    min_chars: int = Field(default=200, ge=0, description="Shortest text the quality gate accepts")
    block_phrases: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCK_PHRASES))
    document_fallback: bool = Field(default=False, description="Send text-less PDFs to the document model")

    class Config:
        env_prefix = "EXTRACTION_"
        frozen = True


class ScholarSettings(BaseSettings):
    """Scholarly search result scraping"""
    base_url: str = Field(default="https://scholar.google.com/scholar")
    pages: int = Field(default=2, ge=1, description="Result pages requested per query")
    per_page: int = Field(default=10, ge=1, description="Results per page")
    max_results: int = Field(default=30, ge=1, description="Cap on candidate URLs")
    timeout_sec: float = Field(default=20.0, gt=0)
    language: str = Field(default="en")
    blocked_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_DOMAINS))

    class Config:
        env_prefix = "SCHOLAR_"
        frozen = True


class EmbeddingSettings(BaseSettings):
    """Embedding service"""
    provider: str = Field(default="nvidia", description="Embedding provider: nvidia, openai")
    model_name: Optional[str] = Field(default=None, description="Model name (provider default when unset)")
    api_key: Optional[str] = Field(default=None, description="Embedding API key")
    base_url: Optional[str] = Field(default=None, description="Embedding API base URL")
    timeout_sec: float = Field(default=30.0, gt=0)

    class Config:
        env_prefix = "EMBEDDING_"
        frozen = True


class LLMSettings(BaseSettings):
    """Keyword generation and metadata extraction models"""
    keyword_provider: str = Field(default="gemini", description="Keyword LLM provider: gemini, openai")
    keyword_model: Optional[str] = Field(default=None)

    extraction_provider: str = Field(default="openai", description="OpenAI-compatible extraction endpoint")
    extraction_model: str = Field(default="nvidia/nemotron-nano-9b-v2")
    extraction_base_url: Optional[str] = Field(default="https://openrouter.ai/api/v1")
    extraction_system_prompt: str = Field(default="/think")

    document_model: str = Field(default="nvidia/nemotron-parse")
    document_base_url: Optional[str] = Field(default="https://integrate.api.nvidia.com/v1")

    temperature: float = Field(default=0.6, description="Sampling temperature")
    top_p: float = Field(default=0.95)
    max_tokens: int = Field(default=2048, description="Max completion tokens")
    timeout_sec: float = Field(default=60.0, gt=0)

    # API Keys
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API Key")
    nvidia_api_key: Optional[str] = Field(default=None, description="NVIDIA API Key")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API Key")

    class Config:
        env_prefix = "LLM_"
        frozen = True


class PipelineSettings(BaseSettings):
    """Orchestration limits"""
    concurrency: int = Field(default=5, ge=1, le=64, description="Workers in flight at once")
    top_k: int = Field(default=5, ge=1, description="Articles returned per thesis")
    request_deadline_sec: float = Field(default=90.0, ge=0, description="Whole-batch deadline, 0 disables")

    class Config:
        env_prefix = "PIPELINE_"
        frozen = True


class WebSettings(BaseSettings):
    """HTTP entry point"""
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5269)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    class Config:
        env_prefix = "WEB_"
        frozen = True


class GeneralSettings(BaseSettings):
    """General settings"""
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    class Config:
        env_prefix = "GENERAL_"
        frozen = True


class Settings(BaseSettings):
    """Top-level settings aggregating every sub-config"""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    scholar: ScholarSettings = Field(default_factory=ScholarSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    web: WebSettings = Field(default_factory=WebSettings)
    general: GeneralSettings = Field(default_factory=GeneralSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        frozen = True

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings after applying the given .env file (config/.env by default)"""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            fetch=FetchSettings(),
            extraction=ExtractionSettings(),
            scholar=ScholarSettings(),
            embedding=EmbeddingSettings(),
            llm=LLMSettings(),
            pipeline=PipelineSettings(),
            web=WebSettings(),
            general=GeneralSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings value"""
    return Settings.load_from_env_file()


def get_fetch_settings() -> FetchSettings:
    return get_settings().fetch


def get_extraction_settings() -> ExtractionSettings:
    return get_settings().extraction


def get_scholar_settings() -> ScholarSettings:
    return get_settings().scholar


def get_embedding_settings() -> EmbeddingSettings:
    return get_settings().embedding


def get_llm_settings() -> LLMSettings:
    return get_settings().llm


def get_pipeline_settings() -> PipelineSettings:
    return get_settings().pipeline
