"""
Configuration Management Module
"""
from .settings import (
    Settings,
    FetchSettings,
    ExtractionSettings,
    ScholarSettings,
    EmbeddingSettings,
    LLMSettings,
    PipelineSettings,
    WebSettings,
    GeneralSettings,
    get_settings,
    get_fetch_settings,
    get_extraction_settings,
    get_scholar_settings,
    get_embedding_settings,
    get_llm_settings,
    get_pipeline_settings,
)

__all__ = [
    "Settings",
    "FetchSettings",
    "ExtractionSettings",
    "ScholarSettings",
    "EmbeddingSettings",
    "LLMSettings",
    "PipelineSettings",
    "WebSettings",
    "GeneralSettings",
    "get_settings",
    "get_fetch_settings",
    "get_extraction_settings",
    "get_scholar_settings",
    "get_embedding_settings",
    "get_llm_settings",
    "get_pipeline_settings",
]
