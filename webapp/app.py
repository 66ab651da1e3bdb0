"""Web App: FastAPI entry point for thesis article sourcing."""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
import logging
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from intelligence.pipeline import SourcingPipeline
from models import ArticleRecord, ThesisRequest
from utils.exceptions import (
    ConfigurationError,
    EmbeddingDimensionError,
    UpstreamError,
)
from utils.logger import setup_logger


logger = logging.getLogger(__name__)


@lru_cache()
def get_pipeline() -> SourcingPipeline:
    """Process-wide pipeline built from settings on first use"""
    return SourcingPipeline.from_settings(get_settings())


@asynccontextmanager
async def lifespan(_: FastAPI):
    general = get_settings().general
    setup_logger(None, level=general.log_level, log_file=general.log_file)
    yield
    if get_pipeline.cache_info().currsize:
        await get_pipeline().aclose()
        get_pipeline.cache_clear()


app = FastAPI(title="Thesis Sourcer API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().web.cors_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/getArticles", response_model=List[ArticleRecord])
async def get_articles(
    req: ThesisRequest,
    pipeline: SourcingPipeline = Depends(get_pipeline),
) -> List[ArticleRecord]:
    try:
        return await pipeline.run(req.thesis)
    except UpstreamError as exc:
        logger.error(f"Upstream failure ({exc.stage}): {exc}")
        raise HTTPException(status_code=502, detail=f"Upstream {exc.stage} failed") from exc
    except EmbeddingDimensionError as exc:
        logger.error(f"Embedding contract violation: {exc}")
        raise HTTPException(status_code=500, detail="Embedding dimension mismatch") from exc
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        raise HTTPException(status_code=500, detail=exc.message) from exc
