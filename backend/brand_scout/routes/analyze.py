import os
import uuid
import asyncio
import logging
import time
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from brand_scout.exceptions import (
    InvalidClientInput,
    NavigationTimeout,
    RenderError,
    RenderSessionUnavailable,
)
from brand_scout.services.analyzer import analyze_site
from brand_scout.services.heuristics import load_heuristics
from brand_scout.services.text_generation import generate_text
from brand_scout.services.url_resolver import resolve_client_input

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Concurrency & rate limiting ──
MAX_CONCURRENT_ANALYSES = int(os.getenv("MAX_CONCURRENT_ANALYSES", "3"))
_analysis_semaphore = asyncio.Semaphore(MAX_CONCURRENT_ANALYSES)

# Simple per-IP rate limiter
_rate_limit_map: dict[str, float] = {}
RATE_LIMIT_SECONDS = float(os.getenv("RATE_LIMIT_SECONDS", "5"))

# Bounds the render phase; summarization has its own timeout and fallback
ANALYSIS_TIMEOUT = float(os.getenv("ANALYSIS_TIMEOUT", "120"))

HEURISTICS = load_heuristics(os.getenv("HEURISTICS_PATH"))


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_input: str = Field(alias="clientInput")


@router.post("/api/analyze")
async def analyze(request: AnalyzeRequest, raw_request: Request):
    """Render a site, rank its call-to-action buttons and summarize the brand mood."""
    client_ip = raw_request.client.host if raw_request.client else "unknown"
    now = time.time()
    last_request = _rate_limit_map.get(client_ip, 0)
    if now - last_request < RATE_LIMIT_SECONDS:
        raise HTTPException(status_code=429, detail="Please wait before starting another analysis")
    _rate_limit_map[client_ip] = now

    try:
        url = await resolve_client_input(request.client_input, generate_text)
    except InvalidClientInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    # No await between the check and the acquire below
    if _analysis_semaphore.locked():
        logger.warning(f"[analyze] Rejected request from {client_ip}: all {MAX_CONCURRENT_ANALYSES} slots busy")
        raise HTTPException(status_code=503, detail="Server busy. Try again shortly.")

    analysis_id = uuid.uuid4().hex[:8]
    logger.info(f"[analyze:{analysis_id}] Analyzing {url}")

    async with _analysis_semaphore:
        try:
            result = await analyze_site(
                url,
                heuristics=HEURISTICS,
                generate=generate_text,
                render_timeout=ANALYSIS_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.error(f"[analyze:{analysis_id}] Render timed out after {ANALYSIS_TIMEOUT}s")
            raise HTTPException(status_code=504, detail="Analysis timed out. Try a simpler page.")
        except NavigationTimeout as e:
            logger.error(f"[analyze:{analysis_id}] {e}")
            raise HTTPException(status_code=504, detail=str(e))
        except RenderSessionUnavailable as e:
            logger.error(f"[analyze:{analysis_id}] {e}")
            raise HTTPException(status_code=503, detail=str(e))
        except RenderError as e:
            logger.error(f"[analyze:{analysis_id}] {e}")
            raise HTTPException(status_code=502, detail=str(e))
        except Exception as e:
            logger.exception(f"[analyze:{analysis_id}] Unhandled error for {url}")
            raise HTTPException(status_code=500, detail=f"Analysis failed: {e}")

    logger.info(
        f"[analyze:{analysis_id}] Done: {len(result.buttons)} buttons, "
        f"analysis degraded={result.analysis.degraded}"
    )
    return result.to_dict()
