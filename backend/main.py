import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from crawler import (
    CrawlResult,
    Done,
    Error,
    GenerateResult,
    MalformedUrlError,
    fetch_existing_llms_txt,
    iter_crawl,
)
from crawler.url_utils import get_base_url
from generator import generate_llms_txt, stream_aeo_llms_txt

logger = logging.getLogger(__name__)

NDJSON = "application/x-ndjson"
STREAM_HEADERS = {"Cache-Control": "no-cache"}

_backend_dir = Path(__file__).resolve().parent
load_dotenv(_backend_dir / ".env")
load_dotenv(_backend_dir.parent / ".env")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    yield


app = FastAPI(
    title="llms.txt Generator",
    description="Crawl any website and generate its llms.txt",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GenerateRequest(BaseModel):
    url: Any = None


async def _crawl_and_generate(url: str) -> AsyncIterator[str]:
    """NDJSON lines for one crawl: progress events, then a single done or error."""
    logger.info("Starting crawl and generate for url=%s", url)
    try:
        async for event in iter_crawl(url):
            if isinstance(event, Done):
                content = generate_llms_txt(event.result)
                event = Done(result=GenerateResult(**event.result.model_dump(), llms_txt=content))
                logger.info("Generate done: %d pages, %d chars for url=%s", len(event.result.pages), len(content), url)
            yield event.to_json() + "\n"
    except MalformedUrlError as e:
        yield Error(message=str(e)).to_json() + "\n"
    except Exception as e:
        logger.exception("Crawl failed for url=%s", url)
        yield Error(message=str(e) or "Unknown error").to_json() + "\n"


@app.get("/api/health")
def health():
    """Health check. Returns service status, environment, and current UTC timestamp.
    Use for liveness probes and monitoring."""
    return {
        "ok": True,
        "service": "llms-txt-generator",
        "env": os.getenv("ENV", "development"),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@app.post("/api/generate")
@app.post("/api/v1/llms-txt/generate")
def generate(body: GenerateRequest):
    """Crawl the site at `url` and stream progress as newline-delimited JSON.
    The stream ends with a `done` event carrying the crawl result and its llms.txt,
    or an `error` event. Raises 400 if the URL is missing or malformed."""
    if not body.url or not isinstance(body.url, str):
        raise HTTPException(status_code=400, detail="Invalid URL")
    try:
        get_base_url(body.url)
    except MalformedUrlError:
        raise HTTPException(status_code=400, detail="Malformed URL")
    return StreamingResponse(_crawl_and_generate(body.url), media_type=NDJSON, headers=STREAM_HEADERS)


@app.get("/api/v1/llms-txt/existing")
def existing_llms_txt(url: str | None = Query(None)):
    """Return the llms.txt the site already publishes at its root, or null."""
    if not url:
        raise HTTPException(status_code=400, detail="Missing url")
    return {"llmsTxt": fetch_existing_llms_txt(url)}


@app.post("/api/v1/llms-txt/generate-aeo")
def generate_aeo(body: CrawlResult):
    """Rewrite a crawl result into an AI-optimized llms.txt, streaming `ai_token`
    events followed by `done` or `error`. Raises 400 if there are no pages."""
    if not body.pages or not body.base_url:
        raise HTTPException(status_code=400, detail="No pages to generate from")
    lines = (event.to_json() + "\n" for event in stream_aeo_llms_txt(body))
    return StreamingResponse(lines, media_type=NDJSON, headers=STREAM_HEADERS)


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV", "development") == "development",
    )
