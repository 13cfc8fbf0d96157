"""
Crawler package: discover a website's pages and extract their metadata for llms.txt generation.
"""
from .crawler import MAX_PAGES, CrawlOptions, crawl, iter_crawl
from .exceptions import CrawlError, MalformedUrlError
from .llmstxt import fetch_existing_llms_txt
from .models import (
    AiToken,
    CrawlProgressEvent,
    CrawlResult,
    Done,
    Error,
    GenerateResult,
    PageData,
    Progress,
    Skip,
)

__all__ = [
    "crawl",
    "iter_crawl",
    "fetch_existing_llms_txt",
    "CrawlOptions",
    "MAX_PAGES",
    "CrawlError",
    "MalformedUrlError",
    "PageData",
    "CrawlResult",
    "GenerateResult",
    "CrawlProgressEvent",
    "Progress",
    "Skip",
    "AiToken",
    "Done",
    "Error",
]
