import inspect
import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

from . import fetcher, sitemap
from .fetcher import FETCH_TIMEOUT, FetchFailure
from .models import CrawlProgressEvent, CrawlResult, Done, PageData, Progress, Skip
from .parser import extract_links, parse_page_data
from .url_utils import get_base_url, get_hostname, is_root_path, normalize_url

logger = logging.getLogger(__name__)

MAX_PAGES = 50


@dataclass
class CrawlOptions:
    """Options for iter_crawl / crawl."""
    max_pages: int = MAX_PAGES
    timeout: float = FETCH_TIMEOUT


def _root_page(pages: list[PageData]) -> PageData | None:
    for p in pages:
        if is_root_path(p.url):
            return p
    return pages[0] if pages else None


async def iter_crawl(
    input_url: str,
    options: CrawlOptions | None = None,
) -> AsyncIterator[CrawlProgressEvent]:
    """Crawl a site, yielding Progress/Skip events as they happen and a final Done.

    Uses the sitemap as the complete frontier when one exists, otherwise
    follows same-origin links breadth-first from the site root. Raises
    MalformedUrlError before any request if input_url cannot be parsed.
    """
    opts = options or CrawlOptions()
    base_url = get_base_url(input_url)
    logger.info("Crawl starting: url=%s max_pages=%d", base_url, opts.max_pages)

    yield Progress(message="Checking for sitemap.xml...", pages_found=0)

    sitemap_urls = await sitemap.fetch_sitemap_urls(base_url, timeout=opts.timeout)
    follow_links = not sitemap_urls
    if sitemap_urls:
        yield Progress(message=f"Found sitemap with {len(sitemap_urls)} URLs.", pages_found=0)
        queue = deque(sitemap_urls[:opts.max_pages])
    else:
        yield Progress(message="No sitemap found. Starting BFS crawl...", pages_found=0)
        queue = deque([base_url])

    visited: set[str] = set()
    pages: list[PageData] = []

    while queue and len(pages) < opts.max_pages:
        url = queue.popleft()
        normalized = normalize_url(url)
        if normalized in visited:
            continue
        visited.add(normalized)

        result = await fetcher.fetch_html(url, timeout=opts.timeout)
        if isinstance(result, FetchFailure):
            logger.debug("Skipped %s: %s", url, result.reason)
            yield Skip(url=url, reason=result.reason)
            continue

        page = parse_page_data(result.html, normalized)
        pages.append(page)
        yield Progress(message=f"Crawled: {page.title or url}", pages_found=len(pages))

        if follow_links:
            for link in extract_links(result.html, base_url):
                if link not in visited:
                    queue.append(link)

    root = _root_page(pages)
    crawl_result = CrawlResult(
        site_title=root.title if root else get_hostname(base_url),
        site_description=root.description if root else "",
        base_url=base_url,
        pages=tuple(pages),
    )
    logger.info("Crawl finished: %d pages from %s (%d URLs visited)", len(pages), base_url, len(visited))
    yield Done(result=crawl_result)


async def crawl(
    input_url: str,
    on_progress: Callable[[Progress | Skip], Awaitable[None] | None],
    options: CrawlOptions | None = None,
) -> CrawlResult:
    """Run iter_crawl, passing each Progress/Skip event to on_progress, and return the result."""
    async for event in iter_crawl(input_url, options):
        if isinstance(event, Done):
            return event.result
        ret = on_progress(event)
        if inspect.isawaitable(ret):
            await ret
    raise RuntimeError("crawl ended without a result")
