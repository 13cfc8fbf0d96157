"""Render a CrawlResult as llms.txt markdown. Format: https://llmstxt.org/"""
import logging

from crawler import CrawlResult, PageData
from crawler.url_utils import is_root_path

logger = logging.getLogger(__name__)

OVERVIEW_SECTION = "Overview"
PAGES_SECTION = "Pages"


def _format_entry(page: PageData) -> str:
    title = page.title or page.url
    if page.description:
        return f"- [{title}]({page.url}): {page.description}"
    return f"- [{title}]({page.url})"


def _sections(pages) -> list[tuple[str, list[PageData]]]:
    """Root pages under Overview, everything else under Pages, in crawl order."""
    overview = [p for p in pages if is_root_path(p.url)]
    rest = [p for p in pages if not is_root_path(p.url)]
    return [(OVERVIEW_SECTION, overview), (PAGES_SECTION, rest)]


def generate_llms_txt(result: CrawlResult) -> str:
    lines: list[str] = []
    lines.append(f"# {result.site_title}")
    lines.append("")
    if result.site_description:
        lines.append(f"> {result.site_description}")
        lines.append("")

    emitted = 0
    for section, items in _sections(result.pages):
        if not items:
            continue
        emitted += 1
        lines.append(f"## {section}")
        lines.append("")
        for p in items:
            lines.append(_format_entry(p))
        lines.append("")

    out = "\n".join(lines).rstrip()
    logger.info("Generate finished: %d pages, %d sections, %d chars", len(result.pages), emitted, len(out))
    return out
