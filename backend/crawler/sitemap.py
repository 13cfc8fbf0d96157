import asyncio
import logging
from xml.etree import ElementTree as ET

import requests

from .fetcher import FETCH_TIMEOUT, USER_AGENT
from .url_utils import get_sitemap_url

logger = logging.getLogger(__name__)

MAX_CHILD_SITEMAPS = 10
MAX_PAGES_PER_CHILD = 5


class SitemapUnavailable(Exception):
    """The sitemap could not be fetched or parsed. Never leaves this module."""


def _fetch_xml(url: str, timeout: float) -> ET.Element:
    try:
        r = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            allow_redirects=True,
        )
    except requests.exceptions.RequestException as e:
        raise SitemapUnavailable(f"{url}: {e}") from e
    if not 200 <= r.status_code < 300:
        raise SitemapUnavailable(f"{url}: HTTP {r.status_code}")
    try:
        return ET.fromstring(r.content)
    except ET.ParseError as e:
        raise SitemapUnavailable(f"{url}: {e}") from e


def _locs(root: ET.Element, parent_tag: str) -> list[str]:
    # {*} matches the tag in any namespace, or none
    out = []
    for loc in root.iterfind(f".//{{*}}{parent_tag}/{{*}}loc"):
        text = (loc.text or "").strip()
        if text:
            out.append(text)
    return out


def parse_sitemap_xml(root: ET.Element) -> tuple[list[str], list[str]]:
    """Return (page urls, child sitemap urls) in document order."""
    return _locs(root, "url"), _locs(root, "sitemap")


async def _load(url: str, timeout: float) -> ET.Element:
    return await asyncio.to_thread(_fetch_xml, url, timeout)


async def fetch_sitemap_urls(base_url: str, timeout: float = FETCH_TIMEOUT) -> list[str]:
    """Page URLs declared by <base_url>/sitemap.xml.

    A sitemap index is followed one level deep: at most MAX_CHILD_SITEMAPS
    children, MAX_PAGES_PER_CHILD urls from each. Any failure means "no
    sitemap" and yields an empty list.
    """
    url = get_sitemap_url(base_url)
    try:
        root = await _load(url, timeout)
    except SitemapUnavailable as e:
        logger.debug("No sitemap: %s", e)
        return []

    page_urls, child_urls = parse_sitemap_xml(root)
    if page_urls:
        logger.info("Sitemap %s lists %d URLs", url, len(page_urls))
        return page_urls

    result: list[str] = []
    for child_url in child_urls[:MAX_CHILD_SITEMAPS]:
        try:
            child_root = await _load(child_url, timeout)
        except SitemapUnavailable as e:
            logger.debug("Skipping child sitemap: %s", e)
            continue
        child_pages, _ = parse_sitemap_xml(child_root)
        result.extend(child_pages[:MAX_PAGES_PER_CHILD])
    if child_urls:
        logger.info(
            "Sitemap index %s: %d children, %d URLs collected",
            url, len(child_urls), len(result),
        )
    return result
