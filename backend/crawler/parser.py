from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .models import PageData
from .url_utils import is_same_origin, normalize_url


def _first_text(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find(name)
    return tag.get_text().strip() if tag else ""


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    meta = soup.find("meta", attrs=attrs)
    if meta and meta.get("content"):
        return meta["content"].strip()
    return ""


def parse_page_data(html: str, url: str) -> PageData:
    soup = BeautifulSoup(html, "html.parser")

    title = _first_text(soup, "title") or _first_text(soup, "h1") or (urlparse(url).path or "/")

    # meta name="description", then og:description
    desc = _meta_content(soup, name="description") or _meta_content(soup, property="og:description")

    return PageData(url=url, title=title, description=desc)


def extract_links(html: str, base_url: str) -> list[str]:
    """Same-origin http(s) links in document order, normalized but not deduplicated."""
    soup = BeautifulSoup(html, "html.parser")
    out = []
    for a in soup.find_all("a", href=True):
        href = a["href"]
        if not href:
            continue
        try:
            resolved = urljoin(base_url, href.strip())
            parsed = urlparse(resolved)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                continue
            if not is_same_origin(resolved, base_url):
                continue
        except ValueError:
            # unparseable host or port
            continue
        out.append(normalize_url(resolved))
    return out
