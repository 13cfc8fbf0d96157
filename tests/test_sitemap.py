import asyncio
from unittest.mock import Mock, patch

import requests

from crawler.sitemap import MAX_CHILD_SITEMAPS, MAX_PAGES_PER_CHILD, fetch_sitemap_urls

STANDARD_SITEMAP = b"""<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/about</loc></url>
  <url><loc>https://example.com/blog</loc></url>
</urlset>"""

SITEMAP_INDEX = b"""<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/blog-sitemap.xml</loc></sitemap>
  <sitemap><loc>https://example.com/docs-sitemap.xml</loc></sitemap>
</sitemapindex>"""


def _child_sitemap(prefix, count):
    locs = "".join(f"<url><loc>https://example.com/{prefix}/{i}</loc></url>" for i in range(1, count + 1))
    return f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{locs}</urlset>'.encode()


def _index(n):
    locs = "".join(f"<sitemap><loc>https://example.com/sitemap-{i}.xml</loc></sitemap>" for i in range(n))
    return f"<sitemapindex>{locs}</sitemapindex>".encode()


def _ok(content):
    resp = Mock()
    resp.status_code = 200
    resp.content = content
    return resp


def _status(code):
    resp = Mock()
    resp.status_code = code
    resp.content = b""
    return resp


def _resolve(base_url="https://example.com"):
    return asyncio.run(fetch_sitemap_urls(base_url))


@patch("crawler.sitemap.requests.get")
def test_returns_empty_when_sitemap_not_found(mock_get):
    mock_get.return_value = _status(404)
    assert _resolve() == []
    assert mock_get.call_args[0][0] == "https://example.com/sitemap.xml"


@patch("crawler.sitemap.requests.get")
def test_standard_sitemap_urls_in_document_order(mock_get):
    mock_get.return_value = _ok(STANDARD_SITEMAP)
    assert _resolve() == [
        "https://example.com/",
        "https://example.com/about",
        "https://example.com/blog",
    ]
    assert mock_get.call_count == 1


@patch("crawler.sitemap.requests.get")
def test_sitemap_without_namespace(mock_get):
    mock_get.return_value = _ok(b"<urlset><url><loc> https://example.com/a </loc></url><url><loc></loc></url></urlset>")
    assert _resolve() == ["https://example.com/a"]


@patch("crawler.sitemap.requests.get")
def test_sitemap_index_follows_children_in_order(mock_get):
    mock_get.side_effect = [
        _ok(SITEMAP_INDEX),
        _ok(_child_sitemap("blog", 2)),
        _ok(_child_sitemap("docs", 1)),
    ]
    assert _resolve() == [
        "https://example.com/blog/1",
        "https://example.com/blog/2",
        "https://example.com/docs/1",
    ]
    fetched = [c[0][0] for c in mock_get.call_args_list]
    assert fetched[1:] == ["https://example.com/blog-sitemap.xml", "https://example.com/docs-sitemap.xml"]


@patch("crawler.sitemap.requests.get")
def test_caps_pages_per_child_sitemap(mock_get):
    mock_get.side_effect = [_ok(SITEMAP_INDEX), _ok(_child_sitemap("blog", 6)), _ok(_child_sitemap("docs", 6))]
    urls = _resolve()
    assert len(urls) == 2 * MAX_PAGES_PER_CHILD
    assert "https://example.com/blog/6" not in urls
    assert urls[MAX_PAGES_PER_CHILD] == "https://example.com/docs/1"


@patch("crawler.sitemap.requests.get")
def test_caps_number_of_child_sitemaps(mock_get):
    mock_get.side_effect = [_ok(_index(15))] + [_ok(_child_sitemap(f"s{i}", 1)) for i in range(15)]
    urls = _resolve()
    assert mock_get.call_count == 1 + MAX_CHILD_SITEMAPS
    assert len(urls) == MAX_CHILD_SITEMAPS
    assert urls[-1] == "https://example.com/s9/1"


@patch("crawler.sitemap.requests.get")
def test_failing_child_sitemap_is_ignored(mock_get):
    mock_get.side_effect = [
        _ok(SITEMAP_INDEX),
        requests.exceptions.ConnectionError("boom"),
        _ok(_child_sitemap("docs", 2)),
    ]
    assert _resolve() == ["https://example.com/docs/1", "https://example.com/docs/2"]


@patch("crawler.sitemap.requests.get")
def test_child_sitemaps_are_not_followed_recursively(mock_get):
    mock_get.side_effect = [_ok(SITEMAP_INDEX), _ok(SITEMAP_INDEX), _ok(SITEMAP_INDEX)]
    assert _resolve() == []
    assert mock_get.call_count == 3


@patch("crawler.sitemap.requests.get")
def test_returns_empty_on_network_error(mock_get):
    mock_get.side_effect = requests.exceptions.ConnectionError("network failure")
    assert _resolve() == []


@patch("crawler.sitemap.requests.get")
def test_malformed_xml_is_treated_as_no_sitemap(mock_get):
    mock_get.return_value = _ok(b"<this is not valid xml>>>")
    assert _resolve() == []


@patch("crawler.sitemap.requests.get")
def test_unrelated_xml_yields_empty(mock_get):
    mock_get.return_value = _ok(b"<rss><channel><item><link>https://example.com/x</link></item></channel></rss>")
    assert _resolve() == []
