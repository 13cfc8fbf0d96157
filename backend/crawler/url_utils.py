from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from .exceptions import MalformedUrlError

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _host_port(parts: SplitResult) -> str:
    """Lowercased host plus any non-default port; credentials are dropped."""
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    if port is not None and _DEFAULT_PORTS.get(parts.scheme.lower()) != port:
        host = f"{host}:{port}"
    return host


def normalize_url(url: str) -> str:
    """Canonical form used for storage and dedup.

    Scheme and host are lowercased, a default port is dropped, and the
    fragment and a single trailing slash are removed.
    """
    parts = urlsplit(url)
    try:
        netloc = _host_port(parts) if parts.netloc else ""
    except ValueError:
        netloc = parts.netloc
    url = urlunsplit((parts.scheme.lower(), netloc, parts.path, parts.query, ""))
    if url.endswith("/"):
        url = url[:-1]
    return url


def get_origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{_host_port(parts)}"


def is_same_origin(url: str, base_url: str) -> bool:
    """Scheme, host and effective port of both URLs match."""
    return get_origin(url) == get_origin(base_url)


def get_base_url(url: str) -> str:
    """Scheme + host of a user-supplied URL; raises MalformedUrlError if it has neither."""
    if not isinstance(url, str):
        raise MalformedUrlError(url)
    try:
        parts = urlsplit(url.strip())
        host = _host_port(parts)
    except ValueError as e:
        raise MalformedUrlError(url) from e
    if parts.scheme.lower() not in _DEFAULT_PORTS or not parts.hostname:
        raise MalformedUrlError(url)
    return f"{parts.scheme.lower()}://{host}"


def get_hostname(url: str) -> str:
    return _host_port(urlsplit(url))


def is_root_path(url: str) -> bool:
    return urlsplit(url).path in ("", "/")


def get_sitemap_url(base_url: str) -> str:
    return urljoin(base_url + "/", "sitemap.xml")


def get_llms_txt_url(url: str) -> str:
    return urljoin(url, "/llms.txt")
