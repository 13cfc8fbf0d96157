class CrawlError(Exception):
    """Base class for errors that terminate a crawl."""


class MalformedUrlError(CrawlError):
    """The crawl was started with a URL that cannot be parsed."""

    def __init__(self, url):
        self.url = url
        super().__init__(f"Malformed URL: {url!r}")
