import logging

import requests

from .fetcher import FETCH_TIMEOUT, USER_AGENT
from .url_utils import get_llms_txt_url

logger = logging.getLogger(__name__)


def fetch_existing_llms_txt(url: str, timeout: float = FETCH_TIMEOUT) -> str | None:
    """Return the site's published /llms.txt, or None if it has none or the request fails."""
    try:
        llms_url = get_llms_txt_url(url)
        r = requests.get(
            llms_url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            allow_redirects=True,
        )
        if not 200 <= r.status_code < 300:
            return None
        return r.text
    except Exception:
        logger.debug("Existing llms.txt lookup failed for %s", url, exc_info=True)
        return None
