"""
Shared HTTP session for outbound fetches.

Wraps requests.Session with a browser-like User-Agent and returns None
instead of raising on transport failures, so callers can write
`if not resp:` for both network errors and non-2xx responses.
"""

import logging
from typing import Optional

import requests
from fake_useragent import UserAgent

logger = logging.getLogger(__name__)


class RequestSession:
    """Thin wrapper around requests.Session used by data source providers."""

    DEFAULT_TIMEOUT = 30

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": UserAgent().random,
            "Accept": "application/json",
        })

    def get(self, url: str, params: Optional[dict] = None, **kwargs) -> Optional[requests.Response]:
        """
        GET a URL.

        Returns:
            The Response (falsy when status is 4xx/5xx), or None when the
            request could not be completed at all.
        """
        kwargs.setdefault("timeout", self.timeout)
        try:
            resp = self.session.get(url, params=params, **kwargs)
        except requests.RequestException as e:
            logger.error(f"GET {url} failed: {e}")
            return None

        if not resp.ok:
            logger.warning(f"GET {url} returned {resp.status_code}")
        return resp

    def close(self):
        self.session.close()
