"""
HTTP page fetcher.

Wraps a curl_cffi session with browser impersonation and turns every
failure into a NetworkError or ParseError. There are no retries: a
failed fetch is reported to the caller, who decides what to do.
"""

import json
import logging

from bs4 import BeautifulSoup
from curl_cffi import requests
from curl_cffi.requests import exceptions as requests_exceptions

import harvest_config
from harvest_errors import NetworkError, ParseError

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetches HTML and JSON documents, one GET per call."""

    def __init__(self, timeout=None, impersonate=None, session=None):
        """
        Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds (None = use config default)
            impersonate: curl_cffi browser fingerprint (None = use config default)
            session: Session to reuse; a new curl_cffi session is created if omitted
        """
        self.timeout = timeout if timeout is not None else harvest_config.REQUEST_TIMEOUT
        self.impersonate = impersonate or harvest_config.IMPERSONATE
        self.session = session if session is not None else requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the underlying session."""
        try:
            self.session.close()
        except Exception as e:
            logger.debug(f"Could not close session: {e}")

    def fetch_text(self, url, params=None):
        """
        GET a URL and return the response body.

        Args:
            url: URL to fetch
            params: Optional query parameters

        Returns:
            Response body as text

        Raises:
            NetworkError: On connection failure, timeout or non-2xx status
        """
        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(
                url,
                params=params,
                impersonate=self.impersonate,
                timeout=self.timeout
            )
        except requests_exceptions.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}", url=url) from e

        status = response.status_code
        logger.debug(f"  -> {status}")
        if not 200 <= status < 300:
            raise NetworkError(f"{url} returned HTTP {status}", url=url, status_code=status)

        return response.text

    def fetch_html(self, url):
        """
        Fetch a page and parse it with lxml.

        Raises:
            NetworkError: See fetch_text()
            ParseError: If the body is empty
        """
        text = self.fetch_text(url)
        if not text or not text.strip():
            raise ParseError(f"Empty HTML body from {url}", url=url)
        return BeautifulSoup(text, 'lxml')

    def fetch_json(self, url, params=None):
        """
        Fetch a JSON document.

        Raises:
            NetworkError: See fetch_text()
            ParseError: If the body is not valid JSON
        """
        text = self.fetch_text(url, params=params)
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid JSON from {url}: {e}", url=url) from e
