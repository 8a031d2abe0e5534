"""
Web fetcher using the ``requests`` library for HTTP(S). FTP URLs, which
``requests`` doesn't speak, are handed to ``urllib``.
"""

import logging
from urllib.error import URLError
from urllib.request import urlopen

import requests

from ..errors import TransportError
from .api import DEFAULT_USER_AGENT, ByteStreamFetcher

__all__ = ['RequestsWebFetcher']

logger = logging.getLogger(__name__)


class RequestsWebFetcher(ByteStreamFetcher):
    def __init__(self, user_agent=None, per_request_timeout=10):
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.per_request_timeout = per_request_timeout

    def fetch_bytes(self, url: str) -> bytes:
        if url.lower().startswith('ftp://'):
            return self._fetch_ftp(url)
        return self._get(
            url, acceptable_content_types=('application/pkix-crl',)
        ).content

    def _get(self, url, *, acceptable_content_types) -> requests.Response:
        logger.info(f"Requesting CRL from {url}...")
        headers = {
            'Accept': ','.join(acceptable_content_types),
            'User-Agent': self.user_agent,
        }
        try:
            response = requests.get(
                url=url, timeout=self.per_request_timeout, headers=headers
            )
        except requests.RequestException as e:
            raise TransportError(
                f"Failure to fetch CRL from URL {url}", url=url
            ) from e
        if response.status_code != 200:
            raise TransportError(
                f"Failure to fetch CRL from URL {url}: "
                f"status code {response.status_code}",
                url=url,
            )
        return response

    def _fetch_ftp(self, url) -> bytes:
        logger.info(f"Retrieving CRL from {url}...")
        try:
            with urlopen(url, timeout=self.per_request_timeout) as response:
                return response.read()
        except (URLError, OSError) as e:
            raise TransportError(
                f"Failure to fetch CRL from URL {url}", url=url
            ) from e
