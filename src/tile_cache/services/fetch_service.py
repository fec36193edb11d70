import asyncio
import logging
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from tile_cache.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_TIMEOUT
from tile_cache.interfaces.tile_fetcher import ITileFetcher
from tile_cache.models.tile import FetchResponse
from tile_cache.exceptions.tile_cache_exceptions import FetchError

logger = logging.getLogger(__name__)


class RequestsTileFetcher(ITileFetcher):
    """Fetches tiles with a pooled requests session.

    Requests are blocking, so each fetch runs in a worker thread and only
    suspends the awaiting coroutine.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 retry_attempts: int = DEFAULT_RETRY_ATTEMPTS):
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self._session: Optional[requests.Session] = None

    def create_session(self) -> requests.Session:
        """Create optimized session for downloads"""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.retry_attempts,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False
        )

        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=20,
            pool_maxsize=20
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = self.create_session()
        return self._session

    async def fetch(self, url: str) -> FetchResponse:
        return await asyncio.to_thread(self._fetch, url)

    def _fetch(self, url: str) -> FetchResponse:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            content = response.content
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(f"Failed to download {url}: {e}", url=url, status=status) from e
        except requests.RequestException as e:
            raise FetchError(f"Failed to download {url}: {e}", url=url) from e

        content_type = response.headers.get("Content-Type") or ""
        return FetchResponse(data=content, content_type=content_type)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
