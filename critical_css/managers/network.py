"""Network management for critical-css."""

import time
import logging
import requests
from typing import Dict, Any, Optional
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from ..utils.concurrency import run_blocking
from ..utils.config import REQUEST_TIMEOUT, USER_AGENT
from ..utils.error import NetworkError
from ..utils.file import decode_bytes

logger = logging.getLogger(__name__)

class NetworkManager:
    """Fetch remote stylesheets over a pooled HTTP session.

    Requests are never retried: a failed fetch leaves the stylesheet
    external, which is always a correct outcome.
    """

    def __init__(self, request_timeout: Optional[float] = REQUEST_TIMEOUT,
                 pool_maxsize: int = 10,
                 proxy: Optional[str] = None,
                 verify_ssl: bool = True):
        """Initialize network manager.

        Args:
            request_timeout: Request timeout in seconds, None to wait forever
            pool_maxsize: Maximum size of each connection pool
            proxy: Optional proxy URL
            verify_ssl: Whether to verify SSL certificates

        Raises:
            ValueError: If any parameter is invalid
        """
        if request_timeout is not None and request_timeout <= 0:
            raise ValueError("Request timeout must be positive")
        if pool_maxsize <= 0:
            raise ValueError("Pool maxsize must be positive")

        self.request_timeout = request_timeout
        self.verify_ssl = verify_ssl

        self.session = requests.Session()
        self.session.headers['User-Agent'] = USER_AGENT
        adapter = HTTPAdapter(
            pool_maxsize=pool_maxsize,
            max_retries=Retry(total=0, raise_on_status=False),
        )
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)
        if proxy:
            self.session.proxies = {
                'http': proxy,
                'https': proxy
            }
        self.session.verify = verify_ssl

        self.stats: Dict[str, Any] = {
            'request_count': 0,
            'error_count': 0,
            'total_bytes': 0,
            'start_time': time.time(),
        }

    def get_text(self, url: str) -> str:
        """Fetch a URL and decode its body.

        Args:
            url: URL to fetch

        Returns:
            Response body as text

        Raises:
            NetworkError: If the request fails or the status is not 2xx
        """
        self.stats['request_count'] += 1
        try:
            response = self.session.get(url, timeout=self.request_timeout)
        except requests.exceptions.Timeout as e:
            self.stats['error_count'] += 1
            raise NetworkError(f"Request timeout for {url}: {e}")
        except requests.exceptions.ConnectionError as e:
            self.stats['error_count'] += 1
            raise NetworkError(f"Connection error for {url}: {e}")
        except requests.exceptions.RequestException as e:
            self.stats['error_count'] += 1
            raise NetworkError(f"Request failed for {url}: {e}")

        if not response.ok:
            self.stats['error_count'] += 1
            raise NetworkError(f"Failed to fetch {url}: HTTP {response.status_code}")

        self.stats['total_bytes'] += len(response.content)
        logger.debug(f"Fetched {url} ({len(response.content)} bytes)")
        return decode_bytes(response.content)

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL from a worker thread. See :meth:`get_text`."""
        return await run_blocking(self.get_text, url)

    def get_stats(self) -> Dict[str, Any]:
        """Get network statistics."""
        return {
            **self.stats,
            'elapsed_time': time.time() - self.stats['start_time'],
        }

    def cleanup(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> 'NetworkManager':
        """Enter context manager."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager."""
        self.cleanup()

# Exported class
__all__ = ['NetworkManager']
