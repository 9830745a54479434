"""Fetch layer: pulls raw documents from remote endpoints."""

from typing import Dict, Optional

import requests

from .errors import FetchError
from .logger import get_logger
from .retry import RetryError, TransientHTTPError, exponential_backoff, should_retry_http_status

RETRYABLE = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    TransientHTTPError,
)


@exponential_backoff(max_retries=3, base_delay=1.0, exceptions=RETRYABLE)
def _get_with_retry(url: str, headers: Optional[Dict[str, str]], timeout: float) -> requests.Response:
    """GET with automatic retry on timeouts, dropped connections and 5xx/429."""
    resp = requests.get(url, headers=headers, timeout=timeout)
    if should_retry_http_status(resp.status_code):
        raise TransientHTTPError(resp.status_code, url)
    return resp


def fetch(url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 15) -> bytes:
    """Fetch ``url`` and return the response body as bytes.

    Raises:
        FetchError: On any HTTP error status or exhausted retries
    """
    logger = get_logger()
    logger.record_fetch_attempt()
    try:
        resp = _get_with_retry(url, headers, timeout)
    except RetryError as e:
        cause = e.__cause__
        status = cause.status_code if isinstance(cause, TransientHTTPError) else None
        logger.record_failure("fetch", type(cause).__name__)
        logger.warning("Fetch gave up after retries", url=url, error=str(cause))
        raise FetchError(f"Fetch failed after retries: {url}", url, status) from e
    except requests.exceptions.RequestException as e:
        logger.record_failure("fetch", "RequestException")
        logger.error("Fetch error", url=url, error=str(e))
        raise FetchError(f"Fetch error for {url}: {e}", url) from e

    if resp.status_code >= 400:
        logger.record_failure("fetch", f"HTTPError_{resp.status_code}")
        logger.error("Fetch returned error status", url=url, status=resp.status_code)
        raise FetchError(f"Request failed ({resp.status_code}): {url}", url, resp.status_code)

    return resp.content
