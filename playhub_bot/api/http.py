"""
HTTP transport for upstream calls with timeouts and retries.

All aiohttp sessions are created through ``create_client_session`` so every
request shares the same timeout policy. ``fetch_with_retry`` retries
transient failures (429/502/503/504, network errors and timeouts) with
exponential backoff and returns the final response to the caller.

Usage:
    async with create_client_session() as session:
        response = await fetch_with_retry(session, url, params={'page': 1})
        if response.ok:
            data = response.json()
"""

import asyncio
import json as jsonlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import aiohttp
from aiohttp import ClientTimeout

from playhub_bot.utils.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = ClientTimeout(total=15, connect=5, sock_read=10)
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0

RETRYABLE_STATUS = frozenset({429, 502, 503, 504})

ParamValue = Union[str, int, float, None, List[Any], Tuple[Any, ...]]


@dataclass(frozen=True)
class FetchResponse:
    """Fully-read upstream response."""
    status: int
    url: str
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return jsonlib.loads(self.body) if self.body else None


def create_client_session(timeout: Optional[ClientTimeout] = None, **kwargs) -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession with the default timeout configuration."""
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    return aiohttp.ClientSession(timeout=timeout, **kwargs)


def build_query(params: Optional[Mapping[str, ParamValue]]) -> List[Tuple[str, str]]:
    """
    Flatten a params mapping into (key, value) pairs.

    List values repeat the key (``display_statuses=past&display_statuses=inProgress``);
    None and empty-string values are dropped.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in (params or {}).items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(v)) for v in value if v is not None and v != '')
        elif value is not None and value != '':
            pairs.append((key, str(value)))
    return pairs


async def fetch_with_retry(
    session: aiohttp.ClientSession,
    url: str,
    *,
    method: str = 'GET',
    params: Optional[Mapping[str, ParamValue]] = None,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    debug: bool = False,
) -> FetchResponse:
    """
    Perform a request, retrying transient failures with exponential backoff.

    Args:
        session: Shared aiohttp session (its timeout bounds each attempt)
        url: Absolute URL
        params: Query parameters, see ``build_query``
        max_retries: Retry attempts after the first request
        retry_delay: Base delay in seconds; attempt ``n`` waits ``retry_delay * 2**n``
        debug: Log every retry at WARNING instead of DEBUG

    Returns:
        The final response, which may be a non-success status

    Raises:
        UpstreamUnavailableError: network error or timeout on the last attempt
    """
    query = build_query(params)
    log_level = logging.WARNING if debug else logging.DEBUG
    last_error: Optional[BaseException] = None

    for attempt in range(max_retries + 1):
        try:
            async with session.request(method, url, params=query, headers=headers, json=json) as resp:
                body = await resp.text()
                response = FetchResponse(status=resp.status, url=str(resp.url), body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            last_error = e
            if attempt < max_retries:
                delay = retry_delay * (2 ** attempt)
                logger.log(log_level, f"fetch_retry url={url} error={e!r} attempt={attempt + 1}/{max_retries} delay={delay}s")
                await asyncio.sleep(delay)
                continue
            raise UpstreamUnavailableError(url, e) from e

        if response.ok or response.status not in RETRYABLE_STATUS or attempt >= max_retries:
            if debug:
                logger.debug(f"{method} {response.url} -> {response.status}")
            return response

        delay = retry_delay * (2 ** attempt)
        logger.log(log_level, f"fetch_retry url={url} status={response.status} attempt={attempt + 1}/{max_retries} delay={delay}s")
        await asyncio.sleep(delay)

    # Only reachable when max_retries < 0
    raise UpstreamUnavailableError(url, last_error)
