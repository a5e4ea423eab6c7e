"""
Single-provider query used by each racing task.
"""

import json
import queue
import time
from typing import Any, Dict, Optional

import requests

from logging_config import get_logger

from .interfaces import (
    Address,
    CancelScope,
    LookupKey,
    MappingError,
    BODY_CHUNK_SIZE,
    MIN_RESPONSE_KEYS,
    MALFORMED_PAUSE_SECONDS,
)
from .sources.base import ProviderSpec

logger = get_logger(__name__)


def query_provider(
    spec: ProviderSpec,
    key: LookupKey,
    scope: CancelScope,
    channel: "queue.Queue[Address]",
    session: requests.Session,
) -> bool:
    """
    Query one provider and try to deliver its Address to the channel.

    Every failure (network, status, malformed body, bad field) is logged and
    swallowed. The scope is checked before the request, after the response
    headers, between body chunks, and before delivery.

    Args:
        spec: Provider to query
        key: Validated CEP
        scope: Shared cancel scope of the race
        channel: Single-slot delivery channel
        session: Request scope owned by this task

    Returns:
        True if this provider's Address was written to the channel
    """
    url = spec.build_url(key)
    log_ctx = {"provider": spec.name, "postal_code": key.value, "endpoint": url}

    timeout = scope.remaining()
    if timeout <= 0 or scope.cancelled:
        logger.debug("Race already over, skipping request", extra=log_ctx)
        return False

    start_time = time.monotonic()
    try:
        with session.get(url, timeout=timeout, stream=True) as response:
            if scope.cancelled:
                logger.debug("Race over before body was read", extra=log_ctx)
                return False

            if response.status_code != 200:
                logger.warning(
                    "Provider returned non-success status",
                    extra={**log_ctx, "status_code": response.status_code},
                )
                return False

            body = _read_body(response, scope)
            if body is None:
                logger.debug("Race over while body was being read", extra=log_ctx)
                return False

        data = json.loads(body)
    except ValueError as e:
        logger.warning("Provider returned invalid JSON", extra={**log_ctx, "error": str(e)})
        return False
    except requests.RequestException as e:
        logger.warning("Provider request failed", extra={**log_ctx, "error": str(e)})
        return False

    duration_ms = int((time.monotonic() - start_time) * 1000)

    if not isinstance(data, dict) or len(data) < MIN_RESPONSE_KEYS:
        logger.warning(
            f"Unexpected response from server {spec.name}",
            extra={**log_ctx, "duration_ms": duration_ms},
        )
        time.sleep(MALFORMED_PAUSE_SECONDS)
        return False

    try:
        address = spec.map_response(data)
    except MappingError as e:
        logger.warning("Provider response could not be mapped", extra={**log_ctx, "error": str(e)})
        return False

    return _deliver(address, scope, channel, log_ctx, duration_ms)


def _read_body(response: requests.Response, scope: CancelScope) -> Optional[bytes]:
    """
    Read the response body chunk by chunk, giving up once the scope is cancelled.

    Each socket read is limited to the time left on the scope, so a server
    trickling bytes cannot hold the task past the deadline.

    Returns:
        The body, or None if the race ended first
    """
    chunks = []
    _limit_read_timeout(response, scope.remaining())
    for chunk in response.iter_content(chunk_size=BODY_CHUNK_SIZE):
        if scope.cancelled:
            return None
        chunks.append(chunk)
        _limit_read_timeout(response, scope.remaining())
    if scope.cancelled:
        return None
    return b"".join(chunks)


def _limit_read_timeout(response: requests.Response, seconds: float) -> None:
    # urllib3 exposes the live connection on streamed responses
    connection = getattr(getattr(response, "raw", None), "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is not None:
        sock.settimeout(max(seconds, 0.001))


def _deliver(
    address: Address,
    scope: CancelScope,
    channel: "queue.Queue[Address]",
    log_ctx: Dict[str, Any],
    duration_ms: int,
) -> bool:
    """
    Write the address to the single-slot channel unless the race is over.

    Never blocks: a cancelled scope or a full slot drops the result.
    """
    if scope.cancelled:
        logger.debug("Race over, discarding result", extra={**log_ctx, "duration_ms": duration_ms})
        return False
    try:
        channel.put_nowait(address)
    except queue.Full:
        # Another provider already won
        logger.debug("Slot taken, discarding result", extra={**log_ctx, "duration_ms": duration_ms})
        return False

    logger.info("Provider answered", extra={**log_ctx, "duration_ms": duration_ms})
    return True
