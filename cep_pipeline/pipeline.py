"""
Race orchestrator for CEP lookups.

Queries every provider in parallel and returns the first address delivered
before the deadline.
"""

import queue
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional

import requests

from logging_config import get_logger

from .interfaces import (
    Address,
    CancelScope,
    LookupKey,
    RaceOutcome,
    Success,
    Timeout,
    DEFAULT_TIMEOUT_SECONDS,
)
from .query import query_provider
from .sources import ProviderSpec, default_providers

logger = get_logger(__name__)


class RacePipeline:
    """
    Orchestrates the CEP lookup race.

    Pipeline stages:
    1. Open a cancel scope bound to the deadline
    2. Query all providers in parallel, each with its own session
    3. Return the first address written to the single-slot channel,
       or Timeout once the deadline passes
    4. Cancel the scope so remaining queries stop at their next check

    A provider that fails produces nothing; if all of them fail the race ends
    in Timeout rather than in a combined error.
    """

    def __init__(
        self,
        providers: Optional[List[ProviderSpec]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        """
        Initialize the pipeline.

        Args:
            providers: ProviderSpecs to race (defaults to every known provider)
            timeout: Deadline for the whole race, in seconds
            session_factory: Builds one request session per provider task
        """
        self.providers = list(providers) if providers is not None else default_providers()
        if not self.providers:
            raise ValueError("RacePipeline needs at least one provider")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        self.timeout = timeout
        self.session_factory = session_factory

    def lookup(self, key: LookupKey) -> RaceOutcome:
        """
        Main entry point for a CEP lookup.

        Args:
            key: Validated CEP

        Returns:
            Success with the winning Address, or Timeout
        """
        start_time = time.monotonic()
        scope = CancelScope(self.timeout)
        channel: "queue.Queue[Address]" = queue.Queue(maxsize=1)
        executor = ThreadPoolExecutor(
            max_workers=len(self.providers),
            thread_name_prefix="cep-race",
        )

        try:
            for spec in self.providers:
                future = executor.submit(self._run_provider, spec, key, scope, channel)
                future.add_done_callback(partial(_log_task_failure, spec.name))

            try:
                address = channel.get(timeout=scope.remaining())
            except queue.Empty:
                elapsed_ms = int((time.monotonic() - start_time) * 1000)
                logger.warning(
                    "No provider answered before the deadline",
                    extra={"postal_code": key.value, "duration_ms": elapsed_ms},
                )
                return Timeout(timeout_seconds=self.timeout, elapsed_ms=elapsed_ms)

            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                "Race won",
                extra={"postal_code": key.value, "provider": address.api, "duration_ms": elapsed_ms},
            )
            return Success(address=address, elapsed_ms=elapsed_ms)
        finally:
            scope.cancel()
            # Don't wait for stragglers; they observe the scope and exit
            executor.shutdown(wait=False, cancel_futures=True)

    def _run_provider(
        self,
        spec: ProviderSpec,
        key: LookupKey,
        scope: CancelScope,
        channel: "queue.Queue[Address]",
    ) -> bool:
        with self.session_factory() as session:
            return query_provider(spec, key, scope, channel, session)

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self.providers)
        return f"<RacePipeline providers=[{names}] timeout={self.timeout}>"


def _log_task_failure(provider_name: str, future: Future) -> None:
    """Report a provider task that raised instead of failing quietly."""
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error(
            "Provider task crashed",
            extra={"provider": provider_name, "error": repr(exc)},
        )
