"""
Core interfaces for the CEP lookup race.

Defines the data structures shared by the orchestrator, the provider query
and the provider sources.
"""

import re
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Union


# Deadline for a whole race
DEFAULT_TIMEOUT_SECONDS = 1.0

# Bodies with fewer keys than this are treated as malformed
MIN_RESPONSE_KEYS = 4

# Pacing after a malformed body; not a backoff
MALFORMED_PAUSE_SECONDS = 0.002

# Body is read in chunks of this size, checking the cancel scope in between
BODY_CHUNK_SIZE = 1024

_CEP_PATTERN = re.compile(r"[0-9]{8}")


class InvalidPostalCode(ValueError):
    """Raised when the input is not exactly 8 ASCII digits."""


class MappingError(ValueError):
    """Raised when a provider response is missing a field or has the wrong type."""


class Provider(Enum):
    """Closed set of lookup providers raced against each other."""
    BRASIL_API = "BrasilAPI"
    VIACEP = "ViaCEP"


@dataclass(frozen=True)
class LookupKey:
    """
    A validated CEP (Brazilian postal code).

    Always holds exactly 8 ASCII digits; build it with ``LookupKey.parse``.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not _CEP_PATTERN.fullmatch(self.value):
            raise InvalidPostalCode(f"CEP must be exactly 8 digits, got {self.value!r}")

    @classmethod
    def parse(cls, raw: str) -> 'LookupKey':
        """Validate user input, ignoring surrounding whitespace."""
        if raw is None:
            raise InvalidPostalCode("CEP is required")
        return cls(raw.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Address:
    """
    Common result schema.

    Values are passed through verbatim from whichever provider answered.
    """
    api: str
    street: str
    neighborhood: str
    city: str
    state: str


@dataclass(frozen=True)
class Success:
    """The race produced a winning address."""
    address: Address
    elapsed_ms: int = 0


@dataclass(frozen=True)
class Timeout:
    """No provider delivered an address before the deadline."""
    timeout_seconds: float
    elapsed_ms: int = 0


RaceOutcome = Union[Success, Timeout]


class CancelScope:
    """
    Deadline-bound cancellation signal shared by every provider task.

    Tasks only read it. The orchestrator cancels it once it has a winner or
    gives up; the deadline passing counts as cancellation too.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or time.monotonic() >= self.deadline

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self.deadline - time.monotonic())

    def __repr__(self) -> str:
        return f"<CancelScope timeout={self.timeout} cancelled={self.cancelled}>"
