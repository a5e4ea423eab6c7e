"""
CEP Lookup Pipeline

Resolves a Brazilian postal code by racing several lookup providers:
- Parallel provider queries under a shared deadline
- First delivered address wins, the rest are cancelled
- Provider failures degrade silently into a timeout
"""

from .interfaces import (
    Address,
    CancelScope,
    InvalidPostalCode,
    LookupKey,
    MappingError,
    Provider,
    RaceOutcome,
    Success,
    Timeout,
)

from .pipeline import RacePipeline

__all__ = [
    'Address',
    'CancelScope',
    'InvalidPostalCode',
    'LookupKey',
    'MappingError',
    'Provider',
    'RaceOutcome',
    'Success',
    'Timeout',
    'RacePipeline',
]
