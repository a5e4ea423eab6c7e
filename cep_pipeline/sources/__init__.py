"""
Provider implementations for the CEP lookup race.
"""

from typing import Dict, List

from ..interfaces import Provider
from .base import ProviderSpec
from .brasilapi import BrasilAPISource
from .viacep import ViaCEPSource


PROVIDERS: Dict[Provider, ProviderSpec] = {
    Provider.BRASIL_API: BrasilAPISource(),
    Provider.VIACEP: ViaCEPSource(),
}

# Every variant needs exactly one spec, registered under its own key
_missing = [p.name for p in Provider if p not in PROVIDERS]
if _missing:
    raise RuntimeError(f"No ProviderSpec registered for: {', '.join(_missing)}")
_mismatched = [p.name for p, spec in PROVIDERS.items() if spec.provider is not p]
if _mismatched:
    raise RuntimeError(f"ProviderSpec registered under the wrong variant: {', '.join(_mismatched)}")


def get_provider(provider: Provider) -> ProviderSpec:
    return PROVIDERS[provider]


def default_providers() -> List[ProviderSpec]:
    """All providers, in declaration order."""
    return [PROVIDERS[p] for p in Provider]


__all__ = [
    'ProviderSpec',
    'BrasilAPISource',
    'ViaCEPSource',
    'PROVIDERS',
    'get_provider',
    'default_providers',
]
