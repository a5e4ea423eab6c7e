"""
BrasilAPI CEP provider.
"""

from typing import Dict

from ..interfaces import Provider
from .base import ProviderSpec


class BrasilAPISource(ProviderSpec):
    """CEP v1 endpoint of brasilapi.com.br. Answers 404 for unknown CEPs."""

    @property
    def provider(self) -> Provider:
        return Provider.BRASIL_API

    @property
    def url_template(self) -> str:
        return "https://brasilapi.com.br/api/cep/v1/{cep}"

    @property
    def field_map(self) -> Dict[str, str]:
        return {
            'street': 'street',
            'neighborhood': 'neighborhood',
            'city': 'city',
            'state': 'state',
        }
