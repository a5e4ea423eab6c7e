"""
ViaCEP provider.
"""

from typing import Dict

from ..interfaces import Provider
from .base import ProviderSpec


class ViaCEPSource(ProviderSpec):
    """
    viacep.com.br JSON endpoint.

    Unknown CEPs come back as HTTP 200 with ``{"erro": true}``, which the
    query rejects as an undersized body.
    """

    @property
    def provider(self) -> Provider:
        return Provider.VIACEP

    @property
    def url_template(self) -> str:
        return "http://viacep.com.br/ws/{cep}/json/"

    @property
    def field_map(self) -> Dict[str, str]:
        return {
            'street': 'logradouro',
            'neighborhood': 'bairro',
            'city': 'localidade',
            'state': 'uf',
        }
