"""
Base class for CEP lookup providers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..interfaces import Address, LookupKey, MappingError, Provider


class ProviderSpec(ABC):
    """
    Static description of one lookup provider.

    Each provider declares its variant, its URL template and the raw keys that
    feed each Address field. Instances are built once and never mutated.
    """

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Which provider variant this spec describes."""
        pass

    @property
    @abstractmethod
    def url_template(self) -> str:
        """URL with a ``{cep}`` placeholder."""
        pass

    @property
    @abstractmethod
    def field_map(self) -> Dict[str, str]:
        """Address field name -> key in the provider's raw response."""
        pass

    @property
    def name(self) -> str:
        return self.provider.value

    def build_url(self, key: LookupKey) -> str:
        return self.url_template.format(cep=key.value)

    def map_response(self, data: Dict[str, Any]) -> Address:
        """
        Convert a decoded response body into an Address.

        Raises:
            MappingError: a mapped field is missing or is not a string
        """
        fields = {
            field_name: _extract_str(data, raw_key)
            for field_name, raw_key in self.field_map.items()
        }
        return Address(api=self.name, **fields)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name='{self.name}'>"


def _extract_str(data: Dict[str, Any], key: str) -> str:
    if key not in data:
        raise MappingError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise MappingError(f"field '{key}' is {type(value).__name__}, expected str")
    return value
