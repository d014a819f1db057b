from .base import BaseProvider
from .chain import ProviderChain, ProviderStrategy
from .factory import create_provider, create_provider_chain

__all__ = [
    "BaseProvider",
    "ProviderChain",
    "ProviderStrategy",
    "create_provider",
    "create_provider_chain",
]
