"""
Backend providers: the sources of tools the agent can call.

Available providers:
- LocalToolProvider: Python callables registered in-process
- HttpToolProvider: remote tool server over HTTP
"""

from typing import Sequence

from ..errors import ConfigurationError
from ..models import ProviderConfig, ProviderType
from .base import BackendProvider
from .http import HttpToolProvider
from .local import LocalTool, LocalToolProvider


def build_providers(configs: Sequence[ProviderConfig]) -> list[BackendProvider]:
    """Create providers in configuration (registration) order."""
    providers: list[BackendProvider] = []
    for config in configs:
        if config.type == ProviderType.HTTP:
            providers.append(
                HttpToolProvider(
                    name=config.name,
                    base_url=config.base_url,
                    timeout=config.timeout,
                    headers=config.headers,
                )
            )
        else:
            raise ConfigurationError(f"Unsupported provider type: {config.type}")
    return providers


__all__ = [
    "BackendProvider",
    "HttpToolProvider",
    "LocalTool",
    "LocalToolProvider",
    "build_providers",
]
