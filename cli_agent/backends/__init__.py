"""
Reasoning backends.

Available backends:
- ollama: Ollama native chat API
- openai_compatible: any OpenAI-compatible chat completions endpoint
"""

from ..models import BackendConfig, BackendType
from .base import ChatBackend, ChatReply
from .ollama_backend import OllamaChatBackend
from .openai_backend import OpenAIChatBackend


def build_backend(config: BackendConfig) -> ChatBackend:
    """Create the reasoning backend described by ``config``."""
    if config.type == BackendType.OPENAI_COMPATIBLE:
        return OpenAIChatBackend(
            base_url=config.base_url,
            model=config.model,
            api_key=config.api_key,
            temperature=config.temperature,
            timeout=config.timeout,
        )
    return OllamaChatBackend(
        base_url=config.base_url,
        model=config.model,
        temperature=config.temperature,
        timeout=config.timeout,
    )


__all__ = [
    "ChatBackend",
    "ChatReply",
    "OllamaChatBackend",
    "OpenAIChatBackend",
    "build_backend",
]
