"""
Data models for the agent.
"""

from .tools import (
    ParameterSpec,
    ToolDescriptor,
    ToolCallRequest,
    ToolCallResult,
    DispatchAttempt,
)
from .config import (
    BackendType,
    ProviderType,
    BackendConfig,
    OrchestratorConfig,
    ProviderConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

__all__ = [
    # Tool models
    "ParameterSpec",
    "ToolDescriptor",
    "ToolCallRequest",
    "ToolCallResult",
    "DispatchAttempt",
    # Config models
    "BackendType",
    "ProviderType",
    "BackendConfig",
    "OrchestratorConfig",
    "ProviderConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
]
