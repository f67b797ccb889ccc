"""
Configuration models for the agent.

Defines dataclasses for the YAML configuration file.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class BackendType(Enum):
    """Supported reasoning backend protocols."""

    OPENAI_COMPATIBLE = "openai_compatible"
    OLLAMA = "ollama"


class ProviderType(Enum):
    """Supported tool provider transports."""

    HTTP = "http"


@dataclass
class BackendConfig:
    """Configuration for the reasoning backend."""
    type: BackendType = BackendType.OLLAMA
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    api_key: Optional[str] = None
    temperature: float = 0.7
    timeout: int = 120


@dataclass
class OrchestratorConfig:
    """Configuration for the orchestration loop."""
    max_iterations: int = 10
    max_consecutive_failures: int = 3


@dataclass
class ProviderConfig:
    """Configuration for a single tool provider."""
    name: str
    type: ProviderType = ProviderType.HTTP
    base_url: str = ""
    timeout: int = 30
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = ""
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass
class AppConfig:
    """
    Application configuration container.

    Holds all configuration sections loaded from config/config.yaml.
    """
    version: str = "1.0"
    backend: BackendConfig = field(default_factory=BackendConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    providers: list[ProviderConfig] = field(default_factory=list)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)
