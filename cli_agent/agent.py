"""
Agent facade.

Wires a reasoning backend, tool providers, the catalog, the dispatcher and
tracing into one object with the operations a front end needs: run a
request, switch models, browse and call tools directly, cancel and close.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from .backends import ChatBackend, build_backend
from .config_loader import configure_logging, load_app_config
from .errors import BackendUnavailableError
from .models import AppConfig, ToolCallResult, ToolDescriptor
from .orchestration import (
    CompletionClassifier,
    LoopEvent,
    LoopResult,
    OrchestrationLoop,
    ToolCatalog,
    ToolDispatcher,
    snapshot,
)
from .providers import BackendProvider, build_providers
from .tracing import TracingClient

logger = logging.getLogger(__name__)


class ToolAgent:
    """A reasoning backend plus the tools of its providers."""

    def __init__(
        self,
        backend: ChatBackend,
        providers: Optional[Sequence[BackendProvider]] = None,
        max_iterations: int = 10,
        max_consecutive_failures: int = 3,
        classifier: Optional[CompletionClassifier] = None,
        observer: Optional[Callable[[LoopEvent], None]] = None,
        tracing_client: Optional[TracingClient] = None,
    ):
        self.backend = backend
        self.providers = list(providers or [])
        self.catalog = ToolCatalog(self.providers)
        self.dispatcher = ToolDispatcher(self.providers)
        self.model = backend.model
        self.tracing_client = tracing_client
        self._loop = OrchestrationLoop(
            backend=backend,
            catalog=self.catalog,
            dispatcher=self.dispatcher,
            classifier=classifier,
            max_iterations=max_iterations,
            max_consecutive_failures=max_consecutive_failures,
            observer=observer,
            tracing_client=tracing_client,
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[AppConfig] = None,
        config_path: Optional[str] = None,
        extra_providers: Optional[Sequence[BackendProvider]] = None,
        observer: Optional[Callable[[LoopEvent], None]] = None,
    ) -> "ToolAgent":
        """
        Build an agent from the YAML configuration.

        Providers from ``extra_providers`` (e.g. a LocalToolProvider) are
        registered after the configured ones.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        if config is None:
            config = load_app_config(config_path)
        configure_logging(config.logging.level)

        tracing_client = None
        if config.langfuse.is_configured:
            tracing_client = TracingClient.from_config(config.langfuse)

        providers = build_providers(config.providers) + list(extra_providers or [])
        return cls(
            backend=build_backend(config.backend),
            providers=providers,
            max_iterations=config.orchestrator.max_iterations,
            max_consecutive_failures=config.orchestrator.max_consecutive_failures,
            observer=observer,
            tracing_client=tracing_client,
        )

    def ensure_backend(self) -> None:
        """
        Check that the reasoning backend answers.

        Raises:
            BackendUnavailableError: If the liveness check fails.
        """
        if not self.backend.is_available():
            raise BackendUnavailableError(
                f"Reasoning backend is not reachable (model: {self.model})"
            )

    def chat(self, user_request: str) -> LoopResult:
        """Run one request through a fresh orchestration session."""
        logger.info("Processing request with model %s", self.model)
        try:
            return self._loop.run(user_request, model=self.model)
        finally:
            if self.tracing_client is not None:
                self.tracing_client.flush()

    def list_models(self) -> list[str]:
        return self.backend.list_models()

    def change_model(self, name: str) -> None:
        """
        Select the model used by subsequent requests.

        Raises:
            ValueError: If the backend lists its models and ``name`` is not one.
        """
        if not name:
            raise ValueError("Model name must be a non-empty string")
        available = self.list_models()
        if available and name not in available:
            raise ValueError(
                f"Unknown model '{name}'. Available: {', '.join(available)}"
            )
        logger.info("Switched model from %s to %s", self.model, name)
        self.model = name

    def list_tools(self) -> list[ToolDescriptor]:
        return self.catalog.list_all()

    def call_tool(self, name: str, args: Optional[Mapping[str, Any]] = None) -> ToolCallResult:
        """
        Call one tool directly, bypassing the reasoning backend.

        Arguments are validated when the tool is in the catalog.

        Raises:
            ValueError: If the name is empty or args are not a mapping.
            ToolArgumentError: If args violate the tool's schema.
            ToolNotFoundError: If no provider could run the tool.
        """
        descriptor = snapshot(self.list_tools()).get(name)
        return self.dispatcher.call(name, args, descriptor)

    def cancel(self) -> None:
        self._loop.cancel()

    def close(self) -> None:
        """Release the backend, the providers and the tracing client."""
        self.backend.close()
        for provider in self.providers:
            provider.close()
        if self.tracing_client is not None:
            self.tracing_client.shutdown()
