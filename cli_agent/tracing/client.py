"""
Langfuse tracing client with graceful degradation.

Tracing is optional: without credentials, or when the Langfuse server
cannot be reached, the client stays disabled and every tracing call
becomes a no-op.
"""

import logging
from typing import Any, Optional

from langfuse import Langfuse

from ..models import LangfuseConfig

logger = logging.getLogger(__name__)


class TracingClient:
    """Wraps a Langfuse client; ``enabled`` is False when tracing is off."""

    def __init__(
        self,
        public_key: str = "",
        secret_key: str = "",
        host: str = "",
        debug: bool = False,
    ):
        self._client: Optional[Langfuse] = None
        self._error: Optional[str] = None

        if not public_key or not secret_key:
            self._error = "Langfuse credentials not configured"
            logger.debug("Tracing disabled: %s", self._error)
            return

        if host and not host.startswith(("http://", "https://")):
            logger.warning(
                "Langfuse host '%s' has no scheme; expected http://host:port", host
            )

        kwargs: dict[str, Any] = {
            "public_key": public_key,
            "secret_key": secret_key,
            "debug": debug,
        }
        if host:
            kwargs["host"] = host

        try:
            client = Langfuse(**kwargs)
            if not client.auth_check():
                self._error = "Langfuse auth_check() failed; check host and credentials"
                logger.warning("Tracing disabled: %s", self._error)
                return
        except Exception as e:
            self._error = f"Langfuse unavailable: {e}"
            logger.warning("Tracing disabled: %s", self._error)
            return

        self._client = client
        logger.info("Langfuse tracing enabled (host: %s)", host or "default")

    @classmethod
    def from_config(cls, config: LangfuseConfig) -> "TracingClient":
        return cls(
            public_key=config.public_key,
            secret_key=config.secret_key,
            host=config.host,
            debug=config.debug,
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def error(self) -> Optional[str]:
        """Why tracing is disabled, if it is."""
        return self._error

    @property
    def client(self) -> Optional[Langfuse]:
        return self._client

    def flush(self) -> None:
        if not self._client:
            return
        try:
            self._client.flush()
        except Exception as e:
            logger.warning("Failed to flush tracing events: %s", e)

    def shutdown(self) -> None:
        """Flush remaining events and stop the client."""
        if not self._client:
            return
        try:
            self._client.shutdown()
            logger.info("Langfuse tracing client shutdown complete")
        except Exception as e:
            logger.warning("Error during tracing client shutdown: %s", e)
        self._client = None
