"""
Configuration loader for the agent.

Loads configuration from a YAML file with support for
environment variable interpolation.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import (
    AppConfig,
    BackendConfig,
    BackendType,
    LangfuseConfig,
    LoggingConfig,
    OrchestratorConfig,
    ProviderConfig,
    ProviderType,
)

logger = logging.getLogger(__name__)

# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _parse_backend_config(data: dict) -> BackendConfig:
    """Parse reasoning backend configuration from dict."""
    type_str = data.get("type", BackendType.OLLAMA.value)
    try:
        backend_type = BackendType(type_str)
    except ValueError:
        raise ConfigurationError(f"Unknown backend type: {type_str}")

    default_url = (
        "http://localhost:11434"
        if backend_type == BackendType.OLLAMA
        else "http://localhost:11434/v1"
    )
    return BackendConfig(
        type=backend_type,
        base_url=data.get("base_url") or default_url,
        model=data.get("model") or "llama3.2",
        api_key=data.get("api_key") or None,
        temperature=float(data.get("temperature", 0.7)),
        timeout=int(data.get("timeout", 120)),
    )


def _parse_orchestrator_config(data: dict) -> OrchestratorConfig:
    """Parse orchestration loop configuration from dict."""
    config = OrchestratorConfig(
        max_iterations=int(data.get("max_iterations", 10)),
        max_consecutive_failures=int(data.get("max_consecutive_failures", 3)),
    )
    if config.max_iterations < 1:
        raise ConfigurationError("orchestrator.max_iterations must be at least 1")
    if config.max_consecutive_failures < 1:
        raise ConfigurationError(
            "orchestrator.max_consecutive_failures must be at least 1"
        )
    return config


def _parse_provider(data: dict) -> ProviderConfig:
    """Parse a single tool provider configuration from dict."""
    name = data.get("name")
    if not name:
        raise ConfigurationError("Provider entry is missing a name")

    type_str = data.get("type", ProviderType.HTTP.value)
    try:
        provider_type = ProviderType(type_str)
    except ValueError:
        raise ConfigurationError(f"Unknown provider type for '{name}': {type_str}")

    base_url = data.get("base_url", "")
    if provider_type == ProviderType.HTTP and not base_url:
        raise ConfigurationError(f"Provider '{name}': missing base_url")

    return ProviderConfig(
        name=name,
        type=provider_type,
        base_url=base_url,
        timeout=int(data.get("timeout", 30)),
        headers=dict(data.get("headers") or {}),
    )


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    return LangfuseConfig(
        public_key=data.get("public_key", ""),
        secret_key=data.get("secret_key", ""),
        host=data.get("host", ""),
        debug=_as_bool(data.get("debug", False)),
    )


def parse_app_config(raw_config: dict) -> AppConfig:
    """
    Build an AppConfig from an already-loaded mapping.

    Environment variables are substituted before parsing.

    Raises:
        ConfigurationError: If any section is invalid
    """
    raw_config = _substitute_env_vars_recursive(raw_config)

    providers_data = raw_config.get("providers") or []
    if not isinstance(providers_data, list):
        raise ConfigurationError("'providers' must be a list")

    try:
        providers = [_parse_provider(item) for item in providers_data]
        names = [p.name for p in providers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate provider names: {duplicates}")

        return AppConfig(
            version=str(raw_config.get("version", "1.0")),
            backend=_parse_backend_config(raw_config.get("backend") or {}),
            orchestrator=_parse_orchestrator_config(
                raw_config.get("orchestrator") or {}
            ),
            providers=providers,
            logging=LoggingConfig(
                level=(raw_config.get("logging") or {}).get("level", "INFO")
            ),
            langfuse=_parse_langfuse_config(raw_config.get("langfuse") or {}),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file. If None, uses the
              CONFIG_PATH env var or the default path (config/config.yaml).
              A missing default file yields the built-in defaults.

    Returns:
        AppConfig with all configuration loaded

    Raises:
        ConfigurationError: If an explicit config file is missing or invalid
    """
    load_dotenv()

    explicit = path is not None or "CONFIG_PATH" in os.environ
    if path is None:
        path = os.environ.get("CONFIG_PATH", str(DEFAULT_CONFIG_PATH))

    config_path = Path(path)

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found at {config_path}")
        logger.info("No configuration file at %s, using defaults", config_path)
        return parse_app_config({})

    logger.info("Loading configuration from %s", config_path)

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Configuration file {config_path} is not valid YAML: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    app_config = parse_app_config(raw_config)
    logger.debug(
        "Configuration loaded: version=%s, backend=%s, providers=%s",
        app_config.version,
        app_config.backend.type.value,
        [p.name for p in app_config.providers],
    )
    return app_config


def configure_logging(level: str = "INFO") -> None:
    """Configure logging for the agent package."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("cli_agent").setLevel(log_level)
