import os
from pathlib import Path
from typing import Optional

import yaml

from prreviewer_core.errors import ConfigError
from prreviewer_core.models import SEVERITIES

DEFAULT_CONFIG_PATH = ".ai-pr-reviewer.yml"

DEFAULT_CONFIG: dict = {
    "ai_provider": "anthropic",
    "ai_model": None,  # None = use the provider's built-in default model
    "trigger_label": None,
    "severity": "high",  # pipe-delimited, e.g. "high|medium"
    "log_level": "INFO",
}

# Action input name → config key. GitHub exposes each input as INPUT_<NAME>
# with the name upper-cased and spaces replaced by underscores; hyphens stay.
ACTION_INPUTS = {
    "github-token": "github_token",
    "ai-provider": "ai_provider",
    "ai-model": "ai_model",
    "anthropic-api-key": "anthropic_api_key",
    "openai-api-key": "openai_api_key",
    "trigger-label": "trigger_label",
    "severity": "severity",
    "log-level": "log_level",
}

# Plain environment variables used when the matching input is not set.
_ENV_FALLBACKS = {
    "github_token": "GITHUB_TOKEN",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
}


def get_input(name: str, required: bool = False) -> Optional[str]:
    """Read an action input from the environment.

    Empty strings count as absent, matching how the runner passes inputs the
    workflow did not set.
    """
    value = os.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    if not value:
        if required:
            raise ConfigError(f"Input required and not supplied: {name}")
        return None
    return value


def load_config(config_path: str = DEFAULT_CONFIG_PATH, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ai-pr-reviewer.yml in the current directory
      3. Action inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)
    for key in _ENV_FALLBACKS:
        config[key] = None

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping.")
        config.update(file_config)

    for key, env_name in _ENV_FALLBACKS.items():
        if os.environ.get(env_name):
            config[key] = os.environ[env_name]

    for input_name, key in ACTION_INPUTS.items():
        value = get_input(input_name)
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def parse_severities(value: str) -> frozenset:
    """Turn a pipe-delimited severity filter into a set, e.g. "high|medium"."""
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"Severity filter must be a pipe-delimited string, got {type(value).__name__}.")
    levels = frozenset(part.strip().lower() for part in (value or "").split("|") if part.strip())
    if not levels:
        raise ConfigError("Severity filter is empty. Use a pipe-delimited list such as 'high|medium'.")
    unknown = levels - set(SEVERITIES)
    if unknown:
        raise ConfigError(
            f"Unknown severity level(s): {', '.join(sorted(unknown))}. Choose from: {', '.join(SEVERITIES)}."
        )
    return levels


def api_key_for(config: dict) -> Optional[str]:
    """Return the API key configured for the selected provider."""
    return config.get(f"{config.get('ai_provider')}_api_key")


def validate_config(config: dict) -> None:
    """Raise ConfigError if a value the run cannot start without is missing."""
    if not config.get("github_token"):
        raise ConfigError("Input required and not supplied: github-token")
    if not config.get("trigger_label"):
        raise ConfigError("Input required and not supplied: trigger-label")
    provider = config.get("ai_provider")
    if f"{provider}_api_key" in _ENV_FALLBACKS and not api_key_for(config):
        raise ConfigError(f"Input required and not supplied: {provider}-api-key")
    parse_severities(config.get("severity"))
