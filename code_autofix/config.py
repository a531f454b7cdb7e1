"""
Configuration — loads settings from .autofix.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "model": "mistral-large-latest",
    "api_key": "",
    "fallback_api_key": "",
    "base_url": "https://api.mistral.ai/v1",
    "temperature": 0.3,
    "max_tokens": 4096,
    "stream": False,
    "llm_max_retries": 3,
    "llm_retry_delay": 2.0,
    "llm_timeout": 300,
    "allow_line_fallback": False,
    "metrics_dir": ".autofix/metrics",
    "log_dir": ".autofix/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".autofix.yaml", ".autofix.yml"]


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``AUTOFIX_*``; ``MISTRAL_API_KEY`` for the key)
    3. .autofix.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            default = _DEFAULTS[yaml_key]
            env_val = os.getenv(env_key)
            try:
                if env_val is not None:
                    return cast(env_val)
                yaml_val = yd.get(yaml_key)
                if yaml_val is not None:
                    return cast(yaml_val)
            except (TypeError, ValueError):
                pass
            return default

        def _get_bool(env_key: str, yaml_key: str) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return _truthy(env_val)
            yaml_val = yd.get(yaml_key)
            if isinstance(yaml_val, str):
                return _truthy(yaml_val)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[yaml_key]

        self.MODEL = _get("AUTOFIX_MODEL", "model")
        self.BASE_URL = _get("AUTOFIX_BASE_URL", "base_url")

        self.API_KEY = (os.getenv("AUTOFIX_API_KEY")
                        or os.getenv("MISTRAL_API_KEY")
                        or str(yd.get("api_key") or _DEFAULTS["api_key"]))
        self.FALLBACK_API_KEY = (os.getenv("AUTOFIX_FALLBACK_API_KEY")
                                 or str(yd.get("fallback_api_key")
                                        or _DEFAULTS["fallback_api_key"]))

        self.TEMPERATURE = _get("AUTOFIX_TEMPERATURE", "temperature", cast=float)
        self.MAX_TOKENS = _get("AUTOFIX_MAX_TOKENS", "max_tokens", cast=int)
        self.STREAM_RESPONSES = _get_bool("AUTOFIX_STREAM", "stream")

        self.LLM_MAX_RETRIES = _get("LLM_MAX_RETRIES", "llm_max_retries", cast=int)
        self.LLM_RETRY_DELAY = _get("LLM_RETRY_DELAY", "llm_retry_delay", cast=float)
        self.LLM_TIMEOUT = _get("LLM_TIMEOUT", "llm_timeout", cast=int)

        self.ALLOW_LINE_FALLBACK = _get_bool("AUTOFIX_ALLOW_LINE_FALLBACK",
                                             "allow_line_fallback")

        self.METRICS_DIR = _get("AUTOFIX_METRICS_DIR", "metrics_dir")
        self.LOG_DIR = _get("AUTOFIX_LOG_DIR", "log_dir")

    def api_key_or_fallback(self) -> str:
        """Return the primary API key, or the fallback key when it is unset."""
        return self.API_KEY or self.FALLBACK_API_KEY

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
