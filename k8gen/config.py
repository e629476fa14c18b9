"""
Run configuration for the generation pipeline.

Everything the pipeline needs from its environment (provider, model,
credential, output location) is collected here once and passed in
explicitly, so nothing below the CLI reads the process environment.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


DEFAULT_PROVIDER = "gemini"
DEFAULT_OUTPUT_DIR = "k8s"
DEFAULT_CONFIG_FILE = "k8-config.json"
DEFAULT_PROMPT_VERSION = 1
DEFAULT_TIMEOUT_S = 120.0

# Environment variable holding the credential for each provider
PROVIDER_KEY_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


@dataclass
class GenerationConfig:
    """Explicit configuration for one generation run."""
    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None       # None means the provider's default model
    api_key: Optional[str] = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    prompt_version: int = DEFAULT_PROMPT_VERSION
    timeout_s: float = DEFAULT_TIMEOUT_S
    project_dir: str = "."
    discover: bool = True           # Scan project_dir for versions / env vars
    allow_empty: bool = False       # Accept a response with no file blocks

    @property
    def credential_env(self) -> Optional[str]:
        """Name of the environment variable the provider reads its key from."""
        return PROVIDER_KEY_ENV.get(self.provider.lower())

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> "GenerationConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Explicit values; any value that is not None wins
                over the environment

        Returns:
            GenerationConfig
        """
        env = os.environ if environ is None else environ

        config = cls(
            provider=env.get("K8GEN_PROVIDER", DEFAULT_PROVIDER),
            model=env.get("K8GEN_MODEL") or None,
            output_dir=env.get("K8GEN_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            prompt_version=_int_env(env, "K8GEN_PROMPT_VERSION", DEFAULT_PROMPT_VERSION),
            timeout_s=_float_env(env, "K8GEN_TIMEOUT", DEFAULT_TIMEOUT_S),
        )

        explicit = {k: v for k, v in overrides.items() if v is not None}
        config = replace(config, **explicit)

        # Output dir "/" or "" means "use the default location"
        if config.output_dir in ("", "/"):
            config.output_dir = DEFAULT_OUTPUT_DIR

        if not config.api_key and config.credential_env:
            key = env.get(config.credential_env, "").strip()
            config.api_key = key or None

        return config


def _int_env(env: Dict[str, str], name: str, default: int) -> int:
    try:
        return int(env.get(name, default))
    except (TypeError, ValueError):
        return default


def _float_env(env: Dict[str, str], name: str, default: float) -> float:
    try:
        return float(env.get(name, default))
    except (TypeError, ValueError):
        return default
