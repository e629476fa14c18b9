"""
Error types raised by the generation pipeline.
"""

from typing import List, Optional


class K8GenError(Exception):
    """Base class for all k8gen errors."""


class ValidationError(K8GenError, ValueError):
    """The deployment descriptor cannot be normalized."""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__("Invalid deployment descriptor: " + "; ".join(self.issues))


class MissingCredentialError(K8GenError):
    """The generation provider needs a credential that was not supplied."""

    def __init__(self, provider: str, env_var: Optional[str] = None):
        self.provider = provider
        self.env_var = env_var
        hint = f" (set {env_var} or pass --api-key)" if env_var else ""
        super().__init__(f"No API key configured for provider '{provider}'{hint}")


class GenerationError(K8GenError):
    """The generation provider failed or returned nothing usable."""


class ArtifactWriteError(K8GenError, OSError):
    """An artifact could not be written to disk."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")

    def __str__(self) -> str:
        return f"Failed to write {self.path}: {self.reason}"
