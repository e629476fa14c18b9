"""
Generation request building and provider adapters.
"""

from .request import ArtifactRequest, build_request
from .providers import GenerationProvider, MockProvider, GeminiProvider, OpenRouterProvider, get_provider

__all__ = [
    "ArtifactRequest",
    "build_request",
    "GenerationProvider",
    "MockProvider",
    "GeminiProvider",
    "OpenRouterProvider",
    "get_provider",
]
