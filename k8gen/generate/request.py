"""
Build the request handed to the generation provider.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..descriptor.schema import DeploymentDescriptor
from ..envman.redact import redact_descriptor
from ..errors import ValidationError
from .prompts import PROMPTS, get_prompt_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactRequest:
    """A frozen generation request: the serialized descriptor plus its prompt."""
    model: Optional[str]
    prompt_version: int
    inputs: Dict[str, Any] = field(repr=False)
    prompt: str = field(repr=False)

    def preview(self) -> str:
        """The prompt with secret values redacted, safe to print or log."""
        return render_prompt(self.prompt_version, redact_descriptor(self.inputs))


def render_prompt(prompt_version: int, inputs: Dict[str, Any]) -> str:
    template = get_prompt_template(prompt_version)
    return template + json.dumps(inputs, indent=2) + "\n"


def build_request(
    descriptor: DeploymentDescriptor,
    prompt_version: int = 1,
    model: Optional[str] = None,
) -> ArtifactRequest:
    """
    Serialize an enriched descriptor into a generation request.

    Args:
        descriptor: Normalized and enriched descriptor
        prompt_version: Prompt template to use
        model: Provider-specific model name

    Returns:
        ArtifactRequest

    Raises:
        ValidationError: If the prompt version is unknown
    """
    if prompt_version not in PROMPTS:
        raise ValidationError([
            f"Unknown prompt version {prompt_version!r} (available: {', '.join(map(str, sorted(PROMPTS)))})"
        ])

    inputs = descriptor.to_dict()
    prompt = render_prompt(prompt_version, inputs)

    logger.debug(f"Built request for '{descriptor.application_name}' with prompt v{prompt_version} ({len(prompt)} chars)")
    return ArtifactRequest(model=model, prompt_version=prompt_version, inputs=inputs, prompt=prompt)
