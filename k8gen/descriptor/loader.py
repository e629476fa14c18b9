"""
Reading descriptor documents from disk.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import ValidationError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def load_descriptor_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a raw descriptor document (JSON, or YAML by file suffix).

    Args:
        path: Path to the descriptor file

    Returns:
        The deserialized document

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed or is not a mapping
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")

    try:
        if p.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError([f"Cannot parse {p}: {e}"]) from e

    if not isinstance(data, dict):
        raise ValidationError([f"{p} must contain a mapping at the top level"])

    logger.debug(f"Loaded descriptor from {p} with {len(data)} fields")
    return data
