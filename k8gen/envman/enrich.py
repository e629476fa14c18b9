from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from k8gen.descriptor.normalize import is_valid_gradle_version, is_valid_java_version
from k8gen.descriptor.schema import DeploymentDescriptor

logger = logging.getLogger(__name__)

ENV_PLACEHOLDER = "add-your-value-here"

# Wire key -> (attribute, validator)
VERSION_FIELDS = {
    "javaVersion": ("java_version", is_valid_java_version),
    "gradleVersion": ("gradle_version", is_valid_gradle_version),
}


def enrich(
    descriptor: DeploymentDescriptor,
    discovered_versions: Optional[Mapping[str, str]] = None,
    discovered_env_var_names: Optional[Iterable[str]] = None,
) -> DeploymentDescriptor:
    """
    Merge facts discovered in the project into a normalized descriptor.

    A discovered toolchain version replaces a field only when the field is
    unset or holds a fallback; values the user wrote always win. Discovered
    environment variable names are added to configd with a placeholder
    value and never overwrite an existing key.

    Returns:
        A new descriptor; the argument is left untouched
    """
    enriched = DeploymentDescriptor.from_dict(descriptor.to_dict())
    enriched.defaulted = set(descriptor.defaulted)

    for key, version in (discovered_versions or {}).items():
        if key not in VERSION_FIELDS or version is None:
            continue
        attr, is_valid = VERSION_FIELDS[key]
        version = str(version).strip()
        current = getattr(enriched, attr)
        if current and attr not in enriched.defaulted:
            logger.debug(f"Keeping explicit {key}={current}, ignoring discovered {version}")
            continue
        if not is_valid(version):
            logger.debug(f"Ignoring unrecognized discovered {key}={version!r}")
            continue
        setattr(enriched, attr, version)
        enriched.defaulted.discard(attr)
        logger.debug(f"Using discovered {key}={version}")

    names = [n for n in (discovered_env_var_names or []) if n]
    if names and enriched.configd is None:
        enriched.configd = {}

    added = 0
    for name in names:
        if name not in enriched.configd:
            enriched.configd[name] = ENV_PLACEHOLDER
            added += 1

    if added:
        logger.info(f"Added {added} discovered environment variable(s) to configd")
    return enriched
