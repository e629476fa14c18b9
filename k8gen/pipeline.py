"""
End-to-end generation run: descriptor in, files on disk out.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .artifacts import extract_files, write_files
from .config import GenerationConfig
from .descriptor import normalize
from .envman import discover_env_var_names, discover_versions, enrich
from .errors import GenerationError, K8GenError
from .events import EventTypes, emit_event
from .generate import GenerationProvider, build_request, get_provider
from .state import new_run_id

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run."""
    run_id: str
    output_dir: Path
    files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "output_dir": str(self.output_dir),
            "files": [str(p) for p in self.files],
            "warnings": list(self.warnings),
        }


def run_generation(
    raw: Mapping[str, Any],
    config: GenerationConfig,
    discovered_versions: Optional[Mapping[str, str]] = None,
    env_var_names: Optional[Iterable[str]] = None,
    provider: Optional[GenerationProvider] = None,
    run_id: Optional[str] = None,
) -> GenerationResult:
    """
    Run the whole pipeline for one descriptor.

    Stages run strictly in order: credential check, normalization,
    enrichment, request building, generation, extraction, writing. The
    credential check and normalization are preconditions: when either
    fails nothing is written, not even the run's event log.

    Args:
        raw: Raw descriptor document
        config: Explicit run configuration
        discovered_versions: Toolchain versions found by the caller; scanned
            from config.project_dir when None and config.discover is set
        env_var_names: Environment variable names found by the caller;
            scanned the same way when None
        provider: Provider instance; built from config when None
        run_id: Optional run ID (built from the application name if not provided)

    Returns:
        GenerationResult

    Raises:
        MissingCredentialError: The provider needs a key and none is set
        ValidationError: The descriptor is unusable
        GenerationError: The provider failed or returned no file blocks
        ArtifactWriteError: A file could not be written
    """
    try:
        if provider is None:
            provider = get_provider(config.provider, config.model, config.api_key)
        provider.check_credential()
        descriptor, warnings = normalize(raw)
    except K8GenError as e:
        logger.error(f"Run aborted before start: {e}")
        raise

    if run_id is None:
        run_id = new_run_id(descriptor.application_name)

    emit_event(run_id, EventTypes.INIT, {
        "run_id": run_id,
        "provider": provider.name,
        "model": provider.model,
        "prompt_version": config.prompt_version,
        "output_dir": config.output_dir,
    })
    emit_event(run_id, EventTypes.NORMALIZED, {
        "application": descriptor.application_name,
        "defaulted": sorted(descriptor.defaulted),
        "warnings": len(warnings),
    })

    try:
        # Stage 2: enrichment
        if config.discover:
            if discovered_versions is None:
                discovered_versions = discover_versions(config.project_dir)
            if env_var_names is None:
                env_var_names = discover_env_var_names(config.project_dir)
        env_var_names = list(env_var_names or [])
        descriptor = enrich(descriptor, discovered_versions, env_var_names)
        emit_event(run_id, EventTypes.ENRICHED, {
            "javaVersion": descriptor.java_version,
            "gradleVersion": descriptor.gradle_version,
            "env_vars": env_var_names,
        })

        # Stage 3: request
        request = build_request(descriptor, config.prompt_version, provider.model)
        emit_event(run_id, EventTypes.REQUEST_BUILT, {
            "prompt_version": request.prompt_version,
            "prompt_chars": len(request.prompt),
        })

        # Stage 4: generation
        logger.info(f"Generating artifacts for '{descriptor.application_name}' with {provider.name}")
        blob = provider.generate(request, config.timeout_s)
        emit_event(run_id, EventTypes.GENERATED, {"response_chars": len(blob or "")})

        # Stage 5: extraction
        files = extract_files(blob)
        emit_event(run_id, EventTypes.EXTRACTED, {"files": list(files)})
        if not files:
            if not config.allow_empty:
                raise GenerationError("The generation response contained no file blocks")
            logger.warning("The generation response contained no file blocks")

        # Stage 6: write
        written = write_files(files, config.output_dir)
        emit_event(run_id, EventTypes.WRITTEN, {"count": len(written)})

    except K8GenError as e:
        emit_event(run_id, EventTypes.ERROR, {"kind": type(e).__name__, "message": str(e)})
        raise

    emit_event(run_id, EventTypes.DONE, {"count": len(written)})
    return GenerationResult(
        run_id=run_id,
        output_dir=Path(config.output_dir),
        files=written,
        warnings=warnings,
    )
