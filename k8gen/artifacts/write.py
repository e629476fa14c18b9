"""
Writing an extracted artifact set to disk.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..errors import ArtifactWriteError
from .extract import ArtifactSet

logger = logging.getLogger(__name__)


def ensure_output_dir(target_dir: Union[str, Path]) -> Path:
    """Create the target directory and its parents; an existing one is fine."""
    target = Path(target_dir)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(target, f"cannot create output directory ({e})") from e
    if not target.is_dir():
        raise ArtifactWriteError(target, "output path exists and is not a directory")
    return target


def resolve_artifact_path(target: Path, relative_path: str) -> Path:
    """
    Resolve an artifact path inside the target directory.

    Raises:
        ArtifactWriteError: If the path is absolute or escapes the target
    """
    rel = Path(relative_path)
    if not relative_path or rel.is_absolute() or rel.anchor:
        raise ArtifactWriteError(relative_path, "artifact paths must be relative")

    root = target.resolve()
    resolved = (root / rel).resolve()
    if resolved != root and root not in resolved.parents:
        raise ArtifactWriteError(relative_path, f"path escapes the output directory {target}")
    if resolved == root:
        raise ArtifactWriteError(relative_path, "path points at the output directory itself")
    return target / rel


def write_files(files: ArtifactSet, target_dir: Union[str, Path]) -> List[Path]:
    """
    Write every artifact under the target directory, in mapping order.

    Contents are written verbatim (UTF-8, no newline translation) and
    existing files are overwritten. The first failure stops the run.

    Args:
        files: Ordered mapping of relative path to content
        target_dir: Output directory, created when missing

    Returns:
        The written paths, in write order

    Raises:
        ArtifactWriteError: If the directory or any file cannot be written
    """
    target = ensure_output_dir(target_dir)
    written: List[Path] = []

    for relative_path, content in files.items():
        path = resolve_artifact_path(target, relative_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise ArtifactWriteError(path, str(e)) from e
        written.append(path)
        logger.debug(f"Wrote {path} ({len(content)} chars)")

    logger.info(f"Wrote {len(written)} file(s) to {target}")
    return written
