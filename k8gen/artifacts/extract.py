"""
Splitting a generated text blob into files.

Wire format, one block per file:

    -----BEGIN_FILE: <path>-----
    <content>
    -----END_FILE: <path>-----
"""

import logging
import re
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

BEGIN_MARKER = "-----BEGIN_FILE: "
END_MARKER = "-----END_FILE: "
MARKER_TAIL = "-----"

# The path must repeat verbatim in the END marker, and the content may not
# contain another BEGIN marker, so an unterminated block never swallows the
# block after it.
FILE_BLOCK_PATTERN = re.compile(
    r"-----BEGIN_FILE: (?P<path>[^\r\n]+?)-----\r?\n"
    r"(?:(?P<content>(?:(?!-----BEGIN_FILE: ).)*?)\r?\n)?"
    r"-----END_FILE: (?P=path)-----",
    re.DOTALL,
)

ArtifactSet = Dict[str, str]


def extract_files(blob: Optional[str]) -> ArtifactSet:
    """
    Extract path -> content pairs from delimited blocks.

    Text outside blocks and malformed or unterminated blocks are ignored.
    When a path appears twice the later content wins, but the path keeps the
    position of its first occurrence.

    Args:
        blob: Raw generation output

    Returns:
        Ordered mapping of relative path to trimmed content (empty if none)
    """
    files: ArtifactSet = {}
    if not blob:
        return files

    matched = 0
    for match in FILE_BLOCK_PATTERN.finditer(blob):
        path = match.group("path")
        content = (match.group("content") or "").strip()
        if path in files:
            logger.debug(f"Duplicate block for {path}; keeping the last one")
        files[path] = content
        matched += 1

    skipped = blob.count(BEGIN_MARKER) - matched
    if skipped > 0:
        logger.warning(f"Skipped {skipped} malformed or unterminated file block(s)")
    logger.debug(f"Extracted {len(files)} file(s) from {matched} block(s)")

    return files


def format_files(files: ArtifactSet) -> str:
    """Serialize a mapping into the BEGIN_FILE/END_FILE wire format."""
    blocks = []
    for path, content in files.items():
        blocks.append(
            f"{BEGIN_MARKER}{path}{MARKER_TAIL}\n"
            f"{content}\n"
            f"{END_MARKER}{path}{MARKER_TAIL}"
        )
    return "\n".join(blocks)


class _BlockStyleDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str):
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_BlockStyleDumper.add_representer(str, _represent_str)


def files_to_yaml(files: ArtifactSet) -> str:
    """
    Dump the mapping as YAML under a top-level ``files`` key.

    Multi-line contents use literal block style so they stay readable.
    """
    return yaml.dump(
        {"files": dict(files)},
        Dumper=_BlockStyleDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
