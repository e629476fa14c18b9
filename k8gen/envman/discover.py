from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Set

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path("src") / "main" / "resources"
CONFIG_PATTERNS = [
    "application.properties",
    "application.yml",
    "application.yaml",
    "application-*.properties",
    "application-*.yml",
    "application-*.yaml",
]
ENV_FILE_NAMES = [".env.example", ".env.sample"]

# ${VAR} or ${VAR:default}
PLACEHOLDER = re.compile(r"\$\{([A-Za-z0-9_]+)(?::[^}]*)?\}")


def parse_envfile_keys(path: Path) -> List[str]:
    keys: List[str] = []
    try:
        text = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return keys
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k = line.split("=", 1)[0].strip()
        if k.startswith("export "):
            k = k[len("export "):].strip()
        if k:
            keys.append(k)
    return keys


def extract_placeholders(text: str) -> List[str]:
    return PLACEHOLDER.findall(text)


def config_files(project_dir: str | Path) -> List[Path]:
    resources = Path(project_dir) / RESOURCES_DIR
    if not resources.is_dir():
        return []
    found: List[Path] = []
    for pattern in CONFIG_PATTERNS:
        for p in sorted(resources.glob(pattern)):
            if p.is_file() and p not in found:
                found.append(p)
    return found


def discover_env_var_names(project_dir: str | Path) -> List[str]:
    names: List[str] = []
    seen: Set[str] = set()

    def add(key: str) -> None:
        if key and key not in seen:
            seen.add(key)
            names.append(key)

    files = config_files(project_dir)
    if not files:
        logger.info(f"No application.properties or application.yml found under {Path(project_dir) / RESOURCES_DIR}")

    for f in files:
        try:
            text = f.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.warning(f"Cannot read {f}: {e}")
            continue
        for key in extract_placeholders(text):
            add(key)

    ws = Path(project_dir)
    for name in ENV_FILE_NAMES:
        p = ws / name
        if p.is_file():
            for key in parse_envfile_keys(p):
                add(key)

    logger.debug(f"Discovered {len(names)} environment variable names")
    return names
