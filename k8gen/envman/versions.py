from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

WRAPPER_PROPERTIES = Path("gradle") / "wrapper" / "gradle-wrapper.properties"
BUILD_SCRIPTS = ["build.gradle.kts", "build.gradle"]

DISTRIBUTION_URL = re.compile(r"distributionUrl\s*=.*gradle-(\d+\.\d+(?:\.\d+)?(?:-(?:rc|milestone)-\d+)?)-(?:bin|all)\.zip")
JAVA_VERSION_HINTS = [
    re.compile(r"JavaLanguageVersion\.of\(\s*(\d+)\s*\)"),
    re.compile(r"JavaVersion\.VERSION_(\d+(?:_\d+)?)"),
    re.compile(r"sourceCompatibility\s*=\s*['\"]?(\d+(?:\.\d+)?)['\"]?"),
    re.compile(r"jvmToolchain\(\s*(\d+)\s*\)"),
]
JAVA_RUNTIME_VERSION = re.compile(r"version \"(\d+)(?:\.(\d+))?[^\"]*\"")


def gradle_version_from_wrapper(project_dir: str | Path) -> Optional[str]:
    props = Path(project_dir) / WRAPPER_PROPERTIES
    if not props.is_file():
        return None
    text = _read(props)
    m = DISTRIBUTION_URL.search(text) if text else None
    return m.group(1) if m else None


def java_version_from_build_script(project_dir: str | Path) -> Optional[str]:
    for name in BUILD_SCRIPTS:
        script = Path(project_dir) / name
        if not script.is_file():
            continue
        text = _read(script)
        if text is None:
            continue
        for pattern in JAVA_VERSION_HINTS:
            m = pattern.search(text)
            if m:
                version = m.group(1).replace("_", ".")
                # VERSION_1_8 / "1.8" style means Java 8
                if version.startswith("1."):
                    version = version[2:]
                return version
    return None


def java_version_from_runtime(timeout_s: float = 10.0) -> Optional[str]:
    try:
        proc = subprocess.run(["java", "-version"], check=False, capture_output=True, text=True, timeout=timeout_s)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"java -version unavailable: {e}")
        return None
    # java prints its version banner on stderr
    m = JAVA_RUNTIME_VERSION.search(proc.stderr or proc.stdout or "")
    if not m:
        return None
    major, minor = m.group(1), m.group(2)
    return minor if major == "1" and minor else major


def _read(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None


def discover_versions(project_dir: str | Path, use_runtime: bool = True) -> Dict[str, str]:
    found: Dict[str, str] = {}

    gradle = gradle_version_from_wrapper(project_dir)
    if gradle:
        found["gradleVersion"] = gradle

    java = java_version_from_build_script(project_dir)
    if not java and use_runtime:
        java = java_version_from_runtime()
    if java:
        found["javaVersion"] = java

    logger.debug(f"Discovered toolchain versions: {found}")
    return found
