"""
Local state for generation runs.

Each run gets a directory under K8GEN_HOME named by its run ID. Run IDs
start with the application the run generated for, so `k8gen logs` can be
given something readable:

    orders-service-20260101-120000-a3f9
"""

import os
import re
import secrets
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Application part of a run ID is capped so the directory name stays short
MAX_RUN_APP_LENGTH = 40

RUN_ID_PATTERN = re.compile(r"^(?P<app>[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)-(?P<stamp>\d{8}-\d{6})-(?P<suffix>[0-9a-f]{4})$")


def get_k8gen_home() -> Path:
    """
    Get the k8gen home directory.

    Returns:
        Path: K8GEN_HOME, or .k8gen in the working directory
    """
    home = os.environ.get("K8GEN_HOME", ".k8gen")
    return Path(home).resolve()


def new_run_id(application_name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    Build a run ID from a normalized application name and the start time.

    Args:
        application_name: Normalized application name ("app" when empty)
        now: Start time, defaults to the current time

    Returns:
        str: Run ID in format <app>-YYYYMMDD-hhmmss-xxxx
    """
    app = (application_name or "")[:MAX_RUN_APP_LENGTH].strip("-") or "app"
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{app}-{stamp}-{secrets.token_hex(2)}"


def is_valid_run_id(run_id: str) -> bool:
    match = RUN_ID_PATTERN.match(run_id or "")
    return bool(match) and len(match.group("app")) <= MAX_RUN_APP_LENGTH


def run_application(run_id: str) -> Optional[str]:
    """Application name a run ID was built from, or None if it is invalid."""
    if not is_valid_run_id(run_id):
        return None
    return RUN_ID_PATTERN.match(run_id).group("app")


def get_run_dir(run_id: str) -> Path:
    """
    Get the directory for a specific run.

    Raises:
        ValueError: If the run ID is invalid
    """
    if not is_valid_run_id(run_id):
        raise ValueError(f"Invalid run ID: {run_id}")

    return get_k8gen_home() / run_id


def run_exists(run_id: str) -> bool:
    try:
        return get_run_dir(run_id).exists()
    except ValueError:
        return False


def list_runs(application_name: Optional[str] = None) -> List[str]:
    """List known run IDs, oldest first, optionally for one application."""
    home = get_k8gen_home()
    if not home.exists():
        return []
    runs = [p.name for p in home.iterdir() if p.is_dir() and is_valid_run_id(p.name)]
    if application_name:
        runs = [r for r in runs if run_application(r) == application_name]
    return sorted(runs, key=lambda r: (RUN_ID_PATTERN.match(r).group("stamp"), r))
