"""
Event logging utilities for NDJSON format.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from .state import get_run_dir


def emit_event(run_id: str, event_type: str, data: Dict[str, Any]) -> None:
    """
    Append an event to the run's logs.ndjson file.

    Args:
        run_id: Run ID
        event_type: Event type (see EventTypes)
        data: Event data; must not contain secret values
    """
    run_dir = get_run_dir(run_id)
    run_dir.mkdir(parents=True, exist_ok=True)
    logs_file = run_dir / "logs.ndjson"

    event = {
        "ts": datetime.now().isoformat(),
        "type": event_type,
        "data": data
    }

    with open(logs_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")
        f.flush()


def read_events(run_id: str) -> List[Dict[str, Any]]:
    """
    Read all events of a run.

    Returns:
        List of events (malformed lines are skipped)
    """
    logs_file = get_run_dir(run_id) / "logs.ndjson"

    if not logs_file.exists():
        return []

    events = []
    with open(logs_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

    return events


def get_last_event(run_id: str) -> Optional[Dict[str, Any]]:
    events = read_events(run_id)
    return events[-1] if events else None


def get_status_from_events(run_id: str) -> str:
    """
    Determine run status from its last event.

    Returns:
        Status string
    """
    last_event = get_last_event(run_id)
    if not last_event:
        return "unknown"

    status_map = {
        EventTypes.INIT: "started",
        EventTypes.NORMALIZED: "normalized",
        EventTypes.ENRICHED: "enriched",
        EventTypes.REQUEST_BUILT: "generating",
        EventTypes.GENERATED: "extracting",
        EventTypes.EXTRACTED: "writing",
        EventTypes.WRITTEN: "written",
        EventTypes.DONE: "done",
        EventTypes.ERROR: "failed",
    }

    return status_map.get(last_event.get("type", ""), "unknown")


class EventTypes:
    INIT = "INIT"
    NORMALIZED = "NORMALIZED"
    ENRICHED = "ENRICHED"
    REQUEST_BUILT = "REQUEST_BUILT"
    GENERATED = "GENERATED"
    EXTRACTED = "EXTRACTED"
    WRITTEN = "WRITTEN"
    DONE = "DONE"
    ERROR = "ERROR"
