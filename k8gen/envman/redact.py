from __future__ import annotations

import copy
from typing import Any, Dict

REDACTED = "[REDACTED]"
SECRET_FIELDS = ("dbPassword",)


def redact_dict(d: Dict[str, Any]) -> Dict[str, str]:
    return {k: REDACTED for k in d.keys()}


def redact_descriptor(doc: Dict[str, Any]) -> Dict[str, Any]:
    redacted = copy.deepcopy(doc)
    if redacted.get("secrets"):
        redacted["secrets"] = redact_dict(redacted["secrets"])
    for key in SECRET_FIELDS:
        if redacted.get(key) is not None:
            redacted[key] = REDACTED
    return redacted
