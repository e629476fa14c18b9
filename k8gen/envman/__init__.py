from .enrich import enrich, ENV_PLACEHOLDER
from .discover import discover_env_var_names
from .versions import discover_versions
from .redact import redact_descriptor

__all__ = ["enrich", "ENV_PLACEHOLDER", "discover_env_var_names", "discover_versions", "redact_descriptor"]
