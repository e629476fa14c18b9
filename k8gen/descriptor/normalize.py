"""
Validation, default filling and secret materialization for deployment descriptors.
"""

import logging
import re
import secrets
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..errors import ValidationError
from .schema import DeploymentDescriptor, DockerImage

logger = logging.getLogger(__name__)


MAX_NAME_LENGTH = 253
MAX_NAMESPACE_LENGTH = 63

FALLBACK_JAVA_VERSION = "21"
FALLBACK_GRADLE_VERSION = "8.9"

JAVA_VERSION_PATTERN = re.compile(r"^\d+(\.\d+){0,2}$")
GRADLE_VERSION_PATTERN = re.compile(r"^\d+\.\d+(\.\d+)?(-(rc|milestone)-\d+)?$")

# The resource quartet, in the order it is reported
DEFAULT_RESOURCES = {
    "cpu_request": "250m",
    "memory_request": "512Mi",
    "cpu_limit": "500m",
    "memory_limit": "1Gi",
}
QUANTITY_PATTERN = re.compile(r"^\d+(\.\d+)?(m|k|Ki|M|Mi|G|Gi|T|Ti|P|Pi|E|Ei)?$")

DEFAULT_REPLICAS = 1
DEFAULT_HPA_MIN_REPLICAS = 1
DEFAULT_HPA_MAX_REPLICAS = 5

DEFAULT_DATABASE_IMAGE = "postgres:16"
IMAGE_TAG_PLACEHOLDER = "{{BUILD_TIMESTAMP}}"

# Random bytes behind every generated secret value
SECRET_BYTES = 32

# Auxiliary resource tokens and their accepted spellings
RESOURCE_ALIASES = {
    "hpa": "hpa",
    "autoscaling": "hpa",
    "horizontalpodautoscaler": "hpa",
    "pdb": "pdb",
    "poddisruptionbudget": "pdb",
    "disruptionbudget": "pdb",
    "rbac": "rbac",
    "role": "rbac",
    "serviceaccount": "serviceaccount",
    "sa": "serviceaccount",
    "networkpolicy": "networkpolicy",
    "netpol": "networkpolicy",
}

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]")
_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}
_FALSE_STRINGS = {"false", "no", "n", "0", "off", ""}


def normalize(raw: Union[Mapping[str, Any], DeploymentDescriptor]) -> Tuple[DeploymentDescriptor, List[str]]:
    """
    Validate a raw descriptor and fill in every default.

    Validation runs first and reports all problems at once; nothing is
    generated (in particular no secret) unless it passes. The input is
    never modified.

    Args:
        raw: Wire document (camelCase keys) or an existing descriptor

    Returns:
        Tuple of (normalized descriptor, warnings about applied fallbacks)

    Raises:
        ValidationError: If the name, port or scaling settings are unusable
    """
    if isinstance(raw, DeploymentDescriptor):
        descriptor = DeploymentDescriptor.from_dict(raw.to_dict())
        descriptor.defaulted = set(raw.defaulted)
    elif isinstance(raw, Mapping):
        descriptor = DeploymentDescriptor.from_dict(dict(raw))
    else:
        raise ValidationError([f"Descriptor must be a mapping, got {type(raw).__name__}"])

    warnings: List[str] = []

    _validate(descriptor)
    _apply_defaults(descriptor, warnings)
    _materialize_secrets(descriptor, warnings)

    for warning in warnings:
        logger.debug(f"Descriptor fallback: {warning}")

    return descriptor, warnings


def normalize_name(name: Any, max_length: int = MAX_NAME_LENGTH) -> str:
    """Lowercase and replace every character outside [a-z0-9-] with '-'."""
    if name is None:
        return ""
    return _INVALID_NAME_CHARS.sub("-", str(name).lower())[:max_length]


def parse_port(value: Any) -> Optional[int]:
    """Return the port as an int if it is one in [1, 65535], else None."""
    port = _parse_int(value)
    if port is None or port < 1 or port > 65535:
        return None
    return port


def is_valid_java_version(version: Any) -> bool:
    return isinstance(version, str) and bool(JAVA_VERSION_PATTERN.match(version.strip()))


def is_valid_gradle_version(version: Any) -> bool:
    return isinstance(version, str) and bool(GRADLE_VERSION_PATTERN.match(version.strip()))


def generate_secret_value() -> str:
    """Generate a URL-safe, single-line random secret from the OS CSPRNG."""
    return secrets.token_urlsafe(SECRET_BYTES)


def _validate(d: DeploymentDescriptor) -> None:
    """Check the hard constraints, coercing the checked fields in place."""
    issues: List[str] = []

    name = normalize_name(d.application_name)
    if not name:
        issues.append("applicationName is required and must not be empty")
    d.application_name = name

    if d.port is None:
        issues.append("port is required")
    else:
        port = parse_port(d.port)
        if port is None:
            issues.append(f"Invalid port: {d.port!r} (must be an integer in 1..65535)")
        else:
            d.port = port

    if d.replicas is not None:
        replicas = _parse_int(d.replicas)
        if replicas is None or replicas < 0:
            issues.append(f"Invalid replicas: {d.replicas!r} (must be an integer >= 0)")
        else:
            d.replicas = replicas

    d.enable_hpa = _parse_bool(d.enable_hpa, default=False)
    hpa_min = _parse_int(d.hpa_min_replicas)
    hpa_max = _parse_int(d.hpa_max_replicas)
    if d.enable_hpa:
        if d.hpa_min_replicas is not None and (hpa_min is None or hpa_min < 1):
            issues.append(f"Invalid hpaMinReplicas: {d.hpa_min_replicas!r} (must be an integer >= 1)")
        if d.hpa_max_replicas is not None and (hpa_max is None or hpa_max < 1):
            issues.append(f"Invalid hpaMaxReplicas: {d.hpa_max_replicas!r} (must be an integer >= 1)")
        if hpa_min is not None and hpa_max is not None and hpa_min > hpa_max:
            issues.append(f"hpaMinReplicas ({hpa_min}) cannot be greater than hpaMaxReplicas ({hpa_max})")
    d.hpa_min_replicas = hpa_min
    d.hpa_max_replicas = hpa_max

    for image in d.additional_docker_images:
        ports = []
        for raw_port in image.ports:
            port = parse_port(raw_port)
            if port is None:
                issues.append(f"Invalid port {raw_port!r} for additional image '{image.name or image.image}'")
            else:
                ports.append(str(port))
        image.ports = ports

    if issues:
        raise ValidationError(issues)


def _apply_defaults(d: DeploymentDescriptor, warnings: List[str]) -> None:
    """Fill every optional field; fallbacks are reported, never fatal."""
    name = d.application_name
    base = name.strip("-") or "app"

    # Namespace
    namespace = normalize_name(d.namespace, MAX_NAMESPACE_LENGTH).strip("-") if d.namespace else ""
    if not namespace:
        namespace = base[:MAX_NAMESPACE_LENGTH].strip("-")
        _mark(d, "namespace", warnings, f"Defaulted namespace to '{namespace}'")
    d.namespace = namespace

    # Toolchain versions
    d.java_version = _version_str(d.java_version)
    d.gradle_version = _version_str(d.gradle_version)
    if is_valid_java_version(d.java_version):
        d.java_version = d.java_version.strip()
    else:
        if d.java_version not in (None, ""):
            warnings.append(f"Unrecognized javaVersion {d.java_version!r}")
        d.java_version = FALLBACK_JAVA_VERSION
        _mark(d, "java_version", warnings, f"Defaulted javaVersion to {FALLBACK_JAVA_VERSION}")

    if is_valid_gradle_version(d.gradle_version):
        d.gradle_version = d.gradle_version.strip()
    else:
        if d.gradle_version not in (None, ""):
            warnings.append(f"Unrecognized gradleVersion {d.gradle_version!r}")
        d.gradle_version = FALLBACK_GRADLE_VERSION
        _mark(d, "gradle_version", warnings, f"Defaulted gradleVersion to {FALLBACK_GRADLE_VERSION}")

    # Resource quartet, each member on its own
    for attr, default in DEFAULT_RESOURCES.items():
        value = getattr(d, attr)
        if value is not None and not isinstance(value, str):
            value = str(value)
        if value and QUANTITY_PATTERN.match(value.strip()):
            setattr(d, attr, value.strip())
            continue
        if value:
            warnings.append(f"Unrecognized resource quantity {attr}={value!r}")
        setattr(d, attr, default)
        _mark(d, attr, warnings, f"Defaulted {attr} to {default}")

    # Scaling
    if d.replicas is None:
        d.replicas = DEFAULT_REPLICAS
        _mark(d, "replicas", warnings, f"Defaulted replicas to {DEFAULT_REPLICAS}")
    if d.enable_hpa:
        if d.hpa_min_replicas is None:
            d.hpa_min_replicas = DEFAULT_HPA_MIN_REPLICAS
            _mark(d, "hpa_min_replicas", warnings, f"Defaulted hpaMinReplicas to {DEFAULT_HPA_MIN_REPLICAS}")
        if d.hpa_max_replicas is None:
            d.hpa_max_replicas = max(d.hpa_min_replicas, DEFAULT_HPA_MAX_REPLICAS)
            _mark(d, "hpa_max_replicas", warnings, f"Defaulted hpaMaxReplicas to {d.hpa_max_replicas}")

    # Networking
    d.ingress_host = _clean_str(d.ingress_host)
    d.tls_secret_name = _clean_str(d.tls_secret_name)
    if d.tls_secret_name and not d.ingress_host:
        warnings.append("tlsSecretName is set but ingressHost is not; no Ingress will be produced")

    # Image
    d.image_registry = _clean_str(d.image_registry)
    d.image_tag = _clean_str(d.image_tag)
    if not d.image_tag:
        d.image_tag = IMAGE_TAG_PLACEHOLDER
        _mark(d, "image_tag", warnings, f"Defaulted imageTag to {IMAGE_TAG_PLACEHOLDER}")

    # Persistence
    if d.include_database is None:
        d.include_database = True
        _mark(d, "include_database", warnings, "Defaulted includeDatabase to true")
    else:
        d.include_database = _parse_bool(d.include_database, default=True)
    if d.include_database:
        if not _clean_str(d.database_image):
            d.database_image = DEFAULT_DATABASE_IMAGE
            _mark(d, "database_image", warnings, f"Defaulted databaseImage to {DEFAULT_DATABASE_IMAGE}")
        if not _clean_str(d.db_name):
            d.db_name = f"{base}-db"
            _mark(d, "db_name", warnings, f"Defaulted dbName to '{d.db_name}'")
        if not _clean_str(d.db_username):
            d.db_username = base
            _mark(d, "db_username", warnings, f"Defaulted dbUsername to '{d.db_username}'")

    # Plain config values are strings
    if d.configd is not None:
        d.configd = {str(k): "" if v is None else str(v) for k, v in d.configd.items()}

    # Extras
    d.extra_k8s_resources = _normalize_resource_tokens(d.extra_k8s_resources, d.enable_hpa, warnings)
    d.additional_docker_images = _normalize_images(d.additional_docker_images, warnings)
    if d.migrations is not None and not _clean_str(d.migrations.image):
        warnings.append(f"Dropped migrations for tool {d.migrations.tool!r}: no image given")
        d.migrations = None

    if d.extra:
        warnings.append(f"Unknown descriptor fields kept as-is: {', '.join(sorted(d.extra))}")


def _materialize_secrets(d: DeploymentDescriptor, warnings: List[str]) -> None:
    """Replace every missing secret value with a freshly generated one."""
    materialized: Dict[str, str] = {}
    for key, value in d.secrets.items():
        if value is None:
            materialized[str(key)] = generate_secret_value()
            warnings.append(f"Generated a random value for secret '{key}'")
        else:
            materialized[str(key)] = str(value)
    d.secrets = materialized

    if d.include_database and d.db_password is None:
        d.db_password = generate_secret_value()
        _mark(d, "db_password", warnings, "Generated a random dbPassword")


def _normalize_resource_tokens(tokens: List[Any], enable_hpa: bool, warnings: List[str]) -> List[str]:
    result: List[str] = []
    for token in tokens:
        key = re.sub(r"[\s_\-]", "", str(token).lower())
        if not key:
            continue
        canonical = RESOURCE_ALIASES.get(key)
        if canonical is None:
            warnings.append(f"Unknown auxiliary resource '{token}' passed through")
            canonical = str(token).strip().lower()
        if canonical not in result:
            result.append(canonical)
    if enable_hpa and "hpa" not in result:
        result.append("hpa")
    return result


def _normalize_images(images: List[DockerImage], warnings: List[str]) -> List[DockerImage]:
    result: List[DockerImage] = []
    for image in images:
        ref = _clean_str(image.image)
        if not ref:
            warnings.append(f"Dropped additional image '{image.name}': no image reference")
            continue
        name = image.name or ref.rsplit("/", 1)[-1].split(":", 1)[0].split("@", 1)[0]
        result.append(DockerImage(
            name=normalize_name(name, MAX_NAMESPACE_LENGTH),
            image=ref,
            role=_clean_str(image.role),
            ports=list(image.ports),
        ))
    return result


def _mark(d: DeploymentDescriptor, attr: str, warnings: List[str], message: str) -> None:
    d.defaulted.add(attr)
    warnings.append(message)


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and re.fullmatch(r"[+-]?\d+", value.strip()):
        return int(value.strip())
    return None


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return default
    return bool(value)


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _version_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value
