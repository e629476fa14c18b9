"""
Dataclasses for the deployment descriptor and its wire format.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set


# Attribute name -> wire (document) field name, in document order
WIRE_FIELDS = {
    "application_name": "applicationName",
    "namespace": "namespace",
    "java_version": "javaVersion",
    "gradle_version": "gradleVersion",
    "port": "port",
    "ingress_host": "ingressHost",
    "tls_secret_name": "tlsSecretName",
    "replicas": "replicas",
    "enable_hpa": "enableHPA",
    "hpa_min_replicas": "hpaMinReplicas",
    "hpa_max_replicas": "hpaMaxReplicas",
    "cpu_request": "cpuRequest",
    "memory_request": "memoryRequest",
    "cpu_limit": "cpuLimit",
    "memory_limit": "memoryLimit",
    "image_registry": "imageRegistry",
    "image_tag": "imageTag",
    "include_database": "includeDatabase",
    "database_image": "databaseImage",
    "db_name": "dbName",
    "db_username": "dbUsername",
    "db_password": "dbPassword",
    "secrets": "secrets",
    "configd": "configd",
    "extra_k8s_resources": "extraK8sResources",
    "additional_docker_images": "additionalDockerImages",
    "migrations": "migrations",
}

ATTRIBUTE_FOR_WIRE = {wire: attr for attr, wire in WIRE_FIELDS.items()}


@dataclass
class DockerImage:
    """An additional container image (sidecar, cache, broker...)."""
    name: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None       # "database", "cache", "backend"...
    ports: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "role": self.role,
            "ports": list(self.ports),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DockerImage":
        ports = data.get("ports") or []
        if not isinstance(ports, (list, tuple)):
            ports = [ports]
        return cls(
            name=data.get("name"),
            image=data.get("image"),
            role=data.get("role"),
            ports=[str(p) for p in ports],
        )


@dataclass
class Migrations:
    """Database migration step run before the application starts."""
    tool: Optional[str] = None       # "flyway", "liquibase"...
    image: Optional[str] = None
    args: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"tool": self.tool, "image": self.image, "args": list(self.args)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Migrations":
        args = data.get("args") or []
        if isinstance(args, str):
            args = [args]
        return cls(tool=data.get("tool"), image=data.get("image"), args=[str(a) for a in args])


@dataclass
class DeploymentDescriptor:
    """Deployment configuration for one generation run."""
    # Identity
    application_name: Optional[str] = None
    namespace: Optional[str] = None

    # Toolchain
    java_version: Optional[str] = None
    gradle_version: Optional[str] = None

    # Networking
    port: Any = None                              # int once normalized
    ingress_host: Optional[str] = None
    tls_secret_name: Optional[str] = None

    # Scaling
    replicas: Any = None
    enable_hpa: bool = False
    hpa_min_replicas: Any = None
    hpa_max_replicas: Any = None

    # Resources (the quartet)
    cpu_request: Optional[str] = None
    memory_request: Optional[str] = None
    cpu_limit: Optional[str] = None
    memory_limit: Optional[str] = None

    # Image
    image_registry: Optional[str] = None
    image_tag: Optional[str] = None

    # Persistence
    include_database: Optional[bool] = None
    database_image: Optional[str] = None
    db_name: Optional[str] = None
    db_username: Optional[str] = None
    db_password: Optional[str] = None

    # Secrets and plain config; a None secret value means "generate"
    secrets: Dict[str, Optional[str]] = field(default_factory=dict)
    configd: Optional[Dict[str, str]] = None

    # Extras
    extra_k8s_resources: List[str] = field(default_factory=list)
    additional_docker_images: List[DockerImage] = field(default_factory=list)
    migrations: Optional[Migrations] = None

    # Unknown document keys, kept so nothing the user wrote is lost
    extra: Dict[str, Any] = field(default_factory=dict)

    # Attributes filled by a fallback rather than by the user (not serialized)
    defaulted: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire document (camelCase keys)."""
        result: Dict[str, Any] = {}
        for attr, wire in WIRE_FIELDS.items():
            value = getattr(self, attr)
            if attr == "additional_docker_images":
                value = [img.to_dict() for img in value]
            elif attr == "migrations":
                value = value.to_dict() if value else None
            else:
                value = copy.deepcopy(value)
            result[wire] = value
        for key, value in self.extra.items():
            result.setdefault(key, copy.deepcopy(value))
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentDescriptor":
        """Create from a wire document. Values are taken as-is, not validated."""
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}

        for key, value in data.items():
            attr = ATTRIBUTE_FOR_WIRE.get(key)
            if attr is None:
                extra[key] = copy.deepcopy(value)
                continue
            if attr == "additional_docker_images":
                value = [
                    img if isinstance(img, DockerImage) else DockerImage.from_dict(img)
                    for img in (value or [])
                    if isinstance(img, (dict, DockerImage))
                ]
            elif attr == "migrations":
                if isinstance(value, dict):
                    value = Migrations.from_dict(value)
                elif not isinstance(value, Migrations):
                    value = None
            elif attr == "secrets":
                value = dict(value or {})
            elif attr == "extra_k8s_resources":
                value = [value] if isinstance(value, str) else list(value or [])
            else:
                value = copy.deepcopy(value)
            kwargs[attr] = value

        return cls(extra=extra, **kwargs)
