"""
Generation providers: the external text-generation collaborators.

Every provider takes an ArtifactRequest and returns one text blob that may
contain zero or more BEGIN_FILE/END_FILE blocks.
"""

import base64
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests
import yaml

from ..artifacts.extract import format_files
from ..errors import GenerationError, MissingCredentialError, ValidationError
from .request import ArtifactRequest

logger = logging.getLogger(__name__)


class GenerationProvider(ABC):
    """Abstract base class for generation providers."""

    requires_credential = True
    credential_env: Optional[str] = None
    default_model: Optional[str] = None

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or self.default_model
        self.api_key = api_key
        self.name = self.__class__.__name__.replace("Provider", "").lower()

    def check_credential(self) -> None:
        """Raise MissingCredentialError when a required key is absent."""
        if self.requires_credential and not (self.api_key and self.api_key.strip()):
            raise MissingCredentialError(self.name, self.credential_env)

    @abstractmethod
    def generate(self, request: ArtifactRequest, timeout_s: float) -> str:
        """
        Produce the delimited text blob for a request.

        Args:
            request: The built generation request
            timeout_s: Timeout in seconds for the whole call

        Returns:
            Raw response text
        """
        pass


class MockProvider(GenerationProvider):
    """Offline provider rendering a minimal artifact set from the inputs."""

    requires_credential = False

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        super().__init__(model or "mock", api_key)
        self.name = "mock"

    def generate(self, request: ArtifactRequest, timeout_s: float) -> str:
        logger.debug(f"Mock provider rendering artifacts for {request.inputs.get('applicationName')}")
        return format_files(render_mock_files(request.inputs))


class GeminiProvider(GenerationProvider):
    """Google Gemini through the Generative Language REST API."""

    credential_env = "GEMINI_API_KEY"
    default_model = "gemini-2.5-flash"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def generate(self, request: ArtifactRequest, timeout_s: float) -> str:
        self.check_credential()

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": request.prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        data = _post_json(self.name, url, payload, headers, timeout_s)
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Unexpected Gemini response shape: {e}") from e


class OpenRouterProvider(GenerationProvider):
    """Any chat model behind OpenRouter's OpenAI-compatible API."""

    credential_env = "OPENROUTER_API_KEY"
    default_model = "google/gemini-2.5-flash"
    base_url = "https://openrouter.ai/api/v1"

    def generate(self, request: ArtifactRequest, timeout_s: float) -> str:
        self.check_credential()

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": 0.2,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        data = _post_json(self.name, f"{self.base_url}/chat/completions", payload, headers, timeout_s)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Unexpected OpenRouter response shape: {e}") from e


PROVIDERS = {
    "mock": MockProvider,
    "gemini": GeminiProvider,
    "openrouter": OpenRouterProvider,
}


def get_provider(provider_name: str, model: Optional[str] = None, api_key: Optional[str] = None) -> GenerationProvider:
    """Get a generation provider instance by name."""
    provider_class = PROVIDERS.get((provider_name or "").lower())
    if not provider_class:
        raise ValidationError([f"Unknown provider '{provider_name}' (available: {', '.join(sorted(PROVIDERS))})"])
    return provider_class(model, api_key)


def _post_json(name: str, url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout_s: float) -> Dict[str, Any]:
    start_time = time.time()
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout_s)
    except requests.RequestException as e:
        raise GenerationError(f"{name} request failed: {e}") from e

    duration_ms = int((time.time() - start_time) * 1000)
    logger.debug(f"{name} API call completed in {duration_ms}ms with status {response.status_code}")

    if response.status_code >= 400:
        raise GenerationError(f"{name} returned HTTP {response.status_code}: {response.text[:200]}")
    try:
        return response.json()
    except ValueError as e:
        raise GenerationError(f"{name} returned a non-JSON body") from e


def render_mock_files(inputs: Dict[str, Any]) -> Dict[str, str]:
    """Render a small, valid artifact set in apply order."""
    name = inputs.get("applicationName") or "app"
    namespace = inputs.get("namespace") or name
    port = inputs.get("port") or 8080
    labels = {"app": name, "component": "backend"}
    registry = inputs.get("imageRegistry")
    tag = inputs.get("imageTag") or "latest"
    image = f"{registry}/{name}:{tag}" if registry else f"{name}:{tag}"
    extras = inputs.get("extraK8sResources") or []

    def meta(suffix: str = "") -> Dict[str, Any]:
        return {"name": f"{name}{suffix}", "namespace": namespace, "labels": dict(labels)}

    files: Dict[str, str] = {}
    files["Dockerfile"] = "\n".join([
        f"FROM gradle:{inputs.get('gradleVersion')}-jdk{inputs.get('javaVersion')} AS build",
        "WORKDIR /workspace",
        "COPY . .",
        "RUN gradle bootJar --no-daemon",
        "",
        f"FROM eclipse-temurin:{inputs.get('javaVersion')}-jre",
        "RUN useradd --system --uid 10001 app",
        "WORKDIR /app",
        "COPY --from=build /workspace/build/libs/*.jar app.jar",
        "USER 10001",
        f"EXPOSE {port}",
        'ENTRYPOINT ["java", "-jar", "/app/app.jar"]',
    ])
    files[".dockerignore"] = "\n".join([".git", ".gradle", ".idea", "build", "target", "*.log", ".env", "node_modules"])

    files["namespace.yaml"] = _dump({"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": namespace, "labels": dict(labels)}})
    files["configmap.yaml"] = _dump({
        "apiVersion": "v1", "kind": "ConfigMap", "metadata": meta("-config"),
        "data": dict(inputs.get("configd") or {}),
    })

    secret_data = {k: _b64(v) for k, v in (inputs.get("secrets") or {}).items() if v is not None}
    if inputs.get("includeDatabase") and inputs.get("dbPassword"):
        secret_data["DB_PASSWORD"] = _b64(inputs["dbPassword"])
    files["secret.yaml"] = _dump({
        "apiVersion": "v1", "kind": "Secret", "metadata": meta("-secret"),
        "type": "Opaque", "data": secret_data,
    })

    files["service.yaml"] = _dump({
        "apiVersion": "v1", "kind": "Service", "metadata": meta(),
        "spec": {"type": "ClusterIP", "selector": dict(labels),
                 "ports": [{"port": port, "targetPort": port, "protocol": "TCP"}]},
    })

    container = {
        "name": name,
        "image": image,
        "imagePullPolicy": "Always" if tag == "latest" else "IfNotPresent",
        "ports": [{"containerPort": port}],
        "envFrom": [{"configMapRef": {"name": f"{name}-config"}}, {"secretRef": {"name": f"{name}-secret"}}],
        "resources": {
            "requests": {"cpu": inputs.get("cpuRequest"), "memory": inputs.get("memoryRequest")},
            "limits": {"cpu": inputs.get("cpuLimit"), "memory": inputs.get("memoryLimit")},
        },
    }
    pod_spec: Dict[str, Any] = {"securityContext": {"runAsNonRoot": True}, "containers": [container]}
    migrations = inputs.get("migrations")
    if migrations:
        pod_spec["initContainers"] = [{
            "name": f"{migrations.get('tool') or 'migrations'}",
            "image": migrations.get("image"),
            "args": list(migrations.get("args") or []),
        }]
    files["deployment.yaml"] = _dump({
        "apiVersion": "apps/v1", "kind": "Deployment", "metadata": meta(),
        "spec": {
            "replicas": inputs.get("replicas"),
            "selector": {"matchLabels": dict(labels)},
            "template": {"metadata": {"labels": dict(labels)}, "spec": pod_spec},
        },
    })

    if inputs.get("ingressHost"):
        ingress_spec: Dict[str, Any] = {"rules": [{
            "host": inputs["ingressHost"],
            "http": {"paths": [{"path": "/", "pathType": "Prefix",
                                "backend": {"service": {"name": name, "port": {"number": port}}}}]},
        }]}
        if inputs.get("tlsSecretName"):
            ingress_spec["tls"] = [{"hosts": [inputs["ingressHost"]], "secretName": inputs["tlsSecretName"]}]
        files["ingress.yaml"] = _dump({
            "apiVersion": "networking.k8s.io/v1", "kind": "Ingress", "metadata": meta(), "spec": ingress_spec,
        })

    if inputs.get("enableHPA"):
        files["hpa.yaml"] = _dump({
            "apiVersion": "autoscaling/v2", "kind": "HorizontalPodAutoscaler", "metadata": meta(),
            "spec": {
                "scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": name},
                "minReplicas": inputs.get("hpaMinReplicas"),
                "maxReplicas": inputs.get("hpaMaxReplicas"),
                "metrics": [{"type": "Resource", "resource": {
                    "name": "cpu", "target": {"type": "Utilization", "averageUtilization": 70}}}],
            },
        })

    if "pdb" in extras:
        files["pdb.yaml"] = _dump({
            "apiVersion": "policy/v1", "kind": "PodDisruptionBudget", "metadata": meta(),
            "spec": {"minAvailable": 1, "selector": {"matchLabels": dict(labels)}},
        })

    return files


def _dump(manifest: Dict[str, Any]) -> str:
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False)


def _b64(value: Any) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def provider_names() -> List[str]:
    return sorted(PROVIDERS)
