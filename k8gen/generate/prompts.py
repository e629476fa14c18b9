"""
Prompt templates sent to the generation provider.

Each template ends with the JSON inputs appended by the request builder.
The file order listed in every template is the order the manifests can be
applied in; the extractor and writer keep that order.
"""

from typing import Dict

FILE_ORDER = [
    "Dockerfile",
    ".dockerignore",
    "docker-compose.yml",
    ".env (only if secrets exist)",
    "namespace.yaml",
    "configmap.yaml",
    "secret.yaml",
    "pvc.yaml (if the database persists)",
    "serviceaccount.yaml (if requested)",
    "role.yaml and rolebinding.yaml (if requested)",
    "service.yaml",
    "deployment.yaml",
    "postgres-deployment.yaml (if includeDatabase)",
    "ingress.yaml (if ingressHost is set)",
    "hpa.yaml (if enableHPA)",
    "pdb.yaml (if requested)",
    "networkpolicy.yaml (if requested)",
    "README_AUTOMATION.md",
]

DELIMITER_RULES = """Wrap every file in these markers, with nothing outside them:

-----BEGIN_FILE: <path>-----
<raw file content>
-----END_FILE: <path>-----"""


def _numbered_files() -> str:
    return "\n".join(f"{i}. {name}" for i, name in enumerate(FILE_ORDER, 1))


PROMPT_V1 = f"""# Role
You are a DevOps engineer. Produce production-ready container and Kubernetes
files for a Spring Boot service built with Gradle.

# Inputs
The JSON document at the end of this prompt has already been validated and
every default has been applied. Use its values exactly; do not re-derive names,
versions, resources or secrets. Secret values are final: base64-encode them in
secret.yaml and never print them anywhere else.

# Output format (mandatory)
{DELIMITER_RULES}

Emit the files in exactly this order so they can be applied top to bottom:
{_numbered_files()}

# Dockerfile
- Multi-stage build: gradle:{{gradleVersion}}-jdk{{javaVersion}} to build,
  eclipse-temurin:{{javaVersion}}-jre to run.
- BuildKit cache mounts for the Gradle cache, copy build files before sources.
- Build with ./gradlew bootJar; run as a non-root user.
- HEALTHCHECK against http://localhost:{{port}}/actuator/health/liveness.
- Build args GRADLE_VERSION, JAVA_VERSION, APP_HOME=/app, JAR_FILE.

# .dockerignore
Exclude .git, .gradle, .idea, build, target, env files, logs and node_modules.

# docker-compose.yml
- app service built from the Dockerfile, environment from configd and secrets
  through ${{VAR}} placeholders.
- A database service from databaseImage when includeDatabase is true, with a
  volume, a healthcheck and depends_on on the healthcheck.
- One service per entry of additionalDockerImages, using its ports.

# Kubernetes manifests
- Labels app=<applicationName>, component=backend on every resource, all in
  the namespace from the inputs.
- Image <imageRegistry>/<applicationName>:<imageTag>; imagePullPolicy Always
  when the tag is latest, IfNotPresent otherwise.
- configmap.yaml holds configd (plus SPRING_PROFILES_ACTIVE=prod unless set);
  secret.yaml holds secrets and the database password.
- deployment.yaml: replicas, the cpu/memory requests and limits from the
  inputs, envFrom for the ConfigMap and Secret, SPRING_DATASOURCE_* variables
  when includeDatabase is true, readiness probe /actuator/health/readiness
  (initialDelaySeconds 15), liveness probe /actuator/health/liveness
  (initialDelaySeconds 30), runAsNonRoot, terminationGracePeriodSeconds 30
  and a preStop hook.
- An initContainer running the migrations image and args when migrations is set.
- service.yaml: ClusterIP on port.
- ingress.yaml only when ingressHost is set, with a TLS section when
  tlsSecretName is set (NGINX annotations).
- hpa.yaml when enableHPA is true, CPU based, hpaMinReplicas..hpaMaxReplicas.
- pdb.yaml, serviceaccount.yaml, role.yaml, rolebinding.yaml and
  networkpolicy.yaml only for the matching entries of extraK8sResources
  (pdb, serviceaccount, rbac, networkpolicy). Keep RBAC least-privilege.
- Valid YAML for Kubernetes v1.26+ using stable API groups.

# README_AUTOMATION.md
One line each for building, pushing and applying the files.

No prose, no questions, no markdown fences outside the file markers.

Inputs:
"""

PROMPT_V2 = f"""# Role
DevOps assistant. Generate container and Kubernetes files for a Spring Boot
(Gradle) service with secure defaults, probes and resource limits.

# Output
{DELIMITER_RULES}

Files, in this order:
{_numbered_files()}

# Rules
- Inputs are final: use names, versions, resources and secrets as given.
- Dockerfile: multi-stage (Gradle {{gradleVersion}} build, Temurin JRE
  {{javaVersion}} runtime), cache mounts, non-root, HEALTHCHECK on the
  actuator liveness endpoint.
- Compose: app plus database (if includeDatabase) plus additionalDockerImages.
- Kubernetes: labels app/component, envFrom ConfigMap and Secret, readiness and
  liveness probes, securityContext runAsNonRoot, ClusterIP service on port.
- Optional files follow ingressHost, tlsSecretName, enableHPA, migrations and
  extraK8sResources.
- Nothing outside the file markers.

Inputs:
"""

PROMPT_V3 = f"""Generate Dockerfile, .dockerignore, docker-compose.yml and Kubernetes
manifests for a Spring Boot service from the inputs below. Use the inputs as
given. Apply order: namespace, configmap/secret, pvc, serviceaccount/rbac,
service, deployment, ingress, hpa, pdb.

{DELIMITER_RULES}

No text outside the markers.

Inputs:
"""

PROMPTS: Dict[int, str] = {
    1: PROMPT_V1,
    2: PROMPT_V2,
    3: PROMPT_V3,
}


def get_prompt_template(version: int) -> str:
    """Return the prompt template for a version (KeyError if unknown)."""
    return PROMPTS[version]


def get_available_versions():
    return sorted(PROMPTS)
