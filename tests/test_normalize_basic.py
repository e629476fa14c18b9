"""
Basic tests for descriptor normalization.
"""

import re

import pytest
from unittest.mock import patch

from k8gen.descriptor import DeploymentDescriptor, normalize
from k8gen.descriptor.normalize import (
    DEFAULT_DATABASE_IMAGE,
    IMAGE_TAG_PLACEHOLDER,
    normalize_name,
    parse_port,
)
from k8gen.errors import ValidationError

NAME_RE = re.compile(r"^[a-z0-9-]{0,253}$")


def base(**fields):
    doc = {"applicationName": "my-app", "port": 8080}
    doc.update(fields)
    return doc


class TestApplicationName:
    """Test application name normalization."""

    @pytest.mark.parametrize("raw", ["My App!", "UPPER_case.name", "spaces  and\ttabs", "ünïcode/ßlash", "a" * 400])
    def test_name_matches_dns_token(self, raw):
        """Names with uppercase, spaces or symbols become a lowercase token."""
        descriptor, _ = normalize(base(applicationName=raw))
        assert NAME_RE.match(descriptor.application_name)

    def test_name_replacement(self):
        """Invalid characters become hyphens, one for one."""
        assert normalize_name("My App!") == "my-app-"
        assert normalize_name("svc_v2.api") == "svc-v2-api"

    def test_name_truncated(self):
        """Names are cut to 253 characters."""
        descriptor, _ = normalize(base(applicationName="x" * 300))
        assert len(descriptor.application_name) == 253

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_name_rejected(self, raw):
        """A missing or empty name is a validation error."""
        doc = base(applicationName=raw)
        with pytest.raises(ValidationError, match="applicationName"):
            normalize(doc)


class TestPort:
    """Test port validation."""

    @pytest.mark.parametrize("port", [0, -1, 65536, 9999999, "abc", "80.5", 12.5, True, [80]])
    def test_invalid_port_rejected(self, port):
        """Ports outside 1..65535 or not integers are rejected."""
        with pytest.raises(ValidationError, match="port"):
            normalize(base(port=port))

    @pytest.mark.parametrize("port", [1, 80, 8080, 65535])
    def test_valid_port_preserved(self, port):
        """Ports inside the range are kept unchanged."""
        descriptor, _ = normalize(base(port=port))
        assert descriptor.port == port

    def test_numeric_string_port(self):
        """A numeric string is parsed."""
        descriptor, _ = normalize(base(port=" 9090 "))
        assert descriptor.port == 9090

    def test_missing_port_rejected(self):
        """The port is required."""
        with pytest.raises(ValidationError, match="port is required"):
            normalize({"applicationName": "my-app"})

    def test_parse_port(self):
        assert parse_port("443") == 443
        assert parse_port(70000) is None
        assert parse_port(None) is None


class TestScaling:
    """Test replica and autoscaling validation."""

    def test_replicas_default(self):
        descriptor, warnings = normalize(base())
        assert descriptor.replicas == 1
        assert "replicas" in descriptor.defaulted

    def test_zero_replicas_allowed(self):
        descriptor, _ = normalize(base(replicas=0))
        assert descriptor.replicas == 0

    def test_negative_replicas_rejected(self):
        with pytest.raises(ValidationError, match="replicas"):
            normalize(base(replicas=-2))

    def test_hpa_min_greater_than_max_rejected(self):
        """min > max is invalid when autoscaling is enabled."""
        with pytest.raises(ValidationError, match="cannot be greater"):
            normalize(base(enableHPA=True, hpaMinReplicas=5, hpaMaxReplicas=2))

    def test_hpa_ordering_ignored_when_disabled(self):
        """min > max does not matter while autoscaling is off."""
        descriptor, _ = normalize(base(enableHPA=False, hpaMinReplicas=5, hpaMaxReplicas=2))
        assert descriptor.enable_hpa is False

    def test_hpa_defaults(self):
        descriptor, _ = normalize(base(enableHPA="true"))
        assert descriptor.enable_hpa is True
        assert descriptor.hpa_min_replicas == 1
        assert descriptor.hpa_max_replicas == 5
        assert "hpa" in descriptor.extra_k8s_resources

    def test_all_issues_reported_together(self):
        """Every validation problem is listed in one error."""
        with pytest.raises(ValidationError) as exc_info:
            normalize({"applicationName": "", "port": 0, "replicas": -1})
        assert len(exc_info.value.issues) == 3


class TestVersions:
    """Test toolchain version fallbacks."""

    def test_absent_versions_fall_back(self):
        descriptor, warnings = normalize(base())
        assert descriptor.java_version == "21"
        assert descriptor.gradle_version == "8.9"
        assert {"java_version", "gradle_version"} <= descriptor.defaulted
        assert any("javaVersion" in w for w in warnings)

    def test_unrecognized_versions_fall_back_without_error(self):
        descriptor, warnings = normalize(base(javaVersion="latest", gradleVersion="eight"))
        assert descriptor.java_version == "21"
        assert descriptor.gradle_version == "8.9"
        assert any("Unrecognized javaVersion" in w for w in warnings)

    def test_valid_versions_kept(self):
        descriptor, _ = normalize(base(javaVersion="17", gradleVersion="8.5"))
        assert descriptor.java_version == "17"
        assert descriptor.gradle_version == "8.5"
        assert "java_version" not in descriptor.defaulted

    def test_numeric_java_version(self):
        descriptor, _ = normalize(base(javaVersion=17))
        assert descriptor.java_version == "17"


class TestResources:
    """Test the resource quartet defaults."""

    def test_all_absent(self):
        descriptor, _ = normalize(base())
        assert {
            "cpuRequest": descriptor.cpu_request,
            "memoryRequest": descriptor.memory_request,
            "cpuLimit": descriptor.cpu_limit,
            "memoryLimit": descriptor.memory_limit,
        } == {"cpuRequest": "250m", "memoryRequest": "512Mi", "cpuLimit": "500m", "memoryLimit": "1Gi"}

    def test_partial_override(self):
        """Only the missing members are defaulted."""
        descriptor, _ = normalize(base(cpuRequest="100m", memoryLimit="2Gi"))
        assert descriptor.cpu_request == "100m"
        assert descriptor.memory_request == "512Mi"
        assert descriptor.cpu_limit == "500m"
        assert descriptor.memory_limit == "2Gi"
        assert "cpu_request" not in descriptor.defaulted
        assert "memory_request" in descriptor.defaulted

    def test_garbage_quantity_defaulted(self):
        descriptor, warnings = normalize(base(cpuLimit="lots"))
        assert descriptor.cpu_limit == "500m"
        assert any("cpu_limit" in w for w in warnings)


class TestSecrets:
    """Test secret materialization."""

    def test_null_secret_generated(self):
        descriptor, _ = normalize(base(secrets={"db": None, "api": "given"}))
        value = descriptor.secrets["db"]
        assert value is not None
        assert len(value) >= 32
        assert "\n" not in value
        assert descriptor.secrets["api"] == "given"

    def test_generated_values_differ_between_runs(self):
        first, _ = normalize(base(secrets={"db": None}))
        second, _ = normalize(base(secrets={"db": None}))
        assert first.secrets["db"] != second.secrets["db"]

    def test_uses_secrets_module(self):
        """Values come from the secrets CSPRNG."""
        with patch("k8gen.descriptor.normalize.secrets.token_urlsafe", return_value="x" * 43) as token:
            descriptor, _ = normalize(base(secrets={"db": None}, includeDatabase=False))
        token.assert_called_once_with(32)
        assert descriptor.secrets["db"] == "x" * 43

    def test_validation_runs_before_generation(self):
        """An invalid port aborts before any secret is generated."""
        with patch("k8gen.descriptor.normalize.generate_secret_value") as gen:
            with pytest.raises(ValidationError, match="port"):
                normalize({"applicationName": "My App!", "port": 9999999, "secrets": {"db": None}})
        gen.assert_not_called()

    def test_input_not_mutated(self):
        doc = base(secrets={"db": None})
        normalize(doc)
        assert doc["secrets"] == {"db": None}


class TestDatabaseAndImage:
    """Test persistence and image defaults."""

    def test_database_defaults(self):
        descriptor, _ = normalize(base())
        assert descriptor.include_database is True
        assert descriptor.database_image == DEFAULT_DATABASE_IMAGE
        assert descriptor.db_name == "my-app-db"
        assert descriptor.db_password

    def test_database_disabled(self):
        descriptor, _ = normalize(base(includeDatabase=False))
        assert descriptor.include_database is False
        assert descriptor.db_password is None
        assert descriptor.database_image is None

    def test_image_tag_placeholder(self):
        descriptor, _ = normalize(base())
        assert descriptor.image_tag == IMAGE_TAG_PLACEHOLDER

    def test_namespace_default_and_cleanup(self):
        descriptor, _ = normalize(base())
        assert descriptor.namespace == "my-app"
        descriptor, _ = normalize(base(namespace="Team_A"))
        assert descriptor.namespace == "team-a"


class TestExtras:
    """Test auxiliary resources, sidecars and migrations."""

    def test_resource_tokens_canonicalized(self):
        descriptor, warnings = normalize(base(extraK8sResources=["PDB", "NetworkPolicy", "pdb", "custom-thing"]))
        assert descriptor.extra_k8s_resources == ["pdb", "networkpolicy", "custom-thing"]
        assert any("custom-thing" in w for w in warnings)

    def test_sidecar_ports_validated(self):
        with pytest.raises(ValidationError, match="redis"):
            normalize(base(additionalDockerImages=[{"name": "redis", "image": "redis:7", "ports": ["99999"]}]))

    def test_sidecar_without_image_dropped(self):
        descriptor, warnings = normalize(base(additionalDockerImages=[
            {"name": "ghost"},
            {"image": "docker.io/library/redis:7", "ports": [6379]},
        ]))
        assert len(descriptor.additional_docker_images) == 1
        assert descriptor.additional_docker_images[0].name == "redis"
        assert descriptor.additional_docker_images[0].ports == ["6379"]

    def test_migrations_kept(self):
        descriptor, _ = normalize(base(migrations={"tool": "flyway", "image": "flyway/flyway:10", "args": ["migrate"]}))
        assert descriptor.migrations.tool == "flyway"
        assert descriptor.migrations.args == ["migrate"]


class TestIdempotence:
    """Test that normalizing twice changes nothing."""

    def test_normalize_twice(self):
        first, _ = normalize(base(applicationName="Shop API", secrets={"db": None, "jwt": None},
                                  cpuRequest="100m", extraK8sResources=["hpa"], enableHPA=True))
        second, _ = normalize(first)
        assert second.to_dict() == first.to_dict()
        assert second.defaulted == first.defaulted

    def test_normalize_twice_from_document(self):
        first, _ = normalize(base(secrets={"db": None}))
        second, _ = normalize(first.to_dict())
        assert second.secrets == first.secrets
        assert second.db_password == first.db_password

    def test_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            normalize(["not", "a", "mapping"])

    def test_descriptor_input(self):
        descriptor = DeploymentDescriptor(application_name="x", port=80)
        normalized, _ = normalize(descriptor)
        assert normalized.port == 80
        assert descriptor.replicas is None
