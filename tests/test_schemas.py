"""Unit tests for the resource and chart schemas."""

import pytest
from pydantic import ValidationError

from kubecraft import health, helm, manifests
from kubecraft.schemas import (
    ChartMetadata,
    ConfigMap,
    Container,
    ContainerPort,
    Deployment,
    EnvVar,
    HelmValues,
    HorizontalPodAutoscaler,
    Ingress,
    Metadata,
    Namespace,
    Probe,
    ResourceRequirements,
    Secret,
    Service,
    Volume,
    VolumeMount,
    parse_manifest,
    schema_errors,
    to_manifest,
)

WEB_BACKEND = {"service": {"name": "web", "port": {"number": 80}}}


class TestMetadata:
    """Test the metadata schema."""

    def test_valid_metadata(self):
        """Test metadata with a namespace and labels."""
        metadata = Metadata.model_validate(
            {"name": "my-app", "namespace": "default", "labels": {"app": "my-app"}}
        )
        assert metadata.name == "my-app"
        assert metadata.labels == {"app": "my-app"}

    def test_requires_name(self):
        """Test that the name is required."""
        with pytest.raises(ValidationError):
            Metadata.model_validate({})

    def test_rejects_empty_name(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            Metadata.model_validate({"name": ""})

    def test_namespace_is_optional(self):
        """Test metadata without a namespace."""
        assert Metadata.model_validate({"name": "test"}).namespace is None

    def test_rejects_long_namespace(self):
        """Test that namespaces are limited to 63 characters."""
        with pytest.raises(ValidationError):
            Metadata.model_validate({"name": "test", "namespace": "x" * 64})


class TestContainerPieces:
    """Test ports, env vars, resources and volumes."""

    def test_valid_port(self):
        """Test a port in range."""
        assert ContainerPort.model_validate({"containerPort": 8080}).container_port == 8080

    def test_rejects_out_of_range_port(self):
        """Test that ports above 65535 are rejected."""
        with pytest.raises(ValidationError):
            ContainerPort.model_validate({"containerPort": 70000})

    def test_protocol_defaults_to_tcp(self):
        """Test the protocol default."""
        assert ContainerPort.model_validate({"containerPort": 80}).protocol == "TCP"

    def test_rejects_unknown_protocol(self):
        """Test that the protocol is one of TCP, UDP or SCTP."""
        with pytest.raises(ValidationError):
            ContainerPort.model_validate({"containerPort": 80, "protocol": "HTTP"})

    def test_env_var_from_config_map(self):
        """Test an env var read from a ConfigMap key."""
        env = EnvVar.model_validate(
            {"name": "DB_HOST", "valueFrom": {"configMapKeyRef": {"name": "db", "key": "host"}}}
        )
        assert env.value_from.config_map_key_ref.key == "host"

    def test_env_var_from_secret(self):
        """Test an env var read from a Secret key."""
        env = EnvVar.model_validate(
            {"name": "DB_PASSWORD", "valueFrom": {"secretKeyRef": {"name": "db", "key": "pw"}}}
        )
        assert env.value_from.secret_key_ref.name == "db"

    def test_resources(self):
        """Test requests and limits, and the empty requirements."""
        resources = ResourceRequirements.model_validate(health.medium_resources())
        assert resources.limits.memory is not None
        assert ResourceRequirements.model_validate({}).requests is None

    def test_ephemeral_storage_alias(self):
        """Test the hyphenated ephemeral-storage key."""
        resources = ResourceRequirements.model_validate(
            {"limits": {"ephemeral-storage": "1Gi"}}
        )
        assert resources.limits.ephemeral_storage == "1Gi"
        assert to_manifest(resources) == {"limits": {"ephemeral-storage": "1Gi"}}

    def test_volume_mount_defaults(self):
        """Test that mounts are read-write by default."""
        mount = VolumeMount.model_validate({"name": "config", "mountPath": "/etc/config"})
        assert mount.read_only is False

    def test_volumes(self):
        """Test ConfigMap and emptyDir volumes."""
        assert Volume.model_validate({"name": "cfg", "configMap": {"name": "c"}}).config_map
        assert Volume.model_validate({"name": "tmp", "emptyDir": {}}).empty_dir is not None


class TestProbe:
    """Test the probe schema."""

    def test_http_probe_defaults(self):
        """Test an HTTP probe gets the API server's timing defaults."""
        probe = Probe.model_validate({"httpGet": {"path": "/healthz", "port": 8080}})
        assert probe.http_get.scheme == "HTTP"
        assert probe.initial_delay_seconds == 0
        assert probe.period_seconds == 10
        assert probe.timeout_seconds == 1
        assert probe.success_threshold == 1
        assert probe.failure_threshold == 3

    def test_tcp_and_exec_probes(self):
        """Test TCP socket and exec probes."""
        assert Probe.model_validate(health.tcp_probe(3306, period_seconds=15)).tcp_socket
        assert Probe.model_validate(health.exec_probe(["cat", "/tmp/healthy"])).exec

    def test_named_port(self):
        """Test that probe ports may be port names."""
        assert Probe.model_validate({"httpGet": {"port": "http"}}).http_get.port == "http"

    def test_rejects_zero_period(self):
        """Test that periodSeconds must be at least 1."""
        with pytest.raises(ValidationError):
            Probe.model_validate({"tcpSocket": {"port": 80}, "periodSeconds": 0})

    def test_rejects_empty_exec_command(self):
        """Test that exec probes need a command."""
        with pytest.raises(ValidationError):
            Probe.model_validate({"exec": {"command": []}})


class TestContainer:
    """Test the container schema."""

    def test_minimal_container(self):
        """Test a container with only a name and an image."""
        container = Container.model_validate({"name": "app", "image": "nginx:latest"})
        assert container.image_pull_policy == "IfNotPresent"

    def test_full_container(self):
        """Test a container with ports, env, resources and probes."""
        container = Container.model_validate(
            {
                "name": "app",
                "image": "node:20",
                "ports": [{"containerPort": 3000}],
                "env": [{"name": "NODE_ENV", "value": "production"}],
                "resources": health.small_resources(),
                "livenessProbe": health.liveness_probe(3000),
                "readinessProbe": health.readiness_probe(3000),
            }
        )
        assert container.ports[0].container_port == 3000
        assert container.liveness_probe.http_get.path == "/healthz"

    def test_rejects_empty_image(self):
        """Test that the image must not be empty."""
        with pytest.raises(ValidationError):
            Container.model_validate({"name": "app", "image": ""})


class TestResourceSchemas:
    """Test the schemas for each resource kind."""

    def test_deployment_defaults(self):
        """Test the defaults filled into a minimal Deployment."""
        deployment = Deployment.model_validate(
            {
                "metadata": {"name": "my-app"},
                "spec": {
                    "selector": {"matchLabels": {"app": "my-app"}},
                    "template": {"spec": {"containers": [{"name": "app", "image": "nginx"}]}},
                },
            }
        )
        assert deployment.api_version == "apps/v1"
        assert deployment.kind == "Deployment"
        assert deployment.spec.replicas == 1
        assert deployment.spec.revision_history_limit == 10
        assert deployment.spec.template.spec.restart_policy == "Always"

    def test_deployment_requires_a_container(self):
        """Test that a pod template without containers is rejected."""
        with pytest.raises(ValidationError):
            Deployment.model_validate(
                {
                    "metadata": {"name": "my-app"},
                    "spec": {
                        "selector": {"matchLabels": {"app": "my-app"}},
                        "template": {"spec": {"containers": []}},
                    },
                }
            )

    def test_deployment_rejects_negative_replicas(self):
        """Test that replicas must be >= 0."""
        deployment = manifests.create_deployment("web", "nginx")
        deployment["spec"]["replicas"] = -1
        with pytest.raises(ValidationError):
            Deployment.model_validate(deployment)

    def test_service_defaults(self):
        """Test the Service type and session affinity defaults."""
        service = Service.model_validate(
            {
                "metadata": {"name": "my-svc"},
                "spec": {
                    "selector": {"app": "my-app"},
                    "ports": [{"port": 80, "targetPort": 3000}],
                },
            }
        )
        assert service.spec.type == "ClusterIP"
        assert service.spec.session_affinity == "None"

    def test_service_rejects_node_port_out_of_range(self):
        """Test that node ports must be in 30000-32767."""
        service = manifests.create_service("web", 80, service_type="NodePort")
        service["spec"]["ports"][0]["nodePort"] = 8080
        with pytest.raises(ValidationError):
            Service.model_validate(service)

    def test_service_cluster_ip_alias(self):
        """Test the clusterIP key."""
        service = manifests.create_service("web", 80)
        service["spec"]["clusterIP"] = "None"
        assert Service.model_validate(service).spec.cluster_ip == "None"

    def test_config_map(self):
        """Test a ConfigMap gets its apiVersion and kind."""
        config_map = ConfigMap.model_validate(
            {"metadata": {"name": "my-config"}, "data": {"key": "value"}}
        )
        assert config_map.kind == "ConfigMap"
        assert config_map.api_version == "v1"

    def test_secret_type_default(self):
        """Test that Secrets default to Opaque."""
        secret = Secret.model_validate(
            {"metadata": {"name": "my-secret"}, "stringData": {"password": "hunter2"}}
        )
        assert secret.type == "Opaque"

    def test_ingress(self):
        """Test an Ingress gets its apiVersion and path defaults."""
        ingress = Ingress.model_validate(
            {
                "metadata": {"name": "my-ingress"},
                "spec": {
                    "rules": [
                        {
                            "host": "example.com",
                            "http": {
                                "paths": [
                                    {"backend": WEB_BACKEND},
                                ]
                            },
                        }
                    ]
                },
            }
        )
        assert ingress.api_version == "networking.k8s.io/v1"
        path = ingress.spec.rules[0].http.paths[0]
        assert path.path == "/"
        assert path.path_type == "Prefix"

    def test_namespace(self):
        """Test a Namespace gets its kind."""
        assert Namespace.model_validate({"metadata": {"name": "my-ns"}}).kind == "Namespace"

    def test_hpa(self):
        """Test an HPA with a CPU utilization metric."""
        hpa = HorizontalPodAutoscaler.model_validate(
            {
                "metadata": {"name": "my-hpa"},
                "spec": {
                    "scaleTargetRef": {"name": "my-app"},
                    "maxReplicas": 10,
                    "metrics": [
                        {
                            "type": "Resource",
                            "resource": {
                                "name": "cpu",
                                "target": {"type": "Utilization", "averageUtilization": 80},
                            },
                        }
                    ],
                },
            }
        )
        assert hpa.spec.min_replicas == 1
        assert hpa.spec.scale_target_ref.kind == "Deployment"
        assert hpa.spec.metrics[0].resource.target.average_utilization == 80

    def test_rejects_wrong_kind(self):
        """Test that a model only accepts its own kind."""
        with pytest.raises(ValidationError):
            Service.model_validate({"kind": "Deployment", "metadata": {"name": "x"}})


class TestHelmSchemas:
    """Test the Chart.yaml and values.yaml schemas."""

    def test_chart_defaults(self):
        """Test the defaults filled into a minimal chart."""
        chart = ChartMetadata.model_validate({"name": "my-chart"})
        assert chart.api_version == "v2"
        assert chart.version == "0.1.0"
        assert chart.app_version == "1.0.0"
        assert chart.type == "application"

    def test_chart_builder_output(self):
        """Test that create_chart output with a maintainer is accepted."""
        chart = helm.add_maintainer(
            helm.create_chart("web", description="Web app"), "ops", email="ops@example.com"
        )
        assert ChartMetadata.model_validate(chart).maintainers[0].email == "ops@example.com"

    def test_chart_rejects_bad_email(self):
        """Test that maintainer emails are checked."""
        chart = helm.add_maintainer(helm.create_chart("web"), "ops", email="not-an-email")
        with pytest.raises(ValidationError):
            ChartMetadata.model_validate(chart)

    def test_chart_rejects_bad_home(self):
        """Test that the home URL is checked."""
        with pytest.raises(ValidationError):
            ChartMetadata.model_validate({"name": "web", "home": "not a url"})

    def test_values_defaults(self):
        """Test the defaults filled into minimal values."""
        values = HelmValues.model_validate(
            {"image": {"repository": "nginx"}, "service": {}, "ingress": {}}
        )
        assert values.replica_count == 1
        assert values.image.tag == "latest"
        assert values.image.pull_policy == "IfNotPresent"
        assert values.service.port == 80
        assert values.ingress.enabled is False
        assert values.ingress.hosts == []

    def test_values_builder_output(self):
        """Test that create_values output is accepted."""
        values = HelmValues.model_validate(
            helm.create_values(
                "nginx", ingress_enabled=True, ingress_host="example.com", autoscaling_cpu=70
            )
        )
        assert values.ingress.hosts[0].host == "example.com"
        assert values.autoscaling.target_cpu_utilization_percentage == 70


class TestParseManifest:
    """Test kind dispatch."""

    def test_parse_by_kind(self):
        """Test that the schema is picked from the manifest's kind."""
        parsed = parse_manifest(manifests.create_service("web", 80))
        assert isinstance(parsed, Service)

    def test_unknown_kind(self):
        """Test that kinds without a schema raise ValueError."""
        with pytest.raises(ValueError, match="No schema for kind: Widget"):
            parse_manifest({"kind": "Widget", "metadata": {"name": "w"}})

    def test_builder_output_has_no_schema_errors(self):
        """Test every builder's output against its schema."""
        built = [
            manifests.create_namespace("apps"),
            manifests.create_deployment(
                "web",
                "nginx",
                port=80,
                env=[{"name": "MODE", "value": "prod"}],
                resources=health.medium_resources(),
                liveness_probe=health.liveness_probe(80),
                readiness_probe=health.readiness_probe(80),
            ),
            manifests.create_service("web", 80),
            manifests.create_config_map("cfg", data={"a": "1"}),
            manifests.create_secret("creds", string_data={"password": "x"}),
            manifests.create_ingress("web", "example.com", "web", 80, tls=True),
            manifests.create_hpa("web", "web", 5, cpu_utilization=70),
        ]
        for manifest in built:
            assert schema_errors(manifest) == [], manifest["kind"]

    def test_schema_errors_use_field_paths(self):
        """Test that errors name the offending field."""
        deployment = manifests.create_deployment("web", "nginx", port=80)
        deployment["spec"]["template"]["spec"]["containers"][0]["ports"][0]["containerPort"] = 0
        errors = schema_errors(deployment)
        assert len(errors) == 1
        assert errors[0].startswith("spec.template.spec.containers.0.ports.0.containerPort: ")

    def test_unknown_kind_has_no_schema_errors(self):
        """Test that kinds without a schema are not checked."""
        assert schema_errors({"kind": "Widget"}) == []

    def test_to_manifest_round_trip(self):
        """Test dumping a parsed manifest back to its Kubernetes form."""
        service = manifests.create_service("web", 80)
        dumped = to_manifest(parse_manifest(service))
        assert dumped["spec"]["ports"][0]["targetPort"] == 80
        assert dumped["spec"]["sessionAffinity"] == "None"
        assert dumped["metadata"] == service["metadata"]
