"""Unit tests for Helm chart and values builders."""

from kubecraft import helm


class TestChart:
    """Test Chart.yaml builders."""

    def test_create_chart_defaults(self):
        """Test the defaults of a minimal chart."""
        chart = helm.create_chart("web")
        assert chart == {
            "apiVersion": "v2",
            "name": "web",
            "version": "0.1.0",
            "appVersion": "1.0.0",
            "type": "application",
        }

    def test_create_chart_full(self):
        """Test a chart with every optional field."""
        chart = helm.create_chart(
            "web",
            version="1.2.0",
            app_version="2.0.0",
            description="Web app",
            chart_type="library",
            keywords=["web"],
            home="https://example.com",
            sources=["https://github.com/example/web"],
            maintainers=[{"name": "ops"}],
            dependencies=[{"name": "redis", "version": "17.0.0"}],
        )
        assert chart["version"] == "1.2.0"
        assert chart["appVersion"] == "2.0.0"
        assert chart["description"] == "Web app"
        assert chart["type"] == "library"
        assert chart["keywords"] == ["web"]
        assert chart["home"] == "https://example.com"
        assert chart["sources"] == ["https://github.com/example/web"]
        assert chart["maintainers"] == [{"name": "ops"}]
        assert chart["dependencies"] == [{"name": "redis", "version": "17.0.0"}]

    def test_add_dependency(self):
        """Test appending a dependency on a copy."""
        chart = helm.create_chart("web")
        updated = helm.add_dependency(
            chart,
            "redis",
            "17.0.0",
            repository="https://charts.bitnami.com/bitnami",
            condition="redis.enabled",
        )
        assert updated["dependencies"] == [
            {
                "name": "redis",
                "version": "17.0.0",
                "repository": "https://charts.bitnami.com/bitnami",
                "condition": "redis.enabled",
            }
        ]
        assert "dependencies" not in chart

    def test_versions(self):
        """Test setting chart and app versions."""
        chart = helm.create_chart("web")
        assert helm.set_chart_version(chart, "2.0.0")["version"] == "2.0.0"
        assert helm.set_app_version(chart, "3.1.4")["appVersion"] == "3.1.4"
        assert chart["version"] == "0.1.0"

    def test_add_maintainer(self):
        """Test appending maintainers."""
        chart = helm.add_maintainer(helm.create_chart("web"), "alice", email="a@example.com")
        chart = helm.add_maintainer(chart, "bob", url="https://bob.dev")
        assert chart["maintainers"] == [
            {"name": "alice", "email": "a@example.com"},
            {"name": "bob", "url": "https://bob.dev"},
        ]


class TestValues:
    """Test values.yaml builders."""

    def test_create_values_defaults(self):
        """Test the default values layout."""
        values = helm.create_values("nginx")
        assert values == {
            "replicaCount": 1,
            "image": {"repository": "nginx", "tag": "latest", "pullPolicy": "IfNotPresent"},
            "service": {"type": "ClusterIP", "port": 80},
            "ingress": {"enabled": False, "hosts": [], "tls": []},
            "autoscaling": {"enabled": False, "minReplicas": 1, "maxReplicas": 10},
        }

    def test_create_values_with_ingress_and_autoscaling(self):
        """Test ingress hosts and autoscaling targets."""
        values = helm.create_values(
            "nginx",
            ingress_enabled=True,
            ingress_host="example.com",
            ingress_class_name="nginx",
            autoscaling_enabled=True,
            autoscaling_cpu=70,
            autoscaling_memory=80,
            resources={"limits": {"cpu": "1"}},
            node_selector={"pool": "web"},
        )
        assert values["ingress"] == {
            "enabled": True,
            "className": "nginx",
            "hosts": [{"host": "example.com", "paths": [{"path": "/", "pathType": "Prefix"}]}],
            "tls": [],
        }
        assert values["autoscaling"]["targetCPUUtilizationPercentage"] == 70
        assert values["autoscaling"]["targetMemoryUtilizationPercentage"] == 80
        assert values["resources"] == {"limits": {"cpu": "1"}}
        assert values["nodeSelector"] == {"pool": "web"}

    def test_set_image(self):
        """Test that set_image keeps the tag unless given."""
        values = helm.create_values("nginx", image_tag="1.25")
        assert helm.set_image(values, "httpd")["image"]["tag"] == "1.25"
        assert helm.set_image(values, "httpd", tag="2.4")["image"] == {
            "repository": "httpd",
            "tag": "2.4",
            "pullPolicy": "IfNotPresent",
        }
        assert values["image"]["repository"] == "nginx"

    def test_set_value_resources(self):
        """Test setting resources."""
        values = helm.set_value_resources(helm.create_values("nginx"), {"requests": {}})
        assert values["resources"] == {"requests": {}}

    def test_set_autoscaling(self):
        """Test enabling autoscaling keeps unspecified settings."""
        values = helm.create_values("nginx", autoscaling_max_replicas=5, autoscaling_cpu=60)
        updated = helm.set_autoscaling(values, True, min_replicas=2)

        assert updated["autoscaling"] == {
            "enabled": True,
            "minReplicas": 2,
            "maxReplicas": 5,
            "targetCPUUtilizationPercentage": 60,
        }
        assert values["autoscaling"]["enabled"] is False

    def test_set_autoscaling_without_section(self):
        """Test the fallback replica range."""
        updated = helm.set_autoscaling({}, True, memory=75)
        assert updated["autoscaling"] == {
            "enabled": True,
            "minReplicas": 1,
            "maxReplicas": 10,
            "targetMemoryUtilizationPercentage": 75,
        }

    def test_set_ingress(self):
        """Test enabling ingress for a host."""
        values = helm.set_ingress(helm.create_values("nginx"), "example.com", class_name="nginx")
        assert values["ingress"]["enabled"] is True
        assert values["ingress"]["className"] == "nginx"
        assert values["ingress"]["hosts"][0]["host"] == "example.com"

    def test_merge_values(self):
        """Test that sections merge key by key while other keys are replaced."""
        base = helm.create_values("nginx", image_tag="1.0")
        merged = helm.merge_values(
            base,
            {
                "replicaCount": 3,
                "image": {"tag": "2.0"},
                "service": {"port": 8080},
                "autoscaling": {"enabled": True},
            },
        )
        assert merged["replicaCount"] == 3
        assert merged["image"] == {
            "repository": "nginx",
            "tag": "2.0",
            "pullPolicy": "IfNotPresent",
        }
        assert merged["service"] == {"type": "ClusterIP", "port": 8080}
        assert merged["autoscaling"]["enabled"] is True
        assert merged["autoscaling"]["maxReplicas"] == 10
        assert base["image"]["tag"] == "1.0"

    def test_merge_values_returns_independent_copy(self):
        """Test that the merged values share nothing with the inputs."""
        base = {"nodeSelector": {"pool": "a"}}
        merged = helm.merge_values(base, {})
        merged["nodeSelector"]["pool"] = "b"
        assert base["nodeSelector"]["pool"] == "a"
        assert "autoscaling" not in merged
