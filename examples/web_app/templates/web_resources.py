"""
Raw Kubernetes resources for the web application.
"""

from kubecraft import KubernetesResource, TemplateRegistry
from kubecraft.health import get_resource_profile, liveness_probe, readiness_probe
from kubecraft.labels import merge_labels, standard_labels


@TemplateRegistry.register
class WebResources(KubernetesResource):
    """
    Deployment, Service, Ingress and autoscaler for the web frontend.
    """

    def __init__(self):
        super().__init__()
        self.name = "web-resources"
        self.namespace = "web"

        labels = merge_labels(
            standard_labels("web", "web-prod", version="1.4.0", component="frontend"),
            {"tier": "frontend"},
        )

        self.add_namespace(labels={"team": "platform"})

        self.add_config_map(
            name="web-config",
            data={"LOG_LEVEL": "info", "API_URL": "http://api.web.svc:8080"},
        )

        self.add_deployment(
            name="web",
            image="ghcr.io/example/web:1.4.0",
            replicas=2,
            port=8080,
            labels=labels,
            env=[
                {
                    "name": "LOG_LEVEL",
                    "valueFrom": {"configMapKeyRef": {"name": "web-config", "key": "LOG_LEVEL"}},
                }
            ],
            resources=get_resource_profile("medium"),
            liveness_probe=liveness_probe(8080),
            readiness_probe=readiness_probe(8080),
        )

        self.add_service(name="web", port=80, target_port=8080)

        self.add_ingress(
            name="web",
            host="web.example.com",
            service_name="web",
            service_port=80,
            ingress_class_name="nginx",
            tls=True,
        )

        self.add_hpa(
            name="web",
            target_deployment="web",
            min_replicas=2,
            max_replicas=8,
            cpu_utilization=70,
        )
