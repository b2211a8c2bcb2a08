"""
Helm chart packaging the web application.
"""

from kubecraft import HelmChart, TemplateRegistry
from kubecraft.health import get_resource_profile
from kubecraft.helm import add_maintainer, create_values
from kubecraft.rendering import ingress_template


@TemplateRegistry.register
class WebChart(HelmChart):
    """Chart with Deployment, Service and Ingress templates."""

    @property
    def name(self) -> str:
        return "web-chart"

    @property
    def namespace(self) -> str:
        return "web"

    @property
    def version(self) -> str:
        return "0.3.0"

    @property
    def app_version(self) -> str:
        return "1.4.0"

    @property
    def description(self) -> str:
        return "Web frontend"

    def chart_metadata(self) -> dict:
        return add_maintainer(super().chart_metadata(), "platform", email="platform@example.com")

    def templates(self) -> dict[str, str]:
        return {**super().templates(), "ingress.yaml": ingress_template()}

    def generate_values(self) -> dict:
        values = create_values(
            "ghcr.io/example/web",
            image_tag="1.4.0",
            replica_count=2,
            service_port=8080,
            ingress_enabled=True,
            ingress_host="web.example.com",
            ingress_class_name="nginx",
            resources=get_resource_profile("small"),
        )
        # The built-in ingress template reads a single host
        values["ingress"]["host"] = "web.example.com"
        return values
