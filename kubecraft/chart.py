from abc import abstractmethod
from typing import Optional

from pydantic import ValidationError

from kubecraft.config import Config
from kubecraft.helm import create_chart
from kubecraft.output import get_output
from kubecraft.rendering import (
    TemplateContext,
    deployment_template,
    render_template,
    service_template,
)
from kubecraft.schemas import ChartMetadata, format_errors
from kubecraft.serializer import to_yaml
from kubecraft.template import Template
from kubecraft.validation import ValidationResult


class HelmChart(Template):
    """
    A Helm chart generated from Python.

    Subclasses provide the chart name, namespace, version and values;
    templates default to the built-in Deployment and Service templates.
    render() writes the chart files and a rendered preview of every template.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the chart"""
        pass

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Return the namespace the chart is previewed for"""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the chart version"""
        pass

    @property
    def app_version(self) -> str:
        """Return the version of the packaged application"""
        return "1.0.0"

    @property
    def description(self) -> Optional[str]:
        """Return the chart description, or None to omit it"""
        return None

    @abstractmethod
    def generate_values(self) -> dict:
        """Generate the values.yaml content for this chart"""
        pass

    def chart_metadata(self) -> dict:
        """
        Return the Chart.yaml content.

        Override to add keywords, maintainers or dependencies
        (see kubecraft.helm).
        """
        return create_chart(
            self.name,
            version=self.version,
            app_version=self.app_version,
            description=self.description,
        )

    def templates(self) -> dict[str, str]:
        """Return template file names mapped to template text"""
        return {
            "deployment.yaml": deployment_template(),
            "service.yaml": service_template(),
        }

    def to_chart_yaml(self) -> str:
        """Convert the chart metadata to YAML format"""
        return to_yaml(self.chart_metadata())

    def to_values_yaml(self) -> str:
        """Convert the values dict to YAML format"""
        return to_yaml(self.generate_values())

    def template_context(self, release_name: Optional[str] = None) -> TemplateContext:
        """
        Build the context templates are previewed with.

        The release name comes from the argument, then KUBECRAFT_RELEASE_NAME,
        then the chart name.
        """
        return TemplateContext(
            values=self.generate_values(),
            release_name=release_name or Config.release_name() or self.name,
            chart_name=self.name,
            namespace=self.namespace,
            chart_version=self.version,
        )

    def preview(self, release_name: Optional[str] = None) -> dict[str, str]:
        """
        Render every template against this chart's values.

        Returns:
            Template file names mapped to rendered text
        """
        context = self.template_context(release_name)
        return {
            file_name: render_template(template, context)
            for file_name, template in self.templates().items()
        }

    def validate(self) -> ValidationResult:
        """Check chart_metadata() against the Chart.yaml schema."""
        try:
            ChartMetadata.model_validate(self.chart_metadata())
        except ValidationError as e:
            return ValidationResult.from_messages(format_errors(e), [])
        return ValidationResult()

    def render(self) -> None:
        """
        Write Chart.yaml, values.yaml and templates/ under <manifests_dir>/<name>/,
        plus preview.yaml holding every rendered template.
        """
        output = get_output()
        output_dir = self.output_dir()
        output.verbose(f"Rendering helm chart {self.name} to {output_dir}")

        output.validation(f"{self.name} Chart.yaml", self.validate())
        self._write_yaml(output_dir / "Chart.yaml", self.to_chart_yaml())
        self._write_yaml(output_dir / "values.yaml", self.to_values_yaml())

        templates_dir = output_dir / "templates"
        for file_name, template in self.templates().items():
            output.verbose(f"Writing template {templates_dir / file_name}")
            self._write_yaml(templates_dir / file_name, template)

        if Config.write_previews():
            rendered = self.preview()
            preview = "\n".join(f"---\n{text}" for text in rendered.values())
            output.verbose(f"Writing preview {output_dir / 'preview.yaml'}")
            self._write_yaml(output_dir / "preview.yaml", preview)
