"""
Kubecraft - A Python library for building Kubernetes manifests and Helm charts
and serializing them to YAML.
"""

from kubecraft.serializer import ABSENT, to_yaml, to_multi_doc_yaml
from kubecraft.rendering import (
    TemplateContext,
    render_template,
    deployment_template,
    service_template,
    ingress_template,
)
from kubecraft.validation import ValidationResult, check_manifest, validate_manifest
from kubecraft.schemas import parse_manifest, schema_errors, to_manifest
from kubecraft.template import Template
from kubecraft.chart import HelmChart
from kubecraft.kubernetes import KubernetesResource
from kubecraft.register import TemplateRegistry
from kubecraft.config import Config, config

__all__ = [
    "ABSENT",
    "to_yaml",
    "to_multi_doc_yaml",
    "TemplateContext",
    "render_template",
    "deployment_template",
    "service_template",
    "ingress_template",
    "ValidationResult",
    "validate_manifest",
    "check_manifest",
    "parse_manifest",
    "schema_errors",
    "to_manifest",
    "Template",
    "HelmChart",
    "KubernetesResource",
    "TemplateRegistry",
    "Config",
    "config",
]

__version__ = "0.1.0"
