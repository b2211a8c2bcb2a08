"""
Helm-style template rendering.

Supports the placeholders a generated chart needs for previews:
``{{ .Values.path.to.key }}``, ``{{ .Release.Name }}``,
``{{ .Release.Namespace }}``, ``{{ .Chart.Name }}`` and
``{{ .Chart.Version }}``. There is no control flow, no pipelines and no
partials; anything else inside ``{{ }}`` is left untouched.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from kubecraft.serializer import ABSENT, format_number

logger = logging.getLogger(__name__)

DEFAULT_RELEASE_NAME = "release"
DEFAULT_CHART_NAME = "chart"
DEFAULT_NAMESPACE = "default"
DEFAULT_CHART_VERSION = "0.1.0"

VALUES_PATTERN = re.compile(r"\{\{\s*\.Values\.(\w+(?:\.\w+)*)\s*\}\}", re.ASCII)
RELEASE_NAME_PATTERN = re.compile(r"\{\{\s*\.Release\.Name\s*\}\}")
CHART_NAME_PATTERN = re.compile(r"\{\{\s*\.Chart\.Name\s*\}\}")
RELEASE_NAMESPACE_PATTERN = re.compile(r"\{\{\s*\.Release\.Namespace\s*\}\}")
CHART_VERSION_PATTERN = re.compile(r"\{\{\s*\.Chart\.Version\s*\}\}")

_MISSING = object()


@dataclass
class TemplateContext:
    """Values and release/chart metadata a template is rendered against."""

    values: Mapping = field(default_factory=dict)
    release_name: Optional[str] = None
    chart_name: Optional[str] = None
    namespace: Optional[str] = None
    chart_version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "TemplateContext":
        """
        Build a context from a camelCase dictionary.

        Accepts the keys ``values``, ``releaseName``, ``chartName``,
        ``namespace`` and ``chartVersion``; missing keys use the defaults.
        """
        return cls(
            values=data.get("values") or {},
            release_name=data.get("releaseName"),
            chart_name=data.get("chartName"),
            namespace=data.get("namespace"),
            chart_version=data.get("chartVersion"),
        )

    def resolved_release_name(self) -> str:
        return self.release_name if self.release_name is not None else DEFAULT_RELEASE_NAME

    def resolved_chart_name(self) -> str:
        return self.chart_name if self.chart_name is not None else DEFAULT_CHART_NAME

    def resolved_namespace(self) -> str:
        return self.namespace if self.namespace is not None else DEFAULT_NAMESPACE

    def resolved_chart_version(self) -> str:
        return self.chart_version if self.chart_version is not None else DEFAULT_CHART_VERSION


def lookup_value(values: Any, path: str) -> Any:
    """
    Walk a dotted path through nested mappings.

    Args:
        values: Root mapping to start from
        path: Dotted key path, e.g. ``image.repository``

    Returns:
        The value found, or a private missing marker if any step is not a
        mapping or lacks the key
    """
    current = values
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _value_text(value: Any) -> str:
    if value is _MISSING or value is ABSENT:
        return ""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value
    # Mappings and sequences have no single-line form
    if isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def render_template(template: str, context: TemplateContext) -> str:
    """
    Substitute the supported placeholders in a template string.

    Each placeholder family is replaced everywhere in the string, in the
    order Values, Release.Name, Chart.Name, Release.Namespace,
    Chart.Version. Unresolvable ``.Values`` paths become empty strings.

    Args:
        template: Template text containing ``{{ ... }}`` placeholders
        context: Values and metadata to substitute

    Returns:
        The rendered text
    """

    def substitute_value(match: re.Match) -> str:
        path = match.group(1)
        value = lookup_value(context.values, path)
        if value is _MISSING:
            logger.debug(f"Unresolved template value: .Values.{path}")
        return _value_text(value)

    result = VALUES_PATTERN.sub(substitute_value, template)
    # Callables keep backslashes in the replacement text literal
    result = RELEASE_NAME_PATTERN.sub(lambda _: context.resolved_release_name(), result)
    result = CHART_NAME_PATTERN.sub(lambda _: context.resolved_chart_name(), result)
    result = RELEASE_NAMESPACE_PATTERN.sub(lambda _: context.resolved_namespace(), result)
    result = CHART_VERSION_PATTERN.sub(lambda _: context.resolved_chart_version(), result)
    return result


def deployment_template() -> str:
    """Return a basic Deployment template for a Helm chart."""
    return """apiVersion: apps/v1
kind: Deployment
metadata:
  name: {{ .Release.Name }}-{{ .Chart.Name }}
  namespace: {{ .Release.Namespace }}
  labels:
    app: {{ .Chart.Name }}
    release: {{ .Release.Name }}
spec:
  replicas: {{ .Values.replicaCount }}
  selector:
    matchLabels:
      app: {{ .Chart.Name }}
      release: {{ .Release.Name }}
  template:
    metadata:
      labels:
        app: {{ .Chart.Name }}
        release: {{ .Release.Name }}
    spec:
      containers:
        - name: {{ .Chart.Name }}
          image: "{{ .Values.image.repository }}:{{ .Values.image.tag }}"
          imagePullPolicy: {{ .Values.image.pullPolicy }}
          ports:
            - containerPort: {{ .Values.service.port }}"""


def service_template() -> str:
    """Return a basic Service template for a Helm chart."""
    return """apiVersion: v1
kind: Service
metadata:
  name: {{ .Release.Name }}-{{ .Chart.Name }}
  namespace: {{ .Release.Namespace }}
  labels:
    app: {{ .Chart.Name }}
    release: {{ .Release.Name }}
spec:
  type: {{ .Values.service.type }}
  ports:
    - port: {{ .Values.service.port }}
      targetPort: {{ .Values.service.port }}
      protocol: TCP
  selector:
    app: {{ .Chart.Name }}
    release: {{ .Release.Name }}"""


def ingress_template() -> str:
    """Return an Ingress template for a Helm chart."""
    return """apiVersion: networking.k8s.io/v1
kind: Ingress
metadata:
  name: {{ .Release.Name }}-{{ .Chart.Name }}
  namespace: {{ .Release.Namespace }}
  labels:
    app: {{ .Chart.Name }}
    release: {{ .Release.Name }}
spec:
  rules:
    - host: {{ .Values.ingress.host }}
      http:
        paths:
          - path: /
            pathType: Prefix
            backend:
              service:
                name: {{ .Release.Name }}-{{ .Chart.Name }}
                port:
                  number: {{ .Values.service.port }}"""
