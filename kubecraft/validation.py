"""
Semantic checks for generated manifests.

Validators report problems through a ValidationResult instead of raising:
errors make a manifest invalid, warnings flag questionable but accepted
settings.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from kubecraft.schemas import schema_errors

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 253
MIN_PORT, MAX_PORT = 1, 65535
MIN_NODE_PORT, MAX_NODE_PORT = 30000, 32767
CONFIG_MAP_SIZE_LIMIT = 1024 * 1024


@dataclass
class ValidationResult:
    """Outcome of validating a single manifest."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_messages(cls, errors: list[str], warnings: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors, warnings=warnings)


def _name(manifest: dict[str, Any]) -> str:
    return (manifest.get("metadata") or {}).get("name") or ""


def _validate_container(container: dict[str, Any], errors: list[str], warnings: list[str]) -> None:
    name = container.get("name")
    if not name:
        errors.append("Container must have a name")
    if not container.get("image"):
        errors.append("Container must have an image")

    resources = container.get("resources")
    if not resources:
        warnings.append(f"Container '{name}' has no resource limits/requests")
    else:
        if not resources.get("limits"):
            warnings.append(f"Container '{name}' has no resource limits")
        if not resources.get("requests"):
            warnings.append(f"Container '{name}' has no resource requests")

    if not container.get("livenessProbe"):
        warnings.append(f"Container '{name}' has no liveness probe")
    if not container.get("readinessProbe"):
        warnings.append(f"Container '{name}' has no readiness probe")


def validate_deployment(deployment: dict[str, Any]) -> ValidationResult:
    """
    Validate a Deployment.

    Checks the name, replica count and containers, and that every selector
    label is present on the pod template with the same value.
    """
    errors: list[str] = []
    warnings: list[str] = []
    spec = deployment.get("spec") or {}
    template = spec.get("template") or {}

    name = _name(deployment)
    if not name:
        errors.append("Deployment must have a name")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"Deployment name must be <= {MAX_NAME_LENGTH} characters")

    replicas = spec.get("replicas")
    if replicas is not None and replicas < 0:
        errors.append("Replicas must be >= 0")

    containers = (template.get("spec") or {}).get("containers") or []
    if not containers:
        errors.append("At least one container is required")
    for container in containers:
        _validate_container(container, errors, warnings)

    selector_labels = (spec.get("selector") or {}).get("matchLabels") or {}
    template_labels = (template.get("metadata") or {}).get("labels") or {}
    for key, value in selector_labels.items():
        if template_labels.get(key) != value:
            errors.append(f"Selector label '{key}={value}' not found in template labels")

    return ValidationResult.from_messages(errors, warnings)


def validate_service(service: dict[str, Any]) -> ValidationResult:
    """Validate a Service's name, port ranges and selector."""
    errors: list[str] = []
    warnings: list[str] = []
    spec = service.get("spec") or {}

    if not _name(service):
        errors.append("Service must have a name")

    ports = spec.get("ports") or []
    if not ports:
        errors.append("Service must have at least one port")

    for port in ports:
        number = port.get("port", 0)
        if number < MIN_PORT or number > MAX_PORT:
            errors.append(f"Port {number} out of valid range ({MIN_PORT}-{MAX_PORT})")
        node_port = port.get("nodePort")
        if spec.get("type") == "NodePort" and node_port:
            if node_port < MIN_NODE_PORT or node_port > MAX_NODE_PORT:
                errors.append(
                    f"NodePort {node_port} out of valid range ({MIN_NODE_PORT}-{MAX_NODE_PORT})"
                )

    if not spec.get("selector"):
        warnings.append("Service has no selector, it will match no pods")

    return ValidationResult.from_messages(errors, warnings)


def validate_config_map(config_map: dict[str, Any]) -> ValidationResult:
    """Validate a ConfigMap's name and that its data fits in 1 MiB."""
    errors: list[str] = []
    warnings: list[str] = []

    if not _name(config_map):
        errors.append("ConfigMap must have a name")

    data = config_map.get("data") or {}
    if not data and not config_map.get("binaryData"):
        warnings.append("ConfigMap has no data")

    if sum(len(value) for value in data.values()) > CONFIG_MAP_SIZE_LIMIT:
        errors.append("ConfigMap data exceeds 1 MiB limit")

    return ValidationResult.from_messages(errors, warnings)


def validate_ingress(ingress: dict[str, Any]) -> ValidationResult:
    """Validate an Ingress's rules, paths and ingress class."""
    errors: list[str] = []
    warnings: list[str] = []
    spec = ingress.get("spec") or {}

    if not _name(ingress):
        errors.append("Ingress must have a name")

    rules = spec.get("rules") or []
    if not rules:
        errors.append("Ingress must have at least one rule")

    for rule in rules:
        if not rule.get("host"):
            warnings.append("Ingress rule has no host, it will match all hosts")
        if not (rule.get("http") or {}).get("paths"):
            errors.append("Ingress rule must have at least one path")

    if not spec.get("ingressClassName"):
        warnings.append("No ingress class specified")

    return ValidationResult.from_messages(errors, warnings)


def validate_hpa(hpa: dict[str, Any]) -> ValidationResult:
    """Validate a HorizontalPodAutoscaler's replica range, metrics and target."""
    errors: list[str] = []
    warnings: list[str] = []
    spec = hpa.get("spec") or {}

    if not _name(hpa):
        errors.append("HPA must have a name")

    if spec.get("minReplicas", 1) > spec.get("maxReplicas", 0):
        errors.append("minReplicas cannot exceed maxReplicas")

    if not spec.get("metrics"):
        warnings.append("HPA has no metrics, autoscaling will have no targets")

    if not (spec.get("scaleTargetRef") or {}).get("name"):
        errors.append("HPA must reference a target deployment")

    return ValidationResult.from_messages(errors, warnings)


VALIDATORS: dict[str, Callable[[dict[str, Any]], ValidationResult]] = {
    "Deployment": validate_deployment,
    "Service": validate_service,
    "ConfigMap": validate_config_map,
    "Ingress": validate_ingress,
    "HorizontalPodAutoscaler": validate_hpa,
}


def validate_manifest(manifest: dict[str, Any]) -> ValidationResult:
    """
    Validate a manifest with the validator for its kind.

    Kinds without a validator are reported valid, with a warning.
    """
    kind = manifest.get("kind")
    validator = VALIDATORS.get(kind)
    if validator is None:
        logger.debug(f"No validator for kind {kind}")
        return ValidationResult(valid=True, warnings=[f"Unknown resource kind: {kind}"])
    return validator(manifest)


def check_manifest(manifest: dict[str, Any]) -> ValidationResult:
    """
    Run the semantic checks and the structural schema checks together.

    Schema problems are reported as errors after the semantic ones.
    """
    result = validate_manifest(manifest)
    errors = result.errors + schema_errors(manifest)
    return ValidationResult.from_messages(errors, result.warnings)
