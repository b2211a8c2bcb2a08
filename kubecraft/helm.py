"""
Builders for Helm ``Chart.yaml`` and ``values.yaml`` content.

Functions return new dictionaries and never modify their arguments.
"""

import copy
from typing import Any, Optional


# ─── Chart.yaml ───────────────────────────────────────────────────


def create_chart(
    name: str,
    version: str = "0.1.0",
    app_version: str = "1.0.0",
    description: Optional[str] = None,
    chart_type: str = "application",
    keywords: Optional[list[str]] = None,
    home: Optional[str] = None,
    sources: Optional[list[str]] = None,
    maintainers: Optional[list[dict[str, str]]] = None,
    dependencies: Optional[list[dict[str, str]]] = None,
) -> dict[str, Any]:
    """
    Create a Helm v2 chart definition.

    Args:
        name: Chart name
        version: Chart version (SemVer)
        app_version: Version of the packaged application
        description: One-line chart description
        chart_type: "application" or "library"
        keywords: Search keywords
        home: Project home page URL
        sources: Source code URLs
        maintainers: Maintainer entries with name and optional email/url
        dependencies: Dependency entries with name, version and optional
            repository/condition

    Returns:
        Chart.yaml content as a dictionary
    """
    chart: dict[str, Any] = {
        "apiVersion": "v2",
        "name": name,
        "version": version,
        "appVersion": app_version,
    }
    if description is not None:
        chart["description"] = description
    chart["type"] = chart_type
    if keywords is not None:
        chart["keywords"] = list(keywords)
    if home is not None:
        chart["home"] = home
    if sources is not None:
        chart["sources"] = list(sources)
    if maintainers is not None:
        chart["maintainers"] = copy.deepcopy(maintainers)
    if dependencies is not None:
        chart["dependencies"] = copy.deepcopy(dependencies)
    return chart


def add_dependency(
    chart: dict[str, Any],
    name: str,
    version: str,
    repository: Optional[str] = None,
    condition: Optional[str] = None,
) -> dict[str, Any]:
    """Return a copy of the chart with a dependency appended."""
    dependency = {"name": name, "version": version}
    if repository is not None:
        dependency["repository"] = repository
    if condition is not None:
        dependency["condition"] = condition

    updated = copy.deepcopy(chart)
    updated.setdefault("dependencies", []).append(dependency)
    return updated


def set_chart_version(chart: dict[str, Any], version: str) -> dict[str, Any]:
    updated = copy.deepcopy(chart)
    updated["version"] = version
    return updated


def set_app_version(chart: dict[str, Any], version: str) -> dict[str, Any]:
    updated = copy.deepcopy(chart)
    updated["appVersion"] = version
    return updated


def add_maintainer(
    chart: dict[str, Any], name: str, email: Optional[str] = None, url: Optional[str] = None
) -> dict[str, Any]:
    """Return a copy of the chart with a maintainer appended."""
    maintainer = {"name": name}
    if email is not None:
        maintainer["email"] = email
    if url is not None:
        maintainer["url"] = url

    updated = copy.deepcopy(chart)
    updated.setdefault("maintainers", []).append(maintainer)
    return updated


# ─── values.yaml ──────────────────────────────────────────────────


def _ingress_hosts(host: str) -> list[dict[str, Any]]:
    return [{"host": host, "paths": [{"path": "/", "pathType": "Prefix"}]}]


def create_values(
    image_repository: str,
    image_tag: str = "latest",
    image_pull_policy: str = "IfNotPresent",
    replica_count: int = 1,
    service_port: int = 80,
    service_type: str = "ClusterIP",
    ingress_enabled: bool = False,
    ingress_host: Optional[str] = None,
    ingress_class_name: Optional[str] = None,
    resources: Optional[dict[str, Any]] = None,
    autoscaling_enabled: bool = False,
    autoscaling_min_replicas: int = 1,
    autoscaling_max_replicas: int = 10,
    autoscaling_cpu: Optional[int] = None,
    autoscaling_memory: Optional[int] = None,
    node_selector: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """
    Create the values for a standard web-application chart.

    Sections ``image``, ``service``, ``ingress`` and ``autoscaling`` are
    always present; ``resources`` and ``nodeSelector`` only when given.
    """
    ingress: dict[str, Any] = {"enabled": ingress_enabled}
    if ingress_class_name is not None:
        ingress["className"] = ingress_class_name
    ingress["hosts"] = _ingress_hosts(ingress_host) if ingress_host else []
    ingress["tls"] = []

    autoscaling: dict[str, Any] = {
        "enabled": autoscaling_enabled,
        "minReplicas": autoscaling_min_replicas,
        "maxReplicas": autoscaling_max_replicas,
    }
    if autoscaling_cpu is not None:
        autoscaling["targetCPUUtilizationPercentage"] = autoscaling_cpu
    if autoscaling_memory is not None:
        autoscaling["targetMemoryUtilizationPercentage"] = autoscaling_memory

    values: dict[str, Any] = {
        "replicaCount": replica_count,
        "image": {
            "repository": image_repository,
            "tag": image_tag,
            "pullPolicy": image_pull_policy,
        },
        "service": {"type": service_type, "port": service_port},
        "ingress": ingress,
    }
    if resources is not None:
        values["resources"] = copy.deepcopy(resources)
    values["autoscaling"] = autoscaling
    if node_selector is not None:
        values["nodeSelector"] = dict(node_selector)
    return values


def set_image(values: dict[str, Any], repository: str, tag: Optional[str] = None) -> dict[str, Any]:
    """Return a copy of the values pointing at another image. The tag is kept if not given."""
    updated = copy.deepcopy(values)
    image = updated.setdefault("image", {})
    image["repository"] = repository
    if tag is not None:
        image["tag"] = tag
    return updated


def set_value_resources(values: dict[str, Any], resources: dict[str, Any]) -> dict[str, Any]:
    updated = copy.deepcopy(values)
    updated["resources"] = copy.deepcopy(resources)
    return updated


def set_autoscaling(
    values: dict[str, Any],
    enabled: bool,
    min_replicas: Optional[int] = None,
    max_replicas: Optional[int] = None,
    cpu: Optional[int] = None,
    memory: Optional[int] = None,
) -> dict[str, Any]:
    """
    Return a copy of the values with autoscaling switched on or off.

    Settings not given keep their current value, falling back to 1..10
    replicas.
    """
    current = values.get("autoscaling") or {}
    autoscaling: dict[str, Any] = {
        "enabled": enabled,
        "minReplicas": min_replicas if min_replicas is not None else current.get("minReplicas", 1),
        "maxReplicas": max_replicas if max_replicas is not None else current.get("maxReplicas", 10),
    }
    cpu_target = cpu if cpu is not None else current.get("targetCPUUtilizationPercentage")
    if cpu_target is not None:
        autoscaling["targetCPUUtilizationPercentage"] = cpu_target
    memory_target = (
        memory if memory is not None else current.get("targetMemoryUtilizationPercentage")
    )
    if memory_target is not None:
        autoscaling["targetMemoryUtilizationPercentage"] = memory_target

    updated = copy.deepcopy(values)
    updated["autoscaling"] = autoscaling
    return updated


def set_ingress(
    values: dict[str, Any], host: str, class_name: Optional[str] = None
) -> dict[str, Any]:
    """Return a copy of the values with ingress enabled for a single host."""
    updated = copy.deepcopy(values)
    ingress = updated.setdefault("ingress", {})
    ingress["enabled"] = True
    if class_name is not None:
        ingress["className"] = class_name
    ingress["hosts"] = _ingress_hosts(host)
    return updated


def merge_values(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Merge overrides into base values.

    Top-level keys are replaced; the ``image``, ``service``, ``ingress`` and
    ``autoscaling`` sections are merged key by key instead.
    """
    merged = {**base, **overrides}
    for section in ("image", "service", "ingress"):
        merged[section] = {**base.get(section, {}), **overrides.get(section, {})}

    if base.get("autoscaling") or overrides.get("autoscaling"):
        merged["autoscaling"] = {
            **(base.get("autoscaling") or {}),
            **(overrides.get("autoscaling") or {}),
        }
    else:
        merged.pop("autoscaling", None)
    return copy.deepcopy(merged)
