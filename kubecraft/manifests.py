"""
Builders for Kubernetes manifests.

Every function returns a new manifest dictionary. Helpers that modify a
manifest work on a deep copy, so the manifest passed in is never changed.
Optional fields that are not provided are left out of the result.
"""

import copy
import json
import time
from typing import Any, Optional

DEFAULT_ROLLING_UPDATE = {"maxSurge": "25%", "maxUnavailable": "25%"}


def _metadata(
    name: str,
    namespace: Optional[str] = None,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    if labels is not None:
        metadata["labels"] = labels
    if annotations is not None:
        metadata["annotations"] = annotations
    return metadata


def _pod_spec(deployment: dict[str, Any]) -> dict[str, Any]:
    return deployment["spec"]["template"]["spec"]


# ─── Deployment ───────────────────────────────────────────────────


def create_deployment(
    name: str,
    image: str,
    namespace: Optional[str] = None,
    replicas: int = 1,
    port: Optional[int] = None,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
    env: Optional[list[dict[str, Any]]] = None,
    resources: Optional[dict[str, Any]] = None,
    liveness_probe: Optional[dict[str, Any]] = None,
    readiness_probe: Optional[dict[str, Any]] = None,
    startup_probe: Optional[dict[str, Any]] = None,
    command: Optional[list[str]] = None,
    args: Optional[list[str]] = None,
    image_pull_policy: str = "IfNotPresent",
    strategy: Optional[str] = None,
    revision_history_limit: int = 10,
    service_account_name: Optional[str] = None,
    node_selector: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """
    Create a Deployment running a single container.

    The pods are labelled ``app: <name>`` (plus any extra labels) and the
    selector matches on ``app: <name>``. Without an explicit strategy the
    Deployment uses RollingUpdate with 25% surge/unavailability.
    """
    app_labels = {"app": name, **(labels or {})}

    container: dict[str, Any] = {
        "name": name,
        "image": image,
        "imagePullPolicy": image_pull_policy,
    }
    if port:
        container["ports"] = [{"containerPort": port, "protocol": "TCP"}]
    if env is not None:
        container["env"] = env
    if resources is not None:
        container["resources"] = resources
    if liveness_probe is not None:
        container["livenessProbe"] = liveness_probe
    if readiness_probe is not None:
        container["readinessProbe"] = readiness_probe
    if startup_probe is not None:
        container["startupProbe"] = startup_probe
    if command is not None:
        container["command"] = command
    if args is not None:
        container["args"] = args

    pod_spec: dict[str, Any] = {"containers": [container], "restartPolicy": "Always"}
    if service_account_name:
        pod_spec["serviceAccountName"] = service_account_name
    if node_selector is not None:
        pod_spec["nodeSelector"] = node_selector

    if strategy:
        deployment_strategy: dict[str, Any] = {"type": strategy}
    else:
        deployment_strategy = {
            "type": "RollingUpdate",
            "rollingUpdate": dict(DEFAULT_ROLLING_UPDATE),
        }

    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(name, namespace, app_labels, annotations),
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": dict(app_labels)},
                "spec": pod_spec,
            },
            "strategy": deployment_strategy,
            "revisionHistoryLimit": revision_history_limit,
        },
    }


def set_replicas(deployment: dict[str, Any], replicas: int) -> dict[str, Any]:
    """Return a copy of the Deployment with a new replica count."""
    updated = copy.deepcopy(deployment)
    updated["spec"]["replicas"] = replicas
    return updated


def add_container(deployment: dict[str, Any], container: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the Deployment with an extra container appended."""
    updated = copy.deepcopy(deployment)
    _pod_spec(updated)["containers"].append(copy.deepcopy(container))
    return updated


def set_resources(deployment: dict[str, Any], resources: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the Deployment with resources set on the primary container."""
    updated = copy.deepcopy(deployment)
    _pod_spec(updated)["containers"][0]["resources"] = copy.deepcopy(resources)
    return updated


def set_strategy(
    deployment: dict[str, Any],
    strategy: str,
    max_surge: Any = "25%",
    max_unavailable: Any = "25%",
) -> dict[str, Any]:
    """
    Return a copy of the Deployment with a new update strategy.

    Args:
        deployment: Deployment manifest
        strategy: "RollingUpdate" or "Recreate"
        max_surge: RollingUpdate maxSurge (ignored for Recreate)
        max_unavailable: RollingUpdate maxUnavailable (ignored for Recreate)
    """
    updated = copy.deepcopy(deployment)
    if strategy == "Recreate":
        updated["spec"]["strategy"] = {"type": "Recreate"}
    else:
        updated["spec"]["strategy"] = {
            "type": "RollingUpdate",
            "rollingUpdate": {"maxSurge": max_surge, "maxUnavailable": max_unavailable},
        }
    return updated


# ─── Service ──────────────────────────────────────────────────────


def create_service(
    name: str,
    port: int,
    namespace: Optional[str] = None,
    target_port: Any = None,
    service_type: str = "ClusterIP",
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
    selector: Optional[dict[str, str]] = None,
    protocol: str = "TCP",
    node_port: Optional[int] = None,
    session_affinity: str = "None",
) -> dict[str, Any]:
    """Create a Service exposing a single port. The selector defaults to ``app: <name>``."""
    service_port: dict[str, Any] = {
        "port": port,
        "targetPort": target_port if target_port is not None else port,
        "protocol": protocol,
    }
    if node_port is not None:
        service_port["nodePort"] = node_port

    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(name, namespace, {"app": name, **(labels or {})}, annotations),
        "spec": {
            "type": service_type,
            "selector": selector if selector is not None else {"app": name},
            "ports": [service_port],
            "sessionAffinity": session_affinity,
        },
    }


def cluster_ip_service(name: str, port: int, target_port: Any = None) -> dict[str, Any]:
    """Create an internal-only ClusterIP Service."""
    return create_service(name, port, target_port=target_port, service_type="ClusterIP")


def node_port_service(name: str, port: int, node_port: Optional[int] = None) -> dict[str, Any]:
    """Create a NodePort Service reachable on every node's IP."""
    return create_service(name, port, service_type="NodePort", node_port=node_port)


def load_balancer_service(name: str, port: int, target_port: Any = None) -> dict[str, Any]:
    """Create a LoadBalancer Service backed by the cloud provider."""
    return create_service(name, port, target_port=target_port, service_type="LoadBalancer")


def add_service_port(service: dict[str, Any], port: dict[str, Any]) -> dict[str, Any]:
    updated = copy.deepcopy(service)
    updated["spec"]["ports"].append(copy.deepcopy(port))
    return updated


def set_service_type(service: dict[str, Any], service_type: str) -> dict[str, Any]:
    updated = copy.deepcopy(service)
    updated["spec"]["type"] = service_type
    return updated


# ─── ConfigMap & Secret ───────────────────────────────────────────


def create_config_map(
    name: str,
    namespace: Optional[str] = None,
    data: Optional[dict[str, str]] = None,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create a ConfigMap. ``data`` defaults to an empty mapping."""
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(name, namespace, {"app": name, **(labels or {})}, annotations),
        "data": dict(data) if data is not None else {},
    }


def set_config_data(config_map: dict[str, Any], key: str, value: str) -> dict[str, Any]:
    updated = copy.deepcopy(config_map)
    updated.setdefault("data", {})[key] = value
    return updated


def remove_config_data(config_map: dict[str, Any], key: str) -> dict[str, Any]:
    updated = copy.deepcopy(config_map)
    updated.get("data", {}).pop(key, None)
    return updated


def config_map_from_object(
    name: str, obj: dict[str, Any], namespace: Optional[str] = None
) -> dict[str, Any]:
    """
    Create a ConfigMap from arbitrary key/value pairs.

    String values are stored as-is; anything else is stored as its JSON text.
    """
    data = {
        key: value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
        for key, value in obj.items()
    }
    return create_config_map(name, namespace=namespace, data=data)


def create_secret(
    name: str,
    namespace: Optional[str] = None,
    secret_type: str = "Opaque",
    data: Optional[dict[str, str]] = None,
    string_data: Optional[dict[str, str]] = None,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create a Secret. ``data`` holds base64 values, ``string_data`` plain text."""
    manifest: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": _metadata(name, namespace, {"app": name, **(labels or {})}, annotations),
        "type": secret_type,
    }
    if data is not None:
        manifest["data"] = data
    if string_data is not None:
        manifest["stringData"] = string_data
    return manifest


def secret_from_strings(
    name: str, data: dict[str, str], namespace: Optional[str] = None
) -> dict[str, Any]:
    """Create an Opaque Secret from plain-text values."""
    return create_secret(name, namespace=namespace, string_data=dict(data))


def tls_secret(name: str, cert: str, key: str, namespace: Optional[str] = None) -> dict[str, Any]:
    """Create a ``kubernetes.io/tls`` Secret from a PEM certificate and key."""
    return create_secret(
        name,
        namespace=namespace,
        secret_type="kubernetes.io/tls",
        string_data={"tls.crt": cert, "tls.key": key},
    )


def set_secret_data(secret: dict[str, Any], key: str, value: str) -> dict[str, Any]:
    updated = copy.deepcopy(secret)
    updated.setdefault("stringData", {})[key] = value
    return updated


# ─── Ingress ──────────────────────────────────────────────────────


def _ingress_rule(
    host: str, service_name: str, service_port: int, path: str = "/", path_type: str = "Prefix"
) -> dict[str, Any]:
    return {
        "host": host,
        "http": {
            "paths": [
                {
                    "path": path,
                    "pathType": path_type,
                    "backend": {
                        "service": {
                            "name": service_name,
                            "port": {"number": service_port},
                        }
                    },
                }
            ]
        },
    }


def create_ingress(
    name: str,
    host: str,
    service_name: str,
    service_port: int,
    namespace: Optional[str] = None,
    path: str = "/",
    path_type: str = "Prefix",
    ingress_class_name: Optional[str] = None,
    tls: bool = False,
    tls_secret_name: Optional[str] = None,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """
    Create an Ingress routing one host/path to a Service.

    With ``tls=True`` a TLS entry for the host is added, using
    ``tls_secret_name`` or ``<name>-tls``.
    """
    spec: dict[str, Any] = {}
    if ingress_class_name:
        spec["ingressClassName"] = ingress_class_name
    spec["rules"] = [_ingress_rule(host, service_name, service_port, path, path_type)]
    if tls:
        spec["tls"] = [{"hosts": [host], "secretName": tls_secret_name or f"{name}-tls"}]

    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": _metadata(name, namespace, {"app": name, **(labels or {})}, annotations),
        "spec": spec,
    }


def add_ingress_rule(
    ingress: dict[str, Any], host: str, service_name: str, service_port: int, path: str = "/"
) -> dict[str, Any]:
    updated = copy.deepcopy(ingress)
    updated["spec"].setdefault("rules", []).append(
        _ingress_rule(host, service_name, service_port, path)
    )
    return updated


def add_ingress_tls(ingress: dict[str, Any], hosts: list[str], secret_name: str) -> dict[str, Any]:
    updated = copy.deepcopy(ingress)
    updated["spec"].setdefault("tls", []).append({"hosts": list(hosts), "secretName": secret_name})
    return updated


def set_ingress_class(ingress: dict[str, Any], class_name: str) -> dict[str, Any]:
    updated = copy.deepcopy(ingress)
    updated["spec"]["ingressClassName"] = class_name
    return updated


# ─── Namespace ────────────────────────────────────────────────────


def create_namespace(
    name: str,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create a Namespace."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": _metadata(name, labels=labels, annotations=annotations),
    }


def app_namespace(name: str, team: Optional[str] = None) -> dict[str, Any]:
    """Create a Namespace labelled as managed by kubecraft, optionally tagged with a team."""
    labels = {"app.kubernetes.io/managed-by": "kubecraft"}
    if team:
        labels["team"] = team
    return create_namespace(name, labels=labels)


# ─── HorizontalPodAutoscaler ──────────────────────────────────────


def _utilization_metric(resource_name: str, percentage: int) -> dict[str, Any]:
    return {
        "type": "Resource",
        "resource": {
            "name": resource_name,
            "target": {"type": "Utilization", "averageUtilization": percentage},
        },
    }


def create_hpa(
    name: str,
    target_deployment: str,
    max_replicas: int,
    namespace: Optional[str] = None,
    min_replicas: int = 1,
    cpu_utilization: Optional[int] = None,
    memory_utilization: Optional[int] = None,
    labels: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """
    Create an ``autoscaling/v2`` HorizontalPodAutoscaler targeting a Deployment.

    CPU and memory utilization targets become Resource metrics; with
    neither given the spec has no ``metrics`` key.
    """
    metrics = []
    if cpu_utilization is not None:
        metrics.append(_utilization_metric("cpu", cpu_utilization))
    if memory_utilization is not None:
        metrics.append(_utilization_metric("memory", memory_utilization))

    spec: dict[str, Any] = {
        "scaleTargetRef": {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "name": target_deployment,
        },
        "minReplicas": min_replicas,
        "maxReplicas": max_replicas,
    }
    if metrics:
        spec["metrics"] = metrics

    return {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": _metadata(name, namespace, {"app": name, **(labels or {})}),
        "spec": spec,
    }


def _set_utilization_target(hpa: dict[str, Any], resource_name: str, percentage: int) -> dict:
    updated = copy.deepcopy(hpa)
    metrics = [
        metric
        for metric in updated["spec"].get("metrics", [])
        if not (
            metric.get("type") == "Resource"
            and metric.get("resource", {}).get("name") == resource_name
        )
    ]
    metrics.append(_utilization_metric(resource_name, percentage))
    updated["spec"]["metrics"] = metrics
    return updated


def set_cpu_target(hpa: dict[str, Any], percentage: int) -> dict[str, Any]:
    """Return a copy of the HPA with its CPU utilization target replaced."""
    return _set_utilization_target(hpa, "cpu", percentage)


def set_memory_target(hpa: dict[str, Any], percentage: int) -> dict[str, Any]:
    """Return a copy of the HPA with its memory utilization target replaced."""
    return _set_utilization_target(hpa, "memory", percentage)


def set_scale_range(hpa: dict[str, Any], min_replicas: int, max_replicas: int) -> dict[str, Any]:
    updated = copy.deepcopy(hpa)
    updated["spec"]["minReplicas"] = min_replicas
    updated["spec"]["maxReplicas"] = max_replicas
    return updated


# ─── Bundle ───────────────────────────────────────────────────────


def manifest_bundle(
    name: str, resources: list[dict[str, Any]], namespace: Optional[str] = None
) -> dict[str, Any]:
    """Group resources under a name, stamped with the creation time in epoch milliseconds."""
    bundle: dict[str, Any] = {"name": name}
    if namespace is not None:
        bundle["namespace"] = namespace
    bundle["resources"] = list(resources)
    bundle["createdAt"] = int(time.time() * 1000)
    return bundle
