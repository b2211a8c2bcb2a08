"""
Structural schemas for Kubernetes resources and Helm charts.

The models take manifests in their Kubernetes (camelCase) form, reject
values outside the API's bounds and fill in the API server's defaults.
Python field names are accepted too, so a model can be built either way.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

Protocol = Literal["TCP", "UDP", "SCTP"]
PullPolicy = Literal["Always", "IfNotPresent", "Never"]
IntOrString = Union[int, str]
StringMap = Dict[str, str]

PortNumber = Annotated[int, Field(ge=1, le=65535)]
NodePort = Annotated[int, Field(ge=30000, le=32767)]
NonEmptyString = Annotated[str, Field(min_length=1)]
Email = Annotated[str, Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]


class KubernetesModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── Core primitives ──────────────────────────────────────────────


class Metadata(KubernetesModel):
    name: str = Field(min_length=1, max_length=253)
    namespace: Optional[Annotated[str, Field(min_length=1, max_length=63)]] = None
    labels: Optional[StringMap] = None
    annotations: Optional[StringMap] = None


class PodTemplateMetadata(KubernetesModel):
    """Metadata of a pod template, where every field is optional."""

    name: Optional[Annotated[str, Field(min_length=1, max_length=253)]] = None
    namespace: Optional[Annotated[str, Field(min_length=1, max_length=63)]] = None
    labels: Optional[StringMap] = None
    annotations: Optional[StringMap] = None


class ContainerPort(KubernetesModel):
    name: Optional[str] = None
    container_port: PortNumber
    protocol: Protocol = "TCP"


class KeySelector(KubernetesModel):
    name: str
    key: str


class FieldSelector(KubernetesModel):
    field_path: str


class EnvVarSource(KubernetesModel):
    config_map_key_ref: Optional[KeySelector] = None
    secret_key_ref: Optional[KeySelector] = None
    field_ref: Optional[FieldSelector] = None


class EnvVar(KubernetesModel):
    name: NonEmptyString
    value: Optional[str] = None
    value_from: Optional[EnvVarSource] = None


class ResourceQuantity(KubernetesModel):
    cpu: Optional[str] = None
    memory: Optional[str] = None
    ephemeral_storage: Optional[str] = Field(default=None, alias="ephemeral-storage")


class ResourceRequirements(KubernetesModel):
    requests: Optional[ResourceQuantity] = None
    limits: Optional[ResourceQuantity] = None


class VolumeMount(KubernetesModel):
    name: NonEmptyString
    mount_path: NonEmptyString
    read_only: bool = False
    sub_path: Optional[str] = None


class ConfigMapVolumeSource(KubernetesModel):
    name: str


class SecretVolumeSource(KubernetesModel):
    secret_name: str


class EmptyDirVolumeSource(KubernetesModel):
    medium: Optional[str] = None


class PersistentVolumeClaimVolumeSource(KubernetesModel):
    claim_name: str
    read_only: Optional[bool] = None


class Volume(KubernetesModel):
    name: NonEmptyString
    config_map: Optional[ConfigMapVolumeSource] = None
    secret: Optional[SecretVolumeSource] = None
    empty_dir: Optional[EmptyDirVolumeSource] = None
    persistent_volume_claim: Optional[PersistentVolumeClaimVolumeSource] = None


# ─── Probes ───────────────────────────────────────────────────────


class HTTPHeader(KubernetesModel):
    name: str
    value: str


class HTTPGetAction(KubernetesModel):
    path: str = "/"
    port: IntOrString
    scheme: Literal["HTTP", "HTTPS"] = "HTTP"
    http_headers: Optional[List[HTTPHeader]] = None


class TCPSocketAction(KubernetesModel):
    port: IntOrString


class ExecAction(KubernetesModel):
    command: List[str] = Field(min_length=1)


class Probe(KubernetesModel):
    http_get: Optional[HTTPGetAction] = None
    tcp_socket: Optional[TCPSocketAction] = None
    exec: Optional[ExecAction] = None
    initial_delay_seconds: int = Field(default=0, ge=0)
    period_seconds: int = Field(default=10, ge=1)
    timeout_seconds: int = Field(default=1, ge=1)
    success_threshold: int = Field(default=1, ge=1)
    failure_threshold: int = Field(default=3, ge=1)


# ─── Workloads ────────────────────────────────────────────────────


class Container(KubernetesModel):
    name: NonEmptyString
    image: NonEmptyString
    image_pull_policy: PullPolicy = "IfNotPresent"
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None
    ports: Optional[List[ContainerPort]] = None
    env: Optional[List[EnvVar]] = None
    resources: Optional[ResourceRequirements] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    liveness_probe: Optional[Probe] = None
    readiness_probe: Optional[Probe] = None
    startup_probe: Optional[Probe] = None


class Toleration(KubernetesModel):
    key: Optional[str] = None
    operator: Optional[Literal["Exists", "Equal"]] = None
    value: Optional[str] = None
    effect: Optional[Literal["NoSchedule", "PreferNoSchedule", "NoExecute"]] = None
    toleration_seconds: Optional[int] = None


class PodSpec(KubernetesModel):
    containers: List[Container] = Field(min_length=1)
    init_containers: Optional[List[Container]] = None
    volumes: Optional[List[Volume]] = None
    restart_policy: Literal["Always", "OnFailure", "Never"] = "Always"
    service_account_name: Optional[str] = None
    node_selector: Optional[StringMap] = None
    tolerations: Optional[List[Toleration]] = None


class PodTemplateSpec(KubernetesModel):
    metadata: Optional[PodTemplateMetadata] = None
    spec: PodSpec


class LabelSelector(KubernetesModel):
    match_labels: StringMap


class RollingUpdate(KubernetesModel):
    max_surge: Optional[IntOrString] = None
    max_unavailable: Optional[IntOrString] = None


class DeploymentStrategy(KubernetesModel):
    type: Literal["RollingUpdate", "Recreate"] = "RollingUpdate"
    rolling_update: Optional[RollingUpdate] = None


class DeploymentSpec(KubernetesModel):
    replicas: int = Field(default=1, ge=0)
    selector: LabelSelector
    template: PodTemplateSpec
    strategy: Optional[DeploymentStrategy] = None
    revision_history_limit: int = Field(default=10, ge=0)


class Deployment(KubernetesModel):
    api_version: Literal["apps/v1"] = "apps/v1"
    kind: Literal["Deployment"] = "Deployment"
    metadata: Metadata
    spec: DeploymentSpec


# ─── Service ──────────────────────────────────────────────────────


class ServicePort(KubernetesModel):
    name: Optional[str] = None
    port: PortNumber
    target_port: Optional[IntOrString] = None
    protocol: Protocol = "TCP"
    node_port: Optional[NodePort] = None


class ServiceSpec(KubernetesModel):
    type: Literal["ClusterIP", "NodePort", "LoadBalancer", "ExternalName"] = "ClusterIP"
    selector: StringMap
    ports: List[ServicePort] = Field(min_length=1)
    cluster_ip: Optional[str] = Field(default=None, alias="clusterIP")
    external_traffic_policy: Optional[Literal["Cluster", "Local"]] = None
    session_affinity: Literal["None", "ClientIP"] = "None"


class Service(KubernetesModel):
    api_version: Literal["v1"] = "v1"
    kind: Literal["Service"] = "Service"
    metadata: Metadata
    spec: ServiceSpec


# ─── ConfigMap and Secret ─────────────────────────────────────────


class ConfigMap(KubernetesModel):
    api_version: Literal["v1"] = "v1"
    kind: Literal["ConfigMap"] = "ConfigMap"
    metadata: Metadata
    data: Optional[StringMap] = None
    binary_data: Optional[StringMap] = None


class Secret(KubernetesModel):
    api_version: Literal["v1"] = "v1"
    kind: Literal["Secret"] = "Secret"
    metadata: Metadata
    type: Literal["Opaque", "kubernetes.io/tls", "kubernetes.io/dockerconfigjson"] = "Opaque"
    data: Optional[StringMap] = None
    string_data: Optional[StringMap] = None


# ─── Ingress ──────────────────────────────────────────────────────


class ServiceBackendPort(KubernetesModel):
    number: Optional[int] = None
    name: Optional[str] = None


class IngressServiceBackend(KubernetesModel):
    name: str
    port: ServiceBackendPort


class IngressBackend(KubernetesModel):
    service: IngressServiceBackend


class IngressPath(KubernetesModel):
    path: str = "/"
    path_type: Literal["Prefix", "Exact", "ImplementationSpecific"] = "Prefix"
    backend: IngressBackend


class HTTPIngressRuleValue(KubernetesModel):
    paths: List[IngressPath] = Field(min_length=1)


class IngressRule(KubernetesModel):
    host: Optional[str] = None
    http: HTTPIngressRuleValue


class IngressTLS(KubernetesModel):
    hosts: Optional[List[str]] = None
    secret_name: Optional[str] = None


class IngressSpec(KubernetesModel):
    ingress_class_name: Optional[str] = None
    tls: Optional[List[IngressTLS]] = None
    rules: List[IngressRule] = Field(min_length=1)
    default_backend: Optional[IngressBackend] = None


class Ingress(KubernetesModel):
    api_version: Literal["networking.k8s.io/v1"] = "networking.k8s.io/v1"
    kind: Literal["Ingress"] = "Ingress"
    metadata: Metadata
    spec: IngressSpec


# ─── Namespace ────────────────────────────────────────────────────


class Namespace(KubernetesModel):
    api_version: Literal["v1"] = "v1"
    kind: Literal["Namespace"] = "Namespace"
    metadata: Metadata


# ─── HorizontalPodAutoscaler ──────────────────────────────────────


class ScaleTargetRef(KubernetesModel):
    api_version: str = "apps/v1"
    kind: str = "Deployment"
    name: str


class MetricTarget(KubernetesModel):
    type: Literal["Utilization", "Value", "AverageValue"]
    average_utilization: Optional[Union[int, float]] = None
    average_value: Optional[str] = None
    value: Optional[str] = None


class ResourceMetricSource(KubernetesModel):
    name: str
    target: MetricTarget


class MetricSpec(KubernetesModel):
    type: Literal["Resource", "Pods", "Object", "External"]
    resource: Optional[ResourceMetricSource] = None


class HorizontalPodAutoscalerSpec(KubernetesModel):
    scale_target_ref: ScaleTargetRef
    min_replicas: int = Field(default=1, ge=1)
    max_replicas: int = Field(ge=1)
    metrics: Optional[List[MetricSpec]] = None


class HorizontalPodAutoscaler(KubernetesModel):
    api_version: Literal["autoscaling/v2"] = "autoscaling/v2"
    kind: Literal["HorizontalPodAutoscaler"] = "HorizontalPodAutoscaler"
    metadata: Metadata
    spec: HorizontalPodAutoscalerSpec


# ─── Helm ─────────────────────────────────────────────────────────


class Maintainer(KubernetesModel):
    name: str
    email: Optional[Email] = None
    url: Optional[AnyUrl] = None


class ChartDependency(KubernetesModel):
    name: str
    version: str
    repository: Optional[str] = None
    condition: Optional[str] = None


class ChartMetadata(KubernetesModel):
    """Chart.yaml"""

    api_version: Literal["v1", "v2"] = "v2"
    name: NonEmptyString
    version: str = "0.1.0"
    app_version: str = "1.0.0"
    description: Optional[str] = None
    type: Literal["application", "library"] = "application"
    keywords: Optional[List[str]] = None
    home: Optional[AnyUrl] = None
    sources: Optional[List[AnyUrl]] = None
    maintainers: Optional[List[Maintainer]] = None
    dependencies: Optional[List[ChartDependency]] = None


class ImageValues(KubernetesModel):
    repository: str
    tag: str = "latest"
    pull_policy: PullPolicy = "IfNotPresent"


class ServiceValues(KubernetesModel):
    type: Literal["ClusterIP", "NodePort", "LoadBalancer"] = "ClusterIP"
    port: int = 80


class IngressPathValues(KubernetesModel):
    path: str = "/"
    path_type: str = "Prefix"


class IngressHostValues(KubernetesModel):
    host: str
    paths: List[IngressPathValues]


class IngressTLSValues(KubernetesModel):
    secret_name: str
    hosts: List[str]


class IngressValues(KubernetesModel):
    enabled: bool = False
    class_name: Optional[str] = None
    hosts: List[IngressHostValues] = Field(default_factory=list)
    tls: List[IngressTLSValues] = Field(default_factory=list)


class AutoscalingValues(KubernetesModel):
    enabled: bool = False
    min_replicas: int = 1
    max_replicas: int = 10
    target_cpu_utilization_percentage: Optional[int] = Field(
        default=None, alias="targetCPUUtilizationPercentage"
    )
    target_memory_utilization_percentage: Optional[int] = Field(
        default=None, alias="targetMemoryUtilizationPercentage"
    )


class HelmValues(KubernetesModel):
    """values.yaml of a standard web-application chart (see helm.create_values)."""

    replica_count: int = Field(default=1, ge=0)
    image: ImageValues
    service: ServiceValues
    ingress: IngressValues
    resources: Optional[ResourceRequirements] = None
    autoscaling: Optional[AutoscalingValues] = None
    node_selector: Optional[StringMap] = None
    tolerations: Optional[List[Any]] = None
    affinity: Optional[Dict[str, Any]] = None


RESOURCE_SCHEMAS: Dict[str, Type[KubernetesModel]] = {
    "Deployment": Deployment,
    "Service": Service,
    "ConfigMap": ConfigMap,
    "Secret": Secret,
    "Ingress": Ingress,
    "Namespace": Namespace,
    "HorizontalPodAutoscaler": HorizontalPodAutoscaler,
}


def parse_manifest(manifest: Dict[str, Any]) -> KubernetesModel:
    """
    Validate a manifest against the schema for its kind.

    Returns:
        The parsed model, with defaults filled in

    Raises:
        ValueError: If there is no schema for the manifest's kind
        pydantic.ValidationError: If the manifest does not match the schema
    """
    kind = manifest.get("kind")
    schema = RESOURCE_SCHEMAS.get(kind)
    if schema is None:
        raise ValueError(f"No schema for kind: {kind}")
    return schema.model_validate(manifest)


def format_errors(error: ValidationError) -> List[str]:
    """One "<field path>: <message>" line per problem in a ValidationError."""
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        messages.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return messages


def schema_errors(manifest: Dict[str, Any]) -> List[str]:
    """Schema problems in a manifest; kinds without a schema have none."""
    if manifest.get("kind") not in RESOURCE_SCHEMAS:
        logger.debug(f"No schema for kind {manifest.get('kind')}")
        return []
    try:
        parse_manifest(manifest)
    except ValidationError as e:
        return format_errors(e)
    return []


def to_manifest(model: BaseModel) -> Dict[str, Any]:
    """Dump a model back to its Kubernetes form, leaving out unset optional fields."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
