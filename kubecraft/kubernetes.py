import copy
import re
from typing import Any, Optional

from kubecraft import manifests as builders
from kubecraft.output import get_output
from kubecraft.resource_utils import is_cluster_scoped, manifest_file_name
from kubecraft.serializer import to_multi_doc_yaml, to_yaml
from kubecraft.template import Template
from kubecraft.validation import ValidationResult, check_manifest

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class KubernetesResource(Template):
    """
    A collection of plain Kubernetes manifests rendered without Helm.

    Either instantiate it (or a subclass) and call the ``add_*`` helpers,
    which build manifests with :mod:`kubecraft.manifests`, or subclass it and
    override :meth:`manifests` to return dictionaries directly.

    Manifests for namespaced kinds that carry no ``metadata.namespace`` are
    placed in :attr:`namespace` when collected, so helpers may be called
    before the namespace is known.
    """

    def __init__(self):
        self._manifests: list[dict] = []
        self._name: Optional[str] = None
        self._namespace: Optional[str] = None

    @property
    def name(self) -> str:
        """Collection name; defaults to the class name in kebab case (WebApp -> web-app)"""
        if self._name is None:
            kebab = _CAMEL_BOUNDARY.sub("-", self.__class__.__name__).lower()
            self._name = kebab.replace("_", "-")
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def namespace(self) -> str:
        """Namespace for namespaced manifests; reading it before it is set raises ValueError"""
        if self._namespace is None:
            raise ValueError("Namespace must be set before calling render()")
        return self._namespace

    @namespace.setter
    def namespace(self, value: str) -> None:
        self._namespace = value

    def manifests(self) -> list[dict]:
        """Manifests added through the helpers. Subclasses may override this."""
        return self._manifests

    def extra_manifests(self) -> list[dict]:
        """Hook for subclasses: manifests rendered after manifests()."""
        return []

    def _add(self, manifest: dict) -> dict:
        self._manifests.append(manifest)
        return manifest

    def _resolve_namespace(self, namespace: Optional[str]) -> Optional[str]:
        # Unset namespaces are filled in by all_manifests()
        return namespace if namespace is not None else self._namespace

    def add_namespace(
        self,
        name: Optional[str] = None,
        labels: Optional[dict[str, str]] = None,
        annotations: Optional[dict[str, str]] = None,
    ) -> dict:
        """Add a Namespace, named after this collection's namespace unless name is given."""
        manifest = builders.create_namespace(
            name or self.namespace, labels=labels, annotations=annotations
        )
        return self._add(manifest)

    def add_config_map(
        self,
        name: str,
        data: Optional[dict[str, str]] = None,
        namespace: Optional[str] = None,
        labels: Optional[dict[str, str]] = None,
        annotations: Optional[dict[str, str]] = None,
    ) -> dict:
        return self._add(
            builders.create_config_map(
                name,
                namespace=self._resolve_namespace(namespace),
                data=data,
                labels=labels,
                annotations=annotations,
            )
        )

    def add_secret(
        self,
        name: str,
        namespace: Optional[str] = None,
        data: Optional[dict[str, str]] = None,
        string_data: Optional[dict[str, str]] = None,
        secret_type: str = "Opaque",
        labels: Optional[dict[str, str]] = None,
        annotations: Optional[dict[str, str]] = None,
    ) -> dict:
        """Add a Secret; ``data`` takes base64 values, ``string_data`` plain text."""
        return self._add(
            builders.create_secret(
                name,
                namespace=self._resolve_namespace(namespace),
                secret_type=secret_type,
                data=data,
                string_data=string_data,
                labels=labels,
                annotations=annotations,
            )
        )

    def add_deployment(
        self, name: str, image: str, namespace: Optional[str] = None, **options: Any
    ) -> dict:
        """
        Add a single-container Deployment.

        Args:
            name: Deployment and container name
            image: Container image
            namespace: Overrides this collection's namespace
            **options: Passed to manifests.create_deployment (replicas, port,
                env, resources, liveness_probe, strategy, ...)
        """
        return self._add(
            builders.create_deployment(
                name, image, namespace=self._resolve_namespace(namespace), **options
            )
        )

    def add_service(
        self, name: str, port: int, namespace: Optional[str] = None, **options: Any
    ) -> dict:
        """Add a Service; options go to manifests.create_service (service_type, selector, ...)."""
        return self._add(
            builders.create_service(
                name, port, namespace=self._resolve_namespace(namespace), **options
            )
        )

    def add_ingress(
        self,
        name: str,
        host: str,
        service_name: str,
        service_port: int,
        namespace: Optional[str] = None,
        **options: Any,
    ) -> dict:
        """Add an Ingress sending host traffic to service_name:service_port."""
        return self._add(
            builders.create_ingress(
                name,
                host,
                service_name,
                service_port,
                namespace=self._resolve_namespace(namespace),
                **options,
            )
        )

    def add_hpa(
        self,
        name: str,
        target_deployment: str,
        max_replicas: int,
        namespace: Optional[str] = None,
        **options: Any,
    ) -> dict:
        """Add a HorizontalPodAutoscaler; options go to manifests.create_hpa."""
        return self._add(
            builders.create_hpa(
                name,
                target_deployment,
                max_replicas,
                namespace=self._resolve_namespace(namespace),
                **options,
            )
        )

    def add_custom_resource(self, manifest: dict[str, Any]) -> dict:
        """
        Add a manifest of any kind as-is.

        Raises:
            ValueError: If apiVersion, kind or metadata.name is missing
        """
        for field, present in (
            ("apiVersion", manifest.get("apiVersion")),
            ("kind", manifest.get("kind")),
            ("metadata.name", (manifest.get("metadata") or {}).get("name")),
        ):
            if not present:
                raise ValueError(f"Manifest must have {field}")
        return self._add(manifest)

    def all_manifests(self) -> list[dict]:
        """
        Copies of manifests() followed by extra_manifests(), with namespaces filled in.

        Cluster-scoped kinds and manifests that already name a namespace are
        left as they are.
        """
        collected = []
        for manifest in self.manifests() + self.extra_manifests():
            manifest = copy.deepcopy(manifest)
            metadata = manifest.get("metadata")
            needs_namespace = (
                isinstance(metadata, dict)
                and "namespace" not in metadata
                and not is_cluster_scoped(manifest.get("kind", ""))
            )
            if needs_namespace and self._namespace is not None:
                metadata["namespace"] = self._namespace
            collected.append(manifest)
        return collected

    def validate(self) -> dict[str, ValidationResult]:
        """Semantic and schema validation for every manifest, keyed by its output file name."""
        return {
            manifest_file_name(manifest): check_manifest(manifest)
            for manifest in self.all_manifests()
        }

    def to_yaml(self) -> str:
        """All manifests as one multi-document YAML string."""
        return to_multi_doc_yaml(self.all_manifests())

    def render(self) -> None:
        self.render_manifests()

    def render_manifests(self) -> None:
        """
        Write each manifest to ``<output_dir>/<name>-<kind>.yaml``.

        Validation errors are reported, warnings only in verbose mode;
        neither stops the file from being written.
        """
        output = get_output()
        collected = self.all_manifests()
        if not collected:
            output.print(f"No manifests for {self.name}")
            return

        output_dir = self.output_dir()
        output.verbose(f"Rendering {len(collected)} manifests for {self.name} to {output_dir}")

        for manifest in collected:
            path = output_dir / manifest_file_name(manifest)
            label = f"{manifest['metadata']['name']} ({manifest['kind'].lower()})"
            action = "Overwriting" if path.exists() else "Writing"
            output.verbose(f"{action} {label}: {path}")
            output.validation(label, check_manifest(manifest))
            self._write_yaml(path, to_yaml(manifest))
