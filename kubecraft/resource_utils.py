"""
Utility functions and constants for Kubernetes resource classification.
"""

from typing import Any

# Cluster-scoped resource kinds that don't belong to a namespace
CLUSTER_SCOPED_KINDS = [
    "CustomResourceDefinition",
    "ClusterRole",
    "ClusterRoleBinding",
    "Namespace",
    "PersistentVolume",
    "StorageClass",
]


def is_cluster_scoped(kind: str) -> bool:
    """
    Check if a Kubernetes resource kind is cluster-scoped.

    Args:
        kind: The Kubernetes resource kind (e.g., "Deployment", "Namespace")

    Returns:
        True if the resource is cluster-scoped, False otherwise
    """
    return kind in CLUSTER_SCOPED_KINDS


def manifest_file_name(manifest: dict[str, Any]) -> str:
    """
    Return the file name a manifest is written to: ``<name>-<kind>.yaml``.

    Raises:
        ValueError: If the manifest has no kind or no metadata.name
    """
    if not manifest.get("metadata") or not manifest["metadata"].get("name"):
        raise ValueError(f"Manifest {manifest} has no metadata or name")
    if not manifest.get("kind"):
        raise ValueError(f"Manifest {manifest} has no kind")
    return f"{manifest['metadata']['name']}-{manifest['kind'].lower()}.yaml"
