"""
Standard Kubernetes labels and annotations.
"""

import re
from typing import Optional

MANAGED_BY = "kubecraft"

LABEL_NAME_MAX_LENGTH = 63
LABEL_PREFIX_MAX_LENGTH = 253

_LABEL_NAME = re.compile(r"[a-zA-Z0-9]([a-zA-Z0-9._-]*[a-zA-Z0-9])?")
_LABEL_PREFIX = re.compile(r"[a-zA-Z0-9]([a-zA-Z0-9.-]*[a-zA-Z0-9])?")

ENVIRONMENTS = ("development", "staging", "production")

ANNOTATIONS = {
    "description": "kubecraft.io/description",
    "team": "kubecraft.io/team",
    "last_deployed": "kubecraft.io/last-deployed",
    "git_commit": "kubecraft.io/git-commit",
    "prometheus_scrape": "prometheus.io/scrape",
    "prometheus_port": "prometheus.io/port",
    "prometheus_path": "prometheus.io/path",
}


def standard_labels(
    name: str,
    instance: str,
    version: Optional[str] = None,
    component: Optional[str] = None,
    part_of: Optional[str] = None,
    managed_by: Optional[str] = None,
) -> dict[str, str]:
    """
    Create the recommended ``app.kubernetes.io/*`` labels.

    Args:
        name: Application name
        instance: Unique instance name, e.g. the release
        version: Application version
        component: Component within the architecture
        part_of: Higher-level application this is part of
        managed_by: Tool managing the resource (defaults to kubecraft)

    Returns:
        Label dictionary
    """
    labels = {
        "app.kubernetes.io/name": name,
        "app.kubernetes.io/instance": instance,
    }
    if version:
        labels["app.kubernetes.io/version"] = version
    if component:
        labels["app.kubernetes.io/component"] = component
    if part_of:
        labels["app.kubernetes.io/part-of"] = part_of
    labels["app.kubernetes.io/managed-by"] = managed_by or MANAGED_BY
    return labels


def app_labels(name: str, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
    return {"app": name, **(extra or {})}


def env_labels(name: str, environment: str) -> dict[str, str]:
    """
    Create app + environment labels.

    Raises:
        ValueError: If environment is not development, staging or production
    """
    if environment not in ENVIRONMENTS:
        raise ValueError(f"Unknown environment: {environment}")
    return {"app": name, "environment": environment}


def merge_labels(*label_sets: dict[str, str]) -> dict[str, str]:
    """Merge label sets left to right; later sets win on conflicts."""
    merged: dict[str, str] = {}
    for labels in label_sets:
        merged.update(labels)
    return merged


def is_valid_label_key(key: str) -> bool:
    """
    Check a label key against Kubernetes naming rules.

    The name part is at most 63 characters, the optional DNS prefix at most
    253; both start and end with an alphanumeric character.
    """
    parts = key.split("/")
    if len(parts) > 2:
        return False

    prefix, name = (parts[0], parts[1]) if len(parts) == 2 else (None, parts[0])

    if not name or len(name) > LABEL_NAME_MAX_LENGTH:
        return False
    if not _LABEL_NAME.fullmatch(name):
        return False

    if prefix is not None:
        if len(prefix) > LABEL_PREFIX_MAX_LENGTH or not _LABEL_PREFIX.fullmatch(prefix):
            return False

    return True


def is_valid_label_value(value: str) -> bool:
    """Check a label value: empty, or up to 63 characters starting and ending alphanumeric."""
    if value == "":
        return True
    if len(value) > LABEL_NAME_MAX_LENGTH:
        return False
    return bool(_LABEL_NAME.fullmatch(value))
