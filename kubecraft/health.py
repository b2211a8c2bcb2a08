"""
Health probes and container resource requirements.
"""

from typing import Any, Optional

PROBE_DEFAULTS = {
    "initialDelaySeconds": 0,
    "periodSeconds": 10,
    "timeoutSeconds": 1,
    "successThreshold": 1,
    "failureThreshold": 3,
}

CPU_MILLI_SUFFIX = "m"

# Binary suffixes are listed first so "Mi" is never read as "M"
MEMORY_UNITS = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "K": 1000,
    "M": 1000**2,
    "G": 1000**3,
    "T": 1000**4,
}


# ─── Probes ───────────────────────────────────────────────────────


def _probe(action: dict[str, Any], **timing: Optional[int]) -> dict[str, Any]:
    probe = dict(action)
    for key, default in PROBE_DEFAULTS.items():
        value = timing.get(key)
        probe[key] = value if value is not None else default
    return probe


def http_probe(
    path: str,
    port: Any,
    initial_delay_seconds: Optional[int] = None,
    period_seconds: Optional[int] = None,
    timeout_seconds: Optional[int] = None,
    success_threshold: Optional[int] = None,
    failure_threshold: Optional[int] = None,
    scheme: str = "HTTP",
) -> dict[str, Any]:
    """
    Create an HTTP GET probe.

    Args:
        path: Request path
        port: Container port number or name
        initial_delay_seconds: Delay before the first probe (default 0)
        period_seconds: Interval between probes (default 10)
        timeout_seconds: Probe timeout (default 1)
        success_threshold: Successes needed after a failure (default 1)
        failure_threshold: Failures before giving up (default 3)
        scheme: "HTTP" or "HTTPS"
    """
    return _probe(
        {"httpGet": {"path": path, "port": port, "scheme": scheme}},
        initialDelaySeconds=initial_delay_seconds,
        periodSeconds=period_seconds,
        timeoutSeconds=timeout_seconds,
        successThreshold=success_threshold,
        failureThreshold=failure_threshold,
    )


def https_probe(path: str, port: Any, **options: Optional[int]) -> dict[str, Any]:
    """Create an HTTPS GET probe. Accepts the same timing options as http_probe."""
    return http_probe(path, port, scheme="HTTPS", **options)


def tcp_probe(
    port: Any,
    initial_delay_seconds: Optional[int] = None,
    period_seconds: Optional[int] = None,
    timeout_seconds: Optional[int] = None,
    success_threshold: Optional[int] = None,
    failure_threshold: Optional[int] = None,
) -> dict[str, Any]:
    """Create a TCP socket probe."""
    return _probe(
        {"tcpSocket": {"port": port}},
        initialDelaySeconds=initial_delay_seconds,
        periodSeconds=period_seconds,
        timeoutSeconds=timeout_seconds,
        successThreshold=success_threshold,
        failureThreshold=failure_threshold,
    )


def exec_probe(
    command: list[str],
    initial_delay_seconds: Optional[int] = None,
    period_seconds: Optional[int] = None,
    timeout_seconds: Optional[int] = None,
    success_threshold: Optional[int] = None,
    failure_threshold: Optional[int] = None,
) -> dict[str, Any]:
    """Create a probe that runs a command inside the container."""
    return _probe(
        {"exec": {"command": list(command)}},
        initialDelaySeconds=initial_delay_seconds,
        periodSeconds=period_seconds,
        timeoutSeconds=timeout_seconds,
        successThreshold=success_threshold,
        failureThreshold=failure_threshold,
    )


def liveness_probe(port: Any, path: str = "/healthz") -> dict[str, Any]:
    """Standard liveness probe: HTTP /healthz after 15s, every 20s."""
    return http_probe(
        path,
        port,
        initial_delay_seconds=15,
        period_seconds=20,
        timeout_seconds=3,
        failure_threshold=3,
    )


def readiness_probe(port: Any, path: str = "/readyz") -> dict[str, Any]:
    """Standard readiness probe: HTTP /readyz after 5s, every 10s."""
    return http_probe(
        path,
        port,
        initial_delay_seconds=5,
        period_seconds=10,
        timeout_seconds=3,
        failure_threshold=3,
    )


def startup_probe(port: Any, path: str = "/healthz") -> dict[str, Any]:
    """Standard startup probe: HTTP /healthz allowing up to 30 failures."""
    return http_probe(
        path,
        port,
        initial_delay_seconds=0,
        period_seconds=10,
        timeout_seconds=3,
        failure_threshold=30,
    )


def standard_probes(
    port: Any,
    liveness_path: str = "/healthz",
    readiness_path: str = "/readyz",
    startup_path: str = "/healthz",
) -> dict[str, dict[str, Any]]:
    """
    Create liveness, readiness and startup probes for one port.

    The result is keyed by container field name, so it can be splatted
    into a container spec.
    """
    return {
        "livenessProbe": liveness_probe(port, liveness_path),
        "readinessProbe": readiness_probe(port, readiness_path),
        "startupProbe": startup_probe(port, startup_path),
    }


# ─── Resources ────────────────────────────────────────────────────


def create_resources(
    cpu_request: Optional[str] = None,
    cpu_limit: Optional[str] = None,
    memory_request: Optional[str] = None,
    memory_limit: Optional[str] = None,
    ephemeral_storage_request: Optional[str] = None,
    ephemeral_storage_limit: Optional[str] = None,
) -> dict[str, dict[str, str]]:
    """Create container resource requirements. Quantities not given are left out."""

    def quantities(cpu: Optional[str], memory: Optional[str], storage: Optional[str]) -> dict:
        entries = {"cpu": cpu, "memory": memory, "ephemeral-storage": storage}
        return {key: value for key, value in entries.items() if value is not None}

    return {
        "requests": quantities(cpu_request, memory_request, ephemeral_storage_request),
        "limits": quantities(cpu_limit, memory_limit, ephemeral_storage_limit),
    }


def small_resources() -> dict[str, dict[str, str]]:
    """Profile for dev/testing workloads."""
    return create_resources(
        cpu_request="50m", cpu_limit="200m", memory_request="64Mi", memory_limit="256Mi"
    )


def medium_resources() -> dict[str, dict[str, str]]:
    """Profile for standard workloads."""
    return create_resources(
        cpu_request="250m", cpu_limit="500m", memory_request="256Mi", memory_limit="512Mi"
    )


def large_resources() -> dict[str, dict[str, str]]:
    """Profile for heavy workloads."""
    return create_resources(
        cpu_request="500m", cpu_limit="1000m", memory_request="512Mi", memory_limit="1Gi"
    )


def ai_resources() -> dict[str, dict[str, str]]:
    """Profile for inference and other model-serving workloads."""
    return create_resources(
        cpu_request="1000m", cpu_limit="4000m", memory_request="2Gi", memory_limit="8Gi"
    )


RESOURCE_PROFILES = {
    "small": small_resources,
    "medium": medium_resources,
    "large": large_resources,
    "ai": ai_resources,
}


def get_resource_profile(profile: str) -> dict[str, dict[str, str]]:
    """
    Get resource requirements by profile name.

    Raises:
        ValueError: If the profile is not one of RESOURCE_PROFILES
    """
    if profile not in RESOURCE_PROFILES:
        raise ValueError(
            f"Unknown resource profile: {profile}. "
            f"Expected one of: {', '.join(RESOURCE_PROFILES)}"
        )
    return RESOURCE_PROFILES[profile]()


def parse_cpu(cpu: str) -> float:
    """Convert a CPU quantity ("500m", "0.5", "2") to millicores."""
    if cpu.endswith(CPU_MILLI_SUFFIX):
        return float(cpu[: -len(CPU_MILLI_SUFFIX)])
    return float(cpu) * 1000


def parse_memory(memory: str) -> float:
    """Convert a memory quantity ("512Mi", "1G", "1024") to bytes."""
    for suffix, multiplier in MEMORY_UNITS.items():
        if memory.endswith(suffix):
            return float(memory[: -len(suffix)]) * multiplier
    return float(memory)


def validate_resources(resources: dict[str, Any]) -> list[str]:
    """
    Check that resource requests do not exceed limits.

    Returns:
        A list of error messages, empty when the requirements are consistent
    """
    errors = []
    requests = resources.get("requests") or {}
    limits = resources.get("limits") or {}

    if requests.get("cpu") and limits.get("cpu"):
        if parse_cpu(requests["cpu"]) > parse_cpu(limits["cpu"]):
            errors.append("CPU request exceeds limit")

    if requests.get("memory") and limits.get("memory"):
        if parse_memory(requests["memory"]) > parse_memory(limits["memory"]):
            errors.append("Memory request exceeds limit")

    return errors
