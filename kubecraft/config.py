"""
Environment-driven settings for kubecraft.

Every setting is read from the environment at call time, so tests and the
CLI can change them with plain environment variables.
"""

import os
from pathlib import Path
from typing import Optional

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class Config:
    """Static accessors for kubecraft's environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Read an environment variable.

        Args:
            key: Variable name
            default: Value used when the variable is unset
            required: Raise instead of falling back when unset and no default

        Returns:
            The value, the default, or "" when neither is available

        Raises:
            ValueError: If required and the variable is unset without a default
        """
        value = os.environ.get(key, default)
        if value is None and required:
            raise ValueError(f"Required environment variable {key} is not set")
        return value if value is not None else ""

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """Read a yes/no style flag; unset or unrecognised values give default."""
        value = os.environ.get(key, "").strip().lower()
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        return default

    @staticmethod
    def manifests_dir() -> Path:
        """Directory rendered templates are written under: MANIFESTS_DIR or ./manifests."""
        configured = Config.get("MANIFESTS_DIR")
        if configured:
            return Path(configured).resolve()
        return Path.cwd() / "manifests"

    @staticmethod
    def release_name() -> Optional[str]:
        """Release name for template previews (KUBECRAFT_RELEASE_NAME), if set."""
        return Config.get("KUBECRAFT_RELEASE_NAME") or None

    @staticmethod
    def namespace() -> Optional[str]:
        """Namespace for template previews (KUBECRAFT_NAMESPACE), if set."""
        return Config.get("KUBECRAFT_NAMESPACE") or None

    @staticmethod
    def write_previews() -> bool:
        """Whether HelmChart.render() writes preview.yaml (KUBECRAFT_WRITE_PREVIEWS, default on)."""
        return Config.get_bool("KUBECRAFT_WRITE_PREVIEWS", default=True)


config = Config()
