from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from kubecraft.config import Config


class Template(ABC):
    """
    Base class for everything ``kubecraft render`` can write out.

    A template has a name (its output directory under the manifests
    directory) and a namespace, and knows how to render itself to disk.
    """

    # Set by the CLI's --output-dir; overrides Config.manifests_dir()
    _manifests_dir_override: Optional[Path] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the template, also its output directory name"""

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Namespace the template's resources belong to"""

    @abstractmethod
    def render(self) -> None:
        """Write the template's files below output_dir()."""

    @staticmethod
    def manifests_dir() -> Path:
        """
        Base directory for rendered output.

        The directory passed to set_manifests_dir() wins; otherwise
        Config.manifests_dir() decides (MANIFESTS_DIR or ./manifests).
        """
        if Template._manifests_dir_override is not None:
            return Template._manifests_dir_override
        return Config.manifests_dir()

    @staticmethod
    def set_manifests_dir(path: Optional[Path]) -> None:
        """Override the base output directory; None restores the default."""
        Template._manifests_dir_override = Path(path) if path is not None else None

    def output_dir(self) -> Path:
        """Return ``<manifests_dir>/<name>``, creating it if necessary."""
        directory = self.manifests_dir() / self.name
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    @staticmethod
    def _write_yaml(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not content.endswith("\n"):
            content += "\n"
        path.write_text(content)
