import logging
from typing import Callable, Dict, List, Optional, Type

from kubecraft.chart import HelmChart
from kubecraft.kubernetes import KubernetesResource
from kubecraft.template import Template

logger = logging.getLogger(__name__)

TemplateClass = Type[Template]


class TemplateRegistry:
    """
    Class-level registry of the templates a kubecraft.py file defines.

    Templates register themselves with the ``@TemplateRegistry.register``
    decorator when their module is imported; ``kubecraft render`` then
    instantiates and renders each one in registration order.
    """

    _templates: List[TemplateClass] = []

    @classmethod
    def register(cls, template_class: TemplateClass) -> TemplateClass:
        """Add a template class (once) and return it unchanged, so it works as a decorator."""
        if template_class in cls._templates:
            logger.debug(f"{template_class.__name__} is already registered")
        else:
            cls._templates.append(template_class)
            logger.debug(f"Registered template: {template_class.__name__}")
        return template_class

    @classmethod
    def get_registered_templates(cls) -> List[TemplateClass]:
        """Return the registered classes in registration order (a copy)."""
        return list(cls._templates)

    @classmethod
    def clear(cls) -> None:
        cls._templates.clear()

    @classmethod
    def filter(cls, predicate: Callable[[TemplateClass], bool]) -> List[TemplateClass]:
        """Return the registered classes for which predicate(template_class) is true."""
        return [template_class for template_class in cls._templates if predicate(template_class)]

    @classmethod
    def get_by_type(cls, template_type: TemplateClass) -> List[TemplateClass]:
        """Return registered subclasses of template_type, e.g. HelmChart."""
        return cls.filter(lambda template_class: issubclass(template_class, template_type))

    @classmethod
    def get_by_namespace(cls, namespace: str) -> List[TemplateClass]:
        """Return the templates whose instances deploy to namespace."""
        return cls.filter(lambda template_class: cls._namespace_of(template_class) == namespace)

    @classmethod
    def get_by_name(cls, name: str) -> Optional[TemplateClass]:
        """
        Find a template by its rendered name (the output directory name).

        Returns:
            The first matching class, or None
        """
        for template_class in cls._templates:
            if cls._name_of(template_class) == name:
                return template_class
        return None

    @classmethod
    def group_by_namespace(cls) -> Dict[Optional[str], List[TemplateClass]]:
        """
        Group templates by namespace.

        Templates whose namespace cannot be determined are grouped under None.
        """
        grouped: Dict[Optional[str], List[TemplateClass]] = {}
        for template_class in cls._templates:
            grouped.setdefault(cls._namespace_of(template_class), []).append(template_class)
        return grouped

    @classmethod
    def group_by_type(cls) -> Dict[str, List[TemplateClass]]:
        """Group templates under "HelmChart", "KubernetesResource" and "Other"."""
        grouped: Dict[str, List[TemplateClass]] = {
            "HelmChart": cls.get_by_type(HelmChart),
            "KubernetesResource": cls.get_by_type(KubernetesResource),
        }
        known = set(grouped["HelmChart"]) | set(grouped["KubernetesResource"])
        grouped["Other"] = cls.filter(lambda template_class: template_class not in known)
        return grouped

    @staticmethod
    def _namespace_of(template_class: TemplateClass) -> Optional[str]:
        try:
            return template_class().namespace
        except (TypeError, ValueError) as e:
            # abstract class, or a KubernetesResource without a namespace yet
            logger.debug(f"No namespace for {template_class.__name__}: {e}")
            return None

    @staticmethod
    def _name_of(template_class: TemplateClass) -> Optional[str]:
        try:
            return template_class().name
        except TypeError as e:
            logger.debug(f"No name for {template_class.__name__}: {e}")
            return None
