"""
kubecraft command line.

    kubecraft render     import a kubecraft.py file and render what it registers
    kubecraft template   fill in one Helm-style template from a values file
    kubecraft serialize  re-emit YAML/JSON documents as manifest YAML
    kubecraft validate   check manifests against semantic rules and schemas
"""

import argparse
import importlib.util
import sys
from pathlib import Path
from typing import Any, List, Optional

import yaml

from kubecraft.config import Config
from kubecraft.output import OutputManager, Verbosity, get_output, set_output
from kubecraft.register import TemplateRegistry
from kubecraft.rendering import TemplateContext, render_template
from kubecraft.serializer import to_multi_doc_yaml
from kubecraft.template import Template
from kubecraft.validation import ValidationResult, check_manifest

DEFAULT_TEMPLATES_FILE = "./kubecraft.py"


def load_templates_file(file_path: str) -> None:
    """
    Import a Python file so its @TemplateRegistry.register decorators run.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If it is not a .py file
        ImportError: If importing it fails
    """
    path = Path(file_path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Templates file not found: {path}")
    if path.suffix != ".py":
        raise ValueError(f"Templates file must be a Python file (.py): {path}")

    # Importing kubecraft.py under its own stem would shadow this package
    if path.stem == "kubecraft":
        module_name = f"_kubecraft_templates_{abs(hash(path))}"
    else:
        module_name = path.stem

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module from file: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ImportError(f"Error importing templates file {path}: {e}") from e


def render_templates(manifests_dir: Optional[Path] = None) -> List[str]:
    """
    Instantiate and render every registered template.

    Args:
        manifests_dir: Write here instead of the configured manifests directory

    Returns:
        Names of the rendered templates, in registration order

    Raises:
        ValueError: If nothing is registered
        RuntimeError: If a template fails to render (rendering stops there)
    """
    output = get_output()
    templates = TemplateRegistry.get_registered_templates()
    if not templates:
        raise ValueError(
            "No templates registered. The templates file must import modules that use "
            "@TemplateRegistry.register"
        )

    previous_dir = Template.manifests_dir() if manifests_dir is not None else None
    if manifests_dir is not None:
        Template.set_manifests_dir(Path(manifests_dir).resolve())

    output.info(f"Found {len(templates)} registered template(s)")
    rendered: List[str] = []
    try:
        for template_class in templates:
            class_name = template_class.__name__
            output.print(f"Rendering template: {class_name}")
            try:
                template = template_class()
                template.render()
            except Exception as e:
                output.error(
                    f"Failed to render template {class_name}",
                    suggestion="Check the template's definition and its manifests",
                )
                raise RuntimeError(f"Failed to render template {class_name}: {e}") from e
            rendered.append(template.name)
            output.success(f"Successfully rendered {class_name}")
    finally:
        if manifests_dir is not None:
            Template.set_manifests_dir(previous_dir)

    return rendered


def load_values_file(file_path: Optional[str]) -> dict:
    """
    Load chart values from a YAML file; no file means empty values.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If it is not valid YAML or its top level is not a mapping
    """
    if file_path is None:
        return {}

    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Values file not found: {path}")

    try:
        with open(path) as f:
            values = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in values file {path}: {e}") from e

    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ValueError(f"Values file {path} must contain a mapping")
    return values


def load_documents(file_path: str) -> List[Any]:
    """
    Load every YAML (or JSON) document from a file, skipping empty documents.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    try:
        with open(path) as f:
            return [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _write_result(content: str, output_file: Optional[str]) -> None:
    output = get_output()
    if not output_file:
        output.result(content)
        return

    path = Path(output_file).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n")
    output.success(f"Written to {path}")


def cmd_render(args: argparse.Namespace) -> None:
    output = get_output()
    templates_file = args.file or DEFAULT_TEMPLATES_FILE
    try:
        TemplateRegistry.clear()
        output.verbose(f"Loading templates from {templates_file}")
        load_templates_file(templates_file)

        output_dir = Path(args.output_dir).resolve() if args.output_dir else None
        if output_dir is not None:
            output.verbose(f"Writing manifests to {output_dir}")

        rendered = render_templates(manifests_dir=output_dir)
    except (FileNotFoundError, ImportError, ValueError, RuntimeError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)

    output.newline()
    output.table("Rendered templates", ["Template"], [[name] for name in rendered])
    output.success("All templates rendered successfully")


def cmd_template(args: argparse.Namespace) -> None:
    output = get_output()
    try:
        template_path = Path(args.template)
        if not template_path.exists():
            raise FileNotFoundError(f"Template file not found: {template_path}")

        output.verbose(f"Rendering {template_path} with values from {args.values or '(none)'}")
        context = TemplateContext(
            values=load_values_file(args.values),
            release_name=args.release or Config.release_name(),
            chart_name=args.chart_name,
            namespace=args.namespace or Config.namespace(),
            chart_version=args.chart_version,
        )
        _write_result(render_template(template_path.read_text(), context), args.output)
    except (FileNotFoundError, ValueError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)


def cmd_serialize(args: argparse.Namespace) -> None:
    output = get_output()
    try:
        documents = load_documents(args.input)
        if not documents:
            raise ValueError(f"No documents found in {args.input}")

        output.verbose(f"Serializing {len(documents)} document(s)")
        _write_result(to_multi_doc_yaml(documents), args.output)
    except (FileNotFoundError, ValueError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)


def _document_label(document: Any, index: int) -> str:
    if not isinstance(document, dict):
        return f"document {index}"
    name = (document.get("metadata") or {}).get("name") or "<unnamed>"
    return f"{document.get('kind', '<no kind>')}/{name}"


def cmd_validate(args: argparse.Namespace) -> None:
    output = get_output()
    try:
        documents = load_documents(args.input)
        if not documents:
            raise ValueError(f"No documents found in {args.input}")
    except (FileNotFoundError, ValueError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)

    rows = []
    invalid = 0
    for index, document in enumerate(documents, start=1):
        label = _document_label(document, index)
        if isinstance(document, dict):
            result = check_manifest(document)
        else:
            result = ValidationResult(valid=False, errors=["Document is not a mapping"])
        output.validation(label, result)
        if not result.valid:
            invalid += 1
        rows.append(
            [
                label,
                "valid" if result.valid else "invalid",
                str(len(result.errors)),
                str(len(result.warnings)),
            ]
        )

    output.table("Validation", ["Manifest", "Status", "Errors", "Warnings"], rows)
    if invalid:
        output.error(f"{invalid} of {len(documents)} manifest(s) failed validation")
        sys.exit(1)
    output.success(f"All {len(documents)} manifest(s) are valid")


def _add_verbosity_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--quiet", action="store_true", help="Print only errors and results")
    group.add_argument(
        "--verbose", action="store_true", help="Also print file paths and validation warnings"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubecraft",
        description="Build Kubernetes manifests and Helm charts from Python",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  kubecraft render --file examples/web_app/kubecraft.py
  kubecraft render --output-dir build/manifests
  kubecraft template templates/deployment.yaml --values values.yaml --release prod
  kubecraft serialize manifests.json --output manifests.yaml
  kubecraft validate manifests.yaml

A templates file registers templates when imported, either directly or by
importing modules decorated with @TemplateRegistry.register.
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render", help="Render every registered template to the manifests directory"
    )
    render_parser.add_argument(
        "--file", help=f"Templates file to import (default: {DEFAULT_TEMPLATES_FILE})"
    )
    render_parser.add_argument(
        "--output-dir", help="Manifests directory (default: MANIFESTS_DIR or ./manifests)"
    )
    _add_verbosity_arguments(render_parser)
    render_parser.set_defaults(func=cmd_render)

    template_parser = subparsers.add_parser(
        "template", help="Render a Helm-style template file with a values file"
    )
    template_parser.add_argument("template", help="Template file")
    template_parser.add_argument("--values", help="values.yaml file (default: no values)")
    template_parser.add_argument(
        "--release", help="Release name (default: KUBECRAFT_RELEASE_NAME or 'release')"
    )
    template_parser.add_argument(
        "--namespace", help="Release namespace (default: KUBECRAFT_NAMESPACE or 'default')"
    )
    template_parser.add_argument("--chart-name", help="Chart name (default: 'chart')")
    template_parser.add_argument("--chart-version", help="Chart version (default: '0.1.0')")
    template_parser.add_argument("--output", help="Write to this file instead of stdout")
    _add_verbosity_arguments(template_parser)
    template_parser.set_defaults(func=cmd_template)

    serialize_parser = subparsers.add_parser(
        "serialize", help="Re-serialize YAML or JSON documents as manifest YAML"
    )
    serialize_parser.add_argument("input", help="YAML or JSON file")
    serialize_parser.add_argument("--output", help="Write to this file instead of stdout")
    _add_verbosity_arguments(serialize_parser)
    serialize_parser.set_defaults(func=cmd_serialize)

    validate_parser = subparsers.add_parser(
        "validate", help="Check manifests for semantic and schema problems"
    )
    validate_parser.add_argument("input", help="YAML or JSON file")
    _add_verbosity_arguments(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    if args.quiet:
        verbosity = Verbosity.QUIET
    elif args.verbose:
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL
    set_output(OutputManager(verbosity=verbosity))

    args.func(args)


if __name__ == "__main__":
    main()
