"""
Templates for a small web application.

This file imports template modules so their @TemplateRegistry.register decorators run.

Usage:
    # From the project root:
    kubecraft render --file examples/web_app/kubecraft.py
"""

import sys
from pathlib import Path

_templates_dir = Path(__file__).parent / "templates"
if str(_templates_dir) not in sys.path:
    sys.path.insert(0, str(_templates_dir))

# Imports run the @TemplateRegistry.register decorators
import web_resources  # noqa: F401
import web_chart  # noqa: F401
