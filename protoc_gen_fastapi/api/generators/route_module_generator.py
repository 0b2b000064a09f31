"""
Route module renderer.
Renders one generated *_pb2_fastapi.py module from a file context built by the
orchestrator.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
ROUTES_TEMPLATE = "routes_module.py.jinja"


def docstring_text(text) -> str:
    """Escape text for use inside a triple-quoted docstring."""
    text = str(text).replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'
    return text


def _environment(templates_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["pyrepr"] = repr
    env.filters["docstring"] = docstring_text
    return env


def render_route_module(context: dict, templates_dir: Path = TEMPLATES_DIR) -> str:
    """
    Render the route module template.

    Args:
        context: Template context (see api.generator.build_file_context)
        templates_dir: Directory holding routes_module.py.jinja

    Returns:
        Unformatted module source
    """
    template = _environment(templates_dir).get_template(ROUTES_TEMPLATE)
    return template.render(**context)
