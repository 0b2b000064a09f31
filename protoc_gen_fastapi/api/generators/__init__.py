"""Code generators: renders generated route modules from Jinja2 templates."""

from .route_module_generator import (
    TEMPLATES_DIR,
    docstring_text,
    render_route_module,
)

__all__ = [
    "TEMPLATES_DIR",
    "docstring_text",
    "render_route_module",
]
