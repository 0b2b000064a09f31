"""Path and route utilities."""

import re

_TEMPLATE_VAR = re.compile(r"{([^{}=]+)(?:=([^{}]*))?}")


def extract_path_params(path: str) -> list[str]:
    """Return all {param} placeholders of a FastAPI route path."""
    if not path:
        return []
    return [name.split(":", 1)[0] for name in re.findall(r"{([^{}]+)}", path)]


def to_route_path(template: str) -> str:
    """
    Convert a google.api.http path template to a FastAPI route path.

    "/v1/{name=shelves/*}"     -> "/v1/{name:path}"
    "/v1/books/{book.id}"      -> "/v1/books/{book__id}"
    "/v1/orders/{id=*}"        -> "/v1/orders/{id}"

    Nested field references become double-underscore names; the runtime binder
    splits them back into nested message fields.
    """
    def _replace(match):
        name = match.group(1).strip().replace(".", "__")
        pattern = match.group(2)
        if pattern and (pattern != "*"):
            return "{" + name + ":path}"
        return "{" + name + "}"

    return _TEMPLATE_VAR.sub(_replace, template)


def default_route_path(package: str, service_name: str, method_name: str) -> str:
    """Route of a method without a google.api.http rule: /pkg.Service/Method"""
    if package:
        return f"/{package}.{service_name}/{method_name}"
    return f"/{service_name}/{method_name}"
