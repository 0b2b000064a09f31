"""
Route-level validation.

Checks run while routes are synthesized, before anything is rendered, so a
conflicting schema never produces a partially generated module.
"""

import keyword
import re

from protoc_gen_fastapi.api.errors import AnnotationConflict, IdentifierConflict, MalformedTag

# Names the generated registration function binds or calls itself
REGISTER_PARAMETERS = ("app", "server", "registry", "isinstance", "type", "TypeError")

# Module-level names every generated module imports
MODULE_IMPORTS = (
    "Any",
    "Callable",
    "Iterable",
    "Protocol",
    "runtime_checkable",
    "APIRouter",
    "Depends",
    "FastAPI",
    "HTTPException",
    "Request",
    "Union",
    "status",
    "runtime",
    "default_registry",
    "ServerRegistry",
)

_PATH_PARAM = re.compile(r"{[^{}]*}")


def route_key(verb: str, path: str) -> tuple:
    """
    Conflict key of a route.

    Parameter names are erased: GET /orders/{id} and GET /orders/{order_id}
    match the same requests, so they conflict.
    """
    return verb.upper(), _PATH_PARAM.sub("{}", path)


def claim_route(seen_routes: dict, verb: str, path: str, owner: str) -> None:
    """
    Record `owner` as the method serving (verb, path).

    Raises AnnotationConflict when another method already claimed the route.
    """
    key = route_key(verb, path)
    existing = seen_routes.get(key)
    if existing is not None:
        existing_owner, existing_path = existing
        raise AnnotationConflict(
            f"method '{owner}' has the same route as '{existing_owner}': "
            f"{verb} {path} (conflicts with {existing_path}). "
            f"Each method must have a unique (verb, path) combination."
        )
    seen_routes[key] = (owner, path)


def verify_middleware_names(service_routes) -> None:
    """Middleware names become parameters of the registration function."""
    service_name = service_routes.service.full_name
    for name in service_routes.middleware:
        if not name.isidentifier() or keyword.iskeyword(name):
            owners = [
                route.method_name for route in service_routes.routes
                if name in route.middleware
            ]
            raise MalformedTag(
                f"service '{service_name}': midware name {name!r} (declared by "
                f"{', '.join(owners)}) is not a valid Python identifier"
            )
        if name in REGISTER_PARAMETERS:
            raise IdentifierConflict(
                f"service '{service_name}': midware name '{name}' clashes with a name "
                f"the registration function uses"
            )


def verify_unique_identifiers(file_name: str, names: list, all_service_routes: list) -> None:
    """
    Ensure module-level names are unique and not shadowed by middleware parameters.

    Args:
        file_name: Proto file name for error messages
        names: (identifier, owner) pairs of every module-level definition
        all_service_routes: ServiceRoutes of every service of the file
    """
    seen = {name: "import" for name in MODULE_IMPORTS}
    for name, owner in names:
        if name in seen:
            raise IdentifierConflict(
                f"generated name '{name}' for {owner} clashes with {seen[name]}",
                file_name=file_name,
            )
        seen[name] = owner

    for service_routes in all_service_routes:
        for name in service_routes.middleware:
            if name in seen:
                raise IdentifierConflict(
                    f"service '{service_routes.service.full_name}': midware name '{name}' "
                    f"shadows {seen[name]}",
                    file_name=file_name,
                )
