"""
Route synthesis: per-method HTTP bindings and per-service route tables.

Routes keep method declaration order. Path templates that overlap can depend on
registration order in the router, so the table is never sorted.
"""

from dataclasses import dataclass
from typing import Optional

from protoc_gen_fastapi.language import tags_in_comment, tag_value, comment_without_tags
from protoc_gen_fastapi.api.extractors import MessageDefinition
from protoc_gen_fastapi.api.extractors.naming import path_constant_name, handler_name
from protoc_gen_fastapi.api.gen_logging import get_logger
from protoc_gen_fastapi.api.utils import to_route_path, default_route_path, extract_path_params
from protoc_gen_fastapi.validation import claim_route, verify_middleware_names
from .annotation_resolver import RouteAnnotation, resolve_tags

logger = get_logger(__name__)

HEADER_TAG = "header"
REQUEST_TAG = "request"
METHOD_TAG = "method"
DEFAULT_VERB = "GET"


@dataclass(frozen=True)
class HttpBinding:
    verb: str
    path: str
    header_aware: bool = False
    header_fields: tuple = ()
    request_fields: tuple = ()


@dataclass(frozen=True)
class RouteConfig:
    """Everything the templates need to emit one method's route."""

    method_name: str
    constant_name: str
    handler_name: str
    binding: HttpBinding
    annotation: RouteAnnotation
    input_message: MessageDefinition
    output_message: MessageDefinition
    summary: str = ""
    description: str = ""
    client_streaming: bool = False
    server_streaming: bool = False

    @property
    def middleware(self) -> tuple:
        return self.annotation.middleware


@dataclass(frozen=True)
class ServiceRoutes:
    service: object
    routes: tuple = ()
    middleware: tuple = ()


def has_header_tag(message: MessageDefinition) -> bool:
    """True when any field of the message carries a header or request tag."""
    return any(
        field.tag(REQUEST_TAG) != "" or field.tag(HEADER_TAG) != ""
        for field in message.fields
    )


def _tagged_fields(message: MessageDefinition, key: str) -> tuple:
    return tuple(
        (field.name, field.tag(key))
        for field in message.fields
        if field.tag(key) != ""
    )


def resolve_http_binding(file_schema, service, method, tags: list, input_message: MessageDefinition) -> HttpBinding:
    """
    Resolve verb and path of a method.

    The google.api.http option wins. Without it the verb comes from the
    `method` comment tag (default GET) and the path is /pkg.Service/Method.
    """
    rule = method.http_rule
    if rule is not None and rule.path:
        verb = rule.verb
        path = to_route_path(rule.path)
    else:
        verb = rule.verb if rule is not None else (tag_value(METHOD_TAG, tags).upper() or DEFAULT_VERB)
        path = default_route_path(file_schema.package, service.name, method.name)

    header_aware = has_header_tag(input_message)
    return HttpBinding(
        verb=verb,
        path=path,
        header_aware=header_aware,
        header_fields=_tagged_fields(input_message, HEADER_TAG) if header_aware else (),
        request_fields=_tagged_fields(input_message, REQUEST_TAG) if header_aware else (),
    )


def _summary_and_description(comment: str) -> tuple:
    lines = [line.strip() for line in comment_without_tags(comment)]
    while lines and not lines[0]:
        lines.pop(0)
    if not lines:
        return "", ""
    return lines[0], "\n".join(lines[1:]).strip()


def build_method_route(file_schema, service, method, registry, strict_tags: bool = False) -> Optional[RouteConfig]:
    """
    Build the RouteConfig of one method, or None for a dynamic method.

    Streaming methods are routed like unary ones: the handler decodes a single
    request message, and a server-streaming result is collected into a JSON
    array.
    """
    where = f"{service.full_name}.{method.name}"
    tags = tags_in_comment(method.comment, strict=strict_tags, where=where)
    annotation = resolve_tags(tags, where=where)

    if annotation.dynamic:
        logger.debug(f"  [SKIP] {where}: dynamic")
        return None

    input_message = registry.message_definition(method.input_type)
    output_message = registry.message_definition(method.output_type)
    binding = resolve_http_binding(file_schema, service, method, tags, input_message)
    field_names = {field.name for field in input_message.fields}
    for param in extract_path_params(binding.path):
        if param.split("__", 1)[0] not in field_names:
            logger.warning(f"[WARN] {where}: path parameter '{param}' is not a field of {input_message.full_name[1:]}")
    summary, description = _summary_and_description(method.comment)

    logger.debug(
        f"  [ROUTE] {binding.verb} {binding.path} -> {where}"
        + (" (header-aware)" if binding.header_aware else "")
        + (" (streaming)" if method.client_streaming or method.server_streaming else "")
    )

    return RouteConfig(
        method_name=method.name,
        constant_name=path_constant_name(service.name, method.name),
        handler_name=handler_name(service.name, method.name),
        binding=binding,
        annotation=annotation,
        input_message=input_message,
        output_message=output_message,
        summary=summary,
        description=description,
        client_streaming=method.client_streaming,
        server_streaming=method.server_streaming,
    )


def build_service_routes(file_schema, service, registry, seen_routes: dict, strict_tags: bool = False) -> ServiceRoutes:
    """
    Build the route table of one service.

    Args:
        file_schema: FileSchema owning the service
        service: ServiceSchema
        registry: MessageRegistry of the request
        seen_routes: Conflict map shared by every service of the file; each
            route claims its (verb, path) key before it is accepted
        strict_tags: Treat malformed comment tags as errors

    Raises:
        AnnotationConflict: two methods resolve to the same route
        MalformedTag: a middleware name cannot be emitted
        UnresolvableType: an input or output type is unknown
    """
    routes = []
    middleware = set()
    for method in service.methods:
        route = build_method_route(file_schema, service, method, registry, strict_tags=strict_tags)
        if route is None:
            continue
        claim_route(seen_routes, route.binding.verb, route.binding.path, f"{service.full_name}.{method.name}")
        middleware.update(route.middleware)
        routes.append(route)

    service_routes = ServiceRoutes(
        service=service,
        routes=tuple(routes),
        middleware=tuple(sorted(middleware)),
    )
    verify_middleware_names(service_routes)
    return service_routes
