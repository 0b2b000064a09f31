"""Annotation resolution, route synthesis and interface synthesis."""

from .annotation_resolver import (
    RouteAnnotation,
    RouteTag,
    DEFAULT_ANNOTATION,
    resolve_annotation,
    resolve_tags,
    split_middleware,
)
from .route_builder import (
    HttpBinding,
    RouteConfig,
    ServiceRoutes,
    has_header_tag,
    resolve_http_binding,
    build_method_route,
    build_service_routes,
)
from .interface_builder import (
    InterfaceMethod,
    ServiceInterface,
    build_interface_method,
    build_service_interface,
)

__all__ = [
    "RouteAnnotation",
    "RouteTag",
    "DEFAULT_ANNOTATION",
    "resolve_annotation",
    "resolve_tags",
    "split_middleware",
    "HttpBinding",
    "RouteConfig",
    "ServiceRoutes",
    "has_header_tag",
    "resolve_http_binding",
    "build_method_route",
    "build_service_routes",
    "InterfaceMethod",
    "ServiceInterface",
    "build_interface_method",
    "build_service_interface",
]
