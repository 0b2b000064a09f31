"""
Interface synthesis: the server contract a user implements for each service,
and the registration entry point that binds it.
"""

from dataclasses import dataclass

from protoc_gen_fastapi.language import comment_without_tags
from protoc_gen_fastapi.api.extractors.naming import (
    interface_name,
    register_function_name,
    service_key_name,
)

OPAQUE_RESPONSE = "Any"


@dataclass(frozen=True)
class InterfaceMethod:
    name: str
    input_ref: str
    output_ref: str
    dynamic_resp: bool = False
    server_streaming: bool = False
    doc: str = ""


@dataclass(frozen=True)
class ServiceInterface:
    name: str
    full_name: str
    interface_name: str
    register_name: str
    service_key: str
    methods: tuple = ()
    routes: tuple = ()
    middleware: tuple = ()
    doc: str = ""


def _doc(comment: str) -> str:
    return "\n".join(line.strip() for line in comment_without_tags(comment)).strip()


def build_interface_method(route, comment: str = "") -> InterfaceMethod:
    """
    Signature of one method: (ctx, req: Input) -> Output, or -> Any with
    dynamic_resp. Server-streaming methods return Iterable[Output].
    """
    dynamic_resp = route.annotation.dynamic_resp
    output_ref = route.output_message.python_ref
    if route.server_streaming:
        output_ref = f"Iterable[{output_ref}]"
    return InterfaceMethod(
        name=route.method_name,
        input_ref=route.input_message.python_ref,
        output_ref=OPAQUE_RESPONSE if dynamic_resp else output_ref,
        dynamic_resp=dynamic_resp,
        server_streaming=route.server_streaming,
        doc=_doc(comment),
    )


def build_service_interface(service_routes) -> ServiceInterface:
    service = service_routes.service
    comments = {method.name: method.comment for method in service.methods}
    methods = tuple(
        build_interface_method(route, comments.get(route.method_name, ""))
        for route in service_routes.routes
    )
    return ServiceInterface(
        name=service.name,
        full_name=service.full_name,
        interface_name=interface_name(service.name),
        register_name=register_function_name(service.name),
        service_key=service_key_name(service.name),
        methods=methods,
        routes=service_routes.routes,
        middleware=service_routes.middleware,
        doc=_doc(service.comment),
    )
