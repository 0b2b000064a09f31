"""
Main entry point for route module generation.

Turns a protoc CodeGeneratorRequest into a CodeGeneratorResponse holding one
FastAPI route module per file to generate.

Architecture:
    - extractors/: schemas, HTTP rules and the message registry
    - builders/: annotation resolution, route and interface synthesis
    - generators/: Jinja2 rendering of the route module
    - utils/: formatting and path helpers
"""

from dataclasses import dataclass

from google.protobuf.compiler import plugin_pb2

from protoc_gen_fastapi import __version__
from protoc_gen_fastapi.language import comment_without_tags
from protoc_gen_fastapi.validation import verify_unique_identifiers
from .builders import build_service_routes, build_service_interface
from .config import PluginOptions, load_options
from .errors import GenerationError
from .extractors import MessageRegistry, extract_file_schema
from .extractors.naming import output_file_name
from .gen_logging import get_logger
from .generators import render_route_module
from .utils import format_python_code

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedFile:
    name: str
    content: str


@dataclass(frozen=True)
class ModuleImport:
    module: str
    alias: str


def _module_doc(file_schema) -> str:
    lines = [f"FastAPI routes for {file_schema.name}."]
    comment = "\n".join(line.strip() for line in comment_without_tags(file_schema.comment)).strip()
    if comment:
        lines += ["", comment]
    return "\n".join(lines)


def _collect_imports(interfaces) -> tuple:
    """Modules of every message the module references, sorted by module name."""
    modules = {}
    for interface in interfaces:
        for route in interface.routes:
            messages = [route.input_message]
            if not route.annotation.dynamic_resp:
                messages.append(route.output_message)
            for message in messages:
                modules[message.module_name] = message.module_alias
    return tuple(ModuleImport(module=m, alias=modules[m]) for m in sorted(modules))


def _module_names(imports, interfaces) -> list:
    """(identifier, owner) of every module-level definition, in emission order."""
    names = [(imp.alias, f"import of {imp.module}") for imp in imports]
    for interface in interfaces:
        names.append((interface.service_key, f"service {interface.full_name}"))
    for interface in interfaces:
        for route in interface.routes:
            names.append((route.constant_name, f"path of {interface.full_name}.{route.method_name}"))
    for interface in interfaces:
        names.append((interface.interface_name, f"interface of {interface.full_name}"))
        for route in interface.routes:
            names.append((f"{route.handler_name}_handler", f"handler of {interface.full_name}.{route.method_name}"))
        names.append((interface.register_name, f"registration of {interface.full_name}"))
    return names


def build_file_context(file_schema, registry: MessageRegistry, options: PluginOptions) -> dict:
    """
    Resolve every service of a file into the template context.

    Route conflicts are checked across all services of the file before anything
    is rendered.
    """
    seen_routes = {}
    all_service_routes = []
    interfaces = []
    for service in file_schema.services:
        service_routes = build_service_routes(
            file_schema, service, registry, seen_routes, strict_tags=options.strict_tags,
        )
        all_service_routes.append(service_routes)
        interfaces.append(build_service_interface(service_routes))
        logger.info(
            f"  [SERVICE] {service.full_name}: {len(service_routes.routes)} route(s)"
            + (f", middleware {', '.join(service_routes.middleware)}" if service_routes.middleware else "")
        )

    imports = _collect_imports(interfaces)
    names = _module_names(imports, interfaces)
    verify_unique_identifiers(file_schema.name, names, all_service_routes)

    exports = sorted(name for name, _ in names[len(imports):])
    return {
        "version": __version__,
        "source": file_schema.name,
        "module_doc": _module_doc(file_schema),
        "imports": imports,
        "exports": exports,
        "services": interfaces,
    }


def generate_file(file_proto, registry: MessageRegistry, options: PluginOptions) -> GeneratedFile:
    """Generate the route module of one FileDescriptorProto."""
    file_schema = extract_file_schema(file_proto)
    logger.info(f"[FILE] {file_schema.name}")
    try:
        context = build_file_context(file_schema, registry, options)
    except GenerationError as e:
        if e.file_name is None:
            e.file_name = file_schema.name
        raise

    content = render_route_module(context)
    if options.format:
        content = format_python_code(content, file_name=file_schema.name)

    name = output_file_name(file_schema.name, options.suffix)
    logger.debug(f"    [OK] {name}")
    return GeneratedFile(name=name, content=content)


def generate_files(request, options: PluginOptions) -> list:
    """Generate one GeneratedFile per file_to_generate, in request order."""
    registry = MessageRegistry.from_request(request, strict_tags=options.strict_tags)
    protos = {file_proto.name: file_proto for file_proto in request.proto_file}

    generated = []
    for file_name in request.file_to_generate:
        file_proto = protos.get(file_name)
        if file_proto is None:
            raise GenerationError(f"file to generate '{file_name}' is missing from the request")
        generated.append(generate_file(file_proto, registry, options))
    return generated


def generate(request, options: PluginOptions = None):
    """
    Build the CodeGeneratorResponse for a request.

    A GenerationError aborts the whole response: the error message is reported
    through CodeGeneratorResponse.error and no file is emitted.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        if options is None:
            options = load_options(request.parameter)
        generated = generate_files(request, options)
    except GenerationError as e:
        logger.error(f"[ERROR] {e}")
        response.error = str(e)
        return response

    for generated_file in generated:
        out = response.file.add()
        out.name = generated_file.name
        out.content = generated_file.content
    return response


__all__ = [
    "GeneratedFile",
    "build_file_context",
    "generate_file",
    "generate_files",
    "generate",
]
