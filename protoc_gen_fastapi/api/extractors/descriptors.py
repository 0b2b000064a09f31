"""Schema extraction from protoc FileDescriptorProtos."""

from dataclasses import dataclass, field
from typing import Optional

from .http_rule import HttpRule, get_http_rule

# FileDescriptorProto / ServiceDescriptorProto / DescriptorProto field numbers,
# as used in SourceCodeInfo.Location.path
FILE_PACKAGE = 2
FILE_MESSAGE_TYPE = 4
FILE_SERVICE = 6
SERVICE_METHOD = 2
MESSAGE_FIELD = 2
MESSAGE_NESTED_TYPE = 3


@dataclass(frozen=True)
class MethodSchema:
    name: str
    input_type: str
    output_type: str
    comment: str = ""
    http_rule: Optional[HttpRule] = None
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass(frozen=True)
class ServiceSchema:
    name: str
    full_name: str
    methods: tuple = ()
    comment: str = ""


@dataclass(frozen=True)
class FileSchema:
    name: str
    package: str
    services: tuple = ()
    comment: str = ""


def comment_index(file_proto) -> dict:
    """Map SourceCodeInfo location paths to their leading comments."""
    comments = {}
    for location in file_proto.source_code_info.location:
        if location.leading_comments:
            comments[tuple(location.path)] = location.leading_comments
    return comments


def extract_file_schema(file_proto) -> FileSchema:
    """
    Build the FileSchema of one FileDescriptorProto.

    Services and methods keep their declaration order.
    """
    comments = comment_index(file_proto)
    package = file_proto.package

    services = []
    for si, service in enumerate(file_proto.service):
        methods = []
        for mi, method in enumerate(service.method):
            methods.append(MethodSchema(
                name=method.name,
                input_type=method.input_type,
                output_type=method.output_type,
                comment=comments.get((FILE_SERVICE, si, SERVICE_METHOD, mi), ""),
                http_rule=get_http_rule(method),
                client_streaming=method.client_streaming,
                server_streaming=method.server_streaming,
            ))
        full_name = f"{package}.{service.name}" if package else service.name
        services.append(ServiceSchema(
            name=service.name,
            full_name=full_name,
            methods=tuple(methods),
            comment=comments.get((FILE_SERVICE, si), ""),
        ))

    return FileSchema(
        name=file_proto.name,
        package=package,
        services=tuple(services),
        comment=comments.get((FILE_PACKAGE,), ""),
    )
