"""Naming rules for generated files, modules and identifiers."""

import re

PROTO_SUFFIX = ".proto"


def _strip_proto(file_name: str) -> str:
    if file_name.endswith(PROTO_SUFFIX):
        return file_name[:-len(PROTO_SUFFIX)]
    return file_name


def snake_case(name: str) -> str:
    """GetOrderByID -> get_order_by_id"""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def proto_module_name(file_name: str) -> str:
    """Module protoc's python plugin generates for a .proto file: shop/order.proto -> shop.order_pb2"""
    return _strip_proto(file_name).replace("-", "_").replace("/", ".") + "_pb2"


def module_alias(module_name: str) -> str:
    """Import alias used for a _pb2 module, the same mangling grpc's python plugin uses."""
    return module_name.replace("_", "__").replace(".", "_dot_")


def output_file_name(file_name: str, suffix: str) -> str:
    return _strip_proto(file_name).replace("-", "_") + suffix


def path_constant_name(service_name: str, method_name: str) -> str:
    return f"PATH_{snake_case(service_name).upper()}_{snake_case(method_name).upper()}"


def handler_name(service_name: str, method_name: str) -> str:
    return f"{snake_case(service_name)}_{snake_case(method_name)}"


def interface_name(service_name: str) -> str:
    return f"{service_name}HTTPServer"


def register_function_name(service_name: str) -> str:
    return f"register_{snake_case(service_name)}_http_server"


def service_key_name(service_name: str) -> str:
    return f"{snake_case(service_name).upper()}_SERVICE_NAME"
