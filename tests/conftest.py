"""
Pytest configuration and shared fixtures for the protoc-gen-fastapi test suite.

Requests are built in memory with descriptor_pb2, the same structures protoc
hands to the plugin.
"""

import ast
import logging
import sys
import types
from types import SimpleNamespace

import pytest
from google.api import annotations_pb2
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.compiler import plugin_pb2

from protoc_gen_fastapi.api.extractors import MessageRegistry, extract_file_schema
from protoc_gen_fastapi.api.extractors.naming import proto_module_name

FieldProto = descriptor_pb2.FieldDescriptorProto

SCALAR_TYPES = {
    "string": FieldProto.TYPE_STRING,
    "int32": FieldProto.TYPE_INT32,
    "int64": FieldProto.TYPE_INT64,
    "bool": FieldProto.TYPE_BOOL,
    "double": FieldProto.TYPE_DOUBLE,
}

MORETAGS_FIELD_NUMBER = 65006


# ------------------------------------------------------------------------------
# Descriptor builders

def _varint(value: int) -> bytes:
    out = bytearray()
    while True:
        bits = value & 0x7F
        value >>= 7
        if value:
            out.append(bits | 0x80)
        else:
            out.append(bits)
            return bytes(out)


def moretags_options(tags: str) -> bytes:
    """Serialized FieldOptions carrying a gogoproto moretags value."""
    data = tags.encode("utf-8")
    return _varint((MORETAGS_FIELD_NUMBER << 3) | 2) + _varint(len(data)) + data


def _json_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def field(name, type="string", comment="", moretags="", repeated=False):
    return {"name": name, "type": type, "comment": comment, "moretags": moretags, "repeated": repeated}


def message(name, *fields, nested=()):
    return {"name": name, "fields": fields, "nested": nested}


def method(name, input_type, output_type, http=None, comment="", client_streaming=False, server_streaming=False):
    return {
        "name": name,
        "input": input_type,
        "output": output_type,
        "http": http,
        "comment": comment,
        "client_streaming": client_streaming,
        "server_streaming": server_streaming,
    }


def service(name, *methods, comment=""):
    return {"name": name, "methods": methods, "comment": comment}


def _add_comment(file_proto, path, text):
    if not text:
        return
    location = file_proto.source_code_info.location.add()
    location.path.extend(path)
    location.leading_comments = text


def _add_message(file_proto, container, definition, path):
    msg = container.add(name=definition["name"])
    for fi, f in enumerate(definition["fields"]):
        fp = msg.field.add(
            name=f["name"],
            number=fi + 1,
            json_name=_json_name(f["name"]),
            label=FieldProto.LABEL_REPEATED if f["repeated"] else FieldProto.LABEL_OPTIONAL,
        )
        if f["type"] in SCALAR_TYPES:
            fp.type = SCALAR_TYPES[f["type"]]
        else:
            fp.type = FieldProto.TYPE_MESSAGE
            fp.type_name = f["type"]
        if f["moretags"]:
            fp.options.CopyFrom(descriptor_pb2.FieldOptions.FromString(moretags_options(f["moretags"])))
        _add_comment(file_proto, path + [2, fi], f["comment"])
    for ni, nested in enumerate(definition["nested"]):
        _add_message(file_proto, msg.nested_type, nested, path + [3, ni])


def make_file_proto(name="shop/order.proto", package="shop", messages=(), services=(), comment=""):
    file_proto = descriptor_pb2.FileDescriptorProto(name=name, package=package, syntax="proto3")
    _add_comment(file_proto, [2], comment)

    for mi, definition in enumerate(messages):
        _add_message(file_proto, file_proto.message_type, definition, [4, mi])

    for si, svc in enumerate(services):
        sp = file_proto.service.add(name=svc["name"])
        _add_comment(file_proto, [6, si], svc["comment"])
        for mi, m in enumerate(svc["methods"]):
            mp = sp.method.add(
                name=m["name"],
                input_type=m["input"],
                output_type=m["output"],
                client_streaming=m["client_streaming"],
                server_streaming=m["server_streaming"],
            )
            if m["http"] is not None:
                verb, path = m["http"]
                rule = mp.options.Extensions[annotations_pb2.http]
                if verb.lower() in ("get", "put", "post", "delete", "patch"):
                    setattr(rule, verb.lower(), path)
                else:
                    rule.custom.kind = verb
                    rule.custom.path = path
            _add_comment(file_proto, [6, si, 2, mi], m["comment"])
    return file_proto


def make_request(*file_protos, parameter="", generate=None):
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.proto_file.extend(file_protos)
    names = generate if generate is not None else [fp.name for fp in file_protos]
    request.file_to_generate.extend(names)
    return request


# ------------------------------------------------------------------------------
# Order service used across the suite

ORDER_MESSAGES = (
    message("GetOrderRequest", field("id"), field("token", moretags='header:"X-Token"')),
    message("CreateOrderRequest", field("item"), field("quantity", "int32"), field("gift", "bool")),
    message("CancelOrderRequest", field("id")),
    message("StatsRequest", field("day")),
    message("Order", field("id"), field("status"), field("item"), field("quantity", "int32")),
)


@pytest.fixture
def order_file_proto():
    """Get, Create (midware a,b) and a dynamic Cancel."""
    return make_file_proto(
        messages=ORDER_MESSAGES,
        services=[
            service(
                "Order",
                method("Get", ".shop.GetOrderRequest", ".shop.Order", http=("GET", "/orders/{id}"),
                       comment=" Get returns one order.\n"),
                method("Create", ".shop.CreateOrderRequest", ".shop.Order", http=("POST", "/orders"),
                       comment=' Create places an order.\n `midware:"b,a"`\n'),
                method("Cancel", ".shop.CancelOrderRequest", ".shop.Order", http=("POST", "/orders/{id}/cancel"),
                       comment=' `dynamic:"true"`\n'),
                comment=" Order manages orders.\n",
            ),
        ],
        comment=" Shop order API.\n",
    )


@pytest.fixture
def order_request(order_file_proto):
    return make_request(order_file_proto)


@pytest.fixture
def schema_and_registry():
    """Factory returning (FileSchema, MessageRegistry) for a file proto."""
    def _build(file_proto, strict_tags=False):
        registry = MessageRegistry.from_request(make_request(file_proto), strict_tags=strict_tags)
        return extract_file_schema(file_proto), registry
    return _build


@pytest.fixture
def gen_log(caplog):
    """Capture records of the pgf.gen logger hierarchy (which does not propagate once configured)."""
    logger = logging.getLogger("pgf.gen")
    caplog.set_level(logging.DEBUG, logger="pgf.gen")
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture
def load_generated(monkeypatch):
    """
    Execute a generated module against message classes built from its file proto.

    The _pb2 module the generated code imports is assembled from a private
    descriptor pool and placed in sys.modules for the duration of the test.
    """
    def _load(file_proto, content):
        pool = descriptor_pool.DescriptorPool()
        pool.AddSerializedFile(file_proto.SerializeToString())

        module_name = proto_module_name(file_proto.name)
        pb2 = types.ModuleType(module_name)
        for msg in file_proto.message_type:
            full_name = f"{file_proto.package}.{msg.name}" if file_proto.package else msg.name
            setattr(pb2, msg.name, message_factory.GetMessageClass(pool.FindMessageTypeByName(full_name)))

        parent_name, _, leaf = module_name.rpartition(".")
        if parent_name:
            parent = types.ModuleType(parent_name)
            parent.__path__ = []
            setattr(parent, leaf, pb2)
            monkeypatch.setitem(sys.modules, parent_name, parent)
        monkeypatch.setitem(sys.modules, module_name, pb2)

        namespace = {"__name__": "generated_routes"}
        exec(compile(content, "generated_routes.py", "exec"), namespace)
        return namespace, pb2
    return _load


# Helper functions available to all tests

def module_ast(content: str) -> ast.Module:
    return ast.parse(content)


def find_function(tree: ast.Module, name: str):
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == name:
            return node
    raise AssertionError(f"function {name} not found")


def find_class(tree: ast.Module, name: str) -> ast.ClassDef:
    for node in tree.body:
        if isinstance(node, ast.ClassDef) and node.name == name:
            return node
    raise AssertionError(f"class {name} not found")


def path_constants(tree: ast.Module) -> dict:
    constants = {}
    for node in tree.body:
        if isinstance(node, ast.Assign) and isinstance(node.targets[0], ast.Name):
            name = node.targets[0].id
            if name.startswith("PATH_"):
                constants[name] = node.value.value
    return constants


def registered_routes(tree: ast.Module, register_name: str) -> list:
    """(path constant, verb, dependency names) of each add_api_route call, in order."""
    routes = []
    for node in ast.walk(find_function(tree, register_name)):
        if isinstance(node, ast.Call) and getattr(node.func, "attr", None) == "add_api_route":
            keywords = {kw.arg: kw.value for kw in node.keywords}
            verbs = [elt.value for elt in keywords["methods"].elts]
            deps = []
            if "dependencies" in keywords:
                deps = [dep.args[0].id for dep in keywords["dependencies"].elts]
            routes.append((node.args[0].id, verbs[0], deps))
    return routes


@pytest.fixture
def protos():
    """Descriptor builders: field, message, method, service, file, request."""
    return SimpleNamespace(
        field=field,
        message=message,
        method=method,
        service=service,
        file=make_file_proto,
        request=make_request,
        order_messages=ORDER_MESSAGES,
    )


@pytest.fixture
def gen_ast():
    """AST helpers for inspecting generated modules."""
    return SimpleNamespace(
        parse=module_ast,
        function=find_function,
        klass=find_class,
        path_constants=path_constants,
        registered_routes=registered_routes,
    )
