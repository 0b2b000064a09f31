"""Descriptor introspection: schemas, HTTP rules, message registry and naming."""

from .descriptors import (
    FileSchema,
    ServiceSchema,
    MethodSchema,
    extract_file_schema,
)
from .http_rule import HttpRule, get_http_rule
from .typemap import FieldDefinition, MessageDefinition, MessageRegistry

__all__ = [
    "FileSchema",
    "ServiceSchema",
    "MethodSchema",
    "extract_file_schema",
    "HttpRule",
    "get_http_rule",
    "FieldDefinition",
    "MessageDefinition",
    "MessageRegistry",
]
