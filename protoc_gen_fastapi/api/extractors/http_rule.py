"""google.api.http method options."""

from dataclasses import dataclass
from typing import Optional

from google.api import annotations_pb2

_PATTERN_VERBS = ("get", "put", "post", "delete", "patch")


@dataclass(frozen=True)
class HttpRule:
    verb: str
    path: str
    body: str = ""


def get_http_rule(method_proto) -> Optional[HttpRule]:
    """
    Read the google.api.http option of a MethodDescriptorProto.

    Returns None when the option is absent or declares no pattern.
    """
    options = method_proto.options
    if not options.HasExtension(annotations_pb2.http):
        return None

    rule = options.Extensions[annotations_pb2.http]
    pattern = rule.WhichOneof("pattern")
    if pattern is None:
        return None
    if pattern == "custom":
        return HttpRule(verb=rule.custom.kind.upper(), path=rule.custom.path, body=rule.body)
    if pattern in _PATTERN_VERBS:
        return HttpRule(verb=pattern.upper(), path=getattr(rule, pattern), body=rule.body)
    return None
