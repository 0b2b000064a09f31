"""
Route annotations: the generation hints a method declares in its comment tags.

    // `dynamic:"true"`           no route, no interface method
    // `dynamic_resp:"true"`      interface returns Any instead of the output type
    // `midware:"auth,audit"`     middleware required on the route

Flags are enabled only by the exact string "true". Near misses such as "True"
or "1" keep the flag off and log a warning.
"""

from dataclasses import dataclass
from enum import Enum

from protoc_gen_fastapi.language import tags_in_comment, tag_value
from protoc_gen_fastapi.api.gen_logging import get_logger

logger = get_logger(__name__)

TAG_TRUE = "true"
_NEAR_MISSES = {"true", "1", "yes", "on", "t", "y"}


class RouteTag(str, Enum):
    DYNAMIC = "dynamic"
    DYNAMIC_RESP = "dynamic_resp"
    MIDWARE = "midware"


@dataclass(frozen=True)
class RouteAnnotation:
    dynamic: bool = False
    dynamic_resp: bool = False
    middleware: tuple = ()


DEFAULT_ANNOTATION = RouteAnnotation()


def split_middleware(value: str) -> tuple:
    """
    Split a midware tag value on commas, verbatim.

    No whitespace is trimmed and empty segments are kept as "".
    """
    if value == "":
        return ()
    return tuple(value.split(","))


def _flag(tags: list, key: RouteTag, where: str) -> bool:
    value = tag_value(key.value, tags)
    if value == TAG_TRUE:
        return True
    if value.strip().lower() in _NEAR_MISSES:
        logger.warning(
            f'[WARN] {where or "method"}: {key.value}:"{value}" is not "true"; the flag stays off'
        )
    return False


def resolve_tags(tags: list, where: str = "") -> RouteAnnotation:
    """Build a RouteAnnotation from parsed comment tags."""
    return RouteAnnotation(
        dynamic=_flag(tags, RouteTag.DYNAMIC, where),
        dynamic_resp=_flag(tags, RouteTag.DYNAMIC_RESP, where),
        middleware=split_middleware(tag_value(RouteTag.MIDWARE.value, tags)),
    )


def resolve_annotation(comment: str, strict_tags: bool = False, where: str = "") -> RouteAnnotation:
    """
    Resolve the RouteAnnotation of a method from its raw leading comment.

    Args:
        comment: Leading comment text, possibly empty.
        strict_tags: Raise MalformedTag for unparsable tag segments instead of
            ignoring them.
        where: Method name used in log and error messages.
    """
    if not comment:
        return DEFAULT_ANNOTATION
    return resolve_tags(tags_in_comment(comment, strict=strict_tags, where=where), where=where)
