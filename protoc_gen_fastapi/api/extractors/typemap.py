"""
Message registry: fully-qualified protobuf type names -> Python types and field tags.
"""

from dataclasses import dataclass

from google.protobuf.unknown_fields import UnknownFieldSet

from protoc_gen_fastapi.language import parse_tag_line, tags_in_comment, tag_value
from protoc_gen_fastapi.api.errors import MalformedTag, UnresolvableType
from protoc_gen_fastapi.api.gen_logging import get_logger
from .descriptors import comment_index, FILE_MESSAGE_TYPE, MESSAGE_FIELD, MESSAGE_NESTED_TYPE
from .naming import proto_module_name, module_alias

logger = get_logger(__name__)

# gogoproto.moretags, a FieldOptions extension carrying struct tags
MORETAGS_FIELD_NUMBER = 65006
WIRETYPE_LENGTH_DELIMITED = 2


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    json_name: str
    tags: tuple = ()

    def tag(self, key: str) -> str:
        return tag_value(key, list(self.tags))


@dataclass(frozen=True)
class MessageDefinition:
    full_name: str
    file_name: str
    python_name: str
    fields: tuple = ()

    @property
    def module_name(self) -> str:
        return proto_module_name(self.file_name)

    @property
    def module_alias(self) -> str:
        return module_alias(self.module_name)

    @property
    def python_ref(self) -> str:
        """Expression naming the message class inside a generated module."""
        return f"{self.module_alias}.{self.python_name}"


def _moretags(field_proto) -> str:
    for unknown in UnknownFieldSet(field_proto.options):
        if unknown.field_number == MORETAGS_FIELD_NUMBER and unknown.wire_type == WIRETYPE_LENGTH_DELIMITED:
            return bytes(unknown.data).decode("utf-8")
    return ""


class MessageRegistry:
    """Index of every message declared by the files of one request."""

    def __init__(self, strict_tags: bool = False):
        self.strict_tags = strict_tags
        self._messages = {}

    @classmethod
    def from_request(cls, request, strict_tags: bool = False):
        registry = cls(strict_tags=strict_tags)
        for file_proto in request.proto_file:
            registry.add_file(file_proto)
        return registry

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._messages

    def add_file(self, file_proto):
        comments = comment_index(file_proto)
        prefix = f".{file_proto.package}" if file_proto.package else ""
        for mi, message in enumerate(file_proto.message_type):
            self._add_message(file_proto.name, message, prefix, "", (FILE_MESSAGE_TYPE, mi), comments)

    def _add_message(self, file_name, message, prefix, outer, path, comments):
        full_name = f"{prefix}.{message.name}"
        python_name = f"{outer}.{message.name}" if outer else message.name

        fields = []
        for fi, field_proto in enumerate(message.field):
            where = f"{full_name[1:]}.{field_proto.name}"
            tag_lines = tags_in_comment(
                comments.get(path + (MESSAGE_FIELD, fi), ""),
                strict=self.strict_tags,
                where=where,
            )
            more = _moretags(field_proto)
            if more:
                try:
                    tag_lines.insert(0, parse_tag_line(more))
                except MalformedTag as e:
                    if self.strict_tags:
                        raise MalformedTag(f"{where}: {e}") from e
                    logger.warning(f"[WARN] {where}: ignoring {e}")
            fields.append(FieldDefinition(
                name=field_proto.name,
                json_name=field_proto.json_name or field_proto.name,
                tags=tuple(tag_lines),
            ))

        self._messages[full_name] = MessageDefinition(
            full_name=full_name,
            file_name=file_name,
            python_name=python_name,
            fields=tuple(fields),
        )

        for ni, nested in enumerate(message.nested_type):
            if nested.options.map_entry:
                continue
            self._add_message(
                file_name, nested, full_name, python_name,
                path + (MESSAGE_NESTED_TYPE, ni), comments,
            )

    def message_definition(self, type_name: str) -> MessageDefinition:
        """
        Look up a message by the fully-qualified name protoc uses (".pkg.Msg").

        Raises UnresolvableType for unknown names.
        """
        if not type_name.startswith("."):
            type_name = f".{type_name}"
        try:
            return self._messages[type_name]
        except KeyError:
            raise UnresolvableType(f"cannot resolve message type '{type_name[1:]}'") from None
