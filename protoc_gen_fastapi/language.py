"""
Comment tag language.

Methods and fields carry generation hints as struct-tag style key/value pairs
inside their leading comments:

    // Get returns one order.
    // `midware:"auth"` `method:"GET"`

Each pair of backticks on a line encloses one tag segment, and a line may hold
several. Every segment is parsed on its own with the textX grammar in
grammar/tags.tx.
"""

import json
import re
from dataclasses import dataclass
from os.path import join, dirname, abspath

from textx import metamodel_from_file, TextXSyntaxError

from protoc_gen_fastapi.api.errors import MalformedTag
from protoc_gen_fastapi.api.gen_logging import get_logger

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
GRAMMAR_DIR = join(THIS_DIR, "grammar")

_TAG_SEGMENT = re.compile(r"`([^`]*)`")


@dataclass(frozen=True)
class TagLine:
    """The key/value pairs of one comment line, in source order."""

    pairs: tuple = ()

    def get(self, key: str) -> str:
        """Value of the first pair named `key`, or "" when absent."""
        for k, v in self.pairs:
            if k == key:
                return v
        return ""


# ------------------------------------------------------------------------------
# Parsing

def line_tag_segments(line: str) -> list:
    """Texts enclosed by each pair of backticks of a line, in order."""
    return _TAG_SEGMENT.findall(line)


def parse_tag_line(text: str) -> TagLine:
    """Parse one tag segment. Raises MalformedTag on invalid syntax."""
    try:
        model = TagMetaModel.model_from_str(text)
    except TextXSyntaxError as e:
        raise MalformedTag(f"malformed tag `{text}`: {e.message}") from e

    pairs = []
    for tag in model.tags:
        try:
            value = json.loads(tag.value)
        except ValueError as e:
            raise MalformedTag(f"malformed tag value {tag.value} for key '{tag.key}'") from e
        pairs.append((tag.key, value))
    return TagLine(pairs=tuple(pairs))


def tags_in_comment(comment: str, strict: bool = False, where: str = "") -> list:
    """
    Collect the TagLines of every tag segment of a comment.

    A segment that does not parse is skipped with a warning, unless `strict` is
    set, in which case the MalformedTag error propagates.
    """
    tag_lines = []
    if not comment:
        return tag_lines
    for line in comment.split("\n"):
        for text in line_tag_segments(line):
            try:
                tag_lines.append(parse_tag_line(text))
            except MalformedTag as e:
                if strict:
                    if where:
                        raise MalformedTag(f"{where}: {e}") from e
                    raise
                logger.warning(f"[WARN] {where or 'comment'}: ignoring {e}")
    return tag_lines


def tag_value(key: str, tags: list) -> str:
    """First non-empty value of `key` across all tag lines, "" when absent."""
    for tag_line in tags:
        value = tag_line.get(key)
        if value != "":
            return value
    return ""


def comment_without_tags(comment: str) -> list:
    """Comment lines that carry no tag segment."""
    lines = []
    if not comment:
        return lines
    for line in comment.rstrip("\r\n").split("\n"):
        if not line_tag_segments(line):
            lines.append(line)
    return lines


# ------------------------------------------------------------------------------
# Metamodel creation

def get_metamodel(debug: bool = False):
    """Load the textX metamodel from grammar/tags.tx."""
    return metamodel_from_file(join(GRAMMAR_DIR, "tags.tx"), debug=debug)


TagMetaModel = get_metamodel(debug=False)
