"""
Generation errors.

Every error raised while turning a CodeGeneratorRequest into generated modules
derives from GenerationError. The plugin entry point reports these through
CodeGeneratorResponse.error instead of crashing.
"""


class GenerationError(Exception):
    """Base class for fatal generation failures."""

    def __init__(self, message, file_name=None):
        self.file_name = file_name
        super().__init__(message)

    def __str__(self):
        message = super().__str__()
        if self.file_name:
            return f"{self.file_name}: {message}"
        return message


class AnnotationConflict(GenerationError):
    """Two methods resolve to the same (verb, path) route."""


class UnresolvableType(GenerationError):
    """A message type reference cannot be mapped to a generated Python type."""


class MalformedTag(GenerationError):
    """A comment tag cannot be parsed, or its value cannot be emitted as code."""


class IdentifierConflict(GenerationError):
    """Two generated Python identifiers collide within one module."""


class InvalidOptions(GenerationError):
    """The plugin parameter string is invalid."""
