"""
Plugin options.

Defaults can be set through PROTOC_GEN_FASTAPI_* environment variables; the
protoc parameter string (``--fastapi_opt=strict_tags=true,format=false``)
overrides them.
"""

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidOptions


class PluginOptions(BaseSettings):
    suffix: str = "_pb2_fastapi.py"
    strict_tags: bool = False
    format: bool = True
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="PROTOC_GEN_FASTAPI_",
        extra="forbid",
        frozen=True,
    )

    @field_validator("suffix")
    @classmethod
    def _suffix_is_python_module(cls, value: str) -> str:
        if not value.endswith(".py") or "/" in value:
            raise ValueError("suffix must end with '.py' and contain no '/'")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"unknown log level '{value}'")
        return value


def parse_parameter(parameter: str) -> dict:
    """Split a protoc parameter string into a key/value dict."""
    values = {}
    if not parameter:
        return values
    for item in parameter.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip()
        if not key:
            raise InvalidOptions(f"invalid plugin option '{item}'")
        # A bare flag ("strict_tags") means true
        values[key] = value.strip() if sep else "true"
    return values


def load_options(parameter: str = "") -> PluginOptions:
    """Build PluginOptions from the environment and the protoc parameter string."""
    values = parse_parameter(parameter)
    try:
        return PluginOptions(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidOptions(f"invalid plugin options: {problems}") from e
