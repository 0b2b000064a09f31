"""Code formatting utilities."""

import black

from protoc_gen_fastapi.api.errors import GenerationError


def format_python_code(code: str, file_name: str = None) -> str:
    """Format generated Python code with Black."""
    try:
        return black.format_str(code, mode=black.Mode())
    except black.InvalidInput as e:
        raise GenerationError(f"generated code is not valid Python: {e}", file_name=file_name) from e
