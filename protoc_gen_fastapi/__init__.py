"""
protoc-gen-fastapi: a protoc plugin that binds RPC methods to FastAPI routes.

Generated modules import their runtime helpers from
``protoc_gen_fastapi.runtime``.
"""

__version__ = "0.3.0"
