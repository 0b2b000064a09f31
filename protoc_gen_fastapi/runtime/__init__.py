"""
Runtime support imported by generated *_pb2_fastapi.py modules.
"""

from .binding import BindingError, bind_request
from .registry import ServerRegistry, ServiceNotRegistered, default_registry
from .responses import invoke, message_response, error_response, internal_error_response

__all__ = [
    "BindingError",
    "bind_request",
    "ServerRegistry",
    "ServiceNotRegistered",
    "default_registry",
    "invoke",
    "message_response",
    "error_response",
    "internal_error_response",
]
