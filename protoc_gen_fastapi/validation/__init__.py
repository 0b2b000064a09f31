"""
Validation of synthesized routes and generated identifiers.
"""

from protoc_gen_fastapi.validation.route_validators import (
    route_key,
    claim_route,
    verify_middleware_names,
    verify_unique_identifiers,
)

__all__ = [
    "route_key",
    "claim_route",
    "verify_middleware_names",
    "verify_unique_identifiers",
]
