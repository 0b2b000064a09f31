"""
Request binding: build a protobuf request message from an incoming HTTP request.

Sources, in order of precedence (later wins):
    1. query string (GET, HEAD, DELETE) or body (JSON or form) for other verbs
    2. path parameters
    3. header-aware mode only: tagged headers and tagged request parameters
"""

import json

from fastapi import Request
from google.protobuf import json_format
from google.protobuf.descriptor import FieldDescriptor

QUERY_VERBS = {"GET", "HEAD", "DELETE"}
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
NESTED_SEPARATOR = "__"

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}


class BindingError(ValueError):
    pass


def _find_field(descriptor, key: str):
    field = descriptor.fields_by_name.get(key)
    if field is not None:
        return field
    for candidate in descriptor.fields:
        if candidate.json_name == key:
            return candidate
    return None


def _coerce(field, value: str):
    """Turn a string from a query, form, path or header into a ParseDict value."""
    if field is not None and field.type == FieldDescriptor.TYPE_BOOL:
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise BindingError(f"invalid boolean {value!r} for field '{field.name}'")
    return value


def _is_repeated(field) -> bool:
    return field is not None and field.label == FieldDescriptor.LABEL_REPEATED


def _assign(data: dict, descriptor, key: str, values: list) -> None:
    """Assign string values to a (possibly nested, "a__b") field of `data`."""
    parts = key.split(NESTED_SEPARATOR)
    for part in parts[:-1]:
        field = _find_field(descriptor, part) if descriptor is not None else None
        descriptor = field.message_type if field is not None else None
        nested = data.get(part)
        if not isinstance(nested, dict):
            nested = {}
            data[part] = nested
        data = nested

    name = parts[-1]
    field = _find_field(descriptor, name) if descriptor is not None else None
    if _is_repeated(field):
        data[name] = [_coerce(field, v) for v in values]
    else:
        data[name] = _coerce(field, values[-1])


def _multi_values(items) -> dict:
    grouped = {}
    for key, value in items:
        if isinstance(value, str):
            grouped.setdefault(key, []).append(value)
    return grouped


async def _body_values(request: Request, descriptor) -> dict:
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        data = {}
        for key, values in _multi_values(form.multi_items()).items():
            _assign(data, descriptor, key, values)
        return data

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise BindingError(f"invalid JSON body: {e}") from e
    if not isinstance(payload, dict):
        raise BindingError("request body must be a JSON object")
    return payload


async def bind_request(
    request: Request,
    message,
    header_aware: bool = False,
    header_fields: tuple = (),
    request_fields: tuple = (),
):
    """
    Populate `message` from `request`.

    Args:
        request: Incoming request
        message: Empty protobuf message to fill in
        header_aware: Also bind tagged headers and request parameters
        header_fields: (field name, header name) pairs
        request_fields: (field name, query or path parameter name) pairs

    Raises:
        BindingError: the request cannot be decoded into the message
    """
    descriptor = message.DESCRIPTOR

    if request.method.upper() in QUERY_VERBS:
        data = {}
        for key, values in _multi_values(request.query_params.multi_items()).items():
            _assign(data, descriptor, key, values)
    else:
        data = await _body_values(request, descriptor)

    for key, value in request.path_params.items():
        _assign(data, descriptor, key, [str(value)])

    if header_aware:
        for field_name, header in header_fields:
            values = request.headers.getlist(header)
            if values:
                _assign(data, descriptor, field_name, values)
        for field_name, param in request_fields:
            if param in request.path_params:
                _assign(data, descriptor, field_name, [str(request.path_params[param])])
            elif param in request.query_params:
                _assign(data, descriptor, field_name, request.query_params.getlist(param))

    try:
        json_format.ParseDict(data, message, ignore_unknown_fields=True)
    except json_format.ParseError as e:
        raise BindingError(str(e)) from e
    return message
