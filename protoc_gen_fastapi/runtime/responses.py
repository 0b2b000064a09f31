"""Service invocation and JSON responses for generated handlers."""

import inspect
import logging

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from google.protobuf import json_format
from google.protobuf.message import Message
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


async def invoke(handler, ctx, req):
    """
    Call a service method; plain functions run in the thread pool.

    Generators returned by server-streaming implementations are drained into a
    list.
    """
    if inspect.iscoroutinefunction(handler):
        result = await handler(ctx, req)
    else:
        result = await run_in_threadpool(handler, ctx, req)
        if inspect.isawaitable(result):
            result = await result
    if inspect.isasyncgen(result):
        return [item async for item in result]
    if inspect.isgenerator(result):
        return await run_in_threadpool(list, result)
    return result


def _content(result):
    if isinstance(result, Message):
        return json_format.MessageToDict(result, preserving_proto_field_name=True)
    if isinstance(result, (list, tuple)):
        return [_content(item) for item in result]
    return jsonable_encoder(result)


def message_response(result, status_code: int = 200) -> JSONResponse:
    """Serialize a service result: protobuf messages keep their proto field names."""
    return JSONResponse(content=_content(result), status_code=status_code)


def error_response(status_code: int, exc: BaseException) -> JSONResponse:
    return JSONResponse(content={"error": str(exc)}, status_code=status_code)


def internal_error_response(exc: BaseException, method: str) -> JSONResponse:
    logger.exception(f"{method} failed: {exc}")
    return error_response(500, exc)
