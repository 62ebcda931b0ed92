from __future__ import annotations

import logging
import time
from functools import wraps
from typing import TYPE_CHECKING

from flask import request

from .codec import decode_body, encode_body, type_name
from .context import Context
from .errors import EncodeError

if TYPE_CHECKING:
    from .service import MethodDescriptor

logger = logging.getLogger("dispatch")
profiling_logger = logging.getLogger("profiling")

JSON_CONTENT_TYPE = "application/json"


def log_timing(name: str | None = None):
    def decorator(fn):
        fn_name = name or fn.__qualname__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - start
                profiling_logger.info("%s took %.3f ms", fn_name, elapsed * 1000)
        return wrapper
    return decorator


@log_timing("execute")
def execute(method: MethodDescriptor, ctx: Context) -> None:
    """
    Run one request through `method`: decode, invoke, encode.

    Errors raised by decoding, by the method itself or by encoding propagate
    to the caller untouched. Nothing is written to `ctx` unless the whole call
    succeeds.
    """
    if method.consumes_body:
        req = decode_body(method.request_type, ctx.request.get_data(cache=True))
        out = method.bound_method(ctx, req)
    else:
        out = method.bound_method(ctx)

    if method.return_count == 2:
        if out is None and not method.nullable_response:
            raise EncodeError(
                f"{method.qualname} returned None, expected {type_name(method.response_type)}"
            )
        body = encode_body(out)
        ctx.set_header("Content-Type", JSON_CONTENT_TYPE)
        ctx.write(body)


def make_view(method: MethodDescriptor):
    """
    Wrap `method` into a Flask view function.
    """
    def view(**_path_args):
        ctx = Context(request._get_current_object())
        try:
            execute(method, ctx)
        except Exception as e:
            logger.debug("%s %s failed: %r", method.verb, method.qualname, e)
            raise
        return ctx.to_response()

    view.__name__ = method.name
    view.__qualname__ = method.qualname
    view.__doc__ = method.bound_method.__doc__
    return view
